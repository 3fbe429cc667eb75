"""User-related Marshmallow schemas."""

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates_schema,
)

from taskmanager.schemas.base import strip_strings


USERNAME_ERROR = "Username must be at least 3 characters long"
EMAIL_ERROR = "Please enter a valid email address"
PASSWORD_ERROR = "Password must be at least 6 characters long"
PASSWORD_MATCH_ERROR = "Passwords do not match"
LOGIN_REQUIRED_ERROR = "Email and password are required"

# local@domain.tld, nothing fancier
EMAIL_PATTERN = r"^\S+@\S+\.\S+$"


class RegisterSchema(Schema):
    """Schema for user registration validation."""

    class Meta:
        unknown = EXCLUDE

    username = fields.Str(
        required=True,
        validate=validate.Length(min=3, error=USERNAME_ERROR),
        error_messages={"required": USERNAME_ERROR},
    )
    email = fields.Str(
        required=True,
        validate=validate.Regexp(EMAIL_PATTERN, error=EMAIL_ERROR),
        error_messages={"required": EMAIL_ERROR},
    )
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error=PASSWORD_ERROR),
        error_messages={"required": PASSWORD_ERROR},
    )
    confirm_password = fields.Str(load_only=True, load_default=None)

    @pre_load
    def normalize(self, data, **kwargs):
        return strip_strings(data, ("username", "email"))

    @validates_schema(pass_original=True, skip_on_field_errors=False)
    def passwords_match(self, data, original_data, **kwargs) -> None:
        original = original_data or {}
        if (original.get("password") or "") != (original.get("confirm_password") or ""):
            raise ValidationError(PASSWORD_MATCH_ERROR, "confirm_password")

    @post_load
    def lowercase_email(self, data, **kwargs):
        data["email"] = data["email"].lower()
        data.pop("confirm_password", None)
        return data


class LoginSchema(Schema):
    """Schema for user login validation."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Str(required=True, error_messages={"required": LOGIN_REQUIRED_ERROR})
    password = fields.Str(
        required=True, load_only=True, error_messages={"required": LOGIN_REQUIRED_ERROR}
    )

    @pre_load
    def normalize(self, data, **kwargs):
        data = strip_strings(data, ("email",))
        if not data.get("password"):
            data.pop("password", None)
        return data
