"""Task-related Marshmallow schemas."""

from datetime import date

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate, validates

from taskmanager.models import TaskStatus
from taskmanager.schemas.base import strip_strings


TITLE_ERROR = "Title must be at least 3 characters long"
DUE_DATE_ERROR = "Due date cannot be in the past"
STATUS_ERROR = "Invalid status"


class TaskSchema(Schema):
    """Schema for task serialization."""

    id = fields.Int(dump_only=True)
    title = fields.Str()
    description = fields.Str(allow_none=True)
    due_date = fields.Date(allow_none=True)
    status = fields.Str()
    created_at = fields.DateTime(dump_only=True, format="iso")
    updated_at = fields.DateTime(dump_only=True, format="iso")


class TaskFormSchema(Schema):
    """Schema for task create/edit validation.

    ``today`` is the calendar day the due date is checked against. Every
    rule runs, so one load can report several problems.
    """

    class Meta:
        unknown = EXCLUDE

    title = fields.Str(
        required=True,
        validate=validate.Length(min=3, error=TITLE_ERROR),
        error_messages={"required": TITLE_ERROR, "invalid": TITLE_ERROR},
    )
    description = fields.Str(load_default=None, allow_none=True)
    due_date = fields.Date(
        load_default=None,
        allow_none=True,
        error_messages={"invalid": "Due date must be a valid date"},
    )
    status = fields.Str(
        load_default=TaskStatus.PENDING.value,
        validate=validate.OneOf(TaskStatus.values(), error=STATUS_ERROR),
    )

    def __init__(self, *args, today: date | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.today = today or date.today()

    @pre_load
    def normalize(self, data, **kwargs):
        data = strip_strings(data, ("title", "description", "due_date", "status"))
        # A blank title must hit the length rule, not the "missing" one
        data.setdefault("title", "")
        return data

    @validates("due_date")
    def validate_due_date(self, value: date | None, **kwargs) -> None:
        if value is not None and value < self.today:
            raise ValidationError(DUE_DATE_ERROR)
