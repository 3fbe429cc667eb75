"""Registration, login and logout pages."""

import logging

from flask import Blueprint, redirect, render_template, request, url_for
from marshmallow import ValidationError

from taskmanager.extensions import db
from taskmanager.middleware.auth import redirect_if_logged_in
from taskmanager.schemas import LoginSchema, RegisterSchema, error_list
from taskmanager.schemas.user import LOGIN_REQUIRED_ERROR
from taskmanager.services import (
    DuplicateUserError,
    authenticate,
    login_user,
    logout_user,
    register_user,
)
from taskmanager.services.auth import current_session_user, pop_return_to
from taskmanager.telemetry import get_meter, get_tracer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

auth_attempts = meter.create_counter(
    name="auth.login.attempts",
    description="Login attempts",
    unit="1",
)

INVALID_CREDENTIALS = "Invalid email or password"

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/", methods=["GET"])
def index():
    if current_session_user() is not None:
        return redirect(url_for("tasks.dashboard"))
    return redirect(url_for("auth.login"))


@auth_bp.route("/register", methods=["GET"])
@redirect_if_logged_in
def show_register():
    return render_template("auth/register.html", title="Register", errors=[], form_data={})


@auth_bp.route("/register", methods=["POST"])
@redirect_if_logged_in
def register():
    """Create an account and log it in.

    Re-renders the form with every validation message on failure.
    """
    with tracer.start_as_current_span("user.register") as span:
        form = request.form.to_dict()
        form_data = {"username": form.get("username", ""), "email": form.get("email", "")}

        schema = RegisterSchema()
        try:
            data = schema.load(form)
        except ValidationError as err:
            span.set_attribute("auth.status", "invalid_request")
            return render_template(
                "auth/register.html",
                title="Register",
                errors=error_list(schema, err.messages),
                form_data=form_data,
            ), 400

        try:
            user = register_user(db.session, data)
        except DuplicateUserError as err:
            span.set_attribute("auth.status", "duplicate_user")
            return render_template(
                "auth/register.html", title="Register", errors=[err.message], form_data=form_data
            ), 409

        span.set_attribute("user.id", user.id)
        login_user(user)
        return redirect(url_for("tasks.dashboard"))


@auth_bp.route("/login", methods=["GET"])
@redirect_if_logged_in
def login():
    return render_template("auth/login.html", title="Login", errors=[], form_data={})


@auth_bp.route("/login", methods=["POST"])
@redirect_if_logged_in
def submit_login():
    """Check credentials and start a session.

    Unknown email and wrong password get the same message.
    """
    with tracer.start_as_current_span("user.login") as span:
        form = request.form.to_dict()
        form_data = {"email": form.get("email", "")}

        try:
            data = LoginSchema().load(form)
        except ValidationError:
            auth_attempts.add(1, {"status": "invalid_request"})
            return render_template(
                "auth/login.html",
                title="Login",
                errors=[LOGIN_REQUIRED_ERROR],
                form_data=form_data,
            ), 400

        user = authenticate(db.session, data["email"], data["password"])
        if user is None:
            auth_attempts.add(1, {"status": "invalid_credentials"})
            span.set_attribute("auth.status", "invalid_credentials")
            logger.warning(f"Login failed for {data['email']}")
            return render_template(
                "auth/login.html",
                title="Login",
                errors=[INVALID_CREDENTIALS],
                form_data=form_data,
            ), 401

        auth_attempts.add(1, {"status": "success"})
        span.set_attribute("user.id", user.id)
        span.set_attribute("auth.status", "success")

        # Read before login_user() resets the session
        target = pop_return_to(url_for("tasks.dashboard"))
        login_user(user)
        logger.info(f"User logged in: {user.username}", extra={"user_id": user.id})

        return redirect(target)


@auth_bp.route("/logout", methods=["GET"])
def logout():
    logout_user()
    return redirect(url_for("auth.login"))
