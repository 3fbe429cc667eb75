"""Error handlers with OpenTelemetry trace context."""

import logging

from flask import Flask, jsonify, render_template, request
from sqlalchemy.exc import SQLAlchemyError

from taskmanager.extensions import db
from taskmanager.services.errors import TaskError, TaskStoreError, TaskValidationError
from taskmanager.telemetry import current_trace_id


logger = logging.getLogger(__name__)

# Endpoints answering fetch() calls from the task pages
JSON_ENDPOINTS = {"tasks.delete_task", "tasks.update_status"}


def wants_json() -> bool:
    """Whether the current request should get a JSON error body."""
    return (
        request.path.startswith("/api/")
        or request.endpoint in JSON_ENDPOINTS
        or request.is_json
    )


def json_error(message: str, status_code: int, **extra) -> tuple:
    """Create a ``{success, message}`` error response with trace context.

    Args:
        message: Error message.
        status_code: HTTP status code.
        **extra: Additional body fields.

    Returns:
        Tuple of (response, status_code).
    """
    response = {"success": False, "message": message, **extra}

    trace_id = current_trace_id()
    if trace_id:
        response["trace_id"] = trace_id

    return jsonify(response), status_code


def error_response(message: str, status_code: int) -> tuple:
    """Render ``message`` as JSON or as the error page, whichever fits the request."""
    if wants_json():
        return json_error(message, status_code)
    return render_template("error.html", message=message, status_code=status_code), status_code


def register_error_handlers(app: Flask) -> None:
    """Register error handlers on Flask app.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(TaskValidationError)
    def task_validation_error(error: TaskValidationError):
        if wants_json():
            return json_error(error.message, 400, errors=error.errors)
        return error_response(error.message, 400)

    @app.errorhandler(TaskError)
    def task_error(error: TaskError):
        if isinstance(error, TaskStoreError):
            logger.error(f"Task store error on {request.path}")
        return error_response(error.message, error.status_code)

    @app.errorhandler(SQLAlchemyError)
    def database_error(error: SQLAlchemyError):
        db.session.rollback()
        logger.exception(f"Database error on {request.path}")
        return error_response("Something went wrong!", 500)

    @app.errorhandler(400)
    def bad_request(error):
        return error_response("Bad request", 400)

    @app.errorhandler(403)
    def forbidden(error):
        return error_response("Forbidden", 403)

    @app.errorhandler(404)
    def not_found(error):
        return error_response("Page not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(error):
        return error_response("Something went wrong!", 500)
