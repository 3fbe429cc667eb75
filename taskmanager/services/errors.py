"""Failure kinds raised by the service layer.

Routes and error handlers translate these into responses; nothing above
the service layer sees a raw SQLAlchemy exception.
"""

from typing import Any


class TaskError(Exception):
    """Base class for task access failures."""

    message = "Task request failed"
    status_code = 500

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class TaskValidationError(TaskError):
    """Input broke one or more task rules; nothing was written."""

    message = "Task validation failed"
    status_code = 400

    def __init__(self, errors: list[str], form_data: dict[str, Any] | None = None):
        super().__init__(", ".join(errors) or self.message)
        self.errors = errors
        self.form_data = dict(form_data or {})


class TaskNotFoundError(TaskError):
    """No task with this id belongs to the acting user.

    Raised both when the id does not exist and when another user owns
    it, so callers cannot probe for other users' tasks.
    """

    message = "Task not found"
    status_code = 404


class InvalidStatusError(TaskError):
    """Requested status is outside the task lifecycle."""

    message = "Invalid status"
    status_code = 400


class TaskStoreError(TaskError):
    """The relational store failed; details stay in the logs."""

    message = "Failed to process task request"
    status_code = 500


class DuplicateUserError(Exception):
    """Username or email already registered."""

    def __init__(self, message: str = "Username or email already exists"):
        super().__init__(message)
        self.message = message
