"""Service modules."""

from taskmanager.services.auth import authenticate, login_user, logout_user, register_user
from taskmanager.services.errors import (
    DuplicateUserError,
    InvalidStatusError,
    TaskError,
    TaskNotFoundError,
    TaskStoreError,
    TaskValidationError,
)
from taskmanager.services.tasks import (
    DashboardStats,
    TaskService,
    resolve_today,
    validate_task_input,
)


__all__ = [
    "authenticate",
    "login_user",
    "logout_user",
    "register_user",
    "DashboardStats",
    "TaskService",
    "resolve_today",
    "validate_task_input",
    "DuplicateUserError",
    "InvalidStatusError",
    "TaskError",
    "TaskNotFoundError",
    "TaskStoreError",
    "TaskValidationError",
]
