"""Marshmallow schemas for serialization and validation."""

from taskmanager.schemas.base import error_list
from taskmanager.schemas.task import TaskFormSchema, TaskSchema
from taskmanager.schemas.user import LoginSchema, RegisterSchema


__all__ = [
    "error_list",
    "RegisterSchema",
    "LoginSchema",
    "TaskSchema",
    "TaskFormSchema",
]
