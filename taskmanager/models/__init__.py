"""Database models."""

from taskmanager.models.task import Task, TaskStatus
from taskmanager.models.user import User


__all__ = ["User", "Task", "TaskStatus"]
