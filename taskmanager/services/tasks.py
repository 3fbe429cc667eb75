"""Task access layer.

:class:`TaskService` is bound to one authenticated user and one SQLAlchemy
session. All reads and writes go through the owner-scoped queries in
:mod:`taskmanager.services.queries`; the user id is fixed at construction
and never read from request data.
"""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from marshmallow import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmanager.models import Task, TaskStatus
from taskmanager.schemas import TaskFormSchema, error_list
from taskmanager.services import queries
from taskmanager.services.errors import (
    InvalidStatusError,
    TaskNotFoundError,
    TaskStoreError,
    TaskValidationError,
)
from taskmanager.telemetry import get_meter, get_tracer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

tasks_created = meter.create_counter(
    name="tasks.created",
    description="Tasks created",
    unit="1",
)

status_changes = meter.create_counter(
    name="tasks.status_changes",
    description="Task status changes",
    unit="1",
)

RECENT_TASKS_LIMIT = 5


def resolve_today(client_value: str | None, now: datetime | None = None) -> date:
    """Pick the calendar day new due dates are checked against.

    The browser sends its local date; it is trusted only within one day of
    the server's UTC date, which covers every time zone.

    Args:
        client_value: ISO date from the form, if any.
        now: Current UTC time. Defaults to the clock.

    Returns:
        The client's day, or the server's local date.
    """
    server_today = date.today()
    if not client_value:
        return server_today

    try:
        client_today = date.fromisoformat(client_value.strip())
    except ValueError:
        return server_today

    utc_today = (now or datetime.now(timezone.utc)).date()
    if abs((client_today - utc_today).days) <= 1:
        return client_today
    return server_today


@dataclass
class DashboardStats:
    """Per-user task counts plus the most recently created tasks."""

    total: int = 0
    pending: int = 0
    completed: int = 0
    overdue: int = 0
    recent: list[Task] = field(default_factory=list)


def validate_task_input(form: Mapping[str, Any], today: date | None = None) -> dict[str, Any]:
    """Validate and normalize raw task fields.

    Args:
        form: Raw ``title``/``description``/``due_date``/``status`` values.
        today: Calendar day the due date must not precede.

    Returns:
        Normalized payload.

    Raises:
        TaskValidationError: With every failing rule, in field order.
    """
    schema = TaskFormSchema(today=today)
    try:
        return schema.load(dict(form))
    except ValidationError as err:
        raise TaskValidationError(error_list(schema, err.messages), dict(form)) from err


class TaskService:
    """Owner-scoped operations on tasks.

    Args:
        session: SQLAlchemy session used for every store call.
        user_id: Authenticated user's identifier from the session.
        recent_limit: How many tasks the dashboard lists.
    """

    def __init__(self, session: Session, user_id: str, recent_limit: int = RECENT_TASKS_LIMIT):
        if not user_id:
            raise ValueError("TaskService requires an authenticated user id")
        self.session = session
        self.user_id = str(user_id)
        self.recent_limit = recent_limit

    @contextmanager
    def _store(self, operation: str) -> Iterator[None]:
        """Reduce store failures to :class:`TaskStoreError`."""
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception(
                f"Task store failure during {operation}", extra={"user_id": self.user_id}
            )
            raise TaskStoreError() from exc

    def create(self, form: Mapping[str, Any], today: date | None = None) -> Task:
        """Validate input and insert a task owned by the session user."""
        with tracer.start_as_current_span("task.create") as span:
            data = validate_task_input(form, today)

            task = Task(
                title=data["title"],
                description=data["description"],
                due_date=data["due_date"],
                status=data["status"],
                user_id=self.user_id,
            )
            with self._store("create"):
                self.session.add(task)
                self.session.commit()

            span.set_attribute("user.id", self.user_id)
            span.set_attribute("task.id", task.id)
            tasks_created.add(1)
            logger.info(f"Task created: {task.id}", extra={"user_id": self.user_id})
            return task

    def list_tasks(self, status: str | None = None, sort: str | None = None) -> list[Task]:
        """List the user's tasks, optionally filtered by status.

        Args:
            status: ``pending``, ``completed`` or None for all.
            sort: ``due_date`` (default), ``title``, ``created_at`` or ``status``.
                Unknown keys use the default.
        """
        with self._store("list"):
            return queries.filtered_tasks(self.session, self.user_id, status, sort).all()

    def get(self, task_id: int) -> Task:
        """Fetch one of the user's tasks.

        Raises:
            TaskNotFoundError: If the id is unknown or owned by someone else.
        """
        with self._store("get"):
            task = queries.owned_task(self.session, self.user_id, task_id).first()
        if task is None:
            raise TaskNotFoundError()
        return task

    def update(self, task_id: int, form: Mapping[str, Any], today: date | None = None) -> Task:
        """Validate input and overwrite the editable fields of one task."""
        with tracer.start_as_current_span("task.update") as span:
            span.set_attribute("task.id", task_id)
            data = validate_task_input(form, today)

            with self._store("update"):
                updated = queries.owned_task(self.session, self.user_id, task_id).update(
                    {
                        Task.title: data["title"],
                        Task.description: data["description"],
                        Task.due_date: data["due_date"],
                        Task.status: data["status"],
                    },
                    synchronize_session=False,
                )
                self.session.commit()

            if not updated:
                span.set_attribute("task.found", False)
                raise TaskNotFoundError()

            logger.info(f"Task updated: {task_id}", extra={"user_id": self.user_id})
            return self.get(task_id)

    def delete(self, task_id: int) -> bool:
        """Delete one of the user's tasks.

        Returns:
            True if a row was removed, False if nothing matched.
        """
        with tracer.start_as_current_span("task.delete") as span:
            span.set_attribute("task.id", task_id)
            with self._store("delete"):
                deleted = queries.owned_task(self.session, self.user_id, task_id).delete(
                    synchronize_session=False
                )
                self.session.commit()

            if deleted:
                logger.info(f"Task deleted: {task_id}", extra={"user_id": self.user_id})
            return bool(deleted)

    def set_status(self, task_id: int, status: Any) -> None:
        """Move a task to ``pending`` or ``completed``.

        Setting the current status again succeeds and changes nothing.

        Raises:
            InvalidStatusError: Before any store access, for other values.
            TaskNotFoundError: If no owned row matched.
        """
        with tracer.start_as_current_span("task.status") as span:
            span.set_attribute("task.id", task_id)
            if not TaskStatus.is_valid(status):
                span.set_attribute("task.status", "invalid")
                raise InvalidStatusError()

            with self._store("set_status"):
                updated = queries.owned_task(self.session, self.user_id, task_id).update(
                    {Task.status: status}, synchronize_session=False
                )
                self.session.commit()

            if not updated:
                raise TaskNotFoundError()

            span.set_attribute("task.status", status)
            status_changes.add(1, {"status": status})
            logger.info(f"Task {task_id} marked {status}", extra={"user_id": self.user_id})

    def dashboard(self, today: date | None = None) -> DashboardStats:
        """Compute the user's task counts and recent tasks.

        Each figure is its own query; they are not read in one transaction.
        """
        today = today or date.today()
        with tracer.start_as_current_span("task.dashboard"), self._store("dashboard"):
            return DashboardStats(
                total=self._count(),
                pending=self._count(Task.status == TaskStatus.PENDING.value),
                completed=self._count(Task.status == TaskStatus.COMPLETED.value),
                overdue=self._count(
                    Task.status == TaskStatus.PENDING.value,
                    Task.due_date.is_not(None),
                    Task.due_date < today,
                ),
                recent=queries.owned_tasks(self.session, self.user_id)
                .order_by(Task.created_at.desc(), Task.id.desc())
                .limit(self.recent_limit)
                .all(),
            )

    def _count(self, *criteria) -> int:
        query = queries.owned_tasks(self.session, self.user_id).filter(*criteria)
        return query.with_entities(func.count(Task.id)).scalar() or 0
