"""Task model."""

import enum
from datetime import date, datetime, timezone

from sqlalchemy import CheckConstraint, Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskmanager.extensions import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    """Two-state task lifecycle; either state can move to the other."""

    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def is_valid(cls, value: object) -> bool:
        return isinstance(value, str) and value in cls.values()


class Task(db.Model):
    """A unit of work owned by exactly one user.

    ``user_id`` is the opaque identifier handed out by the session; it is
    set once on insert and never taken from request input.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'completed')", name="ck_tasks_status"),
        Index("ix_tasks_user_status_due", "user_id", "status", "due_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.PENDING.value
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED.value

    def is_overdue(self, today: date) -> bool:
        """Check whether the task is still pending past its due date.

        Args:
            today: Current calendar day.

        Returns:
            True if pending and due strictly before ``today``.
        """
        return (
            self.status == TaskStatus.PENDING.value
            and self.due_date is not None
            and self.due_date < today
        )

    def __repr__(self) -> str:
        return f"<Task {self.id} user={self.user_id} {self.status}>"
