"""Owner-scoped task query composition.

Every query built here starts from :func:`owned_tasks`, which requires
the owning user id. There is no way to obtain a task query from this
module without the ``user_id`` predicate.
"""

from sqlalchemy.orm import Query, Session

from taskmanager.models import Task, TaskStatus


DEFAULT_SORT = "due_date"

SORT_ALIASES = {
    "dueDate": "due_date",
    "createdAt": "created_at",
}

_SORT_ORDERS = {
    "due_date": (Task.due_date.asc().nulls_last(), Task.id.asc()),
    "title": (Task.title.asc(), Task.id.asc()),
    "created_at": (Task.created_at.desc(), Task.id.desc()),
    "status": (Task.status.asc(), Task.due_date.asc().nulls_last(), Task.id.asc()),
}


def normalize_sort(sort: str | None) -> str:
    """Map a requested sort key to a known one.

    Unknown keys fall back to the default rather than failing.
    """
    if not sort:
        return DEFAULT_SORT
    sort = SORT_ALIASES.get(sort, sort)
    return sort if sort in _SORT_ORDERS else DEFAULT_SORT


def normalize_status_filter(status: str | None) -> str | None:
    """Return ``status`` if it names a lifecycle state, else None (all tasks)."""
    return status if TaskStatus.is_valid(status) else None


def owned_tasks(session: Session, user_id: str) -> Query:
    """Base query for every task read or write.

    Args:
        session: SQLAlchemy session.
        user_id: Owning user; required.

    Returns:
        Query filtered to the user's rows.

    Raises:
        ValueError: If ``user_id`` is empty.
    """
    if not user_id:
        raise ValueError("user_id is required to query tasks")
    return session.query(Task).filter(Task.user_id == user_id)


def owned_task(session: Session, user_id: str, task_id: int) -> Query:
    """Query for a single row matching both ``id`` and ``user_id``."""
    return owned_tasks(session, user_id).filter(Task.id == task_id)


def filtered_tasks(
    session: Session,
    user_id: str,
    status: str | None = None,
    sort: str | None = None,
) -> Query:
    """Compose the listing query for a (filter, sort) pair."""
    query = owned_tasks(session, user_id)

    status = normalize_status_filter(status)
    if status:
        query = query.filter(Task.status == status)

    return query.order_by(*_SORT_ORDERS[normalize_sort(sort)])
