"""Credential store and session helpers."""

import logging
from typing import Any

from flask import session
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskmanager.models import User
from taskmanager.services.errors import DuplicateUserError


logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"
RETURN_TO_KEY = "return_to"


def find_user(db_session: Session, username: str, email: str) -> User | None:
    """Find a user by username or (case-insensitive) email."""
    return (
        db_session.query(User)
        .filter(or_(User.username == username, func.lower(User.email) == email.lower()))
        .first()
    )


def register_user(db_session: Session, data: dict[str, Any]) -> User:
    """Create a user if the username and email are both unused.

    Args:
        db_session: SQLAlchemy session.
        data: Loaded ``RegisterSchema`` payload.

    Returns:
        The new user.

    Raises:
        DuplicateUserError: If the username or email is taken.
    """
    if find_user(db_session, data["username"], data["email"]):
        raise DuplicateUserError()

    user = User(username=data["username"], email=data["email"].lower())
    user.set_password(data["password"])

    try:
        db_session.add(user)
        db_session.commit()
    except IntegrityError as exc:
        db_session.rollback()
        raise DuplicateUserError() from exc

    logger.info(f"User registered: {user.username}", extra={"user_id": user.id})
    return user


def authenticate(db_session: Session, email: str, password: str) -> User | None:
    """Return the user for valid credentials, otherwise None."""
    user = db_session.query(User).filter(func.lower(User.email) == email.lower()).first()
    if user is None or not user.check_password(password):
        return None
    return user


def login_user(user: User) -> None:
    """Attach the user's identity to the signed session cookie."""
    session.clear()
    session.permanent = True
    session[SESSION_USER_KEY] = {
        "id": user.session_id,
        "username": user.username,
        "email": user.email,
    }


def logout_user() -> None:
    session.clear()


def current_session_user() -> dict[str, str] | None:
    user = session.get(SESSION_USER_KEY)
    if not user or not user.get("id"):
        return None
    return user


def pop_return_to(default: str) -> str:
    """Take the remembered post-login path, accepting only local paths."""
    target = session.pop(RETURN_TO_KEY, None)
    if not target or not target.startswith("/") or target.startswith("//"):
        return default
    return target
