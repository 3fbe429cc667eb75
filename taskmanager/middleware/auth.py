"""Session authentication middleware."""

from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from flask import g, redirect, request, session, url_for

from taskmanager.services.auth import RETURN_TO_KEY, current_session_user


P = ParamSpec("P")
T = TypeVar("T")


def login_required(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator to require a logged-in session.

    Sets g.current_user from the session. Without one, redirects to the
    login page, remembering the requested path for GET requests only.
    """

    @wraps(f)
    def decorated(*args: P.args, **kwargs: P.kwargs) -> T:
        user = current_session_user()
        if user is None:
            if request.method == "GET":
                session[RETURN_TO_KEY] = request.full_path.rstrip("?")
            return redirect(url_for("auth.login"))

        g.current_user = user
        return f(*args, **kwargs)

    return decorated


def redirect_if_logged_in(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator that sends logged-in users from auth pages to their tasks."""

    @wraps(f)
    def decorated(*args: P.args, **kwargs: P.kwargs) -> T:
        if current_session_user() is not None:
            return redirect(url_for("tasks.dashboard"))
        return f(*args, **kwargs)

    return decorated
