"""Middleware modules."""

from taskmanager.middleware.auth import login_required, redirect_if_logged_in


__all__ = ["login_required", "redirect_if_logged_in"]
