"""Route blueprints."""

from taskmanager.routes.auth import auth_bp
from taskmanager.routes.health import health_bp
from taskmanager.routes.tasks import tasks_bp


__all__ = ["health_bp", "auth_bp", "tasks_bp"]
