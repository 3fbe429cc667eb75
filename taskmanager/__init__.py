"""Flask application factory with OpenTelemetry instrumentation."""

import logging
from datetime import date, datetime

from flask import Flask

from taskmanager.extensions import db, ma
from taskmanager.telemetry import (
    get_otel_log_handler,
    instrument_flask_app,
    setup_telemetry,
    telemetry_enabled,
)


def create_app(config_class: type | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to Config.

    Returns:
        Configured Flask application instance.
    """
    # Initialize telemetry BEFORE creating Flask app
    if telemetry_enabled():
        setup_telemetry()

    app = Flask(__name__)

    # Instrument Flask app (needed for Gunicorn worker forks)
    if telemetry_enabled():
        instrument_flask_app(app)

    # Load configuration
    if config_class is None:
        from taskmanager.config import Config

        config_class = Config
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    ma.init_app(app)

    # Register blueprints
    from taskmanager.routes.auth import auth_bp
    from taskmanager.routes.health import health_bp
    from taskmanager.routes.tasks import tasks_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(tasks_bp)

    # Register error handlers
    from taskmanager.errors import register_error_handlers

    register_error_handlers(app)

    _register_template_helpers(app)

    # Register metrics middleware
    if telemetry_enabled():
        from taskmanager.middleware.metrics import register_metrics_middleware

        register_metrics_middleware(app)

    # Attach OTel log handler after app setup
    if telemetry_enabled():
        handler = get_otel_log_handler()
        if handler:
            root_logger = logging.getLogger()
            if handler not in root_logger.handlers:
                root_logger.addHandler(handler)

    _configure_logging()

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def _register_template_helpers(app: Flask) -> None:
    """Expose the session user and date formatting to templates."""
    from taskmanager.services.auth import current_session_user

    @app.context_processor
    def inject_user() -> dict:
        return {"current_user": current_session_user()}

    @app.template_filter("format_date")
    def format_date(value: date | datetime | str | None) -> str:
        if not value:
            return "No date"
        if isinstance(value, str):
            return value
        return value.strftime("%Y-%m-%d")


def _configure_logging() -> None:
    """Configure logging for the application."""
    # App loggers - propagate to root (where OTel handler is)
    logging.getLogger("taskmanager").setLevel(logging.DEBUG)
    logging.getLogger("taskmanager").propagate = True

    # Reduce noise from framework loggers
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").propagate = False

    # SQLAlchemy engine logs can be noisy
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
