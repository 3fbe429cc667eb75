"""Health check endpoint."""

from typing import Any

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from taskmanager.extensions import db


health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint for monitoring.

    Returns:
        JSON response with health status of the database.
    """
    health_status: dict[str, Any] = {
        "status": "healthy",
        "components": {
            "database": "healthy",
        },
        "service": {
            "name": "task-manager",
            "version": "1.0.0",
        },
    }

    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        db.session.rollback()
        health_status["status"] = "unhealthy"
        health_status["components"]["database"] = "unhealthy"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return jsonify(health_status), status_code
