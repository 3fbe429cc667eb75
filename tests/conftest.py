"""Pytest fixtures for task manager testing."""

import os
from datetime import date

import pytest


# Disable OpenTelemetry for tests
os.environ["OTEL_SDK_DISABLED"] = "true"


@pytest.fixture
def app():
    """Create test application."""
    from taskmanager import create_app
    from taskmanager.config import TestConfig

    app = create_app(TestConfig)
    app.config["TESTING"] = True

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Create test database."""
    from taskmanager.extensions import db as _db

    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


def _make_user(db, username, email):
    from taskmanager.models import User

    user = User(username=username, email=email)
    user.set_password("password123")
    db.session.add(user)
    db.session.commit()
    return user


def _login_session(client, user):
    with client.session_transaction() as sess:
        sess["user"] = {"id": user.session_id, "username": user.username, "email": user.email}


@pytest.fixture
def login_as():
    """Return a helper that logs a client in as a user."""
    return _login_session


@pytest.fixture
def user(db):
    """Create test user."""
    return _make_user(db, "alice", "alice@example.com")


@pytest.fixture
def other_user(db):
    """Create a second user who must never see alice's tasks."""
    return _make_user(db, "bob", "bob@example.com")


@pytest.fixture
def auth_client(client, user):
    """Test client logged in as ``user``."""
    _login_session(client, user)
    return client


@pytest.fixture
def other_client(app, other_user):
    """Separate test client logged in as ``other_user``."""
    client = app.test_client()
    _login_session(client, other_user)
    return client


@pytest.fixture
def service(db, user):
    """Task service bound to ``user``."""
    from taskmanager.services import TaskService

    return TaskService(db.session, user.session_id)


@pytest.fixture
def other_service(db, other_user):
    """Task service bound to ``other_user``."""
    from taskmanager.services import TaskService

    return TaskService(db.session, other_user.session_id)


@pytest.fixture
def today():
    return date.today()
