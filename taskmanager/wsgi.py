"""WSGI entry point, e.g. ``gunicorn taskmanager.wsgi:app``."""

from taskmanager import create_app


app = create_app()
