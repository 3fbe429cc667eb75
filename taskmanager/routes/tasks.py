"""Task pages and JSON actions.

Every view runs behind :func:`login_required` and talks to the store only
through a :class:`TaskService` bound to the session user.
"""

from datetime import date

from flask import Blueprint, current_app, g, jsonify, redirect, render_template, request, url_for

from taskmanager.errors import json_error
from taskmanager.extensions import db
from taskmanager.middleware.auth import login_required
from taskmanager.schemas import TaskSchema
from taskmanager.services import TaskService, TaskValidationError, resolve_today
from taskmanager.services.queries import normalize_sort, normalize_status_filter


tasks_bp = Blueprint("tasks", __name__, url_prefix="/tasks")


def _service() -> TaskService:
    return TaskService(
        db.session,
        g.current_user["id"],
        recent_limit=current_app.config.get("RECENT_TASKS_LIMIT", 5),
    )


def _form_today() -> date:
    return resolve_today(request.form.get("client_today"))


@tasks_bp.route("/", methods=["GET"])
@login_required
def dashboard():
    stats = _service().dashboard()
    return render_template(
        "tasks/dashboard.html", title="Dashboard", stats=stats, today=date.today()
    )


@tasks_bp.route("/list", methods=["GET"])
@login_required
def list_tasks():
    """List the user's tasks.

    Query params:
        status: ``pending`` or ``completed``; anything else lists all
        sort: ``due_date`` (default), ``title``, ``created_at`` or ``status``
    """
    status = request.args.get("status")
    sort = request.args.get("sort")

    tasks = _service().list_tasks(status, sort)

    return render_template(
        "tasks/list.html",
        title="My Tasks",
        tasks=tasks,
        status_filter=normalize_status_filter(status) or "all",
        sort_by=normalize_sort(sort),
        today=date.today(),
    )


@tasks_bp.route("/add", methods=["GET"])
@login_required
def show_add_task():
    return render_template("tasks/add.html", title="Add New Task", errors=[], form_data={})


@tasks_bp.route("/add", methods=["POST"])
@login_required
def add_task():
    try:
        _service().create(request.form.to_dict(), today=_form_today())
    except TaskValidationError as err:
        return render_template(
            "tasks/add.html", title="Add New Task", errors=err.errors, form_data=err.form_data
        ), 400

    return redirect(url_for("tasks.list_tasks"))


@tasks_bp.route("/edit/<int:task_id>", methods=["GET"])
@login_required
def show_edit_task(task_id: int):
    task = _service().get(task_id)
    return render_template(
        "tasks/edit.html", title="Edit Task", task=TaskSchema().dump(task), errors=[]
    )


@tasks_bp.route("/edit/<int:task_id>", methods=["POST"])
@login_required
def update_task(task_id: int):
    try:
        _service().update(task_id, request.form.to_dict(), today=_form_today())
    except TaskValidationError as err:
        # Re-display what was submitted; nothing is read from the store
        return render_template(
            "tasks/edit.html",
            title="Edit Task",
            task={**err.form_data, "id": task_id},
            errors=err.errors,
        ), 400

    return redirect(url_for("tasks.list_tasks"))


@tasks_bp.route("/delete/<int:task_id>", methods=["POST"])
@login_required
def delete_task(task_id: int):
    if not _service().delete(task_id):
        return json_error("Task not found", 404)
    return jsonify({"success": True})


@tasks_bp.route("/status/<int:task_id>", methods=["POST"])
@login_required
def update_status(task_id: int):
    """Toggle a task between pending and completed.

    Accepts ``status`` as JSON or form data.
    """
    payload = request.get_json(silent=True) or request.form.to_dict()
    status = payload.get("status") if isinstance(payload, dict) else None

    _service().set_status(task_id, status)
    return jsonify({"success": True, "status": status})
