"""
Task routes.

Endpoints (all JSON, under /api/v1):
- GET  /tasks?view=all|due|upcoming&days=7   generated care tasks
- GET  /tasks/reminders                      reminders with display text
- POST /tasks/<task_id>/complete             record the task's care as done

Tasks are regenerated from the stored plants on every request.
"""

from __future__ import annotations
from datetime import datetime
from flask import Blueprint, current_app, jsonify, request

from plant_companion.services.registry import get_services
from plant_companion.services.tasks import (
    format_reminder,
    generate_care_reminders,
    get_due_reminders,
    split_reminder_id,
    TaskBoard,
)
from plant_companion.utils.errors import CompanionError, error_response
from .common import bad_request, enforce_ajax_for_mutations, not_found

tasks_bp = Blueprint("tasks", __name__)
tasks_bp.before_request(enforce_ajax_for_mutations)

TASK_VIEWS = ("all", "due", "upcoming")
MAX_UPCOMING_DAYS = 365


def _parse_days():
    """Look-ahead for the upcoming view from ?days=, bounded to 1..365."""
    days = request.args.get("days", type=int)
    if days is None:
        return current_app.config.get("UPCOMING_TASK_DAYS", 7), None
    if days < 1 or days > MAX_UPCOMING_DAYS:
        return None, f"days must be between 1 and {MAX_UPCOMING_DAYS}."
    return days, None


@tasks_bp.route("/tasks")
def list_tasks():
    """
    Generate tasks for all plants.

    Query params:
        view: all (sorted, default), due (overdue or due today), upcoming
        days: look-ahead for the upcoming view (default 7)
    """
    view = request.args.get("view", "all").strip().lower()
    if view not in TASK_VIEWS:
        return bad_request(f"view must be one of: {', '.join(TASK_VIEWS)}")

    days, error = _parse_days()
    if error:
        return bad_request(error)

    services = get_services()
    board = TaskBoard(services.plants)
    try:
        board.update(services.plants.get_all_plants())
    except CompanionError as e:
        return error_response(e, "Failed to generate tasks")

    if view == "due":
        tasks = board.due_tasks
    elif view == "upcoming":
        tasks = board.upcoming_tasks(days)
    else:
        tasks = board.sorted_tasks

    return jsonify({
        "success": True,
        "view": view,
        "count": len(tasks),
        "tasks": [t.to_dict() for t in tasks],
    })


@tasks_bp.route("/tasks/reminders")
def list_reminders():
    """Reminders with a status line; `due_only=1` keeps those due today or earlier."""
    now = datetime.now()
    try:
        reminders = generate_care_reminders(get_services().plants.get_all_plants())
    except CompanionError as e:
        return error_response(e, "Failed to generate reminders")

    if request.args.get("due_only", "").lower() in ("1", "true", "yes"):
        reminders = get_due_reminders(reminders, now)

    return jsonify({
        "success": True,
        "reminders": [
            {**r.to_dict(), "message": format_reminder(r, now)} for r in reminders
        ],
    })


@tasks_bp.route("/tasks/<task_id>/complete", methods=["POST"])
def complete_task(task_id):
    """
    Mark a task done (its schedule's last_performed becomes now).

    Returns the regenerated task for the same plant and category.
    """
    plant_id, category = split_reminder_id(task_id)
    if not plant_id:
        return bad_request("Invalid task ID.")

    services = get_services()
    board = TaskBoard(services.plants)
    try:
        board.update(services.plants.get_all_plants())
        task = next((t for t in board.tasks if t.id == task_id), None)
        if task is None:
            return not_found("Task not found.")

        plant = board.complete_task(task)
        if plant is None:
            return not_found("Plant not found.")

        board.update(services.plants.get_all_plants())
    except CompanionError as e:
        return error_response(e, "Failed to complete task")

    services.refresh_reminders()
    refreshed = next((t for t in board.tasks if t.id == task_id), None)
    return jsonify({
        "success": True,
        "task": refreshed.to_dict() if refreshed else None,
    })
