"""
Notification preference routes.

Endpoints (all JSON, under /api/v1):
- GET  /notifications/preferences   current preferences (defaults merged in)
- PUT  /notifications/preferences   update enabled / remind_before_days / reminder_time
- POST /notifications/schedule      recompute and reschedule reminders now
"""

from __future__ import annotations
from flask import Blueprint, current_app, jsonify

from plant_companion.services.registry import get_services
from plant_companion.utils.errors import CompanionError, GENERIC_MESSAGES, error_response
from plant_companion.utils.validation import validate_notification_preferences
from .common import bad_request, enforce_ajax_for_mutations, get_json_body

notifications_bp = Blueprint("notifications", __name__)
notifications_bp.before_request(enforce_ajax_for_mutations)


@notifications_bp.route("/notifications/preferences")
def get_preferences():
    return jsonify({"success": True, "preferences": get_services().reminders.get_preferences()})


@notifications_bp.route("/notifications/preferences", methods=["PUT", "PATCH"])
def update_preferences():
    """
    Update notification preferences and reschedule reminders.

    Request body (JSON):
        {
            "enabled": true,
            "remind_before_days": 1,
            "reminder_time": "08:00"
        }
    """
    data = get_json_body()
    if data is None:
        return bad_request("Invalid request body")

    updates, error = validate_notification_preferences(data)
    if error:
        return bad_request(error)
    if not updates:
        return bad_request("No fields to update")

    services = get_services()
    try:
        preferences = services.reminders.save_preferences(updates)
    except CompanionError as e:
        return error_response(e, "Failed to save notification preferences")

    # Disabling clears the schedule too, since scheduling returns early when disabled
    if not preferences["enabled"]:
        try:
            services.reminders.notifier.cancel_all()
        except Exception as e:
            current_app.logger.error(f"Error canceling notifications: {e}")
    else:
        services.refresh_reminders()
    return jsonify({"success": True, "preferences": preferences})


@notifications_bp.route("/notifications/schedule", methods=["POST"])
def schedule_reminders():
    """Recompute reminders from the stored plants and register notifications."""
    services = get_services()
    try:
        plants = services.plants.get_all_plants()
    except CompanionError as e:
        return error_response(e, "Failed to schedule reminders")

    try:
        stats = services.reminders.schedule_reminders(plants)
    except Exception as e:
        current_app.logger.error(f"Failed to schedule reminders: {e}", exc_info=True)
        return jsonify({"success": False, "error": GENERIC_MESSAGES["notification"]}), 500
    return jsonify({"success": True, "stats": stats})
