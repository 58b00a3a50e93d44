"""
Plant routes.

Endpoints (all JSON, under /api/v1):
- GET    /plants                              list plants
- POST   /plants                              create a plant
- GET    /plants/<id>                         plant with per-category status
- PATCH  /plants/<id>                         update fields / replace schedules
- DELETE /plants/<id>                         delete plant and its photos
- POST   /plants/<id>/care/<category>         record a care task as done now
- GET    /plants/<id>/care/<category>/next    next due date for a category

Every change to the plant set reschedules reminder notifications.
"""

from __future__ import annotations
from flask import Blueprint, current_app, jsonify

from plant_companion.models import is_care_category
from plant_companion.services.care_calculations import get_max_days_overdue, get_overdue_tasks
from plant_companion.services.registry import get_services
from plant_companion.utils.errors import CompanionError, error_response, log_info
from plant_companion.utils.validation import is_valid_uuid, validate_plant_input
from .common import bad_request, enforce_ajax_for_mutations, get_json_body, not_found

plants_bp = Blueprint("plants", __name__)
plants_bp.before_request(enforce_ajax_for_mutations)


def _plant_detail(plant) -> dict:
    detail = plant.to_dict()
    detail["care_status"] = [s.to_dict() for s in get_overdue_tasks(plant)]
    detail["max_days_overdue"] = get_max_days_overdue(plant)
    return detail


@plants_bp.route("/plants")
def list_plants():
    """List all plants in creation order."""
    try:
        plants = get_services().plants.get_all_plants()
    except CompanionError as e:
        return error_response(e, "Failed to load plants")
    return jsonify({"success": True, "plants": [p.to_dict() for p in plants]})


@plants_bp.route("/plants", methods=["POST"])
def create_plant():
    """
    Create a plant.

    Request body (JSON):
        {
            "name": "Monstera",                    (required)
            "species": "Monstera deliciosa",
            "location": "Living room",
            "notes": "...",
            "image_uri": "file:///...",
            "care_schedules": [{"category": "watering", "frequency": 7}]
        }
    """
    data = get_json_body()
    if data is None:
        return bad_request("Invalid request body")

    payload, error = validate_plant_input(data)
    if error:
        return bad_request(error)

    services = get_services()
    try:
        plant = services.plants.create_plant(payload)
    except CompanionError as e:
        return error_response(e, "Failed to create plant")

    log_info("Plant created", plant_id=plant.id, plant_name=plant.name)
    services.refresh_reminders()
    return jsonify({"success": True, "plant": plant.to_dict()}), 201


@plants_bp.route("/plants/<plant_id>")
def get_plant(plant_id):
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")

    try:
        plant = get_services().plants.get_plant(plant_id)
        if plant is None:
            return not_found("Plant not found.")
        detail = _plant_detail(plant)
    except CompanionError as e:
        return error_response(e, "Failed to load plant")

    return jsonify({"success": True, "plant": detail})


@plants_bp.route("/plants/<plant_id>", methods=["PATCH", "PUT"])
def update_plant(plant_id):
    """Update a plant; `care_schedules`, when given, replaces the whole list."""
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")

    data = get_json_body()
    if data is None:
        return bad_request("Invalid request body")

    payload, error = validate_plant_input(data, partial=True)
    if error:
        return bad_request(error)
    if not payload:
        return bad_request("No fields to update")

    services = get_services()
    try:
        plant = services.plants.update_plant(plant_id, payload)
    except CompanionError as e:
        return error_response(e, "Failed to update plant")

    if plant is None:
        return not_found("Plant not found.")

    services.refresh_reminders()
    return jsonify({"success": True, "plant": plant.to_dict()})


@plants_bp.route("/plants/<plant_id>", methods=["DELETE"])
def delete_plant(plant_id):
    """Delete a plant; its tasks disappear from the next generation and its photos are removed."""
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")

    services = get_services()
    try:
        deleted = services.plants.delete_plant(plant_id)
    except CompanionError as e:
        return error_response(e, "Failed to delete plant")

    if not deleted:
        return not_found("Plant not found.")

    try:
        services.photos.delete_plant_photos(plant_id)
    except CompanionError as e:
        # The plant is gone either way; orphaned photos are only wasted storage
        current_app.logger.warning(f"Failed to delete photos for plant {plant_id}: {e}")

    services.refresh_reminders()
    return jsonify({"success": True})


@plants_bp.route("/plants/<plant_id>/care/<category>", methods=["POST"])
def record_care(plant_id, category):
    """Mark a care category as performed now."""
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")
    if not is_care_category(category):
        return bad_request(f"Unknown care category: {category}")

    services = get_services()
    try:
        plant = services.plants.get_plant(plant_id)
        if plant is None:
            return not_found("Plant not found.")
        if plant.get_schedule(category) is None:
            return not_found(f"{plant.name} has no {category} schedule.")
        plant = services.plants.record_care_task(plant_id, category)
        if plant is None:
            return not_found("Plant not found.")
        detail = _plant_detail(plant)
    except CompanionError as e:
        return error_response(e, "Failed to record care task")

    services.refresh_reminders()
    return jsonify({"success": True, "plant": detail})


@plants_bp.route("/plants/<plant_id>/care/<category>/next")
def next_care_date(plant_id, category):
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")
    if not is_care_category(category):
        return bad_request(f"Unknown care category: {category}")

    try:
        due = get_services().plants.get_next_care_date(plant_id, category)
    except CompanionError as e:
        return error_response(e, "Failed to compute next care date")

    if due is None:
        return not_found("Plant or care schedule not found.")
    return jsonify({"success": True, "category": category, "due_date": due.isoformat()})
