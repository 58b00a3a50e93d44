"""
Photo log routes.

Endpoints (all JSON, under /api/v1):
- GET    /plants/<id>/photos          photos for a plant, newest first
- GET    /plants/<id>/photos/latest   most recent photo
- POST   /plants/<id>/photos          add a photo (image_uri from the device picker)
- PATCH  /photos/<photo_id>           update notes/measurements/uri
- DELETE /photos/<photo_id>           delete a photo
"""

from __future__ import annotations
from flask import Blueprint, current_app, jsonify

from plant_companion.extensions import limiter
from plant_companion.services.registry import get_services
from plant_companion.utils.errors import CompanionError, error_response
from plant_companion.utils.validation import is_valid_uuid, validate_photo_input
from .common import bad_request, enforce_ajax_for_mutations, get_json_body, not_found

photos_bp = Blueprint("photos", __name__)
photos_bp.before_request(enforce_ajax_for_mutations)


def _photo_rate_limit():
    return current_app.config.get("PHOTO_RATE_LIMIT", "30 per hour")


@photos_bp.route("/plants/<plant_id>/photos")
def list_photos(plant_id):
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")
    try:
        photos = get_services().photos.get_plant_photos(plant_id)
    except CompanionError as e:
        return error_response(e, "Failed to load photos")
    return jsonify({"success": True, "photos": [p.to_dict() for p in photos]})


@photos_bp.route("/plants/<plant_id>/photos/latest")
def latest_photo(plant_id):
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")
    try:
        photo = get_services().photos.get_latest_photo(plant_id)
    except CompanionError as e:
        return error_response(e, "Failed to load photos")
    if photo is None:
        return not_found("No photos for this plant.")
    return jsonify({"success": True, "photo": photo.to_dict()})


@photos_bp.route("/plants/<plant_id>/photos", methods=["POST"])
@limiter.limit(_photo_rate_limit)
def add_photo(plant_id):
    """
    Add a photo to a plant's log.

    Request body (JSON):
        {
            "image_uri": "file:///...",   (required)
            "notes": "New leaf!",
            "height": 42.5,               (cm)
            "width": 30                   (cm)
        }
    """
    if not is_valid_uuid(plant_id):
        return bad_request("Invalid plant ID.")

    data = get_json_body()
    if data is None:
        return bad_request("Invalid request body")

    payload, error = validate_photo_input(data)
    if error:
        return bad_request(error)

    services = get_services()
    try:
        if services.plants.get_plant(plant_id) is None:
            return not_found("Plant not found.")
        photo = services.photos.add_photo(
            plant_id,
            payload["image_uri"],
            notes=payload.get("notes"),
            height=payload.get("height"),
            width=payload.get("width"),
        )
    except CompanionError as e:
        return error_response(e, "Failed to add photo")

    return jsonify({"success": True, "photo": photo.to_dict()}), 201


@photos_bp.route("/photos/<photo_id>", methods=["PATCH", "PUT"])
def update_photo(photo_id):
    if not is_valid_uuid(photo_id):
        return bad_request("Invalid photo ID.")

    data = get_json_body()
    if data is None:
        return bad_request("Invalid request body")

    payload, error = validate_photo_input(data, partial=True)
    if error:
        return bad_request(error)
    if not payload:
        return bad_request("No fields to update")

    try:
        photo = get_services().photos.update_photo(photo_id, payload)
    except CompanionError as e:
        return error_response(e, "Failed to update photo")

    if photo is None:
        return not_found("Photo not found.")
    return jsonify({"success": True, "photo": photo.to_dict()})


@photos_bp.route("/photos/<photo_id>", methods=["DELETE"])
def delete_photo(photo_id):
    if not is_valid_uuid(photo_id):
        return bad_request("Invalid photo ID.")
    try:
        deleted = get_services().photos.delete_photo(photo_id)
    except CompanionError as e:
        return error_response(e, "Failed to delete photo")
    if not deleted:
        return not_found("Photo not found.")
    return jsonify({"success": True})
