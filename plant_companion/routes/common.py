"""
Helpers shared by the JSON API blueprints.
"""

from __future__ import annotations
from flask import jsonify, request


def enforce_ajax_for_mutations():
    """Enforce X-Requested-With header on all state-changing API requests.

    Custom headers cannot be set by cross-origin requests without CORS and
    HTML forms cannot set them at all, so requiring one blocks CSRF for the
    whole blueprint. Register with `bp.before_request`.
    """
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        if request.headers.get("X-Requested-With") != "XMLHttpRequest":
            return jsonify({
                "success": False,
                "error": "Invalid request. Please refresh the page and try again."
            }), 403
    return None


def get_json_body():
    """Parsed JSON object body, or None if missing/invalid."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def bad_request(message: str):
    return jsonify({"success": False, "error": message}), 400


def not_found(message: str = "The requested item was not found."):
    return jsonify({"success": False, "error": message}), 404
