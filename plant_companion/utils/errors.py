"""
Error types and handling utilities for user-facing messages and logging.

Provides consistent error handling across the application:
- A small exception hierarchy raised by the stores and calculators
- Converts errors to user-friendly messages at the API boundary
- Logs detailed error information for debugging
"""

from __future__ import annotations
from typing import Tuple
from flask import current_app, jsonify


class CompanionError(Exception):
    """Base class for errors surfaced to the user as a message."""
    error_type = "storage"
    status_code = 500


class StorageReadError(CompanionError):
    """Persisted data could not be read or decoded."""
    error_type = "storage_read"


class StorageWriteError(CompanionError):
    """Persisted data could not be written."""
    error_type = "storage_write"


class NotFoundError(CompanionError):
    """A plant, schedule or photo does not exist."""
    error_type = "not_found"
    status_code = 404


class ValidationError(CompanionError):
    """Input is missing a required field or is out of range."""
    error_type = "validation"
    status_code = 400


# User-friendly generic error messages
GENERIC_MESSAGES = {
    "storage": "We're experiencing technical difficulties. Please try again.",
    "storage_read": "Could not load your plants. Please try again.",
    "storage_write": "Could not save your changes. Please try again.",
    "validation": "The information provided is invalid. Please check and try again.",
    "not_found": "The requested item was not found.",
    "notification": "Could not schedule reminders. Please try again.",
}


def sanitize_error(
    error: Exception,
    error_type: str | None = None,
    log_prefix: str = ""
) -> str:
    """
    Convert an exception to a message for user display and log full details.

    Validation and not-found errors carry their own message (they describe a
    user mistake, not internals). Everything else is replaced by a generic
    message so storage details never reach the client.

    Args:
        error: The exception that occurred
        error_type: Override for the error category (defaults to the error's own)
        log_prefix: Optional prefix for log message context

    Returns:
        User-friendly error message

    Examples:
        >>> try:
        ...     plant = store.create_plant(payload)
        ... except CompanionError as e:
        ...     user_msg = sanitize_error(e, log_prefix="Failed to create plant")
    """
    if error_type is None:
        error_type = getattr(error, "error_type", "storage")

    error_message = str(error)
    log_message = f"{log_prefix}: {error_message}" if log_prefix else error_message

    if error_type in ["validation", "not_found"]:
        # Expected errors (user mistakes), log as info
        current_app.logger.info(f"Expected error - {log_message}")
        return error_message or GENERIC_MESSAGES[error_type]

    # Unexpected errors (storage failures, bugs), log with stack trace
    current_app.logger.error(f"Unexpected error - {log_message}", exc_info=True)
    return GENERIC_MESSAGES.get(error_type, GENERIC_MESSAGES["storage"])


def error_response(error: Exception, log_prefix: str = "") -> Tuple[object, int]:
    """
    Build the JSON error payload and status code for an API handler.

    Examples:
        >>> except CompanionError as e:
        ...     return error_response(e, "Failed to delete plant")
    """
    status_code = getattr(error, "status_code", 500)
    message = sanitize_error(error, log_prefix=log_prefix)
    return jsonify({"success": False, "error": message}), status_code


def log_warning(message: str, **context) -> None:
    """
    Log a warning with optional context.

    Examples:
        >>> log_warning("Reminder refresh failed", plant_count=3)
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"

    current_app.logger.warning(message)


def log_info(message: str, **context) -> None:
    """
    Log an info message with optional context.

    Examples:
        >>> log_info("Plant created", plant_id="123", plant_name="Monstera")
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"

    current_app.logger.info(message)
