"""
Input validation and normalization.

Trims and bounds field lengths, filters suspicious characters while allowing
natural punctuation, parses care schedules and notification preferences, and
builds clean payloads for the stores.
"""

from __future__ import annotations
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from plant_companion.constants import CARE_CATEGORIES, MAX_FREQUENCY_DAYS, MIN_FREQUENCY_DAYS
from plant_companion.models import CareSchedule, parse_datetime

# Allowlist regex: we REMOVE anything NOT in this set.
# Includes letters/numbers/space and common lightweight punctuation used in names.
_SAFE_CHARS_PATTERN = re.compile(r"[^a-zA-Z0-9\s\-\.,'()/&]+")

# UUID validation pattern (RFC 4122 compliant)
_UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

_REMINDER_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

MAX_NAME_LEN = 80
MAX_LOCATION_LEN = 80
MAX_NOTES_LEN = 1200
MAX_URI_LEN = 2048
MAX_REMIND_BEFORE_DAYS = 30


def _soft_sanitize(text: str, max_len: int) -> str:
    """
    Normalizes names/species/locations:
    - strip whitespace
    - bound length
    - remove disallowed characters via allowlist
    - collapse double spaces
    """
    t = (text or "").strip()
    if not t:
        return ""
    t = t[:max_len]
    t = _SAFE_CHARS_PATTERN.sub("", t)
    t = re.sub(r"\s{2,}", " ", t)
    return t.strip()


def _soft_sanitize_notes(text: str, max_len: int) -> str:
    """
    Notes are a bit more permissive:
    - strip & bound length
    - remove control chars only; keep reasonable punctuation
    - normalize repeated tabs/spaces
    """
    t = (text or "").strip()
    if not t:
        return ""
    t = t[:max_len]
    t = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", t)
    t = re.sub(r"[ \t]{2,}", " ", t)
    return t


def _require_text(data: Dict[str, Any], field_names) -> Optional[str]:
    """Error message for the first present field that is not a string, else None."""
    for field_name in field_names:
        value = data.get(field_name)
        if value is not None and not isinstance(value, str):
            return f"{field_name} must be text."
    return None


def _optional_text(value: Any, max_len: int, notes: bool = False) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    cleaned = _soft_sanitize_notes(value, max_len) if notes else _soft_sanitize(value, max_len)
    return cleaned or None


def parse_frequency(value: Any) -> Tuple[Optional[int], Optional[str]]:
    """
    Parse a schedule frequency in days.

    Returns:
        (frequency, None) on success, (None, error_message) otherwise.
    """
    if isinstance(value, bool):
        return None, "Invalid frequency."
    try:
        frequency = int(value)
    except (ValueError, TypeError, OverflowError):
        return None, "Invalid frequency."
    if isinstance(value, float) and value != frequency:
        return None, "Frequency must be a whole number of days."
    if frequency < MIN_FREQUENCY_DAYS or frequency > MAX_FREQUENCY_DAYS:
        return None, f"Frequency must be between {MIN_FREQUENCY_DAYS} and {MAX_FREQUENCY_DAYS} days."
    return frequency, None


def parse_care_schedules(raw: Any) -> Tuple[List[CareSchedule], Optional[str]]:
    """Parse a JSON list of schedules; categories must be known and unique."""
    if raw is None:
        return [], None
    if not isinstance(raw, list):
        return [], "care_schedules must be a list."

    schedules = []
    seen = set()
    for item in raw:
        if not isinstance(item, dict):
            return [], "Each care schedule must be an object."

        error = _require_text(item, ("category", "notes"))
        if error:
            return [], error

        category = (item.get("category") or "").strip().lower()
        if category not in CARE_CATEGORIES:
            return [], f"Unknown care category: {category or '(missing)'}"
        if category in seen:
            return [], f"Duplicate care category: {category}"
        seen.add(category)

        frequency, error = parse_frequency(item.get("frequency"))
        if error:
            return [], f"{category}: {error}"

        try:
            last_performed = parse_datetime(item.get("last_performed"))
        except (ValueError, TypeError):
            return [], f"{category}: last_performed must be an ISO-8601 date."

        schedules.append(CareSchedule(
            category=category,
            frequency=frequency,
            last_performed=last_performed,
            notes=_optional_text(item.get("notes"), MAX_NOTES_LEN, notes=True),
        ))
    return schedules, None


def validate_plant_input(data: Dict[str, Any], partial: bool = False) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Validates incoming plant JSON and returns (payload, error_message).

    With partial=True (updates) only the fields present are validated and
    returned; name, if present, must still be non-empty.
    """
    if not isinstance(data, dict):
        return {}, "Invalid request body"

    error = _require_text(data, ("name", "species", "location", "notes", "image_uri"))
    if error:
        return {}, error

    payload: Dict[str, Any] = {}

    if "name" in data or not partial:
        name = _soft_sanitize(data.get("name") or "", MAX_NAME_LEN)
        if not name:
            return {}, "Plant name is required."
        payload["name"] = name

    for field_name, max_len in (("species", MAX_NAME_LEN), ("location", MAX_LOCATION_LEN)):
        if field_name in data:
            payload[field_name] = _optional_text(data.get(field_name), max_len)

    if "notes" in data:
        payload["notes"] = _optional_text(data.get("notes"), MAX_NOTES_LEN, notes=True)

    if "image_uri" in data:
        uri = str(data.get("image_uri") or "").strip()[:MAX_URI_LEN]
        payload["image_uri"] = uri or None

    if "care_schedules" in data or not partial:
        schedules, error = parse_care_schedules(data.get("care_schedules"))
        if error:
            return {}, error
        payload["care_schedules"] = schedules

    return payload, None


def _parse_measurement(value: Any) -> Tuple[Optional[float], Optional[str]]:
    if value is None or value == "":
        return None, None
    if isinstance(value, bool):
        return None, "Measurements must be numbers."
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None, "Measurements must be numbers."
    if not math.isfinite(number):
        return None, "Measurements must be numbers."
    if number < 0:
        return None, "Measurements cannot be negative."
    return number, None


def validate_photo_input(data: Dict[str, Any], partial: bool = False) -> Tuple[Dict[str, Any], Optional[str]]:
    """Validates photo metadata; image_uri is required unless partial."""
    if not isinstance(data, dict):
        return {}, "Invalid request body"

    error = _require_text(data, ("image_uri", "notes"))
    if error:
        return {}, error

    payload: Dict[str, Any] = {}

    if "image_uri" in data or not partial:
        uri = str(data.get("image_uri") or "").strip()[:MAX_URI_LEN]
        if not uri:
            return {}, "image_uri is required."
        payload["image_uri"] = uri

    if "notes" in data:
        payload["notes"] = _optional_text(data.get("notes"), MAX_NOTES_LEN, notes=True)

    for field_name in ("height", "width"):
        if field_name in data:
            number, error = _parse_measurement(data.get(field_name))
            if error:
                return {}, f"{field_name}: {error}"
            payload[field_name] = number

    return payload, None


def parse_reminder_time(value: Any) -> Tuple[Optional[Tuple[int, int]], Optional[str]]:
    """
    Parse an "HH:MM" time of day.

    Example:
        >>> parse_reminder_time("08:30")
        ((8, 30), None)
    """
    match = _REMINDER_TIME_PATTERN.match(str(value or "").strip())
    if not match:
        return None, "Reminder time must use HH:MM format."
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None, "Reminder time must be a valid time of day."
    return (hour, minute), None


def validate_notification_preferences(data: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Validates a (partial) notification preferences update."""
    if not isinstance(data, dict):
        return {}, "Invalid request body"

    payload: Dict[str, Any] = {}

    if "enabled" in data:
        if not isinstance(data["enabled"], bool):
            return {}, "enabled must be true or false."
        payload["enabled"] = data["enabled"]

    if "remind_before_days" in data:
        value = data["remind_before_days"]
        if isinstance(value, bool) or not isinstance(value, int):
            return {}, "remind_before_days must be a whole number."
        if value < 0 or value > MAX_REMIND_BEFORE_DAYS:
            return {}, f"remind_before_days must be between 0 and {MAX_REMIND_BEFORE_DAYS}."
        payload["remind_before_days"] = value

    if "reminder_time" in data:
        parsed, error = parse_reminder_time(data["reminder_time"])
        if error:
            return {}, error
        payload["reminder_time"] = f"{parsed[0]:02d}:{parsed[1]:02d}"

    return payload, None


def is_valid_uuid(value: str | None) -> bool:
    """
    Check if a string is a valid UUID (RFC 4122 format).

    Example:
        >>> is_valid_uuid("550e8400-e29b-41d4-a716-446655440000")
        True
        >>> is_valid_uuid("invalid")
        False
    """
    if not value or not isinstance(value, str):
        return False
    return bool(_UUID_PATTERN.match(value))
