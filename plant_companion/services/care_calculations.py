"""
Due-date arithmetic for care schedules.

A schedule's next due date is its last-performed timestamp (or the plant's
creation timestamp if it was never performed) advanced by `frequency`
calendar days. Datetimes are naive local wall-clock values, so adding days
keeps the time of day and ignores DST shifts.
"""

from __future__ import annotations
import math
from datetime import datetime, timedelta
from typing import List, Optional

from plant_companion.constants import MIN_FREQUENCY_DAYS
from plant_companion.models import CareSchedule, CareTaskStatus, Plant
from plant_companion.utils.errors import ValidationError

SECONDS_PER_DAY = 24 * 60 * 60


def validate_frequency(frequency) -> int:
    """Return frequency unchanged, raising ValidationError unless it is an int >= 1."""
    # bool is an int subclass; True must not pass as 1 day
    if isinstance(frequency, bool) or not isinstance(frequency, int):
        raise ValidationError(f"Frequency must be a whole number of days, got {frequency!r}")
    if frequency < MIN_FREQUENCY_DAYS:
        raise ValidationError(f"Frequency must be at least {MIN_FREQUENCY_DAYS} day, got {frequency}")
    return frequency


def next_due_date(schedule: CareSchedule, created_at: datetime) -> datetime:
    """
    Compute when a schedule is next due.

    Args:
        schedule: The care schedule
        created_at: The plant's creation timestamp, used when the schedule
            has never been performed

    Returns:
        (last_performed or created_at) + frequency days
    """
    frequency = validate_frequency(schedule.frequency)
    anchor = schedule.last_performed or created_at
    return anchor + timedelta(days=frequency)


def get_next_due_date(plant: Plant, category: str) -> Optional[datetime]:
    """Next due date for the plant's schedule in `category`, or None if not scheduled."""
    schedule = plant.get_schedule(category)
    if schedule is None:
        return None
    return next_due_date(schedule, plant.created_at)


def days_until(due_date: datetime, now: datetime) -> int:
    """Whole days until due, rounded up; negative once a full day has passed."""
    return math.ceil((due_date - now).total_seconds() / SECONDS_PER_DAY)


def days_overdue(due_date: datetime, now: datetime) -> int:
    """Whole days elapsed since the due date, rounded down."""
    return math.floor((now - due_date).total_seconds() / SECONDS_PER_DAY)


def get_overdue_tasks(plant: Plant, now: Optional[datetime] = None) -> List[CareTaskStatus]:
    """
    Status of every schedule on a plant relative to `now`.

    Despite the name this returns one entry per schedule; `is_overdue` marks the
    ones whose due instant has already passed.
    """
    if now is None:
        now = datetime.now()

    statuses = []
    for schedule in plant.care_schedules:
        due = next_due_date(schedule, plant.created_at)
        statuses.append(CareTaskStatus(
            category=schedule.category,
            days_until_due=days_until(due, now),
            is_overdue=due < now,
            days_overdue=days_overdue(due, now),
        ))
    return statuses


def get_max_days_overdue(plant: Plant, now: Optional[datetime] = None) -> int:
    """Largest number of days any schedule on the plant is overdue (0 if none)."""
    statuses = get_overdue_tasks(plant, now)
    if not statuses:
        return 0
    return max(s.days_overdue if s.is_overdue else 0 for s in statuses)
