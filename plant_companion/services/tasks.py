"""
Task and reminder generation for plant care scheduling.

Expands plants into one reminder per (plant, schedule) pair, classifies each
against an evaluation instant, and provides the due / upcoming / sorted views.
Generation is a pure function of the plant list and `now`; completing a task
goes through the plant store and the caller regenerates afterwards.
"""

from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from plant_companion.constants import DEFAULT_UPCOMING_DAYS
from plant_companion.models import CareReminder, Plant, Task
from plant_companion.services.care_calculations import days_until, next_due_date

logger = logging.getLogger(__name__)


def reminder_id(plant_id: str, category: str) -> str:
    return f"{plant_id}-{category}"


def split_reminder_id(task_id: str) -> tuple:
    """
    Split a reminder/task id back into (plant_id, category).

    Categories never contain a hyphen, so the last hyphen is the separator
    even when the plant id is a UUID.
    """
    plant_id, sep, category = task_id.rpartition("-")
    if not sep or not plant_id or not category:
        return None, None
    return plant_id, category


def _sort_by_due_date(items: Iterable) -> list:
    # sorted() is stable, so ties keep plant/schedule order
    return sorted(items, key=lambda item: item.due_date)


def generate_care_reminders(plants: Iterable[Plant]) -> List[CareReminder]:
    """
    Build one reminder per (plant, schedule) pair, sorted by due date.

    Args:
        plants: Plants with their care schedules

    Returns:
        Reminders in ascending due-date order
    """
    reminders = []
    for plant in plants:
        for schedule in plant.care_schedules:
            reminders.append(CareReminder(
                id=reminder_id(plant.id, schedule.category),
                plant_id=plant.id,
                plant_name=plant.name,
                category=schedule.category,
                due_date=next_due_date(schedule, plant.created_at),
            ))
    return _sort_by_due_date(reminders)


def generate_tasks(plants: Iterable[Plant], now: Optional[datetime] = None) -> List[Task]:
    """
    Classify every reminder against `now`.

    days_until_due = ceil((due - now) / 1 day); a task is overdue once that
    goes negative. Output keeps the reminder order (ascending due date).
    """
    if now is None:
        now = datetime.now()

    plants = list(plants)
    frequencies = {
        reminder_id(plant.id, schedule.category): schedule.frequency
        for plant in plants
        for schedule in reversed(plant.care_schedules)
    }

    tasks = []
    for reminder in generate_care_reminders(plants):
        remaining = days_until(reminder.due_date, now)
        tasks.append(Task(
            id=reminder.id,
            plant_id=reminder.plant_id,
            plant_name=reminder.plant_name,
            category=reminder.category,
            due_date=reminder.due_date,
            is_overdue=remaining < 0,
            days_until_due=remaining,
            frequency=frequencies[reminder.id],
        ))
    return tasks


def get_due_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Tasks that are overdue or due today."""
    return [t for t in tasks if t.is_overdue or t.days_until_due == 0]


def get_upcoming_tasks(tasks: Iterable[Task], days_ahead: int = DEFAULT_UPCOMING_DAYS) -> List[Task]:
    """Tasks due after today and within `days_ahead` days."""
    return [t for t in tasks if 0 < t.days_until_due <= days_ahead]


def get_sorted_tasks(tasks: Iterable[Task]) -> List[Task]:
    return _sort_by_due_date(tasks)


def get_due_reminders(reminders: Iterable[CareReminder], now: Optional[datetime] = None) -> List[CareReminder]:
    """Reminders whose due calendar day is today or earlier (time of day ignored)."""
    if now is None:
        now = datetime.now()
    today = now.date()
    return [r for r in reminders if r.due_date.date() <= today]


def get_upcoming_reminders(
    reminders: Iterable[CareReminder],
    now: Optional[datetime] = None,
    days_ahead: int = DEFAULT_UPCOMING_DAYS,
) -> List[CareReminder]:
    """Reminders due after `now` and no later than `days_ahead` days from it."""
    if now is None:
        now = datetime.now()
    horizon = now + timedelta(days=days_ahead)
    return [r for r in reminders if now < r.due_date <= horizon]


def _plural_days(count: int) -> str:
    return f"{count} day{'s' if count != 1 else ''}"


def format_reminder(reminder: CareReminder, now: Optional[datetime] = None) -> str:
    """
    Human-readable status line for a reminder.

    Example:
        >>> format_reminder(reminder)
        'watering is overdue by 3 days'
    """
    if now is None:
        now = datetime.now()
    remaining = days_until(reminder.due_date, now)

    if remaining < 0:
        return f"{reminder.category} is overdue by {_plural_days(abs(remaining))}"
    if remaining == 0:
        return f"{reminder.category} is due today"
    return f"{reminder.category} is due in {_plural_days(remaining)}"


class TaskBoard:
    """
    Holds the latest task generation and its views.

    Nothing is cached beyond the last `update()`; completing a task persists
    through the plant store and leaves the board stale until the caller
    updates it again with the refreshed plants. A board is not thread-safe;
    build one per request.
    """

    def __init__(self, plant_store):
        self._plant_store = plant_store
        self._tasks: List[Task] = []

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    def update(self, plants: Iterable[Plant], now: Optional[datetime] = None) -> List[Task]:
        self._tasks = generate_tasks(plants, now)
        return self.tasks

    @property
    def due_tasks(self) -> List[Task]:
        return get_due_tasks(self._tasks)

    def upcoming_tasks(self, days_ahead: int = DEFAULT_UPCOMING_DAYS) -> List[Task]:
        return get_upcoming_tasks(self._tasks, days_ahead)

    @property
    def sorted_tasks(self) -> List[Task]:
        return get_sorted_tasks(self._tasks)

    def complete_task(self, task: Task, now: Optional[datetime] = None) -> Optional[Plant]:
        """Record the task's care as performed now; returns the updated plant or None."""
        try:
            return self._plant_store.record_care_task(task.plant_id, task.category, now)
        except Exception as e:
            logger.error(f"Error completing task {task.id}: {e}")
            raise
