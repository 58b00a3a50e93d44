"""
Care reminder notifications.

Turns the current task list into daily notifications for tasks coming due
within the user's lead time. The notifier collaborator owns delivery; the
default one registers APScheduler cron jobs that log the notification when
they fire.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from plant_companion.constants import CARE_CATEGORY_NAMES, NOTIFICATION_PREFERENCES_KEY
from plant_companion.models import Plant, Task
from plant_companion.services.storage import KeyValueStore
from plant_companion.services.tasks import generate_tasks
from plant_companion.utils.errors import StorageWriteError
from plant_companion.utils.validation import parse_reminder_time

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {
    "enabled": True,
    "remind_before_days": 1,  # Remind this many days before the due date
    "reminder_time": "08:00",  # Time of day to send reminders (HH:MM)
}

REMINDER_JOB_PREFIX = "care-reminder:"


@dataclass(frozen=True)
class ScheduledNotification:
    title: str
    body: str
    hour: int
    minute: int
    data: Dict[str, Any] = field(default_factory=dict)


class Notifier:
    """Interface for the platform notification collaborator."""

    def schedule(self, notification: ScheduledNotification) -> str:
        raise NotImplementedError

    def cancel_all(self) -> None:
        raise NotImplementedError


def deliver_notification(notification: ScheduledNotification) -> None:
    """Default delivery: write the notification to the log."""
    logger.info(f"[Notification] {notification.title}: {notification.body}")


class SchedulerNotifier(Notifier):
    """
    Registers each notification as a daily APScheduler cron job.

    Only jobs created here (ids prefixed with REMINDER_JOB_PREFIX) are
    cancelled, so other jobs sharing the scheduler are left alone.
    """

    def __init__(self, scheduler, deliver: Optional[Callable[[ScheduledNotification], None]] = None):
        self.scheduler = scheduler
        self.deliver = deliver or deliver_notification

    def schedule(self, notification: ScheduledNotification) -> str:
        job_id = f"{REMINDER_JOB_PREFIX}{notification.data.get('taskId', notification.title)}"
        self.scheduler.add_job(
            func=self.deliver,
            trigger="cron",
            hour=notification.hour,
            minute=notification.minute,
            kwargs={"notification": notification},
            id=job_id,
            name=notification.title,
            replace_existing=True,
        )
        return job_id

    def cancel_all(self) -> None:
        for job in self.scheduler.get_jobs():
            if job.id.startswith(REMINDER_JOB_PREFIX):
                self.scheduler.remove_job(job.id)


def build_notification(task: Task, hour: int, minute: int) -> ScheduledNotification:
    category_name = CARE_CATEGORY_NAMES.get(task.category, task.category)
    return ScheduledNotification(
        title=f"Time to {category_name}!",
        body=f"{task.plant_name} needs {task.category.lower()}.",
        hour=hour,
        minute=minute,
        data={
            "plantId": task.plant_id,
            "taskId": task.id,
            "category": task.category,
        },
    )


class ReminderScheduler:
    """
    Schedules notifications for upcoming care tasks.

    Args:
        kv: Key-value storage for notification preferences
        notifier: Platform notification collaborator
    """

    def __init__(self, kv: KeyValueStore, notifier: Notifier):
        self.kv = kv
        self.notifier = notifier

    def get_preferences(self) -> Dict[str, Any]:
        """Stored preferences merged over the defaults; defaults if unreadable."""
        try:
            raw = self.kv.get_item(NOTIFICATION_PREFERENCES_KEY)
            stored = json.loads(raw) if raw else {}
        except Exception as e:
            logger.error(f"Error loading notification preferences: {e}")
            stored = {}
        if not isinstance(stored, dict):
            logger.warning(f"Ignoring malformed notification preferences: {type(stored).__name__}")
            stored = {}
        return {**DEFAULT_PREFERENCES, **stored}

    def save_preferences(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Merge validated updates into the stored preferences and persist them."""
        preferences = {**self.get_preferences(), **updates}
        try:
            self.kv.set_item(NOTIFICATION_PREFERENCES_KEY, json.dumps(preferences))
        except Exception as e:
            logger.error(f"Error saving notification preferences: {e}")
            raise StorageWriteError(f"Failed to save notification preferences: {e}") from e
        return preferences

    def select_tasks(self, tasks: Iterable[Task], remind_before_days: int) -> List[Task]:
        """Tasks not yet overdue and due within the lead time."""
        return [t for t in tasks if not t.is_overdue and t.days_until_due <= remind_before_days]

    def schedule_reminders(self, plants: Iterable[Plant], now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Replace all scheduled reminders with ones for the current plant set.

        A failure to schedule one notification is logged and counted; the
        remaining notifications are still scheduled.

        Returns:
            Dictionary with counts (eligible, scheduled, failed)
        """
        stats = {"eligible": 0, "scheduled": 0, "failed": 0}

        preferences = self.get_preferences()
        if not preferences.get("enabled", True):
            logger.info("Notifications disabled; skipping reminder scheduling")
            return stats

        reminder_time, error = parse_reminder_time(preferences.get("reminder_time"))
        if error:
            logger.warning(f"Invalid stored reminder time {preferences.get('reminder_time')!r}; using default")
            reminder_time, _ = parse_reminder_time(DEFAULT_PREFERENCES["reminder_time"])
        hour, minute = reminder_time

        tasks = self.select_tasks(
            generate_tasks(plants, now),
            preferences.get("remind_before_days", DEFAULT_PREFERENCES["remind_before_days"]),
        )
        stats["eligible"] = len(tasks)

        self.notifier.cancel_all()

        for task in tasks:
            try:
                self.notifier.schedule(build_notification(task, hour, minute))
                stats["scheduled"] += 1
            except Exception as e:
                stats["failed"] += 1
                logger.warning(f"Failed to schedule reminder for {task.id}: {e}")

        logger.info(
            f"Scheduled {stats['scheduled']} care reminder(s) "
            f"({stats['failed']} failed) at {hour:02d}:{minute:02d}"
        )
        return stats
