"""
Builders and fakes shared by the test modules.
"""

from datetime import datetime

from plant_companion.models import Plant
from plant_companion.services.notifications import Notifier

DAY0 = datetime(2024, 3, 1, 9, 30)

AJAX_HEADERS = {"X-Requested-With": "XMLHttpRequest"}


class RecordingNotifier(Notifier):
    """Keeps scheduled notifications in a list; can be told to fail for some tasks."""

    def __init__(self, fail_for=()):
        self.scheduled = []
        self.cancel_calls = 0
        self.fail_for = set(fail_for)

    def schedule(self, notification):
        if notification.data.get("taskId") in self.fail_for:
            raise RuntimeError("platform refused notification")
        self.scheduled.append(notification)
        return notification.data["taskId"]

    def cancel_all(self):
        self.cancel_calls += 1
        self.scheduled = []


def make_plant(plant_id="p1", name="Monstera", created_at=DAY0, schedules=None):
    return Plant(
        id=plant_id,
        name=name,
        created_at=created_at,
        updated_at=created_at,
        care_schedules=schedules or [],
    )
