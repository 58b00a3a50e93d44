"""
Unit tests for task/reminder generation (plant_companion/services/tasks.py).
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from plant_companion.models import CareReminder, CareSchedule
from plant_companion.services import tasks as task_service
from tests.helpers import DAY0, make_plant


@pytest.fixture
def garden():
    """Three plants with staggered schedules."""
    return [
        make_plant("p1", "Monstera", schedules=[
            CareSchedule(category="watering", frequency=7),
            CareSchedule(category="fertilization", frequency=30),
        ]),
        make_plant("p2", "Fern", created_at=DAY0 + timedelta(days=2), schedules=[
            CareSchedule(category="watering", frequency=3),
        ]),
        make_plant("p3", "Cactus", schedules=[
            CareSchedule(category="watering", frequency=21, last_performed=DAY0 - timedelta(days=20)),
        ]),
    ]


class TestGenerateCareReminders:
    def test_one_reminder_per_plant_schedule_pair(self, garden):
        reminders = task_service.generate_care_reminders(garden)
        assert {r.id for r in reminders} == {
            "p1-watering", "p1-fertilization", "p2-watering", "p3-watering",
        }

    def test_sorted_by_due_date(self, garden):
        reminders = task_service.generate_care_reminders(garden)
        due_dates = [r.due_date for r in reminders]
        assert due_dates == sorted(due_dates)
        assert reminders[0].id == "p3-watering"  # due DAY0 + 1

    def test_plant_without_schedules_yields_nothing(self):
        assert task_service.generate_care_reminders([make_plant()]) == []


class TestGenerateTasks:
    def test_day_ten_scenario(self, watering_weekly):
        plant = make_plant(schedules=[watering_weekly])

        [task] = task_service.generate_tasks([plant], DAY0 + timedelta(days=10))

        assert task.due_date == DAY0 + timedelta(days=7)
        assert task.days_until_due == -3
        assert task.is_overdue is True
        assert task.frequency == 7
        assert task.plant_name == "Monstera"

    def test_overdue_only_after_a_full_day(self, watering_weekly):
        plant = make_plant(schedules=[watering_weekly])
        due = DAY0 + timedelta(days=7)

        [later_same_day] = task_service.generate_tasks([plant], due + timedelta(hours=3))
        [next_day] = task_service.generate_tasks([plant], due + timedelta(days=1))

        assert later_same_day.days_until_due == 0
        assert later_same_day.is_overdue is False
        assert next_day.days_until_due == -1
        assert next_day.is_overdue is True

    def test_generation_is_idempotent_for_fixed_now(self, garden):
        now = DAY0 + timedelta(days=4)
        assert task_service.generate_tasks(garden, now) == task_service.generate_tasks(garden, now)

    def test_sorted_non_decreasing(self, garden):
        tasks = task_service.generate_tasks(garden, DAY0)
        assert all(a.due_date <= b.due_date for a, b in zip(tasks, tasks[1:]))

    def test_deleted_plant_tasks_disappear(self, garden):
        now = DAY0 + timedelta(days=4)
        remaining = [p for p in garden if p.id != "p1"]
        tasks = task_service.generate_tasks(remaining, now)
        assert not any(t.plant_id == "p1" for t in tasks)
        assert len(tasks) == 2


class TestTaskViews:
    def test_due_view_includes_overdue_and_today(self, garden):
        # p3 due DAY0+1 (overdue), p2 due DAY0+5 (today), p1 watering due DAY0+7
        now = DAY0 + timedelta(days=5, hours=1)
        due = task_service.get_due_tasks(task_service.generate_tasks(garden, now))
        assert [t.id for t in due] == ["p3-watering", "p2-watering"]

    def test_upcoming_view_excludes_today_and_beyond_horizon(self, garden):
        now = DAY0 + timedelta(days=5, hours=1)
        tasks = task_service.generate_tasks(garden, now)

        assert [t.id for t in task_service.get_upcoming_tasks(tasks)] == ["p1-watering"]
        assert [t.id for t in task_service.get_upcoming_tasks(tasks, days_ahead=30)] == [
            "p1-watering", "p1-fertilization",
        ]

    def test_sorted_view_is_stable_for_ties(self):
        plants = [
            make_plant("a", "A", schedules=[CareSchedule(category="watering", frequency=7)]),
            make_plant("b", "B", schedules=[CareSchedule(category="watering", frequency=7)]),
        ]
        tasks = task_service.generate_tasks(plants, DAY0)
        assert [t.plant_id for t in task_service.get_sorted_tasks(reversed(tasks))] == ["b", "a"]


class TestReminderViews:
    def _reminder(self, due):
        return CareReminder(id="p1-watering", plant_id="p1", plant_name="Monstera",
                            category="watering", due_date=due)

    def test_due_reminders_compare_calendar_days(self):
        now = datetime(2024, 3, 10, 8, 0)
        later_today = self._reminder(datetime(2024, 3, 10, 23, 0))
        tomorrow = self._reminder(datetime(2024, 3, 11, 0, 30))

        assert task_service.get_due_reminders([later_today, tomorrow], now) == [later_today]

    def test_upcoming_reminders_window(self):
        now = datetime(2024, 3, 10, 8, 0)
        past = self._reminder(now - timedelta(minutes=1))
        inside = self._reminder(now + timedelta(days=7))
        outside = self._reminder(now + timedelta(days=7, seconds=1))

        assert task_service.get_upcoming_reminders([past, inside, outside], now) == [inside]

    @pytest.mark.parametrize("offset, expected", [
        (timedelta(days=-3), "watering is overdue by 3 days"),
        (timedelta(days=-1), "watering is overdue by 1 day"),
        (timedelta(hours=-2), "watering is due today"),
        (timedelta(hours=2), "watering is due in 1 day"),
        (timedelta(days=4), "watering is due in 4 days"),
    ])
    def test_format_reminder(self, offset, expected):
        now = datetime(2024, 3, 10, 8, 0)
        assert task_service.format_reminder(self._reminder(now + offset), now) == expected


class TestReminderId:
    def test_round_trip_with_uuid_plant_id(self):
        plant_id = "550e8400-e29b-41d4-a716-446655440000"
        task_id = task_service.reminder_id(plant_id, "repotting")
        assert task_service.split_reminder_id(task_id) == (plant_id, "repotting")

    @pytest.mark.parametrize("task_id", ["watering", "-watering", "p1-"])
    def test_malformed(self, task_id):
        assert task_service.split_reminder_id(task_id) == (None, None)


class TestTaskBoard:
    def test_views_follow_latest_update(self, garden):
        board = task_service.TaskBoard(plant_store=MagicMock())
        board.update(garden, DAY0 + timedelta(days=5, hours=1))
        assert len(board.tasks) == 4
        assert [t.id for t in board.due_tasks] == ["p3-watering", "p2-watering"]

        board.update(garden[:1], DAY0)
        assert {t.plant_id for t in board.sorted_tasks} == {"p1"}
        assert board.due_tasks == []

    def test_complete_task_records_care_and_does_not_refresh(self, garden):
        store = MagicMock()
        board = task_service.TaskBoard(plant_store=store)
        now = DAY0 + timedelta(days=10)
        board.update(garden, now)
        task = board.due_tasks[0]

        board.complete_task(task, now)

        store.record_care_task.assert_called_once_with(task.plant_id, task.category, now)
        # Still the old generation until the caller updates again
        assert task in board.due_tasks

    def test_complete_task_propagates_errors(self, garden):
        store = MagicMock()
        store.record_care_task.side_effect = RuntimeError("disk full")
        board = task_service.TaskBoard(plant_store=store)
        board.update(garden, DAY0)

        with pytest.raises(RuntimeError):
            board.complete_task(board.tasks[0])

    def test_boards_keep_separate_generations(self, garden):
        store = MagicMock()
        first = task_service.TaskBoard(plant_store=store)
        second = task_service.TaskBoard(plant_store=store)

        first.update(garden[:1], DAY0)
        second.update(garden[1:], DAY0)

        assert {t.plant_id for t in first.sorted_tasks} == {"p1"}
        assert {t.plant_id for t in second.sorted_tasks} == {"p2", "p3"}
