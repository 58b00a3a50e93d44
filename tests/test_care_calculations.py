"""
Unit tests for due-date arithmetic (plant_companion/services/care_calculations.py).
"""

from datetime import datetime, timedelta

import pytest

from plant_companion.models import CareSchedule
from plant_companion.services import care_calculations
from plant_companion.utils.errors import ValidationError
from tests.helpers import DAY0, make_plant


class TestNextDueDate:
    def test_never_performed_uses_creation_date(self):
        schedule = CareSchedule(category="watering", frequency=7)
        assert care_calculations.next_due_date(schedule, DAY0) == DAY0 + timedelta(days=7)

    def test_last_performed_takes_precedence_over_creation_date(self):
        performed = datetime(2024, 5, 20, 18, 0)
        schedule = CareSchedule(category="watering", frequency=3, last_performed=performed)

        assert care_calculations.next_due_date(schedule, DAY0) == datetime(2024, 5, 23, 18, 0)
        # Independent of the creation date
        assert care_calculations.next_due_date(schedule, datetime(2020, 1, 1)) == datetime(2024, 5, 23, 18, 0)

    def test_calendar_rollover_keeps_time_of_day(self):
        schedule = CareSchedule(category="fertilization", frequency=30)
        assert care_calculations.next_due_date(schedule, datetime(2024, 2, 15, 7, 45)) == datetime(2024, 3, 16, 7, 45)

    @pytest.mark.parametrize("frequency", [0, -3, 1.5, "7", True, None])
    def test_invalid_frequency_is_validation_error(self, frequency):
        schedule = CareSchedule(category="watering", frequency=frequency)
        with pytest.raises(ValidationError):
            care_calculations.next_due_date(schedule, DAY0)


class TestGetNextDueDate:
    def test_unscheduled_category_returns_none(self, watering_weekly):
        plant = make_plant(schedules=[watering_weekly])
        assert care_calculations.get_next_due_date(plant, "pruning") is None

    def test_scheduled_category(self, watering_weekly):
        plant = make_plant(schedules=[watering_weekly])
        assert care_calculations.get_next_due_date(plant, "watering") == DAY0 + timedelta(days=7)


class TestDaysUntil:
    def test_rounds_up_partial_days(self):
        assert care_calculations.days_until(DAY0 + timedelta(hours=1), DAY0) == 1

    def test_less_than_a_day_past_is_zero(self):
        assert care_calculations.days_until(DAY0 - timedelta(hours=5), DAY0) == 0

    def test_exact_days_past(self):
        assert care_calculations.days_until(DAY0 - timedelta(days=3), DAY0) == -3


class TestOverdueStatus:
    def test_day_ten_scenario(self, watering_weekly):
        plant = make_plant(schedules=[watering_weekly])
        now = DAY0 + timedelta(days=10)

        [status] = care_calculations.get_overdue_tasks(plant, now)

        assert status.category == "watering"
        assert status.days_until_due == -3
        assert status.is_overdue is True
        assert status.days_overdue == 3

    def test_one_status_per_schedule(self, watering_weekly):
        plant = make_plant(schedules=[
            watering_weekly,
            CareSchedule(category="repotting", frequency=365),
        ])
        statuses = care_calculations.get_overdue_tasks(plant, DAY0 + timedelta(days=1))

        assert [s.category for s in statuses] == ["watering", "repotting"]
        assert not any(s.is_overdue for s in statuses)

    def test_max_days_overdue(self, watering_weekly):
        plant = make_plant(schedules=[
            watering_weekly,
            CareSchedule(category="pruning", frequency=2),
            CareSchedule(category="repotting", frequency=365),
        ])
        # watering overdue 3 days, pruning overdue 8 days
        assert care_calculations.get_max_days_overdue(plant, DAY0 + timedelta(days=10)) == 8

    def test_max_days_overdue_without_schedules(self):
        assert care_calculations.get_max_days_overdue(make_plant(), DAY0) == 0

    def test_max_days_overdue_when_nothing_overdue(self, watering_weekly):
        plant = make_plant(schedules=[watering_weekly])
        assert care_calculations.get_max_days_overdue(plant, DAY0) == 0
