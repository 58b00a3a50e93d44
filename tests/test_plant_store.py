"""
Unit tests for the plant store (plant_companion/services/plant_store.py).
"""

import json
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from plant_companion.constants import PLANTS_STORAGE_KEY
from plant_companion.models import CareSchedule
from plant_companion.services.plant_store import PlantStore
from plant_companion.services.storage import InMemoryKeyValueStore
from plant_companion.services.tasks import generate_tasks, get_due_tasks
from plant_companion.utils.cache import CollectionCache
from plant_companion.utils.errors import StorageReadError, StorageWriteError, ValidationError
from tests.helpers import DAY0


@pytest.fixture
def cache():
    return CollectionCache()


@pytest.fixture
def store(kv, cache):
    return PlantStore(kv, cache)


def _create(store, **overrides):
    data = {
        "name": "Monstera",
        "species": "Monstera deliciosa",
        "care_schedules": [CareSchedule(category="watering", frequency=7)],
    }
    data.update(overrides)
    return store.create_plant(data, now=DAY0)


class TestCreatePlant:
    def test_persists_json_with_iso_dates(self, store, kv):
        plant = _create(store)

        stored = json.loads(kv.get_item(PLANTS_STORAGE_KEY))
        assert stored[0]["id"] == plant.id
        assert stored[0]["created_at"] == DAY0.isoformat()
        assert stored[0]["care_schedules"][0] == {
            "category": "watering", "frequency": 7, "last_performed": None, "notes": None,
        }

    def test_dates_are_reparsed_on_read(self, kv):
        plant = _create(PlantStore(kv))

        loaded = PlantStore(kv).get_plant(plant.id)

        assert isinstance(loaded.created_at, datetime)
        assert loaded.created_at == DAY0
        assert loaded.care_schedules == plant.care_schedules

    def test_name_required(self, store):
        with pytest.raises(ValidationError):
            _create(store, name="   ")

    def test_duplicate_category_rejected(self, store):
        with pytest.raises(ValidationError):
            _create(store, care_schedules=[
                CareSchedule(category="watering", frequency=7),
                CareSchedule(category="watering", frequency=3),
            ])

    def test_zero_frequency_rejected(self, store):
        with pytest.raises(ValidationError):
            _create(store, care_schedules=[CareSchedule(category="pruning", frequency=0)])

    def test_unknown_category_rejected(self, store):
        with pytest.raises(ValidationError):
            _create(store, care_schedules=[CareSchedule(category="misting", frequency=2)])


class TestUpdateAndDelete:
    def test_update_preserves_identity_and_bumps_updated_at(self, store):
        plant = _create(store)
        later = DAY0 + timedelta(days=1)

        updated = store.update_plant(plant.id, {"name": "Big Monstera", "id": "other", "created_at": later}, now=later)

        assert updated.id == plant.id
        assert updated.name == "Big Monstera"
        assert updated.created_at == DAY0
        assert updated.updated_at == later

    def test_update_replaces_whole_schedule_list(self, store):
        plant = _create(store)
        updated = store.update_plant(plant.id, {
            "care_schedules": [CareSchedule(category="repotting", frequency=365)],
        })
        assert [s.category for s in updated.care_schedules] == ["repotting"]

    def test_update_missing_plant(self, store):
        assert store.update_plant("missing", {"name": "x"}) is None

    def test_delete(self, store):
        plant = _create(store)
        assert store.delete_plant(plant.id) is True
        assert store.get_all_plants() == []
        assert store.delete_plant(plant.id) is False


class TestRecordCareTask:
    def test_sets_last_performed_and_moves_due_date(self, store):
        plant = _create(store)
        now = DAY0 + timedelta(days=10)
        assert [t.id for t in get_due_tasks(generate_tasks(store.get_all_plants(), now))] == [f"{plant.id}-watering"]

        updated = store.record_care_task(plant.id, "watering", now=now)

        assert updated.get_schedule("watering").last_performed == now
        assert store.get_next_care_date(plant.id, "watering") == now + timedelta(days=7)
        assert get_due_tasks(generate_tasks(store.get_all_plants(), now)) == []

    def test_other_categories_untouched(self, store):
        plant = _create(store, care_schedules=[
            CareSchedule(category="watering", frequency=7),
            CareSchedule(category="pruning", frequency=60),
        ])
        updated = store.record_care_task(plant.id, "watering", now=DAY0 + timedelta(days=1))
        assert updated.get_schedule("pruning").last_performed is None

    def test_missing_plant(self, store):
        assert store.record_care_task("missing", "watering") is None

    def test_next_care_date_unscheduled(self, store):
        plant = _create(store)
        assert store.get_next_care_date(plant.id, "pruning") is None
        assert store.get_next_care_date("missing", "watering") is None


class TestCaching:
    def test_reads_are_served_from_cache(self, cache):
        kv = MagicMock(wraps=InMemoryKeyValueStore())
        store = PlantStore(kv, cache)
        _create(store)
        kv.get_item.reset_mock()

        store.get_all_plants()
        store.get_all_plants()

        kv.get_item.assert_not_called()

    def test_write_failure_invalidates_cache(self, kv, cache):
        store = PlantStore(kv, cache)
        plant = _create(store)

        original_set = kv.set_item
        kv.set_item = MagicMock(side_effect=OSError("disk full"))
        with pytest.raises(StorageWriteError):
            store.update_plant(plant.id, {"name": "Renamed"})
        assert PLANTS_STORAGE_KEY not in cache

        kv.set_item = original_set
        # Next read goes back to persisted state, not the failed in-memory edit
        assert store.get_plant(plant.id).name == "Monstera"

    def test_corrupt_storage_raises_read_error(self, kv, cache):
        kv.set_item(PLANTS_STORAGE_KEY, "{not json")
        with pytest.raises(StorageReadError):
            PlantStore(kv, cache).get_all_plants()
        assert PLANTS_STORAGE_KEY not in cache

    def test_clear(self, store, cache):
        _create(store)
        store.clear()
        assert store.get_all_plants() == []
