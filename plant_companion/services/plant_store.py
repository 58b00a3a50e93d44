"""
Plant records and their care schedules.

Plants live as one JSON array in the key-value store. Every mutation reads
the whole collection, replaces the affected record and writes the whole
collection back; with concurrent writers the last write wins.
"""

from __future__ import annotations
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from plant_companion.constants import PLANTS_STORAGE_KEY
from plant_companion.models import CareSchedule, Plant, is_care_category
from plant_companion.services.care_calculations import next_due_date, validate_frequency
from plant_companion.services.storage import KeyValueStore, RecordCollection
from plant_companion.utils.cache import CollectionCache
from plant_companion.utils.errors import ValidationError

logger = logging.getLogger(__name__)

# Fields callers may change through update_plant()
UPDATABLE_FIELDS = {"name", "species", "location", "notes", "image_uri", "care_schedules"}


def validate_care_schedules(schedules: Iterable[CareSchedule]) -> List[CareSchedule]:
    """Check categories are known and unique per plant and frequencies are >= 1."""
    schedules = list(schedules)
    seen = set()
    for schedule in schedules:
        if not is_care_category(schedule.category):
            raise ValidationError(f"Unknown care category: {schedule.category}")
        if schedule.category in seen:
            raise ValidationError(f"Duplicate care category: {schedule.category}")
        seen.add(schedule.category)
        validate_frequency(schedule.frequency)
    return schedules


class PlantStore:
    """
    CRUD for plants plus care-task recording.

    Args:
        kv: Key-value storage backend
        cache: Cache owned by the caller; shared across requests by the app factory
    """

    def __init__(self, kv: KeyValueStore, cache: Optional[CollectionCache] = None):
        self._plants = RecordCollection(kv, PLANTS_STORAGE_KEY, Plant, cache)

    def get_all_plants(self) -> List[Plant]:
        return self._plants.load()

    def get_plant(self, plant_id: str) -> Optional[Plant]:
        return next((p for p in self.get_all_plants() if p.id == plant_id), None)

    def create_plant(self, data: Dict[str, Any], now: Optional[datetime] = None) -> Plant:
        """
        Create and persist a plant.

        Args:
            data: name (required), species, location, notes, image_uri, care_schedules
            now: Creation timestamp (defaults to now)
        """
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Plant name is required.")

        timestamp = now or datetime.now()
        plant = Plant(
            id=str(uuid.uuid4()),
            name=name,
            species=data.get("species"),
            location=data.get("location"),
            notes=data.get("notes"),
            image_uri=data.get("image_uri"),
            created_at=timestamp,
            updated_at=timestamp,
            care_schedules=validate_care_schedules(data.get("care_schedules") or []),
        )

        plants = self.get_all_plants()
        plants.append(plant)
        self._plants.save(plants)
        logger.info(f"Created plant {plant.id} ({plant.name})")
        return plant

    def update_plant(self, plant_id: str, updates: Dict[str, Any], now: Optional[datetime] = None) -> Optional[Plant]:
        """
        Apply field updates to a plant; returns None if it does not exist.

        `id` and `created_at` are never changed; `updated_at` is bumped.
        A `care_schedules` update replaces the whole schedule list.
        """
        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Plant name is required.")
        if "care_schedules" in changes:
            changes["care_schedules"] = validate_care_schedules(changes["care_schedules"] or [])

        plants = self.get_all_plants()
        index = next((i for i, p in enumerate(plants) if p.id == plant_id), None)
        if index is None:
            return None

        plants[index] = replace(plants[index], **changes, updated_at=now or datetime.now())
        self._plants.save(plants)
        return plants[index]

    def delete_plant(self, plant_id: str) -> bool:
        plants = self.get_all_plants()
        remaining = [p for p in plants if p.id != plant_id]
        if len(remaining) == len(plants):
            return False

        self._plants.save(remaining)
        logger.info(f"Deleted plant {plant_id}")
        return True

    def record_care_task(self, plant_id: str, category: str, now: Optional[datetime] = None) -> Optional[Plant]:
        """
        Mark a care category as performed now.

        Returns the updated plant, or None if the plant does not exist. A
        category the plant has no schedule for leaves the schedules unchanged.
        """
        plant = self.get_plant(plant_id)
        if plant is None:
            return None

        performed_at = now or datetime.now()
        schedules = [
            replace(s, last_performed=performed_at) if s.category == category else s
            for s in plant.care_schedules
        ]
        return self.update_plant(plant_id, {"care_schedules": schedules}, now=performed_at)

    def get_next_care_date(self, plant_id: str, category: str) -> Optional[datetime]:
        """Next due date for a plant's category; None if the plant or schedule is missing."""
        plant = self.get_plant(plant_id)
        if plant is None:
            return None
        schedule = plant.get_schedule(category)
        if schedule is None:
            return None
        return next_due_date(schedule, plant.created_at)

    def clear(self) -> None:
        """Remove every stored plant (development only)."""
        self._plants.clear()
        logger.warning("All plants cleared from storage")
