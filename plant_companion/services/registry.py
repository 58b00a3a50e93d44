"""
Service wiring for the app factory.

Builds the storage, cache and notification collaborators once per app and
publishes them as a CompanionServices bundle in `app.extensions`, so routes
and CLI commands receive the same instances and tests can swap any of them.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from flask import Flask, current_app

from plant_companion.services.notifications import Notifier, ReminderScheduler
from plant_companion.services.photos import PhotoStore
from plant_companion.services.plant_store import PlantStore
from plant_companion.services.storage import KeyValueStore
from plant_companion.utils.cache import CollectionCache

logger = logging.getLogger(__name__)

EXTENSION_KEY = "plant_companion"


@dataclass
class CompanionServices:
    kv: KeyValueStore
    cache: CollectionCache
    plants: PlantStore
    photos: PhotoStore
    reminders: ReminderScheduler

    def refresh_reminders(self) -> Optional[Dict[str, int]]:
        """
        Reschedule notifications from the current plant list.

        Failures are logged and swallowed; a stale reminder set must never
        fail the request that changed the plants.
        """
        try:
            return self.reminders.schedule_reminders(self.plants.get_all_plants())
        except Exception as e:
            logger.error(f"Error scheduling reminders: {e}")
            return None


def build_services(kv: KeyValueStore, notifier: Notifier, cache_ttl_seconds: int = 300) -> CompanionServices:
    cache = CollectionCache(ttl_seconds=cache_ttl_seconds)
    plants = PlantStore(kv, cache)
    return CompanionServices(
        kv=kv,
        cache=cache,
        plants=plants,
        photos=PhotoStore(kv),
        reminders=ReminderScheduler(kv, notifier),
    )


def init_services(app: Flask, services: CompanionServices) -> None:
    app.extensions[EXTENSION_KEY] = services


def get_services(app: Optional[Flask] = None) -> CompanionServices:
    """Services bundle for the given app (defaults to the current app)."""
    return (app or current_app).extensions[EXTENSION_KEY]
