"""
Photo log for plants.

Photos are metadata records pointing at an image URI supplied by the caller
(camera or gallery); no image bytes pass through here. All photos share one
JSON array in the key-value store.
"""

from __future__ import annotations
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from plant_companion.constants import PHOTOS_STORAGE_KEY
from plant_companion.models import PlantPhoto
from plant_companion.services.storage import KeyValueStore, RecordCollection
from plant_companion.utils.errors import ValidationError

logger = logging.getLogger(__name__)

# id, plant_id and timestamp are fixed once a photo is recorded
UPDATABLE_PHOTO_FIELDS = {"image_uri", "notes", "height", "width"}


class PhotoStore:
    def __init__(self, kv: KeyValueStore):
        self._photos = RecordCollection(kv, PHOTOS_STORAGE_KEY, PlantPhoto)

    def get_plant_photos(self, plant_id: str) -> List[PlantPhoto]:
        """All photos for a plant, newest first."""
        photos = [p for p in self._photos.load() if p.plant_id == plant_id]
        return sorted(photos, key=lambda p: p.timestamp, reverse=True)

    def get_latest_photo(self, plant_id: str) -> Optional[PlantPhoto]:
        photos = self.get_plant_photos(plant_id)
        return photos[0] if photos else None

    def add_photo(
        self,
        plant_id: str,
        image_uri: str,
        notes: Optional[str] = None,
        height: Optional[float] = None,
        width: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> PlantPhoto:
        """
        Record a new photo for a plant.

        Args:
            plant_id: Plant the photo belongs to
            image_uri: Local file reference returned by the image picker
            notes: Optional caption
            height: Optional plant height in cm
            width: Optional plant width in cm
        """
        if not image_uri:
            raise ValidationError("image_uri is required.")

        photo = PlantPhoto(
            id=str(uuid.uuid4()),
            plant_id=plant_id,
            image_uri=image_uri,
            timestamp=now or datetime.now(),
            notes=notes,
            height=height,
            width=width,
        )
        photos = self._photos.load()
        photos.append(photo)
        self._photos.save(photos)
        return photo

    def update_photo(self, photo_id: str, updates: Dict[str, Any]) -> Optional[PlantPhoto]:
        """Update photo metadata; returns None if the photo does not exist."""
        changes = {k: v for k, v in updates.items() if k in UPDATABLE_PHOTO_FIELDS}
        if "image_uri" in changes and not changes["image_uri"]:
            raise ValidationError("image_uri is required.")

        photos = self._photos.load()
        index = next((i for i, p in enumerate(photos) if p.id == photo_id), None)
        if index is None:
            return None

        photos[index] = replace(photos[index], **changes)
        self._photos.save(photos)
        return photos[index]

    def delete_photo(self, photo_id: str) -> bool:
        photos = self._photos.load()
        remaining = [p for p in photos if p.id != photo_id]
        if len(remaining) == len(photos):
            return False
        self._photos.save(remaining)
        return True

    def delete_plant_photos(self, plant_id: str) -> int:
        """Delete every photo of a plant; returns how many were removed."""
        photos = self._photos.load()
        remaining = [p for p in photos if p.plant_id != plant_id]
        removed = len(photos) - len(remaining)
        if removed:
            self._photos.save(remaining)
            logger.info(f"Deleted {removed} photo(s) for plant {plant_id}")
        return removed

    def clear(self) -> None:
        """Remove every stored photo (development only)."""
        self._photos.clear()
