"""
Plant, care schedule, photo and task records.

Plants, schedules and photos are persisted as JSON through the key-value
store; reminders and tasks are derived views that are never stored. Dates are
kept as naive local datetimes and serialized as ISO-8601 strings.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from plant_companion.constants import CARE_CATEGORIES


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or pass through a datetime) to a naive local datetime.

    Offset-aware values (including a trailing "Z") are converted to local time
    so they compare cleanly with the naive datetimes used everywhere else.
    Empty values return None.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class CareSchedule:
    """A recurring care task attached to a plant."""
    category: str
    frequency: int  # days
    last_performed: Optional[datetime] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "frequency": self.frequency,
            "last_performed": _format_datetime(self.last_performed),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CareSchedule":
        return cls(
            category=data["category"],
            frequency=data["frequency"],
            last_performed=parse_datetime(data.get("last_performed")),
            notes=data.get("notes"),
        )


@dataclass
class Plant:
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    species: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    image_uri: Optional[str] = None
    care_schedules: List[CareSchedule] = field(default_factory=list)

    def get_schedule(self, category: str) -> Optional[CareSchedule]:
        """Return the first schedule for a category, or None if the plant has none."""
        return next((s for s in self.care_schedules if s.category == category), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "species": self.species,
            "location": self.location,
            "notes": self.notes,
            "image_uri": self.image_uri,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
            "care_schedules": [s.to_dict() for s in self.care_schedules],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Plant":
        """
        Rebuild a plant from its stored JSON form.

        Missing timestamps fall back to now so that legacy records without
        them still produce a due date.
        """
        now = datetime.now()
        return cls(
            id=data["id"],
            name=data["name"],
            species=data.get("species"),
            location=data.get("location"),
            notes=data.get("notes"),
            image_uri=data.get("image_uri"),
            created_at=parse_datetime(data.get("created_at")) or now,
            updated_at=parse_datetime(data.get("updated_at")) or now,
            care_schedules=[
                CareSchedule.from_dict(s) for s in (data.get("care_schedules") or [])
            ],
        )


@dataclass
class PlantPhoto:
    id: str
    plant_id: str
    image_uri: str
    timestamp: datetime
    notes: Optional[str] = None
    height: Optional[float] = None  # cm
    width: Optional[float] = None  # cm

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "plant_id": self.plant_id,
            "image_uri": self.image_uri,
            "timestamp": _format_datetime(self.timestamp),
            "notes": self.notes,
            "height": self.height,
            "width": self.width,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlantPhoto":
        return cls(
            id=data["id"],
            plant_id=data["plant_id"],
            image_uri=data["image_uri"],
            timestamp=parse_datetime(data.get("timestamp")) or datetime.now(),
            notes=data.get("notes"),
            height=data.get("height"),
            width=data.get("width"),
        )


@dataclass(frozen=True)
class CareReminder:
    """Next occurrence of one schedule on one plant."""
    id: str
    plant_id: str
    plant_name: str
    category: str
    due_date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "plant_id": self.plant_id,
            "plant_name": self.plant_name,
            "category": self.category,
            "due_date": self.due_date.isoformat(),
        }


@dataclass(frozen=True)
class Task:
    """A reminder classified against an evaluation instant."""
    id: str
    plant_id: str
    plant_name: str
    category: str
    due_date: datetime
    is_overdue: bool
    days_until_due: int
    frequency: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "plant_id": self.plant_id,
            "plant_name": self.plant_name,
            "category": self.category,
            "due_date": self.due_date.isoformat(),
            "is_overdue": self.is_overdue,
            "days_until_due": self.days_until_due,
            "frequency": self.frequency,
        }


@dataclass(frozen=True)
class CareTaskStatus:
    category: str
    days_until_due: int
    is_overdue: bool
    days_overdue: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "days_until_due": self.days_until_due,
            "is_overdue": self.is_overdue,
            "days_overdue": self.days_overdue,
        }


def is_care_category(value: Any) -> bool:
    return isinstance(value, str) and value in CARE_CATEGORIES
