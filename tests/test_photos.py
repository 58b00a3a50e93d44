"""
Unit tests for the photo log (plant_companion/services/photos.py).
"""

from datetime import timedelta

import pytest

from plant_companion.services.photos import PhotoStore
from plant_companion.utils.errors import ValidationError
from tests.helpers import DAY0


@pytest.fixture
def photos(kv):
    return PhotoStore(kv)


def test_plant_photos_newest_first(photos):
    first = photos.add_photo("p1", "file:///a.jpg", now=DAY0)
    second = photos.add_photo("p1", "file:///b.jpg", notes="new leaf", height=40, now=DAY0 + timedelta(days=3))
    photos.add_photo("p2", "file:///c.jpg", now=DAY0 + timedelta(days=5))

    assert [p.id for p in photos.get_plant_photos("p1")] == [second.id, first.id]
    assert photos.get_latest_photo("p1").notes == "new leaf"


def test_latest_photo_none(photos):
    assert photos.get_latest_photo("p1") is None


def test_image_uri_required(photos):
    with pytest.raises(ValidationError):
        photos.add_photo("p1", "")


def test_update_keeps_id_and_timestamp(photos):
    photo = photos.add_photo("p1", "file:///a.jpg", now=DAY0)

    updated = photos.update_photo(photo.id, {"notes": "repotted", "width": 12.5, "timestamp": None, "id": "x"})

    assert updated.id == photo.id
    assert updated.timestamp == DAY0
    assert updated.notes == "repotted"
    assert updated.width == 12.5
    assert photos.get_plant_photos("p1")[0].notes == "repotted"


def test_update_missing(photos):
    assert photos.update_photo("missing", {"notes": "x"}) is None


def test_delete_photo(photos):
    photo = photos.add_photo("p1", "file:///a.jpg")
    assert photos.delete_photo(photo.id) is True
    assert photos.delete_photo(photo.id) is False
    assert photos.get_plant_photos("p1") == []


def test_delete_plant_photos(photos):
    photos.add_photo("p1", "file:///a.jpg")
    photos.add_photo("p1", "file:///b.jpg")
    keep = photos.add_photo("p2", "file:///c.jpg")

    assert photos.delete_plant_photos("p1") == 2
    assert photos.get_plant_photos("p1") == []
    assert photos.get_plant_photos("p2") == [keep]
