"""
Shared fixtures: in-memory storage, a recording notifier and a test app.
"""

import pytest

from plant_companion import create_app
from plant_companion.models import CareSchedule
from plant_companion.services.registry import build_services
from plant_companion.services.storage import InMemoryKeyValueStore
from tests.helpers import RecordingNotifier


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def services(kv, notifier):
    return build_services(kv, notifier)


@pytest.fixture
def app(monkeypatch, services):
    monkeypatch.setenv("APP_CONFIG", "plant_companion.config.TestConfig")
    return create_app(services=services)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def watering_weekly():
    return CareSchedule(category="watering", frequency=7)
