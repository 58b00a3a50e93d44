"""
Centralized configuration for all environments.

Select a config by setting:
  APP_CONFIG=plant_companion.config.DevConfig      # local dev
  APP_CONFIG=plant_companion.config.ProdConfig     # production (default if unset)
  APP_CONFIG=plant_companion.config.TestConfig     # pytest

Notes:
- SECRET_KEY is read from FLASK_SECRET_KEY
- Rate limiting uses Flask-Limiter v3 keys (RATELIMIT_*).
- STORAGE_BACKEND is one of: memory, file, supabase
"""

from __future__ import annotations
import os
import secrets


class BaseConfig:
    # Secrets & basics - generate a random key if env var is missing so dev/test
    # never runs with an empty string
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY") or secrets.token_hex(32)
    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Storage
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file").lower()
    STORAGE_FILE_PATH = os.getenv("STORAGE_FILE_PATH", "")  # defaults to <instance>/companion_store.json
    PLANT_CACHE_TTL_SECONDS = int(os.getenv("PLANT_CACHE_TTL_SECONDS", "300"))

    # Supabase (hosted key-value storage)
    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    SUPABASE_KV_TABLE = os.getenv("SUPABASE_KV_TABLE", "kv_store")

    # Reminders
    REMINDER_SCHEDULER_ENABLED = os.getenv("REMINDER_SCHEDULER_ENABLED", "true").lower() == "true"
    REMINDER_REFRESH_HOUR = int(os.getenv("REMINDER_REFRESH_HOUR", "0"))  # daily recompute (local time)
    REMINDER_REFRESH_MINUTE = int(os.getenv("REMINDER_REFRESH_MINUTE", "5"))
    UPCOMING_TASK_DAYS = 7  # Default look-ahead for the upcoming view

    # Flask-Limiter v3
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "60 per minute; 3000 per day")
    PHOTO_RATE_LIMIT = "30 per hour"  # Rate limit for photo log entries


class ProdConfig(BaseConfig):
    """Production settings (selected by default if APP_CONFIG is unset)."""
    pass


class DevConfig(BaseConfig):
    """Developer-friendly settings."""
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class TestConfig(BaseConfig):
    """CI/pytest settings."""
    TESTING = True
    DEBUG = True
    STORAGE_BACKEND = "memory"
    # Background jobs never start under pytest
    REMINDER_SCHEDULER_ENABLED = False
    # Usually disable the limiter in tests to avoid flakiness
    RATELIMIT_ENABLED = False
