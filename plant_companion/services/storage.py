"""
Key-value storage backends.

Every record collection (plants, photos, notification preferences) is stored
as a single JSON string under one key. Backends:
- InMemoryKeyValueStore: process-local dict (tests, throwaway dev sessions)
- JsonFileKeyValueStore: one JSON object on disk (local dev default)
- SupabaseKeyValueStore: rows in a `kv_store` table (hosted deployments)

Backends raise whatever their underlying client raises; the stores built on
top translate failures into StorageReadError / StorageWriteError.
"""

from __future__ import annotations
import json
import logging
import os
import threading
from typing import Dict, Optional

from supabase import Client, create_client

from plant_companion.utils.cache import CollectionCache
from plant_companion.utils.errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Interface for string key -> string value storage."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Stores all keys in one JSON file.

    The file is re-read on every access so external edits are picked up;
    writes go through a temp file and os.replace so a crash never leaves a
    half-written file behind.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return {}

    def _dump(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)


class SupabaseKeyValueStore(KeyValueStore):
    """
    Key-value rows in a Supabase table.

    Expected schema:
        create table kv_store (key text primary key, value text not null,
                               updated_at timestamptz default now());
    """

    def __init__(self, client: Client, table: str = "kv_store"):
        self.client = client
        self.table = table

    def get_item(self, key: str) -> Optional[str]:
        response = self.client.table(self.table).select("value").eq("key", key).execute()
        if response.data:
            return response.data[0].get("value")
        return None

    def set_item(self, key: str, value: str) -> None:
        self.client.table(self.table).upsert({"key": key, "value": value}).execute()

    def remove_item(self, key: str) -> None:
        self.client.table(self.table).delete().eq("key", key).execute()


class RecordCollection:
    """
    A list of records stored as one JSON array under one key.

    Records are decoded with `record_type.from_dict` on every storage read and
    encoded with `to_dict` on write. When a cache is given, the decoded list is
    kept there after each successful read or write and dropped when a write
    fails.
    """

    def __init__(self, kv: KeyValueStore, key: str, record_type, cache: Optional[CollectionCache] = None):
        self.kv = kv
        self.key = key
        self.record_type = record_type
        self.cache = cache

    def load(self) -> list:
        """Return all records (a fresh list each call)."""
        if self.cache is not None:
            cached = self.cache.get(self.key)
            if cached is not None:
                return list(cached)

        try:
            raw = self.kv.get_item(self.key)
            records = [self.record_type.from_dict(item) for item in json.loads(raw)] if raw else []
        except Exception as e:
            logger.error(f"Failed to load {self.key}: {e}")
            raise StorageReadError(f"Failed to load {self.key}: {e}") from e

        if self.cache is not None:
            self.cache.set(self.key, records)
        return list(records)

    def save(self, records: list) -> None:
        try:
            self.kv.set_item(self.key, json.dumps([r.to_dict() for r in records]))
        except Exception as e:
            if self.cache is not None:
                self.cache.invalidate(self.key)
            logger.error(f"Failed to save {self.key}: {e}")
            raise StorageWriteError(f"Failed to save {self.key}: {e}") from e

        if self.cache is not None:
            self.cache.set(self.key, list(records))

    def clear(self) -> None:
        try:
            self.kv.remove_item(self.key)
        except Exception as e:
            raise StorageWriteError(f"Failed to clear {self.key}: {e}") from e
        finally:
            if self.cache is not None:
                self.cache.invalidate(self.key)


def create_key_value_store(app) -> KeyValueStore:
    """
    Build the storage backend selected by STORAGE_BACKEND.

    Call this from the Flask app factory. Falls back to the JSON file backend
    when Supabase is selected but not configured.
    """
    backend = app.config.get("STORAGE_BACKEND", "file").lower()

    if backend == "memory":
        app.logger.info("Using in-memory storage; data is lost on restart")
        return InMemoryKeyValueStore()

    if backend == "supabase":
        url = app.config.get("SUPABASE_URL", "")
        key = app.config.get("SUPABASE_SERVICE_ROLE_KEY", "")
        if not url or not key:
            app.logger.warning("Supabase URL or SERVICE_ROLE_KEY not configured. Falling back to file storage.")
        else:
            try:
                client = create_client(url, key)
                app.logger.info("Supabase key-value storage initialized successfully")
                return SupabaseKeyValueStore(client, app.config.get("SUPABASE_KV_TABLE", "kv_store"))
            except Exception as e:
                app.logger.error(f"Failed to initialize Supabase client: {e}. Falling back to file storage.")

    path = app.config.get("STORAGE_FILE_PATH") or os.path.join(app.instance_path, "companion_store.json")
    app.logger.info(f"Using file storage at {path}")
    return JsonFileKeyValueStore(path)
