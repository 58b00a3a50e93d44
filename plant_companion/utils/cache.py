"""
Explicit invalidate-on-write cache for loaded record collections.

The app factory owns the cache and hands it to the stores; stores put the
collection after a successful read or write and invalidate it when a write
fails, so the next read goes back to persisted state.
"""

from __future__ import annotations
from cachetools import TTLCache
from typing import Any, Optional
import threading

# Cache configuration constants
PLANT_CACHE_TTL_SECONDS = 300  # 5 minutes
PLANT_CACHE_MAX_ENTRIES = 16


class CollectionCache:
    """
    Thread-safe TTL cache keyed by storage key.

    The TTL bounds how long changes made outside this process (another
    worker, a manual edit of the store) can go unnoticed.

    Usage:
        cache = CollectionCache()
        plants = cache.get("plants_v1")
        if plants is None:
            plants = load_from_storage()
            cache.set("plants_v1", plants)
    """

    def __init__(
        self,
        ttl_seconds: int = PLANT_CACHE_TTL_SECONDS,
        max_entries: int = PLANT_CACHE_MAX_ENTRIES,
    ):
        self._cache = TTLCache(maxsize=max_entries, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def invalidate(self, key: Optional[str] = None) -> None:
        """
        Drop one cached collection, or everything when key is None.

        Called when:
        - A write to the backing store fails
        - Stored data is cleared
        """
        with self._lock:
            if key is None:
                self._cache.clear()
            else:
                self._cache.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache
