from __future__ import annotations

import time
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import StoredKey
from .settings import get_settings


# PUBLIC_INTERFACE
class FeedStore(ABC):
    """Abstract key-value contract for storing generated feeds and sync results."""

    @abstractmethod
    def put(
        self,
        key: str,
        value: str,
        metadata: Optional[Dict[str, Any]] = None,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Store a value with optional metadata. A positive ttl_seconds makes it expire."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if missing or expired."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key. Return True if it existed."""

    @abstractmethod
    def list_keys(self) -> List[StoredKey]:
        """Return all live keys with their metadata, sorted by name."""


class InMemoryFeedStore(FeedStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._lock = RLock()
        self._clock = clock
        # key -> (value, metadata, expires_at)
        self._items: Dict[str, Tuple[str, Optional[Dict[str, Any]], Optional[float]]] = {}

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and expires_at <= self._clock()

    def _purge(self) -> None:
        with self._lock:
            for key in [k for k, (_, _, exp) in self._items.items() if self._expired(exp)]:
                del self._items[key]

    def put(
        self,
        key: str,
        value: str,
        metadata: Optional[Dict[str, Any]] = None,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        with self._lock:
            self._items[key] = (value, dict(metadata) if metadata else None, expires_at)

    def get(self, key: str) -> Optional[str]:
        self._purge()
        with self._lock:
            item = self._items.get(key)
            return None if item is None else item[0]

    def delete(self, key: str) -> bool:
        self._purge()
        with self._lock:
            return self._items.pop(key, None) is not None

    def list_keys(self) -> List[StoredKey]:
        self._purge()
        with self._lock:
            return [
                {"name": key, "metadata": dict(meta) if meta else None}
                for key, (_, meta, _) in sorted(self._items.items())
            ]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_store() -> FeedStore:
    """
    Factory to return the configured store based on settings.
    - memory: InMemoryFeedStore
    - sqlite: SQLiteFeedStore

    The store is created once per process so feeds survive across requests.
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteFeedStore

        return SQLiteFeedStore(settings.sqlite_db_path)
    return InMemoryFeedStore()
