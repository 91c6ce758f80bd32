"""
In-process keyed store with insertion timestamps.

Stands in for an external key/value store with TTL. Every entry remembers
when it was written so callers can expire or sweep entries explicitly.
All access goes through a single lock since FastAPI may run sync handlers
in a worker thread pool.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    inserted_at: float


class TimedCache(Generic[V]):
    """
    Thread-safe mapping of key -> (value, insertion time).

    Usage:
        cache = TimedCache(ttl_seconds=3600)
        cache.set("dalle_123", "https://...")
        url = cache.get("dalle_123")   # None once expired

        # Explicit sweep
        cache.evict_older_than(time.time() - 10)
    """

    def __init__(
        self,
        name: str = "cache",
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get_entry(key) is not None

    def _expired(self, entry: CacheEntry[V], now: float) -> bool:
        if self.ttl_seconds is None:
            return False
        return now - entry.inserted_at >= self.ttl_seconds

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def get_entry(self, key: str) -> Optional[CacheEntry[V]]:
        """Return the live entry for key, dropping it if it has expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return entry

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        entry = self.get_entry(key)
        return entry.value if entry is not None else default

    def set_if_older(self, key: str, value: V, max_age: float) -> bool:
        """
        Store value unless key holds a live entry younger than max_age.

        The check and the write happen under one lock acquisition. Returns
        True if the value was stored.
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None and not self._expired(entry, now) and now - entry.inserted_at < max_age:
                return False
            self._entries[key] = CacheEntry(value=value, inserted_at=now)
            return True

    def evict_older_than(self, cutoff: float) -> int:
        """Remove entries inserted before cutoff. Returns the number removed."""
        with self._lock:
            stale = [k for k, e in self._entries.items() if e.inserted_at < cutoff]
            for key in stale:
                del self._entries[key]

        if stale:
            logger.debug(f"[{self.name}] evicted {len(stale)} entries")
        return len(stale)
