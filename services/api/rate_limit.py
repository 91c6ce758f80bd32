"""Per-address submission rate limiting."""

import logging
import time
from typing import Callable, Optional

from core.cache import TimedCache

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Allow one request per key within a sliding window.

    Stale entries are swept once the store grows past max_entries.
    """

    def __init__(
        self,
        window_seconds: float = 10.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.time,
        store: Optional[TimedCache[float]] = None,
    ):
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._store = store if store is not None else TimedCache(name="rate-limit", clock=clock)

    def __len__(self) -> int:
        return len(self._store)

    def check(self, key: str) -> bool:
        """Record a request for key. Returns False if it falls inside the window."""
        now = self._clock()

        if not self._store.set_if_older(key, now, self.window_seconds):
            logger.info(f"Rate limited request from {key}")
            return False

        if len(self._store) > self.max_entries:
            self._store.evict_older_than(now - self.window_seconds)

        return True
