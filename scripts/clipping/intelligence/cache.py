"""
In-memory response cache shared by the source adapters.

Entries expire after a freshness window and the store is bounded: when a
``set`` pushes it past ``max_size`` the entry with the oldest timestamp is
evicted. The cache is advisory only; every caller must behave correctly if
each lookup is a miss.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the clock reading at which it was stored."""

    key: str
    value: Any
    stored_at: float


class TTLCache:
    """Thread-safe key/value store with TTL expiry and oldest-eviction."""

    def __init__(
        self,
        ttl: float = 3600,
        max_size: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            ttl: Freshness window in seconds.
            max_size: Maximum number of entries kept.
            clock: Time source, injectable for tests.
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or an expired entry."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl:
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the oldest entry if the store is over capacity."""
        entry = CacheEntry(key=key, value=value, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry
            while len(self._entries) > self.max_size:
                oldest = min(self._entries.values(), key=lambda e: e.stored_at)
                del self._entries[oldest.key]
                logger.debug("Cache full, evicted %s", oldest.key)

    def clear(self) -> int:
        """Empty the cache and return how many entries it held."""
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.info("Cache cleared (%d entries)", size)
        return size

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return self.size

    def stats(self) -> Dict[str, int]:
        """Cache introspection for operational endpoints."""
        return {"entries": self.size, "max_size": self.max_size}
