"""
Time-to-live response cache.

Maps a key to a value plus its expiry time. Entries are checked for
staleness on read; there is no eviction policy or locking. Concurrent
misses may each recompute and overwrite the entry, which is acceptable
within one TTL window.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class TTLCache:
    """Key -> (value, expiry) store with a fixed time-to-live."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry[Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Return a fresh cached value or compute, store and return a new one.

        Failures from ``fetch`` propagate and leave the cache untouched.
        """
        cached = self.get(key)
        if cached is not None:
            logger.info(f"Cache hit for {key}")
            return cached

        logger.info(f"Cache miss for {key}, fetching fresh data")
        value = await fetch()
        self.set(key, value)
        return value
