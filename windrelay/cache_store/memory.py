"""In-memory reading cache with TTL, for development, tests and single-process deploys."""

import time
from typing import Callable, Optional

from windrelay.cache_store.base import ReadingCache
from windrelay.readings import CanonicalReading
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/in_memory_reading_cache")


class InMemoryReadingCache(ReadingCache):
    """Dict-backed cache; expired entries are evicted lazily on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache using `clock` for expiry."""
        logger.debug("Initializing InMemoryReadingCache")
        self._entries: dict[str, tuple[CanonicalReading, float]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[CanonicalReading]:
        """Return the cached reading or None if missing/expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        reading, expires_at = entry
        if expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return reading

    def _sweep(self, now: float) -> None:
        """Drop every expired entry; bucket keys are never read again once their window passes."""
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired readings")

    async def put(self, key: str, reading: CanonicalReading, ttl_seconds: int) -> None:
        """Store a reading with a TTL, sweeping expired entries first; last writer wins."""
        now = self._clock()
        self._sweep(now)
        self._entries[key] = (reading, now + ttl_seconds)

    async def clear(self) -> None:
        """Clear all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
