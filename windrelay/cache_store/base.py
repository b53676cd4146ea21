"""Shared protocol for reading cache backends."""

from typing import Optional, Protocol

from windrelay.readings import CanonicalReading


class ReadingCache(Protocol):
    """Key -> CanonicalReading store with per-entry TTL."""

    async def get(self, key: str) -> Optional[CanonicalReading]:
        """Return the reading, or None if missing or expired."""

    async def put(self, key: str, reading: CanonicalReading, ttl_seconds: int) -> None:
        """Store a reading, overwriting any existing entry for the key."""

    async def clear(self) -> None:
        """Drop every entry."""
