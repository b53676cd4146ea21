"""Redis-backed reading cache with TTL."""

import json
from typing import Optional

from windrelay.cache_store.base import ReadingCache
from windrelay.readings import CanonicalReading
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/redis_reading_cache")


class RedisReadingCache(ReadingCache):
    """Readings stored as JSON via SETEX. Expects a ``redis.asyncio`` client."""

    def __init__(self, client, prefix: str = "windrelay:") -> None:
        """Initialize with an async Redis client and key prefix."""
        logger.debug("Initializing RedisReadingCache")
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        """Return the namespaced Redis key."""
        return f"{self.prefix}{key}"

    @staticmethod
    def _dump(reading: CanonicalReading) -> bytes:
        """Serialize a reading to JSON bytes."""
        return json.dumps(reading.to_dict()).encode("utf-8")

    @staticmethod
    def _load(raw: bytes | str) -> Optional[CanonicalReading]:
        """Deserialize JSON bytes into a reading; corrupt payloads read as a miss."""
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return CanonicalReading.from_dict(json.loads(raw))
        except (ValueError, TypeError, KeyError) as exc:
            logger.error("Failed to deserialize cached reading: %s", exc)
            return None

    async def get(self, key: str) -> Optional[CanonicalReading]:
        """Fetch a reading; Redis faults degrade to a cache miss."""
        try:
            raw = await self.client.get(self._key(key))
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis read failed; treating as miss", extra={"key": key, "error": str(exc)})
            return None
        if raw is None:
            return None
        return self._load(raw)

    async def put(self, key: str, reading: CanonicalReading, ttl_seconds: int) -> None:
        """Write a reading with SETEX."""
        try:
            await self.client.setex(self._key(key), ttl_seconds, self._dump(reading))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to write reading to Redis: %s", exc)

    async def clear(self) -> None:
        """Delete every key under the prefix."""
        async for key in self.client.scan_iter(f"{self.prefix}*"):
            await self.client.delete(key)
