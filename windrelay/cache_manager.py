"""Reading cache facade over pluggable backends, plus cache key helpers."""
import datetime as dt

import redis
import redis.asyncio as redis_async

from windrelay.cache_store import InMemoryReadingCache, ReadingCache, RedisReadingCache
from windrelay.config import settings
from utils.logging_utils import get_tagged_logger, mask_db_url

logger = get_tagged_logger(__name__, tag="cache_manager")

LATEST_SUFFIX = "latest"


def _init_store() -> ReadingCache:
    """Initialize the backing reading cache based on configuration."""
    url = settings.cache_redis_url
    logger.debug(f"Initializing reading cache: redis_url='{mask_db_url(url) if url else 'None'}'")
    if url:
        try:
            probe = redis.Redis.from_url(url)
            probe.ping()
            probe.close()
            logger.info("Using RedisReadingCache", extra={"redis_url": mask_db_url(url)})
            return RedisReadingCache(redis_async.Redis.from_url(url), prefix=settings.cache_key_prefix)
        except Exception as exc:  # pragma: no cover
            logger.warning("Falling back to InMemoryReadingCache (Redis unavailable)", extra={"error": str(exc)})
    return InMemoryReadingCache()


_store: ReadingCache = _init_store()


def get_cache() -> ReadingCache:
    """Return the process-wide reading cache."""
    return _store


def bucket_epoch_ms(now: dt.datetime, bucket_seconds: int = 300) -> int:
    """Round `now` down to the start of its bucket, in epoch milliseconds."""
    bucket_ms = bucket_seconds * 1000
    now_ms = int(now.timestamp() * 1000)
    return now_ms - (now_ms % bucket_ms)


def bucket_key(station_id: str, now: dt.datetime, bucket_seconds: int = 300) -> str:
    """Cache key for a station within the time bucket containing `now`."""
    return f"{station_id}:{bucket_epoch_ms(now, bucket_seconds)}"


def latest_key(station_id: str) -> str:
    """Cache key for a station's last good reading."""
    return f"{station_id}:{LATEST_SUFFIX}"
