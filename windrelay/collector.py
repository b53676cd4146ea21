"""Collector: cache check, then adapter -> parser -> cache write-through for one station."""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Callable, Mapping, Optional

from windrelay import cache_manager, config
from windrelay.cache_store import ReadingCache
from windrelay.errors import CollectionError, FetchError, ParseError
from windrelay.pipelines import StationPipeline
from windrelay.readings import CanonicalReading, utc_now
from windrelay.stations import get_station
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="collector")

CollectResult = CanonicalReading | CollectionError


class Collector:
    """Return fresh data or an explicit failure; never older data.

    Serving stale readings is the caller's decision, via `last_good`.
    """

    def __init__(
        self,
        pipelines: Mapping[str, StationPipeline],
        cache: ReadingCache | None = None,
        settings: config.Settings | None = None,
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        self.pipelines = dict(pipelines)
        self.cache = cache if cache is not None else cache_manager.get_cache()
        self.settings = settings or config.settings
        self._clock = clock

    def key_for(self, station_id: str, now: Optional[dt.datetime] = None) -> str:
        """Bucket key for a station at `now` (defaults to the collector clock)."""
        return cache_manager.bucket_key(station_id, now or self._clock(), self.settings.cache_bucket_seconds)

    async def collect(self, station_id: str, *, force_refresh: bool = False) -> CollectResult:
        """Collect one station. Raises UnknownStationError for ids not configured."""
        station_id = get_station(station_id).station_id
        key = self.key_for(station_id)

        if not force_refresh:
            cached = await self.cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit for {station_id}", extra={"key": key})
                return cached

        pipeline = self.pipelines.get(station_id)
        if pipeline is None:
            return CollectionError(station_id, f"No pipeline configured for station '{station_id}'")

        result = await pipeline.run()
        if isinstance(result, (FetchError, ParseError)):
            logger.warning(f"Collection failed for {station_id}: {result}")
            return CollectionError(station_id, f"Failed to collect {station_id}: {result.message}")
        if not result.is_valid:
            logger.warning(f"Collected reading for {station_id} is not valid", extra={"key": key})
            return CollectionError(station_id, f"Invalid reading from {station_id}: missing wind data")

        await self.cache.put(key, result, self.settings.cache_ttl_seconds)
        await self.cache.put(cache_manager.latest_key(station_id), result, self.settings.stale_ttl_seconds)
        logger.info(
            f"Collected {station_id}",
            extra={"key": key, "forced": force_refresh, "parse_latency_ms": result.parse_latency_ms},
        )
        return result

    async def last_good(self, station_id: str) -> Optional[CanonicalReading]:
        """Most recent valid reading within the stale TTL, if any."""
        return await self.cache.get(cache_manager.latest_key(station_id))

    async def collect_all(self, *, force_refresh: bool = False) -> dict[str, CollectResult]:
        """Collect every configured station concurrently (cache pre-warm)."""
        station_ids = sorted(self.pipelines)
        results = await asyncio.gather(
            *(self.collect(sid, force_refresh=force_refresh) for sid in station_ids),
            return_exceptions=True,
        )
        outcome: dict[str, CollectResult] = {}
        for sid, res in zip(station_ids, results):
            if isinstance(res, BaseException):
                if not isinstance(res, Exception):
                    raise res
                logger.error(f"Unexpected error collecting {sid}", exc_info=res)
                res = CollectionError(sid, f"Failed to collect {sid}: {res.__class__.__name__}")
            outcome[sid] = res
        ok = sum(1 for r in outcome.values() if isinstance(r, CanonicalReading))
        logger.info(f"Collection run complete: {ok}/{len(outcome)} stations succeeded")
        return outcome
