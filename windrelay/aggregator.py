"""Regional aggregator: fan out the collector over a region's stations."""

from __future__ import annotations

import asyncio
import datetime as dt
from dataclasses import dataclass, field
from typing import Callable, Optional

from windrelay import config
from windrelay.collector import Collector
from windrelay.errors import CollectionError
from windrelay.readings import CanonicalReading, utc_now
from windrelay.stations import RegionConfig, StationConfig, get_region, get_station
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="aggregator")


@dataclass
class StationSlot:
    """One fixed position in a region response."""
    station_id: str
    name: str
    reading: CanonicalReading
    error: Optional[str] = None
    stale: bool = False

    @property
    def is_valid(self) -> bool:
        return self.error is None and self.reading.is_valid


@dataclass
class RegionResponse:
    """Ordered per-station slots plus region metadata."""
    region: RegionConfig
    generated_at: dt.datetime
    ttl: int
    stations: list[StationSlot] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return sum(1 for s in self.stations if s.is_valid)


def placeholder_reading(station_id: str, when: dt.datetime) -> CanonicalReading:
    """Zeroed wind block for a failed slot; always invalid."""
    return CanonicalReading(
        station_id=station_id,
        timestamp=when,
        wind_speed=0.0,
        wind_gust=None,
        wind_direction=0,
        temperature=None,
        pressure=None,
        is_valid=False,
    )


class RegionalAggregator:
    """Build fixed-arity region responses that tolerate per-station failure."""

    def __init__(
        self,
        collector: Collector,
        settings: config.Settings | None = None,
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        self.collector = collector
        self.settings = settings or config.settings
        self._clock = clock

    async def _failed_slot(self, station: StationConfig, error: str, when: dt.datetime) -> StationSlot:
        if self.settings.serve_stale:
            stale = await self.collector.last_good(station.station_id)
            if stale is not None:
                logger.info(f"Serving stale reading for {station.station_id}",
                            extra={"reading_time": stale.timestamp.isoformat()})
                return StationSlot(station.station_id, station.name, stale, error=error, stale=True)
        return StationSlot(station.station_id, station.name, placeholder_reading(station.station_id, when), error=error)

    async def aggregate(self, region_id: str, *, force_refresh: bool = False) -> RegionResponse:
        """Collect every station in the region concurrently, preserving configured order.

        Raises UnknownRegionError for ids not configured.
        """
        region = get_region(region_id)
        generated_at = self._clock()
        results = await asyncio.gather(
            *(self.collector.collect(sid, force_refresh=force_refresh) for sid in region.station_ids),
            return_exceptions=True,
        )

        slots: list[StationSlot] = []
        for sid, result in zip(region.station_ids, results):
            station = get_station(sid)
            if isinstance(result, CanonicalReading):
                slots.append(StationSlot(sid, station.name, result))
                continue
            if isinstance(result, CollectionError):
                message = result.message
            elif isinstance(result, Exception):
                logger.error(f"Unexpected error collecting {sid}", exc_info=result)
                message = f"Failed to collect {sid}: {result.__class__.__name__}"
            else:
                raise result
            slots.append(await self._failed_slot(station, message, generated_at))

        response = RegionResponse(region=region, generated_at=generated_at, ttl=self.settings.cache_ttl_seconds,
                                  stations=slots)
        logger.info(
            f"Aggregated region {region.region_id}: {response.valid_count}/{len(slots)} valid",
            extra={"region": region.region_id},
        )
        return response
