"""Parsers for weatherfile.com primary and fallback payloads (wind in knots)."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from windrelay.data_sources.base import FallbackJsonShape, PrimaryJsonShape
from windrelay.errors import ParseError
from windrelay.readings import CanonicalReading, build_reading, utc_now
from windrelay.units import knots_to_mps

LABEL = "weatherfile_json"


def parse_weatherfile_ts(value: Optional[str]) -> Optional[dt.datetime]:
    """Parse the ``ts`` field; naive values are UTC."""
    if not value:
        return None
    try:
        parsed = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def parse_primary(sample: PrimaryJsonShape, station_id: str) -> CanonicalReading:
    """Averaged wind with gust."""
    data = sample.data
    return build_reading(
        station_id,
        timestamp=parse_weatherfile_ts(data.ts) or utc_now(),
        wind_speed=knots_to_mps(data.wsa),
        wind_gust=knots_to_mps(data.wsh) if data.wsh is not None else None,
        wind_direction=data.wda,
        source=LABEL,
    )


def parse_fallback(sample: FallbackJsonShape, station_id: str) -> CanonicalReading:
    """Current wind only; gust stays None."""
    data = sample.data
    return build_reading(
        station_id,
        timestamp=parse_weatherfile_ts(data.ts) or utc_now(),
        wind_speed=knots_to_mps(data.wsc),
        wind_gust=None,
        wind_direction=data.wdc,
        source=LABEL,
    )


def parse_weatherfile_sample(
    sample: PrimaryJsonShape | FallbackJsonShape, station_id: str
) -> CanonicalReading | ParseError:
    """Dispatch on the shape tag."""
    if isinstance(sample, PrimaryJsonShape):
        return parse_primary(sample, station_id)
    if isinstance(sample, FallbackJsonShape):
        return parse_fallback(sample, station_id)
    return ParseError(LABEL, f"Unsupported sample shape {type(sample).__name__}")
