"""Parser for Pioupiou ``live-with-meta`` payloads (wind in km/h, no temperature sensor)."""

from __future__ import annotations

from windrelay.data_sources.base import PioupiouShape
from windrelay.errors import ParseError, excerpt
from windrelay.readings import CanonicalReading, build_reading, utc_now
from windrelay.units import kmh_to_mps

LABEL = "pioupiou_json"


def parse_pioupiou_sample(sample: PioupiouShape, station_id: str) -> CanonicalReading | ParseError:
    """Convert the latest measurement block to a canonical reading."""
    m = sample.data.measurements
    if m.wind_speed_avg is None:
        return ParseError(LABEL, "Missing wind_speed_avg", excerpt(m.model_dump_json()))
    return build_reading(
        station_id,
        timestamp=m.date or utc_now(),
        wind_speed=kmh_to_mps(m.wind_speed_avg),
        wind_gust=kmh_to_mps(m.wind_speed_max) if m.wind_speed_max is not None else None,
        wind_direction=m.wind_heading,
        temperature=None,
        pressure=m.pressure,
        source=LABEL,
    )
