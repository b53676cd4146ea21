"""Canonical reading type shared by every parser, the cache and the serving edge."""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import asdict, dataclass
from typing import Any, Optional

TEMPERATURE_RANGE_C = (-60.0, 60.0)
PRESSURE_RANGE_HPA = (800.0, 1200.0)


@dataclass
class CanonicalReading:
    """One station at one instant, always in SI units.

    Optional fields are None when not measured. A None wind speed is never
    the same thing as 0.0 (calm).
    """
    station_id: str
    timestamp: dt.datetime  # timezone-aware UTC
    wind_speed: Optional[float]  # m/s
    wind_gust: Optional[float]  # m/s
    wind_direction: Optional[int]  # degrees 0-359
    temperature: Optional[float]  # celsius
    pressure: Optional[float]  # hPa
    is_valid: bool
    parse_latency_ms: int = 0
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-safe dict for cache backends."""
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CanonicalReading":
        """Rebuild a reading from `to_dict` output."""
        return cls(**{**data, "timestamp": dt.datetime.fromisoformat(data["timestamp"])})


def _finite(value: float | None) -> float | None:
    if value is None:
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def sanitize_wind_speed(value: float | None) -> float | None:
    """Return a non-negative wind speed or None."""
    value = _finite(value)
    if value is None or value < 0:
        return None
    return value


def sanitize_temperature(value: float | None) -> float | None:
    """Return the temperature if physically plausible, otherwise None."""
    value = _finite(value)
    if value is None:
        return None
    low, high = TEMPERATURE_RANGE_C
    return value if low <= value <= high else None


def sanitize_pressure(value: float | None) -> float | None:
    """Return the pressure if physically plausible, otherwise None."""
    value = _finite(value)
    if value is None:
        return None
    low, high = PRESSURE_RANGE_HPA
    return value if low <= value <= high else None


def sanitize_direction(value: float | None) -> int | None:
    """Normalize a heading into 0-359 degrees."""
    value = _finite(value)
    if value is None:
        return None
    return int(round(value)) % 360


def compute_is_valid(wind_speed: float | None, wind_direction: int | None, temperature: float | None) -> bool:
    """Wind speed and direction present, temperature in range when present."""
    if wind_speed is None or wind_direction is None:
        return False
    if temperature is not None and sanitize_temperature(temperature) is None:
        return False
    return True


def build_reading(
    station_id: str,
    *,
    timestamp: dt.datetime,
    wind_speed: float | None,
    wind_gust: float | None = None,
    wind_direction: float | None = None,
    temperature: float | None = None,
    pressure: float | None = None,
    parse_latency_ms: int = 0,
    source: str = "",
) -> CanonicalReading:
    """Validate raw SI values and assemble a CanonicalReading.

    Out-of-range values are dropped to None rather than clamped.
    """
    speed = sanitize_wind_speed(wind_speed)
    gust = sanitize_wind_speed(wind_gust)
    direction = sanitize_direction(wind_direction)
    temp = sanitize_temperature(temperature)
    press = sanitize_pressure(pressure)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=dt.timezone.utc)
    return CanonicalReading(
        station_id=station_id,
        timestamp=timestamp.astimezone(dt.timezone.utc),
        wind_speed=speed,
        wind_gust=gust,
        wind_direction=direction,
        temperature=temp,
        pressure=press,
        is_valid=compute_is_valid(speed, direction, temp),
        parse_latency_ms=parse_latency_ms,
        source=source,
    )


def utc_now() -> dt.datetime:
    """Current time as an aware UTC datetime."""
    return dt.datetime.now(dt.timezone.utc)
