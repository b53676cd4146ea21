"""Decoder for Navis hex-encoded telemetry frames.

Frame layout (reverse-engineered from the Navis viewer):

    MSB = every hex digit except the last 8
    LSB = the last 8 hex digits
    temp_raw      = MSB & 0x7FF            (bits 0-10)
    speed_raw     = LSB >> 16              (bits 16-31, unsigned)
    direction_raw = (LSB >> 7) & 0x1FF     (bits 7-15)

    speed_ms    = speed_raw / 10
    speed_knots = speed_ms * 1.94384449
    temperature = (temp_raw - 400) / 10    (celsius)
    direction   = direction_raw            (degrees)
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from windrelay.data_sources.base import HistoricalTextShape, LiveTextShape
from windrelay.errors import ParseError, excerpt
from windrelay.readings import CanonicalReading, build_reading, utc_now
from windrelay.units import knots_to_mps
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="parsers/navis")

LABEL = "navis_binary"
MS_TO_KNOTS = 1.94384449
MIN_HEX_LENGTH = 8


@dataclass(frozen=True)
class NavisFrame:
    """One decoded telemetry frame."""
    msb: int
    lsb: int
    temp_raw: int
    speed_raw: int
    direction_raw: int

    @property
    def speed_ms(self) -> float:
        return self.speed_raw / 10

    @property
    def speed_knots(self) -> float:
        return self.speed_ms * MS_TO_KNOTS

    @property
    def temperature(self) -> float:
        return (self.temp_raw - 400) / 10

    @property
    def direction(self) -> int:
        return self.direction_raw


def clean_hex(value: str) -> str:
    """Strip whitespace and the trailing ``%`` URL artefact."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    return value.strip()


def decode_navis_hex(hex_data: str) -> NavisFrame:
    """Decode a hex frame. Raises ValueError on malformed input."""
    hex_data = clean_hex(hex_data)
    if len(hex_data) < MIN_HEX_LENGTH:
        raise ValueError(f"Hex data too short: {hex_data!r} ({len(hex_data)} chars)")
    msb_hex, lsb_hex = hex_data[:-8], hex_data[-8:]
    msb = int(msb_hex, 16) if msb_hex else 0
    lsb = int(lsb_hex, 16)
    return NavisFrame(
        msb=msb,
        lsb=lsb,
        temp_raw=msb & 0x7FF,
        speed_raw=lsb >> 16,
        direction_raw=(lsb >> 7) & 0x1FF,
    )


def parse_epoch(token: str | int) -> Optional[dt.datetime]:
    """Parse a Navis epoch timestamp (seconds, or milliseconds when large)."""
    try:
        value = int(str(token).strip())
    except ValueError:
        return None
    if value > 10**11:
        value //= 1000
    try:
        return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def split_live_record(raw: str) -> tuple[str, str, str]:
    """Split ``<ts>:<status>:<hex>``. Raises ValueError when the record is short."""
    parts = raw.strip().split(":")
    if len(parts) < 3:
        raise ValueError(f"Expected 3 colon-separated parts, got {len(parts)}")
    return parts[0], parts[1], clean_hex(parts[2])


def decode_live(sample: LiveTextShape) -> tuple[Optional[dt.datetime], NavisFrame] | ParseError:
    """Decode the live record, returning its timestamp and frame."""
    try:
        ts, _status, hex_value = split_live_record(sample.raw)
        frame = decode_navis_hex(hex_value)
    except ValueError as exc:
        return ParseError(LABEL, f"Invalid live record: {exc}", excerpt(sample.raw))
    return parse_epoch(ts), frame


def parse_live_sample(sample: LiveTextShape, station_id: str) -> CanonicalReading | ParseError:
    """Single instantaneous reading. No gust can be derived from one sample."""
    decoded = decode_live(sample)
    if isinstance(decoded, ParseError):
        return decoded
    ts, frame = decoded
    logger.debug(
        f"Live frame: msb=0x{frame.msb:x} lsb=0x{frame.lsb:x} temp_raw={frame.temp_raw} "
        f"speed_raw={frame.speed_raw} direction_raw={frame.direction_raw}"
    )
    return build_reading(
        station_id,
        timestamp=ts or utc_now(),
        wind_speed=knots_to_mps(frame.speed_knots),
        wind_gust=None,
        wind_direction=frame.direction,
        temperature=round(frame.temperature, 1),
        source=LABEL,
    )


def parse_historical_pairs(sample: HistoricalTextShape) -> list[tuple[int, str]]:
    """Return ``(epoch, hex)`` pairs, silently skipping malformed entries."""
    pairs: list[tuple[int, str]] = []
    for entry in sample.raw.replace("\n", ",").split(","):
        entry = entry.strip()
        ts, sep, hex_value = entry.partition(":")
        if not sep or not ts or not hex_value:
            continue
        hex_value = clean_hex(hex_value)
        try:
            epoch = int(ts)
        except ValueError:
            continue
        if len(hex_value) >= MIN_HEX_LENGTH:
            pairs.append((epoch, hex_value))
    return pairs
