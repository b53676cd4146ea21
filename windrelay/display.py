"""Plain-text display lines in regional units, for e-paper and CLI clients.

Applied only at the serving edge; cached readings stay in SI units.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from windrelay.aggregator import RegionResponse, StationSlot
from windrelay.readings import CanonicalReading
from windrelay.units import mps_to_display, unit_label


def format_speed(mps: float, display_unit: str) -> str:
    """Render a canonical speed as ``<value><unit>`` with one decimal."""
    return f"{mps_to_display(mps, display_unit):.1f}{unit_label(display_unit)}"


def format_updated(ts: dt.datetime) -> str:
    """``YYYY-MM-DD HH:MM:SS UTC``."""
    if ts.tzinfo is not None:
        ts = ts.astimezone(dt.timezone.utc)
    return ts.strftime("%Y-%m-%d %H:%M:%S") + " UTC"


def _gust_shown(reading: CanonicalReading, display_unit: str) -> bool:
    """Show gust only when it still exceeds the average after display rounding."""
    if reading.wind_gust is None or reading.wind_speed is None:
        return False
    gust = round(mps_to_display(reading.wind_gust, display_unit), 1)
    avg = round(mps_to_display(reading.wind_speed, display_unit), 1)
    return gust > avg


def format_reading(
    reading: CanonicalReading,
    display_unit: str,
    station_name: Optional[str] = None,
) -> list[str]:
    """Render one reading. Absent optional fields are omitted, not shown as placeholders."""
    name = station_name or reading.station_id
    lines = [f"=== {name.upper()} ===", ""]

    if reading.wind_speed is not None:
        wind = f"Wind: {format_speed(reading.wind_speed, display_unit)}"
        if reading.wind_direction is not None:
            wind += f" @ {reading.wind_direction}°"
        lines.append(wind)
    if _gust_shown(reading, display_unit):
        lines.append(f"Gust: {format_speed(reading.wind_gust, display_unit)}")
    lines.append("")

    if reading.temperature is not None:
        lines.append(f"Temp: {reading.temperature:.1f}°C")
    if reading.pressure is not None:
        lines.append(f"Pressure: {round(reading.pressure)} hPa")
    lines.append("")

    lines.append(f"Updated: {format_updated(reading.timestamp)}")
    return lines


def format_slot(slot: StationSlot, display_unit: str) -> list[str]:
    """Render one region slot; failed slots without stale data show the error."""
    if slot.error is not None and not slot.stale:
        return [f"=== {slot.name.upper()} ===", "", f"No data: {slot.error}"]
    lines = format_reading(slot.reading, display_unit, slot.name)
    if slot.stale:
        lines.append("(stale)")
    return lines


def format_region(response: RegionResponse) -> list[str]:
    """Render every slot in configured order, separated by blank lines."""
    lines: list[str] = []
    for i, slot in enumerate(response.stations):
        if i:
            lines.append("")
        lines.extend(format_slot(slot, response.region.display_unit))
    return lines
