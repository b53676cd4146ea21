"""Parser for ``<td>Label</td><td>Value Unit</td>`` snapshot tables (Brambles Bank)."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from bs4 import BeautifulSoup, Tag

from windrelay.data_sources.base import HtmlTableSample
from windrelay.errors import ParseError, excerpt
from windrelay.readings import CanonicalReading, build_reading, utc_now
from windrelay.units import knots_to_mps
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="parsers/html_table")

LABEL = "table_scrape"
UPDATED_FORMAT = "%d/%m/%Y %H:%M:%S"


def _value_cell(soup: BeautifulSoup, label: str) -> Optional[Tag]:
    """Return the cell right after the first ``<td>`` containing `label`."""
    for cell in soup.find_all("td"):
        if label in cell.get_text():
            return cell.find_next_sibling("td")
    return None


def extract_number(soup: BeautifulSoup, label: str) -> Optional[float]:
    """Leading numeric token of the value cell, or None when missing or unparseable."""
    cell = _value_cell(soup, label)
    if cell is None:
        logger.debug(f"Label '{label}' not found in table")
        return None
    text = cell.get_text(" ", strip=True)
    token = text.split(" ", 1)[0] if text else ""
    try:
        return float(token)
    except ValueError:
        logger.debug(f"Non-numeric value for '{label}': {text!r}")
        return None


def extract_text(soup: BeautifulSoup, label: str) -> Optional[str]:
    """Value cell text, preferring an embedded ``<div>`` when present."""
    cell = _value_cell(soup, label)
    if cell is None:
        return None
    div = cell.find("div")
    if div is not None and div.get_text(strip=True):
        return div.get_text(strip=True)
    return cell.get_text(strip=True) or None


def parse_updated(text: Optional[str]) -> Optional[dt.datetime]:
    """Parse ``dd/mm/YYYY HH:MM:SS`` (published in GMT)."""
    if not text:
        return None
    cleaned = text.replace("GMT", "").replace("UTC", "").strip()
    try:
        return dt.datetime.strptime(cleaned, UPDATED_FORMAT).replace(tzinfo=dt.timezone.utc)
    except ValueError:
        logger.debug(f"Unrecognized timestamp {text!r}; using collection time")
        return None


def parse_table_sample(sample: HtmlTableSample, station_id: str) -> CanonicalReading | ParseError:
    """Turn the snapshot page into a canonical reading. Wind is published in knots."""
    soup = BeautifulSoup(sample.html, "html.parser")
    if not soup.find("td"):
        return ParseError(LABEL, "No table cells in document", excerpt(sample.html))

    speed_kn = extract_number(soup, "Wind Speed")
    gust_kn = extract_number(soup, "Max Gust")
    direction = extract_number(soup, "Wind Direction")
    temperature = extract_number(soup, "Air Temp")
    pressure = extract_number(soup, "Pressure")  # mBar == hPa
    timestamp = parse_updated(extract_text(soup, "Updated")) or utc_now()

    if all(v is None for v in (speed_kn, gust_kn, direction, temperature, pressure)):
        return ParseError(LABEL, "None of the expected labels were found", excerpt(sample.html))

    return build_reading(
        station_id,
        timestamp=timestamp,
        wind_speed=knots_to_mps(speed_kn) if speed_kn is not None else None,
        wind_gust=knots_to_mps(gust_kn) if gust_kn is not None else None,
        wind_direction=direction,
        temperature=temperature,
        pressure=pressure,
        source=LABEL,
    )
