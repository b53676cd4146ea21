"""Static station and region configuration."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from windrelay.errors import UnknownRegionError, UnknownStationError
from windrelay.units import DISPLAY_UNIT_KMH, DISPLAY_UNIT_KNOTS

# Protocol families; each maps to one adapter/parser pair.
TABLE_SCRAPE = "table_scrape"
NAVIS_BINARY = "navis_binary"
WEATHERFILE_JSON = "weatherfile_json"
PIOUPIOU_JSON = "pioupiou_json"


@dataclass(frozen=True)
class StationConfig:
    """One physical station and how to reach it."""
    station_id: str
    name: str
    region_id: str
    protocol: str
    pioupiou_id: Optional[int] = None
    altitude_m: Optional[int] = None


@dataclass(frozen=True)
class RegionConfig:
    """Fixed three-station grouping sharing one display unit."""
    region_id: str
    display_name: str
    station_ids: tuple[str, str, str]
    display_unit: str


STATIONS: dict[str, StationConfig] = {
    "brambles": StationConfig("brambles", "Brambles Bank", "solent", TABLE_SCRAPE),
    "lymington": StationConfig("lymington", "Lymington", "solent", WEATHERFILE_JSON),
    "seaview": StationConfig("seaview", "Seaview", "solent", NAVIS_BINARY),
    "planpraz": StationConfig("planpraz", "Planpraz", "chamonix", PIOUPIOU_JSON, pioupiou_id=1724, altitude_m=1958),
    "prarion": StationConfig("prarion", "Prarion", "chamonix", PIOUPIOU_JSON, pioupiou_id=521, altitude_m=1865),
    "tetedebalme": StationConfig(
        "tetedebalme", "Tête de Balme", "chamonix", PIOUPIOU_JSON, pioupiou_id=1702, altitude_m=2204
    ),
}

REGIONS: dict[str, RegionConfig] = {
    "chamonix": RegionConfig(
        region_id="chamonix",
        display_name="Chamonix Valley, France",
        station_ids=("planpraz", "prarion", "tetedebalme"),
        display_unit=DISPLAY_UNIT_KMH,
    ),
    "solent": RegionConfig(
        region_id="solent",
        display_name="Solent, UK",
        station_ids=("brambles", "lymington", "seaview"),
        display_unit=DISPLAY_UNIT_KNOTS,
    ),
}


def get_station(station_id: str) -> StationConfig:
    """Look up a station by id (case-insensitive)."""
    try:
        return STATIONS[station_id.lower()]
    except KeyError:
        raise UnknownStationError(f"Unknown station '{station_id}'") from None


def get_region(region_id: str) -> RegionConfig:
    """Look up a region by id (case-insensitive)."""
    try:
        return REGIONS[region_id.lower()]
    except KeyError:
        raise UnknownRegionError(f"Unknown region '{region_id}'") from None


def region_for_station(station_id: str) -> RegionConfig:
    """Return the region a station belongs to."""
    return get_region(get_station(station_id).region_id)


def all_stations() -> list[StationConfig]:
    """All configured stations sorted by id."""
    return sorted(STATIONS.values(), key=lambda s: s.station_id)


def all_regions() -> list[RegionConfig]:
    """All configured regions in declaration order."""
    return list(REGIONS.values())
