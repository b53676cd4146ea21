"""Serialized API shapes (``weather.v1`` and ``weather-region.v1``)."""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from windrelay.aggregator import RegionResponse, StationSlot
from windrelay.readings import CanonicalReading
from windrelay.stations import RegionConfig, StationConfig


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class WindBlock(_CamelModel):
    avg: Optional[float] = None
    gust: Optional[float] = None
    direction: Optional[int] = None
    unit: Literal["mps"] = "mps"


class TemperatureBlock(_CamelModel):
    air: float
    unit: Literal["celsius"] = "celsius"


class PressureBlock(_CamelModel):
    value: float
    unit: Literal["hPa"] = "hPa"


class WeatherData(_CamelModel):
    wind: WindBlock
    temperature: Optional[TemperatureBlock] = None
    pressure: Optional[PressureBlock] = None


class WeatherV1(_CamelModel):
    """Canonical per-station reading."""
    schema_: Literal["weather.v1"] = Field(default="weather.v1", alias="schema")
    station_id: str = Field(alias="stationId")
    timestamp: dt.datetime
    data: WeatherData
    ttl: int = 300
    stale: Optional[bool] = None


class RegionStationV1(WeatherV1):
    """Region slot: a weather.v1 object plus slot health."""
    is_valid: bool = Field(alias="isValid")
    error: Optional[str] = None


class WeatherRegionV1(_CamelModel):
    schema_: Literal["weather-region.v1"] = Field(default="weather-region.v1", alias="schema")
    region_id: str = Field(alias="regionId")
    display_name: str = Field(alias="displayName")
    display_unit: str = Field(alias="displayUnit")
    generated_at: dt.datetime = Field(alias="generatedAt")
    ttl: int
    stations: list[RegionStationV1]


class StationInfo(_CamelModel):
    station_id: str = Field(alias="stationId")
    name: str
    region: str
    region_name: str = Field(alias="regionName")


class RegionInfo(_CamelModel):
    region_id: str = Field(alias="regionId")
    display_name: str = Field(alias="displayName")
    display_unit: str = Field(alias="displayUnit")
    stations: list[str]


def _round(value: Optional[float], ndigits: int = 2) -> Optional[float]:
    return None if value is None else round(value, ndigits)


def weather_data(reading: CanonicalReading) -> WeatherData:
    """Build the ``data`` block; temperature and pressure only when known."""
    return WeatherData(
        wind=WindBlock(
            avg=_round(reading.wind_speed),
            gust=_round(reading.wind_gust),
            direction=reading.wind_direction,
        ),
        temperature=TemperatureBlock(air=round(reading.temperature, 1)) if reading.temperature is not None else None,
        pressure=PressureBlock(value=round(reading.pressure, 1)) if reading.pressure is not None else None,
    )


def to_weather_v1(reading: CanonicalReading, ttl: int = 300, *, stale: bool = False) -> WeatherV1:
    """Serialize one reading."""
    return WeatherV1(
        station_id=reading.station_id,
        timestamp=reading.timestamp,
        data=weather_data(reading),
        ttl=ttl,
        stale=True if stale else None,
    )


def to_region_station(slot: StationSlot, ttl: int) -> RegionStationV1:
    """Serialize one region slot."""
    return RegionStationV1(
        station_id=slot.station_id,
        timestamp=slot.reading.timestamp,
        data=weather_data(slot.reading),
        ttl=ttl,
        stale=True if slot.stale else None,
        is_valid=slot.is_valid,
        error=slot.error,
    )


def to_weather_region_v1(response: RegionResponse) -> WeatherRegionV1:
    """Serialize a full region response in configured order."""
    return WeatherRegionV1(
        region_id=response.region.region_id,
        display_name=response.region.display_name,
        display_unit=response.region.display_unit,
        generated_at=response.generated_at,
        ttl=response.ttl,
        stations=[to_region_station(s, response.ttl) for s in response.stations],
    )


def station_info(station: StationConfig, region: RegionConfig) -> StationInfo:
    return StationInfo(
        station_id=station.station_id, name=station.name, region=region.region_id, region_name=region.display_name
    )


def region_info(region: RegionConfig) -> RegionInfo:
    return RegionInfo(
        region_id=region.region_id,
        display_name=region.display_name,
        display_unit=region.display_unit,
        stations=list(region.station_ids),
    )


def dump(model: BaseModel) -> dict:
    """JSON-ready dict using wire aliases, omitting absent optional fields."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
