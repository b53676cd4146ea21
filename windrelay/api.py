"""HTTP API serving canonical readings, region bundles and display text."""

from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse

from .aggregator import RegionalAggregator
from .collector import Collector
from .config import settings
from .data_sources.factory import build_pipelines
from .display import format_reading, format_region
from .errors import CollectionError, UnknownRegionError, UnknownStationError
from .readings import CanonicalReading
from .schemas import dump, region_info, station_info, to_weather_region_v1, to_weather_v1
from .stations import all_regions, all_stations, get_region, get_station, region_for_station
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")

router = APIRouter()
COLLECTOR = Collector(build_pipelines(settings))
AGGREGATOR = RegionalAggregator(COLLECTOR)

FormatParam = Optional[Literal["json", "display"]]


def _cache_headers() -> dict[str, str]:
    return {"Cache-Control": f"public, max-age={settings.cache_ttl_seconds}"}


def _json(payload: dict) -> JSONResponse:
    return JSONResponse(content=payload, headers=_cache_headers())


def _text(lines: list[str]) -> PlainTextResponse:
    return PlainTextResponse("\n".join(lines), headers=_cache_headers())


@router.get("/weather/{station_id}")
async def get_weather(
    station_id: str,
    format: FormatParam = Query(default=None),
    refresh: bool = Query(default=False),
):
    """Serve one station's reading as weather.v1 JSON or display text."""
    try:
        station = get_station(station_id)
    except UnknownStationError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    result = await COLLECTOR.collect(station.station_id, force_refresh=refresh)
    stale = False
    if isinstance(result, CollectionError):
        fallback: Optional[CanonicalReading] = None
        if settings.serve_stale:
            fallback = await COLLECTOR.last_good(station.station_id)
        if fallback is None:
            logger.warning(f"No data available for {station.station_id}", extra={"error": result.message})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Weather data for '{station.station_id}' is temporarily unavailable: {result.message}",
            )
        logger.info(f"Serving stale reading for {station.station_id}")
        result, stale = fallback, True

    if format == "display":
        lines = format_reading(result, region_for_station(station.station_id).display_unit, station.name)
        if stale:
            lines.append("(stale)")
        return _text(lines)
    return _json(dump(to_weather_v1(result, settings.cache_ttl_seconds, stale=stale)))


@router.get("/regions")
async def list_regions():
    """List configured regions."""
    return {"regions": [dump(region_info(r)) for r in all_regions()]}


@router.get("/regions/{region_id}")
async def get_region_weather(
    region_id: str,
    format: FormatParam = Query(default=None),
    refresh: bool = Query(default=False),
):
    """Serve all three stations of a region; per-slot validity, never a region-wide failure."""
    try:
        get_region(region_id)
    except UnknownRegionError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    response = await AGGREGATOR.aggregate(region_id, force_refresh=refresh)
    if format == "display":
        return _text(format_region(response))
    return _json(dump(to_weather_region_v1(response)))


@router.get("/stations")
async def list_stations():
    """List configured stations sorted by id."""
    stations = [dump(station_info(s, get_region(s.region_id))) for s in all_stations()]
    return {"stations": stations}


@router.post("/collect")
async def collect_all(refresh: bool = Query(default=True)):
    """Trigger a manual collection run for every station."""
    outcome = await COLLECTOR.collect_all(force_refresh=refresh)
    results = {}
    for sid, res in outcome.items():
        if isinstance(res, CanonicalReading):
            results[sid] = {"success": True, "timestamp": res.timestamp.isoformat()}
        else:
            results[sid] = {"success": False, "error": res.message}
    return {
        "success": any(r["success"] for r in results.values()),
        "results": results,
    }
