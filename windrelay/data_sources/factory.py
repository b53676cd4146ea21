"""Factory helpers for wiring each configured station to its adapter and parser."""

from __future__ import annotations

import httpx

from windrelay import config
from windrelay.data_sources.navis import NavisAdapter
from windrelay.data_sources.pioupiou import PioupiouAdapter
from windrelay.data_sources.table_scrape import TableScrapeAdapter
from windrelay.data_sources.weatherfile import WeatherfileAdapter
from windrelay.parsers import parse_pioupiou_sample, parse_table_sample, parse_weatherfile_sample
from windrelay.pipelines import NavisPipeline, SimplePipeline, StationPipeline
from windrelay.retry import RetryPolicy
from windrelay.stations import (
    NAVIS_BINARY,
    PIOUPIOU_JSON,
    STATIONS,
    TABLE_SCRAPE,
    WEATHERFILE_JSON,
    StationConfig,
    get_station,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_pipeline(
    station: StationConfig | str,
    settings: config.Settings | None = None,
    *,
    retry: RetryPolicy | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> StationPipeline:
    """Instantiate the pipeline for one station's protocol family."""
    settings = settings or config.settings
    if isinstance(station, str):
        station = get_station(station)
    retry = retry or RetryPolicy.from_settings(settings)
    common = {"retry": retry, "settings": settings, "transport": transport}

    if station.protocol == TABLE_SCRAPE:
        adapter = TableScrapeAdapter(settings.brambles_url, referer=settings.brambles_referer, **common)
        return SimplePipeline(station.station_id, adapter, parse_table_sample)

    if station.protocol == NAVIS_BINARY:
        adapter = NavisAdapter(
            base_url=settings.navis_base_url,
            viewer_id=settings.navis_viewer_id,
            imei=settings.navis_imei,
            **common,
        )
        return NavisPipeline(
            station.station_id,
            adapter,
            max_samples=settings.historical_max_samples,
            outlier_threshold=settings.temperature_outlier_threshold_c,
        )

    if station.protocol == WEATHERFILE_JSON:
        adapter = WeatherfileAdapter(
            base_url=settings.weatherfile_base_url,
            location=settings.weatherfile_location,
            token=settings.weatherfile_token,
            **common,
        )
        return SimplePipeline(station.station_id, adapter, parse_weatherfile_sample)

    if station.protocol == PIOUPIOU_JSON:
        if station.pioupiou_id is None:
            raise ValueError(f"Station '{station.station_id}' has no Pioupiou id")
        adapter = PioupiouAdapter(station.pioupiou_id, base_url=settings.pioupiou_base_url, **common)
        return SimplePipeline(station.station_id, adapter, parse_pioupiou_sample)

    raise ValueError(f"Unknown protocol '{station.protocol}' for station '{station.station_id}'")


def build_pipelines(
    settings: config.Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, StationPipeline]:
    """Pipelines for every configured station, keyed by station id."""
    pipelines = {sid: build_pipeline(st, settings, transport=transport) for sid, st in STATIONS.items()}
    logger.info(f"Built {len(pipelines)} station pipelines", extra={"stations": sorted(pipelines)})
    return pipelines
