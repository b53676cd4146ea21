"""Upstream source adapters, one per protocol family."""

from .base import (
    FallbackJsonShape,
    HistoricalTextShape,
    HtmlTableSample,
    LiveTextShape,
    PioupiouShape,
    PrimaryJsonShape,
    RawSample,
    SessionContext,
    SourceAdapter,
)
from .navis import NavisAdapter
from .pioupiou import PioupiouAdapter
from .table_scrape import TableScrapeAdapter
from .weatherfile import WeatherfileAdapter

__all__ = [
    "FallbackJsonShape",
    "HistoricalTextShape",
    "HtmlTableSample",
    "LiveTextShape",
    "NavisAdapter",
    "PioupiouAdapter",
    "PioupiouShape",
    "PrimaryJsonShape",
    "RawSample",
    "SessionContext",
    "SourceAdapter",
    "TableScrapeAdapter",
    "WeatherfileAdapter",
]
