"""Interfaces and raw sample shapes for upstream weather sources."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Literal, Optional, Protocol, Union

import httpx
from pydantic import BaseModel

from windrelay import config
from windrelay.errors import FetchError, TransportError


class HtmlTableSample(BaseModel):
    """HTML snapshot page with label/value table cells."""
    kind: Literal["html_table"] = "html_table"
    html: str


class LiveTextShape(BaseModel):
    """Navis live record: ``<ts>:<status>:<hex>``."""
    kind: Literal["live_text"] = "live_text"
    raw: str


class HistoricalTextShape(BaseModel):
    """Navis historical window: ``<ts>:<hex>,<ts>:<hex>,...``."""
    kind: Literal["historical_text"] = "historical_text"
    raw: str


class WeatherfilePrimaryData(BaseModel):
    wsa: float
    wda: float
    wsh: Optional[float] = None
    ts: Optional[str] = None


class PrimaryJsonShape(BaseModel):
    """Averaged wind plus gust, in knots."""
    kind: Literal["primary_json"] = "primary_json"
    status: Literal["ok"]
    data: WeatherfilePrimaryData


class WeatherfileFallbackData(BaseModel):
    wsc: float
    wdc: float
    ts: Optional[str] = None


class FallbackJsonShape(BaseModel):
    """Current wind and direction only, in knots."""
    kind: Literal["fallback_json"] = "fallback_json"
    status: Literal["ok"]
    data: WeatherfileFallbackData


class PioupiouMeasurements(BaseModel):
    date: Optional[dt.datetime] = None
    pressure: Optional[float] = None
    wind_heading: Optional[float] = None
    wind_speed_avg: Optional[float] = None
    wind_speed_max: Optional[float] = None
    wind_speed_min: Optional[float] = None


class PioupiouMeta(BaseModel):
    name: Optional[str] = None


class PioupiouStatus(BaseModel):
    state: Optional[str] = None


class PioupiouData(BaseModel):
    id: int
    meta: PioupiouMeta = PioupiouMeta()
    measurements: PioupiouMeasurements
    status: PioupiouStatus = PioupiouStatus()


class PioupiouShape(BaseModel):
    """Pioupiou ``live-with-meta`` payload, wind in km/h."""
    kind: Literal["pioupiou_json"] = "pioupiou_json"
    data: PioupiouData


RawSample = Union[
    HtmlTableSample,
    LiveTextShape,
    HistoricalTextShape,
    PrimaryJsonShape,
    FallbackJsonShape,
    PioupiouShape,
]


@dataclass(frozen=True)
class SessionContext:
    """Short-lived upstream session, passed explicitly to each data call."""
    token: str
    established_at: dt.datetime

    @property
    def cookie_header(self) -> str:
        return f"PHPSESSID={self.token}"


class SourceAdapter(Protocol):
    """Anything that can fetch one raw sample for a station."""

    source: str

    async def fetch(self) -> RawSample | FetchError:
        """Return a raw sample or a fetch error value."""
        ...


def build_client(
    settings: config.Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create a short-lived AsyncClient with the per-attempt timeout applied."""
    settings = settings or config.settings
    merged = {"User-Agent": settings.user_agent}
    merged.update(headers or {})
    return httpx.AsyncClient(
        timeout=settings.request_timeout_seconds,
        follow_redirects=True,
        headers=merged,
        transport=transport,
    )


def status_error(source: str, response: httpx.Response) -> TransportError | None:
    """Return a TransportError for non-2xx responses."""
    if response.is_success:
        return None
    return TransportError(
        source,
        f"HTTP {response.status_code}: {response.reason_phrase}",
        status_code=response.status_code,
    )
