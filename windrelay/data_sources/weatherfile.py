"""Adapter for weatherfile.com stations (primary + fallback JSON endpoints)."""

from __future__ import annotations

import json

import httpx
from pydantic import BaseModel, ValidationError

from windrelay import config
from windrelay.data_sources.base import FallbackJsonShape, PrimaryJsonShape, build_client, status_error
from windrelay.errors import FetchError, SchemaError, TransportError
from windrelay.retry import RetryPolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/weatherfile")


class WeatherfileAdapter:
    """POST the averaged-wind endpoint, dropping to the current-value endpoint on failure."""

    source = "weatherfile_json"

    def __init__(
        self,
        *,
        base_url: str,
        location: str,
        token: str,
        retry: RetryPolicy | None = None,
        settings: config.Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.location = location
        self.token = token
        self.settings = settings or config.settings
        self.retry = retry or RetryPolicy.from_settings(self.settings)
        self.transport = transport

    @property
    def primary_url(self) -> str:
        return f"{self.base_url}/{self.location}/infowindow.ajax"

    @property
    def fallback_url(self) -> str:
        return f"{self.base_url}/{self.location}/latest.json"

    async def _post(self, client: httpx.AsyncClient, url: str, shape: type[BaseModel]):
        """POST with an empty body and validate the payload against `shape`."""
        resp = await client.post(url, content=b"")
        error = status_error(self.source, resp)
        if error:
            return error
        try:
            return shape.model_validate(resp.json())
        except (ValidationError, json.JSONDecodeError) as exc:
            return SchemaError(self.source, f"Unexpected payload from {url}: {exc.__class__.__name__}")

    async def _attempt(self) -> PrimaryJsonShape | FallbackJsonShape | FetchError:
        headers = {"wf-tkn": self.token, "Accept": "application/json"}
        async with build_client(self.settings, transport=self.transport, headers=headers) as client:
            try:
                primary = await self._post(client, self.primary_url, PrimaryJsonShape)
            except httpx.HTTPError as exc:
                primary = TransportError(self.source, f"{exc.__class__.__name__}: {exc}")
            if not isinstance(primary, FetchError):
                return primary

            logger.info(
                "Primary endpoint failed, using fallback",
                extra={"location": self.location, "error": primary.message},
            )
            return await self._post(client, self.fallback_url, FallbackJsonShape)

    async def fetch(self) -> PrimaryJsonShape | FallbackJsonShape | FetchError:
        """Fetch the best available shape under the retry policy."""
        return await self.retry.run(self.source, self._attempt)
