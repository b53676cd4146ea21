"""Adapter for the Pioupiou public live API."""

from __future__ import annotations

import json

import httpx
from pydantic import ValidationError

from windrelay import config
from windrelay.data_sources.base import PioupiouShape, build_client, status_error
from windrelay.errors import FetchError, SchemaError
from windrelay.retry import RetryPolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/pioupiou")


class PioupiouAdapter:
    """Single GET of ``live-with-meta/{id}``, guarded against misrouted responses."""

    source = "pioupiou_json"

    def __init__(
        self,
        station_number: int,
        *,
        base_url: str,
        retry: RetryPolicy | None = None,
        settings: config.Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.station_number = station_number
        self.base_url = base_url.rstrip("/")
        self.settings = settings or config.settings
        self.retry = retry or RetryPolicy.from_settings(self.settings)
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.station_number}"

    async def _attempt(self) -> PioupiouShape | FetchError:
        async with build_client(self.settings, transport=self.transport, headers={"Accept": "application/json"}) as client:
            resp = await client.get(self.url)
        error = status_error(self.source, resp)
        if error:
            return error
        try:
            shape = PioupiouShape.model_validate(resp.json())
        except (ValidationError, json.JSONDecodeError) as exc:
            return SchemaError(self.source, f"Unexpected payload for station {self.station_number}: "
                                            f"{exc.__class__.__name__}")

        if shape.data.id != self.station_number:
            return SchemaError(self.source, f"Station id mismatch: expected {self.station_number}, "
                                            f"got {shape.data.id}")
        if shape.data.status.state != "on":
            logger.warning(
                f"Pioupiou station {self.station_number} is not active",
                extra={"state": shape.data.status.state},
            )
        return shape

    async def fetch(self) -> PioupiouShape | FetchError:
        """Fetch the station payload under the retry policy."""
        return await self.retry.run(self.source, self._attempt)
