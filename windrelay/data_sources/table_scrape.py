"""Adapter for the Southampton VTS Brambles Bank snapshot page."""

from __future__ import annotations

import httpx

from windrelay import config
from windrelay.data_sources.base import HtmlTableSample, build_client, status_error
from windrelay.errors import FetchError, TransportError
from windrelay.retry import RetryPolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/table_scrape")

# Anything shorter cannot hold the weather table.
MIN_BODY_LENGTH = 50


class TableScrapeAdapter:
    """Single GET of an HTML page holding ``<td>Label</td><td>Value</td>`` rows."""

    source = "table_scrape"

    def __init__(
        self,
        url: str,
        *,
        referer: str | None = None,
        retry: RetryPolicy | None = None,
        settings: config.Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.referer = referer
        self.settings = settings or config.settings
        self.retry = retry or RetryPolicy.from_settings(self.settings)
        self.transport = transport

    async def _attempt(self) -> HtmlTableSample | FetchError:
        headers = {"Accept": "text/html,*/*"}
        if self.referer:
            headers["Referer"] = self.referer
        async with build_client(self.settings, transport=self.transport, headers=headers) as client:
            resp = await client.get(self.url)
        error = status_error(self.source, resp)
        if error:
            return error
        html = resp.text
        if len(html) < MIN_BODY_LENGTH:
            return TransportError(self.source, f"Response too short ({len(html)} bytes)")
        logger.debug(f"Received {len(html)} bytes from table page")
        return HtmlTableSample(html=html)

    async def fetch(self) -> HtmlTableSample | FetchError:
        """Fetch the HTML snapshot under the retry policy."""
        return await self.retry.run(self.source, self._attempt)
