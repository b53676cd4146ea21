"""Adapter for Navis Live Data telemetry (session cookie + hex-encoded records).

Every data call needs a PHPSESSID token obtained from the public viewer page.
The token is returned as a SessionContext and passed explicitly to the data
call; it is never kept on the adapter between fetches.
"""

from __future__ import annotations

import asyncio
import re
import time
from typing import Awaitable, Callable

import httpx

from windrelay import config
from windrelay.data_sources.base import (
    HistoricalTextShape,
    LiveTextShape,
    SessionContext,
    build_client,
    status_error,
)
from windrelay.errors import FetchError, SessionError, TransportError, excerpt
from windrelay.readings import utc_now
from windrelay.retry import RetryPolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/navis")

SESSION_COOKIE_RE = re.compile(r"PHPSESSID=([^;]+)")
ERROR_BODY = "error%"
MIN_BODY_LENGTH = 10


class NavisAdapter:
    """Fetch live and historical records for one Navis device."""

    source = "navis_binary"

    def __init__(
        self,
        *,
        base_url: str,
        viewer_id: str,
        imei: str,
        retry: RetryPolicy | None = None,
        settings: config.Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.viewer_id = viewer_id
        self.imei = imei
        self.settings = settings or config.settings
        self.retry = retry or RetryPolicy.from_settings(self.settings)
        self.transport = transport
        self._sleep = sleep
        self._clock = clock

    @property
    def session_url(self) -> str:
        return f"{self.base_url}/view.php?u={self.viewer_id}"

    @property
    def query_url(self) -> str:
        return f"{self.base_url}/query.php"

    def _headers(self) -> dict[str, str]:
        return {"Accept": "*/*", "Referer": self.session_url}

    async def establish_session(self) -> SessionContext | SessionError:
        """GET the viewer page and pull the PHPSESSID token out of Set-Cookie."""
        try:
            async with build_client(self.settings, transport=self.transport, headers=self._headers()) as client:
                resp = await client.get(self.session_url)
        except httpx.HTTPError as exc:
            return SessionError(self.source, f"Session request failed: {exc.__class__.__name__}: {exc}")

        if not resp.is_success:
            return SessionError(self.source, f"Session request returned HTTP {resp.status_code}",
                                status_code=resp.status_code)

        for header in resp.headers.get_list("set-cookie"):
            match = SESSION_COOKIE_RE.search(header)
            if match:
                logger.debug("Established Navis session")
                return SessionContext(token=match.group(1), established_at=utc_now())

        return SessionError(self.source, "No PHPSESSID cookie in session response")

    async def _query(self, session: SessionContext, params: dict[str, str | int]) -> str | FetchError:
        """Issue one data call with the session cookie attached."""
        await self._sleep(self.settings.session_propagation_delay_seconds)
        headers = {**self._headers(), "Cookie": session.cookie_header}
        async with build_client(self.settings, transport=self.transport, headers=headers) as client:
            resp = await client.get(self.query_url, params=params)
        error = status_error(self.source, resp)
        if error:
            return error
        body = resp.text.strip()
        if body == ERROR_BODY or len(body) < MIN_BODY_LENGTH:
            return TransportError(self.source, f"Upstream returned no data: {excerpt(body, 40)!r}")
        return body

    async def query_live(self, session: SessionContext) -> LiveTextShape | FetchError:
        """Fetch the instantaneous ``<ts>:<status>:<hex>`` record."""
        body = await self._query(session, {"imei": self.imei, "type": "live"})
        if isinstance(body, FetchError):
            return body
        return LiveTextShape(raw=body)

    async def query_historical(
        self, session: SessionContext, window_seconds: int | None = None
    ) -> HistoricalTextShape | FetchError:
        """Fetch ``<ts>:<hex>`` pairs covering the trailing window."""
        window = window_seconds or self.settings.historical_window_seconds
        now = int(self._clock())
        params = {"imei": self.imei, "type": "data", "from": now - window, "to": now}
        body = await self._query(session, params)
        if isinstance(body, FetchError):
            return body
        return HistoricalTextShape(raw=body)

    async def _with_session(self, query):
        session = await self.establish_session()
        if isinstance(session, SessionError):
            return session
        return await query(session)

    async def fetch_live(self) -> LiveTextShape | FetchError:
        """Session plus live record, retried as one attempt."""
        return await self.retry.run(self.source, lambda: self._with_session(self.query_live))

    async def fetch_historical(self) -> HistoricalTextShape | FetchError:
        """Session plus historical window, retried as one attempt."""
        return await self.retry.run(self.source, lambda: self._with_session(self.query_historical))

    async def fetch(self) -> LiveTextShape | FetchError:
        """Default single-sample fetch (live mode)."""
        return await self.fetch_live()
