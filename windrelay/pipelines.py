"""Adapter -> parser (-> reconciliation) chains, one per station."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from windrelay.data_sources.base import SourceAdapter
from windrelay.data_sources.navis import NavisAdapter
from windrelay.errors import FetchError, ParseError
from windrelay.readings import CanonicalReading
from windrelay.reconciliation import DEFAULT_MAX_SAMPLES, DEFAULT_OUTLIER_THRESHOLD_C, reconcile

PipelineResult = CanonicalReading | FetchError | ParseError


class StationPipeline(Protocol):
    """Produces one canonical reading (or failure value) per run."""

    station_id: str

    async def run(self) -> PipelineResult:
        ...


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


@dataclass
class SimplePipeline:
    """Fetch one raw sample and hand it to a parser."""
    station_id: str
    adapter: SourceAdapter
    parser: Callable[..., CanonicalReading | ParseError]

    async def run(self) -> PipelineResult:
        """Fetch then parse; parse latency is recorded on the reading."""
        sample = await self.adapter.fetch()
        if isinstance(sample, FetchError):
            return sample
        start = time.perf_counter()
        result = self.parser(sample, self.station_id)
        if isinstance(result, CanonicalReading):
            result.parse_latency_ms = _elapsed_ms(start)
        return result


@dataclass
class NavisPipeline:
    """Historical window and live frame fetched concurrently, then reconciled."""
    station_id: str
    adapter: NavisAdapter
    max_samples: int = DEFAULT_MAX_SAMPLES
    outlier_threshold: float = DEFAULT_OUTLIER_THRESHOLD_C

    async def run(self) -> PipelineResult:
        """Fetch both modes and reconcile."""
        historical, live = await asyncio.gather(self.adapter.fetch_historical(), self.adapter.fetch_live())
        start = time.perf_counter()
        result = reconcile(
            self.station_id,
            historical,
            live,
            max_samples=self.max_samples,
            outlier_threshold=self.outlier_threshold,
        )
        if isinstance(result, CanonicalReading):
            result.parse_latency_ms = _elapsed_ms(start)
        return result
