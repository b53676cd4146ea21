"""Periodic cache pre-warm for every configured station."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from windrelay.collector import Collector
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="scheduler")


async def run_periodic_collection(
    collector: Collector,
    interval_seconds: float,
    *,
    max_runs: Optional[int] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Call `collect_all` every `interval_seconds` until cancelled.

    A failed run is logged and the loop carries on. Returns the number of
    completed runs when `max_runs` is reached.
    """
    runs = 0
    logger.info(f"Starting scheduled collection every {interval_seconds}s")
    while max_runs is None or runs < max_runs:
        try:
            await collector.collect_all(force_refresh=True)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled collection run failed")
        runs += 1
        if max_runs is not None and runs >= max_runs:
            break
        await sleep(interval_seconds)
    return runs


def start_scheduler(collector: Collector, interval_seconds: float) -> asyncio.Task:
    """Start the collection loop as a background task."""
    return asyncio.create_task(run_periodic_collection(collector, interval_seconds), name="windrelay-scheduler")
