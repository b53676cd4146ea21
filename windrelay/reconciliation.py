"""Historical-window reconciliation for Navis telemetry.

A single live frame cannot yield a gust and occasionally carries a corrupt
temperature. Wind statistics come from the trailing historical window; the
live frame's temperature wins whenever it decodes to a plausible value.
"""

from __future__ import annotations

import datetime as dt
import statistics
from dataclasses import dataclass
from typing import Optional

from windrelay.data_sources.base import HistoricalTextShape, LiveTextShape
from windrelay.errors import FetchError, ParseError, excerpt
from windrelay.parsers.navis import (
    LABEL,
    NavisFrame,
    decode_live,
    decode_navis_hex,
    parse_epoch,
    parse_historical_pairs,
    parse_live_sample,
)
from windrelay.readings import CanonicalReading, build_reading, sanitize_temperature, utc_now
from windrelay.units import knots_to_mps
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="reconciliation")

DEFAULT_MAX_SAMPLES = 30
DEFAULT_OUTLIER_THRESHOLD_C = 8.0


@dataclass
class WindowSummary:
    """Statistics over the retained historical frames (wind in knots)."""
    avg_knots: float
    gust_knots: float
    direction: int
    temperature: float
    sample_count: int
    newest: Optional[dt.datetime]


def filtered_temperature(temps: list[float], threshold: float = DEFAULT_OUTLIER_THRESHOLD_C) -> float:
    """Median-anchored outlier rejection, then mean; median when nothing survives."""
    median = statistics.median(temps)
    kept = [t for t in temps if abs(t - median) <= threshold]
    if not kept:
        return median
    return sum(kept) / len(kept)


def summarize_window(
    pairs: list[tuple[int, str]],
    *,
    max_samples: int = DEFAULT_MAX_SAMPLES,
    outlier_threshold: float = DEFAULT_OUTLIER_THRESHOLD_C,
) -> WindowSummary | None:
    """Sort, keep the newest `max_samples`, decode, and aggregate."""
    recent = sorted(pairs, key=lambda p: p[0])[-max_samples:]
    decoded: list[tuple[int, NavisFrame]] = []
    for ts, hex_value in recent:
        try:
            decoded.append((ts, decode_navis_hex(hex_value)))
        except ValueError as exc:
            logger.debug(f"Skipping undecodable historical frame at {ts}: {exc}")
    if not decoded:
        return None

    speeds = [f.speed_knots for _, f in decoded]
    directions = [f.direction for _, f in decoded]
    temps = [f.temperature for _, f in decoded]
    newest = parse_epoch(decoded[-1][0])

    return WindowSummary(
        avg_knots=sum(speeds) / len(speeds),
        gust_knots=max(speeds),
        # arithmetic mean, no circular correction
        direction=round(sum(directions) / len(directions)),
        temperature=round(filtered_temperature(temps, outlier_threshold), 1),
        sample_count=len(decoded),
        newest=newest,
    )


def reconcile(
    station_id: str,
    historical: HistoricalTextShape | FetchError,
    live: LiveTextShape | FetchError,
    *,
    max_samples: int = DEFAULT_MAX_SAMPLES,
    outlier_threshold: float = DEFAULT_OUTLIER_THRESHOLD_C,
) -> CanonicalReading | FetchError | ParseError:
    """Merge the historical window and live frame into one reading."""
    live_decoded = decode_live(live) if isinstance(live, LiveTextShape) else live
    live_frame: NavisFrame | None = None
    if isinstance(live_decoded, tuple):
        live_frame = live_decoded[1]
    else:
        logger.info(f"Live frame unavailable for {station_id}; no temperature override",
                    extra={"error": str(live_decoded)})

    summary: WindowSummary | None = None
    historical_problem: FetchError | ParseError
    if isinstance(historical, HistoricalTextShape):
        summary = summarize_window(
            parse_historical_pairs(historical), max_samples=max_samples, outlier_threshold=outlier_threshold
        )
        historical_problem = ParseError(LABEL, "No valid historical samples", excerpt(historical.raw))
    else:
        historical_problem = historical

    if summary is not None:
        temperature = summary.temperature
        live_temperature = (
            sanitize_temperature(round(live_frame.temperature, 1)) if live_frame is not None else None
        )
        if live_temperature is not None:
            temperature = live_temperature
        elif live_frame is not None:
            logger.info(f"Implausible live temperature for {station_id}; keeping historical value",
                        extra={"live_temperature": live_frame.temperature})
        logger.debug(
            f"Historical window for {station_id}: avg={summary.avg_knots:.1f}kn gust={summary.gust_knots:.1f}kn "
            f"dir={summary.direction} samples={summary.sample_count}"
        )
        return build_reading(
            station_id,
            timestamp=summary.newest or utc_now(),
            wind_speed=knots_to_mps(summary.avg_knots),
            wind_gust=knots_to_mps(summary.gust_knots),
            wind_direction=summary.direction,
            temperature=temperature,
            source=LABEL,
        )

    if live_frame is None:
        logger.warning(f"Historical and live both failed for {station_id}",
                       extra={"historical_error": str(historical_problem)})
        return live_decoded if isinstance(live_decoded, (FetchError, ParseError)) else historical_problem

    logger.info(f"Historical window unavailable for {station_id}; using live frame",
                extra={"error": str(historical_problem)})
    return parse_live_sample(live, station_id)
