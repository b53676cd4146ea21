"""Failure values returned across adapter, parser and collector boundaries.

Expected failures are returned, not raised. Only unknown identifiers (a caller
bug or a bad URL) are raised, as LookupError subclasses.
"""
from __future__ import annotations

from dataclasses import dataclass

EXCERPT_MAX_BYTES = 200


def excerpt(raw: str | bytes | None, limit: int = EXCERPT_MAX_BYTES) -> str:
    """Return at most `limit` bytes of raw content as text for diagnostics."""
    if raw is None:
        return ""
    data = raw if isinstance(raw, bytes) else str(raw).encode("utf-8", errors="replace")
    return data[:limit].decode("utf-8", errors="ignore")


@dataclass
class FetchError:
    """Base failure for an adapter fetch."""
    source: str
    message: str
    status_code: int | None = None
    attempts: int = 1

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return f"{self.kind}({self.source}): {self.message}"


@dataclass
class TransportError(FetchError):
    """Network failure, timeout or non-2xx status."""


@dataclass
class SessionError(FetchError):
    """A session token could not be established."""


@dataclass
class SchemaError(FetchError):
    """The upstream payload did not have the expected shape."""


@dataclass
class ParseError:
    """A raw sample could not be turned into a reading."""
    label: str
    message: str
    raw_excerpt: str = ""

    def __str__(self) -> str:
        return f"ParseError({self.label}): {self.message}"


@dataclass
class CollectionError:
    """Collector-level failure, stripped of protocol detail."""
    station_id: str
    message: str

    def __str__(self) -> str:
        return self.message


class UnknownStationError(LookupError):
    """Raised when a station id is not configured."""


class UnknownRegionError(LookupError):
    """Raised when a region id is not configured."""
