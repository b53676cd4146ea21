"""Shared retry-with-backoff policy for every upstream network call."""
from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import httpx

from windrelay import config
from windrelay.errors import FetchError, TransportError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="retry")

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Retry an attempt until it succeeds or attempts run out.

    Every returned FetchError is retried, including ones that look permanent
    (e.g. a truncated body), because upstream flakiness is the common case.
    """
    max_attempts: int = 3
    initial_delay: float = 2.0
    backoff: float = 1.5
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def from_settings(cls, settings: config.Settings | None = None) -> "RetryPolicy":
        """Build the policy from service settings."""
        settings = settings or config.settings
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay_seconds,
            backoff=settings.retry_backoff_multiplier,
        )

    def delays(self) -> list[float]:
        """Delays slept between consecutive attempts."""
        return [self.initial_delay * (self.backoff ** i) for i in range(max(0, self.max_attempts - 1))]

    async def run(self, source: str, attempt: Callable[[], Awaitable[T | FetchError]]) -> T | FetchError:
        """Run `attempt` under the policy and return its value or the last error."""
        last_error: FetchError | None = None
        delays = self.delays()
        for n in range(1, max(1, self.max_attempts) + 1):
            try:
                result = await attempt()
            except httpx.TimeoutException as exc:
                result = TransportError(source, f"timeout: {exc.__class__.__name__}")
            except httpx.HTTPStatusError as exc:
                result = TransportError(
                    source, f"HTTP {exc.response.status_code}", status_code=exc.response.status_code
                )
            except httpx.HTTPError as exc:
                result = TransportError(source, f"{exc.__class__.__name__}: {exc}")

            if not isinstance(result, FetchError):
                if n > 1:
                    logger.info("Upstream fetch recovered", extra={"source": source, "attempt": n})
                return result

            last_error = result
            logger.warning(
                f"Fetch attempt {n}/{self.max_attempts} failed for {source}: {result.message}",
                extra={"source": source, "attempt": n, "error_kind": result.kind},
            )
            if n <= len(delays):
                await self.sleep(delays[n - 1])

        assert last_error is not None
        return dataclasses.replace(last_error, attempts=self.max_attempts)
