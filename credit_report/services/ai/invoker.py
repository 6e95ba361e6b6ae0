"""Timeout + exponential-backoff retry wrapper for a single logical HTTP call."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

import httpx

from credit_report.telemetry import observe_llm_attempt

from .errors import ExhaustedRetriesError, ProviderTimeoutError

logger = logging.getLogger(__name__)

AttemptFn = Callable[[], Awaitable[httpx.Response]]
SleepFn = Callable[[float], Awaitable[None]]


def _truncate(value: str, max_length: int = 200) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class ResilientInvoker:
    """Run an HTTP attempt up to ``max_attempts`` times.

    The delay before attempt ``n`` (``n >= 2``) is ``base_delay * 2 ** (n - 2)``.
    Non-2xx responses, ``httpx.RequestError`` and per-attempt timeouts are
    retried; anything else propagates untouched. Every attempt runs as a fresh
    task under ``asyncio.wait_for``, so a timed-out request is cancelled before
    the next one starts and attempts never overlap.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        timeout: float = 600.0,
        *,
        sleep: SleepFn | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep or asyncio.sleep

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before the given 1-based attempt."""

        if attempt < 2:
            return 0.0
        return self.base_delay * 2 ** (attempt - 2)

    async def invoke(self, attempt_fn: AttemptFn, *, provider_name: str) -> httpx.Response:
        last_error: BaseException | None = None
        last_status: int | None = None
        last_detail = "unknown error"
        timed_out = False

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                delay = self.delay_before(attempt)
                logger.info(
                    "Retry attempt %s/%s for %s in %.2fs",
                    attempt,
                    self.max_attempts,
                    provider_name,
                    delay,
                )
                await self._sleep(delay)

            started = time.perf_counter()
            try:
                response = await asyncio.wait_for(attempt_fn(), timeout=self.timeout)
            except asyncio.TimeoutError as exc:
                timed_out = True
                last_error = exc
                last_status = None
                last_detail = f"timed out after {self.timeout}s"
                observe_llm_attempt(provider_name, "timeout")
                logger.warning(
                    "%s request timed out (attempt %s/%s)",
                    provider_name,
                    attempt,
                    self.max_attempts,
                )
                continue
            except httpx.RequestError as exc:
                timed_out = False
                last_error = exc
                last_status = None
                last_detail = f"{type(exc).__name__}: {exc}"
                observe_llm_attempt(provider_name, "network_error")
                logger.warning(
                    "%s request error (attempt %s/%s): %s",
                    provider_name,
                    attempt,
                    self.max_attempts,
                    last_detail,
                )
                continue

            if response.is_success:
                observe_llm_attempt(provider_name, "success")
                logger.debug(
                    "%s responded %s in %.2fs (attempt %s)",
                    provider_name,
                    response.status_code,
                    time.perf_counter() - started,
                    attempt,
                )
                return response

            timed_out = False
            last_error = None
            last_status = response.status_code
            last_detail = f"HTTP {response.status_code} - {_truncate(response.text)}"
            observe_llm_attempt(provider_name, "http_error")
            logger.warning(
                "%s returned HTTP %s (attempt %s/%s)",
                provider_name,
                response.status_code,
                attempt,
                self.max_attempts,
            )

        if timed_out:
            raise ProviderTimeoutError(
                f"Request timed out after {self.max_attempts} attempts",
                provider_name,
                cause=last_error,
            )
        raise ExhaustedRetriesError(
            f"Request failed after {self.max_attempts} attempts: {last_detail}",
            provider_name,
            attempts=self.max_attempts,
            cause=last_error,
            status_code=last_status,
        )


__all__ = ["ResilientInvoker"]
