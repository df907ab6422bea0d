"""
utils/retry.py: Retrying executor for blocking data-store calls.

Uses tenacity under the hood. Every store query in a request goes through
one `RetryingFetcher`, so the backoff policy and the transient-error rules
live here and nowhere else.

Usage:
    fetcher = RetryingFetcher(RetryPolicy.from_settings(), monitor=monitor)
    ids = await fetcher.run("trade_lookup", store.lookup_trade_ids, ["electricians"])

Delays: initial_delay * backoff_multiplier^(attempt-1), so 1 s then 1.5 s
with the default three attempts. Each attempt gets `attempt_timeout`, cut
short to whatever remains of `total_timeout`.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
import structlog
from postgrest.exceptions import APIError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from agencydir_shared.config import settings

from agencydir_api.errors import DatabaseError
from agencydir_api.utils.monitoring import PerformanceMonitor

log = structlog.get_logger(__name__)

T = TypeVar("T")

# SQLSTATE codes for connection-class failures
RETRYABLE_CODES = frozenset({
    "57P03",  # cannot_connect_now
    "53300",  # too_many_connections
    "08000",  # connection_exception
    "08001",  # sqlclient_unable_to_establish_sqlconnection
    "08003",  # connection_does_not_exist
    "08004",  # sqlserver_rejected_establishment_of_sqlconnection
    "08006",  # connection_failure
})

AUTH_CODES = frozenset({
    "401", "403",
    "42501",     # insufficient_privilege
    "PGRST301",  # JWT invalid
    "PGRST302",  # anonymous access disabled
})

TRANSIENT_MARKERS = ("econnrefused", "etimedout", "enotfound", "timed out", "timeout", "connection reset")
AUTH_MARKERS = ("jwt", "permission denied", "unauthorized", "forbidden")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_delay: float = 1.0
    backoff_multiplier: float = 1.5
    attempt_timeout: float = 5.0
    total_timeout: float = 15.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay,
            backoff_multiplier=settings.retry_backoff_multiplier,
            attempt_timeout=settings.db_query_timeout,
            total_timeout=settings.db_retry_total_timeout,
        )


def _error_code(exc: BaseException) -> str | None:
    code = getattr(exc, "code", None)
    if code is None and isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
    return str(code) if code is not None else None


def is_auth_error(exc: BaseException) -> bool:
    if _error_code(exc) in AUTH_CODES:
        return True
    message = str(getattr(exc, "message", None) or exc).lower()
    return any(marker in message for marker in AUTH_MARKERS)


def is_transient_error(exc: BaseException) -> bool:
    """True for network/timeout failures that are worth another attempt."""
    if is_auth_error(exc):
        return False
    if isinstance(exc, (httpx.TransportError, TimeoutError)):
        return True
    if _error_code(exc) in RETRYABLE_CODES:
        return True
    message = str(getattr(exc, "message", None) or exc).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


def _error_details(name: str, exc: BaseException, attempts: int) -> dict[str, Any]:
    details: dict[str, Any] = {"query": name, "attempts": attempts, "error": str(exc)}
    if isinstance(exc, APIError):
        details["code"] = exc.code
    return details


class RetryingFetcher:
    """Runs blocking store calls off the event loop with bounded retries."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        monitor: PerformanceMonitor | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.policy = policy or RetryPolicy.from_settings()
        self._monitor = monitor
        self._sleep = sleep

    async def _attempt(self, name: str, deadline: float, fn: Callable[..., T], *args: Any) -> T:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError(f"{name}: retry budget of {self.policy.total_timeout}s spent")
        tracker = self._monitor.track(name) if self._monitor else contextlib.nullcontext()
        with tracker:
            return await asyncio.wait_for(
                asyncio.to_thread(fn, *args),
                timeout=min(self.policy.attempt_timeout, remaining),
            )

    async def run(self, name: str, fn: Callable[..., T], *args: Any) -> T:
        """
        Execute `fn(*args)` and return its result.

        Raises:
            DatabaseError: the call failed with a non-transient error, or
                every attempt failed transiently.
        """
        policy = self.policy
        attempt_log = log.bind(query=name)

        def log_retry(retry_state: RetryCallState) -> None:
            outcome = retry_state.outcome
            attempt_log.warning(
                "retry_attempt",
                attempt=retry_state.attempt_number,
                max_attempts=policy.max_attempts,
                delay_s=retry_state.upcoming_sleep,
                last_error=str(outcome.exception()) if outcome else None,
            )

        attempts = 0
        deadline = time.monotonic() + policy.total_timeout
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(policy.max_attempts)
                | stop_after_delay(policy.total_timeout),
                wait=wait_exponential(
                    multiplier=policy.initial_delay,
                    exp_base=policy.backoff_multiplier,
                ),
                retry=retry_if_exception(is_transient_error),
                before_sleep=log_retry,
                sleep=self._sleep,
                reraise=True,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    return await self._attempt(name, deadline, fn, *args)
        except Exception as exc:
            if is_transient_error(exc):
                attempt_log.error("retry_exhausted", attempts=attempts, error=str(exc))
            else:
                attempt_log.error("query_failed", error=str(exc), exc_info=True)
            raise DatabaseError(
                "Failed to query the directory",
                details=_error_details(name, exc, attempts),
            ) from exc
