"""
utils/monitoring.py: request timing and process-wide error-rate counters.

A `PerformanceMonitor` lives for one request. It times named store queries,
sums them into a database-time total, and on `complete()` logs one
`api_performance` event plus any budget warnings. Warnings never affect the
response.

`error_rate_tracker` is the only state that outlives a request: per-route
request/error counts that only ever grow until the process restarts.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from agencydir_shared.config import settings

log = structlog.get_logger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class PerformanceMonitor:
    """Per-request timer for the route and its store queries."""

    def __init__(self, route: str, method: str = "GET") -> None:
        self.route = route
        self.method = method
        self._start = time.perf_counter()
        self._open: dict[str, float] = {}
        self._query_ms = 0.0
        self.queries: dict[str, float] = {}

    def start_query(self, name: str) -> None:
        self._open[name] = time.perf_counter()

    def end_query(self, name: str) -> None:
        started = self._open.pop(name, None)
        if started is None:
            return
        elapsed = _elapsed_ms(started)
        self._query_ms += elapsed
        self.queries[name] = self.queries.get(name, 0.0) + elapsed

    @contextmanager
    def track(self, name: str) -> Iterator[None]:
        # Query names are unique per request; retries of one name run in sequence.
        self.start_query(name)
        try:
            yield
        finally:
            self.end_query(name)

    @property
    def query_time_ms(self) -> float:
        return self._query_ms

    def complete(
        self,
        status: int,
        message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, int]:
        """Finish timing and log the request. Returns rounded milliseconds."""
        response_ms = round(_elapsed_ms(self._start))
        query_ms = round(self._query_ms)
        metrics = {"responseTime": response_ms, "queryTime": query_ms}

        event = log.bind(
            route=self.route,
            method=self.method,
            status=status,
            response_ms=response_ms,
            query_ms=query_ms,
            **(metadata or {}),
        )
        if message:
            event.error("api_performance", error=message)
        elif response_ms > settings.perf_warning_ms:
            event.warning("api_performance")
        else:
            event.info("api_performance")

        self._check_alerts(event, response_ms, query_ms)
        return metrics

    def _check_alerts(self, event: Any, response_ms: int, query_ms: int) -> None:
        if query_ms > settings.slow_query_ms:
            event.warning("slow_query", threshold_ms=settings.slow_query_ms)
        if response_ms > settings.critical_response_ms:
            event.error("critical_performance", threshold_ms=settings.critical_response_ms)
        elif response_ms > settings.perf_warning_ms:
            event.warning(
                "performance_warning",
                target_ms=settings.perf_target_ms,
                threshold_ms=settings.perf_warning_ms,
            )


class ErrorRateTracker:
    """Per-route request and error tallies. No window, no eviction."""

    def __init__(self) -> None:
        self._requests: dict[str, int] = {}
        self._errors: dict[str, int] = {}
        self._lock = threading.Lock()

    def record_request(self, route: str, is_error: bool) -> None:
        with self._lock:
            self._requests[route] = self._requests.get(route, 0) + 1
            if is_error:
                self._errors[route] = self._errors.get(route, 0) + 1

    def get_error_rate(self, route: str) -> float:
        """Percentage of failed requests for `route` (0 when unseen)."""
        with self._lock:
            requests = self._requests.get(route, 0)
            errors = self._errors.get(route, 0)
        return (errors / requests) * 100 if requests else 0.0

    def get_all_error_rates(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {
                route: {
                    "errorRate": (self._errors.get(route, 0) / requests) * 100,
                    "totalRequests": requests,
                }
                for route, requests in self._requests.items()
            }

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()
            self._errors.clear()


error_rate_tracker = ErrorRateTracker()
