"""Per-request logging with a correlation id."""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Liveness/readiness probes are polled constantly; keep them out of info logs
QUIET_PATHS = frozenset({"/health", "/ready"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds request_id/method/path into structlog contextvars for the
    lifetime of the request, echoes the id back to the client and logs one
    summary line per request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.monotonic()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                error=str(exc),
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        elapsed_ms = round((time.monotonic() - start) * 1000, 2)
        if response.status_code >= 500:
            emit = logger.warning
        elif request.url.path in QUIET_PATHS:
            emit = logger.debug
        else:
            emit = logger.info
        emit(
            "request_completed",
            status=response.status_code,
            duration_ms=elapsed_ms,
            query=request.url.query or None,
        )
        return response
