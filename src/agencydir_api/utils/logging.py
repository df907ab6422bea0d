"""
utils/logging.py: structlog configuration for the API process.

Console rendering in development, JSON everywhere else unless
settings.log_format says otherwise. Every event carries the deployment
environment, and request-scoped fields bound by LoggingMiddleware
(request_id, method, path) are merged in from contextvars.

Usage:
    from agencydir_api.utils.logging import configure_logging

    configure_logging()
    log = structlog.get_logger(__name__)
    log.info("filter_short_circuit", dimension="trade")
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from agencydir_shared.config import settings

# Chatty client libraries underneath supabase-py
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def _add_environment(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("env", settings.environment)
    return event_dict


def _renderer(fmt: str) -> Any:
    if fmt == "console" and not settings.is_production:
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.JSONRenderer()


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog and stdlib logging for the API. Safe to call again.

    Args:
        log_level:  Override settings.log_level ("DEBUG", "INFO", ...).
        log_format: Override settings.log_format ("json" | "console").
            Production always renders JSON.
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    # uvicorn and supabase's HTTP stack log through stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _add_environment,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(log_format or settings.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
