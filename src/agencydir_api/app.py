"""
FastAPI application factory for the agency directory API.

Start with:
    uvicorn agencydir_api.app:app --reload --port 8000

Endpoints:
    GET  /health
    GET  /ready
    GET  /v1/agencies
    GET  /v1/monitoring/metrics
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agencydir_shared.config import settings

from agencydir_api import __version__
from agencydir_api.middleware.logging import LoggingMiddleware
from agencydir_api.routers.health import router as health_router
from agencydir_api.routers.v1 import v1_router
from agencydir_api.utils.logging import configure_logging

logger = structlog.get_logger()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Agency Directory API",
        description="Staffing agency directory listing API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["If-None-Match", "X-Request-ID"],
        expose_headers=["ETag", "X-Request-ID"],
    )

    app.add_middleware(LoggingMiddleware)

    # Routers
    app.include_router(health_router)
    app.include_router(v1_router)

    logger.info("app_created", cors_origins=settings.cors_origins_list)
    return app


app = create_app()
