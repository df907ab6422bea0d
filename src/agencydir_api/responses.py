"""Standardized API response bodies and header sets."""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from agencydir_shared.config import settings

from agencydir_api.errors import ApiError, DatabaseError

NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ApiErrorBody(BaseModel):
    error: ErrorDetail


def listing_response(data: list[dict[str, Any]], pagination: dict[str, Any]) -> dict[str, Any]:
    """Build the listing body. Key order is fixed; the ETag hashes it as-is."""
    return {"data": data, "pagination": pagination}


def error_response(
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a standardized error response dict."""
    err: dict[str, Any] = {"code": code, "message": message}
    if details:
        err["details"] = details
    return {"error": err}


def api_error_response(exc: ApiError) -> JSONResponse:
    """Render an ApiError with the no-cache header set.

    Database diagnostics are withheld in production.
    """
    details: dict[str, Any] | None = exc.details
    if isinstance(exc, DatabaseError) and settings.is_production:
        details = None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, details=details),
        headers=NO_CACHE_HEADERS,
    )
