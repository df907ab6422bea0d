"""
Exception hierarchy for the listing API.

Every failure a request can end in maps to one `ApiError` subclass, which
carries the public error code and HTTP status:

- InvalidParamsError       400 INVALID_PARAMS   (never retried)
- DatabaseError            500 DATABASE_ERROR   (after retries are exhausted)
- DataStoreUnavailableError 500 DATABASE_ERROR  (no store client configured)
- InternalError            500 INTERNAL_ERROR   (anything unexpected)
"""

from __future__ import annotations

from typing import Any

from agencydir_shared.constants import DATABASE_ERROR, INTERNAL_ERROR, INVALID_PARAMS


class ApiError(Exception):
    """Base class for errors rendered as `{"error": {code, message, details}}`."""

    code: str = INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidParamsError(ApiError):
    """Client-supplied query parameters failed validation."""

    code = INVALID_PARAMS
    status_code = 400

    def __init__(self, issues: list[dict[str, Any]]) -> None:
        super().__init__("Invalid query parameters", details={"issues": issues})
        self.issues = issues


class DatabaseError(ApiError):
    """A store query failed permanently or ran out of retries."""

    code = DATABASE_ERROR
    status_code = 500


class DataStoreUnavailableError(DatabaseError):
    """No store client could be constructed for this process."""

    def __init__(self, *, url_set: bool, key_set: bool, reason: str | None = None) -> None:
        details: dict[str, Any] = {
            "env": {
                "url": "Set" if url_set else "Not set",
                "key": "Set" if key_set else "Not set",
            }
        }
        if reason:
            details["reason"] = reason
        super().__init__("Database connection not initialized", details=details)


class InternalError(ApiError):
    """Unexpected failure; the client only ever sees a generic message."""

    code = INTERNAL_ERROR
    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(message)
