"""HTTP conditional caching: ETag fingerprints and If-None-Match handling."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from fastapi.responses import Response

from agencydir_shared.config import settings


def public_cache_control(max_age: int | None = None) -> str:
    age = settings.cache_max_age if max_age is None else max_age
    return f"public, max-age={age}, must-revalidate"


def serialize_body(body: dict[str, Any]) -> bytes:
    """Canonical bytes for `body`. Keys keep insertion order."""
    return json.dumps(body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def compute_etag(body: dict[str, Any]) -> str:
    """MD5 hex digest of the serialized body."""
    return hashlib.md5(serialize_body(body)).hexdigest()


def negotiate(body: dict[str, Any], if_none_match: str | None) -> Response:
    """
    Return 304 when the client already holds this exact body, else 200.

    The client token is compared byte-for-byte against the fingerprint.
    """
    etag = compute_etag(body)
    cache_control = public_cache_control()

    if if_none_match is not None and if_none_match == etag:
        return Response(
            status_code=304,
            headers={"ETag": etag, "Cache-Control": cache_control},
        )

    return Response(
        content=serialize_body(body),
        status_code=200,
        media_type="application/json",
        headers={
            "ETag": etag,
            "Cache-Control": cache_control,
            "Vary": "Accept-Encoding",
        },
    )
