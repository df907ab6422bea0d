"""
db.py: Supabase client construction.

Usage:
    from agencydir_shared.db import get_supabase_client

    supabase = get_supabase_client()   # anon key, RLS applies

The client is built once per process and handed to request handlers through
FastAPI dependencies; nothing reaches for it as a module global.
"""

from __future__ import annotations

import threading
from typing import Optional

import structlog
from supabase import Client, create_client

from agencydir_shared.config import settings

logger = structlog.get_logger(__name__)


class SupabaseNotConfiguredError(RuntimeError):
    """Raised when the Supabase URL or anon key is missing from settings,
    or when the client rejects them (`reason` carries its message)."""

    def __init__(self, *, url_set: bool, key_set: bool, reason: str | None = None) -> None:
        super().__init__(reason or "Supabase client is not configured")
        self.url_set = url_set
        self.key_set = key_set
        self.reason = reason


# ---------------------------------------------------------------------------
# Supabase: one anon client per process (thread-safe via lock)
# ---------------------------------------------------------------------------
_supabase_lock = threading.Lock()
_supabase_anon: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Return the process-wide Supabase client, creating it on first use.

    Raises:
        SupabaseNotConfiguredError: SUPABASE_URL or SUPABASE_ANON_KEY unset,
            or rejected by the client.
    """
    global _supabase_anon

    with _supabase_lock:
        if _supabase_anon is None:
            if not settings.supabase_url or not settings.supabase_anon_key:
                raise SupabaseNotConfiguredError(
                    url_set=bool(settings.supabase_url),
                    key_set=bool(settings.supabase_anon_key),
                )
            try:
                _supabase_anon = create_client(
                    settings.supabase_url,
                    settings.supabase_anon_key,
                )
            except Exception as exc:
                # e.g. a malformed URL; nothing is cached so the next call retries
                logger.error("supabase_client_failed", error=str(exc))
                raise SupabaseNotConfiguredError(
                    url_set=True, key_set=True, reason=str(exc),
                ) from exc
            logger.info("supabase_client_created", role="anon")
        return _supabase_anon


def reset_supabase_client() -> None:
    """Reset the singleton client (useful in tests)."""
    global _supabase_anon
    with _supabase_lock:
        _supabase_anon = None
