"""Shared FastAPI dependencies."""

from __future__ import annotations

from agencydir_shared.db import SupabaseNotConfiguredError, get_supabase_client

from agencydir_api.errors import DataStoreUnavailableError
from agencydir_api.services.directory_store import DirectoryStore, SupabaseDirectoryStore
from agencydir_api.utils.retry import RetryPolicy

StoreOrError = DirectoryStore | DataStoreUnavailableError


def get_directory_store() -> StoreOrError:
    """Hand the route a store, or the typed error saying why there is none.

    The route raises the error inside its own monitored block, so a missing
    client is timed, counted and rendered like any other database failure.
    """
    try:
        client = get_supabase_client()
    except SupabaseNotConfiguredError as exc:
        return DataStoreUnavailableError(
            url_set=exc.url_set, key_set=exc.key_set, reason=exc.reason,
        )
    return SupabaseDirectoryStore(client)


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings()


__all__ = [
    "StoreOrError",
    "get_directory_store",
    "get_retry_policy",
]
