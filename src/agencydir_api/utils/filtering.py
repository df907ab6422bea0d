"""Supabase filter builders shared by the listing and count queries."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

SEARCH_COLUMNS = ("name", "description")


def apply_text_search(
    query: Any,
    search_term: str | None,
    columns: Iterable[str] = SEARCH_COLUMNS,
) -> Any:
    """Case-insensitive substring match on any of `columns`.

    `search_term` must already be sanitized; commas and parentheses would
    break the `or` filter syntax.
    """
    if search_term:
        clauses = ",".join(f"{col}.ilike.%{search_term}%" for col in columns)
        query = query.or_(clauses)
    return query


def apply_id_filter(
    query: Any,
    agency_ids: Iterable[str] | None,
    id_column: str = "id",
) -> Any:
    """Restrict to `agency_ids`; None means no restriction."""
    if agency_ids is not None:
        query = query.in_(id_column, sorted(agency_ids))
    return query


def apply_active_filter(query: Any) -> Any:
    """Only active agencies are listing-eligible."""
    return query.eq("is_active", True)
