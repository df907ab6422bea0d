"""Read-only access to the agency directory tables."""

from __future__ import annotations

from collections.abc import Sequence, Set
from typing import Any, Protocol

from supabase import Client

from agencydir_shared.constants import (
    AGENCIES_TABLE,
    AGENCY_LISTING_SELECT,
    AGENCY_REGIONS_TABLE,
    AGENCY_TRADES_TABLE,
    REGIONS_TABLE,
    TRADES_TABLE,
)

from agencydir_api.utils.filtering import apply_active_filter, apply_id_filter, apply_text_search
from agencydir_api.utils.pagination import apply_range


class DirectoryStore(Protocol):
    """Lookups the listing route needs. All calls are blocking."""

    def lookup_trade_ids(self, slugs: Sequence[str]) -> list[str]: ...

    def lookup_region_ids(self, state_codes: Sequence[str]) -> list[str]: ...

    def agency_ids_for_trades(self, trade_ids: Sequence[str]) -> list[str]: ...

    def agency_ids_for_regions(self, region_ids: Sequence[str]) -> list[str]: ...

    def fetch_listings(
        self,
        search: str | None,
        agency_ids: Set[str] | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]: ...

    def count_listings(self, search: str | None, agency_ids: Set[str] | None) -> int: ...


class SupabaseDirectoryStore:
    """DirectoryStore backed by a supabase-py client."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def _column(self, table: str, column: str, match_column: str, values: Sequence[str]) -> list[str]:
        result = (
            self._client.table(table)
            .select(column)
            .in_(match_column, list(values))
            .execute()
        )
        return [str(row[column]) for row in result.data or []]

    def lookup_trade_ids(self, slugs: Sequence[str]) -> list[str]:
        return self._column(TRADES_TABLE, "id", "slug", slugs)

    def lookup_region_ids(self, state_codes: Sequence[str]) -> list[str]:
        return self._column(REGIONS_TABLE, "id", "state_code", state_codes)

    def agency_ids_for_trades(self, trade_ids: Sequence[str]) -> list[str]:
        return self._column(AGENCY_TRADES_TABLE, "agency_id", "trade_id", trade_ids)

    def agency_ids_for_regions(self, region_ids: Sequence[str]) -> list[str]:
        return self._column(AGENCY_REGIONS_TABLE, "agency_id", "region_id", region_ids)

    def fetch_listings(
        self,
        search: str | None,
        agency_ids: Set[str] | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        query = self._client.table(AGENCIES_TABLE).select(AGENCY_LISTING_SELECT)
        query = apply_active_filter(query)
        query = apply_text_search(query, search)
        query = apply_id_filter(query, agency_ids)
        # id breaks name ties so identical requests hash to identical ETags
        query = query.order("name").order("id")
        result = apply_range(query, limit, offset).execute()
        return result.data or []

    def count_listings(self, search: str | None, agency_ids: Set[str] | None) -> int:
        query = self._client.table(AGENCIES_TABLE).select("id", count="exact", head=True)
        query = apply_active_filter(query)
        query = apply_text_search(query, search)
        query = apply_id_filter(query, agency_ids)
        result = query.execute()
        return result.count or 0
