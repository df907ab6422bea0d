"""Agency listing service."""

from __future__ import annotations

from typing import Any

from agencydir_shared.models.agencies import AgencyListing

from agencydir_api.responses import listing_response
from agencydir_api.services.directory_store import DirectoryStore
from agencydir_api.services.filter_resolver import FilterResolver
from agencydir_api.utils.pagination import build_page_metadata
from agencydir_api.utils.retry import RetryingFetcher
from agencydir_api.utils.sanitize import sanitize_search_input
from agencydir_api.utils.tasks import gather_or_cancel
from agencydir_api.utils.validation import AgencyQuery


def assemble_listings(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten raw rows into the public shape, keeping store order."""
    return [AgencyListing.from_db_row(row).to_public_dict() for row in rows]


async def list_agencies(
    store: DirectoryStore,
    query: AgencyQuery,
    fetcher: RetryingFetcher,
) -> dict[str, Any]:
    """Run one listing request and return the response body.

    The page and the total are fetched with the same predicate so the
    pagination block always describes the returned page.
    """
    search = sanitize_search_input(query.search)
    agency_ids = await FilterResolver(store, fetcher).resolve(query.trades, query.states)

    if agency_ids is not None and not agency_ids:
        rows: list[dict[str, Any]] = []
        total = 0
    else:
        rows, total = await gather_or_cancel(
            fetcher.run(
                "listing", store.fetch_listings, search, agency_ids, query.limit, query.offset,
            ),
            fetcher.run("count", store.count_listings, search, agency_ids),
        )

    return listing_response(
        assemble_listings(rows),
        build_page_metadata(total, query.limit, query.offset),
    )
