"""
Categorical filter resolution for the agencies listing.

Each filter dimension (trade, state) is resolved in two phases:

1. human-facing values -> category ids, by exact match
   (`trades.slug`, `regions.state_code`);
2. category ids -> agency ids through the join table
   (`agency_trades`, `agency_regions`).

Within a dimension a listing matches if it is linked to ANY resolved
category. Across dimensions the agency-id sets are intersected.

The result is `None` when no dimension was requested (no restriction) and an
empty frozenset when a requested dimension matched nothing; the caller must
treat the latter as an empty page without querying further.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog

from agencydir_shared.constants import Dimension

from agencydir_api.services.directory_store import DirectoryStore
from agencydir_api.utils.retry import RetryingFetcher
from agencydir_api.utils.tasks import gather_or_cancel

log = structlog.get_logger(__name__)

FilterResult = frozenset[str] | None


@dataclass(frozen=True)
class _DimensionQuery:
    name: Dimension
    values: tuple[str, ...]
    lookup: Callable[[Sequence[str]], list[str]]
    links: Callable[[Sequence[str]], list[str]]


class FilterResolver:
    def __init__(self, store: DirectoryStore, fetcher: RetryingFetcher) -> None:
        self._store = store
        self._fetcher = fetcher

    def _dimensions(self, trades: Sequence[str], states: Sequence[str]) -> list[_DimensionQuery]:
        dims: list[_DimensionQuery] = []
        if trades:
            dims.append(_DimensionQuery(
                "trade", tuple(trades),
                self._store.lookup_trade_ids, self._store.agency_ids_for_trades,
            ))
        if states:
            dims.append(_DimensionQuery(
                "state", tuple(states),
                self._store.lookup_region_ids, self._store.agency_ids_for_regions,
            ))
        return dims

    async def resolve(self, trades: Sequence[str], states: Sequence[str]) -> FilterResult:
        """Return the agency ids satisfying every requested dimension.

        Raises:
            DatabaseError: any lookup failed; a failure is never read as
                "no match".
        """
        dims = self._dimensions(trades, states)
        if not dims:
            return None

        category_ids = await gather_or_cancel(*(
            self._fetcher.run(f"{dim.name}_lookup", dim.lookup, list(dim.values))
            for dim in dims
        ))
        for dim, ids in zip(dims, category_ids):
            if not ids:
                log.info("filter_short_circuit", dimension=dim.name, values=list(dim.values))
                return frozenset()

        linked = await gather_or_cancel(*(
            self._fetcher.run(f"{dim.name}_links", dim.links, sorted(set(ids)))
            for dim, ids in zip(dims, category_ids)
        ))

        result: frozenset[str] | None = None
        for dim, agency_ids in zip(dims, linked):
            matched = frozenset(agency_ids)
            result = matched if result is None else result & matched
            log.debug("filter_dimension_resolved", dimension=dim.name, matched=len(matched))
            if not result:
                break
        return result
