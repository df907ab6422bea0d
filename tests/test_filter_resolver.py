"""Tests for trade/state filter resolution."""

from __future__ import annotations

import pytest

from agencydir_api.errors import DatabaseError
from agencydir_api.services.filter_resolver import FilterResolver

JOIN_QUERIES = ("agency_ids_for_trades", "agency_ids_for_regions")


@pytest.mark.asyncio
async def test_no_filters_is_unrestricted(directory, fetcher):
    result = await FilterResolver(directory, fetcher).resolve((), ())
    assert result is None
    assert directory.calls == []


@pytest.mark.asyncio
async def test_trade_only(directory, fetcher):
    result = await FilterResolver(directory, fetcher).resolve(("electricians",), ())
    assert result == {"a1", "a2", "a4"}
    assert not directory.called("lookup_region_ids")


@pytest.mark.asyncio
async def test_or_within_dimension(directory, fetcher):
    result = await FilterResolver(directory, fetcher).resolve(("electricians", "plumbers"), ())
    assert result == {"a1", "a2", "a3", "a4"}


@pytest.mark.asyncio
async def test_and_across_dimensions(directory, fetcher):
    resolver = FilterResolver(directory, fetcher)
    trade_ids = await resolver.resolve(("electricians",), ())
    state_ids = await resolver.resolve((), ("OH",))
    both = await resolver.resolve(("electricians",), ("OH",))
    assert both == trade_ids & state_ids == {"a2"}


@pytest.mark.asyncio
async def test_unknown_trade_short_circuits(directory, fetcher):
    result = await FilterResolver(directory, fetcher).resolve(("astronauts",), ("TX",))
    assert result == frozenset()
    for method in JOIN_QUERIES:
        assert not directory.called(method)


@pytest.mark.asyncio
async def test_unknown_state_short_circuits(directory, fetcher):
    result = await FilterResolver(directory, fetcher).resolve(("electricians",), ("AK",))
    assert result == frozenset()
    assert not directory.called("agency_ids_for_trades")


@pytest.mark.asyncio
async def test_category_with_no_agencies_is_empty(directory, fetcher):
    result = await FilterResolver(directory, fetcher).resolve(("welders",), ())
    assert result == frozenset()


@pytest.mark.asyncio
async def test_disjoint_dimensions_are_empty(directory, fetcher):
    result = await FilterResolver(directory, fetcher).resolve(("plumbers",), ("TX",))
    assert result == frozenset()


@pytest.mark.asyncio
async def test_join_query_receives_resolved_ids(directory, fetcher):
    await FilterResolver(directory, fetcher).resolve(("plumbers", "electricians"), ())
    (args,) = [args for name, args in directory.calls if name == "agency_ids_for_trades"]
    assert args == (("t1", "t2"),)


@pytest.mark.asyncio
async def test_lookup_failure_is_fatal(directory, fetcher):
    directory.failures["lookup_region_ids"] = [ValueError("relation does not exist")]
    with pytest.raises(DatabaseError):
        await FilterResolver(directory, fetcher).resolve(("electricians",), ("TX",))


@pytest.mark.asyncio
async def test_join_failure_is_fatal_not_empty(directory, fetcher):
    directory.failures["agency_ids_for_trades"] = [ValueError("permission denied")]
    with pytest.raises(DatabaseError):
        await FilterResolver(directory, fetcher).resolve(("electricians",), ())


@pytest.mark.asyncio
async def test_transient_lookup_failure_is_retried(directory, fetcher):
    directory.failures["lookup_trade_ids"] = [ConnectionError("ECONNREFUSED")]
    result = await FilterResolver(directory, fetcher).resolve(("plumbers",), ())
    assert result == {"a3"}
    assert [name for name, _ in directory.calls].count("lookup_trade_ids") == 2
