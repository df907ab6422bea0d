"""Shared test fixtures for agencydir."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from agencydir_api.utils.retry import RetryingFetcher, RetryPolicy

CHAIN_METHODS = (
    "select", "eq", "neq", "gt", "gte", "lt", "lte",
    "ilike", "in_", "or_", "order", "limit", "range",
)

FAST_RETRY = RetryPolicy(max_attempts=3, initial_delay=0, attempt_timeout=5, total_timeout=15)


def make_chain(data=None, count=0):
    """Create a chainable mock that returns given data on execute()."""
    chain = MagicMock()
    chain.execute.return_value = MagicMock(data=data or [], count=count)
    for method in CHAIN_METHODS:
        getattr(chain, method).return_value = chain
    return chain


def make_supabase(table_data=None):
    """Create a mock Supabase client.

    table_data: optional dict mapping table name -> (data, count).
    All unmapped tables return empty results. Every chain handed out is
    kept in `client.chains[table]` (and the table object in
    `client.tables[table]`) so tests can inspect the calls.
    """
    client = MagicMock()
    td = table_data or {}
    client.chains = {}
    client.tables = {}

    def _table(name):
        data, count = td.get(name, ([], 0))
        chain = make_chain(data, count)
        client.chains.setdefault(name, []).append(chain)
        table = MagicMock()
        for method in CHAIN_METHODS:
            getattr(table, method).return_value = chain
        client.tables.setdefault(name, []).append(table)
        return table

    client.table.side_effect = _table
    return client


class FakeDirectoryStore:
    """In-memory DirectoryStore.

    `calls` records (method, args) in call order. `failures[method]` is a
    list of exceptions raised, one per call, before the method succeeds.
    """

    def __init__(
        self,
        agencies: list[dict[str, Any]] | None = None,
        trades: list[dict[str, Any]] | None = None,
        regions: list[dict[str, Any]] | None = None,
        agency_trades: list[tuple[str, str]] | None = None,
        agency_regions: list[tuple[str, str]] | None = None,
    ) -> None:
        self.agencies = agencies or []
        self.trades = trades or []
        self.regions = regions or []
        self.agency_trades = agency_trades or []
        self.agency_regions = agency_regions or []
        self.calls: list[tuple[str, tuple]] = []
        self.failures: dict[str, list[Exception]] = {}

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        pending = self.failures.get(method)
        if pending:
            raise pending.pop(0)

    def called(self, method: str) -> bool:
        return any(name == method for name, _ in self.calls)

    def lookup_trade_ids(self, slugs):
        self._record("lookup_trade_ids", tuple(slugs))
        return [t["id"] for t in self.trades if t["slug"] in slugs]

    def lookup_region_ids(self, state_codes):
        self._record("lookup_region_ids", tuple(state_codes))
        return [r["id"] for r in self.regions if r["state_code"] in state_codes]

    def agency_ids_for_trades(self, trade_ids):
        self._record("agency_ids_for_trades", tuple(trade_ids))
        return [a for a, t in self.agency_trades if t in trade_ids]

    def agency_ids_for_regions(self, region_ids):
        self._record("agency_ids_for_regions", tuple(region_ids))
        return [a for a, r in self.agency_regions if r in region_ids]

    def _matching(self, search, agency_ids):
        rows = [a for a in self.agencies if a.get("is_active", True)]
        if search:
            needle = search.lower()
            rows = [
                a for a in rows
                if needle in a["name"].lower() or needle in (a.get("description") or "").lower()
            ]
        if agency_ids is not None:
            rows = [a for a in rows if a["id"] in agency_ids]
        return sorted(rows, key=lambda a: (a["name"], a["id"]))

    def _nested(self, agency):
        trades = {t["id"]: t for t in self.trades}
        regions = {r["id"]: r for r in self.regions}
        return {
            **agency,
            "trades": [
                {"trade": trades[t]} for a, t in self.agency_trades if a == agency["id"]
            ],
            "regions": [
                {"region": regions[r]} for a, r in self.agency_regions if a == agency["id"]
            ],
        }

    def fetch_listings(self, search, agency_ids, limit, offset):
        self._record("fetch_listings", search, agency_ids, limit, offset)
        rows = self._matching(search, agency_ids)[offset:offset + limit]
        return [self._nested(a) for a in rows]

    def count_listings(self, search, agency_ids):
        self._record("count_listings", search, agency_ids)
        return len(self._matching(search, agency_ids))


def agency(agency_id: str, name: str, **fields: Any) -> dict[str, Any]:
    return {
        "id": agency_id,
        "name": name,
        "slug": name.lower().replace(" ", "-"),
        "description": fields.pop("description", f"{name} provides skilled labor."),
        "is_active": fields.pop("is_active", True),
        **fields,
    }


@pytest.fixture(autouse=True)
def _reset_error_rates():
    """Clear the process-wide error-rate counters between tests."""
    from agencydir_api.utils.monitoring import error_rate_tracker
    error_rate_tracker.reset()
    yield
    error_rate_tracker.reset()


@pytest.fixture()
def directory() -> FakeDirectoryStore:
    """Two electrical agencies in Texas, one plumbing agency in Ohio."""
    return FakeDirectoryStore(
        agencies=[
            agency("a1", "Bright Spark Staffing", is_claimed=True),
            agency("a2", "Apex Electrical Crews", is_union=True),
            agency("a3", "Pipeline Pros", offers_per_diem=True),
            agency("a4", "Dormant Labor Co", is_active=False),
        ],
        trades=[
            {"id": "t1", "name": "Electricians", "slug": "electricians"},
            {"id": "t2", "name": "Plumbers", "slug": "plumbers"},
            {"id": "t3", "name": "Welders", "slug": "welders"},
        ],
        regions=[
            {"id": "r1", "name": "Texas", "state_code": "TX"},
            {"id": "r2", "name": "Ohio", "state_code": "OH"},
        ],
        agency_trades=[("a1", "t1"), ("a2", "t1"), ("a3", "t2"), ("a4", "t1")],
        agency_regions=[("a1", "r1"), ("a2", "r1"), ("a2", "r2"), ("a3", "r2")],
    )


@pytest.fixture()
def fetcher() -> RetryingFetcher:
    return RetryingFetcher(FAST_RETRY)


@pytest.fixture()
def app(directory):
    """Test FastAPI app wired to the in-memory directory."""
    from agencydir_api.app import create_app
    from agencydir_api.dependencies import get_directory_store, get_retry_policy

    application = create_app()
    application.dependency_overrides[get_directory_store] = lambda: directory
    application.dependency_overrides[get_retry_policy] = lambda: FAST_RETRY
    return application


@pytest.fixture()
def client(app):
    """HTTP test client."""
    return TestClient(app)
