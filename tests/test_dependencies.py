"""Tests for store and retry-policy dependency providers."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from agencydir_shared import db
from agencydir_shared.config import settings

from agencydir_api.dependencies import get_directory_store, get_retry_policy
from agencydir_api.errors import DataStoreUnavailableError
from agencydir_api.services.directory_store import SupabaseDirectoryStore


@pytest.fixture(autouse=True)
def fresh_client():
    db.reset_supabase_client()
    yield
    db.reset_supabase_client()


def test_unconfigured_store_is_a_typed_error(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "")
    monkeypatch.setattr(settings, "supabase_anon_key", "anon-key")

    store = get_directory_store()
    assert isinstance(store, DataStoreUnavailableError)
    assert store.details == {"env": {"url": "Not set", "key": "Set"}}
    assert store.status_code == 500


def test_configured_store_wraps_shared_client(monkeypatch):
    fake_client = MagicMock()
    create = MagicMock(return_value=fake_client)
    monkeypatch.setattr(settings, "supabase_url", "https://example.supabase.co")
    monkeypatch.setattr(settings, "supabase_anon_key", "anon-key")
    monkeypatch.setattr(db, "create_client", create)

    first = get_directory_store()
    second = get_directory_store()
    assert isinstance(first, SupabaseDirectoryStore)
    assert isinstance(second, SupabaseDirectoryStore)
    create.assert_called_once_with("https://example.supabase.co", "anon-key")


def test_retry_policy_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "retry_max_attempts", 5)
    monkeypatch.setattr(settings, "db_query_timeout", 2.0)

    policy = get_retry_policy()
    assert policy.max_attempts == 5
    assert policy.attempt_timeout == 2.0
    assert policy.initial_delay == settings.retry_initial_delay


def test_rejected_credentials_are_a_typed_error(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://example.supabase.co")
    monkeypatch.setattr(settings, "supabase_anon_key", "anon-key")
    monkeypatch.setattr(db, "create_client", MagicMock(side_effect=RuntimeError("Invalid URL")))

    store = get_directory_store()
    assert isinstance(store, DataStoreUnavailableError)
    assert store.details == {
        "env": {"url": "Set", "key": "Set"},
        "reason": "Invalid URL",
    }


def test_malformed_url_with_real_client(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "localhost:54321")
    monkeypatch.setattr(settings, "supabase_anon_key", "anon-key")

    store = get_directory_store()
    assert isinstance(store, DataStoreUnavailableError)
    assert store.details["env"] == {"url": "Set", "key": "Set"}


def test_failed_construction_is_not_cached(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "https://example.supabase.co")
    monkeypatch.setattr(settings, "supabase_anon_key", "anon-key")
    create = MagicMock(side_effect=[RuntimeError("Invalid URL"), MagicMock()])
    monkeypatch.setattr(db, "create_client", create)

    assert isinstance(get_directory_store(), DataStoreUnavailableError)
    assert isinstance(get_directory_store(), SupabaseDirectoryStore)
