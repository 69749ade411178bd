"""Tests for the in-memory TTL cache."""

from datetime import UTC, datetime, timedelta

import pytest

from life_tracker.services import cache as cache_module
from life_tracker.services.cache import InMemoryCache


def test_cache_returns_value_until_expiry(monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime(2026, 1, 1, tzinfo=UTC)
    monkeypatch.setattr(cache_module, "_now", lambda: now)
    cache = InMemoryCache()

    cache.set("key", [1, 2], ttl_seconds=60)
    assert cache.get("key") == [1, 2]

    now += timedelta(seconds=61)
    assert cache.get("key") is None
    assert len(cache) == 0


def test_cache_evicts_entry_expiring_soonest_when_full() -> None:
    cache = InMemoryCache(max_entries=2)
    cache.set("short", "a", ttl_seconds=10)
    cache.set("long", "b", ttl_seconds=1000)

    cache.set("new", "c", ttl_seconds=100)

    assert cache.get("short") is None
    assert cache.get("long") == "b"
    assert cache.get("new") == "c"


def test_cache_clear() -> None:
    cache = InMemoryCache()
    cache.set("key", "value", ttl_seconds=60)

    cache.clear()

    assert cache.get("key") is None
