"""Tests for the in-memory cache."""

from datetime import UTC, datetime, timedelta

import pytest

from nutrilog.services.cache import InMemoryCache


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 6, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


def test_cache_expires_entries() -> None:
    clock = _Clock()
    cache = InMemoryCache(default_ttl_seconds=60, clock=clock)
    cache.set(("search", "oats"), ["oats"])

    clock.advance(59)
    assert cache.get(("search", "oats")) == ["oats"]

    clock.advance(1)
    assert cache.get(("search", "oats")) is None
    assert len(cache) == 0


def test_cache_honours_explicit_ttl() -> None:
    clock = _Clock()
    cache = InMemoryCache(default_ttl_seconds=60, clock=clock)
    cache.set(("details", "1"), "short", ttl_seconds=5)

    clock.advance(5)

    assert cache.get(("details", "1")) is None


def test_cache_evicts_when_full() -> None:
    clock = _Clock()
    cache = InMemoryCache(default_ttl_seconds=60, max_entries=2, clock=clock)
    cache.set(("details", "1"), "first")
    clock.advance(1)
    cache.set(("details", "2"), "second")
    clock.advance(1)
    cache.set(("details", "3"), "third")

    assert len(cache) == 2
    assert cache.get(("details", "1")) is None
    assert cache.get(("details", "2")) == "second"
    assert cache.get(("details", "3")) == "third"


def test_cache_purges_expired_before_evicting() -> None:
    clock = _Clock()
    cache = InMemoryCache(default_ttl_seconds=60, max_entries=2, clock=clock)
    cache.set(("details", "keep"), "keep", ttl_seconds=600)
    cache.set(("details", "stale"), "stale", ttl_seconds=10)
    clock.advance(30)

    cache.set(("details", "new"), "new")

    assert cache.get(("details", "keep")) == "keep"
    assert cache.get(("details", "new")) == "new"


def test_cache_overwrite_does_not_evict() -> None:
    cache = InMemoryCache(max_entries=1)
    cache.set(("search", "a"), 1)
    cache.set(("search", "a"), 2)

    assert cache.get(("search", "a")) == 2


@pytest.mark.parametrize("kwargs", [{"default_ttl_seconds": 0}, {"max_entries": 0}])
def test_cache_rejects_non_positive_limits(kwargs: dict[str, int]) -> None:
    with pytest.raises(ValueError):
        InMemoryCache(**kwargs)
