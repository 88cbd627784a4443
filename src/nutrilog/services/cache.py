"""Bounded TTL cache abstractions."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

CacheKey = tuple[str, str]


class Cache(Protocol):
    """Cache interface keyed by (operation, argument)."""

    def get(self, key: CacheKey) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: CacheKey, value: object, ttl_seconds: int | None = None) -> None:
        """Store a cached value, using the default TTL when none is given."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryCache(Cache):
    """In-memory cache with a fixed TTL and a maximum number of entries.

    When the cache is full, expired entries are purged first and then the
    entry closest to expiry is evicted.
    """

    default_ttl_seconds: int
    max_entries: int
    clock: Callable[[], datetime]
    _entries: dict[CacheKey, _CacheEntry]

    def __init__(
        self,
        default_ttl_seconds: int = 3600,
        max_entries: int = 1024,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.default_ttl_seconds = default_ttl_seconds
        self.max_entries = max_entries
        self.clock = clock
        self._entries = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: CacheKey, value: object, ttl_seconds: int | None = None) -> None:
        """Store a cached value with a TTL."""
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        now = self.clock()
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict(now)
        self._entries[key] = _CacheEntry(
            value=value, expires_at=now + timedelta(seconds=ttl)
        )

    def clear(self) -> None:
        """Drop every cached entry."""
        self._entries.clear()

    def _evict(self, now: datetime) -> None:
        expired = [
            key for key, entry in self._entries.items() if now >= entry.expires_at
        ]
        for key in expired:
            del self._entries[key]
        if len(self._entries) < self.max_entries:
            return
        oldest = min(self._entries, key=lambda key: self._entries[key].expires_at)
        del self._entries[oldest]
