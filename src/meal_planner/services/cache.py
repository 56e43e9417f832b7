"""Simple TTL cache used to avoid repeated catalog round-trips."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get_many(self, keys: list[str]) -> dict[str, object]:
        """Return the unexpired values found for the given keys."""

    def set_many(self, values: dict[str, object], ttl_seconds: int) -> None:
        """Store several values sharing one TTL in seconds."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; entries expire lazily on read."""

    _entries: dict[str, _CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get_many(self, keys: list[str]) -> dict[str, object]:
        """Return cached values for keys that have not expired."""
        now = datetime.now(tz=UTC)
        found: dict[str, object] = {}
        for key in keys:
            entry = self._entries.get(key)
            if entry is None:
                continue
            if now >= entry.expires_at:
                self._entries.pop(key, None)
                continue
            found[key] = entry.value
        return found

    def set_many(self, values: dict[str, object], ttl_seconds: int) -> None:
        """Store values with a shared TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        for key, value in values.items():
            self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)
