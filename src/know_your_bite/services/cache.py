"""Search result cache abstractions."""

from dataclasses import dataclass
from typing import Protocol

from know_your_bite.services.store import KeyValueStore

SEARCH_CACHE_PREFIX = "kyb_search_v1_"


def search_cache_key(query: str) -> str:
    """Return the cache key for a text query, ignoring case and edge whitespace."""
    return SEARCH_CACHE_PREFIX + query.lower().strip()


class Cache(Protocol):
    """Cache interface for JSON-compatible values, without expiry."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present."""

    def set(self, key: str, value: object) -> None:
        """Store a cached value."""

    def clear(self) -> int:
        """Drop all entries and return how many were removed."""


@dataclass
class InMemoryCache(Cache):
    """In-memory cache for a single process."""

    _entries: dict[str, object]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if present."""
        return self._entries.get(key)

    def set(self, key: str, value: object) -> None:
        """Store a cached value."""
        self._entries[key] = value

    def clear(self) -> int:
        """Drop all entries."""
        count = len(self._entries)
        self._entries.clear()
        return count


@dataclass
class KeyValueCache(Cache):
    """Cache kept as namespaced entries in the persisted key-value store."""

    store: KeyValueStore
    prefix: str = SEARCH_CACHE_PREFIX

    def get(self, key: str) -> object | None:
        """Return a cached value if present."""
        return self.store.get(key)

    def set(self, key: str, value: object) -> None:
        """Store a cached value until manually cleared."""
        self.store.set(key, value)

    def clear(self) -> int:
        """Drop all entries under the cache prefix."""
        keys = self.store.keys(self.prefix)
        for key in keys:
            self.store.delete(key)
        return len(keys)
