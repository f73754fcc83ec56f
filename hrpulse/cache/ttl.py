"""Process-local TTL cache for aggregated dashboard data."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from hrpulse.monitoring.metrics import record_cache_invalidation, record_cache_lookup

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from hrpulse.store.base import Filter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Cached value with the clock reading taken when it was stored."""

    value: Any
    stored_at: float


class TTLCache:
    """In-memory key/value cache with a single time-to-live for all keys.

    Entries are replaced wholesale on ``set`` and evicted lazily: a ``get``
    that finds an expired entry removes it and reports a miss. The cache is
    not thread-safe; it is meant to be shared by coroutines on one event
    loop, where ``get``/``set``/``clear`` never interleave.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            ttl_seconds: Maximum age of a valid entry
            clock: Monotonic clock returning seconds
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Get a fresh value.

        Args:
            key: Cache key

        Returns:
            Stored value, or None if absent or expired
        """
        entry = self._entries.get(key)
        if entry is None:
            record_cache_lookup("miss")
            return None

        if self._clock() - entry.stored_at < self.ttl_seconds:
            record_cache_lookup("hit")
            return entry.value

        del self._entries[key]
        record_cache_lookup("expired")
        logger.debug(f"Cache entry expired: {key}")
        return None

    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous entry."""
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def clear(self, key: str | None = None) -> None:
        """Remove one entry, or every entry when key is None."""
        if key is None:
            self._entries.clear()
            record_cache_invalidation("all")
            logger.debug("Cache cleared")
            return

        self._entries.pop(key, None)
        record_cache_invalidation("key")
        logger.debug(f"Cache key cleared: {key}")

    def clear_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with prefix.

        Returns:
            Number of entries removed
        """
        stale = [key for key in self._entries if key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        if stale:
            record_cache_invalidation("prefix")
            logger.debug(f"Cache cleared {len(stale)} keys with prefix {prefix!r}")
        return len(stale)

    def __contains__(self, key: str) -> bool:
        # Membership ignores freshness; use get() for reads
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def make_cache_key(collection: str, filters: Iterable[Filter] | None = None) -> str:
    """Derive a cache key from a collection name and filter set.

    Filters are normalized and sorted so that semantically equal queries
    map to the same key regardless of the order the filters were given in.

    Args:
        collection: Collection (or logical query) name
        filters: Optional filters applied to the query

    Returns:
        Deterministic cache key
    """
    terms = sorted({f.normalized() for f in filters or ()})
    if not terms:
        return collection
    return f"{collection}?{'&'.join(terms)}"
