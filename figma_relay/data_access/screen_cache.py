"""
Screen Cache.

This module provides a short-lived, in-process cache of enrichment payloads,
keyed by file key, depth and limit. One instance lives per warm Lambda
container and is passed explicitly to the enrichment service.

Concurrency: there is no locking. Two concurrent invocations that miss on
the same key both fetch upstream and the last writer wins; values for the
same key are equivalent, so this only costs duplicated upstream work.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from figma_relay.config.settings import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL_SECONDS
from figma_relay.models import EnrichmentPayload

KEY_SEPARATOR = '|'


def build_cache_key(file_key: str, depth: str, limit: int) -> str:
    """
    Build the composite cache key: {file_key}|depth={depth}|limit={limit}.

    Args:
        file_key: Figma file key
        depth: Document depth
        limit: Screen limit

    Returns:
        Cache key string
    """
    return f'{file_key}{KEY_SEPARATOR}depth={depth}{KEY_SEPARATOR}limit={limit}'


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the time it was stored."""
    timestamp: float
    value: EnrichmentPayload


class ScreenCache:
    """
    TTL cache for enrichment payloads with a capacity bound.

    Expired entries are treated as absent. They are deleted when looked up
    by exact key, by sweep(), and when put() needs room.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize Screen Cache.

        Args:
            ttl_seconds: Maximum age of an entry in seconds (default: 600)
            max_entries: Maximum number of entries kept (default: 256)
            clock: Time source returning seconds, injectable for tests
        """
        if max_entries < 1:
            raise ValueError('max_entries must be at least 1')

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

        # Metrics tracking
        self._cache_hits = 0
        self._cache_misses = 0
        self._cache_fallbacks = 0
        self._cache_evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp <= self.ttl_seconds

    def get(self, key: str) -> Optional[EnrichmentPayload]:
        """
        Return the cached payload if present and within TTL.

        Args:
            key: Composite cache key

        Returns:
            Cached payload or None on miss
        """
        entry = self._entries.get(key)
        if entry is None:
            self._cache_misses += 1
            return None

        if not self._is_fresh(entry, self._clock()):
            del self._entries[key]
            self._cache_misses += 1
            return None

        self._cache_hits += 1
        return entry.value

    def put(self, key: str, value: EnrichmentPayload) -> None:
        """
        Store a payload, overwriting any prior entry for the key.

        Args:
            key: Composite cache key
            value: Payload to cache
        """
        # Re-inserting moves the key to the end of the insertion order
        self._entries.pop(key, None)

        if len(self._entries) >= self.max_entries:
            self._make_room()

        self._entries[key] = CacheEntry(timestamp=self._clock(), value=value)

    def scan_prefix(self, file_key: str) -> Optional[EnrichmentPayload]:
        """
        Find any still-valid payload for a file key, under any depth/limit.

        Used only as the rate-limit fallback. Entries are scanned in insertion
        order and the first fresh match wins, not the most recent one.

        Args:
            file_key: Figma file key

        Returns:
            First fresh payload for the file, or None
        """
        prefix = f'{file_key}{KEY_SEPARATOR}'
        now = self._clock()

        for key, entry in self._entries.items():
            if key.startswith(prefix) and self._is_fresh(entry, now):
                self._cache_fallbacks += 1
                return entry.value
        return None

    def sweep(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _make_room(self) -> None:
        """
        Free at least one slot.

        Expired entries go first; if the cache is still full, the oldest
        entries by insertion order are evicted.
        """
        self._cache_evictions += self.sweep()

        while len(self._entries) >= self.max_entries:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            self._cache_evictions += 1

    def get_cache_stats(self) -> Dict[str, Any]:
        """
        Get current cache statistics.

        Returns:
            Dictionary with hits, misses, fallbacks, evictions, size and hit rate
        """
        total_lookups = self._cache_hits + self._cache_misses
        hit_rate = (self._cache_hits / total_lookups) if total_lookups > 0 else 0

        return {
            'cache_hits': self._cache_hits,
            'cache_misses': self._cache_misses,
            'cache_fallbacks': self._cache_fallbacks,
            'evictions': self._cache_evictions,
            'size': len(self._entries),
            'hit_rate': hit_rate
        }
