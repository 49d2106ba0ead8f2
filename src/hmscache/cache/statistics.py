"""
Cache statistics tracking.

Classes:
    CacheStatistics: Thread-safe hit/miss/eviction counters for one entity cache

Features:
    - Separate counters for the by-id and search caches
    - TTL expirations counted apart from capacity evictions
    - Human-readable summary for diagnostics
"""

from __future__ import annotations

import threading
from typing import Any

from .models import CacheStats


class CacheStatistics:
    """
    Counters for one entity cache.

    Purely diagnostic: nothing in the cache reads these numbers to make a
    decision.
    """

    def __init__(self) -> None:
        self.stats = CacheStats()
        self._stats_lock = threading.RLock()

    def record_id_hit(self) -> None:
        with self._stats_lock:
            self.stats.id_hits += 1

    def record_id_miss(self) -> None:
        with self._stats_lock:
            self.stats.id_misses += 1

    def record_search_hit(self) -> None:
        with self._stats_lock:
            self.stats.search_hits += 1

    def record_search_miss(self, expired: bool = False) -> None:
        with self._stats_lock:
            self.stats.search_misses += 1
            if expired:
                self.stats.expirations += 1

    def record_expiration(self, count: int = 1) -> None:
        with self._stats_lock:
            self.stats.expirations += count

    def record_eviction(self, count: int = 1) -> None:
        """
        Record capacity evictions.

        Args:
            count: Number of entries evicted
        """
        with self._stats_lock:
            self.stats.evictions += count

    def record_invalidation(self, count: int = 1) -> None:
        """
        Record entries dropped by write-through invalidation.

        Args:
            count: Number of entries invalidated
        """
        with self._stats_lock:
            self.stats.invalidations += count

    def get_stats_dict(self, additional_stats: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Get all statistics as a dictionary.

        Args:
            additional_stats: Additional statistics to include (sizes, capacities)
        """
        with self._stats_lock:
            stats_dict: dict[str, Any] = {
                "id_hits": self.stats.id_hits,
                "id_misses": self.stats.id_misses,
                "search_hits": self.stats.search_hits,
                "search_misses": self.stats.search_misses,
                "hit_rate": self.stats.hit_rate,
                "expirations": self.stats.expirations,
                "evictions": self.stats.evictions,
                "invalidations": self.stats.invalidations,
            }

        if additional_stats:
            stats_dict.update(additional_stats)

        return stats_dict

    def reset_stats(self) -> None:
        """Reset all statistics to zero."""
        with self._stats_lock:
            self.stats = CacheStats()

    def get_performance_summary(self) -> str:
        with self._stats_lock:
            total_requests = self.stats.hits + self.stats.misses
            return (
                f"{total_requests} requests, "
                f"{self.stats.hit_rate * 100:.1f}% hit rate, "
                f"{self.stats.evictions} evictions, "
                f"{self.stats.expirations} expirations"
            )
