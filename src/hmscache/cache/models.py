"""
Cache data models for hmscache.

This module contains the data structures used by the entity caches: the
composite search key, the memoized search page, and performance counters.

Classes:
    SearchKey: Composite key of a memoized search (term, limit, offset, sort)
    SearchCacheEntry: A memoized page with its total count and creation time
    CacheStats: Cache performance statistics

Features:
    - Hashable, immutable keys with null terms normalized to ""
    - Private tuple storage so callers can never mutate a cached page
    - Expiry checks against an injectable clock
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from ..core.sorting import SortOption

T = TypeVar("T")


@dataclass(frozen=True)
class SearchKey:
    """
    Composite key of a memoized search.

    ``limit`` and ``offset`` are None for date-window entries, which hold the
    whole filtered window and are paginated on read.
    """

    term: str
    limit: int | None
    offset: int | None
    sort: SortOption | None

    @classmethod
    def create(
        cls,
        term: str | None,
        limit: int | None,
        offset: int | None,
        sort: SortOption | None,
    ) -> SearchKey:
        return cls(term=term or "", limit=limit, offset=offset, sort=sort)

    @classmethod
    def window(cls, term: str | None, sort: SortOption) -> SearchKey:
        return cls(term=term or "", limit=None, offset=None, sort=sort)

    @property
    def is_window(self) -> bool:
        return self.limit is None

    def __str__(self) -> str:
        sort = self.sort.name if self.sort is not None else "default"
        if self.is_window:
            return f"{self.term}|window|{sort}"
        return f"{self.term}|{self.limit}|{self.offset}|{sort}"


@dataclass(frozen=True)
class SearchCacheEntry(Generic[T]):
    """Memoized search page. ``results`` is a tuple; callers get list copies."""

    results: tuple[T, ...]
    total_count: int
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_expired(self, now: float, ttl: float) -> bool:
        """An entry is a miss once its age reaches the TTL."""
        return self.age(now) >= ttl


@dataclass
class CacheStats:
    """Cache performance statistics."""

    id_hits: int = 0
    id_misses: int = 0
    search_hits: int = 0
    search_misses: int = 0
    expirations: int = 0
    evictions: int = 0
    invalidations: int = 0

    @property
    def hits(self) -> int:
        return self.id_hits + self.search_hits

    @property
    def misses(self) -> int:
        return self.id_misses + self.search_misses

    @property
    def hit_rate(self) -> float:
        total_requests = self.hits + self.misses
        return self.hits / total_requests if total_requests > 0 else 0.0
