"""
Read-through entity cache.

One generic ``EntityCache`` sits in front of a ``Store`` for each entity type.
It keeps two bounded LRU maps:

    by-id cache     id -> entity snapshot, no TTL
    search cache    (term, limit, offset, sort) -> page + total count, TTL bounded

Reads are served from memory when possible. Every mutation is passed straight
to the store and then invalidates: the whole search cache is cleared (the
changed record could enter or leave any cached page) and the by-id entry is
dropped (update/delete) or replaced by the freshly stamped snapshot (insert).

By-id entries never expire. A write made to the store behind this cache's back
stays invisible until the entry is evicted or ``invalidate_all`` is called.

Store failures propagate to the caller unchanged; a failed store call leaves
the cache exactly as it was.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import date
from typing import Any, Generic, TypeVar

from ..core.config import CacheConfig
from ..core.sorting import SortOption, parse_sort
from ..storage.protocol import Store
from ..utils.logging_config import get_logger
from .backends import LRUCache
from .models import SearchCacheEntry, SearchKey
from .statistics import CacheStatistics

T = TypeVar("T")


class EntityCache(Generic[T]):
    """
    Caching facade over a ``Store[T]``.

    Sort order is part of the search key and is applied before a page is
    cached, so a hit is returned exactly as stored. Entities must be
    dataclasses with an ``id`` field; ``insert`` stamps the generated id with
    ``dataclasses.replace``.

    All operations hold a per-instance lock, so read-then-evict and
    invalidate-then-clear sequences are atomic for concurrent callers.
    """

    def __init__(
        self,
        store: Store[T],
        sort_type: type[SortOption] | None = None,
        config: CacheConfig | None = None,
        name: str = "Entity",
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            store: Backing store, the source of truth
            sort_type: Sort table accepted by ``search``/``count`` (enables sort names)
            config: Capacities, TTL and filter window (defaults to CacheConfig())
            name: Label used in logs and ``get_cache_stats``
            clock: Monotonic seconds used for search-entry age
            today: Current date used by date-window sorts
        """
        self.store = store
        self.sort_type = sort_type
        self.config = config or CacheConfig()
        self.config.validate()
        self.name = name
        self.clock = clock
        self.today = today
        self.logger = get_logger()
        self.statistics = CacheStatistics()

        self._by_id: LRUCache[int, T] = LRUCache(self.config.id_cache_size)
        self._searches: LRUCache[SearchKey, SearchCacheEntry[T]] = LRUCache(
            self.config.search_cache_size
        )
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, entity_id: int) -> T | None:
        """Return the entity with ``entity_id``, from cache when present. Misses are not cached."""
        with self._lock:
            cached = self._by_id.get(entity_id)
            if cached is not None:
                self.statistics.record_id_hit()
                self.logger.log_cache_hit(self.name, "id", entity_id)
                return cached

            self.statistics.record_id_miss()
            self.logger.log_cache_miss(self.name, "id", entity_id)
            entity = self.store.find_by_id(entity_id)
            if entity is not None:
                self._remember(entity_id, entity)
            return entity

    def search(
        self,
        term: str | None,
        limit: int,
        offset: int = 0,
        sort_by: SortOption | str | None = None,
    ) -> list[T]:
        """
        Return one page of entities matching ``term``.

        Args:
            term: Search text; None or "" matches everything
            limit: Page size
            offset: Rows to skip
            sort_by: Sort option (member or name); None keeps store order

        Returns:
            A new list the caller may mutate freely
        """
        self._check_page(limit, offset)
        sort = self._resolve_sort(sort_by)

        with self._lock:
            if sort is not None and sort.is_filter:
                entry, fetched = self._window(term, sort)
                page = list(entry.results[offset:offset + limit])
                if fetched:
                    for entity in page:
                        self._remember(getattr(entity, "id", None), entity)
                return page

            key = SearchKey.create(term, limit, offset, sort)
            entry = self._fresh_entry(key)
            if entry is not None:
                return list(entry.results)

            results = self.store.search(key.term, limit, offset)
            total_count = self.store.count(key.term)
            if sort is not None:
                results = sort.apply(results)

            self._store_entry(key, results, total_count)
            for entity in results:
                self._remember(getattr(entity, "id", None), entity)
            return list(results)

    def count(self, term: str | None, sort_by: SortOption | str | None = None) -> int:
        """
        Total number of entities matching ``term``.

        Plain sorts reuse the total of any fresh cached page for the same term
        before asking the store. Date-window sorts count the filtered window.
        """
        sort = self._resolve_sort(sort_by)
        normalized = term or ""

        with self._lock:
            if sort is not None and sort.is_filter:
                entry, _ = self._window(normalized, sort)
                return entry.total_count

            now = self.clock()
            ttl = self.config.search_ttl_seconds
            for key, entry in self._searches.items():
                if key.term == normalized and not key.is_window and not entry.is_expired(now, ttl):
                    return entry.total_count

            return self.store.count(normalized)

    def find_by_reference(self, reference: str, ref_id: int) -> list[T]:
        """
        All entities pointing at patient or doctor ``ref_id``, read from the store.

        The result itself is never cached, but every returned entity is
        remembered by id. The search cache is left alone.

        Raises:
            TypeError: The backing store cannot look rows up by reference
        """
        lookup = getattr(self.store, "find_by_reference", None)
        if lookup is None:
            raise TypeError(f"{self.name} store does not support reference lookups")

        with self._lock:
            rows = lookup(reference, ref_id)
            for entity in rows:
                self._remember(getattr(entity, "id", None), entity)
            return list(rows)

    def find_by_patient(self, patient_id: int) -> list[T]:
        return self.find_by_reference("patient", patient_id)

    def find_by_doctor(self, doctor_id: int) -> list[T]:
        return self.find_by_reference("doctor", doctor_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, entity: T) -> int:
        """Insert through the store, cache the id-stamped snapshot, clear searches."""
        with self._lock:
            new_id = self.store.insert(entity)
            stamped = replace(entity, id=new_id)  # type: ignore[type-var]
            self._remember(new_id, stamped)
            self._invalidate_searches("insert")
            return new_id

    def update(self, entity: T) -> None:
        """Update through the store, drop the cached snapshot, clear searches."""
        entity_id = getattr(entity, "id", None)
        if entity_id is None:
            raise ValueError(f"Cannot update {self.name} without an id")

        with self._lock:
            self.store.update(entity)
            self._by_id.pop(entity_id)
            self._invalidate_searches("update")

    def delete(self, entity_id: int) -> None:
        """Delete through the store, drop the cached snapshot, clear searches."""
        with self._lock:
            self.store.delete(entity_id)
            self._by_id.pop(entity_id)
            self._invalidate_searches("delete")

    # ------------------------------------------------------------------
    # Maintenance and diagnostics
    # ------------------------------------------------------------------

    def invalidate_all(self) -> None:
        """Drop every cached entity and search page."""
        with self._lock:
            dropped = self._by_id.clear() + self._searches.clear()
            if dropped:
                self.statistics.record_invalidation(dropped)
            self.logger.log_invalidation(self.name, "invalidate_all", dropped)

    def purge_expired(self) -> int:
        """Remove search entries past their TTL. Returns the number removed."""
        with self._lock:
            now = self.clock()
            ttl = self.config.search_ttl_seconds
            expired = [key for key, entry in self._searches.items() if entry.is_expired(now, ttl)]
            for key in expired:
                self._searches.pop(key)
            if expired:
                self.statistics.record_expiration(len(expired))
            return len(expired)

    @property
    def id_cache_size(self) -> int:
        return len(self._by_id)

    @property
    def search_cache_size(self) -> int:
        return len(self._searches)

    def cached_ids(self) -> list[int]:
        """Cached ids from least to most recently used."""
        return self._by_id.keys()

    def get_cache_stats(self) -> str:
        """Human-readable sizes, e.g. ``Patient cache: 3/100, Search cache: 1/20``."""
        return (
            f"{self.name} cache: {len(self._by_id)}/{self._by_id.capacity}, "
            f"Search cache: {len(self._searches)}/{self._searches.capacity}"
        )

    def get_stats(self) -> dict[str, Any]:
        return self.statistics.get_stats_dict(
            {
                "name": self.name,
                "id_cache_size": len(self._by_id),
                "id_cache_capacity": self._by_id.capacity,
                "search_cache_size": len(self._searches),
                "search_cache_capacity": self._searches.capacity,
                "search_ttl_seconds": self.config.search_ttl_seconds,
            }
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_sort(self, sort_by: SortOption | str | None) -> SortOption | None:
        if self.sort_type is not None:
            return parse_sort(self.sort_type, sort_by)
        if sort_by is None or isinstance(sort_by, SortOption):
            return sort_by
        raise TypeError(f"{self.name} cache has no sort table; cannot resolve {sort_by!r}")

    @staticmethod
    def _check_page(limit: int, offset: int) -> None:
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")

    def _remember(self, entity_id: int | None, entity: T) -> None:
        if entity_id is None:
            return
        evicted = self._by_id.put(entity_id, entity)
        if evicted:
            self.statistics.record_eviction(len(evicted))
            self.logger.log_eviction(self.name, "id", len(evicted))

    def _fresh_entry(self, key: SearchKey) -> SearchCacheEntry[T] | None:
        entry = self._searches.get(key)
        if entry is None:
            self.statistics.record_search_miss()
            self.logger.log_cache_miss(self.name, "search", key)
            return None

        if entry.is_expired(self.clock(), self.config.search_ttl_seconds):
            self._searches.pop(key)
            self.statistics.record_search_miss(expired=True)
            self.logger.log_cache_miss(self.name, "search", key, expired=True)
            return None

        self.statistics.record_search_hit()
        self.logger.log_cache_hit(self.name, "search", key)
        return entry

    def _store_entry(self, key: SearchKey, results: list[T], total_count: int) -> SearchCacheEntry[T]:
        entry = SearchCacheEntry(
            results=tuple(results), total_count=total_count, created_at=self.clock()
        )
        evicted = self._searches.put(key, entry)
        if evicted:
            self.statistics.record_eviction(len(evicted))
            self.logger.log_eviction(self.name, "search", len(evicted))
        return entry

    def _window(self, term: str | None, sort: SortOption) -> tuple[SearchCacheEntry[T], bool]:
        """Filtered, sorted date window for ``sort``; returns (entry, fetched_from_store)."""
        key = SearchKey.window(term, sort)
        entry = self._fresh_entry(key)
        if entry is not None:
            return entry, False

        window = self.config.filter_window
        rows = self.store.search(key.term, window, 0)
        if len(rows) >= window:
            self.logger.warning(
                f"{self.name} {sort.name} window reached {window} rows; matches beyond it are dropped",
                cache=self.name,
                filter_window=window,
            )

        today = self.today()
        filtered = sort.apply(row for row in rows if sort.in_window(row, today))
        return self._store_entry(key, filtered, len(filtered)), True

    def _invalidate_searches(self, reason: str) -> None:
        dropped = self._searches.clear()
        if dropped:
            self.statistics.record_invalidation(dropped)
        self.logger.log_invalidation(self.name, reason, dropped)
