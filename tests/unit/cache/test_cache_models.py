"""Tests for hmscache.cache.models module."""

from __future__ import annotations

import pytest

from hmscache.cache.models import CacheStats, SearchCacheEntry, SearchKey
from hmscache.core.sorting import AppointmentSort, PatientSort


class TestSearchKey:
    """Tests for SearchKey."""

    def test_none_term_normalized(self):
        assert SearchKey.create(None, 10, 0, None) == SearchKey.create("", 10, 0, None)

    def test_sort_is_part_of_key(self):
        a = SearchKey.create("smith", 10, 0, PatientSort.NAME_ASC)
        b = SearchKey.create("smith", 10, 0, PatientSort.NAME_DESC)
        assert a != b
        assert len({a, b}) == 2

    def test_term_not_otherwise_normalized(self):
        assert SearchKey.create("Smith", 10, 0, None) != SearchKey.create("smith", 10, 0, None)

    def test_window_key(self):
        key = SearchKey.window("x", AppointmentSort.NEXT_7)
        assert key.is_window
        assert key.limit is None and key.offset is None
        assert not SearchKey.create("x", 10, 0, AppointmentSort.NEXT_7).is_window

    def test_str(self):
        assert str(SearchKey.create("a", 5, 10, PatientSort.ID_ASC)) == "a|5|10|ID_ASC"
        assert str(SearchKey.create("a", 5, 0, None)) == "a|5|0|default"
        assert str(SearchKey.window("", AppointmentSort.TODAY)) == "|window|TODAY"


class TestSearchCacheEntry:
    """Tests for SearchCacheEntry."""

    def test_age(self):
        entry = SearchCacheEntry(results=(), total_count=0, created_at=100.0)
        assert entry.age(130.0) == 30.0

    @pytest.mark.parametrize(
        "now, expired",
        [(100.0, False), (159.9, False), (160.0, True), (161.0, True)],
    )
    def test_expires_when_age_reaches_ttl(self, now, expired):
        entry = SearchCacheEntry(results=(1, 2), total_count=2, created_at=100.0)
        assert entry.is_expired(now, 60.0) is expired


class TestCacheStats:
    """Tests for CacheStats."""

    def test_defaults(self):
        stats = CacheStats()
        assert stats.hits == 0
        assert stats.misses == 0
        assert stats.hit_rate == 0.0

    def test_hit_rate_combines_both_caches(self):
        stats = CacheStats(id_hits=3, id_misses=1, search_hits=1, search_misses=3)
        assert stats.hits == 4
        assert stats.misses == 4
        assert stats.hit_rate == 0.5
