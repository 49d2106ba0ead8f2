"""Tests for hmscache.cache.statistics module."""

from __future__ import annotations

from hmscache.cache.statistics import CacheStatistics


class TestCacheStatistics:
    """Tests for CacheStatistics class."""

    def test_initial_state(self):
        stats = CacheStatistics()
        d = stats.get_stats_dict()
        assert d["id_hits"] == 0
        assert d["search_misses"] == 0
        assert d["hit_rate"] == 0.0

    def test_record_hits_and_misses(self):
        stats = CacheStatistics()
        stats.record_id_hit()
        stats.record_id_miss()
        stats.record_search_hit()
        stats.record_search_miss()
        assert stats.stats.id_hits == 1
        assert stats.stats.id_misses == 1
        assert stats.stats.search_hits == 1
        assert stats.stats.search_misses == 1
        assert stats.stats.expirations == 0

    def test_expired_miss_counts_expiration(self):
        stats = CacheStatistics()
        stats.record_search_miss(expired=True)
        assert stats.stats.search_misses == 1
        assert stats.stats.expirations == 1

    def test_evictions_and_invalidations(self):
        stats = CacheStatistics()
        stats.record_eviction()
        stats.record_eviction(3)
        stats.record_invalidation(5)
        assert stats.stats.evictions == 4
        assert stats.stats.invalidations == 5

    def test_additional_stats_merged(self):
        stats = CacheStatistics()
        d = stats.get_stats_dict({"name": "Patient", "id_cache_size": 2})
        assert d["name"] == "Patient"
        assert d["id_cache_size"] == 2

    def test_reset(self):
        stats = CacheStatistics()
        stats.record_id_hit()
        stats.reset_stats()
        assert stats.stats.id_hits == 0

    def test_performance_summary(self):
        stats = CacheStatistics()
        stats.record_id_hit()
        stats.record_id_miss()
        summary = stats.get_performance_summary()
        assert "2 requests" in summary
        assert "50.0% hit rate" in summary
