"""Tests for hmscache.core.config module."""

from __future__ import annotations

import pytest

from hmscache.core.config import CacheConfig
from hmscache.utils.error_handling import ConfigurationError


class TestCacheConfig:
    """Tests for CacheConfig."""

    def test_defaults(self):
        cfg = CacheConfig()
        assert cfg.id_cache_size == 100
        assert cfg.search_cache_size == 20
        assert cfg.search_ttl_seconds == 60.0
        assert cfg.filter_window == 2000
        assert cfg.default_page_size == 25
        cfg.validate()

    @pytest.mark.parametrize(
        "name", ["id_cache_size", "search_cache_size", "search_ttl_seconds", "filter_window"]
    )
    def test_validate_rejects_non_positive(self, name):
        cfg = CacheConfig(**{name: 0})
        with pytest.raises(ConfigurationError, match=name) as exc_info:
            cfg.validate()
        assert exc_info.value.setting == name

    def test_to_dict(self):
        d = CacheConfig(id_cache_size=5).to_dict()
        assert d["id_cache_size"] == 5
        assert set(d) == {
            "id_cache_size",
            "search_cache_size",
            "search_ttl_seconds",
            "filter_window",
            "default_page_size",
        }

    def test_slots(self):
        cfg = CacheConfig()
        with pytest.raises(AttributeError):
            cfg.unknown_setting = 1


class TestFromEnv:
    """Tests for CacheConfig.from_env."""

    def test_empty_env_gives_defaults(self):
        assert CacheConfig.from_env({}) == CacheConfig()

    def test_overrides(self):
        cfg = CacheConfig.from_env(
            {"HMSCACHE_ID_CACHE_SIZE": "10", "HMSCACHE_SEARCH_TTL_SECONDS": "2.5"}
        )
        assert cfg.id_cache_size == 10
        assert cfg.search_ttl_seconds == 2.5
        assert cfg.search_cache_size == 20

    def test_unparseable_value(self):
        with pytest.raises(ConfigurationError, match="HMSCACHE_FILTER_WINDOW"):
            CacheConfig.from_env({"HMSCACHE_FILTER_WINDOW": "lots"})

    def test_invalid_value(self):
        with pytest.raises(ConfigurationError, match="search_cache_size"):
            CacheConfig.from_env({"HMSCACHE_SEARCH_CACHE_SIZE": "-1"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("HMSCACHE_DEFAULT_PAGE_SIZE", "7")
        assert CacheConfig.from_env().default_page_size == 7
