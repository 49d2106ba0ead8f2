"""
Configuration module for hmscache.

This module defines the CacheConfig class which carries the capacities and
freshness bounds shared by every entity cache. One config object is normally
built at startup and handed to every cache through ``create_services``.

Classes:
    CacheConfig: Capacities, TTL and filter window for entity caches

Key Configuration Areas:
    - By-id cache: maximum number of entity snapshots held per entity type
    - Search cache: maximum number of memoized pages and their time-to-live
    - Filter window: how many rows date-window sorts pull from the store
    - Paging: default page size used by the service layer and the CLI

Example:
    >>> from hmscache.core.config import CacheConfig
    >>> config = CacheConfig(id_cache_size=500, search_ttl_seconds=30.0)
    >>> config.validate()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any

from ..utils.error_handling import ConfigurationError

ENV_PREFIX = "HMSCACHE_"


@dataclass(slots=True)
class CacheConfig:
    # By-id cache
    id_cache_size: int = field(default=100, metadata={"help": "Max entities cached by id."})

    # Search cache
    search_cache_size: int = 20
    search_ttl_seconds: float = 60.0

    # Date-window sorts fetch this many rows, filter in memory, then paginate
    filter_window: int = 2000

    # Paging
    default_page_size: int = 25

    def validate(self) -> None:
        """Raise ConfigurationError for any non-positive setting."""
        for name in (
            "id_cache_size",
            "search_cache_size",
            "search_ttl_seconds",
            "filter_window",
            "default_page_size",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(
                    f"{name} must be positive, got {value!r}", setting=name
                )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> CacheConfig:
        """
        Build a config from ``HMSCACHE_*`` environment variables.

        Unset variables keep their defaults, e.g. ``HMSCACHE_SEARCH_TTL_SECONDS=30``.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            caster = float if f.name == "search_ttl_seconds" else int
            try:
                overrides[f.name] = caster(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}", setting=f.name
                ) from e

        config = cls(**overrides)
        config.validate()
        return config

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
