"""
Cache package for hmscache.

Public API:
    EntityCache: Read-through cache in front of one entity store
    LRUCache: Bounded least-recently-used map
    SearchKey: Composite key of a memoized search
    SearchCacheEntry: Memoized search page
    CacheStats: Cache performance statistics
    CacheStatistics: Thread-safe statistics tracker
"""

from .backends import LRUCache
from .entity_cache import EntityCache
from .models import CacheStats, SearchCacheEntry, SearchKey
from .statistics import CacheStatistics

__all__ = [
    "EntityCache",
    "LRUCache",
    "SearchKey",
    "SearchCacheEntry",
    "CacheStats",
    "CacheStatistics",
]
