"""
Bounded in-memory storage for the entity caches.

Classes:
    LRUCache: Fixed-capacity map with least-recently-used eviction

Features:
    - O(1) get/put/pop on an access-ordered OrderedDict
    - Reads and writes both refresh recency
    - ``peek`` for inspection without touching recency
    - Thread-safe operations
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Hashable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """
    In-memory map bounded to ``capacity`` entries.

    When an insertion pushes the size past capacity, the least recently used
    entry is evicted. The most recently used entry sits at the end of the
    underlying OrderedDict.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._data: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.RLock()

    def get(self, key: K) -> V | None:
        """Return the value for ``key`` and mark it most recently used."""
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def peek(self, key: K) -> V | None:
        """Return the value for ``key`` without changing recency."""
        with self._lock:
            return self._data.get(key)

    def put(self, key: K, value: V) -> list[tuple[K, V]]:
        """
        Insert or replace ``key`` as most recently used.

        Returns:
            The (key, value) pairs evicted to stay within capacity
        """
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
            self._data[key] = value

            evicted: list[tuple[K, V]] = []
            while len(self._data) > self.capacity:
                evicted.append(self._data.popitem(last=False))
            return evicted

    def pop(self, key: K) -> V | None:
        """Remove ``key``; returns the removed value or None."""
        with self._lock:
            return self._data.pop(key, None)

    def clear(self) -> int:
        """Remove every entry; returns how many were removed."""
        with self._lock:
            removed = len(self._data)
            self._data.clear()
            return removed

    def keys(self) -> list[K]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._data.keys())

    def items(self) -> list[tuple[K, V]]:
        """Snapshot of (key, value) pairs from least to most recently used."""
        with self._lock:
            return list(self._data.items())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        return len(self._data)
