"""
Contract between the entity caches and the backing record store.

The store is the source of truth. It is expected to raise StoreError on any
persistence failure; the cache lets that error through untouched.
"""

from __future__ import annotations

from typing import Protocol, TypeVar

T = TypeVar("T")


class Store(Protocol[T]):
    """CRUD plus paginated search for one entity type."""

    def find_by_id(self, entity_id: int) -> T | None:
        """Return the entity with ``entity_id`` or None."""
        ...

    def search(self, term: str, limit: int, offset: int) -> list[T]:
        """Return one page of entities matching ``term`` ("" matches all)."""
        ...

    def count(self, term: str) -> int:
        """Total number of entities matching ``term``."""
        ...

    def insert(self, entity: T) -> int:
        """Persist a new entity and return its generated id."""
        ...

    def update(self, entity: T) -> None:
        ...

    def delete(self, entity_id: int) -> None:
        ...


class ReferenceStore(Store[T], Protocol):
    """A store whose rows point at patients and doctors."""

    def find_by_reference(self, reference: str, ref_id: int) -> list[T]:
        """All rows whose ``reference`` foreign key ("patient", "doctor") equals ``ref_id``."""
        ...
