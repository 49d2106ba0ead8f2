"""
Service layer over one entity cache.

``EntityService`` is what callers use: it normalizes and validates records
before they reach the cache and supplies the default page size. All reads
and writes go through the cache.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import fields, replace
from typing import Any, Generic, TypeVar

from ..cache.entity_cache import EntityCache
from ..core.config import CacheConfig
from ..core.sorting import SortOption
from ..utils.logging_config import get_logger

T = TypeVar("T")


def strip_strings(entity: T) -> T:
    """Return a copy of ``entity`` with surrounding whitespace removed from string fields."""
    changes = {
        f.name: value.strip()
        for f in fields(entity)  # type: ignore[arg-type]
        if isinstance(value := getattr(entity, f.name), str) and value != value.strip()
    }
    return replace(entity, **changes) if changes else entity  # type: ignore[type-var]


class EntityService(Generic[T]):
    """Validated access to one cached record type."""

    def __init__(
        self,
        cache: EntityCache[T],
        validator: Callable[[T], None],
        config: CacheConfig | None = None,
        prepare: Callable[[T], T] | None = None,
    ):
        self.cache = cache
        self.validator = validator
        self.config = config or cache.config
        self.prepare = prepare
        self.logger = get_logger()

    def save(self, entity: T) -> int:
        """
        Validate and persist ``entity``.

        Records without an id are inserted; records with an id are updated.

        Returns:
            The id of the saved record

        Raises:
            ValidationError: The record failed validation; nothing was written
        """
        entity = strip_strings(entity)
        if self.prepare is not None:
            entity = self.prepare(entity)
        self.validator(entity)

        entity_id = getattr(entity, "id", None)
        if entity_id is None:
            new_id = self.cache.insert(entity)
            self.logger.info(f"{self.cache.name} {new_id} created", cache=self.cache.name)
            return new_id

        self.cache.update(entity)
        self.logger.info(f"{self.cache.name} {entity_id} updated", cache=self.cache.name)
        return entity_id

    def get(self, entity_id: int) -> T | None:
        return self.cache.find_by_id(entity_id)

    def search(
        self,
        term: str | None = "",
        limit: int | None = None,
        offset: int = 0,
        sort_by: SortOption | str | None = None,
    ) -> list[T]:
        page_size = self.config.default_page_size if limit is None else limit
        return self.cache.search(term, page_size, offset, sort_by)

    def count(self, term: str | None = "", sort_by: SortOption | str | None = None) -> int:
        return self.cache.count(term, sort_by)

    def find_by_patient(self, patient_id: int) -> list[T]:
        return self.cache.find_by_patient(patient_id)

    def find_by_doctor(self, doctor_id: int) -> list[T]:
        return self.cache.find_by_doctor(doctor_id)

    def delete(self, entity_id: int) -> None:
        self.cache.delete(entity_id)
        self.logger.info(f"{self.cache.name} {entity_id} deleted", cache=self.cache.name)

    def cache_stats(self) -> str:
        return self.cache.get_cache_stats()

    def stats(self) -> dict[str, Any]:
        return self.cache.get_stats()
