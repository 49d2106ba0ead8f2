"""
Shared test fixtures for hmscache tests.

Provides an in-memory recording store, a controllable clock, a fixed
"today", and factories for sample records.
"""

from __future__ import annotations

from dataclasses import fields, replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pytest

from hmscache.cache.entity_cache import EntityCache
from hmscache.core.config import CacheConfig
from hmscache.core.sorting import AppointmentSort, PatientSort
from hmscache.core.types import Appointment, Doctor, Patient
from hmscache.storage.database import HospitalDatabase
from hmscache.utils.error_handling import StoreError
from hmscache.utils.logging_config import LogLevel, configure_logging

TODAY = date(2026, 3, 10)


class FakeStore:
    """
    In-memory ``Store`` that records every call.

    Search matches ``term`` case-insensitively against every string field and
    returns rows newest first. Operations named in ``fail_on`` raise StoreError.
    """

    def __init__(self, entities: list[Any] | None = None):
        self.rows: dict[int, Any] = {}
        self.next_id = 1
        self.calls: list[tuple[Any, ...]] = []
        self.fail_on: set[str] = set()
        for entity in entities or []:
            self.insert(entity)
        self.calls.clear()

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        if operation in self.fail_on:
            raise StoreError(f"{operation} failed", operation=operation)

    def calls_to(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    def _matches(self, entity: Any, term: str) -> bool:
        if not term:
            return True
        needle = term.lower()
        return any(
            isinstance(value := getattr(entity, f.name), str) and needle in value.lower()
            for f in fields(entity)
        )

    def _matching(self, term: str) -> list[Any]:
        rows = sorted(self.rows.values(), key=lambda e: e.id, reverse=True)
        return [e for e in rows if self._matches(e, term)]

    def find_by_id(self, entity_id: int) -> Any:
        self._record("find_by_id", entity_id)
        return self.rows.get(entity_id)

    def search(self, term: str, limit: int, offset: int) -> list[Any]:
        self._record("search", term, limit, offset)
        return self._matching(term)[offset:offset + limit]

    def count(self, term: str) -> int:
        self._record("count", term)
        return len(self._matching(term))

    def find_by_reference(self, reference: str, ref_id: int) -> list[Any]:
        self._record("find_by_reference", reference, ref_id)
        rows = sorted(self.rows.values(), key=lambda e: e.id, reverse=True)
        return [e for e in rows if getattr(e, f"{reference}_id") == ref_id]

    def insert(self, entity: Any) -> int:
        self._record("insert", entity)
        new_id = self.next_id
        self.next_id += 1
        self.rows[new_id] = replace(entity, id=new_id)
        return new_id

    def update(self, entity: Any) -> None:
        self._record("update", entity)
        self.rows[entity.id] = entity

    def delete(self, entity_id: int) -> None:
        self._record("delete", entity_id)
        self.rows.pop(entity_id, None)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_patient(first: str, last: str, **kwargs: Any) -> Patient:
    defaults: dict[str, Any] = {
        "phone": "555-0100",
        "email": f"{first.lower()}.{last.lower()}@example.com",
        "date_of_birth": date(1980, 1, 1),
    }
    defaults.update(kwargs)
    return Patient(first_name=first, last_name=last, **defaults)


def make_doctor(first: str, last: str, **kwargs: Any) -> Doctor:
    defaults: dict[str, Any] = {
        "phone": "555-0200",
        "email": f"dr.{last.lower()}@example.com",
    }
    defaults.update(kwargs)
    return Doctor(first_name=first, last_name=last, **defaults)


def make_appointment(when: datetime | None, reason: str = "Checkup", **kwargs: Any) -> Appointment:
    return Appointment(patient_id=1, doctor_id=1, appointment_date=when, reason=reason, **kwargs)


SAMPLE_PATIENTS = [
    ("Ann", "Smith"),
    ("Bob", "Jones"),
    ("Cara", "Smithers"),
    ("Dan", "Adams"),
    ("Eve", "Brown"),
]


@pytest.fixture(autouse=True)
def reset_logging():
    """Give every test the default logger; CLI runs replace it with their own streams."""
    yield
    configure_logging(level=LogLevel.WARNING)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def patient_store() -> FakeStore:
    """Five patients with ids 1..5."""
    return FakeStore([make_patient(first, last) for first, last in SAMPLE_PATIENTS])


@pytest.fixture
def patient_cache(patient_store: FakeStore, clock: FakeClock) -> EntityCache[Patient]:
    return EntityCache(patient_store, sort_type=PatientSort, name="Patient", clock=clock)


@pytest.fixture
def appointment_store() -> FakeStore:
    return FakeStore([])


@pytest.fixture
def appointment_cache(appointment_store: FakeStore, clock: FakeClock) -> EntityCache[Appointment]:
    return EntityCache(
        appointment_store,
        sort_type=AppointmentSort,
        config=CacheConfig(filter_window=50),
        name="Appointment",
        clock=clock,
        today=lambda: TODAY,
    )


@pytest.fixture
def database(tmp_path: Path) -> HospitalDatabase:
    """Initialized SQLite database in a temp directory."""
    db = HospitalDatabase(tmp_path / "hospital.db")
    db.initialize()
    yield db
    db.close()
