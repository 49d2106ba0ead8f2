"""Tests for per-patient and per-doctor reads through EntityCache."""

from __future__ import annotations

from datetime import datetime

import pytest

from conftest import FakeStore
from hmscache.cache.entity_cache import EntityCache
from hmscache.core.types import Appointment
from hmscache.utils.error_handling import StoreError


@pytest.fixture
def seeded(appointment_store: FakeStore) -> FakeStore:
    for patient_id, doctor_id, day in [(1, 1, 12), (2, 2, 14), (1, 2, 10)]:
        appointment_store.insert(Appointment(patient_id, doctor_id, datetime(2026, 3, day, 9, 0)))
    appointment_store.calls.clear()
    return appointment_store


def _ids(rows):
    return [a.id for a in rows]


class TestReferenceLookups:
    """find_by_patient / find_by_doctor."""

    def test_find_by_patient(self, appointment_cache, seeded):
        assert _ids(appointment_cache.find_by_patient(1)) == [3, 1]
        assert ("find_by_reference", "patient", 1) in seeded.calls

    def test_find_by_doctor(self, appointment_cache, seeded):
        assert _ids(appointment_cache.find_by_doctor(2)) == [3, 2]

    def test_results_are_remembered_by_id(self, appointment_cache, seeded):
        appointment_cache.find_by_patient(1)
        assert sorted(appointment_cache.cached_ids()) == [1, 3]

        assert appointment_cache.find_by_id(3).patient_id == 1
        assert seeded.calls_to("find_by_id") == 0

    def test_lists_are_never_cached(self, appointment_cache, seeded):
        appointment_cache.find_by_doctor(2)
        appointment_cache.find_by_doctor(2)
        assert seeded.calls_to("find_by_reference") == 2

    def test_search_cache_untouched(self, appointment_cache, seeded):
        appointment_cache.search("", 10, 0)
        assert appointment_cache.search_cache_size == 1

        appointment_cache.find_by_patient(1)

        assert appointment_cache.search_cache_size == 1
        appointment_cache.search("", 10, 0)
        assert seeded.calls_to("search") == 1

    def test_returned_list_is_a_copy(self, appointment_cache, seeded):
        rows = appointment_cache.find_by_patient(1)
        rows.clear()
        assert _ids(appointment_cache.find_by_patient(1)) == [3, 1]

    def test_store_failure_leaves_cache_empty(self, appointment_cache, seeded):
        seeded.fail_on.add("find_by_reference")
        with pytest.raises(StoreError):
            appointment_cache.find_by_patient(1)
        assert appointment_cache.id_cache_size == 0

    def test_store_without_reference_lookup(self, clock):
        class PlainStore:
            def find_by_id(self, entity_id):
                return None

        cache = EntityCache(PlainStore(), name="Plain", clock=clock)
        with pytest.raises(TypeError, match="does not support reference lookups"):
            cache.find_by_doctor(1)
