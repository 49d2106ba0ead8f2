"""Tests for the appointment date-window sorts (TODAY, NEXT_7, NEXT_30)."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from conftest import TODAY, FakeStore, make_appointment
from hmscache.cache.entity_cache import EntityCache
from hmscache.core.config import CacheConfig
from hmscache.core.sorting import AppointmentSort


def _at(days: int, hour: int = 10) -> datetime:
    return datetime.combine(TODAY + timedelta(days=days), datetime.min.time()).replace(hour=hour)


@pytest.fixture
def seeded(appointment_store: FakeStore) -> FakeStore:
    for when, reason in [
        (_at(-1), "yesterday"),
        (_at(0, 9), "today morning"),
        (_at(0, 15), "today afternoon"),
        (_at(3), "in three days"),
        (_at(7, 23), "in a week"),
        (_at(8), "in eight days"),
        (_at(30), "in thirty days"),
        (_at(31), "in thirty-one days"),
        (None, "unscheduled"),
    ]:
        appointment_store.insert(make_appointment(when, reason))
    appointment_store.calls.clear()
    return appointment_store


def _reasons(page):
    return [a.reason for a in page]


class TestWindowSorts:
    """Tests for filter-style sort options."""

    def test_today(self, appointment_cache, seeded):
        page = appointment_cache.search("", 10, 0, AppointmentSort.TODAY)
        assert _reasons(page) == ["today afternoon", "today morning"]

    def test_next_7_includes_both_ends(self, appointment_cache, seeded):
        page = appointment_cache.search("", 10, 0, AppointmentSort.NEXT_7)
        assert _reasons(page) == [
            "in a week",
            "in three days",
            "today afternoon",
            "today morning",
        ]

    def test_next_30(self, appointment_cache, seeded):
        page = appointment_cache.search("", 10, 0, "next_30")
        assert _reasons(page)[0] == "in thirty days"
        assert len(page) == 6
        assert "in thirty-one days" not in _reasons(page)
        assert "yesterday" not in _reasons(page)
        assert "unscheduled" not in _reasons(page)

    def test_fetches_filter_window_from_store(self, appointment_cache, seeded):
        appointment_cache.search("", 2, 0, AppointmentSort.NEXT_7)
        assert seeded.calls == [("search", "", 50, 0)]

    def test_pages_share_one_window_entry(self, appointment_cache, seeded):
        first = appointment_cache.search("", 2, 0, AppointmentSort.NEXT_30)
        second = appointment_cache.search("", 2, 2, AppointmentSort.NEXT_30)
        assert _reasons(first) == ["in thirty days", "in eight days"]
        assert _reasons(second) == ["in a week", "in three days"]
        assert seeded.calls_to("search") == 1
        assert appointment_cache.search_cache_size == 1

    def test_only_returned_page_cached_by_id(self, appointment_cache, seeded):
        appointment_cache.search("", 2, 0, AppointmentSort.NEXT_30)
        assert appointment_cache.id_cache_size == 2

    def test_count_is_window_size(self, appointment_cache, seeded):
        assert appointment_cache.count("", AppointmentSort.NEXT_7) == 4
        assert appointment_cache.count("", AppointmentSort.TODAY) == 2
        assert seeded.calls_to("count") == 0

    def test_count_reuses_cached_window(self, appointment_cache, seeded):
        appointment_cache.search("", 1, 0, AppointmentSort.NEXT_7)
        assert appointment_cache.count("", AppointmentSort.NEXT_7) == 4
        assert seeded.calls_to("search") == 1

    def test_term_filters_before_window(self, appointment_cache, seeded):
        page = appointment_cache.search("today", 10, 0, AppointmentSort.NEXT_7)
        assert _reasons(page) == ["today afternoon", "today morning"]

    def test_window_expires_with_ttl(self, appointment_cache, seeded, clock):
        appointment_cache.search("", 10, 0, AppointmentSort.TODAY)
        clock.advance(60)
        appointment_cache.search("", 10, 0, AppointmentSort.TODAY)
        assert seeded.calls_to("search") == 2

    def test_insert_clears_window(self, appointment_cache, seeded):
        appointment_cache.search("", 10, 0, AppointmentSort.TODAY)
        appointment_cache.insert(make_appointment(_at(0, 12), "today noon"))
        page = appointment_cache.search("", 10, 0, AppointmentSort.TODAY)
        assert _reasons(page) == ["today afternoon", "today noon", "today morning"]

    def test_today_is_read_per_fetch(self, seeded, clock):
        days = iter([TODAY, TODAY + timedelta(days=3)])
        cache = EntityCache(
            seeded, sort_type=AppointmentSort, clock=clock, today=lambda: next(days)
        )
        assert _reasons(cache.search("", 10, 0, AppointmentSort.TODAY)) == [
            "today afternoon",
            "today morning",
        ]
        clock.advance(61)
        assert _reasons(cache.search("", 10, 0, AppointmentSort.TODAY)) == ["in three days"]

    def test_warns_when_window_is_full(self, seeded, clock, caplog):
        caplog.set_level(logging.WARNING, logger="hmscache")
        cache = EntityCache(
            seeded,
            sort_type=AppointmentSort,
            config=CacheConfig(filter_window=3),
            clock=clock,
            today=lambda: TODAY,
        )
        cache.search("", 10, 0, AppointmentSort.NEXT_30)
        assert any("window reached 3 rows" in r.getMessage() for r in caplog.records)


class TestPlainDateSorts:
    """Date sorts that only order rows."""

    def test_date_desc_puts_nulls_first(self, appointment_cache, seeded):
        page = appointment_cache.search("", 20, 0, AppointmentSort.DATE_DESC)
        assert page[0].reason == "unscheduled"
        dates = [a.appointment_date for a in page[1:]]
        assert dates == sorted(dates, reverse=True)

    def test_date_asc_puts_nulls_last(self, appointment_cache, seeded):
        page = appointment_cache.search("", 20, 0, AppointmentSort.DATE_ASC)
        assert page[-1].reason == "unscheduled"
        assert page[0].reason == "yesterday"
        assert len(page) == 9
