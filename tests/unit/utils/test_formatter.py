"""Tests for hmscache.utils.formatter module."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import orjson
import pytest
from rich.console import Console

from hmscache.core.types import Appointment, MedicalInventory, OutputFormat, Patient, VisitHistory
from hmscache.utils.formatter import (
    entity_to_dict,
    format_entity,
    format_result,
    format_stats_text,
    render_stats_table,
    render_table,
    to_json_bytes,
)


def _patients():
    return [
        Patient("Ann", "Smith", id=1, date_of_birth=date(1990, 5, 1), email="ann@example.com"),
        Patient("Bob", "Jones", id=2, address="1 Main St"),
    ]


def _stats(name="Patient"):
    return {
        "name": name,
        "id_cache_size": 3,
        "id_cache_capacity": 100,
        "search_cache_size": 1,
        "search_cache_capacity": 20,
        "id_hits": 2,
        "id_misses": 3,
        "search_hits": 1,
        "search_misses": 1,
        "hit_rate": 3 / 7,
        "evictions": 0,
        "expirations": 0,
        "invalidations": 1,
    }


class TestJson:
    """JSON output."""

    def test_to_json_bytes(self):
        data = orjson.loads(to_json_bytes(_patients(), total=2))
        assert data["total"] == 2
        assert data["items"][0]["first_name"] == "Ann"
        assert data["items"][0]["date_of_birth"] == "1990-05-01"
        assert data["items"][1]["date_of_birth"] is None

    def test_decimal_and_datetime(self):
        item = MedicalInventory("Aspirin", id=1, cost=Decimal("12.50"))
        appt = Appointment(1, 2, datetime(2026, 3, 12, 9, 30), id=7)
        data = orjson.loads(to_json_bytes([item]))
        assert data["items"][0]["cost"] == "12.50"
        assert "total" not in data
        appt_data = orjson.loads(to_json_bytes([appt]))
        assert appt_data["items"][0]["appointment_date"] == "2026-03-12T09:30:00"

    def test_extra_keys(self):
        data = orjson.loads(to_json_bytes([], extra={"counts": {"patient": 0}}))
        assert data == {"items": [], "counts": {"patient": 0}}

    def test_entity_to_dict_rejects_non_dataclass(self):
        with pytest.raises(TypeError):
            entity_to_dict({"id": 1})


class TestText:
    """Plain text output."""

    def test_format_entity_skips_none(self):
        line = format_entity(_patients()[0])
        assert line.startswith("#1 ")
        assert "first_name=Ann" in line
        assert "date_of_birth=1990-05-01" in line
        assert "address" not in line

    def test_values_with_spaces_are_quoted(self):
        assert "address='1 Main St'" in format_entity(_patients()[1])

    def test_datetime_uses_space_separator(self):
        line = format_entity(Appointment(1, 2, datetime(2026, 3, 12, 9, 30), id=7))
        assert "appointment_date='2026-03-12 09:30:00'" in line

    def test_rows_without_id_have_no_prefix(self):
        line = format_entity(VisitHistory("Greg House", date(2026, 3, 12), "Checkup"))
        assert line == "doctor_name='Greg House' visit_date=2026-03-12 reason=Checkup"

    def test_format_result_text(self):
        out = format_result(_patients(), OutputFormat.TEXT, total=10)
        lines = out.splitlines()
        assert len(lines) == 3
        assert lines[-1] == "# shown=2 total=10"

    def test_format_result_json(self):
        out = format_result(_patients(), OutputFormat.JSON, total=2)
        assert orjson.loads(out)["total"] == 2

    def test_stats_text(self):
        out = format_stats_text([_stats()])
        assert out.startswith("Patient: id 3/100 search 1/20")
        assert "hits=3 misses=4" in out
        assert "hit_rate=0.43" in out


class TestRich:
    """Rich table output."""

    def test_render_table(self):
        console = Console(record=True, width=200)
        render_table(_patients(), console, title="patients", total=2)
        text = console.export_text()
        assert "patients" in text
        assert "Smith" in text
        assert "first_name" in text

    def test_render_empty_table(self):
        console = Console(record=True, width=120)
        render_table([], console)
        assert "No records found" in console.export_text()

    def test_render_stats_table(self):
        console = Console(record=True, width=250)
        render_stats_table([_stats(), _stats("Doctor")], console)
        text = console.export_text()
        assert "Cache statistics" in text
        assert "Doctor" in text
        assert "0.43" in text
