"""
Per-entity sort tables.

Each entity type has an enum of sort options. An option names the fields it
orders by and a direction; the null policy is the same everywhere: nulls sort
last when ascending and first when descending.

Appointment additionally has date-window options (TODAY, NEXT_7, NEXT_30).
They are not pure orderings: the cache fetches a bounded window from the store,
keeps the rows whose date falls between today and today + N days, sorts them
newest first, then paginates.

Classes:
    SortSpec: Fields, direction and optional date window of one option
    SortOption: Base enum with the ordering and window logic
    PatientSort, DoctorSort, AppointmentSort, PrescriptionSort,
    InventorySort, FeedbackSort: Per-entity option tables

Functions:
    parse_sort: Resolve a member, member name or None to an option
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, TypeVar

from .types import EntityKind

T = TypeVar("T")


@dataclass(frozen=True)
class SortSpec:
    fields: tuple[str, ...]
    descending: bool = False
    window_field: str | None = None
    window_days: int | None = None


def _null_key(value: Any) -> tuple[bool, Any]:
    # (is_null, value): ascending puts nulls last, reverse=True puts them first
    return (value is None, value)


class SortOption(Enum):
    """Base class for per-entity sort tables; members carry a SortSpec."""

    @property
    def spec(self) -> SortSpec:
        return self.value

    @property
    def is_filter(self) -> bool:
        """True for date-window options that drop rows as well as ordering them."""
        return self.value.window_days is not None

    def sort_key(self, item: Any) -> tuple[tuple[bool, Any], ...]:
        return tuple(_null_key(getattr(item, name)) for name in self.value.fields)

    def apply(self, items: Iterable[T]) -> list[T]:
        """Return a new list ordered by this option (stable)."""
        return sorted(items, key=self.sort_key, reverse=self.value.descending)

    def in_window(self, item: Any, today: date) -> bool:
        """Whether ``item`` falls in this option's date window. Plain sorts accept everything."""
        spec = self.value
        if spec.window_days is None or spec.window_field is None:
            return True
        value = getattr(item, spec.window_field)
        if value is None:
            return False
        day = value.date() if isinstance(value, datetime) else value
        return today <= day <= today + timedelta(days=spec.window_days)


class PatientSort(SortOption):
    ID_ASC = SortSpec(("id",))
    ID_DESC = SortSpec(("id",), descending=True)
    NAME_ASC = SortSpec(("last_name", "first_name"))
    NAME_DESC = SortSpec(("last_name", "first_name"), descending=True)
    DOB_ASC = SortSpec(("date_of_birth",))
    DOB_DESC = SortSpec(("date_of_birth",), descending=True)


class DoctorSort(SortOption):
    ID_ASC = SortSpec(("id",))
    ID_DESC = SortSpec(("id",), descending=True)
    NAME_ASC = SortSpec(("last_name", "first_name"))
    NAME_DESC = SortSpec(("last_name", "first_name"), descending=True)


class AppointmentSort(SortOption):
    DATE_ASC = SortSpec(("appointment_date",))
    DATE_DESC = SortSpec(("appointment_date",), descending=True)
    TODAY = SortSpec(
        ("appointment_date",), descending=True, window_field="appointment_date", window_days=0
    )
    NEXT_7 = SortSpec(
        ("appointment_date",), descending=True, window_field="appointment_date", window_days=7
    )
    NEXT_30 = SortSpec(
        ("appointment_date",), descending=True, window_field="appointment_date", window_days=30
    )


class PrescriptionSort(SortOption):
    ID_ASC = SortSpec(("id",))
    ID_DESC = SortSpec(("id",), descending=True)
    DATE_ASC = SortSpec(("prescription_date",))
    DATE_DESC = SortSpec(("prescription_date",), descending=True)
    PATIENT_ASC = SortSpec(("patient_name",))
    PATIENT_DESC = SortSpec(("patient_name",), descending=True)
    DOCTOR_ASC = SortSpec(("doctor_name",))
    DOCTOR_DESC = SortSpec(("doctor_name",), descending=True)


class InventorySort(SortOption):
    ID_ASC = SortSpec(("id",))
    ID_DESC = SortSpec(("id",), descending=True)
    NAME_ASC = SortSpec(("name",))
    NAME_DESC = SortSpec(("name",), descending=True)
    QUANTITY_ASC = SortSpec(("quantity",))
    QUANTITY_DESC = SortSpec(("quantity",), descending=True)
    EXPIRY_ASC = SortSpec(("expiry_date",))
    EXPIRY_DESC = SortSpec(("expiry_date",), descending=True)


class FeedbackSort(SortOption):
    ID_ASC = SortSpec(("id",))
    ID_DESC = SortSpec(("id",), descending=True)
    DATE_ASC = SortSpec(("feedback_date",))
    DATE_DESC = SortSpec(("feedback_date",), descending=True)
    PATIENT_ASC = SortSpec(("patient_name",))
    PATIENT_DESC = SortSpec(("patient_name",), descending=True)
    DOCTOR_ASC = SortSpec(("doctor_name",))
    DOCTOR_DESC = SortSpec(("doctor_name",), descending=True)
    RATING_ASC = SortSpec(("rating",))
    RATING_DESC = SortSpec(("rating",), descending=True)


SORT_TYPES: dict[EntityKind, type[SortOption]] = {
    EntityKind.PATIENT: PatientSort,
    EntityKind.DOCTOR: DoctorSort,
    EntityKind.APPOINTMENT: AppointmentSort,
    EntityKind.PRESCRIPTION: PrescriptionSort,
    EntityKind.INVENTORY: InventorySort,
    EntityKind.FEEDBACK: FeedbackSort,
}


def parse_sort(sort_type: type[SortOption], value: SortOption | str | None) -> SortOption | None:
    """
    Resolve ``value`` to a member of ``sort_type``.

    Accepts None (store order), a member of ``sort_type``, or a member name in
    any case with ``-`` or ``_`` separators (``"name-asc"``, ``"NEXT_7"``).

    Raises:
        TypeError: ``value`` is a member of another entity's sort table
        ValueError: ``value`` names no member of ``sort_type``
    """
    if value is None:
        return None
    if isinstance(value, SortOption):
        if not isinstance(value, sort_type):
            raise TypeError(f"{value!r} is not a {sort_type.__name__} option")
        return value
    name = value.strip().upper().replace("-", "_")
    try:
        return sort_type[name]
    except KeyError:
        choices = ", ".join(m.name for m in sort_type)
        raise ValueError(f"Unknown {sort_type.__name__} option {value!r}; choose from {choices}") from None
