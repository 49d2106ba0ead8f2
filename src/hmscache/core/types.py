"""
Core entity types for hmscache.

Every record type is a frozen dataclass: a cached instance is an immutable
snapshot of one row, so handing the same object to several callers is safe.
Changes go through ``EntityCache.update`` with a new snapshot built via
``dataclasses.replace``.

Classes:
    Entity: Protocol satisfied by every record type (an integer ``id``)
    Patient, Doctor, Appointment, Prescription, MedicalInventory, PatientFeedback:
        Record types, ``id`` is None until the store assigns one
    VisitHistory: Read-only row of a patient's visit history
    EntityKind: Names of the cached record types
    OutputFormat: CLI output formats
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol


class Entity(Protocol):
    """Anything with an integer identity."""

    @property
    def id(self) -> int | None: ...


class EntityKind(str, Enum):
    """Cached record types, used by the CLI and the service bundle."""

    PATIENT = "patient"
    DOCTOR = "doctor"
    APPOINTMENT = "appointment"
    PRESCRIPTION = "prescription"
    INVENTORY = "inventory"
    FEEDBACK = "feedback"


class OutputFormat(str, Enum):
    """CLI output formats."""

    TEXT = "text"
    JSON = "json"
    TABLE = "table"


def _join_name(*parts: str | None) -> str:
    return " ".join(p for p in parts if p)


@dataclass(frozen=True, slots=True)
class Patient:
    first_name: str
    last_name: str
    id: int | None = None
    middle_name: str | None = None
    date_of_birth: date | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None

    @property
    def full_name(self) -> str:
        return _join_name(self.first_name, self.middle_name, self.last_name)


@dataclass(frozen=True, slots=True)
class Doctor:
    first_name: str
    last_name: str
    id: int | None = None
    middle_name: str | None = None
    phone: str | None = None
    email: str | None = None
    department_id: int | None = None

    @property
    def full_name(self) -> str:
        return _join_name(self.first_name, self.middle_name, self.last_name)


@dataclass(frozen=True, slots=True)
class Appointment:
    patient_id: int
    doctor_id: int
    appointment_date: datetime | None
    id: int | None = None
    reason: str | None = None
    # display-only, filled by joins in the store
    patient_name: str | None = None
    doctor_name: str | None = None


@dataclass(frozen=True, slots=True)
class Prescription:
    patient_id: int
    doctor_id: int
    prescription_date: date | None
    id: int | None = None
    notes: str | None = None
    patient_name: str | None = None
    doctor_name: str | None = None


@dataclass(frozen=True, slots=True)
class MedicalInventory:
    name: str
    id: int | None = None
    type: str | None = None
    quantity: int | None = None
    unit: str | None = None
    expiry_date: date | None = None
    cost: Decimal | None = None


@dataclass(frozen=True, slots=True)
class PatientFeedback:
    patient_id: int
    doctor_id: int
    id: int | None = None
    rating: int | None = None
    comments: str | None = None
    feedback_date: datetime | None = None
    patient_name: str | None = None
    doctor_name: str | None = None


@dataclass(frozen=True, slots=True)
class VisitHistory:
    """One appointment of a patient as shown in their history (not cached)."""

    doctor_name: str
    visit_date: date | None
    reason: str | None = None
    notes: str | None = None
