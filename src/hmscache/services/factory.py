"""
Explicit construction of the service bundle.

There are no module-level caches: every call to ``create_services`` builds a
fresh, independent cache per record type over the given database.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any

from ..cache.entity_cache import EntityCache
from ..core.config import CacheConfig
from ..core.sorting import SORT_TYPES
from ..core.types import (
    Appointment,
    Doctor,
    EntityKind,
    MedicalInventory,
    Patient,
    PatientFeedback,
    Prescription,
    VisitHistory,
)
from ..storage.database import HospitalDatabase
from ..storage.repositories import create_store, visit_history as read_visit_history
from .entity_service import EntityService
from .validation import (
    appointment_validator,
    validate_doctor,
    validate_feedback,
    validate_inventory,
    validate_patient,
    validate_prescription,
)

CACHE_NAMES: dict[EntityKind, str] = {
    EntityKind.PATIENT: "Patient",
    EntityKind.DOCTOR: "Doctor",
    EntityKind.APPOINTMENT: "Appointment",
    EntityKind.PRESCRIPTION: "Prescription",
    EntityKind.INVENTORY: "Inventory",
    EntityKind.FEEDBACK: "Feedback",
}


def _stamp_feedback_date(feedback: PatientFeedback) -> PatientFeedback:
    if feedback.feedback_date is not None:
        return feedback
    return replace(feedback, feedback_date=datetime.now().replace(microsecond=0))


@dataclass
class HospitalServices:
    """One service per record type, each with its own cache."""

    patients: EntityService[Patient]
    doctors: EntityService[Doctor]
    appointments: EntityService[Appointment]
    prescriptions: EntityService[Prescription]
    inventory: EntityService[MedicalInventory]
    feedback: EntityService[PatientFeedback]
    database: HospitalDatabase | None = None

    def by_kind(self, kind: EntityKind | str) -> EntityService[Any]:
        kind = EntityKind(kind)
        return {
            EntityKind.PATIENT: self.patients,
            EntityKind.DOCTOR: self.doctors,
            EntityKind.APPOINTMENT: self.appointments,
            EntityKind.PRESCRIPTION: self.prescriptions,
            EntityKind.INVENTORY: self.inventory,
            EntityKind.FEEDBACK: self.feedback,
        }[kind]

    def all(self) -> dict[EntityKind, EntityService[Any]]:
        return {kind: self.by_kind(kind) for kind in EntityKind}

    def visit_history(self, patient_id: int) -> list[VisitHistory]:
        """A patient's visits, newest first, read from the database on every call."""
        if self.database is None:
            raise RuntimeError("visit history needs the services to be built over a database")
        return read_visit_history(self.database, patient_id)

    def invalidate_all(self) -> None:
        """Drop every cached record and search page in every cache."""
        for service in self.all().values():
            service.cache.invalidate_all()


def create_services(
    database: HospitalDatabase,
    config: CacheConfig | None = None,
    clock: Callable[[], float] = time.monotonic,
    today: Callable[[], date] = date.today,
) -> HospitalServices:
    """
    Build the service bundle over ``database``.

    Args:
        database: Initialized hospital database
        config: Cache settings shared by every cache (defaults to CacheConfig())
        clock: Monotonic time source for search-entry age
        today: Date source for appointment windows and validation
    """
    config = config or CacheConfig()
    config.validate()

    def build(kind: EntityKind, validator: Callable[[Any], None], prepare=None) -> EntityService[Any]:
        cache: EntityCache[Any] = EntityCache(
            create_store(database, kind),
            sort_type=SORT_TYPES[kind],
            config=config,
            name=CACHE_NAMES[kind],
            clock=clock,
            today=today,
        )
        return EntityService(cache, validator, config=config, prepare=prepare)

    return HospitalServices(
        patients=build(EntityKind.PATIENT, validate_patient),
        doctors=build(EntityKind.DOCTOR, validate_doctor),
        appointments=build(EntityKind.APPOINTMENT, appointment_validator(today)),
        prescriptions=build(EntityKind.PRESCRIPTION, validate_prescription),
        inventory=build(EntityKind.INVENTORY, validate_inventory),
        feedback=build(EntityKind.FEEDBACK, validate_feedback, prepare=_stamp_feedback_date),
        database=database,
    )
