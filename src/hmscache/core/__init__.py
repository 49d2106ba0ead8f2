"""
Core functionality for the hmscache package.

This module contains the building blocks every other layer depends on:
- Cache configuration
- Record types
- Per-entity sort tables
"""

from .config import CacheConfig
from .sorting import (
    SORT_TYPES,
    AppointmentSort,
    DoctorSort,
    FeedbackSort,
    InventorySort,
    PatientSort,
    PrescriptionSort,
    SortOption,
    SortSpec,
    parse_sort,
)
from .types import (
    Appointment,
    Doctor,
    Entity,
    EntityKind,
    MedicalInventory,
    OutputFormat,
    Patient,
    PatientFeedback,
    Prescription,
    VisitHistory,
)

__all__ = [
    # Configuration
    "CacheConfig",
    # Record types
    "Entity",
    "EntityKind",
    "OutputFormat",
    "Patient",
    "Doctor",
    "Appointment",
    "Prescription",
    "VisitHistory",
    "MedicalInventory",
    "PatientFeedback",
    # Sorting
    "SortOption",
    "SortSpec",
    "SORT_TYPES",
    "parse_sort",
    "PatientSort",
    "DoctorSort",
    "AppointmentSort",
    "PrescriptionSort",
    "InventorySort",
    "FeedbackSort",
]
