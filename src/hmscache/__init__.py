"""
hmscache: read-through caching for hospital management records.

Each record type (patients, doctors, appointments, prescriptions, medical
inventory, patient feedback) gets its own cache in front of a paginated,
searchable record store. The cache keeps recently used records by id and
memoizes search pages for a short time; every write goes straight to the
store and invalidates what it could have made stale.

Main Classes:
    EntityCache: Generic read-through cache over one ``Store``
    CacheConfig: Capacities, TTL and filter window
    HospitalDatabase: SQLite database holding the records
    HospitalServices: One validated, cached service per record type

Example Usage:
    >>> from hmscache import CacheConfig, HospitalDatabase, create_services
    >>> db = HospitalDatabase("hospital.db")
    >>> db.initialize()
    >>> services = create_services(db, CacheConfig())
    >>> page = services.patients.search("smith", limit=10, sort_by="name_asc")
    >>> services.patients.cache_stats()
    'Patient cache: 10/100, Search cache: 1/20'

    CLI usage:
        $ hmscache init-db hospital.db
        $ hmscache --db hospital.db search patient --term smith --format table
"""

from .cache import EntityCache, LRUCache, SearchKey
from .core import (
    Appointment,
    AppointmentSort,
    CacheConfig,
    Doctor,
    DoctorSort,
    EntityKind,
    FeedbackSort,
    InventorySort,
    MedicalInventory,
    Patient,
    PatientFeedback,
    PatientSort,
    Prescription,
    PrescriptionSort,
)
from .services import EntityService, HospitalServices, create_services
from .storage import HospitalDatabase, SqliteStore, Store
from .utils.error_handling import CacheError, ConfigurationError, StoreError, ValidationError
from .utils.logging_config import configure_logging, get_logger

# Package metadata
__version__ = "0.1.0"
__license__ = "MIT"
__description__ = "Read-through caching for hospital management records"

# Public API
__all__ = [
    # Cache
    "EntityCache",
    "LRUCache",
    "SearchKey",
    "CacheConfig",
    # Storage and services
    "Store",
    "SqliteStore",
    "HospitalDatabase",
    "EntityService",
    "HospitalServices",
    "create_services",
    # Record types
    "EntityKind",
    "Patient",
    "Doctor",
    "Appointment",
    "Prescription",
    "MedicalInventory",
    "PatientFeedback",
    # Sort tables
    "PatientSort",
    "DoctorSort",
    "AppointmentSort",
    "PrescriptionSort",
    "InventorySort",
    "FeedbackSort",
    # Errors
    "CacheError",
    "StoreError",
    "ValidationError",
    "ConfigurationError",
    # Logging
    "configure_logging",
    "get_logger",
]
