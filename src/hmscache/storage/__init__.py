"""
Storage layer: the ``Store`` contract and its SQLite implementation.
"""

from .database import HospitalDatabase
from .protocol import ReferenceStore, Store
from .repositories import MAPPINGS, SqliteStore, TableMapping, create_store, visit_history

__all__ = [
    "HospitalDatabase",
    "Store",
    "ReferenceStore",
    "SqliteStore",
    "TableMapping",
    "MAPPINGS",
    "create_store",
    "visit_history",
]
