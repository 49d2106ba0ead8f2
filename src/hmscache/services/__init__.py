"""
Service layer: validated, cached access to every record type.
"""

from .entity_service import EntityService
from .factory import HospitalServices, create_services

__all__ = ["EntityService", "HospitalServices", "create_services"]
