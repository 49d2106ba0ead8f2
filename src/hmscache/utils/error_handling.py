"""
Error taxonomy for hmscache.

The cache itself never recovers from errors: anything the backing store raises
reaches the caller unchanged. This module defines the exception types the rest
of the package raises so callers can tell a persistence failure apart from a
rejected record or a bad configuration.

Error Categories:
    - STORE: Failures surfaced by the backing persistence layer
    - VALIDATION: Records rejected before they reach the cache
    - CONFIGURATION: Invalid cache settings

Classes:
    ErrorSeverity: Error severity levels (LOW, MEDIUM, HIGH, CRITICAL)
    ErrorCategory: Error classification categories
    CacheError: Base exception class for hmscache errors
    StoreError: Backing store failure
    ValidationError: Entity failed validation
    ConfigurationError: Invalid configuration value

Example:
    >>> from hmscache.utils.error_handling import StoreError
    >>> try:
    ...     services.patients.get(42)
    ... except StoreError as e:
    ...     print(f"{e.operation} failed: {e.message}")
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification."""

    STORE = "store"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class CacheError(Exception):
    """Base exception for hmscache errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        suggestions: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.suggestions: list[str] = suggestions or []
        self.context: dict[str, Any] = context or {}
        self.timestamp: float = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary used by the CLI error output."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "suggestions": list(self.suggestions),
            "context": dict(self.context),
        }


CONNECTION_SUGGESTIONS = [
    "Check that the database file exists and is writable",
    "Run 'hmscache init-db' to create the schema",
]

CONSTRAINT_SUGGESTIONS = [
    "Check that no other record already uses the same unique values",
    "Check that referenced patients and doctors exist",
]


class StoreError(CacheError):
    """Failure surfaced by the backing store (connectivity, constraint, timeout)."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        entity: str | None = None,
        context: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        merged_context: dict[str, Any] = {}
        if context:
            merged_context.update(context)
        merged_context["operation"] = operation
        if entity is not None:
            merged_context["entity"] = entity

        super().__init__(
            message,
            category=ErrorCategory.STORE,
            severity=ErrorSeverity.HIGH,
            suggestions=list(CONNECTION_SUGGESTIONS) if suggestions is None else suggestions,
            context=merged_context,
        )
        self.operation = operation
        self.entity = entity


class ValidationError(CacheError):
    """Entity rejected before it reached the cache."""

    def __init__(
        self, message: str, field: str | None = None, context: dict[str, Any] | None = None
    ) -> None:
        merged_context: dict[str, Any] = {}
        if context:
            merged_context.update(context)
        if field is not None:
            merged_context["field"] = field

        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            context=merged_context,
        )
        self.field = field


class ConfigurationError(CacheError):
    """Invalid cache configuration."""

    def __init__(
        self, message: str, setting: str | None = None, context: dict[str, Any] | None = None
    ) -> None:
        merged_context: dict[str, Any] = {}
        if context:
            merged_context.update(context)
        if setting is not None:
            merged_context["setting"] = setting

        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            suggestions=["Capacities, TTL and filter window must be positive"],
            context=merged_context,
        )
        self.setting = setting
