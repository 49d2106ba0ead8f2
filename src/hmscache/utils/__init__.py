"""
Utility modules.

This module contains the helpers shared across the package:
- Error taxonomy
- Logging configuration
- Output formatting
"""

from .error_handling import (
    CacheError,
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    StoreError,
    ValidationError,
)
from .formatter import format_result, render_stats_table, render_table, to_json_bytes
from .logging_config import configure_logging, get_logger

__all__ = [
    # Error handling
    "CacheError",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorSeverity",
    "StoreError",
    "ValidationError",
    # Formatting
    "format_result",
    "render_stats_table",
    "render_table",
    "to_json_bytes",
    # Logging
    "configure_logging",
    "get_logger",
]
