"""
Command-line interface implementation.

This module provides the ``hmscache`` command:
- Database initialization
- Cached search and lookup per record type
- Cache statistics output
"""

from .main import cli, main

__all__ = [
    "cli",
    "main",
]
