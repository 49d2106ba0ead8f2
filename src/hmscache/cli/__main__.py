"""
CLI entry point for hmscache.

This module serves as the entry point when hmscache.cli is executed as a module
with `python -m hmscache.cli`.
"""

from .main import cli

if __name__ == "__main__":
    cli()
