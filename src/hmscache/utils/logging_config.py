"""
Logging for hmscache.

All package code logs through one shared ``CacheLogger`` wrapping the stdlib
``hmscache`` logger. Keyword arguments passed to the log methods travel as
``extra`` fields; the JSON format writes them out as top-level keys.

Cache traffic (hits, misses, evictions, invalidations) is logged at DEBUG, so
it only shows with ``--debug`` or ``--log-level DEBUG``.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from enum import Enum
from pathlib import Path
from typing import Any

import orjson


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


_PATTERNS = {
    LogFormat.SIMPLE: "%(levelname)s: %(message)s",
    LogFormat.DETAILED: "%(asctime)s %(name)s %(levelname)s [%(filename)s:%(lineno)d] %(message)s",
}

# attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached to ``record`` via ``extra``."""
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, logger, message, location and extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        entry.update(record_extras(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str).decode("utf-8")


def build_formatter(format_type: LogFormat) -> logging.Formatter:
    if format_type == LogFormat.JSON:
        return JsonFormatter()
    return logging.Formatter(_PATTERNS[format_type])


class CacheLogger:
    """
    Thin wrapper over ``logging.getLogger(name)``.

    Building a CacheLogger replaces the handlers of the underlying logger, so
    reconfiguring never duplicates output.
    """

    def __init__(
        self,
        name: str = "hmscache",
        level: LogLevel = LogLevel.INFO,
        format_type: LogFormat = LogFormat.SIMPLE,
        log_file: Path | None = None,
        enable_console: bool = True,
        enable_file: bool = False,
        max_file_size: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ):
        self.name = name
        self.level = level
        self.format_type = format_type
        self.log_file = log_file

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level.value)
        self.logger.handlers.clear()

        if enable_console:
            self._attach(logging.StreamHandler(sys.stderr))
        if enable_file and log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._attach(
                logging.handlers.RotatingFileHandler(
                    log_file, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
                )
            )

    def _attach(self, handler: logging.Handler) -> None:
        handler.setLevel(self.level.value)
        handler.setFormatter(build_formatter(self.format_type))
        self.logger.addHandler(handler)

    def debug(self, message: str, **fields: Any) -> None:
        self.logger.debug(message, extra=fields)

    def info(self, message: str, **fields: Any) -> None:
        self.logger.info(message, extra=fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.logger.warning(message, extra=fields)

    def error(self, message: str, **fields: Any) -> None:
        self.logger.error(message, extra=fields)

    # cache traffic

    def log_cache_hit(self, cache: str, kind: str, key: Any) -> None:
        self.debug(
            f"{cache} {kind} cache hit: {key}", operation="cache_hit", cache=cache, kind=kind
        )

    def log_cache_miss(self, cache: str, kind: str, key: Any, expired: bool = False) -> None:
        """Log a cache miss; TTL expiry is reported as ``expired`` rather than ``miss``."""
        reason = "expired" if expired else "miss"
        self.debug(
            f"{cache} {kind} cache {reason}: {key}",
            operation="cache_miss",
            cache=cache,
            kind=kind,
            expired=expired,
        )

    def log_eviction(self, cache: str, kind: str, count: int) -> None:
        self.debug(
            f"{cache} {kind} cache evicted {count} entries",
            operation="eviction",
            cache=cache,
            kind=kind,
            count=count,
        )

    def log_invalidation(self, cache: str, reason: str, search_entries: int) -> None:
        self.debug(
            f"{cache} invalidated after {reason}: dropped {search_entries} search entries",
            operation="invalidation",
            cache=cache,
            reason=reason,
            search_entries=search_entries,
        )


_global_logger: CacheLogger | None = None


def get_logger() -> CacheLogger:
    """Shared logger; WARNING to stderr until ``configure_logging`` is called."""
    global _global_logger
    if _global_logger is None:
        _global_logger = CacheLogger(level=LogLevel.WARNING)
    return _global_logger


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format_type: LogFormat = LogFormat.SIMPLE,
    log_file: Path | None = None,
    enable_console: bool = True,
    enable_file: bool = False,
    **kwargs: Any,
) -> CacheLogger:
    """Replace the shared logger."""
    global _global_logger
    _global_logger = CacheLogger(
        level=level,
        format_type=format_type,
        log_file=log_file,
        enable_console=enable_console,
        enable_file=enable_file,
        **kwargs,
    )
    return _global_logger
