# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Structured loggers carrying the project/environment binding.

Every record is a message plus keyword fields. A logger can be bound to
fields once (``logger.bind(project_name="demo", env_name="prod")``) and the
bound copy adds them to each record it emits.
"""

import json
import logging
import os
import sys
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class Logger(ABC):
    """Base logger: level helpers and field binding over a single emit()."""

    def __init__(self, name: str = "rcc_client", context: dict[str, Any] | None = None):
        self.name = name
        self.context: dict[str, Any] = dict(context or {})

    def bind(self, **fields: Any) -> "Logger":
        """Return a copy of this logger that adds fields to every record."""
        bound = self._copy()
        bound.context = {**self.context, **fields}
        return bound

    @abstractmethod
    def _copy(self) -> "Logger":
        raise NotImplementedError

    @abstractmethod
    def emit(self, level: str, message: str, fields: dict[str, Any], exc_info: bool = False) -> None:
        """Write one record; fields already include the bound context."""
        raise NotImplementedError

    def _log(self, level: str, message: str, fields: dict[str, Any]) -> None:
        exc_info = bool(fields.pop("exc_info", False))
        self.emit(level, message, {**self.context, **fields}, exc_info=exc_info)

    def debug(self, message: str, **fields: Any) -> None:
        self._log("DEBUG", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log("INFO", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log("WARNING", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log("ERROR", message, fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR with the active exception attached."""
        fields.setdefault("exc_info", True)
        self._log("ERROR", message, fields)


class StdoutLogger(Logger):
    """Prints one JSON object per record to stdout.

    Records are also passed to the stdlib logger of the same name so host
    applications and caplog can route them.
    """

    def __init__(self, level: str = "INFO", name: str = "rcc_client", context: dict[str, Any] | None = None):
        super().__init__(name=name, context=context)
        self.level = level.upper()
        if self.level not in LEVELS:
            raise ValueError(f"Invalid log level: {level}. Must be one of {list(LEVELS)}")
        self._stdlib_logger = logging.getLogger(name)

    def _copy(self) -> "StdoutLogger":
        return StdoutLogger(level=self.level, name=self.name, context=self.context)

    def emit(self, level: str, message: str, fields: dict[str, Any], exc_info: bool = False) -> None:
        if LEVELS[level] < LEVELS[self.level]:
            return

        record = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
            **({"fields": fields} if fields else {}),
        }
        print(json.dumps(record, default=str), file=sys.stdout, flush=True)
        self._stdlib_logger.log(LEVELS[level], message, exc_info=exc_info, extra={"fields": fields})


class SilentLogger(Logger):
    """Keeps records in memory; used by tests to assert on logging."""

    def __init__(self, name: str = "rcc_client", context: dict[str, Any] | None = None):
        super().__init__(name=name, context=context)
        self.logs: list[dict[str, Any]] = []

    def _copy(self) -> "SilentLogger":
        bound = SilentLogger(name=self.name, context=self.context)
        # Bound copies share one record list with their parent
        bound.logs = self.logs
        return bound

    def emit(self, level: str, message: str, fields: dict[str, Any], exc_info: bool = False) -> None:
        self.logs.append({"level": level, "message": message, "fields": fields})

    def has_log(self, message: str, level: str | None = None) -> bool:
        """True if a record at level (any level when None) contains message."""
        return any(
            message in log["message"] and (level is None or log["level"] == level)
            for log in self.logs
        )


def create_logger(level: str | None = None, silent: bool | None = None, name: str = "rcc_client") -> Logger:
    """Build the default logger.

    Args:
        level: Minimum level; defaults to RCC_LOG_LEVEL or INFO
        silent: Use the in-memory logger; defaults to RCC_LOG_SILENT
        name: Logger name

    Raises:
        ValueError: If level is not recognized
    """
    if silent is None:
        silent = os.getenv("RCC_LOG_SILENT", "").lower() in ("true", "1", "yes", "on")
    if silent:
        return SilentLogger(name=name)
    return StdoutLogger(level=level or os.getenv("RCC_LOG_LEVEL") or "INFO", name=name)
