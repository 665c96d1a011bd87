"""Structured event sinks for race diagnostics."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
import logging
from pathlib import Path
import sys
from threading import Lock
from typing import Any, Protocol, TextIO

PathLike = str | Path

DEFAULT_LOGGER_NAME = "provider_race"

# events logged at WARNING by LoggingEventLogger
WARNING_EVENTS = frozenset({"provider_failed", "race_exhausted"})


class EventLogger(Protocol):
    """Protocol for structured event loggers."""

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        """Persist ``record`` for ``event_type``."""


class JsonlLogger:
    """Append structured events to a JSONL file with basic locking."""

    def __init__(self, path: PathLike) -> None:
        self._path = Path(path)
        self._lock = Lock()

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        payload = dict(record)
        payload.setdefault("event", event_type)

        parent = self._path.parent
        if parent != Path(""):
            parent.mkdir(parents=True, exist_ok=True)

        with self._lock:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")


class StdLogger:
    """Emit structured events to a text stream as JSON."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._lock = Lock()

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        payload = dict(record)
        payload.setdefault("event", event_type)

        with self._lock:
            self._stream.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
            self._stream.flush()


class LoggingEventLogger:
    """Forward events to a :mod:`logging` logger.

    Failure events go out at ``WARNING``; everything else at ``DEBUG``.
    The record is attached as ``extra={"event": ..., "record": ...}``.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        level = logging.WARNING if event_type in WARNING_EVENTS else logging.DEBUG
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level,
            "%s %s",
            event_type,
            _format_record(record),
            extra={"event": event_type, "record": dict(record)},
        )


class CompositeLogger:
    """Fan out events to multiple loggers while isolating failures."""

    def __init__(self, loggers: Iterable[EventLogger] | None = None) -> None:
        self._loggers: list[EventLogger] = list(loggers or ())
        self._lock = Lock()

    def add(self, logger: EventLogger) -> None:
        with self._lock:
            self._loggers.append(logger)

    def clear(self) -> None:
        with self._lock:
            self._loggers.clear()

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        with self._lock:
            loggers = tuple(self._loggers)

        for logger in loggers:
            try:
                logger.emit(event_type, record)
            except Exception:  # pragma: no cover - logger isolation
                logging.getLogger(DEFAULT_LOGGER_NAME).exception(
                    "event sink %r failed for %s", logger, event_type
                )


def _format_record(record: Mapping[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in record.items())


def resolve_event_logger(logger: EventLogger | None) -> EventLogger:
    if logger is not None:
        return logger
    return LoggingEventLogger()


__all__ = [
    "CompositeLogger",
    "EventLogger",
    "JsonlLogger",
    "LoggingEventLogger",
    "StdLogger",
    "resolve_event_logger",
]
