"""
Structured event sinks.

Every component takes a sink and reports what it is doing through it, so
tracing is wired by whoever builds the agent instead of living in globals.
"""

import logging
from typing import Any, Protocol

from .logger import LOGGER_NAME


class EventSink(Protocol):
    def emit(self, name: str, **fields: Any) -> None: ...


class NullEventSink:
    """Discards everything."""

    def emit(self, name: str, **fields: Any) -> None:
        return None


class LoggingEventSink:
    """Writes one log line per event to a standard logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.level = level

    def emit(self, name: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        details = " ".join(f"{key}={_preview(value)}" for key, value in fields.items())
        self.logger.log(self.level, f"{name} {details}".rstrip())


class RecordingEventSink:
    """Keeps events in memory, in emission order."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, name: str, **fields: Any) -> None:
        self.events.append((name, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


def _preview(value: Any, limit: int = 200) -> str:
    text = repr(value)
    if len(text) > limit:
        return text[:limit] + "..."
    return text
