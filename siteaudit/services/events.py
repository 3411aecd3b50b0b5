"""Audit event recording through an explicit, injectable sink."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Anything that can record a named event with properties."""

    def record(self, event: str, properties: dict[str, Any]) -> None: ...


class LoggingEventSink:
    """Default sink that writes events to the application log."""

    def record(self, event: str, properties: dict[str, Any]) -> None:
        logger.info(f"[event] {event} {properties}")


@dataclass
class RecordingEventSink:
    """In-memory sink, keeps events in the order they were recorded."""

    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def record(self, event: str, properties: dict[str, Any]) -> None:
        self.events.append((event, dict(properties)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@dataclass(frozen=True)
class AuditContext:
    """
    Per-run context handed to the components that record events.

    Replaces a process-wide analytics tracker: callers decide where events
    go, and nothing is shared between runs unless the caller shares the sink.
    """

    sink: EventSink = field(default_factory=LoggingEventSink)

    def record(self, event: str, **properties: Any) -> None:
        try:
            self.sink.record(event, properties)
        except Exception as e:
            # A broken sink must not fail the audit
            logger.warning(f"Event sink failed to record {event}: {e}")
