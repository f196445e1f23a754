from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger("termslens.events")


class EventSink(Protocol):
    """Receives named diagnostic events with structured fields."""

    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None: ...


class LoggingEventSink:
    """Forward events to stdlib logging, fields attached as ``extra``."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None:
        rendered = " ".join(f"{k}={v!r}" for k, v in fields.items())
        self._log.log(
            level,
            "%s %s",
            event,
            rendered,
            extra={"event": event, "fields": fields},
        )


@dataclass
class RecordedEvent:
    event: str
    level: int
    fields: dict[str, Any] = field(default_factory=dict)


class RecordingEventSink:
    """Keep events in memory so callers can assert on them."""

    def __init__(self) -> None:
        self.events: list[RecordedEvent] = []

    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None:
        self.events.append(RecordedEvent(event=event, level=level, fields=dict(fields)))

    def names(self) -> list[str]:
        return [e.event for e in self.events]

    def of(self, event: str) -> list[RecordedEvent]:
        return [e for e in self.events if e.event == event]
