from __future__ import annotations

import logging
import threading
from typing import Protocol, TypeVar

from .model import DomainEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=DomainEvent)


class NotificationSink(Protocol):
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError


class LoggingSink(NotificationSink):
    """Default sink: delivery is handled outside the core, so just log."""

    def publish(self, event: DomainEvent) -> None:
        logger.info("domain event %s: %s", event.name, event)


class CollectingSink(NotificationSink):
    """Keeps published events in memory (tests, demos, batch forwarding)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: list[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[DomainEvent]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_type: type[E]) -> list[E]:
        return [e for e in self.events if isinstance(e, event_type)]
