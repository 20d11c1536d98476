"""In-process consumers for reminder lifecycle events.

Event Flow:
    ReminderService / DueDetector → EventDispatcher → Consumers
                                          ↓
                               [AuditConsumer, RecurrenceConsumer]
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any

from reminder_engine.events.types import EventType, ReminderEventData

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Consumer contract
# -----------------------------------------------------------------------------


class EventConsumer(ABC):
    """Side-effect handler for reminder events.

    Consumers log or record; they never write to the reminder collection.
    """

    @abstractmethod
    def handles(self, event_type: EventType) -> bool:
        """Return True for the event types this consumer wants."""

    @abstractmethod
    def process(self, event: ReminderEventData) -> None:
        """Handle one event. Exceptions are contained by the dispatcher."""


# -----------------------------------------------------------------------------
# Audit Consumer - Records every lifecycle event
# -----------------------------------------------------------------------------


class AuditConsumer(EventConsumer):
    """Consumer that keeps a bounded audit trail of reminder events."""

    def __init__(self, max_entries: int = 500) -> None:
        self.entries: deque[dict[str, Any]] = deque(maxlen=max_entries)

    def handles(self, event_type: EventType) -> bool:
        """Handle all reminder events."""
        return True

    def process(self, event: ReminderEventData) -> None:
        entry = event.to_dict()
        self.entries.append(entry)

        logger.info(
            "Reminder event audited",
            extra={
                "event_id": entry["event_id"],
                "event_type": entry["event_type"],
                "reminder_id": entry["reminder_id"],
            },
        )


# -----------------------------------------------------------------------------
# Recurrence Consumer - Tracks spawned instances
# -----------------------------------------------------------------------------


class RecurrenceConsumer(EventConsumer):
    """Consumer that logs recurrence chain linkage.

    Spawned instances carry no reference to their predecessor, so the
    title and category are logged alongside both ids to keep the chain
    reconstructable from logs.
    """

    def handles(self, event_type: EventType) -> bool:
        """Handle only recurrence events."""
        return event_type == EventType.REMINDER_RECURRED

    def process(self, event: ReminderEventData) -> None:
        logger.info(
            "Recurring reminder spawned",
            extra={
                "event_id": str(event.event_id),
                "completed_id": event.reminder_id,
                "spawned_id": event.data.get("spawned_id"),
                "title": event.data.get("title"),
                "category": event.data.get("category"),
                "recurrence_rule": event.data.get("recurrence_rule"),
                "next_due_at": event.data.get("next_due_at"),
            },
        )


# -----------------------------------------------------------------------------
# Dispatcher
# -----------------------------------------------------------------------------


class EventDispatcher:
    """Fans reminder events out to the consumers that handle them.

    A consumer that raises is logged and skipped; the rest still run.
    """

    def __init__(self, register_defaults: bool = True) -> None:
        """Create a dispatcher, optionally with the audit and recurrence consumers."""
        self._consumers: list[EventConsumer] = (
            [AuditConsumer(), RecurrenceConsumer()] if register_defaults else []
        )

    @property
    def consumers(self) -> list[EventConsumer]:
        return list(self._consumers)

    def register(self, consumer: EventConsumer) -> None:
        self._consumers.append(consumer)

    def dispatch(self, event: ReminderEventData) -> None:
        """Deliver ``event`` to every interested consumer. Never raises."""
        interested = [c for c in self._consumers if c.handles(event.event_type)]

        for consumer in interested:
            try:
                consumer.process(event)
            except Exception as e:
                logger.error(
                    f"{consumer.__class__.__name__} failed on {event.event_type.value}",
                    extra={
                        "reminder_id": event.reminder_id,
                        "event_id": str(event.event_id),
                        "error": str(e)[:500],
                    },
                    exc_info=True,
                )


# -----------------------------------------------------------------------------
# Process-wide dispatcher
# -----------------------------------------------------------------------------

_shared_dispatcher: EventDispatcher | None = None


def get_event_dispatcher() -> EventDispatcher:
    """Return the process-wide dispatcher, creating it on first use."""
    global _shared_dispatcher
    if _shared_dispatcher is None:
        _shared_dispatcher = EventDispatcher()
    return _shared_dispatcher
