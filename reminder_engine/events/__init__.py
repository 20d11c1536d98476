"""Reminder lifecycle events.

Components:
- types.py: Event type definitions and payload schema
- consumers.py: In-process event handlers
"""

from reminder_engine.events.types import EventType, ReminderEventData, create_event
from reminder_engine.events.consumers import (
    EventConsumer,
    EventDispatcher,
    AuditConsumer,
    RecurrenceConsumer,
    get_event_dispatcher,
)

__all__ = [
    # Types
    "EventType",
    "ReminderEventData",
    "create_event",
    # Consumers
    "EventConsumer",
    "EventDispatcher",
    "AuditConsumer",
    "RecurrenceConsumer",
    "get_event_dispatcher",
]
