"""Event type definitions for reminder lifecycle events."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Versioned event types for the reminder lifecycle."""

    REMINDER_CREATED = "reminder.created.v1"
    REMINDER_UPDATED = "reminder.updated.v1"
    REMINDER_DELETED = "reminder.deleted.v1"
    REMINDERS_CLEARED = "reminders.cleared.v1"
    REMINDER_NOTIFIED = "reminder.notified.v1"
    REMINDER_SNOOZED = "reminder.snoozed.v1"
    REMINDER_COMPLETED = "reminder.completed.v1"
    REMINDER_REOPENED = "reminder.reopened.v1"
    REMINDER_RECURRED = "reminder.recurred.v1"


class ReminderEventData(BaseModel):
    """Payload for a reminder lifecycle event.

    Events are emitted after the collection write that caused them has
    completed, so consumers always observe persisted state.
    """

    event_id: UUID = Field(default_factory=uuid4, description="Unique event identifier")
    event_type: EventType = Field(description="Event type (versioned)")
    reminder_id: str | None = Field(
        default=None,
        description="Reminder the event is about (None for bulk events)",
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="Event timestamp (local wall-clock)",
    )
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific payload data",
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type.value,
            "reminder_id": self.reminder_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }


def create_event(
    event_type: EventType,
    reminder_id: str | None = None,
    timestamp: datetime | None = None,
    data: dict[str, Any] | None = None,
) -> ReminderEventData:
    """Create a new reminder event.

    Args:
        event_type: Type of event
        reminder_id: ID of the reminder concerned
        timestamp: When it happened (default: now)
        data: Event-specific payload data

    Returns:
        ReminderEventData: The created event
    """
    return ReminderEventData(
        event_type=event_type,
        reminder_id=reminder_id,
        timestamp=timestamp or datetime.now(),
        data=data or {},
    )
