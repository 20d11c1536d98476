"""Reminder entity model and the derived reminder state machine.

All timestamps are naive datetimes in local wall-clock time. Timezone-aware
values coming from storage are converted to local time and made naive at the
validation boundary so comparisons never mix the two.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import field_validator
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class RecurrenceRule(str, Enum):
    """How a reminder repeats after it is completed."""

    NONE = "none"
    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Priority(str, Enum):
    """Reminder priority. Display-only, never affects scheduling."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class ReminderState(str, Enum):
    """Derived reminder status. Never stored."""

    PENDING = "pending"
    NOTIFIED = "notified"
    SNOOZED = "snoozed"
    COMPLETED = "completed"


DEFAULT_CATEGORY = "general"

CATEGORIES: tuple[str, ...] = (
    "general",
    "work",
    "personal",
    "health",
    "learning",
    "meeting",
    "bill",
    "birthday",
)

DEFAULT_SNOOZE_MINUTES = 5

# Persisted record key -> model attribute
RECORD_FIELDS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "dueAt": "due_at",
    "category": "category",
    "recurrenceRule": "recurrence_rule",
    "priority": "priority",
    "completed": "completed",
    "notified": "notified",
    "snoozeUntil": "snooze_until",
    "snoozeMinutes": "snooze_minutes",
    "createdAt": "created_at",
}


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def new_reminder_id() -> str:
    """Generate a fresh opaque reminder identifier."""
    return uuid4().hex


class Reminder(SQLModel):
    """A single reminder row in the collection.

    Reducers treat instances as immutable values and derive changed copies
    with ``model_copy(update=...)``.
    """

    id: str = Field(default_factory=new_reminder_id, min_length=1)
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    due_at: datetime
    category: str = Field(default=DEFAULT_CATEGORY, max_length=50)
    recurrence_rule: RecurrenceRule = RecurrenceRule.NONE
    priority: Priority = Priority.NORMAL
    completed: bool = False
    notified: bool = False
    snooze_until: datetime | None = None
    snooze_minutes: int = Field(default=DEFAULT_SNOOZE_MINUTES, gt=0)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title cannot be blank")
        return value

    @field_validator("due_at", "snooze_until", "created_at")
    @classmethod
    def _localize(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return to_local_naive(value)

    @property
    def effective_due_at(self) -> datetime:
        """The instant the reminder actually fires: snooze target, else due time."""
        return self.snooze_until if self.snooze_until is not None else self.due_at

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_rule != RecurrenceRule.NONE

    def is_due(self, now: datetime) -> bool:
        """Check whether the due detector should fire for this reminder.

        Level-triggered: any incomplete, unnotified reminder whose effective
        due time has been reached is due, however it got there.

        Args:
            now: Current local time

        Returns:
            True if a notification should be dispatched
        """
        if self.completed or self.notified:
            return False
        return self.effective_due_at <= now

    def state_at(self, now: datetime) -> ReminderState:
        """Derive the single state that describes this reminder at ``now``."""
        if self.completed:
            return ReminderState.COMPLETED
        if self.snooze_until is not None and self.snooze_until > now:
            return ReminderState.SNOOZED
        if self.notified:
            return ReminderState.NOTIFIED
        return ReminderState.PENDING

    def to_record(self) -> dict[str, Any]:
        """Convert to the camelCase JSON record used by persistence."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueAt": self.due_at.isoformat(),
            "category": self.category,
            "recurrenceRule": self.recurrence_rule.value,
            "priority": self.priority.value,
            "completed": self.completed,
            "notified": self.notified,
            "snoozeUntil": self.snooze_until.isoformat() if self.snooze_until else None,
            "snoozeMinutes": self.snooze_minutes,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Reminder":
        """Build a reminder from a persisted record.

        Raises:
            ValueError: If the record is not a mapping
            pydantic.ValidationError: If a field is missing or malformed
        """
        if not isinstance(record, dict):
            raise ValueError(f"record must be an object, got {type(record).__name__}")
        data = {
            attr: record[key]
            for key, attr in RECORD_FIELDS.items()
            if key in record and record[key] is not None
        }
        return cls.model_validate(data)


class ReminderCreate(SQLModel):
    """Schema for reminder creation."""

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    due_at: datetime
    category: str = Field(default=DEFAULT_CATEGORY, max_length=50)
    recurrence_rule: RecurrenceRule = RecurrenceRule.NONE
    priority: Priority = Priority.NORMAL
    snooze_minutes: int | None = Field(default=None, gt=0)


class ReminderUpdate(SQLModel):
    """Schema for reminder edits. Unset fields keep their current value."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    due_at: datetime | None = None
    category: str | None = Field(default=None, max_length=50)
    recurrence_rule: RecurrenceRule | None = None
    priority: Priority | None = None
    snooze_minutes: int | None = Field(default=None, gt=0)


class ReminderRecord(SQLModel, table=True):
    """Reminder database row for the SQL store.

    Enum-valued columns are plain strings so one bad row can be skipped on
    load instead of failing the whole query.
    Timestamp columns are declared naive since every stored time is local
    wall-clock time.
    """

    __tablename__ = "reminders"

    position: int | None = Field(default=None, primary_key=True)
    id: str = Field(index=True, unique=True, max_length=64)
    title: str = Field(max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    due_at: datetime = Field(sa_type=DateTime(timezone=False))
    category: str = Field(default=DEFAULT_CATEGORY, max_length=50)
    recurrence_rule: str = Field(default=RecurrenceRule.NONE.value, max_length=20)
    priority: str = Field(default=Priority.NORMAL.value, max_length=20)
    completed: bool = Field(default=False)
    notified: bool = Field(default=False)
    snooze_until: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
    snooze_minutes: int = Field(default=DEFAULT_SNOOZE_MINUTES)
    created_at: datetime = Field(sa_type=DateTime(timezone=False))

    @classmethod
    def from_reminder(cls, reminder: Reminder) -> "ReminderRecord":
        data = reminder.model_dump()
        data["recurrence_rule"] = reminder.recurrence_rule.value
        data["priority"] = reminder.priority.value
        return cls(**data)

    def to_reminder(self) -> Reminder:
        """Validate this row into a Reminder.

        Raises:
            pydantic.ValidationError: If the row holds malformed values
        """
        return Reminder.model_validate(self.model_dump(exclude={"position"}))
