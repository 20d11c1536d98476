"""Reminder entities for the reminder engine."""

from reminder_engine.models.reminder import (
    CATEGORIES,
    Priority,
    RecurrenceRule,
    Reminder,
    ReminderCreate,
    ReminderRecord,
    ReminderState,
    ReminderUpdate,
)

__all__ = [
    "CATEGORIES",
    "Priority",
    "RecurrenceRule",
    "Reminder",
    "ReminderCreate",
    "ReminderRecord",
    "ReminderState",
    "ReminderUpdate",
]
