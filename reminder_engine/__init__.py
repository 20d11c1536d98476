"""Recurring reminder and notification engine.

Detects due reminders on a polling cadence, notifies once per due instant,
supports snoozing and spawns the next instance of recurring reminders.
"""

from reminder_engine.exceptions import (
    ReminderEngineError,
    ReminderNotFoundError,
    ReminderStoreError,
    ReminderValidationError,
)
from reminder_engine.models import (
    Priority,
    RecurrenceRule,
    Reminder,
    ReminderCreate,
    ReminderState,
    ReminderUpdate,
)
from reminder_engine.runtime import EngineRuntime, build_runtime

__version__ = "1.0.0"

__all__ = [
    "EngineRuntime",
    "build_runtime",
    "Priority",
    "RecurrenceRule",
    "Reminder",
    "ReminderCreate",
    "ReminderState",
    "ReminderUpdate",
    "ReminderEngineError",
    "ReminderNotFoundError",
    "ReminderStoreError",
    "ReminderValidationError",
]
