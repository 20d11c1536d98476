"""Exceptions raised by the reminder engine."""


class ReminderEngineError(Exception):
    """Base exception for reminder engine errors."""


class ReminderValidationError(ReminderEngineError, ValueError):
    """Raised when user input for a reminder action is invalid."""


class ReminderNotFoundError(ReminderEngineError, LookupError):
    """Raised when a reminder id is not present in the collection."""

    def __init__(self, reminder_id: str) -> None:
        super().__init__(f"Reminder {reminder_id} not found")
        self.reminder_id = reminder_id


class ReminderStoreError(ReminderEngineError):
    """Raised when the reminder collection cannot be persisted."""
