"""Services module for the reminder engine.

Services:
- recurrence.py: Next-occurrence calendar arithmetic
- reminders.py: Pure collection reducers and the ReminderService
"""

from reminder_engine.services.recurrence import add_months, next_occurrence
from reminder_engine.services.reminders import (
    CompletionOutcome,
    ReminderService,
    ReminderStats,
    apply_add,
    apply_clear_completed,
    apply_completion,
    apply_delete,
    apply_edit,
    apply_snooze,
    apply_tick,
    collection_stats,
    find_due,
    spawn_next_instance,
)

__all__ = [
    # Recurrence
    "add_months",
    "next_occurrence",
    # Reducers
    "apply_add",
    "apply_clear_completed",
    "apply_completion",
    "apply_delete",
    "apply_edit",
    "apply_snooze",
    "apply_tick",
    "collection_stats",
    "find_due",
    "spawn_next_instance",
    # Service
    "CompletionOutcome",
    "ReminderService",
    "ReminderStats",
]
