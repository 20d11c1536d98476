"""Background workers for the reminder engine.

- DueDetector: fires notifications for due reminders
- ReminderScheduler: drives the detector on a fixed interval
"""

from reminder_engine.workers.base import (
    WorkerBase,
    WorkerResult,
    WorkerStatus,
)
from reminder_engine.workers.due_detector import DueDetector
from reminder_engine.workers.scheduler import (
    ReminderScheduler,
    configure_engine_logging,
)

__all__ = [
    # Base classes
    "WorkerBase",
    "WorkerResult",
    "WorkerStatus",
    # Workers
    "DueDetector",
    # Scheduler
    "ReminderScheduler",
    "configure_engine_logging",
]
