"""Base worker abstraction for the reminder engine.

A worker runs one synchronous processing cycle per call to ``run()`` and
reports what it did in a ``WorkerResult``. Scheduling cycles is the job of
``ReminderScheduler``; workers know nothing about timers.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class WorkerStatus(str, Enum):
    """Outcome of one tick."""

    SUCCESS = "success"
    PARTIAL = "partial"  # some dispatches raised
    FAILED = "failed"
    NO_WORK = "no_work"


@dataclass
class WorkerResult:
    """What one tick did.

    Attributes:
        status: Overall outcome
        processed_count: Reminders dispatched without error
        failed_count: Reminders whose dispatch raised (still flagged notified)
        tick_at: Local time the tick evaluated due-ness against
        notified_ids: Every reminder flagged notified by this tick
        duration_ms: Wall time spent in the tick
        errors: One entry per failure, with ``reminder_id`` when known
    """

    status: WorkerStatus
    processed_count: int = 0
    failed_count: int = 0
    tick_at: datetime | None = None
    notified_ids: list[str] = field(default_factory=list)
    duration_ms: float = 0.0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "processed_count": self.processed_count,
            "failed_count": self.failed_count,
            "tick_at": self.tick_at.isoformat() if self.tick_at else None,
            "notified_ids": list(self.notified_ids),
            "duration_ms": round(self.duration_ms, 2),
            "errors": self.errors,
        }


def summarize_status(processed: int, failed: int) -> WorkerStatus:
    """Map dispatch counts to a tick status."""
    if failed and processed:
        return WorkerStatus.PARTIAL
    if failed:
        return WorkerStatus.FAILED
    if processed:
        return WorkerStatus.SUCCESS
    return WorkerStatus.NO_WORK


class WorkerBase(ABC):
    """A unit of periodic work driven by ``ReminderScheduler``."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def worker_name(self) -> str:
        """Name used as the log prefix and thread name."""

    @abstractmethod
    def run(self, now: datetime | None = None) -> WorkerResult:
        """Run one tick.

        Args:
            now: Tick time (default: the worker's clock)
        """

    def _elapsed_ms(self, started: float) -> float:
        return (time.monotonic() - started) * 1000
