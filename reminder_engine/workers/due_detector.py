"""Due detection worker.

Each cycle:
1. Reads the current reminder collection
2. Finds reminders that are due and not yet notified
3. Writes back a new collection with those reminders flagged notified
4. Dispatches one notification per due reminder

Steps 1-3 run inside one repository update, so the write is never based on
a snapshot older than the latest user action. Dispatch happens after the
lock is released and only once the write succeeded; a tick whose write
fails sends nothing, and the same reminders are picked up next tick.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from reminder_engine.events import EventDispatcher, EventType, create_event
from reminder_engine.exceptions import ReminderStoreError
from reminder_engine.models.reminder import Reminder
from reminder_engine.notifications.dispatcher import NotificationDispatcher
from reminder_engine.services.reminders import apply_tick, find_due
from reminder_engine.storage.repository import ReminderRepository
from reminder_engine.workers.base import WorkerBase, WorkerResult, WorkerStatus, summarize_status

logger = logging.getLogger(__name__)


class DueDetector(WorkerBase):
    """Worker that fires notifications for due reminders.

    Detection is level-triggered: a reminder fires whenever it is due and
    unnotified, whether it just arrived, came out of a snooze, or was missed
    while the process was suspended. A dispatch that fails is not retried;
    the reminder is flagged notified like the others.
    """

    def __init__(
        self,
        repository: ReminderRepository,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = datetime.now,
        events: EventDispatcher | None = None,
    ) -> None:
        """Initialize the detector.

        Args:
            repository: Shared collection access
            dispatcher: Notification delivery
            clock: Source of the current local time
            events: Lifecycle event dispatcher (None disables events)
        """
        super().__init__()
        self.repository = repository
        self.dispatcher = dispatcher
        self.clock = clock
        self.events = events

    @property
    def worker_name(self) -> str:
        return "DueDetector"

    def run(self, now: datetime | None = None) -> WorkerResult:
        start = time.monotonic()
        now = now or self.clock()
        due: list[Reminder] = []

        def tick(current: list[Reminder]) -> list[Reminder]:
            due.extend(find_due(current, now))
            if not due:
                return current
            return apply_tick(current, [r.id for r in due], now)

        try:
            self.repository.update(tick)
        except ReminderStoreError as e:
            self._logger.error(
                f"[{self.worker_name}] Could not persist tick, nothing dispatched",
                extra={"error": str(e), "pending_count": len(due)},
                exc_info=True,
            )
            return WorkerResult(
                status=WorkerStatus.FAILED,
                tick_at=now,
                duration_ms=self._elapsed_ms(start),
                errors=[{"error": str(e)}],
            )

        if not due:
            self._logger.debug(f"[{self.worker_name}] No due reminders")
            return WorkerResult(
                status=WorkerStatus.NO_WORK,
                tick_at=now,
                duration_ms=self._elapsed_ms(start),
            )

        self._logger.info(
            f"[{self.worker_name}] Found {len(due)} due reminders",
            extra={"tick_at": now.isoformat()},
        )

        # Already flagged notified in the store; delivery runs without the lock
        errors: list[dict[str, Any]] = []
        for reminder in due:
            error = self._dispatch(reminder)
            if error is not None:
                errors.append(error)
            self._emit_notified(reminder, now)

        failed = len(errors)
        processed = len(due) - failed
        result = WorkerResult(
            status=summarize_status(processed, failed),
            processed_count=processed,
            failed_count=failed,
            duration_ms=self._elapsed_ms(start),
            errors=errors,
            tick_at=now,
            notified_ids=[r.id for r in due],
        )

        self._logger.info(
            f"[{self.worker_name}] Cycle complete",
            extra=result.to_dict(),
        )
        return result

    def _dispatch(self, reminder: Reminder) -> dict[str, Any] | None:
        """Dispatch one reminder, containing any failure to that reminder."""
        try:
            self.dispatcher.dispatch(reminder)
        except Exception as e:
            error_msg = str(e)[:500]
            self._logger.error(
                f"[{self.worker_name}] Dispatch failed for reminder {reminder.id}",
                extra={"reminder_id": reminder.id, "error": error_msg},
                exc_info=True,
            )
            return {"reminder_id": reminder.id, "error": error_msg}

        self._logger.info(
            f"[{self.worker_name}] Dispatched reminder {reminder.id}",
            extra={"reminder_id": reminder.id},
        )
        return None

    def _emit_notified(self, reminder: Reminder, now: datetime) -> None:
        if self.events is None:
            return
        self.events.dispatch(
            create_event(
                EventType.REMINDER_NOTIFIED,
                reminder_id=reminder.id,
                timestamp=now,
                data={
                    "title": reminder.title,
                    "effective_due_at": reminder.effective_due_at.isoformat(),
                },
            )
        )
