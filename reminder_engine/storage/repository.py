"""Serialized access to the shared reminder collection.

Every mutation, whether it comes from a detector tick or a user action,
runs as read snapshot -> compute new snapshot -> write new snapshot while
holding one lock. A write is therefore always based on the latest completed
write, even when the scheduler thread and the caller's thread interleave.
"""

import logging
import threading
from collections.abc import Callable

from reminder_engine.models.reminder import Reminder
from reminder_engine.storage.base import ReminderStore

logger = logging.getLogger(__name__)

Reducer = Callable[[list[Reminder]], list[Reminder]]


class ReminderRepository:
    """Owns the store and the lock that orders all collection replacements.

    Usage:
        repository = ReminderRepository(InMemoryReminderStore())
        repository.update(lambda reminders: [*reminders, reminder])
    """

    def __init__(self, store: ReminderStore) -> None:
        self.store = store
        self._lock = threading.RLock()

    def snapshot(self) -> list[Reminder]:
        """Return the current collection."""
        with self._lock:
            return self.store.load()

    def update(self, reducer: Reducer) -> list[Reminder]:
        """Apply ``reducer`` to the current collection and persist the result.

        The reducer receives a fresh snapshot and must return a new list.
        When it returns the very same list object, nothing is written.

        Args:
            reducer: Function from the current collection to the next one

        Returns:
            The collection as it stands after the update

        Raises:
            ReminderStoreError: If the new collection cannot be saved
        """
        with self._lock:
            current = self.store.load()
            updated = reducer(current)

            if updated is current:
                return current

            self.store.save(updated)
            logger.debug(
                "Reminder collection replaced",
                extra={
                    "store": self.store.store_name,
                    "before": len(current),
                    "after": len(updated),
                },
            )
            return updated
