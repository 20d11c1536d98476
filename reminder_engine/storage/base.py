"""Persistence contract for the reminder collection.

A store only knows how to load and save the whole collection. It never
patches individual rows; every mutation is a full replacement computed by a
reducer and written through ``ReminderRepository``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from reminder_engine.models.reminder import Reminder

logger = logging.getLogger(__name__)


class ReminderStore(ABC):
    """Abstract load/save collaborator for the reminder collection."""

    @property
    @abstractmethod
    def store_name(self) -> str:
        """Return the store name for logging."""
        pass

    @abstractmethod
    def load(self) -> list[Reminder]:
        """Load the full collection.

        Malformed records are skipped and logged; loading never fails
        because of bad stored data.

        Returns:
            The reminders that parsed, in stored order
        """
        pass

    @abstractmethod
    def save(self, reminders: list[Reminder]) -> None:
        """Replace the stored collection with ``reminders``.

        Raises:
            ReminderStoreError: If the collection cannot be written
        """
        pass


def parse_records(records: Iterable[Any], source: str) -> list[Reminder]:
    """Parse raw records, dropping the ones that do not validate.

    Records with an id already seen earlier in the collection are dropped
    too, so ids stay unique.

    Args:
        records: Raw records as read from storage
        source: Store description used in log messages

    Returns:
        The reminders that parsed
    """
    reminders: list[Reminder] = []
    seen_ids: set[str] = set()

    for index, record in enumerate(records):
        try:
            reminder = Reminder.from_record(record)
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning(
                f"Skipping invalid reminder record at index {index}",
                extra={"source": source, "index": index, "error": str(e)[:500]},
            )
            continue

        if reminder.id in seen_ids:
            logger.warning(
                f"Skipping duplicate reminder id {reminder.id}",
                extra={"source": source, "index": index},
            )
            continue

        seen_ids.add(reminder.id)
        reminders.append(reminder)

    return reminders


class InMemoryReminderStore(ReminderStore):
    """Process-local store.

    Reminders are copied on the way in and out, so neither the caller's list
    nor its reminder instances alias what the store holds.
    """

    def __init__(self, reminders: Iterable[Reminder] | None = None) -> None:
        self._reminders: list[Reminder] = [r.model_copy() for r in reminders or []]
        self.save_count = 0

    @property
    def store_name(self) -> str:
        return "memory"

    def load(self) -> list[Reminder]:
        return [r.model_copy() for r in self._reminders]

    def save(self, reminders: list[Reminder]) -> None:
        self._reminders = [r.model_copy() for r in reminders]
        self.save_count += 1
