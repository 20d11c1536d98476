"""JSON file storage for the reminder collection.

The file holds one document, ``{"reminders": [...]}``, with camelCase
records. A bare top-level array is accepted on load as well.

Corruption handling:
- A record that fails validation is skipped and logged
- An unparsable document is moved aside to ``*.json.bak`` and the store
  starts again empty
"""

import json
import logging
from pathlib import Path

from reminder_engine.exceptions import ReminderStoreError
from reminder_engine.models.reminder import Reminder
from reminder_engine.storage.base import ReminderStore, parse_records

logger = logging.getLogger(__name__)


class JsonFileReminderStore(ReminderStore):
    """File-based reminder storage using JSON.

    The file is read on every load and rewritten atomically on every save,
    so the user can inspect or edit it directly between ticks.
    """

    def __init__(self, storage_path: Path) -> None:
        """Initialize the store.

        Args:
            storage_path: Location of the JSON document
        """
        self.storage_path = Path(storage_path)
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.storage_path.exists():
            self._write_document([])

        logger.info(f"JsonFileReminderStore initialized: {self.storage_path}")

    @property
    def store_name(self) -> str:
        return f"json:{self.storage_path}"

    def load(self) -> list[Reminder]:
        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning("Storage file not found, starting empty")
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Corrupted JSON in reminder storage: {e}")
            self._backup_and_reset()
            return []

        if isinstance(data, dict):
            records = data.get("reminders", [])
        else:
            records = data

        if not isinstance(records, list):
            logger.error(
                "Reminder storage does not contain a list of records",
                extra={"found": type(records).__name__},
            )
            return []

        return parse_records(records, source=self.store_name)

    def save(self, reminders: list[Reminder]) -> None:
        try:
            self._write_document([r.to_record() for r in reminders])
        except OSError as e:
            logger.error(f"Failed to save reminders: {e}", exc_info=True)
            raise ReminderStoreError(f"Cannot save reminders: {e}") from e

        logger.debug(f"Saved {len(reminders)} reminders")

    def _write_document(self, records: list[dict]) -> None:
        # Write to a sibling temp file, then rename over the original
        temp_path = self.storage_path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump({"reminders": records}, f, indent=2)
        temp_path.replace(self.storage_path)

    def _backup_and_reset(self) -> None:
        """Move the corrupted document aside and create fresh storage."""
        backup_path = self.storage_path.with_suffix(".json.bak")

        try:
            self.storage_path.replace(backup_path)
            logger.warning(f"Backed up corrupted storage to: {backup_path}")
        except OSError as e:
            logger.error(f"Failed to back up corrupted storage: {e}", exc_info=True)

        try:
            self._write_document([])
        except OSError as e:
            logger.error(f"Failed to reset reminder storage: {e}", exc_info=True)
