"""Reminder collection persistence.

Components:
- base.py: Load/save contract, record parsing and the in-memory store
- json_store.py: JSON document store (the default backend)
- sql_store.py: SQLModel-backed store
- repository.py: Locked whole-collection replacement
"""

from reminder_engine.config import Settings, get_settings
from reminder_engine.storage.base import InMemoryReminderStore, ReminderStore, parse_records
from reminder_engine.storage.json_store import JsonFileReminderStore
from reminder_engine.storage.repository import ReminderRepository
from reminder_engine.storage.sql_store import SqlReminderStore


def build_store(settings: Settings | None = None) -> ReminderStore:
    """Create the store selected by ``REMINDER_STORE_BACKEND``.

    Args:
        settings: Settings to use (default: cached environment settings)

    Returns:
        A ready-to-use ReminderStore
    """
    settings = settings or get_settings()
    settings.validate()

    if settings.STORE_BACKEND == "sql":
        return SqlReminderStore(database_url=settings.DATABASE_URL)
    if settings.STORE_BACKEND == "memory":
        return InMemoryReminderStore()
    return JsonFileReminderStore(settings.STORE_PATH)


__all__ = [
    "ReminderStore",
    "InMemoryReminderStore",
    "JsonFileReminderStore",
    "SqlReminderStore",
    "ReminderRepository",
    "parse_records",
    "build_store",
]
