"""Shared fixtures for reminder engine tests."""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import pytest

from reminder_engine.events import AuditConsumer, EventDispatcher
from reminder_engine.models.reminder import Reminder
from reminder_engine.notifications.dispatcher import NotificationDispatcher
from reminder_engine.services.reminders import ReminderService
from reminder_engine.storage import InMemoryReminderStore, ReminderRepository
from reminder_engine.workers.due_detector import DueDetector


START = datetime(2024, 3, 1, 9, 0, 0)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingDispatcher(NotificationDispatcher):
    """Records dispatched reminders; raises for ids listed in ``fail_ids``."""

    def __init__(self, fail_ids: set[str] | None = None) -> None:
        self.dispatched: list[Reminder] = []
        self.fail_ids = fail_ids or set()

    @property
    def dispatched_ids(self) -> list[str]:
        return [r.id for r in self.dispatched]

    def dispatch(self, reminder: Reminder) -> None:
        self.dispatched.append(reminder)
        if reminder.id in self.fail_ids:
            raise RuntimeError(f"delivery failed for {reminder.id}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_reminder(clock: FakeClock) -> Callable[..., Reminder]:
    """Factory for reminders with sensible defaults."""

    def factory(**overrides: Any) -> Reminder:
        fields: dict[str, Any] = {
            "title": "Water the plants",
            "due_at": clock.now,
            "created_at": clock.now - timedelta(days=1),
        }
        fields.update(overrides)
        return Reminder(**fields)

    return factory


@pytest.fixture
def store() -> InMemoryReminderStore:
    return InMemoryReminderStore()


@pytest.fixture
def repository(store: InMemoryReminderStore) -> ReminderRepository:
    return ReminderRepository(store)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def audit() -> AuditConsumer:
    return AuditConsumer()


@pytest.fixture
def events(audit: AuditConsumer) -> EventDispatcher:
    dispatcher = EventDispatcher(register_defaults=False)
    dispatcher.register(audit)
    return dispatcher


@pytest.fixture
def service(repository: ReminderRepository, clock: FakeClock, events: EventDispatcher) -> ReminderService:
    return ReminderService(repository, clock=clock, events=events)


@pytest.fixture
def detector(
    repository: ReminderRepository,
    dispatcher: RecordingDispatcher,
    clock: FakeClock,
    events: EventDispatcher,
) -> DueDetector:
    return DueDetector(repository, dispatcher, clock=clock, events=events)


def seed(store: InMemoryReminderStore, *reminders: Reminder) -> None:
    """Put reminders into a store without counting it as a save."""
    store.save(list(reminders))
    store.save_count = 0
