"""Tests for ReminderService user actions."""

from datetime import datetime, timedelta

import pytest

from reminder_engine.events import EventType
from reminder_engine.exceptions import ReminderNotFoundError, ReminderValidationError
from reminder_engine.models.reminder import RecurrenceRule, ReminderCreate, ReminderUpdate
from reminder_engine.notifications.dispatcher import NotificationAction
from reminder_engine.services.reminders import ReminderService

from tests.conftest import seed


def event_types(audit):
    return [entry["event_type"] for entry in audit.entries]


# ============================================================================
# Creation and editing
# ============================================================================

class TestAddAndEdit:
    """Creating and editing reminders."""

    def test_add_reminder(self, service, store, clock, audit):
        reminder = service.add_reminder(
            ReminderCreate(
                title="Dentist",
                due_at=clock.now + timedelta(days=2),
                category="health",
            )
        )

        assert store.load() == [reminder]
        assert reminder.created_at == clock.now
        assert reminder.category == "health"
        assert reminder.snooze_minutes == 5
        assert event_types(audit) == [EventType.REMINDER_CREATED.value]

    def test_add_uses_configured_default_snooze(self, repository, clock):
        service = ReminderService(repository, clock=clock, default_snooze_minutes=15)

        reminder = service.add_reminder(ReminderCreate(title="x", due_at=clock.now))

        assert reminder.snooze_minutes == 15

    def test_add_explicit_snooze_wins(self, repository, clock):
        service = ReminderService(repository, clock=clock, default_snooze_minutes=15)

        reminder = service.add_reminder(
            ReminderCreate(title="x", due_at=clock.now, snooze_minutes=2)
        )

        assert reminder.snooze_minutes == 2

    def test_add_blank_title_rejected(self, service, store, clock):
        with pytest.raises(ReminderValidationError):
            service.add_reminder(ReminderCreate(title="   ", due_at=clock.now))
        assert store.load() == []

    def test_edit_resets_state(self, service, store, make_reminder, clock):
        original = make_reminder(id="a", notified=True, snooze_until=clock.now + timedelta(minutes=5))
        seed(store, original)

        edited = service.edit_reminder(
            "a", ReminderUpdate(due_at=clock.now + timedelta(hours=1))
        )

        assert edited.due_at == clock.now + timedelta(hours=1)
        assert edited.notified is False
        assert edited.snooze_until is None
        assert edited.created_at == original.created_at
        assert store.load() == [edited]

    def test_edit_unknown(self, service):
        with pytest.raises(ReminderNotFoundError):
            service.edit_reminder("nope", ReminderUpdate(title="x"))


class TestDeleteAndClear:
    """Removing reminders."""

    def test_delete(self, service, store, make_reminder, audit):
        seed(store, make_reminder(id="a"), make_reminder(id="b"))

        service.delete_reminder("a")

        assert [r.id for r in store.load()] == ["b"]
        assert event_types(audit) == [EventType.REMINDER_DELETED.value]

    def test_clear_completed(self, service, store, make_reminder):
        seed(
            store,
            make_reminder(id="a", completed=True),
            make_reminder(id="b"),
            make_reminder(id="c", completed=True),
        )

        assert service.clear_completed() == 2
        assert [r.id for r in store.load()] == ["b"]

    def test_clear_completed_without_completed_skips_write(self, service, store, make_reminder, audit):
        seed(store, make_reminder(id="a"))

        assert service.clear_completed() == 0
        assert store.save_count == 0
        assert list(audit.entries) == []

    def test_clear_all(self, service, store, make_reminder):
        seed(store, make_reminder(), make_reminder())

        assert service.clear_all() == 2
        assert store.load() == []


# ============================================================================
# Snooze
# ============================================================================

class TestSnooze:
    """Snoozing through the service."""

    def test_snooze_defaults_to_reminder_length(self, service, store, make_reminder, clock):
        seed(store, make_reminder(id="a", snooze_minutes=10, notified=True))

        reminder = service.snooze("a")

        assert reminder.snooze_until == clock.now + timedelta(minutes=10)
        assert reminder.notified is False

    def test_snooze_explicit_minutes(self, service, store, make_reminder, clock, audit):
        seed(store, make_reminder(id="a"))

        reminder = service.snooze("a", 30)

        assert reminder.snooze_until == clock.now + timedelta(minutes=30)
        assert event_types(audit) == [EventType.REMINDER_SNOOZED.value]

    def test_snooze_zero_rejected(self, service, store, make_reminder):
        seed(store, make_reminder(id="a"))

        with pytest.raises(ReminderValidationError):
            service.snooze("a", 0)
        assert store.save_count == 0

    def test_snooze_completed_rejected(self, service, store, make_reminder):
        seed(store, make_reminder(id="a", completed=True))

        with pytest.raises(ReminderValidationError):
            service.snooze("a", 5)

    def test_snooze_unknown(self, service):
        with pytest.raises(ReminderNotFoundError):
            service.snooze("missing", 5)


# ============================================================================
# Completion
# ============================================================================

class TestCompletion:
    """Completing, reopening and recurring spawns."""

    def test_weekly_completion_spawns_next_week(self, service, store, make_reminder, audit):
        seed(
            store,
            make_reminder(
                id="a",
                due_at=datetime(2024, 3, 1, 9, 0),
                recurrence_rule=RecurrenceRule.WEEKLY,
            ),
        )

        outcome = service.toggle_complete("a")

        stored = store.load()
        assert len(stored) == 2
        assert stored[0].completed is True
        assert outcome.spawned is not None
        assert stored[1].id == outcome.spawned.id
        assert stored[1].due_at == datetime(2024, 3, 8, 9, 0)
        assert stored[1].completed is False
        assert event_types(audit) == [
            EventType.REMINDER_COMPLETED.value,
            EventType.REMINDER_RECURRED.value,
        ]
        recurred = audit.entries[-1]
        assert recurred["data"]["spawned_id"] == outcome.spawned.id
        assert recurred["data"]["next_due_at"] == "2024-03-08T09:00:00"

    def test_non_recurring_completion(self, service, store, make_reminder):
        seed(store, make_reminder(id="a"))

        outcome = service.toggle_complete("a")

        assert outcome.spawned is None
        assert len(store.load()) == 1

    def test_reopen_does_not_retract_sibling(self, service, store, make_reminder, audit):
        seed(store, make_reminder(id="a", recurrence_rule=RecurrenceRule.DAILY))

        service.toggle_complete("a")
        outcome = service.toggle_complete("a")

        assert outcome.reminder.completed is False
        assert outcome.spawned is None
        assert len(store.load()) == 2
        assert event_types(audit)[-1] == EventType.REMINDER_REOPENED.value

    def test_complete_is_idempotent(self, service, store, make_reminder):
        seed(store, make_reminder(id="a", recurrence_rule=RecurrenceRule.DAILY))

        service.complete("a")
        outcome = service.complete("a")

        assert outcome.changed is False
        assert len(store.load()) == 2

    def test_complete_unknown(self, service):
        with pytest.raises(ReminderNotFoundError):
            service.toggle_complete("missing")


class TestNotificationActions:
    """Buttons pressed on a shown notification."""

    def test_complete_action(self, service, store, make_reminder):
        seed(store, make_reminder(id="a", notified=True))

        reminder = service.handle_action("a", NotificationAction.COMPLETE)

        assert reminder.completed is True

    def test_snooze_action_uses_reminder_length(self, service, store, make_reminder, clock):
        seed(store, make_reminder(id="a", notified=True, snooze_minutes=7))

        reminder = service.handle_action("a", "snooze")

        assert reminder.snooze_until == clock.now + timedelta(minutes=7)


class TestStats:
    def test_stats(self, service, store, make_reminder, clock):
        seed(
            store,
            make_reminder(due_at=clock.now + timedelta(days=1)),
            make_reminder(due_at=clock.now - timedelta(days=1)),
            make_reminder(completed=True),
        )

        stats = service.stats()

        assert (stats.total, stats.completed, stats.upcoming, stats.overdue) == (3, 1, 1, 1)
