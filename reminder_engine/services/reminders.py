"""Reminder state transitions.

This module holds two layers:
1. Pure reducers that take the current collection and return a new one
   (``apply_tick``, ``apply_snooze``, ``apply_completion`` and the editing
   reducers). They never mutate their input.
2. ``ReminderService``, which runs those reducers against the shared
   collection through ``ReminderRepository`` and emits lifecycle events
   once each write has completed.

State machine (derived, see ``Reminder.state_at``):
    Pending  --tick, effective due reached-->  Notified
    Notified --snooze-->                       Snoozed
    Snoozed  --snooze elapses-->               Pending (re-enters due check)
    Pending|Notified|Snoozed --complete-->     Completed
Completing a recurring reminder also appends its next instance.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from reminder_engine.events import EventDispatcher, EventType, create_event
from reminder_engine.exceptions import ReminderNotFoundError, ReminderValidationError
from reminder_engine.models.reminder import (
    Reminder,
    ReminderCreate,
    ReminderUpdate,
    new_reminder_id,
)
from reminder_engine.notifications.dispatcher import NotificationAction
from reminder_engine.services.recurrence import next_occurrence
from reminder_engine.storage.repository import ReminderRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


# -----------------------------------------------------------------------------
# Lookup helpers
# -----------------------------------------------------------------------------


def find_reminder(reminders: Iterable[Reminder], reminder_id: str) -> Reminder:
    """Return the reminder with ``reminder_id``.

    Raises:
        ReminderNotFoundError: If no reminder has that id
    """
    for reminder in reminders:
        if reminder.id == reminder_id:
            return reminder
    raise ReminderNotFoundError(reminder_id)


def _replace(
    reminders: list[Reminder],
    reminder_id: str,
    transform: Callable[[Reminder], Reminder],
) -> list[Reminder]:
    find_reminder(reminders, reminder_id)
    return [transform(r) if r.id == reminder_id else r for r in reminders]


# -----------------------------------------------------------------------------
# Due detection reducers
# -----------------------------------------------------------------------------


def find_due(reminders: Iterable[Reminder], now: datetime) -> list[Reminder]:
    """Return every reminder the detector should fire for at ``now``.

    Due means not completed, not yet notified, and effective due time
    (snooze target, else due time) at or before ``now``.
    """
    return [r for r in reminders if r.is_due(now)]


def apply_tick(
    reminders: list[Reminder],
    processed_ids: Iterable[str],
    now: datetime,
) -> list[Reminder]:
    """Flag the processed reminders as notified.

    Only reminders that are still due at ``now`` are flagged, so the
    notified flag is never set ahead of the effective due time.

    Args:
        reminders: Current collection
        processed_ids: Ids the detector dispatched for in this tick
        now: Tick time

    Returns:
        New collection with ``notified=True`` on the processed reminders
    """
    ids = set(processed_ids)
    return [
        r.model_copy(update={"notified": True}) if r.id in ids and r.is_due(now) else r
        for r in reminders
    ]


# -----------------------------------------------------------------------------
# Snooze reducer
# -----------------------------------------------------------------------------


def snooze_reminder(reminder: Reminder, minutes: int, now: datetime) -> Reminder:
    """Return a copy of ``reminder`` snoozed ``minutes`` past ``now``.

    The base schedule (``due_at``) is untouched. A later snooze overwrites an
    earlier one. Clearing ``notified`` lets the reminder fire again once the
    snooze target is reached.

    Raises:
        ReminderValidationError: If minutes is not positive or the reminder
            is already completed
    """
    if minutes <= 0:
        raise ReminderValidationError("Snooze minutes must be positive")
    if reminder.completed:
        raise ReminderValidationError(f"Reminder {reminder.id} is completed")

    return reminder.model_copy(
        update={
            "snooze_until": now + timedelta(minutes=minutes),
            "notified": False,
        }
    )


def apply_snooze(
    reminders: list[Reminder],
    reminder_id: str,
    minutes: int,
    now: datetime,
) -> list[Reminder]:
    """Snooze one reminder in the collection. See ``snooze_reminder``."""
    return _replace(reminders, reminder_id, lambda r: snooze_reminder(r, minutes, now))


# -----------------------------------------------------------------------------
# Completion reducers
# -----------------------------------------------------------------------------


def spawn_next_instance(reminder: Reminder, now: datetime) -> Reminder | None:
    """Build the follow-up instance of a recurring reminder.

    The new row is independent: fresh id and creation time, same schedule
    attributes, due at the next occurrence of the completed instance's
    base due time.

    Returns:
        The new reminder, or None when the reminder does not recur
    """
    if not reminder.is_recurring:
        return None

    next_due_at = next_occurrence(reminder.due_at, reminder.recurrence_rule)
    if next_due_at is None:
        return None

    return Reminder(
        id=new_reminder_id(),
        title=reminder.title,
        description=reminder.description,
        due_at=next_due_at,
        category=reminder.category,
        recurrence_rule=reminder.recurrence_rule,
        priority=reminder.priority,
        snooze_minutes=reminder.snooze_minutes,
        completed=False,
        notified=False,
        snooze_until=None,
        created_at=now,
    )


@dataclass
class CompletionOutcome:
    """Result of a completion change on one reminder.

    Attributes:
        reminder: The reminder after the change
        spawned: Next recurring instance appended, if any
        changed: False when the reminder already had the requested state
    """

    reminder: Reminder
    spawned: Reminder | None = None
    changed: bool = True


def complete_reminder(
    reminder: Reminder,
    now: datetime,
    completed: bool | None = None,
) -> CompletionOutcome:
    """Set or toggle completion on a single reminder.

    Args:
        reminder: The reminder to change
        now: Action time, used as the spawned instance's creation time
        completed: Target state, or None to toggle

    Returns:
        CompletionOutcome describing the change
    """
    target = (not reminder.completed) if completed is None else completed

    if target == reminder.completed:
        return CompletionOutcome(reminder=reminder, changed=False)

    updated = reminder.model_copy(update={"completed": target})

    # Reopening leaves any already spawned sibling in place
    spawned = spawn_next_instance(reminder, now) if target else None
    return CompletionOutcome(reminder=updated, spawned=spawned)


def complete_in_collection(
    reminders: list[Reminder],
    reminder_id: str,
    now: datetime,
    completed: bool | None = None,
) -> tuple[list[Reminder], CompletionOutcome]:
    """Collection-level completion returning both the new list and the outcome.

    Raises:
        ReminderNotFoundError: If no reminder has that id
    """
    outcome = complete_reminder(find_reminder(reminders, reminder_id), now, completed)
    if not outcome.changed:
        return reminders, outcome

    updated = [outcome.reminder if r.id == reminder_id else r for r in reminders]
    if outcome.spawned is not None:
        updated.append(outcome.spawned)
    return updated, outcome


def apply_completion(
    reminders: list[Reminder],
    reminder_id: str,
    now: datetime,
    completed: bool | None = None,
) -> list[Reminder]:
    """Toggle (or set) completion and append the next recurring instance.

    Returns the input list unchanged when the reminder already has the
    requested state.
    """
    updated, _ = complete_in_collection(reminders, reminder_id, now, completed)
    return updated


# -----------------------------------------------------------------------------
# Editing reducers
# -----------------------------------------------------------------------------


def apply_add(reminders: list[Reminder], reminder: Reminder) -> list[Reminder]:
    """Append a new reminder.

    Raises:
        ReminderValidationError: If the id is already in use
    """
    if any(r.id == reminder.id for r in reminders):
        raise ReminderValidationError(f"Reminder {reminder.id} already exists")
    return [*reminders, reminder]


def edit_reminder(reminder: Reminder, changes: ReminderUpdate) -> Reminder:
    """Apply user edits to a reminder.

    An edit resubmits the reminder: id and creation time are kept while
    completion, notified and snooze state start over.

    Raises:
        ReminderValidationError: If the edited reminder is invalid
    """
    data = reminder.model_dump()
    data.update(changes.model_dump(exclude_unset=True))
    data.update({"completed": False, "notified": False, "snooze_until": None})

    try:
        return Reminder.model_validate(data)
    except ValueError as e:
        raise ReminderValidationError(str(e)) from e


def apply_edit(
    reminders: list[Reminder],
    reminder_id: str,
    changes: ReminderUpdate,
) -> list[Reminder]:
    """Edit one reminder in the collection. See ``edit_reminder``."""
    return _replace(reminders, reminder_id, lambda r: edit_reminder(r, changes))


def apply_delete(reminders: list[Reminder], reminder_id: str) -> list[Reminder]:
    """Remove one reminder.

    Raises:
        ReminderNotFoundError: If no reminder has that id
    """
    find_reminder(reminders, reminder_id)
    return [r for r in reminders if r.id != reminder_id]


def apply_clear_completed(reminders: list[Reminder]) -> list[Reminder]:
    """Remove every completed reminder."""
    return [r for r in reminders if not r.completed]


# -----------------------------------------------------------------------------
# Stats
# -----------------------------------------------------------------------------


@dataclass
class ReminderStats:
    """Collection counters.

    ``upcoming`` and ``overdue`` look at the base due time of incomplete
    reminders, ignoring snoozes.
    """

    total: int = 0
    completed: int = 0
    upcoming: int = 0
    overdue: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "completed": self.completed,
            "upcoming": self.upcoming,
            "overdue": self.overdue,
        }


def collection_stats(reminders: Iterable[Reminder], now: datetime) -> ReminderStats:
    stats = ReminderStats()
    for reminder in reminders:
        stats.total += 1
        if reminder.completed:
            stats.completed += 1
        elif reminder.due_at > now:
            stats.upcoming += 1
        else:
            stats.overdue += 1
    return stats


# -----------------------------------------------------------------------------
# Reminder Service
# -----------------------------------------------------------------------------


class ReminderService:
    """User-facing reminder actions over the shared collection.

    Every method runs one reducer through the repository, so user actions
    and detector ticks are serialized and never write from a stale read.
    """

    def __init__(
        self,
        repository: ReminderRepository,
        clock: Clock = datetime.now,
        events: EventDispatcher | None = None,
        default_snooze_minutes: int | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Shared collection access
            clock: Source of the current local time
            events: Lifecycle event dispatcher (None disables events)
            default_snooze_minutes: Snooze length for new reminders that
                do not specify one
        """
        self.repository = repository
        self.clock = clock
        self.events = events
        self.default_snooze_minutes = default_snooze_minutes

    # -- queries ---------------------------------------------------------------

    def list_reminders(self) -> list[Reminder]:
        return self.repository.snapshot()

    def get_reminder(self, reminder_id: str) -> Reminder:
        """Get a reminder by ID.

        Raises:
            ReminderNotFoundError: If the reminder does not exist
        """
        return find_reminder(self.repository.snapshot(), reminder_id)

    def stats(self) -> ReminderStats:
        return collection_stats(self.repository.snapshot(), self.clock())

    # -- creation and editing --------------------------------------------------

    def add_reminder(self, data: ReminderCreate) -> Reminder:
        """Create a new pending reminder.

        Args:
            data: Reminder fields from the user

        Returns:
            The stored reminder

        Raises:
            ReminderValidationError: If the data is invalid
        """
        now = self.clock()
        fields = data.model_dump(exclude_none=True)
        if "snooze_minutes" not in fields and self.default_snooze_minutes:
            fields["snooze_minutes"] = self.default_snooze_minutes

        try:
            reminder = Reminder.model_validate({**fields, "created_at": now})
        except ValueError as e:
            raise ReminderValidationError(str(e)) from e

        self.repository.update(lambda reminders: apply_add(reminders, reminder))

        logger.info(
            f"Created reminder: {reminder.title}",
            extra={"reminder_id": reminder.id, "due_at": reminder.due_at.isoformat()},
        )
        self._emit(EventType.REMINDER_CREATED, reminder, now)
        return reminder

    def edit_reminder(self, reminder_id: str, changes: ReminderUpdate) -> Reminder:
        """Edit a reminder, resetting its completion and notification state.

        Raises:
            ReminderNotFoundError: If the reminder does not exist
            ReminderValidationError: If the edit is invalid
        """
        reminders = self.repository.update(
            lambda current: apply_edit(current, reminder_id, changes)
        )
        reminder = find_reminder(reminders, reminder_id)

        logger.info("Reminder updated", extra={"reminder_id": reminder_id})
        self._emit(
            EventType.REMINDER_UPDATED,
            reminder,
            self.clock(),
            {"fields": sorted(changes.model_dump(exclude_unset=True))},
        )
        return reminder

    def delete_reminder(self, reminder_id: str) -> None:
        """Delete a reminder permanently.

        Raises:
            ReminderNotFoundError: If the reminder does not exist
        """
        self.repository.update(lambda current: apply_delete(current, reminder_id))

        logger.info("Reminder deleted", extra={"reminder_id": reminder_id})
        self._emit_raw(EventType.REMINDER_DELETED, reminder_id, self.clock())

    def clear_completed(self) -> int:
        """Delete every completed reminder.

        Returns:
            Number of reminders removed
        """
        removed = 0

        def reducer(current: list[Reminder]) -> list[Reminder]:
            nonlocal removed
            remaining = apply_clear_completed(current)
            removed = len(current) - len(remaining)
            return remaining if removed else current

        self.repository.update(reducer)

        if removed:
            logger.info("Completed reminders cleared", extra={"count": removed})
            self._emit_raw(
                EventType.REMINDERS_CLEARED,
                None,
                self.clock(),
                {"scope": "completed", "count": removed},
            )
        return removed

    def clear_all(self) -> int:
        """Delete every reminder.

        Returns:
            Number of reminders removed
        """
        removed = 0

        def reducer(current: list[Reminder]) -> list[Reminder]:
            nonlocal removed
            removed = len(current)
            return []

        self.repository.update(reducer)

        logger.info("All reminders cleared", extra={"count": removed})
        self._emit_raw(
            EventType.REMINDERS_CLEARED,
            None,
            self.clock(),
            {"scope": "all", "count": removed},
        )
        return removed

    # -- snooze and completion -------------------------------------------------

    def snooze(self, reminder_id: str, minutes: int | None = None) -> Reminder:
        """Snooze a reminder.

        Args:
            reminder_id: The reminder to snooze
            minutes: Minutes from now (default: the reminder's own
                snooze length)

        Returns:
            The snoozed reminder

        Raises:
            ReminderNotFoundError: If the reminder does not exist
            ReminderValidationError: If minutes is not positive or the
                reminder is completed
        """
        now = self.clock()

        def reducer(current: list[Reminder]) -> list[Reminder]:
            length = minutes
            if length is None:
                length = find_reminder(current, reminder_id).snooze_minutes
            return apply_snooze(current, reminder_id, length, now)

        reminder = find_reminder(self.repository.update(reducer), reminder_id)

        logger.info(
            "Reminder snoozed",
            extra={
                "reminder_id": reminder_id,
                "snooze_until": reminder.snooze_until.isoformat(),
            },
        )
        self._emit(
            EventType.REMINDER_SNOOZED,
            reminder,
            now,
            {"snooze_until": reminder.snooze_until.isoformat()},
        )
        return reminder

    def toggle_complete(self, reminder_id: str) -> CompletionOutcome:
        """Flip a reminder between completed and not completed.

        Completing a recurring reminder appends its next instance.

        Raises:
            ReminderNotFoundError: If the reminder does not exist
        """
        return self._set_completion(reminder_id, None)

    def complete(self, reminder_id: str) -> CompletionOutcome:
        """Mark a reminder completed. Does nothing if it already is.

        Raises:
            ReminderNotFoundError: If the reminder does not exist
        """
        return self._set_completion(reminder_id, True)

    def handle_action(self, reminder_id: str, action: NotificationAction) -> Reminder:
        """Apply a notification button press.

        Args:
            reminder_id: Reminder the notification was shown for
            action: The button pressed

        Returns:
            The reminder after the action
        """
        action = NotificationAction(action)
        if action == NotificationAction.COMPLETE:
            return self.complete(reminder_id).reminder
        return self.snooze(reminder_id)

    def _set_completion(self, reminder_id: str, completed: bool | None) -> CompletionOutcome:
        now = self.clock()
        outcome: CompletionOutcome | None = None

        def reducer(current: list[Reminder]) -> list[Reminder]:
            nonlocal outcome
            updated, outcome = complete_in_collection(current, reminder_id, now, completed)
            return updated

        self.repository.update(reducer)

        if not outcome.changed:
            return outcome

        reminder = outcome.reminder
        if reminder.completed:
            logger.info("Reminder completed", extra={"reminder_id": reminder_id})
            self._emit(EventType.REMINDER_COMPLETED, reminder, now)
        else:
            logger.info("Reminder reopened", extra={"reminder_id": reminder_id})
            self._emit(EventType.REMINDER_REOPENED, reminder, now)

        if outcome.spawned is not None:
            spawned = outcome.spawned
            logger.info(
                "Next recurring instance scheduled",
                extra={
                    "reminder_id": reminder_id,
                    "spawned_id": spawned.id,
                    "due_at": spawned.due_at.isoformat(),
                },
            )
            self._emit(
                EventType.REMINDER_RECURRED,
                reminder,
                now,
                {
                    "spawned_id": spawned.id,
                    "title": spawned.title,
                    "category": spawned.category,
                    "recurrence_rule": spawned.recurrence_rule.value,
                    "next_due_at": spawned.due_at.isoformat(),
                },
            )

        return outcome

    # -- events ----------------------------------------------------------------

    def _emit(
        self,
        event_type: EventType,
        reminder: Reminder,
        now: datetime,
        data: dict[str, Any] | None = None,
    ) -> None:
        payload = {"title": reminder.title, "due_at": reminder.due_at.isoformat()}
        payload.update(data or {})
        self._emit_raw(event_type, reminder.id, now, payload)

    def _emit_raw(
        self,
        event_type: EventType,
        reminder_id: str | None,
        now: datetime,
        data: dict[str, Any] | None = None,
    ) -> None:
        if self.events is None:
            return
        self.events.dispatch(
            create_event(event_type, reminder_id=reminder_id, timestamp=now, data=data)
        )
