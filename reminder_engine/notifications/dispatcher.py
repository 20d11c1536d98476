"""Notification dispatch for due reminders.

The scheduling core depends only on ``NotificationDispatcher``. Platform
delivery (system notifications, sound) sits behind the ``NotificationBackend``
and ``AudioCue`` capability interfaces, so the detector can be tested without
either.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from reminder_engine.models.reminder import Reminder

logger = logging.getLogger(__name__)


class NotificationPermission(str, Enum):
    """Permission state reported by a notification backend."""

    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


class NotificationAction(str, Enum):
    """Buttons offered on a reminder notification."""

    COMPLETE = "complete"
    SNOOZE = "snooze"


DEFAULT_ACTIONS: tuple[NotificationAction, ...] = (
    NotificationAction.COMPLETE,
    NotificationAction.SNOOZE,
)

DEFAULT_BODY = "Your reminder is due now!"


@dataclass
class Notification:
    """A notification ready for a backend to show.

    Attributes:
        title: Headline text
        body: Detail text
        tag: Reminder id, so a backend can replace an earlier notification
        actions: Buttons to offer
        snooze_minutes: Snooze length applied by the Snooze action
    """

    title: str
    body: str
    tag: str
    actions: tuple[NotificationAction, ...] = DEFAULT_ACTIONS
    snooze_minutes: int = 5
    metadata: dict[str, Any] = field(default_factory=dict)

    def action_label(self, action: NotificationAction) -> str:
        if action == NotificationAction.SNOOZE:
            return f"Snooze {self.snooze_minutes}m"
        return "Complete"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON delivery."""
        return {
            "title": self.title,
            "body": self.body,
            "tag": self.tag,
            "actions": [
                {"action": action.value, "title": self.action_label(action)}
                for action in self.actions
            ],
            "metadata": self.metadata,
        }

    @classmethod
    def for_reminder(cls, reminder: Reminder) -> "Notification":
        return cls(
            title=f"Reminder: {reminder.title}",
            body=reminder.description or DEFAULT_BODY,
            tag=reminder.id,
            snooze_minutes=reminder.snooze_minutes,
            metadata={
                "reminder_id": reminder.id,
                "category": reminder.category,
                "priority": reminder.priority.value,
                "due_at": reminder.effective_due_at.isoformat(),
            },
        )


# -----------------------------------------------------------------------------
# Capability interfaces
# -----------------------------------------------------------------------------


class NotificationBackend(ABC):
    """Visual/system notification delivery."""

    @abstractmethod
    def permission(self) -> NotificationPermission:
        """Return the current permission state."""
        pass

    @abstractmethod
    def request_permission(self) -> NotificationPermission:
        """Ask for permission and return the resulting state."""
        pass

    @abstractmethod
    def show(self, notification: Notification) -> None:
        """Show a notification. May raise; the dispatcher contains failures."""
        pass


class AudioCue(ABC):
    """Audible alert delivery."""

    @abstractmethod
    def play_tone(self, frequency_hz: int, duration_ms: int) -> None:
        """Play a tone. May raise; the dispatcher contains failures."""
        pass


class NotificationDispatcher(ABC):
    """What the due detector calls once per due reminder."""

    @abstractmethod
    def dispatch(self, reminder: Reminder) -> None:
        """Alert the user about ``reminder``. Must never raise."""
        pass


# -----------------------------------------------------------------------------
# Default dispatcher
# -----------------------------------------------------------------------------


class ReminderNotificationDispatcher(NotificationDispatcher):
    """Plays a tone, then shows a notification when permission is granted.

    Delivery failures are logged and swallowed. They never change whether
    the reminder counts as notified.
    """

    def __init__(
        self,
        backend: NotificationBackend,
        audio: AudioCue | None = None,
        tone_frequency_hz: int = 600,
        tone_duration_ms: int = 1000,
    ) -> None:
        self.backend = backend
        self.audio = audio
        self.tone_frequency_hz = tone_frequency_hz
        self.tone_duration_ms = tone_duration_ms

    def request_permission(self) -> NotificationPermission:
        """Ask the backend for notification permission."""
        try:
            return self.backend.request_permission()
        except Exception as e:
            logger.warning(f"Notification permission request failed: {e}")
            return NotificationPermission.UNSUPPORTED

    def dispatch(self, reminder: Reminder) -> None:
        self._play_tone(reminder)
        self._show(reminder)

    def _play_tone(self, reminder: Reminder) -> None:
        if self.audio is None:
            return
        try:
            self.audio.play_tone(self.tone_frequency_hz, self.tone_duration_ms)
        except Exception as e:
            logger.debug(
                "Audio notification not available",
                extra={"reminder_id": reminder.id, "error": str(e)},
            )

    def _show(self, reminder: Reminder) -> None:
        try:
            permission = self.backend.permission()
            if permission != NotificationPermission.GRANTED:
                logger.debug(
                    "Notification permission not granted, skipping display",
                    extra={"reminder_id": reminder.id, "permission": permission.value},
                )
                return

            self.backend.show(Notification.for_reminder(reminder))
        except Exception as e:
            logger.warning(
                f"Failed to show notification for reminder {reminder.id}",
                extra={"reminder_id": reminder.id, "error": str(e)[:500]},
            )
