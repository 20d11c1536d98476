"""Notification delivery for due reminders.

Components:
- dispatcher.py: Capability interfaces and the default dispatcher
- backends.py: Logging, webhook and audio implementations
"""

from reminder_engine.config import Settings, get_settings
from reminder_engine.notifications.backends import (
    LoggingNotificationBackend,
    SilentAudioCue,
    TerminalBellAudioCue,
    WebhookNotificationBackend,
)
from reminder_engine.notifications.dispatcher import (
    AudioCue,
    Notification,
    NotificationAction,
    NotificationBackend,
    NotificationDispatcher,
    NotificationPermission,
    ReminderNotificationDispatcher,
)


def build_dispatcher(settings: Settings | None = None) -> ReminderNotificationDispatcher:
    """Wire the default dispatcher from configuration.

    A webhook backend is used when ``REMINDER_NOTIFY_WEBHOOK_URL`` is set,
    otherwise notifications are logged.
    """
    settings = settings or get_settings()

    backend: NotificationBackend
    if settings.NOTIFY_WEBHOOK_URL:
        backend = WebhookNotificationBackend(
            settings.NOTIFY_WEBHOOK_URL,
            timeout=settings.NOTIFY_TIMEOUT_SECONDS,
        )
    else:
        backend = LoggingNotificationBackend()

    return ReminderNotificationDispatcher(
        backend=backend,
        audio=TerminalBellAudioCue(),
        tone_frequency_hz=settings.TONE_FREQUENCY_HZ,
        tone_duration_ms=settings.TONE_DURATION_MS,
    )


__all__ = [
    "AudioCue",
    "Notification",
    "NotificationAction",
    "NotificationBackend",
    "NotificationDispatcher",
    "NotificationPermission",
    "ReminderNotificationDispatcher",
    "LoggingNotificationBackend",
    "WebhookNotificationBackend",
    "TerminalBellAudioCue",
    "SilentAudioCue",
    "build_dispatcher",
]
