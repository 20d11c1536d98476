"""Concrete notification and audio backends."""

import logging
import sys
from typing import TextIO

import httpx

from reminder_engine.notifications.dispatcher import (
    AudioCue,
    Notification,
    NotificationBackend,
    NotificationPermission,
)

logger = logging.getLogger(__name__)


class LoggingNotificationBackend(NotificationBackend):
    """Simulated delivery: logs each notification and keeps it for inspection."""

    def __init__(self) -> None:
        self.shown: list[Notification] = []

    def permission(self) -> NotificationPermission:
        return NotificationPermission.GRANTED

    def request_permission(self) -> NotificationPermission:
        return NotificationPermission.GRANTED

    def show(self, notification: Notification) -> None:
        self.shown.append(notification)
        logger.info(
            "[SIMULATED] Delivering notification",
            extra={
                "tag": notification.tag,
                "title": notification.title,
                "body": notification.body,
            },
        )


class WebhookNotificationBackend(NotificationBackend):
    """Delivers notifications as JSON POSTs to a webhook.

    Permission is granted whenever a URL is configured. HTTP failures are
    logged and not re-raised.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            url: Webhook endpoint
            timeout: Request timeout in seconds
            client: Pre-built HTTP client (tests pass a MockTransport one)
        """
        self.url = url
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def permission(self) -> NotificationPermission:
        if not self.url:
            return NotificationPermission.UNSUPPORTED
        return NotificationPermission.GRANTED

    def request_permission(self) -> NotificationPermission:
        return self.permission()

    def show(self, notification: Notification) -> None:
        try:
            response = self.client.post(self.url, json=notification.to_dict())
            response.raise_for_status()

            logger.info(
                "Notification delivered to webhook",
                extra={"tag": notification.tag, "status_code": response.status_code},
            )

        except httpx.HTTPStatusError as e:
            logger.error(
                "Webhook rejected notification",
                extra={
                    "tag": notification.tag,
                    "status_code": e.response.status_code,
                    "response": e.response.text[:500],
                },
            )

        except httpx.HTTPError as e:
            logger.warning(
                "Webhook not reachable, notification dropped",
                extra={"tag": notification.tag, "error": str(e)},
            )

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None


class TerminalBellAudioCue(AudioCue):
    """Rings the terminal bell. Frequency and duration cannot be honored."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout

    def play_tone(self, frequency_hz: int, duration_ms: int) -> None:
        self.stream.write("\a")
        self.stream.flush()


class SilentAudioCue(AudioCue):
    def play_tone(self, frequency_hz: int, duration_ms: int) -> None:
        return None
