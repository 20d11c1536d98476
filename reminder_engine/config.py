"""Environment configuration for the reminder engine."""

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATA_DIR = Path.home() / ".reminder_engine"

STORE_BACKENDS = ("json", "sql", "memory")


class Settings:
    """Engine settings loaded from environment variables."""

    def __init__(self) -> None:
        self.STORE_BACKEND: str = os.getenv("REMINDER_STORE_BACKEND", "json").lower()
        self.STORE_PATH: Path = Path(
            os.getenv("REMINDER_STORE_PATH", str(DEFAULT_DATA_DIR / "reminders.json"))
        ).expanduser()
        self.DATABASE_URL: str = os.getenv(
            "REMINDER_DATABASE_URL",
            f"sqlite:///{DEFAULT_DATA_DIR / 'reminders.db'}",
        )
        # Reference cadence of the due detector
        self.POLL_INTERVAL_SECONDS: int = int(
            os.getenv("REMINDER_POLL_INTERVAL_SECONDS", "30")
        )
        self.DEFAULT_SNOOZE_MINUTES: int = int(
            os.getenv("REMINDER_DEFAULT_SNOOZE_MINUTES", "5")
        )
        self.TONE_FREQUENCY_HZ: int = int(os.getenv("REMINDER_TONE_FREQUENCY_HZ", "600"))
        self.TONE_DURATION_MS: int = int(os.getenv("REMINDER_TONE_DURATION_MS", "1000"))
        self.NOTIFY_WEBHOOK_URL: str = os.getenv("REMINDER_NOTIFY_WEBHOOK_URL", "")
        self.NOTIFY_TIMEOUT_SECONDS: float = float(
            os.getenv("REMINDER_NOTIFY_TIMEOUT_SECONDS", "5.0")
        )

    def validate(self) -> None:
        """Validate that the configured values are usable."""
        if self.STORE_BACKEND not in STORE_BACKENDS:
            raise ValueError(
                f"REMINDER_STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}"
            )
        if self.STORE_BACKEND == "sql" and not self.DATABASE_URL:
            raise ValueError("REMINDER_DATABASE_URL is required for the sql backend")
        if self.POLL_INTERVAL_SECONDS <= 0:
            raise ValueError("REMINDER_POLL_INTERVAL_SECONDS must be positive")
        if self.DEFAULT_SNOOZE_MINUTES <= 0:
            raise ValueError("REMINDER_DEFAULT_SNOOZE_MINUTES must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    return settings
