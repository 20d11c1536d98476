"""Wiring of store, service, detector and scheduler into one runtime."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from reminder_engine.config import Settings, get_settings
from reminder_engine.events import EventDispatcher, get_event_dispatcher
from reminder_engine.notifications import NotificationDispatcher, build_dispatcher
from reminder_engine.services.reminders import ReminderService
from reminder_engine.storage import ReminderRepository, ReminderStore, build_store
from reminder_engine.workers.due_detector import DueDetector
from reminder_engine.workers.scheduler import ReminderScheduler

logger = logging.getLogger(__name__)


@dataclass
class EngineRuntime:
    """Everything a host needs to run the reminder engine.

    ``service`` and ``scheduler`` share one repository, which is what keeps
    user actions and detector ticks from overwriting each other.
    """

    settings: Settings
    repository: ReminderRepository
    service: ReminderService
    detector: DueDetector
    scheduler: ReminderScheduler
    dispatcher: NotificationDispatcher
    events: EventDispatcher


def build_runtime(
    settings: Settings | None = None,
    store: ReminderStore | None = None,
    dispatcher: NotificationDispatcher | None = None,
    clock: Callable[[], datetime] = datetime.now,
    events: EventDispatcher | None = None,
) -> EngineRuntime:
    """Build a runtime, filling unspecified collaborators from configuration.

    Args:
        settings: Settings to use (default: cached environment settings)
        store: Reminder store (default: the configured backend)
        dispatcher: Notification dispatcher (default: the configured one)
        clock: Source of the current local time
        events: Event dispatcher (default: the singleton)

    Returns:
        EngineRuntime with the scheduler not yet started
    """
    settings = settings or get_settings()
    settings.validate()

    repository = ReminderRepository(store or build_store(settings))
    dispatcher = dispatcher or build_dispatcher(settings)
    events = events or get_event_dispatcher()

    service = ReminderService(
        repository,
        clock=clock,
        events=events,
        default_snooze_minutes=settings.DEFAULT_SNOOZE_MINUTES,
    )
    detector = DueDetector(repository, dispatcher, clock=clock, events=events)
    scheduler = ReminderScheduler(detector, interval_seconds=settings.POLL_INTERVAL_SECONDS)

    logger.info(
        "Reminder engine runtime built",
        extra={
            "store": repository.store.store_name,
            "interval_seconds": scheduler.interval_seconds,
        },
    )

    return EngineRuntime(
        settings=settings,
        repository=repository,
        service=service,
        detector=detector,
        scheduler=scheduler,
        dispatcher=dispatcher,
        events=events,
    )
