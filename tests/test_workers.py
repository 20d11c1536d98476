"""Tests for worker results, the scheduler and runtime wiring.

Tests cover:
- WorkerResult and status summarizing
- ReminderScheduler single ticks, background timer and foreground loop
- build_runtime end-to-end tick
"""

import threading
import time
from datetime import timedelta

import pytest

from reminder_engine.config import Settings
from reminder_engine.models.reminder import ReminderCreate
from reminder_engine.runtime import build_runtime
from reminder_engine.storage import InMemoryReminderStore
from reminder_engine.workers.base import WorkerBase, WorkerResult, WorkerStatus, summarize_status
from reminder_engine.workers.scheduler import ReminderScheduler

from tests.conftest import RecordingDispatcher


class CountingWorker(WorkerBase):
    """Worker that counts runs and signals after ``signal_after`` of them."""

    def __init__(self, signal_after: int = 1, fail: bool = False) -> None:
        super().__init__()
        self.runs = 0
        self.signal_after = signal_after
        self.fail = fail
        self.reached = threading.Event()

    @property
    def worker_name(self) -> str:
        return "CountingWorker"

    def run(self, now=None) -> WorkerResult:
        self.runs += 1
        if self.runs >= self.signal_after:
            self.reached.set()
        if self.fail:
            raise RuntimeError("worker exploded")
        return WorkerResult(status=WorkerStatus.SUCCESS, processed_count=1)


# ============================================================================
# WorkerResult Tests
# ============================================================================

class TestWorkerResult:
    """Tests for WorkerResult dataclass."""

    def test_worker_result_defaults(self):
        """WorkerResult initializes with correct defaults."""
        result = WorkerResult(status=WorkerStatus.NO_WORK)

        assert result.processed_count == 0
        assert result.failed_count == 0
        assert result.errors == []
        assert result.notified_ids == []
        assert result.tick_at is None

    def test_worker_result_to_dict(self):
        """WorkerResult converts to dict correctly."""
        result = WorkerResult(
            status=WorkerStatus.PARTIAL,
            processed_count=2,
            failed_count=1,
            errors=[{"reminder_id": "b", "error": "boom"}],
        )

        data = result.to_dict()

        assert data["status"] == "partial"
        assert data["processed_count"] == 2
        assert data["failed_count"] == 1
        assert data["errors"][0]["reminder_id"] == "b"

    @pytest.mark.parametrize(
        "processed, failed, expected",
        [
            (3, 0, WorkerStatus.SUCCESS),
            (2, 1, WorkerStatus.PARTIAL),
            (0, 2, WorkerStatus.FAILED),
            (0, 0, WorkerStatus.NO_WORK),
        ],
    )
    def test_summarize_status(self, processed, failed, expected):
        assert summarize_status(processed, failed) == expected


# ============================================================================
# ReminderScheduler Tests
# ============================================================================

class TestReminderScheduler:
    """Tests for the fixed-interval scheduler."""

    def test_run_once_returns_result(self):
        """run_once runs the worker a single time."""
        worker = CountingWorker()
        scheduler = ReminderScheduler(worker, interval_seconds=30)

        result = scheduler.run_once()

        assert result.status == WorkerStatus.SUCCESS
        assert worker.runs == 1
        assert scheduler.iterations == 1
        assert scheduler.last_result is result

    def test_run_once_contains_worker_crash(self):
        """A worker exception becomes a FAILED result."""
        scheduler = ReminderScheduler(CountingWorker(fail=True), interval_seconds=30)

        result = scheduler.run_once()

        assert result.status == WorkerStatus.FAILED
        assert "worker exploded" in result.errors[0]["error"]

    def test_rejects_negative_interval(self):
        with pytest.raises(ValueError):
            ReminderScheduler(CountingWorker(), interval_seconds=-1)

    def test_rejects_explicit_zero_interval(self):
        """Zero is not replaced by the configured default."""
        with pytest.raises(ValueError):
            ReminderScheduler(CountingWorker(), interval_seconds=0)

    def test_start_and_stop(self):
        """The timer ticks repeatedly until stopped."""
        worker = CountingWorker(signal_after=3)
        scheduler = ReminderScheduler(worker, interval_seconds=0.01)

        scheduler.start()
        try:
            assert worker.reached.wait(timeout=5)
            assert scheduler.is_running
        finally:
            scheduler.stop(timeout=5)

        assert not scheduler.is_running
        runs_after_stop = worker.runs
        time.sleep(0.05)
        assert worker.runs == runs_after_stop

    def test_first_tick_is_immediate(self):
        worker = CountingWorker(signal_after=1)

        with ReminderScheduler(worker, interval_seconds=60) as scheduler:
            assert worker.reached.wait(timeout=5)
            assert scheduler.is_running

        assert worker.runs == 1

    def test_timer_survives_failing_worker(self):
        worker = CountingWorker(signal_after=2, fail=True)
        scheduler = ReminderScheduler(worker, interval_seconds=0.01)

        scheduler.start()
        try:
            assert worker.reached.wait(timeout=5)
        finally:
            scheduler.stop(timeout=5)

        assert scheduler.last_result.status == WorkerStatus.FAILED

    def test_run_loop_max_iterations(self, monkeypatch):
        worker = CountingWorker()
        scheduler = ReminderScheduler(worker, interval_seconds=0.01)
        monkeypatch.setattr(scheduler, "_setup_signal_handlers", lambda: None)

        scheduler.run_loop(max_iterations=3)

        assert worker.runs == 3

    def test_request_shutdown_ends_loop(self, monkeypatch):
        worker = CountingWorker()
        scheduler = ReminderScheduler(worker, interval_seconds=0.01)
        monkeypatch.setattr(scheduler, "_setup_signal_handlers", lambda: None)

        original_run = worker.run

        def run_then_stop(now=None):
            result = original_run(now)
            scheduler.request_shutdown()
            return result

        monkeypatch.setattr(worker, "run", run_then_stop)

        scheduler.run_loop()

        assert worker.runs == 1


# ============================================================================
# Runtime Integration
# ============================================================================

class TestRuntime:
    """build_runtime wires one repository into service and detector."""

    def test_full_reminder_workflow(self, clock, events):
        """Create, notify, snooze, refire and complete a reminder."""
        settings = Settings()
        settings.STORE_BACKEND = "memory"
        settings.POLL_INTERVAL_SECONDS = 30
        settings.DEFAULT_SNOOZE_MINUTES = 5
        dispatcher = RecordingDispatcher()
        runtime = build_runtime(
            settings,
            store=InMemoryReminderStore(),
            dispatcher=dispatcher,
            clock=clock,
            events=events,
        )

        reminder = runtime.service.add_reminder(
            ReminderCreate(title="Take a break", due_at=clock.now + timedelta(minutes=1))
        )

        assert runtime.scheduler.run_once().status == WorkerStatus.NO_WORK

        clock.advance(minutes=1)
        assert runtime.scheduler.run_once().processed_count == 1

        runtime.service.snooze(reminder.id)
        clock.advance(minutes=5)
        assert runtime.scheduler.run_once().processed_count == 1
        assert dispatcher.dispatched_ids == [reminder.id, reminder.id]

        runtime.service.complete(reminder.id)
        clock.advance(days=1)
        assert runtime.scheduler.run_once().status == WorkerStatus.NO_WORK
        assert runtime.scheduler.interval_seconds == 30
