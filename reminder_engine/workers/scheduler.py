"""Fixed-interval scheduler for the due detector.

Provides two ways of driving ticks:
- start() / stop(): background timer thread, for embedding in a host
- run_loop(): blocking foreground loop with signal handling, for the dev
  entrypoint

Each tick is a single synchronous pass, so stopping never has to roll
anything back; a tick already running simply finishes.
"""

import logging
import signal
import threading
from typing import Any

from reminder_engine.config import get_settings
from reminder_engine.workers.base import WorkerBase, WorkerResult, WorkerStatus

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Runs a worker every ``interval_seconds``.

    Usage:
        scheduler = ReminderScheduler(detector, interval_seconds=30)
        scheduler.start()
        ...
        scheduler.stop()

    Or as a context manager:
        with ReminderScheduler(detector):
            ...
    """

    def __init__(
        self,
        worker: WorkerBase,
        interval_seconds: float | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            worker: Worker to run on every tick
            interval_seconds: Seconds between ticks (default from config)
        """
        settings = get_settings()
        self.worker = worker
        if interval_seconds is None:
            interval_seconds = settings.POLL_INTERVAL_SECONDS
        self.interval_seconds = interval_seconds
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.iterations = 0
        self.last_result: WorkerResult | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> WorkerResult:
        """Execute one tick.

        Never raises: an unexpected worker failure is logged and reported
        as a FAILED result so the timer keeps running.
        """
        try:
            result = self.worker.run()
        except Exception as e:
            self._logger.error(
                f"{self.worker.worker_name} failed: {e}",
                extra={"worker": self.worker.worker_name},
                exc_info=True,
            )
            result = WorkerResult(status=WorkerStatus.FAILED, errors=[{"error": str(e)}])

        self.iterations += 1
        self.last_result = result
        return result

    # -- background timer ------------------------------------------------------

    def start(self) -> None:
        """Start ticking on a daemon thread. The first tick runs immediately."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_timer,
            name=f"{self.worker.worker_name}-scheduler",
            daemon=True,
        )
        self._thread.start()

        self._logger.info(
            "Scheduler started",
            extra={"interval_seconds": self.interval_seconds},
        )

    def stop(self, timeout: float | None = None) -> None:
        """Cancel the timer and wait for the thread to exit.

        Args:
            timeout: Max seconds to wait for a running tick to finish
        """
        self._stop_event.set()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

        self._logger.info(
            "Scheduler stopped",
            extra={"total_iterations": self.iterations},
        )

    def _run_timer(self) -> None:
        self.run_once()
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()

    def __enter__(self) -> "ReminderScheduler":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    # -- foreground loop -------------------------------------------------------

    def run_loop(self, max_iterations: int | None = None) -> None:
        """Run ticks in the calling thread until shutdown is requested.

        Args:
            max_iterations: Max ticks to run (None for infinite)
        """
        iterations = 0
        self._stop_event.clear()
        self._setup_signal_handlers()

        self._logger.info(
            "Starting scheduler loop",
            extra={
                "interval_seconds": self.interval_seconds,
                "max_iterations": max_iterations,
            },
        )

        try:
            while not self._stop_event.is_set():
                if max_iterations is not None and iterations >= max_iterations:
                    self._logger.info(
                        f"Reached max iterations ({max_iterations}), stopping"
                    )
                    break

                result = self.run_once()
                iterations += 1

                self._logger.info(
                    f"Iteration {iterations} complete",
                    extra={
                        "processed": result.processed_count,
                        "failed": result.failed_count,
                    },
                )

                if max_iterations is not None and iterations >= max_iterations:
                    continue

                self._logger.debug(f"Sleeping for {self.interval_seconds} seconds")
                self._stop_event.wait(self.interval_seconds)

        except KeyboardInterrupt:
            self._logger.info("Keyboard interrupt received, shutting down")

        self._logger.info(
            "Scheduler loop stopped",
            extra={"total_iterations": iterations},
        )

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        if threading.current_thread() is not threading.main_thread():
            return

        def handle_signal(signum, frame):
            self._logger.info(f"Received signal {signum}, requesting shutdown")
            self._stop_event.set()

        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)

    def request_shutdown(self) -> None:
        """Request graceful shutdown of the loop."""
        self._stop_event.set()


def configure_engine_logging(level: int = logging.INFO) -> None:
    """Configure logging for engine processes.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("reminder_engine").setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
