#!/usr/bin/env python3
"""Dev entrypoint for running the reminder due detector.

Usage:
    # Single tick (notify whatever is due now)
    python scripts/run_scheduler.py --once

    # Continuous loop (Ctrl+C to stop)
    python scripts/run_scheduler.py --loop

    # Loop with custom interval against a specific file
    python scripts/run_scheduler.py --loop --interval 10 --store-path ./reminders.json

    # Limit iterations (for testing)
    python scripts/run_scheduler.py --loop --max-iterations 5

Environment variables:
    REMINDER_STORE_BACKEND: json, sql or memory (default: json)
    REMINDER_STORE_PATH: JSON store file (default: ~/.reminder_engine/reminders.json)
    REMINDER_DATABASE_URL: SQL store URL
    REMINDER_POLL_INTERVAL_SECONDS: Seconds between ticks (default: 30)
    REMINDER_NOTIFY_WEBHOOK_URL: Deliver notifications to this webhook
"""

import argparse
import logging
import sys
from pathlib import Path

from reminder_engine.config import get_settings
from reminder_engine.runtime import build_runtime
from reminder_engine.workers import configure_engine_logging


def main() -> int:
    """Main entrypoint for the scheduler runner."""
    parser = argparse.ArgumentParser(
        description="Run the reminder due detector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    # Mode selection
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--once",
        action="store_true",
        help="Run one detector tick and exit",
    )
    mode.add_argument(
        "--loop",
        action="store_true",
        help="Run the detector continuously",
    )

    # Configuration
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Seconds between ticks (loop mode only)",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Maximum ticks before stopping (loop mode only)",
    )
    parser.add_argument(
        "--backend",
        choices=["json", "sql", "memory"],
        default=None,
        help="Store backend (overrides REMINDER_STORE_BACKEND)",
    )
    parser.add_argument(
        "--store-path",
        type=Path,
        default=None,
        help="JSON store file (overrides REMINDER_STORE_PATH)",
    )

    # Logging
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging to warnings only",
    )

    args = parser.parse_args()

    if args.verbose:
        configure_engine_logging(logging.DEBUG)
    elif args.quiet:
        configure_engine_logging(logging.WARNING)
    else:
        configure_engine_logging(logging.INFO)

    logger = logging.getLogger(__name__)

    settings = get_settings()
    if args.backend:
        settings.STORE_BACKEND = args.backend
    if args.store_path:
        settings.STORE_PATH = args.store_path.expanduser()
    if args.interval:
        settings.POLL_INTERVAL_SECONDS = args.interval

    try:
        runtime = build_runtime(settings)

        if args.once:
            logger.info("Running one detector tick...")
            result = runtime.scheduler.run_once()
            stats = runtime.service.stats()

            # Print summary
            print(f"\n--- Detector Tick Summary ---")
            print(f"Status: {result.status.value}")
            print(f"Notified: {result.processed_count}")
            print(f"Dispatch failures: {result.failed_count}")
            print(
                f"Reminders: {stats.total} total, {stats.upcoming} upcoming, "
                f"{stats.overdue} overdue, {stats.completed} completed"
            )

            for err in result.errors:
                print(f"  - {err}")

            return 0 if not result.errors else 1

        elif args.loop:
            logger.info("Starting detector loop (Ctrl+C to stop)...")
            runtime.scheduler.run_loop(max_iterations=args.max_iterations)
            return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.error(f"Scheduler failed: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
