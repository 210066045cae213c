#!/usr/bin/env python3
"""
Daily Reminder Check
Sends the 7/3/1-day application deadline reminders that are due today.

Thresholds are exact-day matches, so this must run at least once per
calendar day (e.g. cron at 08:00 in the deadline timezone).

Usage:
    python -m scripts.run_reminder_check
"""
import sys
import os
import logging

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import LOG_LEVEL, current_time
from app.database import SessionLocal, init_db
from app.services.applications import ApplicationStore
from app.services.reminders import ReminderScheduler, get_notifier


logger = logging.getLogger("scripts.run_reminder_check")


def run() -> int:
    """Run one reminder check. Returns the process exit code."""
    init_db()

    db = SessionLocal()
    try:
        scheduler = ReminderScheduler(ApplicationStore(db), get_notifier())
        result = scheduler.run_check(current_time())
    finally:
        db.close()

    for failure in result.failures:
        logger.warning(
            f"Failure: application={failure.application_id} threshold={failure.threshold} "
            f"kind={failure.kind} error={failure.error}"
        )

    print(f"Evaluated {result.evaluated} applications: "
          f"{len(result.sent)} reminders sent, {len(result.failures)} failures")

    return 0 if result.completed else 1


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.exit(run())
