"""
Reminder Scheduler

AUTHORITY: SYSTEM
Decides which deadline reminders must go out and records successful sends
so that each threshold fires at most once per application.

Key behaviors:
- Thresholds are exact-day matches (7, 3 and 1 days before the deadline)
- A reminder is recorded only after the notifier delivered it
- A failed delivery leaves no record, so the next run retries it
- One application's failure never aborts the rest of the batch
- Manual reminders skip thresholds and history entirely

Exact-day matching means a day without a run misses that day's threshold.
The trigger must run at least once per calendar day.
"""
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Protocol, Union
import logging

from ...config import current_time
from ...models.deadlines import (
    ApplicationSnapshot, ManualReminderResult, ReminderAction, ReminderFailure, ReminderRunResult,
)
from ..applications.store import ApplicationStore
from ..deadlines import days_until
from ..errors import DeadlineEngineError, DeliveryError, NotFoundError
from .notifier import Notifier
from .templates import build_deadline_reminder


logger = logging.getLogger(__name__)


# Days before the application deadline at which a reminder fires
REMINDER_THRESHOLDS = (7, 3, 1)

UNEXPECTED_ERROR = "unexpected_error"

Now = Union[date, datetime]


class DispatchHistory(Protocol):
    """Read side of the dispatch history used by evaluate()."""

    def has_dispatched(self, application_id: str, threshold: int) -> bool: ...


class ReminderScheduler:
    """
    Threshold reminder evaluation over all applications.

    Usage:
        scheduler = ReminderScheduler(ApplicationStore(db), get_notifier())
        result = scheduler.run_check()
    """

    def __init__(self, store: ApplicationStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    # =========================================================================
    # DECISION
    # =========================================================================

    @staticmethod
    def evaluate(
        snapshots: Iterable[ApplicationSnapshot],
        history: DispatchHistory,
        now: Now,
    ) -> List[ReminderAction]:
        """
        Determine the (application, threshold) pairs that need a send.

        Args:
            snapshots: Applications with effective (post-override) deadlines
            history: Anything with has_dispatched(application_id, threshold)
            now: Evaluation instant shared by the whole batch

        Returns:
            Reminder actions not yet dispatched
        """
        actions = []
        for snapshot in snapshots:
            days_remaining = days_until(snapshot.application_deadline_end, now)
            for threshold in REMINDER_THRESHOLDS:
                if days_remaining != threshold:
                    continue
                if history.has_dispatched(snapshot.application_id, threshold):
                    continue
                actions.append(ReminderAction(snapshot.application_id, threshold))
        return actions

    # =========================================================================
    # SCHEDULED RUN
    # =========================================================================

    def run_check(self, now: Optional[Now] = None) -> ReminderRunResult:
        """
        Evaluate every application and deliver due reminders.

        Never raises. Failures are collected per application in the result.
        """
        now = now or current_time()
        run_at = now if isinstance(now, datetime) else datetime.combine(now, time.min)
        result = ReminderRunResult(run_at=run_at)

        try:
            application_ids = self.store.list_application_ids()
        except DeadlineEngineError as e:
            logger.error(f"Reminder check aborted, store unavailable: {e}")
            result.completed = False
            result.failures.append(ReminderFailure(kind=e.kind, error=str(e)))
            return result

        for application_id in application_ids:
            result.evaluated += 1
            try:
                snapshot = self.store.get_snapshot(application_id)
                if snapshot is None:
                    # Deleted since the id list was read
                    continue
                actions = self.evaluate([snapshot], self.store, now)
            except DeadlineEngineError as e:
                logger.error(f"Reminder evaluation failed for {application_id}: {e}")
                result.failures.append(
                    ReminderFailure(kind=e.kind, error=str(e), application_id=application_id)
                )
                continue
            except Exception as e:
                logger.error(f"Unexpected error evaluating {application_id}: {e}")
                result.failures.append(
                    ReminderFailure(kind=UNEXPECTED_ERROR, error=str(e), application_id=application_id)
                )
                continue

            for action in actions:
                self._dispatch(snapshot, action, result)

        logger.info(
            f"Reminder check complete: evaluated={result.evaluated} "
            f"sent={len(result.sent)} failed={len(result.failures)}"
        )
        return result

    def _dispatch(
        self,
        snapshot: ApplicationSnapshot,
        action: ReminderAction,
        result: ReminderRunResult,
    ) -> None:
        """Deliver one threshold reminder, then record it."""
        try:
            if not snapshot.contact_email:
                raise DeliveryError(f"No contact email for application {snapshot.application_id}")
            message = build_deadline_reminder(snapshot, action.threshold)
            self.notifier.send(message)
        except DeadlineEngineError as e:
            logger.warning(
                f"Reminder for {action.application_id} at {action.threshold} days not delivered: {e}"
            )
            result.failures.append(ReminderFailure(
                kind=e.kind, error=str(e),
                application_id=action.application_id, threshold=action.threshold,
            ))
            return
        except Exception as e:
            logger.warning(
                f"Reminder for {action.application_id} at {action.threshold} days not delivered: {e}"
            )
            result.failures.append(ReminderFailure(
                kind=UNEXPECTED_ERROR, error=str(e),
                application_id=action.application_id, threshold=action.threshold,
            ))
            return

        try:
            recorded = self.store.record_dispatch(action.application_id, action.threshold, result.run_at)
        except DeadlineEngineError as e:
            logger.error(f"Reminder for {action.application_id} delivered but not recorded: {e}")
            result.failures.append(ReminderFailure(
                kind=e.kind, error=str(e),
                application_id=action.application_id, threshold=action.threshold,
            ))
            return

        if not recorded:
            logger.warning(
                f"Reminder for {action.application_id} at {action.threshold} days was already "
                f"recorded by another run; this delivery is a duplicate"
            )
            result.duplicates.append(action)
            return

        result.sent.append(action)
        logger.info(f"Reminder sent: {action.application_id} at {action.threshold} days")

    # =========================================================================
    # MANUAL REMINDER
    # =========================================================================

    def send_manual(
        self,
        application_id: str,
        message: Optional[str] = None,
        now: Optional[Now] = None,
    ) -> ManualReminderResult:
        """
        Operator-triggered reminder.

        Always attempts delivery. Never checks or writes dispatch history,
        so repeated manual sends are allowed.
        """
        now = now or current_time()
        try:
            snapshot = self.store.get_snapshot(application_id)
            if snapshot is None:
                raise NotFoundError(f"Application {application_id} not found")

            days_remaining = days_until(snapshot.application_deadline_end, now)
            if not snapshot.contact_email:
                raise DeliveryError(f"No contact email for application {application_id}")

            self.notifier.send(build_deadline_reminder(snapshot, days_remaining, message))
        except DeadlineEngineError as e:
            logger.warning(f"Manual reminder for {application_id} failed: {e}")
            return ManualReminderResult(
                application_id=application_id, success=False, error=str(e), error_kind=e.kind,
            )
        except Exception as e:
            logger.error(f"Unexpected error in manual reminder for {application_id}: {e}")
            return ManualReminderResult(
                application_id=application_id, success=False, error=str(e), error_kind=UNEXPECTED_ERROR,
            )

        logger.info(f"Manual reminder sent for {application_id}")
        return ManualReminderResult(
            application_id=application_id,
            success=True,
            recipient=snapshot.contact_email,
            days_until_deadline=days_remaining,
        )
