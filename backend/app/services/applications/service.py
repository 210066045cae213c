"""
Application Service

The edit path for application records. Creating an application or editing
its conversion date runs the deadline calculator and refreshes the cached
deadlines; admins may then override the application window.

AUTHORITY MODEL:
- Conversion date edits recompute every derived date and clear any override
- Overrides replace only the application window, never the anchor
"""
from datetime import date, datetime
from typing import Any, Dict, Optional, Union
from uuid import uuid4
import logging

from sqlalchemy.orm import Session

from ...models.db_models import ApplicationDB, ApplicationStatus, SubsidyType
from ...models.deadlines import DeadlineCalculation, PlanStrategy
from ..deadlines import (
    DeadlineCalculator,
    days_until_text,
    format_localized,
    parse_date,
    validate_anchor,
    validate_override,
)
from ..errors import InvalidInputError, NotFoundError
from .store import ApplicationStore


logger = logging.getLogger(__name__)

Now = Union[date, datetime]

# Deadlines this close count towards the dashboard's urgent alert
URGENT_ALERT_DAYS = 7


class ApplicationService:
    """Create and edit applications, keeping cached deadlines in sync."""

    def __init__(self, db: Session):
        self.db = db
        self.store = ApplicationStore(db)

    def _require(self, application_id: str) -> ApplicationDB:
        application = self.store.get_application(application_id)
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    def _calculate(
        self,
        conversion_date: Any,
        now: Now,
        strategy: PlanStrategy,
        plan_end_date: Optional[Any],
    ) -> DeadlineCalculation:
        validation = validate_anchor(conversion_date, now)
        if not validation.is_valid:
            raise InvalidInputError(validation.error_message)
        return DeadlineCalculator.compute(conversion_date, now, strategy, plan_end_date)

    @staticmethod
    def _apply_calculation(application: ApplicationDB, calc: DeadlineCalculation) -> None:
        application.plan_start_date = calc.plan_start_date
        application.plan_strategy = calc.strategy
        application.plan_end_date = calc.plan_end_date
        application.six_months_payment_end = calc.six_months_payment_end
        application.application_deadline_start = calc.application_deadline_start
        application.application_deadline_end = calc.application_deadline_end
        application.career_plan_deadline = calc.career_plan_deadline

    # =========================================================================
    # CREATE / EDIT
    # =========================================================================

    def create_application(
        self,
        company_name: str,
        conversion_date: Any,
        now: Now,
        contact_email: Optional[str] = None,
        subsidy_type: str = SubsidyType.CAREER_UP.value,
        strategy: PlanStrategy = PlanStrategy.LONG_HORIZON,
        plan_end_date: Optional[Any] = None,
    ) -> ApplicationDB:
        """
        Register a new application and derive its deadlines.

        Raises:
            InvalidInputError: conversion date unparsable or out of range
        """
        calc = self._calculate(conversion_date, now, strategy, plan_end_date)

        application = ApplicationDB(
            id=str(uuid4()),
            company_name=company_name,
            contact_email=contact_email,
            subsidy_type=subsidy_type,
            status=ApplicationStatus.DRAFT,
            explicit_plan_end_date=parse_date(plan_end_date) if plan_end_date is not None else None,
            is_deadline_overridden=False,
        )
        self._apply_calculation(application, calc)
        self.store.save(application)

        logger.info(
            f"Created application {application.id}: conversion {calc.plan_start_date}, "
            f"deadline {calc.application_deadline_end}"
        )
        return application

    def update_conversion_date(
        self,
        application_id: str,
        conversion_date: Any,
        now: Now,
        strategy: Optional[PlanStrategy] = None,
        plan_end_date: Optional[Any] = None,
    ) -> ApplicationDB:
        """Re-edit the anchor. Recomputes every deadline and drops any override."""
        application = self._require(application_id)
        strategy = strategy or application.plan_strategy
        if plan_end_date is None and strategy == PlanStrategy.CAREER_UP_SIX_MONTH:
            plan_end_date = application.explicit_plan_end_date

        calc = self._calculate(conversion_date, now, strategy, plan_end_date)
        self._apply_calculation(application, calc)
        application.explicit_plan_end_date = (
            parse_date(plan_end_date) if plan_end_date is not None else None
        )
        application.is_deadline_overridden = False
        application.override_deadline_start = None
        application.override_deadline_end = None
        application.override_reason = None
        self.store.save(application)

        logger.info(f"Recomputed deadlines for application {application_id}")
        return application

    def override_deadlines(
        self,
        application_id: str,
        deadline_start: Any,
        deadline_end: Any,
        reason: Optional[str] = None,
    ) -> ApplicationDB:
        """Replace the application window with admin-supplied dates."""
        application = self._require(application_id)

        validation = validate_override(deadline_start, deadline_end)
        if not validation.is_valid:
            raise InvalidInputError(validation.error_message)

        application.is_deadline_overridden = True
        application.override_deadline_start = parse_date(deadline_start)
        application.override_deadline_end = parse_date(deadline_end)
        application.override_reason = reason
        self.store.save(application)

        logger.info(
            f"Deadline override for application {application_id}: "
            f"{application.override_deadline_start} - {application.override_deadline_end}"
        )
        return application

    def clear_override(self, application_id: str) -> ApplicationDB:
        application = self._require(application_id)
        application.is_deadline_overridden = False
        application.override_deadline_start = None
        application.override_deadline_end = None
        application.override_reason = None
        self.store.save(application)
        return application

    def delete_application(self, application_id: str) -> None:
        application = self._require(application_id)
        self.store.delete(application)
        logger.info(f"Deleted application {application_id}")

    # =========================================================================
    # READ
    # =========================================================================

    def upcoming_deadlines(self, within_days: int, now: Now) -> Dict[str, Any]:
        """
        Application windows closing in the next `within_days` days.

        `urgent_count` counts deadlines inside the reminder horizon
        (URGENT_ALERT_DAYS), the figure the admin dashboard alerts on.
        """
        if within_days < 0:
            raise InvalidInputError("days must not be negative")

        deadlines = []
        for snapshot in self.store.list_upcoming(within_days, now):
            status = DeadlineCalculator.status_for(snapshot.application_deadline_end, now)
            deadlines.append({
                "application_id": snapshot.application_id,
                "company_name": snapshot.company_name,
                "application_deadline_end": snapshot.application_deadline_end.isoformat(),
                "application_deadline_end_localized": format_localized(snapshot.application_deadline_end),
                "is_deadline_overridden": snapshot.is_deadline_overridden,
                "days_until_deadline": status.days_until_deadline,
                "is_urgent": status.is_urgent,
                "urgency": status.urgency.value,
            })

        return {
            "days_ahead": within_days,
            "count": len(deadlines),
            "urgent_count": sum(
                1 for d in deadlines if d["days_until_deadline"] <= URGENT_ALERT_DAYS
            ),
            "deadlines": deadlines,
        }

    def get_application_view(self, application_id: str, now: Now) -> Dict[str, Any]:
        """Application with effective deadlines and their status at `now`."""
        application = self._require(application_id)
        deadline_end = application.effective_deadline_end
        status = DeadlineCalculator.status_for(deadline_end, now)
        career_plan = DeadlineCalculator.compute_career_plan_deadline(
            application.plan_start_date, now
        )
        dispatches = self.store.list_dispatches(application_id)

        return {
            "id": application.id,
            "company_name": application.company_name,
            "contact_email": application.contact_email,
            "subsidy_type": application.subsidy_type,
            "status": application.status.value,
            "conversion_date": application.plan_start_date.isoformat(),
            "plan_strategy": application.plan_strategy.value,
            "plan_end_date": application.plan_end_date.isoformat(),
            "six_months_payment_end": application.six_months_payment_end.isoformat(),
            "application_deadline_start": application.effective_deadline_start.isoformat(),
            "application_deadline_end": deadline_end.isoformat(),
            "application_deadline_end_localized": format_localized(deadline_end),
            "is_deadline_overridden": bool(application.is_deadline_overridden),
            "override_reason": application.override_reason,
            "days_until_deadline": status.days_until_deadline,
            "days_until_deadline_text": days_until_text(status.days_until_deadline),
            "is_urgent": status.is_urgent,
            "urgency": status.urgency.value,
            "career_plan_deadline": career_plan.to_dict(),
            "reminders_sent": [
                {"threshold": d.threshold_days, "sent_at": d.sent_at.isoformat()}
                for d in dispatches
            ],
        }
