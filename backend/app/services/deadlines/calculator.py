"""
Deadline Calculator

Derives every Career-Up subsidy deadline from the employment conversion date.

Key behaviors:
- Plan end date follows an explicitly selected plan strategy
- Six months of post-conversion wages are assumed paid 7 months after conversion
- The application window opens the day after that and stays open 2 months
- The career plan must be filed the day before conversion
- Urgency is reported both as a two-week flag and as a five-band level

The calculator is a pure function of (anchor, now). It never reads or writes
override state; overridden deadlines are substituted by the application store.
"""
from datetime import date, datetime
from typing import Optional, Union

from ...models.deadlines import (
    CareerPlanDeadline, DeadlineCalculation, DeadlineStatus, PlanStrategy, UrgencyLevel,
)
from ..errors import InvalidInputError
from .date_utils import DateLike, add_days, add_months, add_years, days_until, parse_date


# =============================================================================
# DEADLINE CONFIGURATION
# =============================================================================

LONG_HORIZON_PLAN_YEARS = 5
CAREER_UP_PLAN_MONTHS = 6
WAGE_PAYMENT_MONTHS = 7          # conversion -> six months of wages paid
APPLICATION_WINDOW_MONTHS = 2    # window start -> window end
URGENT_WITHIN_DAYS = 14

# Upper bound (inclusive) of each band; anything above CAUTION is NORMAL
URGENCY_BANDS = (
    (7, UrgencyLevel.CRITICAL),
    (14, UrgencyLevel.WARNING),
    (30, UrgencyLevel.CAUTION),
)

Now = Union[date, datetime]


def is_urgent(days_until_deadline: int) -> bool:
    """Two-week rule. Overdue deadlines are not urgent."""
    return 0 <= days_until_deadline <= URGENT_WITHIN_DAYS


def classify_urgency(days_until_deadline: int) -> UrgencyLevel:
    if days_until_deadline < 0:
        return UrgencyLevel.OVERDUE
    for upper, level in URGENCY_BANDS:
        if days_until_deadline <= upper:
            return level
    return UrgencyLevel.NORMAL


# =============================================================================
# DEADLINE CALCULATOR
# =============================================================================

class DeadlineCalculator:
    """
    Stateless deadline derivation.

    Usage:
        calc = DeadlineCalculator.compute("2024-01-15", now)
        calc.application_deadline_end  # date(2024, 10, 16)
    """

    @staticmethod
    def plan_end_date(
        anchor: date,
        strategy: PlanStrategy,
        explicit_end: Optional[date] = None,
    ) -> date:
        if strategy == PlanStrategy.LONG_HORIZON:
            if explicit_end is not None:
                raise InvalidInputError(
                    "An explicit plan end date is only accepted with the CAREER_UP_SIX_MONTH strategy"
                )
            return add_years(anchor, LONG_HORIZON_PLAN_YEARS)
        if explicit_end is not None:
            return explicit_end
        return add_months(anchor, CAREER_UP_PLAN_MONTHS)

    @staticmethod
    def status_for(deadline_end: date, now: Now) -> DeadlineStatus:
        """Day count and urgency for an already known deadline end."""
        days = days_until(deadline_end, now)
        return DeadlineStatus(
            days_until_deadline=days,
            is_urgent=is_urgent(days),
            urgency=classify_urgency(days),
        )

    @classmethod
    def compute(
        cls,
        anchor: DateLike,
        now: Now,
        strategy: PlanStrategy = PlanStrategy.LONG_HORIZON,
        plan_end_date: Optional[DateLike] = None,
    ) -> DeadlineCalculation:
        """
        Calculate all deadlines for a conversion date.

        Args:
            anchor: Employment conversion date
            now: Evaluation instant, used only for the day count
            strategy: Plan end derivation rule
            plan_end_date: Explicit plan end (CAREER_UP_SIX_MONTH only)

        Raises:
            InvalidInputError: anchor or plan_end_date is not a valid date
        """
        start = parse_date(anchor)
        explicit_end = parse_date(plan_end_date) if plan_end_date is not None else None

        six_months_payment_end = add_months(start, WAGE_PAYMENT_MONTHS)
        application_deadline_start = add_days(six_months_payment_end, 1)
        application_deadline_end = add_months(application_deadline_start, APPLICATION_WINDOW_MONTHS)

        status = cls.status_for(application_deadline_end, now)

        return DeadlineCalculation(
            plan_start_date=start,
            plan_end_date=cls.plan_end_date(start, strategy, explicit_end),
            six_months_payment_end=six_months_payment_end,
            application_deadline_start=application_deadline_start,
            application_deadline_end=application_deadline_end,
            career_plan_deadline=add_days(start, -1),
            strategy=strategy,
            days_until_deadline=status.days_until_deadline,
            is_urgent=status.is_urgent,
            urgency=status.urgency,
        )

    @staticmethod
    def compute_career_plan_deadline(anchor: DateLike, now: Now) -> CareerPlanDeadline:
        """The career plan is due the day before conversion."""
        deadline_date = add_days(parse_date(anchor), -1)
        days = days_until(deadline_date, now)
        return CareerPlanDeadline(
            deadline_date=deadline_date,
            is_overdue=days < 0,
            days_until_deadline=days,
        )
