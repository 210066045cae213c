"""
Subsidy Deadline Engine - Deadline and Reminder Models

Plain value objects passed between the calculator, the application store
and the reminder scheduler. None of them touch the database.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# =============================================================================
# ENUMS
# =============================================================================

class PlanStrategy(str, Enum):
    """How the plan end date is derived from the conversion date."""
    LONG_HORIZON = "LONG_HORIZON"                  # conversion + 5 years
    CAREER_UP_SIX_MONTH = "CAREER_UP_SIX_MONTH"    # conversion + 6 months, or explicit end


class UrgencyLevel(str, Enum):
    """Bands of days remaining until the application deadline."""
    OVERDUE = "overdue"     # < 0
    CRITICAL = "critical"   # 0-7
    WARNING = "warning"     # 8-14
    CAUTION = "caution"     # 15-30
    NORMAL = "normal"       # > 30


# =============================================================================
# CALCULATOR OUTPUT
# =============================================================================

@dataclass(frozen=True)
class DeadlineStatus:
    """Day count and urgency for one deadline at one instant."""
    days_until_deadline: int
    is_urgent: bool
    urgency: UrgencyLevel


@dataclass(frozen=True)
class DeadlineCalculation:
    """Every date derived from a conversion date, plus the status at `now`."""
    plan_start_date: date
    plan_end_date: date
    six_months_payment_end: date
    application_deadline_start: date
    application_deadline_end: date
    career_plan_deadline: date
    strategy: PlanStrategy
    days_until_deadline: int
    is_urgent: bool
    urgency: UrgencyLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_start_date": self.plan_start_date.isoformat(),
            "plan_end_date": self.plan_end_date.isoformat(),
            "six_months_payment_end": self.six_months_payment_end.isoformat(),
            "application_deadline_start": self.application_deadline_start.isoformat(),
            "application_deadline_end": self.application_deadline_end.isoformat(),
            "career_plan_deadline": self.career_plan_deadline.isoformat(),
            "strategy": self.strategy.value,
            "days_until_deadline": self.days_until_deadline,
            "is_urgent": self.is_urgent,
            "urgency": self.urgency.value,
        }


@dataclass(frozen=True)
class CareerPlanDeadline:
    """The plan must be filed the day before the conversion date."""
    deadline_date: date
    is_overdue: bool
    days_until_deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deadline_date": self.deadline_date.isoformat(),
            "is_overdue": self.is_overdue,
            "days_until_deadline": self.days_until_deadline,
        }


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"is_valid": self.is_valid}
        if self.error_message:
            result["error_message"] = self.error_message
        return result


# =============================================================================
# REMINDER SCHEDULING
# =============================================================================

@dataclass(frozen=True)
class ApplicationSnapshot:
    """
    Application as seen by the reminder scheduler.

    Deadline values are already the effective ones: when an admin override
    is active the store substitutes it before building the snapshot.
    """
    application_id: str
    company_name: str
    contact_email: Optional[str]
    subsidy_type: str
    application_deadline_start: date
    application_deadline_end: date
    is_deadline_overridden: bool = False


@dataclass(frozen=True)
class ReminderAction:
    application_id: str
    threshold: int


@dataclass(frozen=True)
class ReminderMessage:
    recipient: str
    subject: str
    body: str
    application_id: str
    html_body: Optional[str] = None


@dataclass
class ReminderFailure:
    kind: str
    error: str
    application_id: Optional[str] = None
    threshold: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_id": self.application_id,
            "threshold": self.threshold,
            "kind": self.kind,
            "error": self.error,
        }


@dataclass
class ReminderRunResult:
    """Outcome of one evaluation pass over all applications."""
    run_at: datetime
    evaluated: int = 0
    sent: List[ReminderAction] = field(default_factory=list)
    # Delivered, but another run had already recorded the same threshold
    duplicates: List[ReminderAction] = field(default_factory=list)
    failures: List[ReminderFailure] = field(default_factory=list)
    completed: bool = True

    @property
    def success(self) -> bool:
        return self.completed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "run_at": self.run_at.isoformat(),
            "evaluated": self.evaluated,
            "sent": len(self.sent),
            "failed": len(self.failures),
            "duplicates": len(self.duplicates),
            "reminders": [
                {"application_id": a.application_id, "threshold": a.threshold}
                for a in self.sent
            ],
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class ManualReminderResult:
    application_id: str
    success: bool
    recipient: Optional[str] = None
    days_until_deadline: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": self.success,
            "application_id": self.application_id,
        }
        if self.success:
            result["recipient"] = self.recipient
            result["days_until_deadline"] = self.days_until_deadline
        else:
            result["error"] = self.error
            result["error_kind"] = self.error_kind
        return result
