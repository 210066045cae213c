"""
Subsidy Deadline Engine - SQLAlchemy ORM Models
Application records and reminder dispatch history
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, String, Integer, DateTime, Text, ForeignKey, Enum as SQLEnum, Boolean, Date,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from ..database import Base
from .deadlines import PlanStrategy


# =============================================================================
# ENUMS
# =============================================================================

class ApplicationStatus(str, Enum):
    """Lifecycle of a subsidy application."""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class SubsidyType(str, Enum):
    CAREER_UP = "career_up"
    WORK_LIFE_BALANCE = "work_life_balance"
    HUMAN_RESOURCE_SUPPORT = "human_resource_support"


# =============================================================================
# APPLICATIONS
# =============================================================================

class ApplicationDB(Base):
    """Subsidy application with its anchor date and cached deadlines."""
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True)  # UUID
    company_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=True)
    subsidy_type = Column(String(50), default=SubsidyType.CAREER_UP.value)
    status = Column(SQLEnum(ApplicationStatus), default=ApplicationStatus.DRAFT, nullable=False)

    # Anchor event: employment conversion date
    plan_start_date = Column(Date, nullable=False)
    plan_strategy = Column(SQLEnum(PlanStrategy), default=PlanStrategy.LONG_HORIZON, nullable=False)
    explicit_plan_end_date = Column(Date, nullable=True)  # CAREER_UP_SIX_MONTH only

    # Derived deadlines (cache, recomputed whenever the anchor changes)
    plan_end_date = Column(Date, nullable=False)
    six_months_payment_end = Column(Date, nullable=False)
    application_deadline_start = Column(Date, nullable=False)
    application_deadline_end = Column(Date, nullable=False)
    career_plan_deadline = Column(Date, nullable=False)

    # Admin override of the application window
    is_deadline_overridden = Column(Boolean, default=False, nullable=False)
    override_deadline_start = Column(Date, nullable=True)
    override_deadline_end = Column(Date, nullable=True)
    override_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Dispatch history lives and dies with the application
    reminder_dispatches = relationship(
        "ReminderDispatchDB",
        back_populates="application",
        cascade="all, delete-orphan",
    )

    @property
    def effective_deadline_start(self):
        if self.is_deadline_overridden and self.override_deadline_start:
            return self.override_deadline_start
        return self.application_deadline_start

    @property
    def effective_deadline_end(self):
        if self.is_deadline_overridden and self.override_deadline_end:
            return self.override_deadline_end
        return self.application_deadline_end


# =============================================================================
# REMINDER DISPATCH HISTORY
# =============================================================================

class ReminderDispatchDB(Base):
    """
    One successful threshold reminder for one application.

    Written once after delivery and never updated. The unique constraint is
    the create-if-absent guard for concurrent reminder runs.
    """
    __tablename__ = "reminder_dispatches"
    __table_args__ = (
        UniqueConstraint("application_id", "threshold_days", name="uq_dispatch_application_threshold"),
    )

    id = Column(String(36), primary_key=True)  # UUID
    application_id = Column(
        String(36), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    threshold_days = Column(Integer, nullable=False)  # 7, 3 or 1
    sent_at = Column(DateTime, nullable=False)

    application = relationship("ApplicationDB", back_populates="reminder_dispatches")
