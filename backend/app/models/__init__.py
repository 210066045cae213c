"""Subsidy Deadline Engine - Data Models"""
from .deadlines import (
    # Enums
    PlanStrategy, UrgencyLevel,
    # Calculator output
    DeadlineStatus, DeadlineCalculation, CareerPlanDeadline, ValidationResult,
    # Reminder scheduling
    ApplicationSnapshot, ReminderAction, ReminderMessage, ReminderFailure,
    ReminderRunResult, ManualReminderResult,
)

__all__ = [
    "PlanStrategy", "UrgencyLevel",
    "DeadlineStatus", "DeadlineCalculation", "CareerPlanDeadline", "ValidationResult",
    "ApplicationSnapshot", "ReminderAction", "ReminderMessage", "ReminderFailure",
    "ReminderRunResult", "ManualReminderResult",
]
