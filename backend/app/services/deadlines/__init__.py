"""
Deadline Services

Pure date arithmetic, deadline derivation and input validation for
Career-Up subsidy applications.
"""

from .calculator import DeadlineCalculator, classify_urgency, is_urgent
from .date_utils import (
    add_days,
    add_months,
    add_years,
    days_until,
    days_until_text,
    format_iso,
    format_localized,
    is_valid_date,
    parse_date,
)
from .validator import validate_anchor, validate_override

__all__ = [
    'DeadlineCalculator',
    'classify_urgency',
    'is_urgent',
    'add_days',
    'add_months',
    'add_years',
    'days_until',
    'days_until_text',
    'format_iso',
    'format_localized',
    'is_valid_date',
    'parse_date',
    'validate_anchor',
    'validate_override',
]
