"""
Input acceptance rules for conversion dates and deadline overrides.
"""
from datetime import date, datetime
from typing import Any, Optional, Union

from ...config import current_time
from ...models.deadlines import ValidationResult
from ..errors import InvalidInputError
from .date_utils import add_months, add_years, is_valid_date, parse_date


MAX_MONTHS_AHEAD = 1
MAX_YEARS_BACK = 2


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def validate_anchor(anchor: Any, now: Optional[Union[date, datetime]] = None) -> ValidationResult:
    """
    Check that a conversion date can be registered.

    The accepted window is [now - 2 years, now + 1 month], both bounds
    inclusive and recomputed on every call.
    """
    if isinstance(anchor, (date, datetime)):
        anchor_date = _as_date(anchor)
    elif is_valid_date(anchor):
        anchor_date = parse_date(anchor)
    else:
        return ValidationResult(False, "Enter a valid date")

    today = _as_date(now if now is not None else current_time())

    if anchor_date > add_months(today, MAX_MONTHS_AHEAD):
        return ValidationResult(
            False, "The conversion date must be no more than 1 month in the future"
        )

    if anchor_date < add_years(today, -MAX_YEARS_BACK):
        return ValidationResult(
            False, "The conversion date must be within the last 2 years"
        )

    return ValidationResult(True)


def validate_override(start: Any, end: Any) -> ValidationResult:
    """An overridden application window must be a real, non-empty range."""
    try:
        start_date = parse_date(start)
        end_date = parse_date(end)
    except InvalidInputError:
        return ValidationResult(False, "Enter a valid date")

    if start_date >= end_date:
        return ValidationResult(False, "The end date must be after the start date")

    return ValidationResult(True)
