"""
Calendar arithmetic and formatting helpers.

Month and year additions use relativedelta, so month-end overflow clamps
to the last valid day (2024-01-31 + 1 month = 2024-02-29).
"""
import math
from datetime import date, datetime, time, timedelta
from typing import Any, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from ..errors import InvalidInputError


SECONDS_PER_DAY = 24 * 60 * 60

DateLike = Union[date, datetime, str]


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def add_months(d: date, n: int) -> date:
    return d + relativedelta(months=n)


def add_years(d: date, n: int) -> date:
    return d + relativedelta(years=n)


def format_iso(d: date) -> str:
    """YYYY-MM-DD"""
    return d.strftime("%Y-%m-%d")


def format_localized(d: date) -> str:
    """Japanese calendar notation, e.g. 2024年8月5日."""
    return f"{d.year}年{d.month}月{d.day}日"


def is_valid_date(value: Any) -> bool:
    """True only for strings that parse into a real calendar date."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        isoparse(value.strip())
    except (ValueError, OverflowError):
        return False
    return True


def parse_date(value: DateLike) -> date:
    """
    Coerce a date, datetime or ISO string into a date.

    Raises:
        InvalidInputError: value is not a real calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_valid_date(value):
        raise InvalidInputError(f"Invalid date: {value!r}")
    return isoparse(value.strip()).date()


def days_until(target: date, now: Union[date, datetime]) -> int:
    """
    Whole days from `now` until local midnight of `target`, rounded up.

    A deadline twelve hours away counts as one day remaining.
    """
    if isinstance(now, datetime):
        target_at = datetime.combine(target, time.min, tzinfo=now.tzinfo)
        reference = now
    else:
        target_at = datetime.combine(target, time.min)
        reference = datetime.combine(now, time.min)

    seconds = (target_at - reference).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def days_until_text(days: int) -> str:
    """Human readable remaining time for a day count."""
    if days < 0:
        return f"{abs(days)} days overdue"
    if days == 0:
        return "Due today"
    if days == 1:
        return "1 day left"
    if days <= 30:
        return f"{days} days left"
    return f"About {days // 7} weeks left"
