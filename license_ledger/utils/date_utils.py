"""Date manipulation utilities"""

from datetime import date, datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from license_ledger.domain.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def to_date(value: DateLike) -> date:
    """
    Normalize a date, datetime or ISO string to a date-only value.

    Datetimes are truncated (time of day never affects billing comparisons).
    Strings may be "YYYY-MM-DD" or a full ISO timestamp; anything after the
    date must be a valid time.

    Raises:
        ValidationError: On malformed strings or unsupported types
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError as e:
            raise ValidationError(f"Malformed date: {value!r}") from e
    raise ValidationError(f"Expected a date, got {type(value).__name__}")


def add_days(from_date: date, days: int) -> date:
    """Add calendar days to a date"""
    return from_date + timedelta(days=days)


def add_months(from_date: date, months: int) -> date:
    """
    Add calendar months, clamping the day to the end of the target month.

    Example:
        2024-01-31 + 1 month → 2024-02-29 (leap year)
        2023-01-31 + 1 month → 2023-02-28
        2024-05-31 + 1 month → 2024-06-30
    """
    return from_date + relativedelta(months=months)
