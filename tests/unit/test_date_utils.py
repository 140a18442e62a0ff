"""Unit tests for date normalization and calendar-month arithmetic"""

import pytest
from datetime import date, datetime, timezone
from license_ledger.domain.exceptions import ValidationError
from license_ledger.utils.date_utils import add_days, add_months, to_date


def test_to_date_accepts_dates_datetimes_and_strings():
    assert to_date(date(2024, 6, 15)) == date(2024, 6, 15)
    assert to_date(datetime(2024, 6, 15, 23, 59, tzinfo=timezone.utc)) == date(2024, 6, 15)
    assert to_date("2024-06-15") == date(2024, 6, 15)
    assert to_date("2024-06-15T10:30:00Z") == date(2024, 6, 15)


@pytest.mark.parametrize(
    "value", ["", "not a date", "2024-13-01", "2024-02-30", "2024-06-15xyz", "2024-06-15 garbage", 20240615, None]
)
def test_to_date_rejects_malformed_input(value):
    with pytest.raises(ValidationError):
        to_date(value)


def test_add_days_crosses_month():
    assert add_days(date(2024, 6, 15), 30) == date(2024, 7, 15)
    assert add_days(date(2024, 6, 15), 0) == date(2024, 6, 15)


def test_add_months_rolls_over_year():
    assert add_months(date(2024, 11, 15), 2) == date(2025, 1, 15)
    assert add_months(date(2024, 12, 31), 1) == date(2025, 1, 31)
    assert add_months(date(2024, 1, 15), 24) == date(2026, 1, 15)


def test_add_months_clamps_short_months():
    """Days past the end of the target month land on its last day"""
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 5, 31), 1) == date(2024, 6, 30)
    assert add_months(date(2024, 8, 31), 1) == date(2024, 9, 30)


def test_add_months_does_not_carry_clamp_forward():
    """Each advance clamps independently from its own start date"""
    feb = add_months(date(2024, 1, 31), 1)
    assert add_months(feb, 1) == date(2024, 3, 29)
    assert add_months(date(2024, 1, 31), 2) == date(2024, 3, 31)


def test_to_date_accepts_timestamp_with_offset():
    assert to_date("2024-06-15 23:30:00+02:00") == date(2024, 6, 15)
