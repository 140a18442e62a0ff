"""Unit tests for annualization, billing due-lists and billing-cycle advance"""

import math
import pytest
from datetime import date, datetime
from license_ledger.domain.billing import advance_billing_date, annualize, build_billing_report
from license_ledger.domain.exceptions import ValidationError

TODAY = date(2024, 6, 15)


@pytest.mark.parametrize("amount", [0.0, 1.0, 999.5, 1200.0, 123456.78])
def test_annualize_yearly_interval_is_identity(amount):
    """12-month agreements are already annual"""
    assert annualize(amount, 12) == amount


@pytest.mark.parametrize("amount", [1.0, 600.0, 999.5])
def test_annualize_half_year_doubles(amount):
    assert annualize(amount, 6) == 2 * amount


def test_annualize_monthly_and_quarterly():
    assert annualize(100.0, 1) == 1200.0
    assert annualize(250.0, 3) == 1000.0


def test_annualize_non_divisor_interval_keeps_fraction():
    """Intervals that do not divide 12 are not rounded"""
    assert annualize(100.0, 5) == pytest.approx(240.0)
    assert annualize(100.0, 7) == pytest.approx(100.0 * 12 / 7)
    assert annualize(100.0, 24) == 50.0


@pytest.mark.parametrize("interval", [0, -1, -12])
def test_annualize_rejects_non_positive_interval(interval):
    with pytest.raises(ValidationError):
        annualize(100.0, interval)


@pytest.mark.parametrize("interval", [1.5, "12", None, True])
def test_annualize_rejects_non_integer_interval(interval):
    with pytest.raises(ValidationError):
        annualize(100.0, interval)


@pytest.mark.parametrize("amount", [math.nan, math.inf, -math.inf])
def test_annualize_rejects_non_finite_amount(amount):
    with pytest.raises(ValidationError):
        annualize(amount, 12)


def test_billing_report_due_today_is_upcoming(make_row):
    """Boundary: due today is not overdue"""
    row = make_row(next_billing=date(2024, 6, 15))
    report = build_billing_report([row], TODAY)

    assert report.upcoming == [row]
    assert report.overdue == []


def test_billing_report_yesterday_is_overdue_with_raw_amount(make_row):
    """Overdue total is the invoice amount, not the annualized amount"""
    row = make_row(amount=600.0, interval=6, next_billing=date(2024, 6, 14))
    report = build_billing_report([row], TODAY)

    assert report.overdue == [row]
    assert report.summary.overdue_count == 1
    assert report.summary.overdue_total == 600.0
    assert report.summary.upcoming_count == 0
    assert report.summary.upcoming_total == 0.0


def test_billing_report_end_to_end_example(make_row):
    yearly = make_row(agreement_id=1, amount=1200.0, interval=12, next_billing="2024-07-01")
    half_year = make_row(agreement_id=2, amount=600.0, interval=6, next_billing="2024-06-01")

    report = build_billing_report([yearly, half_year], "2024-06-15", days_ahead=30)

    assert report.overdue == [half_year]
    assert report.upcoming == [yearly]
    assert report.summary.overdue_total == 600.0
    assert report.summary.upcoming_total == 1200.0
    assert report.summary.period_days == 30
    assert report.summary.currency == "NOK"


def test_billing_report_excludes_beyond_horizon(make_row):
    inside = make_row(agreement_id=1, next_billing=date(2024, 7, 15))  # today + 30
    outside = make_row(agreement_id=2, next_billing=date(2024, 7, 16))

    report = build_billing_report([inside, outside], TODAY, days_ahead=30)

    assert report.upcoming == [inside]
    assert report.summary.upcoming_count == 1


def test_billing_report_zero_days_ahead(make_row):
    """Horizon equals today: only today and overdue agreements qualify"""
    due_today = make_row(agreement_id=1, next_billing=TODAY)
    tomorrow = make_row(agreement_id=2, next_billing=date(2024, 6, 16))
    overdue = make_row(agreement_id=3, next_billing=date(2024, 1, 1))

    report = build_billing_report([due_today, tomorrow, overdue], TODAY, days_ahead=0)

    assert report.upcoming == [due_today]
    assert report.overdue == [overdue]


def test_billing_report_sorted_by_date_then_id(make_row):
    a = make_row(agreement_id=5, next_billing=date(2024, 6, 20))
    b = make_row(agreement_id=2, next_billing=date(2024, 6, 20))
    c = make_row(agreement_id=9, next_billing=date(2024, 6, 16))
    d = make_row(agreement_id=4, next_billing=date(2024, 6, 1))
    e = make_row(agreement_id=1, next_billing=date(2024, 6, 10))

    report = build_billing_report([a, b, c, d, e], TODAY)

    assert [r.agreement.id for r in report.upcoming] == [9, 2, 5]
    assert [r.agreement.id for r in report.overdue] == [4, 1]


def test_billing_report_ignores_time_of_day(make_row):
    """A datetime late on the due date still counts as due today"""
    row = make_row(next_billing=datetime(2024, 6, 15, 23, 59))
    report = build_billing_report([row], datetime(2024, 6, 15, 0, 1))

    assert report.upcoming == [row]
    assert report.overdue == []


def test_billing_report_skips_inactive(make_row):
    active = make_row(agreement_id=1, amount=100.0, next_billing=date(2024, 6, 1))
    inactive = make_row(agreement_id=2, amount=900.0, next_billing=date(2024, 6, 1), is_active=False)

    report = build_billing_report([active, inactive], TODAY)

    assert report.overdue == [active]
    assert report.summary.overdue_total == 100.0


def test_billing_report_rejects_negative_days(make_row):
    with pytest.raises(ValidationError):
        build_billing_report([make_row()], TODAY, days_ahead=-1)


def test_billing_report_rejects_malformed_date(make_row):
    with pytest.raises(ValidationError):
        build_billing_report([make_row(next_billing="15/06/2024")], TODAY)


def test_billing_report_empty_input():
    report = build_billing_report([], TODAY)

    assert report.overdue == []
    assert report.upcoming == []
    assert report.summary.overdue_total == 0.0
    assert report.summary.upcoming_total == 0.0


def test_advance_billing_date_clamps_to_leap_day():
    """Clamp-to-end-of-month: Jan 31 + 1 month lands on Feb 29 in a leap year"""
    assert advance_billing_date(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert advance_billing_date("2024-01-31", 1) == date(2024, 2, 29)


def test_advance_billing_date_clamps_in_common_year():
    assert advance_billing_date(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert advance_billing_date(date(2024, 11, 30), 3) == date(2025, 2, 28)


def test_advance_billing_date_regular_intervals():
    assert advance_billing_date(date(2024, 3, 15), 1) == date(2024, 4, 15)
    assert advance_billing_date(date(2024, 3, 15), 12) == date(2025, 3, 15)
    assert advance_billing_date(date(2024, 10, 1), 6) == date(2025, 4, 1)


def test_advance_billing_date_rejects_invalid_interval():
    with pytest.raises(ValidationError):
        advance_billing_date(date(2024, 1, 31), 0)
