"""Billing calculations - annualization, due-lists and billing-cycle advance"""

import math
from datetime import date
from typing import Iterable, List, Tuple

from license_ledger.domain.exceptions import ValidationError
from license_ledger.domain.models import AgreementRow, BillingReport, BillingSummary
from license_ledger.utils.date_utils import DateLike, add_days, add_months, to_date

MONTHS_PER_YEAR = 12


def validate_interval(billing_interval_months: int) -> int:
    """Reject zero, negative and non-integer billing intervals"""
    if isinstance(billing_interval_months, bool) or not isinstance(billing_interval_months, int):
        raise ValidationError(
            f"Billing interval must be a whole number of months, got {billing_interval_months!r}"
        )
    if billing_interval_months <= 0:
        raise ValidationError(
            f"Billing interval must be positive, got {billing_interval_months}"
        )
    return billing_interval_months


def validate_amount(amount: float) -> float:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValidationError(f"Amount must be numeric, got {amount!r}")
    if not math.isfinite(amount):
        raise ValidationError(f"Amount must be finite, got {amount}")
    return amount


def annualize(amount: float, billing_interval_months: int) -> float:
    """
    Normalize an agreement amount to a 12-month run-rate.

    annualized = amount * (12 / interval). Fractional results are kept as-is;
    rounding is left to presentation.

    Example:
        600 every 6 months → 1200 per year
        100 every 5 months → 240 per year

    Raises:
        ValidationError: If the interval is not a positive integer or the amount is not finite
    """
    validate_amount(amount)
    validate_interval(billing_interval_months)
    return amount * (MONTHS_PER_YEAR / billing_interval_months)


def advance_billing_date(next_billing_date: DateLike, billing_interval_months: int) -> date:
    """
    Next billing date after an invoicing event.

    Adds the billing interval in calendar months. Days that do not exist in
    the target month clamp to its last day, so 2024-01-31 + 1 → 2024-02-29.
    """
    validate_interval(billing_interval_months)
    return add_months(to_date(next_billing_date), billing_interval_months)


def _due_sort_key(row: AgreementRow) -> Tuple[date, int]:
    return to_date(row.agreement.next_billing_date), row.agreement.id


def build_billing_report(
    rows: Iterable[AgreementRow],
    today: DateLike,
    days_ahead: int = 30,
    currency: str = "NOK",
) -> BillingReport:
    """
    Split active agreements due within the window into overdue and upcoming.

    Rules:
    - Window: next_billing_date <= today + days_ahead (date-only comparison)
    - Overdue: next_billing_date < today; due today counts as upcoming
    - Both lists sorted by next_billing_date, then agreement id
    - Totals are raw agreement amounts, not annualized

    Raises:
        ValidationError: On negative days_ahead, malformed dates or amounts
    """
    if isinstance(days_ahead, bool) or not isinstance(days_ahead, int) or days_ahead < 0:
        raise ValidationError(f"days_ahead must be a non-negative integer, got {days_ahead!r}")

    today = to_date(today)
    horizon = add_days(today, days_ahead)

    overdue: List[AgreementRow] = []
    upcoming: List[AgreementRow] = []
    for row in rows:
        if not row.agreement.is_active:
            continue
        due = to_date(row.agreement.next_billing_date)
        if due > horizon:
            continue
        validate_amount(row.agreement.amount)
        if due < today:
            overdue.append(row)
        else:
            upcoming.append(row)

    overdue.sort(key=_due_sort_key)
    upcoming.sort(key=_due_sort_key)

    summary = BillingSummary(
        overdue_count=len(overdue),
        overdue_total=sum((r.agreement.amount for r in overdue), 0.0),
        upcoming_count=len(upcoming),
        upcoming_total=sum((r.agreement.amount for r in upcoming), 0.0),
        currency=currency,
        period_days=days_ahead,
    )
    return BillingReport(summary=summary, overdue=overdue, upcoming=upcoming)
