"""Reporting engine - revenue aggregation and dashboard statistics"""

import math
from typing import Dict, Iterable, List, Sequence

from license_ledger.domain.billing import annualize, build_billing_report, validate_amount, validate_interval
from license_ledger.domain.exceptions import ComputationError
from license_ledger.domain.models import (
    AgreementRow,
    Category,
    CategoryRevenue,
    Customer,
    CustomerSummary,
    DashboardStats,
    ProductType,
    ProductTypeRevenue,
    ProductTypeSummary,
    RevenueReport,
    RevenueSummary,
)
from license_ledger.utils.date_utils import DateLike

DASHBOARD_BILLING_DAYS = 30


def _active(rows: Iterable[AgreementRow]) -> List[AgreementRow]:
    return [row for row in rows if row.agreement.is_active]


def build_revenue_report(
    rows: Iterable[AgreementRow],
    currency: str = "NOK",
    unknown_category: str = "Unknown",
) -> RevenueReport:
    """
    Aggregate annualized revenue by category and product type.

    Requirements:
    - Only active agreements contribute
    - Agreements without a category are grouped under unknown_category
    - Both breakdowns sorted by total revenue, highest first; ties keep
      the order in which the group was first seen

    Raises:
        ValidationError: If any agreement has a non-positive interval or non-finite amount
        ComputationError: If the category breakdown does not add up to the total
    """
    by_category: Dict[str, CategoryRevenue] = {}
    by_product_type: Dict[str, ProductTypeRevenue] = {}
    total_revenue = 0.0
    total_agreements = 0

    for row in _active(rows):
        annualized = annualize(row.agreement.amount, row.agreement.billing_interval_months)
        total_revenue += annualized
        total_agreements += 1

        category_name = row.category.name if row.category and row.category.name else unknown_category
        product_type_name = row.product_type.name

        category = by_category.setdefault(category_name, CategoryRevenue(name=category_name))
        category.total_revenue += annualized
        category.agreement_count += 1

        product_type = by_product_type.setdefault(
            product_type_name,
            ProductTypeRevenue(name=product_type_name, category=category_name),
        )
        product_type.total_revenue += annualized
        product_type.agreement_count += 1

    # sorted() is stable, also with reverse=True
    categories = sorted(by_category.values(), key=lambda c: c.total_revenue, reverse=True)
    product_types = sorted(by_product_type.values(), key=lambda p: p.total_revenue, reverse=True)

    category_sum = sum(c.total_revenue for c in categories)
    if not math.isclose(category_sum, total_revenue, rel_tol=1e-9, abs_tol=1e-6):
        raise ComputationError(
            f"Category revenue {category_sum} does not match total {total_revenue}"
        )

    return RevenueReport(
        summary=RevenueSummary(
            total_annual_revenue=total_revenue,
            total_agreements=total_agreements,
            currency=currency,
        ),
        by_category=categories,
        by_product_type=product_types,
    )


def total_annual_revenue(rows: Iterable[AgreementRow]) -> float:
    """Sum of annualized amounts over active agreements"""
    return sum(
        (annualize(r.agreement.amount, r.agreement.billing_interval_months) for r in _active(rows)),
        0.0,
    )


def build_dashboard_stats(
    customers: Sequence[Customer],
    product_types: Sequence[ProductType],
    categories: Sequence[Category],
    rows: Sequence[AgreementRow],
    today: DateLike,
    currency: str = "NOK",
) -> DashboardStats:
    """Headline counts, annual revenue and the 30-day billing summary"""
    active_rows = _active(rows)
    billing = build_billing_report(active_rows, today, DASHBOARD_BILLING_DAYS, currency)

    return DashboardStats(
        active_customers=sum(1 for c in customers if c.is_active),
        product_types=len(product_types),
        active_agreements=len(active_rows),
        categories=len(categories),
        total_annual_revenue=total_annual_revenue(active_rows),
        billing=billing.summary,
        currency=currency,
    )


def summarize_customer(rows: Iterable[AgreementRow], currency: str = "NOK") -> CustomerSummary:
    """Monthly and annual value of a customer's active agreements"""
    active_rows = _active(rows)
    monthly = 0.0
    annual = 0.0
    for row in active_rows:
        amount = validate_amount(row.agreement.amount)
        interval = validate_interval(row.agreement.billing_interval_months)
        monthly += amount / interval
        annual += annualize(amount, interval)

    return CustomerSummary(
        total_agreements=len(active_rows),
        total_monthly_value=monthly,
        total_annual_value=annual,
        currency=currency,
    )


def summarize_product_type(rows: Iterable[AgreementRow], currency: str = "NOK") -> ProductTypeSummary:
    """
    Active agreement count and raw amount total for one product type.

    The total is the sum of per-invoice amounts, as shown in product listings,
    not an annualized figure.
    """
    active_rows = _active(rows)
    return ProductTypeSummary(
        customer_count=len(active_rows),
        total_amount=sum((validate_amount(r.agreement.amount) for r in active_rows), 0.0),
        currency=currency,
    )
