"""Unit tests for revenue aggregation and dashboard statistics"""

import pytest
from datetime import date
from license_ledger.domain.exceptions import ValidationError
from license_ledger.domain.models import Category, Customer, ProductType
from license_ledger.domain.reporting import (
    build_dashboard_stats,
    build_revenue_report,
    summarize_customer,
    summarize_product_type,
)

TODAY = date(2024, 6, 15)


def test_revenue_report_end_to_end_example(make_row):
    """1200/12 months + 600/6 months = 2400 per year"""
    rows = [
        make_row(agreement_id=1, amount=1200.0, interval=12),
        make_row(agreement_id=2, amount=600.0, interval=6),
    ]

    report = build_revenue_report(rows)

    assert report.summary.total_annual_revenue == 2400.0
    assert report.summary.total_agreements == 2
    assert report.summary.currency == "NOK"


def test_revenue_report_groups_by_category_and_product_type(make_row):
    rows = [
        make_row(agreement_id=1, amount=100.0, interval=1, product_type="Cloud", category="Produkt"),
        make_row(agreement_id=2, amount=500.0, interval=12, product_type="Office", category="Lisens"),
        make_row(agreement_id=3, amount=300.0, interval=3, product_type="Cloud", category="Produkt"),
    ]

    report = build_revenue_report(rows)

    assert [(c.name, c.total_revenue, c.agreement_count) for c in report.by_category] == [
        ("Produkt", 2400.0, 2),
        ("Lisens", 500.0, 1),
    ]
    assert [(p.name, p.category, p.total_revenue) for p in report.by_product_type] == [
        ("Cloud", "Produkt", 2400.0),
        ("Office", "Lisens", 500.0),
    ]


def test_revenue_report_category_totals_add_up(make_row):
    rows = [
        make_row(agreement_id=i, amount=100.0 + i * 17.3, interval=interval, category=category)
        for i, (interval, category) in enumerate(
            [(1, "A"), (5, "B"), (7, "C"), (12, "A"), (3, "B"), (11, None)]
        )
    ]

    report = build_revenue_report(rows)

    assert sum(c.total_revenue for c in report.by_category) == pytest.approx(
        report.summary.total_annual_revenue
    )
    assert sum(p.total_revenue for p in report.by_product_type) == pytest.approx(
        report.summary.total_annual_revenue
    )


def test_revenue_report_ties_keep_encounter_order(make_row):
    """Equal totals stay in the order the categories were first seen"""
    rows = [
        make_row(agreement_id=1, amount=1000.0, category="Zulu", product_type="Z"),
        make_row(agreement_id=2, amount=1000.0, category="Alpha", product_type="A"),
        make_row(agreement_id=3, amount=5000.0, category="Mike", product_type="M"),
    ]

    report = build_revenue_report(rows)

    assert [c.name for c in report.by_category] == ["Mike", "Zulu", "Alpha"]
    assert [p.name for p in report.by_product_type] == ["M", "Z", "A"]


def test_revenue_report_missing_category_uses_sentinel(make_row):
    report = build_revenue_report([make_row(category=None)], unknown_category="Ukjent")

    assert report.by_category[0].name == "Ukjent"
    assert report.by_product_type[0].category == "Ukjent"


def test_revenue_report_default_sentinel(make_row):
    report = build_revenue_report([make_row(category=None)])
    assert report.by_category[0].name == "Unknown"


def test_revenue_report_ignores_inactive(make_row):
    rows = [
        make_row(agreement_id=1, amount=1200.0),
        make_row(agreement_id=2, amount=9999.0, is_active=False),
    ]

    report = build_revenue_report(rows)

    assert report.summary.total_annual_revenue == 1200.0
    assert report.summary.total_agreements == 1


def test_revenue_report_empty():
    report = build_revenue_report([])

    assert report.summary.total_annual_revenue == 0.0
    assert report.summary.total_agreements == 0
    assert report.by_category == []
    assert report.by_product_type == []


def test_revenue_report_rejects_invalid_interval(make_row):
    with pytest.raises(ValidationError):
        build_revenue_report([make_row(interval=0)])


def test_dashboard_stats(make_row):
    customers = [Customer(id=1, name="Acme AS"), Customer(id=2, name="Gone AS", is_active=False)]
    product_types = [ProductType(id=1, name="Office", category_id=1), ProductType(id=2, name="Cloud", category_id=2)]
    categories = [Category(id=1, name="Lisens"), Category(id=2, name="Produkt")]
    rows = [
        make_row(agreement_id=1, amount=1200.0, interval=12, next_billing=date(2024, 7, 1)),
        make_row(agreement_id=2, amount=600.0, interval=6, next_billing=date(2024, 6, 1)),
        make_row(agreement_id=3, amount=50.0, interval=1, next_billing=date(2024, 12, 1)),
        make_row(agreement_id=4, amount=70.0, interval=1, next_billing=date(2024, 6, 1), is_active=False),
    ]

    stats = build_dashboard_stats(customers, product_types, categories, rows, TODAY)

    assert stats.active_customers == 1
    assert stats.product_types == 2
    assert stats.categories == 2
    assert stats.active_agreements == 3
    assert stats.total_annual_revenue == 1200.0 + 1200.0 + 600.0
    assert stats.billing.overdue_count == 1
    assert stats.billing.overdue_total == 600.0
    assert stats.billing.upcoming_count == 1
    assert stats.billing.upcoming_total == 1200.0
    assert stats.billing.period_days == 30


def test_summarize_customer(make_row):
    rows = [
        make_row(agreement_id=1, amount=1200.0, interval=12),
        make_row(agreement_id=2, amount=300.0, interval=3),
        make_row(agreement_id=3, amount=5000.0, interval=1, is_active=False),
    ]

    summary = summarize_customer(rows)

    assert summary.total_agreements == 2
    assert summary.total_monthly_value == pytest.approx(100.0 + 100.0)
    assert summary.total_annual_value == pytest.approx(1200.0 + 1200.0)


def test_summarize_product_type_uses_raw_amounts(make_row):
    rows = [
        make_row(agreement_id=1, amount=300.0, interval=3),
        make_row(agreement_id=2, amount=200.0, interval=1),
        make_row(agreement_id=3, amount=999.0, is_active=False),
    ]

    summary = summarize_product_type(rows)

    assert summary.customer_count == 2
    assert summary.total_amount == 500.0
