"""GET /v1/reports/* - revenue, billing, dashboard and CSV export"""

import time
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from starlette.responses import Response
from sqlalchemy.orm import Session

from license_ledger.api.v1.schemas import (
    AgreementResponse,
    BillingReportResponse,
    BillingSummarySchema,
    DashboardResponse,
    RevenueReportResponse,
)
from license_ledger.api.dependencies import get_request_id, get_today
from license_ledger.config import settings
from license_ledger.domain.billing import build_billing_report
from license_ledger.domain.exceptions import ValidationError
from license_ledger.domain.reporting import build_dashboard_stats, build_revenue_report
from license_ledger.infrastructure.database.session import get_db
from license_ledger.infrastructure.database.repositories import (
    AgreementRepository,
    CategoryRepository,
    CustomerRepository,
    ProductTypeRepository,
    to_category,
    to_customer,
    to_product_type,
)
from license_ledger.infrastructure.export import export_agreements_csv, export_customers_csv
from license_ledger.infrastructure.observability.logging import log_report
from license_ledger.infrastructure.observability.metrics import (
    record_billing_due,
    record_report,
    report_failure_counter,
)

router = APIRouter()


def _rejected(report: str, error: ValidationError, request_id: str) -> HTTPException:
    report_failure_counter.labels(report=report).inc()
    logging.warning(f"Invalid agreement data in {report} report: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=422, detail=str(error))


@router.get("/reports/revenue", response_model=RevenueReportResponse)
def revenue_report(request: Request, db: Session = Depends(get_db)):
    """
    Annualized revenue of active agreements by category and product type.

    Both breakdowns are ordered by revenue, highest first.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    rows = AgreementRepository(db).list_rows(active_only=True)
    try:
        report = build_revenue_report(rows, settings.currency, settings.unknown_category_label)
    except ValidationError as e:
        raise _rejected("revenue", e, request_id)

    duration = time.time() - start_time
    record_report("revenue", duration)
    log_report(request_id, "revenue", report.summary.total_agreements, duration * 1000)

    return RevenueReportResponse.model_validate(report)


@router.get("/reports/billing", response_model=BillingReportResponse)
def billing_report(
    request: Request,
    days: int = Query(settings.billing_days_ahead, ge=0, description="Days ahead to include"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Active agreements due within the next `days` days, split into overdue and upcoming.

    Totals are the raw invoice amounts due, not annualized.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    rows = AgreementRepository(db).list_rows(active_only=True)
    try:
        report = build_billing_report(rows, today, days, settings.currency)
    except ValidationError as e:
        raise _rejected("billing", e, request_id)

    duration = time.time() - start_time
    record_report("billing", duration)
    record_billing_due(report.summary.overdue_count, report.summary.upcoming_count)
    log_report(
        request_id,
        "billing",
        report.summary.overdue_count + report.summary.upcoming_count,
        duration * 1000,
    )

    return BillingReportResponse(
        summary=BillingSummarySchema.model_validate(report.summary),
        overdue=[AgreementResponse.from_row(r) for r in report.overdue],
        upcoming=[AgreementResponse.from_row(r) for r in report.upcoming],
    )


@router.get("/reports/dashboard", response_model=DashboardResponse)
def dashboard(
    request: Request,
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Headline counts, annual revenue and 30-day billing summary"""
    start_time = time.time()
    request_id = get_request_id(request)

    customers = [to_customer(c) for c in CustomerRepository(db).list_customers(active_only=True)]
    product_types = [to_product_type(p) for p in ProductTypeRepository(db).list_product_types()]
    categories = [to_category(c) for c in CategoryRepository(db).list_categories()]
    rows = AgreementRepository(db).list_rows(active_only=True)

    try:
        stats = build_dashboard_stats(customers, product_types, categories, rows, today, settings.currency)
    except ValidationError as e:
        raise _rejected("dashboard", e, request_id)

    duration = time.time() - start_time
    record_report("dashboard", duration)
    log_report(request_id, "dashboard", stats.active_agreements, duration * 1000)

    return DashboardResponse.model_validate(stats)


@router.get("/reports/export")
def export(
    request: Request,
    export_type: str = Query("agreements", alias="type", description="agreements | customers"),
    db: Session = Depends(get_db),
):
    """Semicolon-separated CSV download of all agreements or all customers"""
    start_time = time.time()
    request_id = get_request_id(request)

    if export_type == "agreements":
        rows = AgreementRepository(db).list_rows(active_only=False)
        content = export_agreements_csv(rows)
        filename = "avtaler.csv"
        count = len(rows)
    elif export_type == "customers":
        customers = [to_customer(c) for c in CustomerRepository(db).list_customers(active_only=False)]
        content = export_customers_csv(customers)
        filename = "kunder.csv"
        count = len(customers)
    else:
        raise HTTPException(status_code=400, detail="Invalid export type")

    duration = time.time() - start_time
    record_report("export", duration)
    log_report(request_id, f"export_{export_type}", count, duration * 1000)

    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
