"""/v1/customers - customer CRUD with agreement value summaries"""

from collections import defaultdict
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from license_ledger.api.v1.schemas import (
    AgreementResponse,
    CustomerCreate,
    CustomerDetailResponse,
    CustomerListItem,
    CustomerResponse,
    CustomerSummarySchema,
    CustomerUpdate,
    SuccessResponse,
)
from license_ledger.api.dependencies import require_role
from license_ledger.config import settings
from license_ledger.domain.reporting import summarize_customer
from license_ledger.infrastructure.database.session import get_db
from license_ledger.infrastructure.database.repositories import AgreementRepository, CustomerRepository

router = APIRouter()


@router.get("/customers", response_model=List[CustomerListItem])
def list_customers(
    search: Optional[str] = Query(None, description="Match name, org number or email"),
    active: bool = Query(True, description="Only active customers"),
    db: Session = Depends(get_db),
):
    """List customers ordered by name, each with monthly/annual agreement value"""
    records = CustomerRepository(db).list_customers(search=search, active_only=active)

    rows_by_customer = defaultdict(list)
    for row in AgreementRepository(db).list_rows(active_only=True):
        rows_by_customer[row.agreement.customer_id].append(row)

    return [
        CustomerListItem(
            **CustomerResponse.model_validate(record).model_dump(),
            summary=CustomerSummarySchema.model_validate(
                summarize_customer(rows_by_customer[record.id], settings.currency)
            ),
        )
        for record in records
    ]


@router.get("/customers/{customer_id}", response_model=CustomerDetailResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    """Customer with active and inactive agreements split out"""
    record = CustomerRepository(db).get(customer_id)
    rows = AgreementRepository(db).list_rows(active_only=False, customer_id=customer_id)

    return CustomerDetailResponse(
        **CustomerResponse.model_validate(record).model_dump(),
        active_agreements=[AgreementResponse.from_row(r) for r in rows if r.agreement.is_active],
        inactive_agreements=[AgreementResponse.from_row(r) for r in rows if not r.agreement.is_active],
        summary=CustomerSummarySchema.model_validate(summarize_customer(rows, settings.currency)),
    )


@router.post(
    "/customers",
    response_model=CustomerResponse,
    status_code=201,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def create_customer(body: CustomerCreate, db: Session = Depends(get_db)):
    record = CustomerRepository(db).create(**body.model_dump())
    db.commit()
    return CustomerResponse.model_validate(record)


@router.put(
    "/customers/{customer_id}",
    response_model=CustomerResponse,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def update_customer(customer_id: int, body: CustomerUpdate, db: Session = Depends(get_db)):
    record = CustomerRepository(db).update(customer_id, body.model_dump(exclude_unset=True))
    db.commit()
    return CustomerResponse.model_validate(record)


@router.delete(
    "/customers/{customer_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_role("admin"))],
)
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    """Soft delete: the customer is marked inactive"""
    CustomerRepository(db).deactivate(customer_id)
    db.commit()
    return SuccessResponse()
