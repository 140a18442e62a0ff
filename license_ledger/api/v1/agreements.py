"""/v1/agreements - agreement CRUD and mark-as-billed"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from license_ledger.api.v1.schemas import AgreementCreate, AgreementResponse, AgreementUpdate, SuccessResponse
from license_ledger.api.dependencies import CurrentUser, get_request_id, require_role
from license_ledger.infrastructure.database.session import get_db
from license_ledger.infrastructure.database.repositories import AgreementRepository
from license_ledger.infrastructure.observability.logging import log_agreement_billed
from license_ledger.infrastructure.observability.metrics import agreements_billed_counter

router = APIRouter()


@router.get("/agreements", response_model=List[AgreementResponse])
def list_agreements(
    customer_id: Optional[int] = Query(None),
    product_type_id: Optional[int] = Query(None),
    category_id: Optional[int] = Query(None),
    active: bool = Query(True, description="Only active agreements"),
    db: Session = Depends(get_db),
):
    """List agreements ordered by next billing date"""
    rows = AgreementRepository(db).list_rows(
        active_only=active,
        customer_id=customer_id,
        product_type_id=product_type_id,
        category_id=category_id,
    )
    return [AgreementResponse.from_row(r) for r in rows]


@router.get("/agreements/{agreement_id}", response_model=AgreementResponse)
def get_agreement(agreement_id: int, db: Session = Depends(get_db)):
    return AgreementResponse.from_row(AgreementRepository(db).get_row(agreement_id))


@router.post(
    "/agreements",
    response_model=AgreementResponse,
    status_code=201,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def create_agreement(body: AgreementCreate, db: Session = Depends(get_db)):
    """Create an agreement for an existing customer and product type"""
    row = AgreementRepository(db).create(**body.model_dump())
    db.commit()
    return AgreementResponse.from_row(row)


@router.put(
    "/agreements/{agreement_id}",
    response_model=AgreementResponse,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def update_agreement(agreement_id: int, body: AgreementUpdate, db: Session = Depends(get_db)):
    row = AgreementRepository(db).update(agreement_id, body.model_dump(exclude_unset=True))
    db.commit()
    return AgreementResponse.from_row(row)


@router.delete(
    "/agreements/{agreement_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_role("admin"))],
)
def delete_agreement(agreement_id: int, db: Session = Depends(get_db)):
    """Soft delete: the agreement is marked inactive"""
    AgreementRepository(db).deactivate(agreement_id)
    db.commit()
    return SuccessResponse()


@router.post("/agreements/{agreement_id}/bill", response_model=AgreementResponse)
def mark_agreement_billed(
    agreement_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role("admin", "editor")),
):
    """
    Record an invoicing event for an agreement.

    Moves next_billing_date forward by the billing interval in calendar
    months, clamping to the last day of shorter months.
    """
    request_id = get_request_id(request)
    repo = AgreementRepository(db)

    previous_date = repo.get(agreement_id).next_billing_date
    row = repo.mark_billed(agreement_id)
    db.commit()

    agreements_billed_counter.inc()
    log_agreement_billed(
        request_id,
        agreement_id,
        previous_date.isoformat(),
        row.agreement.next_billing_date.isoformat(),
        user.email,
    )

    return AgreementResponse.from_row(row)
