"""/v1/product-types - product/license type CRUD"""

from collections import defaultdict
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from license_ledger.api.v1.schemas import (
    AgreementResponse,
    ProductTypeCreate,
    ProductTypeDetailResponse,
    ProductTypeListItem,
    ProductTypeResponse,
    ProductTypeSummarySchema,
    ProductTypeUpdate,
    SuccessResponse,
)
from license_ledger.api.dependencies import require_role
from license_ledger.config import settings
from license_ledger.domain.reporting import summarize_product_type
from license_ledger.infrastructure.database.session import get_db
from license_ledger.infrastructure.database.repositories import AgreementRepository, ProductTypeRepository

router = APIRouter()


@router.get("/product-types", response_model=List[ProductTypeListItem])
def list_product_types(
    category_id: Optional[int] = Query(None, description="Filter by category ID"),
    category: Optional[str] = Query(None, description="Filter by category name"),
    db: Session = Depends(get_db),
):
    """
    List product types with the number of active agreements and their summed amount.

    An unknown category name yields an empty list.
    """
    records = ProductTypeRepository(db).list_product_types(category_id=category_id, category_name=category)

    rows_by_product_type = defaultdict(list)
    for row in AgreementRepository(db).list_rows(active_only=True):
        rows_by_product_type[row.agreement.product_type_id].append(row)

    items = []
    for record in records:
        summary = summarize_product_type(rows_by_product_type[record.id], settings.currency)
        items.append(
            ProductTypeListItem(
                **ProductTypeResponse.model_validate(record).model_dump(),
                category_name=record.category.name if record.category else None,
                customer_count=summary.customer_count,
                total_amount=summary.total_amount,
            )
        )
    return items


@router.get("/product-types/{product_type_id}", response_model=ProductTypeDetailResponse)
def get_product_type(product_type_id: int, db: Session = Depends(get_db)):
    """Product type with every agreement sold under it"""
    record = ProductTypeRepository(db).get(product_type_id)
    rows = AgreementRepository(db).list_rows(active_only=False, product_type_id=product_type_id)
    summary = summarize_product_type(rows, settings.currency)

    return ProductTypeDetailResponse(
        **ProductTypeResponse.model_validate(record).model_dump(),
        category_name=record.category.name if record.category else None,
        agreements=[AgreementResponse.from_row(r) for r in rows],
        summary=ProductTypeSummarySchema.model_validate(summary),
    )


@router.post(
    "/product-types",
    response_model=ProductTypeResponse,
    status_code=201,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def create_product_type(body: ProductTypeCreate, db: Session = Depends(get_db)):
    record = ProductTypeRepository(db).create(**body.model_dump())
    db.commit()
    return ProductTypeResponse.model_validate(record)


@router.put(
    "/product-types/{product_type_id}",
    response_model=ProductTypeResponse,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def update_product_type(product_type_id: int, body: ProductTypeUpdate, db: Session = Depends(get_db)):
    record = ProductTypeRepository(db).update(product_type_id, body.model_dump(exclude_unset=True))
    db.commit()
    return ProductTypeResponse.model_validate(record)


@router.delete(
    "/product-types/{product_type_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_role("admin"))],
)
def delete_product_type(product_type_id: int, db: Session = Depends(get_db)):
    ProductTypeRepository(db).delete(product_type_id)
    db.commit()
    return SuccessResponse()
