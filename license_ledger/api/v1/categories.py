"""/v1/categories - category CRUD"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from license_ledger.api.v1.schemas import CategoryCreate, CategoryUpdate, CategoryResponse, SuccessResponse
from license_ledger.api.dependencies import require_role
from license_ledger.infrastructure.database.session import get_db
from license_ledger.infrastructure.database.repositories import CategoryRepository

router = APIRouter()


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    """List categories with their product types"""
    return [CategoryResponse.model_validate(c) for c in CategoryRepository(db).list_categories()]


@router.get("/categories/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return CategoryResponse.model_validate(CategoryRepository(db).get(category_id))


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=201,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def create_category(body: CategoryCreate, db: Session = Depends(get_db)):
    record = CategoryRepository(db).create(name=body.name, description=body.description)
    db.commit()
    return CategoryResponse.model_validate(record)


@router.put(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_role("admin", "editor"))],
)
def update_category(category_id: int, body: CategoryUpdate, db: Session = Depends(get_db)):
    record = CategoryRepository(db).update(category_id, body.model_dump(exclude_unset=True))
    db.commit()
    return CategoryResponse.model_validate(record)


@router.delete(
    "/categories/{category_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_role("admin"))],
)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    """Delete a category that no product type uses"""
    CategoryRepository(db).delete(category_id)
    db.commit()
    return SuccessResponse()
