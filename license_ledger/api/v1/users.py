"""/v1/users - back-office users and roles"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from license_ledger.api.v1.schemas import RoleUpdate, SuccessResponse, UserResponse
from license_ledger.api.dependencies import CurrentUser, get_current_user, require_role
from license_ledger.infrastructure.database.session import get_db
from license_ledger.infrastructure.database.repositories import UserRepository

router = APIRouter()


@router.get("/users", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db)):
    return [UserResponse.model_validate(u) for u in UserRepository(db).list_users()]


@router.get("/users/me", response_model=UserResponse)
def get_me(user: CurrentUser = Depends(get_current_user)):
    """The authenticated caller"""
    return UserResponse(id=user.id, email=user.email, display_name=user.display_name, role=user.role)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return UserResponse.model_validate(UserRepository(db).get(user_id))


@router.put(
    "/users/{user_id}/role",
    response_model=UserResponse,
    dependencies=[Depends(require_role("admin"))],
)
def update_role(user_id: int, body: RoleUpdate, db: Session = Depends(get_db)):
    record = UserRepository(db).update(user_id, {"role": body.role})
    db.commit()
    return UserResponse.model_validate(record)


@router.delete("/users/{user_id}", response_model=SuccessResponse)
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_role("admin")),
):
    """Deactivate a user; admins cannot deactivate themselves"""
    if current_user.id == user_id:
        raise HTTPException(status_code=400, detail="Cannot deactivate yourself")
    UserRepository(db).update(user_id, {"is_active": False})
    db.commit()
    return SuccessResponse()
