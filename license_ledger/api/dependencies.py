"""Dependency injection for FastAPI endpoints"""

import re
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from license_ledger.config import settings
from license_ledger.domain.exceptions import AuthorizationError
from license_ledger.infrastructure.database.repositories import UserRepository
from license_ledger.infrastructure.database.session import get_db

EMAIL_HEADERS = ("X-User-Email", "CF-Access-Authenticated-User-Email")
JWT_HEADER = "CF-Access-JWT-Assertion"


@dataclass
class CurrentUser:
    """Authenticated caller"""

    id: int
    external_id: str
    email: str
    display_name: Optional[str]
    role: str


DEVELOPMENT_USER = CurrentUser(
    id=0,
    external_id="dev-user",
    email="dev@example.com",
    display_name="Developer",
    role="admin",
)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Clock provider for billing reports; override in tests"""
    return date.today()


def display_name_from_email(email: str) -> str:
    """'hans.thjomoe@example.com' → 'Hans Thjomoe'"""
    prefix = email.split("@")[0]
    return " ".join(part[:1].upper() + part[1:].lower() for part in re.split(r"[._-]", prefix) if part)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> CurrentUser:
    """
    Resolve the caller from access-proxy headers.

    First-time emails are provisioned as viewers. Without a header, development
    runs as an admin and every other environment is rejected.

    Raises:
        AuthorizationError: 401 without identity, 403 for deactivated users
    """
    email = next((request.headers[h] for h in EMAIL_HEADERS if request.headers.get(h)), None)

    if email is None:
        if settings.environment == "development":
            return DEVELOPMENT_USER
        raise AuthorizationError("Unauthorized", status_code=401)

    users = UserRepository(db)
    user = users.get_by_email(email)
    derived_name = display_name_from_email(email)

    if user is None:
        user = users.create(
            external_id=request.headers.get(JWT_HEADER) or f"external_{int(time.time() * 1000)}",
            email=email,
            display_name=derived_name,
        )
    else:
        if not user.is_active:
            raise AuthorizationError("User is deactivated")
        changes = {"last_login": datetime.now(timezone.utc)}
        if not user.display_name or user.display_name in (email, email.split("@")[0]):
            changes["display_name"] = derived_name
        users.update(user.id, changes)
    db.commit()

    return CurrentUser(
        id=user.id,
        external_id=user.external_id,
        email=user.email,
        display_name=user.display_name,
        role=user.role or "viewer",
    )


def require_role(*allowed_roles: str) -> Callable[..., CurrentUser]:
    """Build a dependency that admits only the given roles"""

    def check_role(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed_roles:
            raise AuthorizationError("Forbidden")
        return user

    return check_role
