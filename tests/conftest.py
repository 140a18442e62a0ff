"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Callable, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from license_ledger.api.main import create_app
from license_ledger.api.dependencies import get_today
from license_ledger.infrastructure.database.models import Base, UserRecord
from license_ledger.infrastructure.database.session import get_db
from license_ledger.domain.models import Agreement, AgreementRow, Category, Customer, ProductType


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2024, 6, 15)

ADMIN_EMAIL = "ada.admin@example.com"
EDITOR_EMAIL = "eddie.editor@example.com"
VIEWER_EMAIL = "vera.viewer@example.com"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a fixed clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def users(db: Session) -> dict:
    """One user per role"""
    records = {}
    for role, email in (("admin", ADMIN_EMAIL), ("editor", EDITOR_EMAIL), ("viewer", VIEWER_EMAIL)):
        record = UserRecord(external_id=f"ext-{role}", email=email, display_name=role.title(), role=role)
        db.add(record)
        records[role] = record
    db.commit()
    return records


@pytest.fixture
def admin_headers(users) -> dict:
    return {"X-User-Email": ADMIN_EMAIL}


@pytest.fixture
def editor_headers(users) -> dict:
    return {"X-User-Email": EDITOR_EMAIL}


@pytest.fixture
def viewer_headers(users) -> dict:
    return {"X-User-Email": VIEWER_EMAIL}


@pytest.fixture
def make_row() -> Callable[..., AgreementRow]:
    """Build joined agreement rows for engine tests"""

    def _make_row(
        agreement_id: int = 1,
        amount: float = 1200.0,
        interval: int = 12,
        next_billing: object = date(2024, 7, 1),
        product_type: str = "Office License",
        category: Optional[str] = "Lisens",
        is_active: bool = True,
    ) -> AgreementRow:
        return AgreementRow(
            agreement=Agreement(
                id=agreement_id,
                customer_id=1,
                product_type_id=agreement_id,
                amount=amount,
                billing_interval_months=interval,
                next_billing_date=next_billing,
                start_date=date(2024, 1, 1),
                is_active=is_active,
            ),
            product_type=ProductType(id=agreement_id, name=product_type, category_id=1),
            category=Category(id=1, name=category) if category is not None else None,
            customer=Customer(id=1, name="Acme AS"),
        )

    return _make_row
