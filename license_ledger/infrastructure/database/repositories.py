"""Data access layer for back-office entities"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from license_ledger.infrastructure.database.models import (
    AgreementRecord,
    CategoryRecord,
    CustomerRecord,
    ProductTypeRecord,
    UserRecord,
)
from license_ledger.domain.billing import advance_billing_date
from license_ledger.domain.exceptions import ConflictError, NotFoundError
from license_ledger.domain.models import Agreement, AgreementRow, Category, Customer, ProductType


def to_category(record: CategoryRecord) -> Category:
    return Category(id=record.id, name=record.name, description=record.description)


def to_product_type(record: ProductTypeRecord) -> ProductType:
    return ProductType(
        id=record.id,
        name=record.name,
        category_id=record.category_id,
        description=record.description,
        default_billing_interval_months=record.default_billing_interval_months,
    )


def to_customer(record: CustomerRecord) -> Customer:
    return Customer(
        id=record.id,
        name=record.name,
        org_number=record.org_number,
        contact_email=record.contact_email,
        contact_phone=record.contact_phone,
        address=record.address,
        is_active=record.is_active,
    )


def to_agreement_row(record: AgreementRecord) -> AgreementRow:
    """Flatten an agreement and its joins into the snapshot row the reports consume"""
    product_type = record.product_type
    return AgreementRow(
        agreement=Agreement(
            id=record.id,
            customer_id=record.customer_id,
            product_type_id=record.product_type_id,
            amount=record.amount,
            billing_interval_months=record.billing_interval_months,
            next_billing_date=record.next_billing_date,
            start_date=record.start_date,
            end_date=record.end_date,
            currency=record.currency,
            is_active=record.is_active,
            notes=record.notes,
        ),
        product_type=to_product_type(product_type),
        category=to_category(product_type.category) if product_type.category else None,
        customer=to_customer(record.customer) if record.customer else None,
    )


def _apply_changes(record: Any, changes: Dict[str, Any]) -> None:
    for key, value in changes.items():
        setattr(record, key, value)


class CategoryRepository:
    """Repository for categories"""

    def __init__(self, db: Session):
        self.db = db

    def list_categories(self) -> List[CategoryRecord]:
        return (
            self.db.query(CategoryRecord)
            .options(joinedload(CategoryRecord.product_types))
            .order_by(CategoryRecord.name)
            .all()
        )

    def get(self, category_id: int) -> CategoryRecord:
        """Fetch category or raise NotFoundError"""
        record = self.db.get(CategoryRecord, category_id)
        if record is None:
            raise NotFoundError("Category not found")
        return record

    def get_by_name(self, name: str) -> Optional[CategoryRecord]:
        return self.db.query(CategoryRecord).filter(CategoryRecord.name == name).first()

    def create(self, name: str, description: Optional[str] = None) -> CategoryRecord:
        if self.get_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")
        record = CategoryRecord(name=name, description=description)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, category_id: int, changes: Dict[str, Any]) -> CategoryRecord:
        record = self.get(category_id)
        name = changes.get("name")
        if name is not None and name != record.name and self.get_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")
        _apply_changes(record, changes)
        self.db.flush()
        return record

    def delete(self, category_id: int) -> None:
        """Hard delete; refused while product types still belong to the category"""
        record = self.get(category_id)
        if record.product_types:
            raise ConflictError("Category still has product types")
        self.db.delete(record)
        self.db.flush()


class ProductTypeRepository:
    """Repository for product/license types"""

    def __init__(self, db: Session):
        self.db = db

    def list_product_types(
        self,
        category_id: Optional[int] = None,
        category_name: Optional[str] = None,
    ) -> List[ProductTypeRecord]:
        query = self.db.query(ProductTypeRecord).options(joinedload(ProductTypeRecord.category))
        if category_name is not None:
            query = query.join(ProductTypeRecord.category).filter(CategoryRecord.name == category_name)
        elif category_id is not None:
            query = query.filter(ProductTypeRecord.category_id == category_id)
        return query.order_by(ProductTypeRecord.name).all()

    def get(self, product_type_id: int) -> ProductTypeRecord:
        """Fetch product type or raise NotFoundError"""
        record = self.db.get(ProductTypeRecord, product_type_id)
        if record is None:
            raise NotFoundError("Product type not found")
        return record

    def create(
        self,
        name: str,
        category_id: int,
        description: Optional[str] = None,
        default_billing_interval_months: int = 12,
    ) -> ProductTypeRecord:
        CategoryRepository(self.db).get(category_id)
        record = ProductTypeRecord(
            name=name,
            category_id=category_id,
            description=description,
            default_billing_interval_months=default_billing_interval_months,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, product_type_id: int, changes: Dict[str, Any]) -> ProductTypeRecord:
        record = self.get(product_type_id)
        if "category_id" in changes:
            CategoryRepository(self.db).get(changes["category_id"])
        _apply_changes(record, changes)
        self.db.flush()
        return record

    def delete(self, product_type_id: int) -> None:
        """Hard delete; refused while agreements reference the product type"""
        record = self.get(product_type_id)
        if record.agreements:
            raise ConflictError("Product type still has agreements")
        self.db.delete(record)
        self.db.flush()


class CustomerRepository:
    """Repository for customers"""

    def __init__(self, db: Session):
        self.db = db

    def list_customers(self, search: Optional[str] = None, active_only: bool = True) -> List[CustomerRecord]:
        query = self.db.query(CustomerRecord)
        if active_only:
            query = query.filter(CustomerRecord.is_active.is_(True))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    CustomerRecord.name.ilike(pattern),
                    CustomerRecord.org_number.ilike(pattern),
                    CustomerRecord.contact_email.ilike(pattern),
                )
            )
        return query.order_by(CustomerRecord.name).all()

    def get(self, customer_id: int) -> CustomerRecord:
        """Fetch customer or raise NotFoundError"""
        record = self.db.get(CustomerRecord, customer_id)
        if record is None:
            raise NotFoundError("Customer not found")
        return record

    def create(self, **fields: Any) -> CustomerRecord:
        record = CustomerRecord(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, customer_id: int, changes: Dict[str, Any]) -> CustomerRecord:
        record = self.get(customer_id)
        _apply_changes(record, changes)
        self.db.flush()
        return record

    def deactivate(self, customer_id: int) -> CustomerRecord:
        """Soft delete"""
        return self.update(customer_id, {"is_active": False})


class AgreementRepository:
    """Repository for agreements; also the snapshot provider for reports"""

    def __init__(self, db: Session):
        self.db = db

    def _joined_query(self):
        return self.db.query(AgreementRecord).options(
            joinedload(AgreementRecord.customer),
            joinedload(AgreementRecord.product_type).joinedload(ProductTypeRecord.category),
        )

    def list_rows(
        self,
        active_only: bool = True,
        customer_id: Optional[int] = None,
        product_type_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> List[AgreementRow]:
        """
        Snapshot of agreements joined with product type, category and customer.

        Ordered by next billing date, then id.
        """
        query = self._joined_query()
        if active_only:
            query = query.filter(AgreementRecord.is_active.is_(True))
        if customer_id is not None:
            query = query.filter(AgreementRecord.customer_id == customer_id)
        if product_type_id is not None:
            query = query.filter(AgreementRecord.product_type_id == product_type_id)
        if category_id is not None:
            query = query.join(AgreementRecord.product_type).filter(ProductTypeRecord.category_id == category_id)
        records = query.order_by(AgreementRecord.next_billing_date, AgreementRecord.id).all()
        return [to_agreement_row(r) for r in records]

    def get(self, agreement_id: int) -> AgreementRecord:
        """Fetch agreement or raise NotFoundError"""
        record = self._joined_query().filter(AgreementRecord.id == agreement_id).first()
        if record is None:
            raise NotFoundError("Agreement not found")
        return record

    def get_row(self, agreement_id: int) -> AgreementRow:
        return to_agreement_row(self.get(agreement_id))

    def create(
        self,
        customer_id: int,
        product_type_id: int,
        amount: float,
        start_date: date,
        billing_interval_months: int,
        next_billing_date: date,
        currency: str = "NOK",
        end_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> AgreementRow:
        """Create agreement after checking customer and product type exist"""
        CustomerRepository(self.db).get(customer_id)
        ProductTypeRepository(self.db).get(product_type_id)

        record = AgreementRecord(
            customer_id=customer_id,
            product_type_id=product_type_id,
            amount=amount,
            currency=currency,
            start_date=start_date,
            end_date=end_date,
            billing_interval_months=billing_interval_months,
            next_billing_date=next_billing_date,
            notes=notes,
        )
        self.db.add(record)
        self.db.flush()
        return self.get_row(record.id)

    def update(self, agreement_id: int, changes: Dict[str, Any]) -> AgreementRow:
        record = self.get(agreement_id)
        _apply_changes(record, changes)
        self.db.flush()
        return self.get_row(agreement_id)

    def deactivate(self, agreement_id: int) -> AgreementRow:
        """Soft delete"""
        return self.update(agreement_id, {"is_active": False})

    def mark_billed(self, agreement_id: int) -> AgreementRow:
        """
        Advance next_billing_date by one billing interval.

        Single read-modify-write; concurrent calls on the same agreement are
        last-write-wins.
        """
        record = self.get(agreement_id)
        record.next_billing_date = advance_billing_date(
            record.next_billing_date, record.billing_interval_months
        )
        self.db.flush()
        return to_agreement_row(record)


class UserRepository:
    """Repository for back-office users"""

    def __init__(self, db: Session):
        self.db = db

    def list_users(self) -> List[UserRecord]:
        return self.db.query(UserRecord).order_by(UserRecord.display_name).all()

    def get(self, user_id: int) -> UserRecord:
        """Fetch user or raise NotFoundError"""
        record = self.db.get(UserRecord, user_id)
        if record is None:
            raise NotFoundError("User not found")
        return record

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        return self.db.query(UserRecord).filter(UserRecord.email == email).first()

    def create(self, external_id: str, email: str, display_name: str, role: str = "viewer") -> UserRecord:
        record = UserRecord(
            external_id=external_id,
            email=email,
            display_name=display_name,
            role=role,
            last_login=datetime.now(timezone.utc),
        )
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, user_id: int, changes: Dict[str, Any]) -> UserRecord:
        record = self.get(user_id)
        _apply_changes(record, changes)
        self.db.flush()
        return record
