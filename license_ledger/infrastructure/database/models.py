"""SQLAlchemy ORM models for the license back office"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class CategoryRecord(Base):
    """Product/license category"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    product_types = relationship("ProductTypeRecord", back_populates="category")


class ProductTypeRecord(Base):
    """Product or license type"""

    __tablename__ = "product_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    default_billing_interval_months = Column(Integer, nullable=False, default=12)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    category = relationship("CategoryRecord", back_populates="product_types")
    agreements = relationship("AgreementRecord", back_populates="product_type")


class CustomerRecord(Base):
    """Customer holding agreements"""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, index=True)
    org_number = Column(String(32), nullable=True)
    contact_email = Column(Text, nullable=True)
    contact_phone = Column(String(32), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    agreements = relationship("AgreementRecord", back_populates="customer")


class AgreementRecord(Base):
    """Recurring billing agreement"""

    __tablename__ = "agreements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    product_type_id = Column(Integer, ForeignKey("product_types.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="NOK")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    billing_interval_months = Column(Integer, nullable=False)
    next_billing_date = Column(Date, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    customer = relationship("CustomerRecord", back_populates="agreements")
    product_type = relationship("ProductTypeRecord", back_populates="agreements")


class UserRecord(Base):
    """Back-office user; identity comes from the access proxy"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(Text, nullable=False, unique=True)
    email = Column(Text, nullable=False, unique=True)
    display_name = Column(Text, nullable=True)
    role = Column(String(16), nullable=False, default="viewer")
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
