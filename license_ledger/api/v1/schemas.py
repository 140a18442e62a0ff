"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from typing import List, Literal, Optional

from license_ledger.domain.models import AgreementRow

Role = Literal["admin", "editor", "viewer"]


def _not_null(value):
    """Update fields that map to required columns may be omitted but not cleared"""
    if value is None:
        raise ValueError("field cannot be null")
    return value


class CategoryCreate(BaseModel):
    """Request body for POST /v1/categories"""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None

    _name_not_null = field_validator("name")(_not_null)


class ProductTypeCreate(BaseModel):
    """Request body for POST /v1/product-types"""

    name: str = Field(..., min_length=1)
    category_id: int
    description: Optional[str] = None
    default_billing_interval_months: int = Field(12, ge=1)


class ProductTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category_id: Optional[int] = None
    description: Optional[str] = None
    default_billing_interval_months: Optional[int] = Field(None, ge=1)

    _required_not_null = field_validator("name", "category_id", "default_billing_interval_months")(_not_null)


class ProductTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category_id: int
    description: Optional[str] = None
    default_billing_interval_months: int


class CategoryResponse(BaseModel):
    """Category with the product types filed under it"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    product_types: List[ProductTypeResponse] = []


class ProductTypeListItem(ProductTypeResponse):
    """Product type with its category name and active agreement totals"""

    category_name: Optional[str] = None
    customer_count: int
    total_amount: float


class CustomerCreate(BaseModel):
    """Request body for POST /v1/customers"""

    name: str = Field(..., min_length=1)
    org_number: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    org_number: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    _required_not_null = field_validator("name", "is_active")(_not_null)


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    org_number: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool


class CustomerSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_agreements: int
    total_monthly_value: float
    total_annual_value: float
    currency: str


class CustomerListItem(CustomerResponse):
    summary: CustomerSummarySchema


class AgreementCreate(BaseModel):
    """Request body for POST /v1/agreements"""

    customer_id: int
    product_type_id: int
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    currency: str = Field("NOK", min_length=3, max_length=3)
    start_date: date
    end_date: Optional[date] = None
    billing_interval_months: int = Field(..., ge=1)
    next_billing_date: date
    notes: Optional[str] = None


class AgreementUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    billing_interval_months: Optional[int] = Field(None, ge=1)
    next_billing_date: Optional[date] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None

    _required_not_null = field_validator(
        "amount", "currency", "start_date", "billing_interval_months", "next_billing_date", "is_active"
    )(_not_null)


class AgreementResponse(BaseModel):
    """Agreement with the names of its customer, product type and category"""

    id: int
    customer_id: int
    product_type_id: int
    amount: float
    currency: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    billing_interval_months: int
    next_billing_date: date
    is_active: bool
    notes: Optional[str] = None
    customer_name: Optional[str] = None
    product_type_name: str
    category_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: AgreementRow) -> "AgreementResponse":
        a = row.agreement
        return cls(
            id=a.id,
            customer_id=a.customer_id,
            product_type_id=a.product_type_id,
            amount=a.amount,
            currency=a.currency,
            start_date=a.start_date,
            end_date=a.end_date,
            billing_interval_months=a.billing_interval_months,
            next_billing_date=a.next_billing_date,
            is_active=a.is_active,
            notes=a.notes,
            customer_name=row.customer.name if row.customer else None,
            product_type_name=row.product_type.name,
            category_name=row.category.name if row.category else None,
        )


class CustomerDetailResponse(CustomerResponse):
    """Response for GET /v1/customers/{id}"""

    active_agreements: List[AgreementResponse]
    inactive_agreements: List[AgreementResponse]
    summary: CustomerSummarySchema


class ProductTypeSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_count: int
    total_amount: float
    currency: str


class ProductTypeDetailResponse(ProductTypeResponse):
    """Response for GET /v1/product-types/{id}"""

    category_name: Optional[str] = None
    agreements: List[AgreementResponse]
    summary: ProductTypeSummarySchema


class RevenueSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_annual_revenue: float
    total_agreements: int
    currency: str


class CategoryRevenueSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    total_revenue: float
    agreement_count: int


class ProductTypeRevenueSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    category: str
    total_revenue: float
    agreement_count: int


class RevenueReportResponse(BaseModel):
    """Response for GET /v1/reports/revenue"""

    model_config = ConfigDict(from_attributes=True)

    summary: RevenueSummarySchema
    by_category: List[CategoryRevenueSchema]
    by_product_type: List[ProductTypeRevenueSchema]


class BillingSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    overdue_count: int
    overdue_total: float
    upcoming_count: int
    upcoming_total: float
    currency: str
    period_days: int


class BillingReportResponse(BaseModel):
    """Response for GET /v1/reports/billing"""

    summary: BillingSummarySchema
    overdue: List[AgreementResponse]
    upcoming: List[AgreementResponse]


class DashboardResponse(BaseModel):
    """Response for GET /v1/reports/dashboard"""

    model_config = ConfigDict(from_attributes=True)

    active_customers: int
    product_types: int
    active_agreements: int
    categories: int
    total_annual_revenue: float
    billing: BillingSummarySchema
    currency: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: Optional[str] = None
    role: str
    is_active: bool = True
    last_login: Optional[datetime] = None


class RoleUpdate(BaseModel):
    """Request body for PUT /v1/users/{id}/role"""

    role: Role


class SuccessResponse(BaseModel):
    success: bool = True
