"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class Category:
    """Grouping of product types (e.g. product, license)"""

    id: int
    name: str
    description: Optional[str] = None


@dataclass
class ProductType:
    """Product or license type that agreements are sold under"""

    id: int
    name: str
    category_id: int
    description: Optional[str] = None
    default_billing_interval_months: int = 12


@dataclass
class Customer:
    """Customer holding agreements"""

    id: int
    name: str
    org_number: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True


@dataclass
class Agreement:
    """Recurring billing contract between a customer and a product type"""

    id: int
    customer_id: int
    product_type_id: int
    amount: float
    billing_interval_months: int
    next_billing_date: date
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    currency: str = "NOK"
    is_active: bool = True
    notes: Optional[str] = None


@dataclass
class AgreementRow:
    """Agreement joined with its product type, category and customer"""

    agreement: Agreement
    product_type: ProductType
    category: Optional[Category] = None
    customer: Optional[Customer] = None


@dataclass
class RevenueSummary:
    total_annual_revenue: float
    total_agreements: int
    currency: str


@dataclass
class CategoryRevenue:
    """Annualized revenue for one category"""

    name: str
    total_revenue: float = 0.0
    agreement_count: int = 0


@dataclass
class ProductTypeRevenue:
    """Annualized revenue for one product type"""

    name: str
    category: str
    total_revenue: float = 0.0
    agreement_count: int = 0


@dataclass
class RevenueReport:
    summary: RevenueSummary
    by_category: List[CategoryRevenue]
    by_product_type: List[ProductTypeRevenue]


@dataclass
class BillingSummary:
    """Counts and raw (unannualized) totals of due agreements"""

    overdue_count: int
    overdue_total: float
    upcoming_count: int
    upcoming_total: float
    currency: str
    period_days: int


@dataclass
class BillingReport:
    summary: BillingSummary
    overdue: List[AgreementRow] = field(default_factory=list)
    upcoming: List[AgreementRow] = field(default_factory=list)


@dataclass
class DashboardStats:
    """Headline numbers for the dashboard"""

    active_customers: int
    product_types: int
    active_agreements: int
    categories: int
    total_annual_revenue: float
    billing: BillingSummary
    currency: str


@dataclass
class CustomerSummary:
    total_agreements: int
    total_monthly_value: float
    total_annual_value: float
    currency: str


@dataclass
class ProductTypeSummary:
    customer_count: int
    total_amount: float
    currency: str
