"""CSV export of agreements and customers"""

import csv
import io
from typing import Any, Iterable, List, Sequence

from license_ledger.domain.models import AgreementRow, Customer

DELIMITER = ";"

AGREEMENT_HEADERS = [
    "ID",
    "Kunde",
    "Produkt/Lisens",
    "Kategori",
    "Sum",
    "Valuta",
    "Start dato",
    "Slutt dato",
    "Fakturaintervall (mnd)",
    "Neste fakturadato",
    "Aktiv",
]

CUSTOMER_HEADERS = ["ID", "Navn", "Org.nr", "E-post", "Telefon", "Adresse", "Aktiv"]


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Ja" if value else "Nei"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def _render(headers: List[str], rows: Iterable[Sequence[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=DELIMITER, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(v) for v in row])
    return buffer.getvalue()


def export_agreements_csv(rows: Iterable[AgreementRow]) -> str:
    """Semicolon-separated agreement listing, one line per agreement"""
    return _render(
        AGREEMENT_HEADERS,
        (
            [
                r.agreement.id,
                r.customer.name if r.customer else None,
                r.product_type.name,
                r.category.name if r.category else None,
                r.agreement.amount,
                r.agreement.currency,
                r.agreement.start_date,
                r.agreement.end_date,
                r.agreement.billing_interval_months,
                r.agreement.next_billing_date,
                r.agreement.is_active,
            ]
            for r in rows
        ),
    )


def export_customers_csv(customers: Iterable[Customer]) -> str:
    """Semicolon-separated customer listing"""
    return _render(
        CUSTOMER_HEADERS,
        (
            [c.id, c.name, c.org_number, c.contact_email, c.contact_phone, c.address, c.is_active]
            for c in customers
        ),
    )
