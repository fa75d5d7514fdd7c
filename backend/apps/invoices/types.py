"""Invoice data classes for editing and computing invoices before they are saved."""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass
class LineItem:
    """A line item in an invoice."""

    id: str
    description: str = ""
    quantity: float = 1.0
    rate: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived amounts of an invoice."""

    subtotal: float
    tax_rate: float
    tax_total: float
    discount: float
    total: float


@dataclass
class CompanyInfo:
    """Issuing company block printed on the invoice."""

    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""
    logo_url: str = ""
    tax_id: str = ""
    web: str = ""


@dataclass
class ClientInfo:
    """Billed client block printed on the invoice."""

    id: Optional[int] = None
    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""


@dataclass
class InvoiceDraft:
    """An invoice that is being edited or generated and is not yet persisted."""

    id: str
    invoice_number: str
    date: date
    due_date: date
    status: str = "draft"
    currency: str = "USD"
    company: CompanyInfo = field(default_factory=CompanyInfo)
    client: ClientInfo = field(default_factory=ClientInfo)
    items: list[LineItem] = field(default_factory=list)
    tax_rate: float = 0.0
    discount: float = 0.0
    notes: str = ""
    terms: str = ""

    @property
    def totals(self) -> InvoiceTotals:
        """Totals derived from the current items, tax rate and discount."""
        from apps.invoices.totals import calculate_totals

        return calculate_totals(self.items, self.tax_rate, self.discount)

    @property
    def line_item_count(self) -> int:
        """Return number of line items."""
        return len(self.items)


@dataclass
class DashboardStats:
    """Invoice counts and sums by displayed status."""

    invoice_count: int = 0
    draft_count: int = 0
    sent_count: int = 0
    paid_count: int = 0
    overdue_count: int = 0
    paid_total: float = 0.0
    outstanding_total: float = 0.0
