"""GraphQL schema for invoices."""
import datetime

import strawberry
import strawberry_django
from strawberry import auto
from strawberry.types import Info
from django.utils import timezone

from apps.core.context import Context
from apps.core.permissions import check_user, get_current_user
from apps.core.schema import DeleteResult
from .models import Invoice, InvoiceItem
from .services import InvoiceService
from .totals import calculate_totals, coerce_number, derive_line_totals, line_total, new_line_item
from .types import ClientInfo, CompanyInfo, InvoiceDraft, InvoiceTotals, LineItem


# =============================================================================
# Type Definitions
# =============================================================================


@strawberry.type
class InvoiceTotalsType:
    """Derived amounts of an invoice."""

    subtotal: float
    tax_rate: float
    tax_total: float
    discount: float
    total: float

    @classmethod
    def from_totals(cls, totals: InvoiceTotals) -> "InvoiceTotalsType":
        return cls(
            subtotal=totals.subtotal,
            tax_rate=totals.tax_rate,
            tax_total=totals.tax_total,
            discount=totals.discount,
            total=totals.total,
        )


@strawberry.type
class LineItemType:
    id: str
    description: str
    quantity: float
    rate: float
    total: float


@strawberry.type
class CompanyInfoType:
    name: str
    email: str
    address: str
    phone: str
    logo_url: str
    tax_id: str
    web: str


@strawberry.type
class ClientInfoType:
    id: strawberry.ID | None
    name: str
    email: str
    address: str
    phone: str


@strawberry.type
class InvoiceDraftType:
    """An editable invoice, either new or loaded from a saved one."""

    id: str
    invoice_number: str
    date: datetime.date
    due_date: datetime.date
    status: str
    currency: str
    company: CompanyInfoType
    client: ClientInfoType
    items: list[LineItemType]
    tax_rate: float
    discount: float
    notes: str
    terms: str
    totals: InvoiceTotalsType


def draft_to_type(draft: InvoiceDraft) -> InvoiceDraftType:
    return InvoiceDraftType(
        id=draft.id,
        invoice_number=draft.invoice_number,
        date=draft.date,
        due_date=draft.due_date,
        status=draft.status,
        currency=draft.currency,
        company=CompanyInfoType(**vars(draft.company)),
        client=ClientInfoType(
            id=strawberry.ID(str(draft.client.id)) if draft.client.id is not None else None,
            name=draft.client.name,
            email=draft.client.email,
            address=draft.client.address,
            phone=draft.client.phone,
        ),
        items=[LineItemType(**vars(item)) for item in draft.items],
        tax_rate=draft.tax_rate,
        discount=draft.discount,
        notes=draft.notes,
        terms=draft.terms,
        totals=InvoiceTotalsType.from_totals(draft.totals),
    )


@strawberry_django.type(InvoiceItem)
class InvoiceItemType:
    id: auto
    description: auto
    quantity: auto
    rate: auto
    total: auto
    sort_order: auto


@strawberry_django.type(Invoice)
class InvoiceType:
    invoice_number: auto
    date: auto
    due_date: auto
    status: auto
    currency: auto
    company_name: auto
    company_email: auto
    company_phone: auto
    company_address: auto
    company_website: auto
    company_logo_url: auto
    company_tax_id: auto
    client_name: auto
    client_email: auto
    client_phone: auto
    client_address: auto
    notes: auto
    terms: auto
    subtotal: auto
    tax_rate: auto
    tax_total: auto
    discount: auto
    total: auto
    recurring_sequence: auto
    created_at: auto
    updated_at: auto

    @strawberry.field
    def id(self) -> strawberry.ID:
        """Public identifier of the invoice."""
        return strawberry.ID(str(self.public_id))

    @strawberry.field
    def items(self) -> list[InvoiceItemType]:
        return list(self.items.all())

    @strawberry.field
    def display_status(self) -> str:
        """Status as shown to the user; unpaid invoices past due read as overdue."""
        return InvoiceService.display_status(self, timezone.localdate())

    @strawberry.field
    def recurring_invoice_id(self) -> strawberry.ID | None:
        if self.recurring_invoice_id is None:
            return None
        return strawberry.ID(str(self.recurring_invoice_id))


@strawberry.type
class DashboardStatsType:
    invoice_count: int
    draft_count: int
    sent_count: int
    paid_count: int
    overdue_count: int
    paid_total: float
    outstanding_total: float


# =============================================================================
# Input and Result Types
# =============================================================================


@strawberry.input
class LineItemInput:
    """A line item as entered. Missing or invalid numbers count as 0."""

    id: str | None = None
    description: str = ""
    quantity: float | None = 1.0
    rate: float | None = 0.0


@strawberry.input
class CompanyInfoInput:
    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""
    logo_url: str = ""
    tax_id: str = ""
    web: str = ""


@strawberry.input
class ClientInfoInput:
    id: strawberry.ID | None = None
    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""


@strawberry.input
class InvoiceInput:
    """Input for saving an invoice. Totals are always recomputed on save."""

    id: str
    invoice_number: str
    date: datetime.date
    due_date: datetime.date
    items: list[LineItemInput]
    status: str = Invoice.Status.DRAFT.value
    currency: str = "USD"
    company: CompanyInfoInput | None = None
    client: ClientInfoInput | None = None
    tax_rate: float | None = 0.0
    discount: float | None = 0.0
    notes: str = ""
    terms: str = ""


@strawberry.type
class InvoiceResult:
    """Result of invoice operations."""

    invoice: InvoiceType | None = None
    success: bool = False
    error: str | None = None


def line_items_from_input(items: list[LineItemInput]) -> list[LineItem]:
    result = []
    for raw in items:
        quantity = coerce_number(raw.quantity)
        rate = coerce_number(raw.rate)
        item = new_line_item(raw.id)
        item.description = raw.description
        item.quantity = quantity
        item.rate = rate
        item.total = line_total(quantity, rate)
        result.append(item)
    return result


def draft_from_input(input: InvoiceInput) -> InvoiceDraft:
    client = input.client or ClientInfoInput()
    client_id = None
    if client.id not in (None, ""):
        try:
            client_id = int(client.id)
        except ValueError:
            raise ValueError(f"Invalid client id: {client.id}")

    company = input.company or CompanyInfoInput()
    return InvoiceDraft(
        id=input.id,
        invoice_number=input.invoice_number.strip(),
        date=input.date,
        due_date=input.due_date,
        status=input.status,
        currency=input.currency.upper(),
        company=CompanyInfo(**vars(company)),
        client=ClientInfo(
            id=client_id,
            name=client.name,
            email=client.email,
            address=client.address,
            phone=client.phone,
        ),
        items=line_items_from_input(input.items),
        tax_rate=coerce_number(input.tax_rate),
        discount=coerce_number(input.discount),
        notes=input.notes,
        terms=input.terms,
    )


# =============================================================================
# Queries and Mutations
# =============================================================================


@strawberry.type
class InvoiceQuery:
    @strawberry.field
    def invoices(self, info: Info[Context, None], status: str | None = None) -> list[InvoiceType]:
        """List the current user's invoices, newest first."""
        user = get_current_user(info)
        return list(InvoiceService(user).list_invoices(status=status).prefetch_related("items"))

    @strawberry.field
    def invoice(self, info: Info[Context, None], id: strawberry.ID) -> InvoiceDraftType | None:
        """Load a saved invoice as an editable draft."""
        user = get_current_user(info)
        service = InvoiceService(user)
        try:
            invoice = service.get_invoice(id)
        except Invoice.DoesNotExist:
            return None
        return draft_to_type(service.to_draft(invoice))

    @strawberry.field
    def new_invoice_draft(self, info: Info[Context, None]) -> InvoiceDraftType:
        """A blank draft pre-filled from the company profile."""
        user = get_current_user(info)
        draft = InvoiceService(user).new_draft(timezone.localdate())
        return draft_to_type(draft)

    @strawberry.field
    def preview_totals(
        self,
        items: list[LineItemInput],
        tax_rate: float | None = 0.0,
        discount: float | None = 0.0,
    ) -> InvoiceTotalsType:
        """Compute totals for unsaved line items."""
        totals = calculate_totals(
            derive_line_totals(line_items_from_input(items)),
            coerce_number(tax_rate),
            coerce_number(discount),
        )
        return InvoiceTotalsType.from_totals(totals)

    @strawberry.field
    def dashboard_stats(self, info: Info[Context, None]) -> DashboardStatsType:
        user = get_current_user(info)
        stats = InvoiceService(user).dashboard_stats(timezone.localdate())
        return DashboardStatsType(**vars(stats))


@strawberry.type
class InvoiceMutation:
    @strawberry.mutation
    def save_invoice(self, info: Info[Context, None], input: InvoiceInput) -> InvoiceResult:
        """Create or update an invoice together with its line items."""
        user, err = check_user(info)
        if err:
            return InvoiceResult(error=err)

        if not input.invoice_number.strip():
            return InvoiceResult(error="Invoice number is required")
        if input.due_date < input.date:
            return InvoiceResult(error="Due date must not be before the invoice date")

        try:
            draft = draft_from_input(input)
            invoice = InvoiceService(user).save_invoice(draft)
        except ValueError as e:
            return InvoiceResult(error=str(e))
        return InvoiceResult(invoice=invoice, success=True)

    @strawberry.mutation
    def set_invoice_status(
        self, info: Info[Context, None], id: strawberry.ID, status: str
    ) -> InvoiceResult:
        user, err = check_user(info)
        if err:
            return InvoiceResult(error=err)

        try:
            invoice = InvoiceService(user).get_invoice(id)
            InvoiceService.set_status(invoice, status)
        except Invoice.DoesNotExist:
            return InvoiceResult(error="Invoice not found")
        except ValueError as e:
            return InvoiceResult(error=str(e))
        return InvoiceResult(invoice=invoice, success=True)

    @strawberry.mutation
    def toggle_invoice_paid(self, info: Info[Context, None], id: strawberry.ID) -> InvoiceResult:
        """Mark an invoice as paid, or a paid invoice back to draft."""
        user, err = check_user(info)
        if err:
            return InvoiceResult(error=err)

        try:
            invoice = InvoiceService(user).get_invoice(id)
        except Invoice.DoesNotExist:
            return InvoiceResult(error="Invoice not found")
        InvoiceService.toggle_paid(invoice)
        return InvoiceResult(invoice=invoice, success=True)

    @strawberry.mutation
    def delete_invoice(self, info: Info[Context, None], id: strawberry.ID) -> DeleteResult:
        user, err = check_user(info)
        if err:
            return DeleteResult(error=err)

        service = InvoiceService(user)
        try:
            service.delete_invoice(service.get_invoice(id))
        except Invoice.DoesNotExist:
            return DeleteResult(error="Invoice not found")
        return DeleteResult(success=True)
