"""GraphQL schema for recurring invoice templates."""
import datetime
import logging

import strawberry
import strawberry_django
from strawberry import auto
from strawberry.types import Info
from django.db import DatabaseError
from django.utils import timezone

from apps.core.context import Context
from apps.core.permissions import check_user, get_current_user
from apps.core.schema import DeleteResult
from apps.invoices.schema import InvoiceType
from apps.invoices.totals import coerce_number
from .models import RecurringInvoice
from .services import RecurringInvoiceService, StaleRecurringInvoiceError

logger = logging.getLogger(__name__)


@strawberry_django.type(RecurringInvoice)
class RecurringInvoiceType:
    id: auto
    frequency: auto
    start_date: auto
    end_date: auto
    next_invoice_date: auto
    is_active: auto
    invoices_generated: auto
    last_generated_at: auto
    created_at: auto
    invoice_template: strawberry.scalars.JSON

    @strawberry.field
    def client_name(self) -> str:
        return (self.invoice_template or {}).get("client_name") or ""

    @strawberry.field
    def amount(self) -> float:
        """Cached template total, for display."""
        return coerce_number((self.invoice_template or {}).get("total"))

    @strawberry.field
    def currency(self) -> str:
        return (self.invoice_template or {}).get("currency") or ""


@strawberry.input
class CreateRecurringInvoiceInput:
    """Input for a template that bills a fixed amount on a schedule."""

    frequency: str
    start_date: datetime.date
    amount: float
    currency: str | None = None
    description: str = ""
    client_id: strawberry.ID | None = None
    client_name: str = ""
    end_date: datetime.date | None = None


@strawberry.type
class RecurringInvoiceResult:
    """Result of recurring invoice operations."""

    recurring_invoice: RecurringInvoiceType | None = None
    success: bool = False
    error: str | None = None


@strawberry.type
class GenerateInvoiceResult:
    """Result of generating an invoice from a template."""

    invoice: InvoiceType | None = None
    recurring_invoice: RecurringInvoiceType | None = None
    success: bool = False
    error: str | None = None


@strawberry.type
class RecurringInvoiceQuery:
    @strawberry.field
    def recurring_invoices(self, info: Info[Context, None]) -> list[RecurringInvoiceType]:
        """List the current user's templates, newest first."""
        user = get_current_user(info)
        return list(RecurringInvoiceService(user).list_templates())

    @strawberry.field
    def due_recurring_invoices(self, info: Info[Context, None]) -> list[RecurringInvoiceType]:
        """Active templates whose next invoice date has arrived."""
        user = get_current_user(info)
        return RecurringInvoiceService(user).due_templates(timezone.localdate())


@strawberry.type
class RecurringInvoiceMutation:
    @strawberry.mutation
    def create_recurring_invoice(
        self, info: Info[Context, None], input: CreateRecurringInvoiceInput
    ) -> RecurringInvoiceResult:
        user, err = check_user(info)
        if err:
            return RecurringInvoiceResult(error=err)

        try:
            template = RecurringInvoiceService(user).create(
                frequency=input.frequency,
                start_date=input.start_date,
                amount=input.amount,
                currency=input.currency.upper() if input.currency else None,
                description=input.description,
                client_id=int(input.client_id) if input.client_id else None,
                client_name=input.client_name,
                end_date=input.end_date,
                today=timezone.localdate(),
            )
        except ValueError as e:
            return RecurringInvoiceResult(error=str(e))
        return RecurringInvoiceResult(recurring_invoice=template, success=True)

    @strawberry.mutation
    def toggle_recurring_invoice(
        self, info: Info[Context, None], id: strawberry.ID
    ) -> RecurringInvoiceResult:
        """Pause or resume a template."""
        user, err = check_user(info)
        if err:
            return RecurringInvoiceResult(error=err)

        service = RecurringInvoiceService(user)
        try:
            template = service.toggle_active(service.get(id))
        except RecurringInvoice.DoesNotExist:
            return RecurringInvoiceResult(error="Recurring invoice not found")
        return RecurringInvoiceResult(recurring_invoice=template, success=True)

    @strawberry.mutation
    def delete_recurring_invoice(
        self, info: Info[Context, None], id: strawberry.ID
    ) -> DeleteResult:
        user, err = check_user(info)
        if err:
            return DeleteResult(error=err)

        service = RecurringInvoiceService(user)
        try:
            service.delete(service.get(id))
        except RecurringInvoice.DoesNotExist:
            return DeleteResult(error="Recurring invoice not found")
        return DeleteResult(success=True)

    @strawberry.mutation
    def generate_recurring_invoice_now(
        self,
        info: Info[Context, None],
        id: strawberry.ID,
        expected_generated: int | None = None,
    ) -> GenerateInvoiceResult:
        """
        Generate the next invoice from a template immediately.

        Pass the ``invoicesGenerated`` value last seen to reject the request
        when another generation happened in the meantime.
        """
        user, err = check_user(info)
        if err:
            return GenerateInvoiceResult(error=err)

        service = RecurringInvoiceService(user)
        try:
            template = service.get(id)
            invoice = service.generate_now(template, expected_generated=expected_generated)
        except RecurringInvoice.DoesNotExist:
            return GenerateInvoiceResult(error="Recurring invoice not found")
        except StaleRecurringInvoiceError as e:
            return GenerateInvoiceResult(error=str(e))
        except (DatabaseError, RuntimeError, ValueError) as e:
            logger.exception("Generating invoice from recurring invoice %s failed", id)
            return GenerateInvoiceResult(error=f"Could not generate invoice: {e}")
        return GenerateInvoiceResult(invoice=invoice, recurring_invoice=template, success=True)
