"""Recurring invoice service: template management and invoice generation."""
import logging
from dataclasses import dataclass
from datetime import date, datetime

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.permissions import require_user
from apps.invoices.models import Invoice
from apps.invoices.numbering import InvoiceNumberService
from apps.invoices.services import InvoiceService
from apps.recurring.models import RecurringInvoice
from apps.recurring.scheduler import (
    advance,
    build_invoice_draft,
    build_template_snapshot,
    compute_next_invoice_date,
    frequency_offset,
    is_due,
)

logger = logging.getLogger(__name__)


class RecurringInvoiceError(Exception):
    """Base exception for recurring invoice operations."""

    pass


class StaleRecurringInvoiceError(RecurringInvoiceError):
    """Raised when a template changed since the caller last read it."""

    pass


@dataclass
class GenerationResult:
    """Outcome of generating one invoice from a template."""

    template: RecurringInvoice
    invoice: Invoice | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.invoice is not None


class RecurringInvoiceService:
    """Service for a user's recurring invoice templates."""

    def __init__(self, user):
        self.user = require_user(user)

    def list_templates(self):
        return RecurringInvoice.objects.filter(user=self.user).select_related("client")

    def get(self, template_id) -> RecurringInvoice:
        """Raises RecurringInvoice.DoesNotExist for unknown or foreign ids."""
        return RecurringInvoice.objects.get(user=self.user, id=template_id)

    def create(
        self,
        frequency: str,
        start_date: date,
        amount,
        currency: str | None = None,
        description: str = "",
        client_id: int | None = None,
        client_name: str = "",
        end_date: date | None = None,
        today: date | None = None,
    ) -> RecurringInvoice:
        """
        Create a template that bills a fixed amount as a single line.

        When ``client_id`` names one of the user's clients, its name and email
        go into the snapshot; otherwise ``client_name`` is used as typed.
        """
        if today is None:
            today = timezone.localdate()

        frequency_offset(frequency)
        if end_date is not None and end_date < start_date:
            raise ValueError("End date must not be before the start date.")

        client = None
        if client_id is not None:
            from apps.clients.models import Client

            client = Client.objects.filter(user=self.user, id=client_id).first()

        snapshot = build_template_snapshot(
            amount=amount,
            currency=currency,
            client_name=client.name if client else client_name,
            client_email=client.email if client else "",
            description=description,
        )

        template = RecurringInvoice.objects.create(
            user=self.user,
            client=client,
            invoice_template=snapshot,
            frequency=frequency,
            start_date=start_date,
            end_date=end_date,
            next_invoice_date=compute_next_invoice_date(start_date, frequency, today),
            is_active=True,
        )
        logger.info(
            "Created %s recurring invoice %s for user %s (next %s)",
            frequency,
            template.id,
            self.user.id,
            template.next_invoice_date,
        )
        return template

    def toggle_active(self, template: RecurringInvoice) -> RecurringInvoice:
        """Pause an active template or resume a paused one."""
        template.is_active = not template.is_active
        template.save(update_fields=["is_active", "updated_at"])
        return template

    def delete(self, template: RecurringInvoice) -> None:
        """Delete a template. Invoices it produced are kept."""
        logger.info("Deleting recurring invoice %s for user %s", template.id, self.user.id)
        template.delete()

    def due_templates(self, today: date) -> list[RecurringInvoice]:
        queryset = RecurringInvoice.objects.filter(
            user=self.user,
            is_active=True,
            next_invoice_date__lte=today,
        ).filter(
            Q(end_date__isnull=True) | Q(end_date__gte=today)
        ).order_by("next_invoice_date", "id")
        return [template for template in queryset if is_due(template, today)]

    def generate_now(
        self,
        template: RecurringInvoice,
        today: date | None = None,
        now: datetime | None = None,
        expected_generated: int | None = None,
    ) -> Invoice:
        """
        Materialize one invoice from the template and advance its schedule.

        The invoice header, its items and the template update are written in
        a single transaction, so the template only advances when the invoice
        and all of its items were stored. ``expected_generated`` enables an
        optimistic check against the template's generation counter.

        Raises:
            StaleRecurringInvoiceError: The counter no longer matches
                ``expected_generated`` or the occurrence was already generated.
        """
        if now is None:
            now = timezone.now()
        if today is None:
            today = timezone.localdate(now)

        sequence = None
        try:
            with transaction.atomic():
                locked = RecurringInvoice.objects.select_for_update().get(
                    pk=template.pk, user=self.user
                )
                if (
                    expected_generated is not None
                    and locked.invoices_generated != expected_generated
                ):
                    raise StaleRecurringInvoiceError(
                        f"Recurring invoice {locked.id} was updated concurrently "
                        f"(expected {expected_generated} generated, found {locked.invoices_generated})"
                    )

                sequence = locked.invoices_generated + 1
                number = InvoiceNumberService(self.user).recurring_number(now)
                draft = build_invoice_draft(locked, today, number)
                invoice = InvoiceService(self.user).save_invoice(
                    draft,
                    recurring_invoice=locked,
                    recurring_sequence=sequence,
                )

                advance(locked, today, now)
                locked.save(update_fields=[
                    "invoices_generated", "last_generated_at", "next_invoice_date", "updated_at",
                ])
        except IntegrityError as e:
            already_generated = sequence is not None and Invoice.objects.filter(
                recurring_invoice_id=template.pk, recurring_sequence=sequence
            ).exists()
            if not already_generated:
                raise
            logger.warning(
                "Recurring invoice %s occurrence %s already generated: %s", template.pk, sequence, e
            )
            raise StaleRecurringInvoiceError(
                f"Recurring invoice {template.pk} occurrence was already generated"
            ) from e

        template.refresh_from_db()
        logger.info(
            "Generated invoice %s from recurring invoice %s (occurrence %s, next %s)",
            invoice.invoice_number,
            template.id,
            template.invoices_generated,
            template.next_invoice_date,
        )
        return invoice

    def generate_due(
        self, today: date | None = None, now: datetime | None = None
    ) -> list[GenerationResult]:
        """Generate invoices for every due template; one failure does not stop the rest."""
        if now is None:
            now = timezone.now()
        if today is None:
            today = timezone.localdate(now)

        results = []
        for template in self.due_templates(today):
            try:
                invoice = self.generate_now(
                    template,
                    today=today,
                    now=now,
                    expected_generated=template.invoices_generated,
                )
            except Exception as e:
                logger.error(
                    "Failed to generate invoice from recurring invoice %s: %s", template.id, e
                )
                results.append(GenerationResult(template=template, error=str(e)))
            else:
                results.append(GenerationResult(template=template, invoice=invoice))
        return results
