"""Invoice service for creating, saving and listing a user's invoices."""
import logging
import secrets
import uuid
from datetime import date, timedelta

from django.conf import settings
from django.db import transaction

from apps.core.permissions import require_user
from apps.invoices.models import Invoice, InvoiceItem
from apps.invoices.numbering import InvoiceNumberService
from apps.invoices.totals import calculate_totals, derive_line_totals, new_line_item
from apps.invoices.types import ClientInfo, CompanyInfo, DashboardStats, InvoiceDraft, LineItem

logger = logging.getLogger(__name__)


def new_invoice_draft(
    today: date,
    invoice_number: str | None = None,
    profile=None,
) -> InvoiceDraft:
    """
    Build a blank invoice draft dated today.

    The due date defaults to ``INVOICE_DUE_DAYS`` (15) days later. When a
    profile is given, company details, currency, tax rate, notes and terms
    are pre-filled from it.
    """
    if invoice_number is None:
        invoice_number = f"{secrets.randbelow(10 ** 10):010d}"

    draft = InvoiceDraft(
        id=str(uuid.uuid4()),
        invoice_number=invoice_number,
        date=today,
        due_date=today + timedelta(days=settings.INVOICE_DUE_DAYS),
        status=Invoice.Status.DRAFT,
        currency=settings.DEFAULT_CURRENCY,
        items=[new_line_item()],
    )

    if profile is not None:
        draft.company = CompanyInfo(
            name=profile.company_name,
            email=profile.company_email,
            address=profile.company_address,
            phone=profile.company_phone,
            logo_url=profile.company_logo_url,
            tax_id=profile.company_tax_id,
            web=profile.company_website,
        )
        draft.currency = profile.default_currency or settings.DEFAULT_CURRENCY
        draft.tax_rate = profile.default_tax_rate or 0.0
        draft.notes = profile.default_notes
        draft.terms = profile.default_terms

    return draft


class InvoiceService:
    """Service for persisting invoices of a single user."""

    def __init__(self, user):
        self.user = require_user(user)

    def new_draft(self, today: date) -> InvoiceDraft:
        """Create a fresh draft with an unused number and profile defaults."""
        number = InvoiceNumberService(self.user).manual_number()
        return new_invoice_draft(today, invoice_number=number, profile=self._get_profile())

    def list_invoices(self, status: str | None = None):
        queryset = Invoice.objects.filter(user=self.user)
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at")

    def get_invoice(self, invoice_id: str) -> Invoice:
        """Look up an invoice by its public id. Raises Invoice.DoesNotExist."""
        try:
            public_id = uuid.UUID(str(invoice_id))
        except ValueError:
            raise Invoice.DoesNotExist(f"Invalid invoice id: {invoice_id}")
        return Invoice.objects.prefetch_related("items").get(user=self.user, public_id=public_id)

    def save_invoice(
        self,
        draft: InvoiceDraft,
        recurring_invoice=None,
        recurring_sequence: int | None = None,
    ) -> Invoice:
        """
        Create or update an invoice and replace its line items.

        Line totals and invoice totals are recomputed from the draft before
        anything is written. Header and items are written in one transaction.
        ``recurring_invoice``/``recurring_sequence`` tag an invoice produced
        by a recurring template.
        """
        try:
            public_id = uuid.UUID(str(draft.id))
        except ValueError:
            raise ValueError(f"Invalid invoice id: {draft.id}")

        if draft.status not in Invoice.Status.values:
            raise ValueError(f"Invalid status: {draft.status}")

        items = derive_line_totals(draft.items)
        totals = calculate_totals(items, draft.tax_rate, draft.discount)

        with transaction.atomic():
            invoice = Invoice.objects.filter(user=self.user, public_id=public_id).first()
            created = invoice is None
            if created:
                if Invoice.objects.filter(public_id=public_id).exists():
                    raise ValueError(f"Invalid invoice id: {draft.id}")
                invoice = Invoice(user=self.user, public_id=public_id)

            invoice.invoice_number = draft.invoice_number
            invoice.date = draft.date
            invoice.due_date = draft.due_date
            invoice.status = draft.status
            invoice.currency = draft.currency or settings.DEFAULT_CURRENCY
            invoice.client = self._find_client(draft.client.id)

            invoice.company_name = draft.company.name
            invoice.company_email = draft.company.email
            invoice.company_phone = draft.company.phone
            invoice.company_address = draft.company.address
            invoice.company_website = draft.company.web
            invoice.company_logo_url = draft.company.logo_url
            invoice.company_tax_id = draft.company.tax_id

            invoice.client_name = draft.client.name
            invoice.client_email = draft.client.email
            invoice.client_phone = draft.client.phone
            invoice.client_address = draft.client.address

            invoice.notes = draft.notes
            invoice.terms = draft.terms

            invoice.subtotal = totals.subtotal
            invoice.tax_rate = totals.tax_rate
            invoice.tax_total = totals.tax_total
            invoice.discount = totals.discount
            invoice.total = totals.total
            if recurring_invoice is not None:
                invoice.recurring_invoice = recurring_invoice
                invoice.recurring_sequence = recurring_sequence
            invoice.save()

            invoice.items.all().delete()
            InvoiceItem.objects.bulk_create(
                [
                    InvoiceItem(
                        invoice=invoice,
                        description=item.description,
                        quantity=item.quantity,
                        rate=item.rate,
                        total=item.total,
                        sort_order=index,
                    )
                    for index, item in enumerate(items)
                ]
            )

        logger.info(
            "%s invoice %s for user %s (%s items)",
            "Created" if created else "Updated",
            invoice.invoice_number,
            self.user.id,
            len(items),
        )
        return invoice

    def to_draft(self, invoice: Invoice) -> InvoiceDraft:
        """Load a persisted invoice back into an editable draft."""
        items = [
            LineItem(
                id=str(item.id),
                description=item.description,
                quantity=item.quantity,
                rate=item.rate,
                total=item.total,
            )
            for item in invoice.items.all()
        ]
        return InvoiceDraft(
            id=str(invoice.public_id),
            invoice_number=invoice.invoice_number,
            date=invoice.date,
            due_date=invoice.due_date,
            status=invoice.status,
            currency=invoice.currency,
            company=CompanyInfo(
                name=invoice.company_name,
                email=invoice.company_email,
                address=invoice.company_address,
                phone=invoice.company_phone,
                logo_url=invoice.company_logo_url,
                tax_id=invoice.company_tax_id,
                web=invoice.company_website,
            ),
            client=ClientInfo(
                id=invoice.client_id,
                name=invoice.client_name,
                email=invoice.client_email,
                address=invoice.client_address,
                phone=invoice.client_phone,
            ),
            items=items or [new_line_item()],
            tax_rate=invoice.tax_rate,
            discount=invoice.discount,
            notes=invoice.notes,
            terms=invoice.terms,
        )

    @staticmethod
    def set_status(invoice: Invoice, status: str) -> Invoice:
        if status not in Invoice.Status.values:
            raise ValueError(f"Invalid status: {status}")
        invoice.status = status
        invoice.save(update_fields=["status", "updated_at"])
        return invoice

    @classmethod
    def toggle_paid(cls, invoice: Invoice) -> Invoice:
        """Mark a paid invoice as draft again, anything else as paid."""
        if invoice.status == Invoice.Status.PAID:
            return cls.set_status(invoice, Invoice.Status.DRAFT)
        return cls.set_status(invoice, Invoice.Status.PAID)

    def delete_invoice(self, invoice: Invoice) -> None:
        """Delete an invoice; its items are removed by cascade."""
        if invoice.user_id != self.user.id:
            raise Invoice.DoesNotExist("Invoice not found")
        logger.info("Deleting invoice %s for user %s", invoice.invoice_number, self.user.id)
        invoice.delete()

    @staticmethod
    def display_status(invoice: Invoice, today: date) -> str:
        """Status shown to the user: unpaid invoices past their due date read as overdue."""
        if invoice.status != Invoice.Status.PAID and invoice.due_date < today:
            return Invoice.Status.OVERDUE
        return invoice.status

    def dashboard_stats(self, today: date) -> DashboardStats:
        stats = DashboardStats()
        for invoice in Invoice.objects.filter(user=self.user):
            status = self.display_status(invoice, today)
            stats.invoice_count += 1
            if status == Invoice.Status.PAID:
                stats.paid_count += 1
                stats.paid_total += invoice.total
                continue
            stats.outstanding_total += invoice.total
            if status == Invoice.Status.OVERDUE:
                stats.overdue_count += 1
            elif status == Invoice.Status.SENT:
                stats.sent_count += 1
            else:
                stats.draft_count += 1
        return stats

    def _get_profile(self):
        from apps.accounts.models import Profile

        return Profile.objects.filter(user=self.user).first()

    def _find_client(self, client_id):
        if client_id is None:
            return None
        from apps.clients.models import Client

        return Client.objects.filter(user=self.user, id=client_id).first()
