"""Invoice models: persisted invoice headers and their line items."""
import uuid

from django.db import models

from apps.core.models import OwnedModel, TimestampedModel


class Invoice(OwnedModel):
    """A persisted invoice with frozen company and client details."""

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        SENT = "sent", "Sent"
        PAID = "paid", "Paid"
        OVERDUE = "overdue", "Overdue"

    public_id = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text="Identifier generated when the draft was created",
    )
    invoice_number = models.CharField(max_length=100)
    date = models.DateField()
    due_date = models.DateField()
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    currency = models.CharField(max_length=3, default="USD")

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )

    # Company snapshot
    company_name = models.CharField(max_length=255, blank=True)
    company_email = models.CharField(max_length=255, blank=True)
    company_phone = models.CharField(max_length=50, blank=True)
    company_address = models.TextField(blank=True)
    company_website = models.CharField(max_length=255, blank=True)
    company_logo_url = models.CharField(max_length=2000, blank=True)
    company_tax_id = models.CharField(max_length=50, blank=True)

    # Client snapshot
    client_name = models.CharField(max_length=255, blank=True)
    client_email = models.CharField(max_length=255, blank=True)
    client_phone = models.CharField(max_length=50, blank=True)
    client_address = models.TextField(blank=True)

    notes = models.TextField(blank=True)
    terms = models.TextField(blank=True)

    # Amounts
    subtotal = models.FloatField(default=0)
    tax_rate = models.FloatField(default=0)
    tax_total = models.FloatField(default=0)
    discount = models.FloatField(default=0)
    total = models.FloatField(default=0)

    # Origin when generated from a recurring template
    recurring_invoice = models.ForeignKey(
        "recurring.RecurringInvoice",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="generated_invoices",
    )
    recurring_sequence = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Occurrence number of the recurring template that produced this invoice",
    )

    class Meta:
        ordering = ["-date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["recurring_invoice", "recurring_sequence"],
                name="unique_recurring_occurrence",
            ),
        ]

    def __str__(self):
        return f"Invoice {self.invoice_number} - {self.client_name}"


class InvoiceItem(TimestampedModel):
    """A line of a persisted invoice."""

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )
    description = models.TextField(blank=True)
    quantity = models.FloatField(default=1)
    rate = models.FloatField(default=0)
    total = models.FloatField(default=0)
    sort_order = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["sort_order", "id"]

    def __str__(self):
        return f"{self.description} ({self.quantity} x {self.rate})"
