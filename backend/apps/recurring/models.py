"""Recurring invoice templates."""
from django.db import models

from apps.core.models import OwnedModel


class RecurringInvoice(OwnedModel):
    """A saved invoice blueprint that produces a new invoice every period."""

    class Frequency(models.TextChoices):
        WEEKLY = "weekly", "Weekly"
        BIWEEKLY = "biweekly", "Biweekly"
        MONTHLY = "monthly", "Monthly"
        BIMONTHLY = "bimonthly", "Bimonthly"
        QUARTERLY = "quarterly", "Quarterly"
        SEMIANNUAL = "semiannual", "Semiannual"
        ANNUAL = "annual", "Annual"

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recurring_invoices",
        help_text="Client the template was created for (lookup only)",
    )
    invoice_template = models.JSONField(
        default=dict,
        help_text="Snapshot: client_name, client_email, currency, total and items",
    )
    frequency = models.CharField(
        max_length=20,
        choices=Frequency.choices,
        default=Frequency.MONTHLY,
    )
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    next_invoice_date = models.DateField()
    is_active = models.BooleanField(default=True)
    invoices_generated = models.PositiveIntegerField(default=0)
    last_generated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        client_name = (self.invoice_template or {}).get("client_name") or "?"
        return f"{self.get_frequency_display()} invoice for {client_name}"
