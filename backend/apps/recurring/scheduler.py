"""
Recurrence scheduling for recurring invoice templates.

Everything here is deterministic: the current date and time are always passed
in by the caller. Periods are fixed day counts (a "month" is 30 days), so
schedules drift against calendar months over time.
"""
import uuid
from datetime import date, datetime, timedelta

from django.conf import settings

from apps.invoices.models import Invoice
from apps.invoices.totals import coerce_number, line_total
from apps.invoices.types import ClientInfo, InvoiceDraft, LineItem

FREQUENCY_DAYS = {
    "weekly": 7,
    "biweekly": 14,
    "monthly": 30,
    "bimonthly": 60,
    "quarterly": 90,
    "semiannual": 180,
    "annual": 365,
}

DEFAULT_ITEM_DESCRIPTION = "Recurring service"


def frequency_offset(frequency: str) -> timedelta:
    """Return the fixed period length of a frequency."""
    try:
        return timedelta(days=FREQUENCY_DAYS[frequency])
    except KeyError:
        raise ValueError(f"Unknown frequency: {frequency!r}") from None


def compute_next_invoice_date(from_date: date, frequency: str, today: date) -> date:
    """
    Compute the next date a template should produce an invoice.

    A ``from_date`` still in the future is returned unchanged (the template
    has not started yet). Otherwise the next date is one period after
    ``today``, not after ``from_date``.
    """
    offset = frequency_offset(frequency)
    if from_date > today:
        return from_date
    return today + offset


def is_due(template, today: date) -> bool:
    """True when the template is active, its date has arrived and it has not ended."""
    if not template.is_active:
        return False
    if template.next_invoice_date > today:
        return False
    if template.end_date is not None and today > template.end_date:
        return False
    return True


def build_template_snapshot(
    amount,
    currency: str,
    client_name: str = "",
    client_email: str = "",
    description: str = "",
) -> dict:
    """Build the fixed-amount, single-line invoice snapshot stored on a template."""
    amount = coerce_number(amount)
    return {
        "client_name": client_name or "",
        "client_email": client_email or "",
        "total": amount,
        "currency": currency or settings.DEFAULT_CURRENCY,
        "items": [
            {
                "description": description or DEFAULT_ITEM_DESCRIPTION,
                "quantity": 1,
                "rate": amount,
                "total": line_total(1, amount),
            }
        ],
    }


def template_line_items(snapshot: dict) -> list[LineItem]:
    """Read the snapshot's items, recomputing each line total from quantity and rate."""
    items = []
    for index, raw in enumerate(snapshot.get("items") or []):
        quantity = coerce_number(raw.get("quantity"))
        rate = coerce_number(raw.get("rate"))
        items.append(
            LineItem(
                id=str(index),
                description=raw.get("description") or "",
                quantity=quantity,
                rate=rate,
                total=line_total(quantity, rate),
            )
        )
    return items


def build_invoice_draft(template, today: date, invoice_number: str) -> InvoiceDraft:
    """
    Turn a recurring template into a new invoice draft dated ``today``.

    Client details and items come from the stored snapshot, not from the
    live client record. The cached snapshot ``total`` is ignored; totals are
    derived from the items when the draft is saved.
    """
    snapshot = template.invoice_template or {}
    return InvoiceDraft(
        id=str(uuid.uuid4()),
        invoice_number=invoice_number,
        date=today,
        due_date=today + timedelta(days=settings.RECURRING_INVOICE_DUE_DAYS),
        status=Invoice.Status.DRAFT,
        currency=snapshot.get("currency") or settings.DEFAULT_CURRENCY,
        client=ClientInfo(
            id=template.client_id,
            name=snapshot.get("client_name") or "",
            email=snapshot.get("client_email") or "",
        ),
        items=template_line_items(snapshot),
        tax_rate=coerce_number(snapshot.get("tax_rate")),
        discount=coerce_number(snapshot.get("discount")),
    )


def advance(template, today: date, now: datetime) -> None:
    """Record a successful generation on the template (in memory, not saved)."""
    template.invoices_generated += 1
    template.last_generated_at = now
    template.next_invoice_date = compute_next_invoice_date(today, template.frequency, today)
