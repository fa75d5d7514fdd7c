"""Celery tasks for recurring invoices."""

import logging
from datetime import date

from celery import shared_task
from django.utils import timezone

from apps.accounts.models import User
from apps.recurring.services import RecurringInvoiceService

logger = logging.getLogger(__name__)


@shared_task(acks_late=True)
def generate_due_recurring_invoices(run_date: str | None = None) -> dict:
    """
    Generate invoices for all due recurring templates of all users.

    Args:
        run_date: Optional ISO date to run for instead of today.

    Returns:
        Counts of generated and failed invoices.
    """
    now = timezone.now()
    today = date.fromisoformat(run_date) if run_date else timezone.localdate(now)

    users = User.objects.filter(
        is_active=True,
        recurringinvoice_set__is_active=True,
        recurringinvoice_set__next_invoice_date__lte=today,
    ).distinct()

    generated = 0
    failed = 0
    for user in users:
        results = RecurringInvoiceService(user).generate_due(today=today, now=now)
        generated += sum(1 for r in results if r.success)
        failed += sum(1 for r in results if not r.success)

    if failed:
        logger.warning(
            "Recurring run for %s: %s invoices generated, %s failed", today, generated, failed
        )
    else:
        logger.info("Recurring run for %s: %s invoices generated", today, generated)

    return {"date": today.isoformat(), "generated": generated, "failed": failed}
