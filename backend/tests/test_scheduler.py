"""Tests for recurrence date math and invoice drafts built from templates."""
from datetime import date, datetime, timedelta, timezone

import pytest

from apps.invoices.models import Invoice
from apps.recurring.models import RecurringInvoice
from apps.recurring.scheduler import (
    DEFAULT_ITEM_DESCRIPTION,
    FREQUENCY_DAYS,
    advance,
    build_invoice_draft,
    build_template_snapshot,
    compute_next_invoice_date,
    frequency_offset,
    is_due,
)


def make_template(**kwargs):
    defaults = {
        "frequency": RecurringInvoice.Frequency.MONTHLY,
        "start_date": date(2024, 1, 1),
        "next_invoice_date": date(2024, 6, 1),
        "is_active": True,
        "invoices_generated": 0,
        "invoice_template": build_template_snapshot(
            amount=250, currency="EUR", client_name="Acme Corp", client_email="billing@acme.test"
        ),
    }
    defaults.update(kwargs)
    return RecurringInvoice(**defaults)


class TestComputeNextInvoiceDate:
    def test_monthly_from_past_start(self):
        result = compute_next_invoice_date(date(2024, 1, 15), "monthly", today=date(2024, 6, 1))

        assert result == date(2024, 7, 1)

    def test_fixed_offset_ignores_calendar_months(self):
        result = compute_next_invoice_date(date(2024, 1, 1), "monthly", today=date(2024, 1, 1))

        assert result == date(2024, 1, 31)

    def test_future_start_is_kept(self):
        result = compute_next_invoice_date(date(2024, 3, 1), "weekly", today=date(2024, 1, 1))

        assert result == date(2024, 3, 1)

    def test_offset_counts_from_today_not_from_date(self):
        result = compute_next_invoice_date(date(2023, 1, 1), "weekly", today=date(2024, 1, 1))

        assert result == date(2024, 1, 8)

    @pytest.mark.parametrize("frequency,days", sorted(FREQUENCY_DAYS.items()))
    def test_every_frequency(self, frequency, days):
        today = date(2024, 1, 1)

        assert compute_next_invoice_date(today, frequency, today) == today + timedelta(days=days)

    def test_unknown_frequency_raises(self):
        with pytest.raises(ValueError, match="Unknown frequency"):
            compute_next_invoice_date(date(2024, 1, 1), "fortnightly", date(2024, 1, 1))

    def test_frequency_choices_match_offsets(self):
        assert set(RecurringInvoice.Frequency.values) == set(FREQUENCY_DAYS)
        assert frequency_offset("annual") == timedelta(days=365)


class TestIsDue:
    def test_due_on_next_invoice_date(self):
        assert is_due(make_template(next_invoice_date=date(2024, 6, 1)), date(2024, 6, 1))

    def test_not_due_day_before(self):
        assert not is_due(make_template(next_invoice_date=date(2024, 6, 2)), date(2024, 6, 1))

    def test_overdue_template_is_due(self):
        assert is_due(make_template(next_invoice_date=date(2024, 5, 1)), date(2024, 6, 1))

    def test_never_due_after_end_date(self):
        template = make_template(next_invoice_date=date(2024, 5, 1), end_date=date(2024, 5, 31))

        assert not is_due(template, date(2024, 6, 1))

    def test_due_on_end_date(self):
        template = make_template(next_invoice_date=date(2024, 6, 1), end_date=date(2024, 6, 1))

        assert is_due(template, date(2024, 6, 1))

    def test_paused_template_is_not_due(self):
        assert not is_due(make_template(is_active=False), date(2024, 6, 1))


class TestTemplateSnapshot:
    def test_single_fixed_amount_line(self):
        snapshot = build_template_snapshot(amount="99.5", currency="BRL", client_name="Acme")

        assert snapshot["total"] == 99.5
        assert snapshot["currency"] == "BRL"
        assert snapshot["client_name"] == "Acme"
        assert snapshot["items"] == [
            {"description": DEFAULT_ITEM_DESCRIPTION, "quantity": 1, "rate": 99.5, "total": 99.5}
        ]

    def test_custom_description_and_default_currency(self, settings):
        settings.DEFAULT_CURRENCY = "USD"

        snapshot = build_template_snapshot(amount=10, currency="", description="Hosting")

        assert snapshot["currency"] == "USD"
        assert snapshot["items"][0]["description"] == "Hosting"


class TestBuildInvoiceDraft:
    def test_draft_from_snapshot(self):
        template = make_template()

        draft = build_invoice_draft(template, date(2024, 6, 1), "REC-123456")

        assert draft.invoice_number == "REC-123456"
        assert draft.date == date(2024, 6, 1)
        assert draft.due_date == date(2024, 7, 1)
        assert draft.status == Invoice.Status.DRAFT
        assert draft.currency == "EUR"
        assert draft.client.name == "Acme Corp"
        assert draft.client.email == "billing@acme.test"
        assert len(draft.items) == 1
        assert draft.totals.total == 250

    def test_line_totals_are_recomputed(self):
        snapshot = {
            "client_name": "Acme",
            "currency": "USD",
            "total": 1,
            "items": [
                {"description": "Support", "quantity": 2, "rate": 40, "total": 1},
                {"description": "Licence", "quantity": "3", "rate": "10", "total": 1},
            ],
        }
        template = make_template(invoice_template=snapshot)

        draft = build_invoice_draft(template, date(2024, 6, 1), "REC-000001")

        assert [item.total for item in draft.items] == [80, 30]
        assert draft.totals.subtotal == 110

    def test_empty_snapshot(self, settings):
        settings.DEFAULT_CURRENCY = "USD"
        template = make_template(invoice_template={})

        draft = build_invoice_draft(template, date(2024, 6, 1), "REC-000001")

        assert draft.items == []
        assert draft.currency == "USD"
        assert draft.totals.total == 0

    def test_due_days_setting(self, settings):
        settings.RECURRING_INVOICE_DUE_DAYS = 10

        draft = build_invoice_draft(make_template(), date(2024, 6, 1), "REC-000001")

        assert draft.due_date == date(2024, 6, 11)


class TestAdvance:
    def test_advance_updates_schedule(self):
        template = make_template(invoices_generated=2)
        now = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)

        advance(template, date(2024, 6, 1), now)

        assert template.invoices_generated == 3
        assert template.last_generated_at == now
        assert template.next_invoice_date == date(2024, 7, 1)

    def test_late_run_counts_from_run_date(self):
        template = make_template(frequency="weekly", next_invoice_date=date(2024, 5, 1))

        advance(template, date(2024, 6, 1), datetime(2024, 6, 1, tzinfo=timezone.utc))

        assert template.next_invoice_date == date(2024, 6, 8)
