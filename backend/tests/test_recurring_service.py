"""Tests for recurring invoice templates and invoice generation."""
from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest
from django.db import DatabaseError, IntegrityError

from apps.core.permissions import PermissionError
from apps.invoices.models import Invoice, InvoiceItem
from apps.invoices.services import InvoiceService
from apps.recurring.models import RecurringInvoice
from apps.recurring.services import RecurringInvoiceService, StaleRecurringInvoiceError

NOW = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)
TODAY = date(2024, 6, 1)


@pytest.fixture
def service(user):
    return RecurringInvoiceService(user)


@pytest.fixture
def template(service, client_record):
    """A monthly template that is due on TODAY."""
    return service.create(
        frequency="monthly",
        start_date=TODAY,
        amount=250,
        currency="EUR",
        description="Retainer",
        client_id=client_record.id,
        today=date(2024, 5, 1),
    )


class TestCreate:
    def test_snapshot_uses_selected_client(self, template, client_record):
        assert template.client == client_record
        assert template.invoice_template["client_name"] == "Acme Corp"
        assert template.invoice_template["client_email"] == "billing@acme.test"
        assert template.invoice_template["total"] == 250
        assert template.invoice_template["items"][0]["description"] == "Retainer"
        assert template.is_active
        assert template.invoices_generated == 0

    def test_future_start_is_next_date(self, template):
        assert template.next_invoice_date == TODAY

    def test_past_start_schedules_from_today(self, service):
        template = service.create(
            frequency="weekly",
            start_date=date(2024, 1, 1),
            amount=10,
            client_name="Walk-in",
            today=TODAY,
        )

        assert template.next_invoice_date == date(2024, 6, 8)
        assert template.invoice_template["client_name"] == "Walk-in"
        assert template.invoice_template["currency"] == "USD"

    def test_foreign_client_is_ignored(self, service, other_user):
        from apps.clients.models import Client

        foreign = Client.objects.create(user=other_user, name="Not yours")

        template = service.create(
            frequency="monthly", start_date=TODAY, amount=5, client_id=foreign.id, today=TODAY
        )

        assert template.client is None

    def test_unknown_frequency(self, service):
        with pytest.raises(ValueError):
            service.create(frequency="daily", start_date=TODAY, amount=10, today=TODAY)

    def test_end_before_start(self, service):
        with pytest.raises(ValueError):
            service.create(
                frequency="monthly",
                start_date=TODAY,
                end_date=date(2024, 5, 1),
                amount=10,
                today=TODAY,
            )

    def test_requires_user(self):
        with pytest.raises(PermissionError):
            RecurringInvoiceService(None)


class TestListTemplates:
    def test_lists_own_templates(self, service, template, other_user):
        RecurringInvoiceService(other_user).create(
            frequency="weekly", start_date=TODAY, amount=10, today=TODAY
        )

        assert list(service.list_templates()) == [template]

    def test_credit_and_zero_amounts_are_stored(self, service):
        credit = service.create(frequency="monthly", start_date=TODAY, amount=-50, today=TODAY)
        placeholder = service.create(frequency="monthly", start_date=TODAY, amount=0, today=TODAY)

        assert credit.invoice_template["total"] == -50
        assert credit.invoice_template["items"][0]["rate"] == -50
        assert placeholder.invoice_template["total"] == 0


class TestDueTemplates:
    def test_due_template_is_listed(self, service, template):
        assert service.due_templates(TODAY) == [template]

    def test_not_yet_due(self, service, template):
        assert service.due_templates(date(2024, 5, 31)) == []

    def test_paused_template_is_skipped(self, service, template):
        service.toggle_active(template)

        assert not template.is_active
        assert service.due_templates(TODAY) == []

    def test_ended_template_is_skipped(self, service, template):
        template.end_date = date(2024, 5, 31)
        template.save()

        assert service.due_templates(TODAY) == []

    def test_other_users_templates_are_not_listed(self, template, other_user):
        assert RecurringInvoiceService(other_user).due_templates(TODAY) == []


class TestGenerateNow:
    def test_creates_invoice_and_advances(self, service, template, client_record):
        invoice = service.generate_now(template, today=TODAY, now=NOW)

        assert invoice.invoice_number.startswith("REC-")
        assert len(invoice.invoice_number) == 10
        assert invoice.date == TODAY
        assert invoice.due_date == date(2024, 7, 1)
        assert invoice.status == Invoice.Status.DRAFT
        assert invoice.currency == "EUR"
        assert invoice.client_name == "Acme Corp"
        assert invoice.client == client_record
        assert invoice.total == 250
        assert invoice.recurring_invoice == template
        assert invoice.recurring_sequence == 1

        items = list(invoice.items.all())
        assert len(items) == 1
        assert items[0].description == "Retainer"
        assert items[0].total == 250

        assert template.invoices_generated == 1
        assert template.last_generated_at == NOW
        assert template.next_invoice_date == date(2024, 7, 1)

    def test_uses_snapshot_not_live_client(self, service, template, client_record):
        client_record.name = "Renamed Ltd"
        client_record.save()

        invoice = service.generate_now(template, today=TODAY, now=NOW)

        assert invoice.client_name == "Acme Corp"

    def test_item_insert_failure_leaves_template_unchanged(self, service, template):
        with patch.object(
            InvoiceItem.objects, "bulk_create", side_effect=DatabaseError("disk full")
        ):
            with pytest.raises(DatabaseError):
                service.generate_now(template, today=TODAY, now=NOW)

        template.refresh_from_db()
        assert template.invoices_generated == 0
        assert template.next_invoice_date == TODAY
        assert template.last_generated_at is None
        assert not Invoice.objects.filter(recurring_invoice=template).exists()

    def test_stale_counter_is_rejected(self, service, template):
        with pytest.raises(StaleRecurringInvoiceError):
            service.generate_now(template, today=TODAY, now=NOW, expected_generated=3)

        template.refresh_from_db()
        assert template.invoices_generated == 0
        assert Invoice.objects.count() == 0

    def test_matching_counter_is_accepted(self, service, template):
        service.generate_now(template, today=TODAY, now=NOW, expected_generated=0)

        assert template.invoices_generated == 1

    def test_occurrence_generated_twice_is_rejected(self, service, template, user):
        Invoice.objects.create(
            user=user,
            invoice_number="REC-999999",
            date=TODAY,
            due_date=TODAY,
            recurring_invoice=template,
            recurring_sequence=1,
        )

        with pytest.raises(StaleRecurringInvoiceError):
            service.generate_now(template, today=TODAY, now=NOW)

        template.refresh_from_db()
        assert template.invoices_generated == 0
        assert Invoice.objects.filter(recurring_invoice=template).count() == 1

    def test_unrelated_integrity_error_is_not_reported_as_stale(self, service, template):
        with patch.object(InvoiceService, "save_invoice", side_effect=IntegrityError("other")):
            with pytest.raises(IntegrityError):
                service.generate_now(template, today=TODAY, now=NOW)

        template.refresh_from_db()
        assert template.invoices_generated == 0

    def test_numbers_do_not_collide(self, service, template):
        first = service.generate_now(template, today=TODAY, now=NOW)
        second = service.generate_now(template, today=TODAY, now=NOW)

        assert first.invoice_number != second.invoice_number
        assert second.recurring_sequence == 2

    def test_foreign_template_is_not_found(self, template, other_user):
        with pytest.raises(RecurringInvoice.DoesNotExist):
            RecurringInvoiceService(other_user).generate_now(template, today=TODAY, now=NOW)


class TestGenerateDue:
    def test_generates_all_due(self, service, template):
        service.create(
            frequency="weekly", start_date=TODAY, amount=40, client_name="Beta", today=date(2024, 5, 1)
        )

        results = service.generate_due(today=TODAY, now=NOW)

        assert len(results) == 2
        assert all(result.success for result in results)
        assert Invoice.objects.count() == 2
        assert service.due_templates(TODAY) == []

    def test_failure_does_not_stop_batch(self, service, template, user):
        broken = RecurringInvoice.objects.create(
            user=user,
            frequency="fortnightly",
            start_date=TODAY,
            next_invoice_date=TODAY,
            invoice_template={"items": [{"description": "x", "quantity": 1, "rate": 5}]},
        )

        results = service.generate_due(today=TODAY, now=NOW)

        by_template = {result.template.id: result for result in results}
        assert by_template[template.id].success
        assert not by_template[broken.id].success
        assert "fortnightly" in by_template[broken.id].error

        broken.refresh_from_db()
        assert broken.invoices_generated == 0
        assert not Invoice.objects.filter(recurring_invoice=broken).exists()


class TestDelete:
    def test_generated_invoices_are_kept(self, service, template):
        invoice = service.generate_now(template, today=TODAY, now=NOW)

        service.delete(template)

        invoice.refresh_from_db()
        assert invoice.recurring_invoice is None
        assert not RecurringInvoice.objects.filter(id=template.id).exists()
