"""Tests for invoice numbering service."""
from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest

from apps.invoices.models import Invoice
from apps.invoices.numbering import InvoiceNumberService


@pytest.fixture
def numbering_service(user):
    return InvoiceNumberService(user)


def make_invoice(user, number):
    return Invoice.objects.create(
        user=user,
        invoice_number=number,
        date=date(2024, 1, 1),
        due_date=date(2024, 1, 16),
    )


class TestInvoiceNumberServiceFormatting:
    def test_manual_is_zero_padded(self):
        assert InvoiceNumberService._format_manual(42) == "0000000042"

    def test_recurring_uses_last_six_digits(self):
        assert InvoiceNumberService._format_recurring(1717228812345) == "REC-812345"

    def test_recurring_is_zero_padded(self):
        assert InvoiceNumberService._format_recurring(1717220000042) == "REC-000042"


class TestManualNumber:
    def test_ten_digits(self, numbering_service):
        number = numbering_service.manual_number()

        assert len(number) == 10
        assert number.isdigit()

    def test_skips_taken_number(self, user, numbering_service):
        make_invoice(user, "0000000001")

        with patch("apps.invoices.numbering.secrets.randbelow", side_effect=[1, 2]):
            assert numbering_service.manual_number() == "0000000002"

    def test_other_users_numbers_do_not_count(self, other_user, numbering_service):
        make_invoice(other_user, "0000000001")

        with patch("apps.invoices.numbering.secrets.randbelow", return_value=1):
            assert numbering_service.manual_number() == "0000000001"

    def test_gives_up_eventually(self, user, numbering_service):
        make_invoice(user, "0000000001")

        with patch("apps.invoices.numbering.secrets.randbelow", return_value=1):
            with pytest.raises(RuntimeError):
                numbering_service.manual_number()


class TestRecurringNumber:
    NOW = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)

    def test_derived_from_time(self, numbering_service):
        assert numbering_service.recurring_number(self.NOW) == "REC-800000"

    def test_bumped_while_taken(self, user, numbering_service):
        make_invoice(user, "REC-800000")
        make_invoice(user, "REC-800001")

        assert numbering_service.recurring_number(self.NOW) == "REC-800002"
