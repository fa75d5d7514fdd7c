"""Invoice numbering service for manual and recurring invoices."""
import secrets
from datetime import datetime

from apps.invoices.models import Invoice


class InvoiceNumberService:
    """
    Generates invoice numbers for a user.

    Manual invoices get a random zero-padded 10-digit number. Invoices
    generated from recurring templates get ``REC-`` followed by the last six
    digits of the epoch milliseconds. Numbers are checked against the user's
    existing invoices, which avoids collisions for one writer but is not a
    global guarantee.
    """

    MANUAL_DIGITS = 10
    RECURRING_PREFIX = "REC-"
    RECURRING_DIGITS = 6
    MAX_ATTEMPTS = 20

    def __init__(self, user):
        self.user = user

    def manual_number(self) -> str:
        """Return an unused random invoice number."""
        for _ in range(self.MAX_ATTEMPTS):
            number = self._format_manual(secrets.randbelow(10 ** self.MANUAL_DIGITS))
            if not self._is_taken(number):
                return number
        raise RuntimeError("Could not allocate a unique invoice number")

    def recurring_number(self, now: datetime) -> str:
        """Return an unused time-derived number for a generated invoice."""
        millis = int(now.timestamp() * 1000)
        for offset in range(self.MAX_ATTEMPTS):
            number = self._format_recurring(millis + offset)
            if not self._is_taken(number):
                return number
        raise RuntimeError("Could not allocate a unique recurring invoice number")

    def _is_taken(self, number: str) -> bool:
        return Invoice.objects.filter(user=self.user, invoice_number=number).exists()

    @classmethod
    def _format_manual(cls, value: int) -> str:
        return f"{value:0{cls.MANUAL_DIGITS}d}"

    @classmethod
    def _format_recurring(cls, millis: int) -> str:
        suffix = millis % (10 ** cls.RECURRING_DIGITS)
        return f"{cls.RECURRING_PREFIX}{suffix:0{cls.RECURRING_DIGITS}d}"
