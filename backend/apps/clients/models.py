"""Client models."""
from django.db import models

from apps.core.models import OwnedModel


class Client(OwnedModel):
    """A billed party whose details are copied onto invoices."""

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def to_snapshot(self) -> dict:
        """Capture current state as the client block of an invoice."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }
