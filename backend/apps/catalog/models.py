"""Catalog models."""
from django.db import models

from apps.core.models import OwnedModel


class CatalogItem(OwnedModel):
    """A reusable product or service that can be added to an invoice."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    rate = models.FloatField(default=0)
    unit = models.CharField(max_length=20, default="un")
    category = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    def to_line_item(self, item_id: str):
        """Build an invoice line item (quantity 1) priced at this item's rate."""
        from apps.invoices.totals import line_total
        from apps.invoices.types import LineItem

        description = self.name
        if self.description:
            description = f"{self.name} - {self.description}"
        return LineItem(
            id=item_id,
            description=description,
            quantity=1.0,
            rate=self.rate,
            total=line_total(1.0, self.rate),
        )
