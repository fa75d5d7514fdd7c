"""Invoice totals calculation and line item updates.

All amounts are plain floats kept at full precision. Rounding to two decimals
happens only when an amount is formatted for display.
"""
import math
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Union

from apps.invoices.types import InvoiceTotals, LineItem


@dataclass(frozen=True)
class QuantityPatch:
    value: float


@dataclass(frozen=True)
class RatePatch:
    value: float


@dataclass(frozen=True)
class DescriptionPatch:
    value: str


LineItemPatch = Union[QuantityPatch, RatePatch, DescriptionPatch]


def coerce_number(value) -> float:
    """
    Convert user input to a float, treating anything unparsable as 0.

    Accepts numbers and numeric strings. None, empty strings, garbage text,
    NaN and infinities all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def line_total(quantity: float, rate: float) -> float:
    """Total of a single line: quantity times unit rate, unrounded."""
    return quantity * rate


def calculate_totals(
    items: Iterable, tax_rate: float, discount: float
) -> InvoiceTotals:
    """
    Derive subtotal, tax and grand total for an invoice.

    Args:
        items: Objects with ``quantity`` and ``rate`` attributes. Line totals
            are re-derived from these, stored ``total`` values are ignored.
        tax_rate: Percentage, e.g. 7.5 for 7.5%.
        discount: Flat amount subtracted after tax.

    Returns:
        InvoiceTotals. The total is not clamped and may be negative.
    """
    subtotal = 0.0
    for item in items:
        subtotal = subtotal + line_total(item.quantity, item.rate)

    tax_total = subtotal * (tax_rate / 100)
    total = subtotal + tax_total - discount

    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_total=tax_total,
        discount=discount,
        total=total,
    )


def derive_line_totals(items: Iterable[LineItem]) -> list[LineItem]:
    """Return copies of the items with ``total`` recomputed."""
    return [replace(item, total=line_total(item.quantity, item.rate)) for item in items]


def apply_patch(item: LineItem, patch: LineItemPatch) -> LineItem:
    """Apply a single field update to a line item and recompute its total."""
    if isinstance(patch, QuantityPatch):
        updated = replace(item, quantity=coerce_number(patch.value))
    elif isinstance(patch, RatePatch):
        updated = replace(item, rate=coerce_number(patch.value))
    elif isinstance(patch, DescriptionPatch):
        updated = replace(item, description=patch.value or "")
    else:
        raise TypeError(f"Unsupported line item patch: {patch!r}")

    updated.total = line_total(updated.quantity, updated.rate)
    return updated


def new_line_item(item_id: str | None = None) -> LineItem:
    """A blank line: quantity 1, rate 0."""
    return LineItem(id=item_id or str(uuid.uuid4()), description="", quantity=1.0, rate=0.0, total=0.0)


def add_line_item(items: list[LineItem], item_id: str | None = None) -> list[LineItem]:
    return [*items, new_line_item(item_id)]


def remove_line_item(items: list[LineItem], item_id: str) -> list[LineItem]:
    return [item for item in items if item.id != item_id]


def update_line_item(
    items: list[LineItem], item_id: str, patch: LineItemPatch
) -> list[LineItem]:
    """Apply ``patch`` to the item with ``item_id``; other items are unchanged."""
    return [apply_patch(item, patch) if item.id == item_id else item for item in items]


def format_amount(value: float, currency: str | None = None) -> str:
    """Format an amount with two decimals for display."""
    formatted = f"{value:,.2f}"
    if currency:
        return f"{currency} {formatted}"
    return formatted
