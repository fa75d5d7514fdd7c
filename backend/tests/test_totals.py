"""Tests for invoice totals calculation and line item updates."""
import pytest

from apps.invoices.totals import (
    DescriptionPatch,
    QuantityPatch,
    RatePatch,
    add_line_item,
    apply_patch,
    calculate_totals,
    coerce_number,
    derive_line_totals,
    format_amount,
    new_line_item,
    remove_line_item,
    update_line_item,
)
from apps.invoices.types import InvoiceTotals, LineItem


def make_item(item_id, quantity, rate, description=""):
    return LineItem(
        id=item_id,
        description=description,
        quantity=quantity,
        rate=rate,
        total=quantity * rate,
    )


class TestCalculateTotals:
    def test_example_invoice(self):
        items = [make_item("a", 2, 50), make_item("b", 1, 30)]

        totals = calculate_totals(items, tax_rate=10, discount=5)

        assert totals.subtotal == pytest.approx(130)
        assert totals.tax_total == pytest.approx(13)
        assert totals.total == pytest.approx(138)
        assert totals.tax_rate == 10
        assert totals.discount == 5

    def test_same_input_gives_same_totals(self):
        items = [make_item("a", 3, 19.99), make_item("b", 0.5, 120)]

        first = calculate_totals(items, 7.5, 12.25)
        second = calculate_totals(items, 7.5, 12.25)

        assert first == second

    def test_derived_amounts(self):
        items = [make_item("a", 1.5, 33.3), make_item("b", 4, 12.5), make_item("c", 0, 99)]

        totals = calculate_totals(items, 19, 3)

        expected_subtotal = 1.5 * 33.3 + 4 * 12.5 + 0 * 99
        assert totals.subtotal == pytest.approx(expected_subtotal)
        assert totals.tax_total == pytest.approx(expected_subtotal * 0.19)
        assert totals.total == pytest.approx(totals.subtotal + totals.tax_total - 3)

    def test_empty_items(self):
        totals = calculate_totals([], 10, 5)

        assert totals == InvoiceTotals(subtotal=0, tax_rate=10, tax_total=0, discount=5, total=-5)

    def test_discount_larger_than_total_is_not_clamped(self):
        totals = calculate_totals([make_item("a", 1, 10)], 0, 25)

        assert totals.total == pytest.approx(-15)

    def test_stale_item_totals_are_ignored(self):
        item = LineItem(id="a", quantity=2, rate=10, total=999)

        totals = calculate_totals([item], 0, 0)

        assert totals.subtotal == pytest.approx(20)

    def test_items_are_not_mutated(self):
        item = LineItem(id="a", quantity=2, rate=10, total=999)

        calculate_totals([item], 10, 0)

        assert item.total == 999

    def test_full_precision_is_kept(self):
        totals = calculate_totals([make_item("a", 1, 0.1), make_item("b", 1, 0.2)], 0, 0)

        assert totals.subtotal == 0.1 + 0.2


class TestDeriveLineTotals:
    def test_recomputes_every_total(self):
        items = [LineItem(id="a", quantity=3, rate=4, total=0), LineItem(id="b", quantity=2, rate=2.5)]

        derived = derive_line_totals(items)

        assert [item.total for item in derived] == [12, 5]
        assert items[0].total == 0


class TestApplyPatch:
    @pytest.mark.parametrize(
        "patch",
        [QuantityPatch(3), RatePatch(12.5), DescriptionPatch("Consulting")],
    )
    def test_total_matches_quantity_times_rate(self, patch):
        item = make_item("a", 2, 10)

        updated = apply_patch(item, patch)

        assert updated.total == updated.quantity * updated.rate

    def test_quantity_patch(self):
        updated = apply_patch(make_item("a", 2, 10), QuantityPatch(5))

        assert updated.quantity == 5
        assert updated.total == 50

    def test_rate_patch(self):
        updated = apply_patch(make_item("a", 2, 10), RatePatch(7.25))

        assert updated.rate == 7.25
        assert updated.total == 14.5

    def test_description_patch_keeps_amounts(self):
        updated = apply_patch(make_item("a", 2, 10), DescriptionPatch("Design work"))

        assert updated.description == "Design work"
        assert updated.total == 20

    def test_invalid_numbers_become_zero(self):
        updated = apply_patch(make_item("a", 2, 10), QuantityPatch("abc"))

        assert updated.quantity == 0
        assert updated.total == 0

    def test_original_is_unchanged(self):
        item = make_item("a", 2, 10)

        apply_patch(item, QuantityPatch(9))

        assert item.quantity == 2
        assert item.total == 20

    def test_unknown_patch_raises(self):
        with pytest.raises(TypeError):
            apply_patch(make_item("a", 1, 1), {"quantity": 3})


class TestLineItemList:
    def test_update_only_touches_matching_item(self):
        items = [make_item("a", 1, 10), make_item("b", 1, 20)]

        updated = update_line_item(items, "b", QuantityPatch(3))

        assert updated[0] is items[0]
        assert updated[1].total == 60

    def test_add_and_remove(self):
        items = add_line_item([make_item("a", 1, 10)], item_id="b")

        assert [item.id for item in items] == ["a", "b"]
        assert items[1].quantity == 1
        assert items[1].total == 0

        assert [item.id for item in remove_line_item(items, "a")] == ["b"]

    def test_new_line_item_gets_unique_ids(self):
        assert new_line_item().id != new_line_item().id


class TestCoerceNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (3, 3.0),
            ("2.5", 2.5),
            (" 4 ", 4.0),
            ("", 0.0),
            (None, 0.0),
            ("abc", 0.0),
            ("nan", 0.0),
            (float("inf"), 0.0),
            (True, 0.0),
        ],
    )
    def test_coerce(self, value, expected):
        assert coerce_number(value) == expected


class TestFormatAmount:
    def test_two_decimals(self):
        assert format_amount(1234.5) == "1,234.50"

    def test_with_currency(self):
        assert format_amount(138, "USD") == "USD 138.00"

    def test_rounds_only_for_display(self):
        assert format_amount(0.1 + 0.2) == "0.30"
