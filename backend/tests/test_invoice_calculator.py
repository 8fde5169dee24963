"""Tests for the invoice calculator: per-step rounding and input validation."""

from decimal import Decimal

import pytest

from billing.errors import ValidationError
from billing.services.invoice_calculator import (
    LineItemInput,
    compute_invoice_totals,
    make_line_item,
    round2,
)


def _items(*rows):
    return [make_line_item(description, quantity, unit_price) for description, quantity, unit_price in rows]


# ---------------------------------------------------------------------------
# compute_invoice_totals
# ---------------------------------------------------------------------------

class TestComputeInvoiceTotals:
    def test_discount_then_tax(self):
        totals = compute_invoice_totals(
            _items(("Widget", 2, 100), ("Gadget", 1, 50)),
            tax_rate=11,
            discount_rate=5,
        )
        assert totals.subtotal == Decimal("250")
        assert totals.discount_amount == Decimal("12.50")
        assert totals.tax_amount == Decimal("26.13")
        assert totals.total_amount == Decimal("263.63")

    def test_rounds_each_step_not_only_the_total(self):
        """Rounding only the final figure would give 0.11 here."""
        totals = compute_invoice_totals(_items(("Sticker", 1, "0.10")), tax_rate=11, discount_rate=5)
        assert totals.discount_amount == Decimal("0.01")
        assert totals.tax_amount == Decimal("0.01")
        assert totals.total_amount == Decimal("0.10")

    def test_subtotal_is_exact_unrounded_sum(self):
        totals = compute_invoice_totals(
            _items(("Cable", "1.5", "3.33"), ("Plug", "3", "0.07")),
            tax_rate=0,
            discount_rate=0,
        )
        assert totals.subtotal == Decimal("4.995") + Decimal("0.21")

    def test_zero_rates_total_equals_subtotal(self):
        totals = compute_invoice_totals(_items(("Hosting", 12, "19.99")), tax_rate=0, discount_rate=0)
        assert totals.total_amount == totals.subtotal
        assert totals.discount_amount == Decimal("0")
        assert totals.tax_amount == Decimal("0")

    def test_total_matches_components(self):
        totals = compute_invoice_totals(_items(("Audit", 3, "333.33")), tax_rate="7.5", discount_rate="2.5")
        assert totals.total_amount == round2(totals.subtotal - totals.discount_amount + totals.tax_amount)

    def test_full_discount(self):
        totals = compute_invoice_totals(_items(("Promo", 1, 80)), tax_rate=11, discount_rate=100)
        assert totals.discount_amount == Decimal("80.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("0.00")

    def test_same_inputs_same_outputs(self):
        items = _items(("Widget", 2, 100), ("Gadget", 1, 50))
        assert compute_invoice_totals(items, 11, 5) == compute_invoice_totals(items, 11, 5)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestValidation:
    def test_rejects_empty_item_list(self):
        with pytest.raises(ValidationError):
            compute_invoice_totals([], tax_rate=11, discount_rate=0)

    @pytest.mark.parametrize("quantity, unit_price", [(0, 10), (-1, 10), (1, 0), (1, "-5")])
    def test_make_line_item_rejects_non_positive(self, quantity, unit_price):
        with pytest.raises(ValidationError):
            make_line_item("Widget", quantity, unit_price)

    def test_rejects_non_positive_item_built_directly(self):
        item = LineItemInput(description="Refund", quantity=Decimal("1"), unit_price=Decimal("-10"))
        with pytest.raises(ValidationError):
            compute_invoice_totals([item], tax_rate=0, discount_rate=0)

    def test_rejects_blank_description(self):
        with pytest.raises(ValidationError):
            make_line_item("   ", 1, 10)

    @pytest.mark.parametrize("rate", [-1, "100.01", 250])
    def test_rejects_tax_rate_out_of_range(self, rate):
        with pytest.raises(ValidationError):
            compute_invoice_totals(_items(("Widget", 1, 10)), tax_rate=rate, discount_rate=0)

    @pytest.mark.parametrize("rate", [-0.5, 101])
    def test_rejects_discount_rate_out_of_range(self, rate):
        with pytest.raises(ValidationError):
            compute_invoice_totals(_items(("Widget", 1, 10)), tax_rate=0, discount_rate=rate)

    def test_rejects_non_numeric_input(self):
        with pytest.raises(ValidationError):
            make_line_item("Widget", "two", 10)

    @pytest.mark.parametrize("quantity, unit_price", [("1000", "0.125"), ("0.333", "10")])
    def test_rejects_more_than_two_decimal_places(self, quantity, unit_price):
        with pytest.raises(ValidationError):
            make_line_item("Bolts", quantity, unit_price)

    def test_trailing_zeros_do_not_count_as_precision(self):
        item = make_line_item("Bolts", "2.500", "1100")
        assert item.total == Decimal("2750")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_round2_is_half_up():
    assert round2(Decimal("26.125")) == Decimal("26.13")
    assert round2(Decimal("2.675")) == Decimal("2.68")
    assert round2(Decimal("2.674")) == Decimal("2.67")


def test_floats_are_converted_without_binary_noise():
    item = make_line_item("Widget", 0.1, 0.2)
    assert item.quantity == Decimal("0.1")
    assert item.total == Decimal("0.02")
