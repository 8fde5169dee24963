"""
Invoice Calculator - derives the monetary fields of an invoice from its line items.

Rounding is applied at each step (discount, tax, total) rather than only to the
final figure, so stored amounts always satisfy
total_amount == (subtotal - discount_amount) + tax_amount.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, List

from billing.errors import ValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
# Scale of the quantity and unit_price columns
ITEM_DECIMAL_PLACES = 2


@dataclass(frozen=True)
class LineItemInput:
    description: str
    quantity: Decimal
    unit_price: Decimal

    @property
    def total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def to_decimal(value, field: str) -> Decimal:
    """Convert ints, strings and Decimals exactly; floats go through str() to avoid binary noise"""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"{field} must be a number, got {value!r}")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def round2(value: Decimal) -> Decimal:
    """Half-up rounding to 2 decimal places"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def decimal_places(value: Decimal) -> int:
    exponent = value.normalize().as_tuple().exponent
    return max(0, -exponent)


def make_line_item(description: str, quantity, unit_price) -> LineItemInput:
    """
    Build a validated line item.

    Rejects empty descriptions and non-positive numbers, as well as quantities
    or prices with more decimal places than the item columns store.
    """
    if not description or not description.strip():
        raise ValidationError("Line item description must not be empty")
    quantity = to_decimal(quantity, "quantity")
    unit_price = to_decimal(unit_price, "unit_price")
    if quantity <= 0:
        raise ValidationError(f"Line item quantity must be positive, got {quantity}")
    if unit_price <= 0:
        raise ValidationError(f"Line item unit_price must be positive, got {unit_price}")
    for field, value in (("quantity", quantity), ("unit_price", unit_price)):
        if decimal_places(value) > ITEM_DECIMAL_PLACES:
            raise ValidationError(
                f"Line item {field} allows at most {ITEM_DECIMAL_PLACES} decimal places, got {value}"
            )
    return LineItemInput(description=description, quantity=quantity, unit_price=unit_price)


def _check_rate(rate, field: str) -> Decimal:
    rate = to_decimal(rate, field)
    if rate < 0 or rate > HUNDRED:
        raise ValidationError(f"{field} must be between 0 and 100, got {rate}")
    return rate


def compute_invoice_totals(items: Iterable[LineItemInput], tax_rate, discount_rate) -> InvoiceTotals:
    """
    Compute subtotal, discount, tax and total for a list of line items.

    Args:
        items: Line items; must be non-empty with positive quantity and unit price
        tax_rate: Percentage in [0, 100], applied after the discount
        discount_rate: Percentage in [0, 100], applied to the subtotal

    Returns:
        InvoiceTotals. subtotal is the exact, unrounded sum of the item totals.

    Raises:
        ValidationError: on an empty item list, a non-positive quantity or price,
            or a rate outside [0, 100]
    """
    items: List[LineItemInput] = list(items)
    if not items:
        raise ValidationError("An invoice needs at least one line item")
    for item in items:
        if item.quantity <= 0 or item.unit_price <= 0:
            raise ValidationError(
                f"Line item '{item.description}' must have positive quantity and unit_price"
            )
    tax_rate = _check_rate(tax_rate, "tax_rate")
    discount_rate = _check_rate(discount_rate, "discount_rate")

    subtotal = sum((item.total for item in items), Decimal("0"))
    discount_amount = round2(subtotal * discount_rate / HUNDRED)
    discounted = subtotal - discount_amount
    tax_amount = round2(discounted * tax_rate / HUNDRED)
    total_amount = round2(discounted + tax_amount)

    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total_amount=total_amount,
    )
