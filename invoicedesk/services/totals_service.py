"""
Invoice totals calculation.

Order of operations (must not change, saved invoices are re-totalled on
every read and have to reproduce the same figures):

    per item:  gross = qty x price
               taxable = gross - gross x item_discount%
               line_total = taxable + taxable x item_tax%
    invoice:   subtotal = sum(line_total)
               discount_amount = subtotal x discount%
               taxable_amount = subtotal - discount_amount
               tax_amount = taxable_amount x tax%
               total = floor(taxable_amount + tax_amount + 0.5)
               round_off = total - (taxable_amount + tax_amount)

Blank or malformed numeric fields count as zero and percentages are applied
as given, even outside 0-100. Nothing here raises, logs or touches I/O.
"""
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Iterable, Mapping

ZERO = Decimal("0")
HUNDRED = Decimal("100")
HALF = Decimal("0.5")


@dataclass(frozen=True)
class LineAmounts:
    """Amounts for one invoice line."""
    gross: Decimal
    discount_amount: Decimal
    taxable: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived invoice totals, never persisted."""
    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    round_off: Decimal
    total: Decimal

    @property
    def exact_total(self) -> Decimal:
        return self.taxable_amount + self.tax_amount


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a form value to Decimal.

    None, "", whitespace, non-numeric text, NaN and infinities become zero.
    Booleans are not treated as numbers.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else ZERO
    text = value.strip() if isinstance(value, str) else str(value)
    if not text:
        return ZERO
    try:
        result = Decimal(text)
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def item_field(item: Any, *names: str) -> Any:
    """Read the first present field from a mapping, pydantic model or ORM row."""
    for name in names:
        if isinstance(item, Mapping):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return None


def compute_line(item: Any) -> LineAmounts:
    """Fold an item's own discount and tax into its line amount."""
    quantity = to_decimal(item_field(item, "quantity"))
    price = to_decimal(item_field(item, "price"))
    item_discount = to_decimal(item_field(item, "discount"))
    item_tax_rate = to_decimal(item_field(item, "tax_rate", "taxRate"))

    gross = quantity * price
    discount_amount = gross * item_discount / HUNDRED
    taxable = gross - discount_amount
    tax_amount = taxable * item_tax_rate / HUNDRED
    return LineAmounts(
        gross=gross,
        discount_amount=discount_amount,
        taxable=taxable,
        tax_amount=tax_amount,
        total=taxable + tax_amount,
    )


def compute_totals(
    items: Iterable[Any],
    invoice_tax_rate: Any = 0,
    invoice_discount: Any = 0,
) -> InvoiceTotals:
    """
    Compute invoice totals from line items and invoice-level tax/discount.

    Args:
        items: Line items (mappings, pydantic models or objects with
            quantity/price/discount/tax_rate). May be empty.
        invoice_tax_rate: Invoice-level tax percentage.
        invoice_discount: Invoice-level discount percentage.

    Returns:
        InvoiceTotals with a whole-unit ``total`` and signed ``round_off``.
    """
    subtotal = ZERO
    for item in items or ():
        subtotal += compute_line(item).total

    discount_amount = subtotal * to_decimal(invoice_discount) / HUNDRED
    taxable_amount = subtotal - discount_amount
    tax_amount = taxable_amount * to_decimal(invoice_tax_rate) / HUNDRED
    exact_total = taxable_amount + tax_amount
    # Halves go up, towards +infinity: 2.5 -> 3, -2.5 -> -2
    total = (exact_total + HALF).to_integral_value(rounding=ROUND_FLOOR)

    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        round_off=total - exact_total,
        total=total,
    )
