"""Currency arithmetic for job estimates and invoice totals.

Every amount is a ``Decimal`` rounded to cents; binary floats never enter
the computation, so repeated tax/total recalculation cannot drift.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple, Union

from core.database import settings

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Optional[Number]) -> Decimal:
    """Coerce a stored or submitted amount to Decimal; None counts as zero."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        # str() keeps the shortest repr, e.g. 0.1 -> "0.1" rather than 0.1000000000000000055
        return Decimal(str(value))
    return Decimal(value)


def quantize(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_tax(subtotal: Number, tax_rate: Optional[Number] = None) -> Decimal:
    rate = settings.TAX_RATE if tax_rate is None else to_decimal(tax_rate)
    return quantize(to_decimal(subtotal) * rate)


def calculate_invoice_totals(
    subtotal: Number, tax_rate: Optional[Number] = None
) -> Tuple[Decimal, Decimal, Decimal]:
    """Return ``(subtotal, tax_amount, total_amount)`` rounded to cents."""
    subtotal = quantize(subtotal)
    tax_amount = calculate_tax(subtotal, tax_rate)
    return subtotal, tax_amount, subtotal + tax_amount


def line_item_amount(quantity: Number, rate: Number) -> Decimal:
    return quantize(to_decimal(quantity) * to_decimal(rate))


def sum_line_items(items: Iterable[Tuple[Number, Number]]) -> Decimal:
    """Sum ``(quantity, rate)`` pairs into a subtotal."""
    return sum((line_item_amount(qty, rate) for qty, rate in items), ZERO)


def estimate_job_cost(
    labor_hours: Optional[Number] = None,
    labor_rate: Optional[Number] = None,
    parts_cost: Optional[Number] = None,
) -> Decimal:
    """labor_hours x labor_rate + parts_cost, with missing factors as 0."""
    labor = to_decimal(labor_hours) * to_decimal(labor_rate)
    return quantize(labor + to_decimal(parts_cost))
