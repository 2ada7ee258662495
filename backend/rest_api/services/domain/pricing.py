"""
Order pricing.

All arithmetic is exact Decimal. Line amounts are summed unrounded and the
two totals are rounded to cents once, after summing; the grand total is the
sum of the two rounded totals, so grand_total == subtotal + vat_total holds
exactly for every order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENT = Decimal("0.01")
HUNDRED = Decimal(100)


def to_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class PricedLine:
    """One cart line with the prices snapshotted from the menu."""

    unit_price: Decimal
    vat_rate: Decimal  # percent
    qty: int

    @property
    def line_subtotal(self) -> Decimal:
        return self.unit_price * self.qty

    @property
    def line_vat(self) -> Decimal:
        return self.line_subtotal * self.vat_rate / HUNDRED


@dataclass(frozen=True, slots=True)
class OrderTotals:
    subtotal: Decimal
    vat_total: Decimal
    grand_total: Decimal


def compute_order_totals(lines: Iterable[PricedLine]) -> OrderTotals:
    """
    Totals for a set of lines.

        >>> compute_order_totals([
        ...     PricedLine(Decimal("45.00"), Decimal("18"), 1),
        ...     PricedLine(Decimal("65.00"), Decimal("18"), 2),
        ... ])
        OrderTotals(subtotal=Decimal('175.00'), vat_total=Decimal('31.50'), grand_total=Decimal('206.50'))
    """
    raw_subtotal = Decimal(0)
    raw_vat = Decimal(0)
    for line in lines:
        raw_subtotal += line.line_subtotal
        raw_vat += line.line_vat

    subtotal = to_money(raw_subtotal)
    vat_total = to_money(raw_vat)
    return OrderTotals(
        subtotal=subtotal,
        vat_total=vat_total,
        grand_total=subtotal + vat_total,
    )
