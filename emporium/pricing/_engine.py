"""
Pricing engine: pure functions, no I/O.
"""

from __future__ import annotations

from decimal import Decimal

from emporium._money import Money, ZERO, money, round_money
from emporium.pricing._types import TaxConfig, PriceBreakdown

_HUNDRED = Decimal("100")


def price_line(unit_price: Money, quantity: int, tax: TaxConfig) -> PriceBreakdown:
    """
    Price ``quantity`` units at ``unit_price``.

    Everything is multiplied out first and rounded once, so a line of three
    never drifts from three single units by more than a cent.

    Raises:
        ValueError: negative price or quantity (a caller bug)
    """
    unit_price = money(unit_price)
    if unit_price < 0:
        raise ValueError(f"unit price must be non-negative, got {unit_price}")
    if quantity < 0:
        raise ValueError(f"quantity must be non-negative, got {quantity}")

    base = unit_price * quantity
    vat = round_money(base * tax.vat_rate / _HUNDRED) if tax.vat_enabled else ZERO
    commission = (
        round_money(base * tax.commission_rate / _HUNDRED)
        if tax.commission_enabled
        else ZERO
    )
    return PriceBreakdown(base=base, vat=vat, commission=commission, total=base + vat)


def price(base_price: Money, tax: TaxConfig) -> PriceBreakdown:
    """Price a single unit."""
    return price_line(base_price, 1, tax)


__all__ = ("price", "price_line")
