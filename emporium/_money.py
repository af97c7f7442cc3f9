"""
Money: fixed two-place decimal amounts.

Every amount in the core is a Decimal. Multiplication happens on the
unrounded values, rounding happens once per line.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import TypeAlias

Money: TypeAlias = Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Decimal | int | float | str | None) -> Money:
    """
    Coerce a stored or user-supplied amount into a Decimal.

    Floats go through str() so 0.1 stays 0.1 and not its binary expansion.
    None reads as zero (nullable numeric columns).
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Decimal) -> Money:
    """Round half-up to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


__all__ = ("Money", "CENT", "ZERO", "money", "round_money")
