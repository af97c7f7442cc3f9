"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterable

from emporium._money import Money, money

UNKNOWN_VENDOR = "unknown"


@dataclass(frozen=True, slots=True)
class CartLine:
    product_id: str
    vendor_id: str
    unit_price: Money
    quantity: int
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit_price", money(self.unit_price))
        if not self.vendor_id:
            object.__setattr__(self, "vendor_id", UNKNOWN_VENDOR)

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class PricedLine:
    """A cart line after the pricing engine ran. Never persisted on its own."""

    line: CartLine
    tax_amount: Money
    commission_amount: Money
    line_total: Money


class Cart:
    """
    The customer's cart, the only mutable state a checkout touches.

    The orchestrator clears it exactly once, after the whole checkout
    succeeded.
    """

    __slots__ = ("_lines", "_cleared")

    def __init__(self, lines: Iterable[CartLine] = ()) -> None:
        self._lines: list[CartLine] = list(lines)
        self._cleared = 0

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def times_cleared(self) -> int:
        return self._cleared

    def add(self, line: CartLine) -> None:
        self._lines.append(line)

    def clear(self) -> None:
        self._lines.clear()
        self._cleared += 1

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)


@dataclass(frozen=True, slots=True)
class VendorPartition:
    """
    One vendor's share of a checkout. Becomes exactly one order.

    subtotal: Σ unit_price * qty (pre-tax, pre-shipping)
    total: subtotal + tax_total + shipping_total
    """

    vendor_id: str
    lines: tuple[PricedLine, ...]
    subtotal: Money
    tax_total: Money
    commission_total: Money
    shipping_total: Money
    total: Money

    @property
    def merchandise_total(self) -> Money:
        return self.subtotal + self.tax_total


__all__ = ("UNKNOWN_VENDOR", "CartLine", "PricedLine", "Cart", "VendorPartition")
