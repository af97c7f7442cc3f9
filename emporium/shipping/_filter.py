"""
Shipping eligibility: pure functions over method lists.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from emporium._money import Money, ZERO, money
from emporium.shipping._types import ShippingMethod, PICKUP


def is_eligible(method: ShippingMethod, order_subtotal: Money) -> bool:
    if method.is_pickup:
        return True
    amount = money(order_subtotal)
    minimum = method.min_order_total if method.min_order_total is not None else ZERO
    if amount < minimum:
        return False
    return method.max_order_total is None or amount <= method.max_order_total


def eligible(
    methods: Iterable[ShippingMethod],
    order_subtotal: Money,
) -> list[ShippingMethod]:
    """
    PICKUP followed by every stored method that fits the amount.

    Storage order is preserved. A stored row that claims the pickup id is
    dropped in favour of the synthetic one.
    """
    return [PICKUP] + [
        m for m in methods if not m.is_pickup and is_eligible(m, order_subtotal)
    ]


def default_shipping(options: Sequence[ShippingMethod]) -> ShippingMethod:
    """Initial selection when the checkout opens: pickup."""
    return next((m for m in options if m.is_pickup), PICKUP)


def reselect(
    current: ShippingMethod | None,
    options: Sequence[ShippingMethod],
) -> ShippingMethod:
    """
    Selection after the cart changed.

    Keeps ``current`` while it is still offered, otherwise falls to the first
    non-pickup option, otherwise to pickup.
    """
    if current is not None and any(m.id == current.id for m in options):
        return current
    return next((m for m in options if not m.is_pickup), PICKUP)


__all__ = ("is_eligible", "eligible", "default_shipping", "reselect")
