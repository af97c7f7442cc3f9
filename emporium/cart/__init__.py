"""
Cart: lines, vendor partitions, shipping split.

    from emporium import cart as Ca

    groups = Ca.partition(cart.lines)                       # vendor → lines
    parts = Ca.price_partitions(groups, shipping_cost, tax)  # one per vendor

Shipping is divided evenly by vendor count, not by value or item count.
"""

from emporium.cart._types import (
    CartLine,
    PricedLine,
    Cart,
    VendorPartition,
    UNKNOWN_VENDOR,
)
from emporium.cart._partition import (
    partition,
    split_shipping,
    price_partitions,
    cart_totals,
)

__all__ = (
    "CartLine",
    "PricedLine",
    "Cart",
    "VendorPartition",
    "UNKNOWN_VENDOR",
    "partition",
    "split_shipping",
    "price_partitions",
    "cart_totals",
)
