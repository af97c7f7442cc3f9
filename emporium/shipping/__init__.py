"""
Shipping: which delivery methods apply to an order amount.

    from emporium import shipping as Sh

    methods = [Sh.ShippingMethod.from_row(r) for r in rows]
    options = Sh.eligible(methods, Decimal("49.99"))   # PICKUP always first
    selected = Sh.reselect(selected, options)          # after cart changes

PICKUP is synthetic: never stored, always eligible, always free.
"""

from emporium.shipping._types import ShippingMethod, PICKUP, PICKUP_ID
from emporium.shipping._filter import (
    eligible,
    is_eligible,
    reselect,
    default_shipping,
)

__all__ = (
    "ShippingMethod",
    "PICKUP",
    "PICKUP_ID",
    "eligible",
    "is_eligible",
    "reselect",
    "default_shipping",
)
