"""
Shipping types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from emporium._money import Money, ZERO, money

PICKUP_ID = "pickup"


@dataclass(frozen=True, slots=True)
class ShippingMethod:
    """A delivery option. Order-total bounds are inclusive; None means unbounded."""

    id: str
    display_name: str
    base_cost: Money
    delivery_time_min: int = 0
    delivery_time_max: int = 0
    min_order_total: Money | None = None
    max_order_total: Money | None = None

    @property
    def is_pickup(self) -> bool:
        return self.id == PICKUP_ID

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ShippingMethod:
        min_total = row.get("min_order_total")
        max_total = row.get("max_order_total")
        return cls(
            id=str(row["id"]),
            display_name=row.get("display_name") or str(row["id"]),
            base_cost=money(row.get("base_cost")),
            delivery_time_min=int(row.get("delivery_time_min") or 0),
            delivery_time_max=int(row.get("delivery_time_max") or 0),
            min_order_total=None if min_total is None else money(min_total),
            max_order_total=None if max_total is None else money(max_total),
        )


PICKUP = ShippingMethod(
    id=PICKUP_ID,
    display_name="Store Pickup",
    base_cost=ZERO,
)


__all__ = ("PICKUP_ID", "ShippingMethod", "PICKUP")
