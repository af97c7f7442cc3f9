"""
Order types.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

from emporium._money import Money, money


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"


@dataclass(frozen=True, slots=True)
class OrderItem:
    order_id: str
    product_id: str
    quantity: int
    unit_price: Money
    total_price: Money
    id: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> OrderItem:
        return cls(
            order_id=row["order_id"],
            product_id=row["product_id"],
            quantity=int(row["quantity"]),
            unit_price=money(row["unit_price"]),
            total_price=money(row["total_price"]),
            id=row.get("id", ""),
        )


@dataclass(frozen=True, slots=True)
class Order:
    """
    One vendor's order.

    Invariants:
        Σ item.total_price == subtotal
        total == subtotal + tax_total + shipping_total
    """

    id: str
    order_number: str
    customer_id: str
    vendor_id: str
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: str
    shipping_method_id: str | None
    shipping_address: dict[str, Any]
    subtotal: Money
    tax_total: Money
    shipping_total: Money
    total: Money
    commission_amount: Money
    items: tuple[OrderItem, ...] = ()
    batch_id: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status is PaymentStatus.PAID

    @property
    def is_open(self) -> bool:
        """Written, not paid, not cancelled."""
        return self.status is OrderStatus.PENDING and self.payment_status is PaymentStatus.PENDING

    def with_status(self, status: OrderStatus, payment_status: PaymentStatus) -> Order:
        return replace(self, status=status, payment_status=payment_status)

    def with_items(self, items: tuple[OrderItem, ...]) -> Order:
        return replace(self, items=items)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], items: tuple[OrderItem, ...] = ()) -> Order:
        return cls(
            id=row["id"],
            order_number=row["order_number"],
            customer_id=row["customer_id"],
            vendor_id=row["vendor_id"],
            status=OrderStatus(row["status"]),
            payment_status=PaymentStatus(row["payment_status"]),
            payment_method=row["payment_method"],
            shipping_method_id=row.get("shipping_method_id"),
            shipping_address=dict(row.get("shipping_address") or {}),
            subtotal=money(row["subtotal"]),
            tax_total=money(row["tax_total"]),
            shipping_total=money(row["shipping_total"]),
            total=money(row["total"]),
            commission_amount=money(row["commission_amount"]),
            items=items,
            batch_id=row.get("batch_id"),
        )


__all__ = ("OrderStatus", "PaymentStatus", "OrderItem", "Order")
