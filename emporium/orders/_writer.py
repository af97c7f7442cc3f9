"""
Order writer: persist one vendor partition as an order plus its items.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Callable

from emporium._errors import PartitionWriteError, StoreError
from emporium.cart import VendorPartition
from emporium.config import CheckoutConfig
from emporium.identity import Address
from emporium.orders._types import Order, OrderItem, OrderStatus, PaymentStatus
from emporium.shipping import ShippingMethod
from emporium.store import ORDER_ITEMS, ORDERS, DataStore, Eq

logger = logging.getLogger(__name__)

PICKUP_ADDRESS_TYPE = "pickup"


class OrderWriter:
    """
    Writes orders for one checkout.

    Each vendor order is written independently. A failure raises
    PartitionWriteError for that vendor only; sibling orders already written
    stay where they are, and an order whose items failed to write is left in
    place too.

    Note: order numbers are "{prefix}-{epoch_ms}-{NNN}". Unique in practice,
    not guaranteed. Nothing reconciles collisions.
    """

    def __init__(
        self,
        store: DataStore,
        config: CheckoutConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._config = config or CheckoutConfig()
        self._clock = clock

    def order_number(self) -> str:
        millis = int(self._clock() * 1000)
        return f"{self._config.order_number_prefix}-{millis}-{secrets.randbelow(1000):03d}"

    def shipping_address(self, shipping: ShippingMethod, address: Address | None) -> dict[str, Any]:
        if shipping.is_pickup:
            return {"type": PICKUP_ADDRESS_TYPE, "label": self._config.pickup_label}
        return address.as_dict() if address is not None else {}

    async def write(
        self,
        part: VendorPartition,
        shipping: ShippingMethod,
        payment_method: str,
        customer_id: str,
        address: Address | None = None,
        batch_id: str | None = None,
    ) -> Order:
        row = {
            "order_number": self.order_number(),
            "customer_id": customer_id,
            "vendor_id": part.vendor_id,
            "batch_id": batch_id,
            "status": OrderStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "payment_method": payment_method,
            "shipping_method_id": None if shipping.is_pickup else shipping.id,
            "shipping_address": self.shipping_address(shipping, address),
            "subtotal": part.subtotal,
            "tax_total": part.tax_total,
            "shipping_total": part.shipping_total,
            "total": part.total,
            "commission_amount": part.commission_total,
        }

        try:
            [saved] = await self._store.insert(ORDERS, [row])
        except StoreError as e:
            logger.error("Order write failed for vendor %s: %s", part.vendor_id, e.message)
            raise PartitionWriteError(
                part.vendor_id, f"Failed to create order for vendor {part.vendor_id}: {e.message}"
            ) from e

        order = Order.from_row(saved)

        item_rows = [
            {
                "order_id": order.id,
                "product_id": priced.line.product_id,
                "quantity": priced.line.quantity,
                "unit_price": priced.line.unit_price,
                "total_price": priced.line.subtotal,
            }
            for priced in part.lines
        ]
        try:
            saved_items = await self._store.insert(ORDER_ITEMS, item_rows)
        except StoreError as e:
            logger.error("Item write failed for order %s: %s", order.order_number, e.message)
            raise PartitionWriteError(
                part.vendor_id, f"Failed to create items for order {order.order_number}: {e.message}"
            ) from e

        logger.info(
            "Order %s written for vendor %s (total %s)",
            order.order_number,
            part.vendor_id,
            order.total,
        )
        return order.with_items(tuple(OrderItem.from_row(r) for r in saved_items))

    async def mark_paid(self, order: Order) -> Order:
        await self._store.update(
            ORDERS,
            {
                "status": OrderStatus.PROCESSING.value,
                "payment_status": PaymentStatus.PAID.value,
            },
            Eq("id", order.id),
        )
        logger.info("Order %s paid", order.order_number)
        return order.with_status(OrderStatus.PROCESSING, PaymentStatus.PAID)

    async def cancel(self, order: Order) -> Order:
        """Cancel an unpaid order. Paid orders are returned unchanged."""
        updated = await self._store.update(
            ORDERS,
            {"status": OrderStatus.CANCELLED.value},
            Eq("id", order.id),
            Eq("status", OrderStatus.PENDING.value),
            Eq("payment_status", PaymentStatus.PENDING.value),
        )
        if not updated:
            return order
        logger.info("Order %s cancelled", order.order_number)
        return Order.from_row(updated[0], order.items)

    async def load(self, order_id: str) -> Order | None:
        rows = await self._store.select(ORDERS, Eq("id", order_id))
        if not rows:
            return None
        items = await self._store.select(ORDER_ITEMS, Eq("order_id", order_id))
        return Order.from_row(rows[0], tuple(OrderItem.from_row(r) for r in items))

    async def batch(self, batch_id: str) -> list[Order]:
        rows = await self._store.select(ORDERS, Eq("batch_id", batch_id), order_by="created_at")
        return [Order.from_row(r) for r in rows]


__all__ = ("PICKUP_ADDRESS_TYPE", "OrderWriter")
