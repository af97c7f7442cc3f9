"""
Orders: one persisted order (plus items) per vendor partition.

    writer = OrderWriter(store, config)
    order = await writer.write(part, shipping, "iveri", customer_id, address, batch_id)

    await writer.mark_paid(order)   # pending/pending → processing/paid
    await writer.cancel(order)      # pending → cancelled, only if unpaid

Lifecycle:
    created      status=pending     payment_status=pending
    paid         status=processing  payment_status=paid
    cancelled    status=cancelled   payment_status=pending
"""

from emporium.orders._types import (
    OrderStatus,
    PaymentStatus,
    Order,
    OrderItem,
)
from emporium.orders._writer import OrderWriter, PICKUP_ADDRESS_TYPE

__all__ = (
    "OrderStatus",
    "PaymentStatus",
    "Order",
    "OrderItem",
    "OrderWriter",
    "PICKUP_ADDRESS_TYPE",
)
