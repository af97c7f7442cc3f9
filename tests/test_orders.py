import re
from decimal import Decimal

import pytest

from emporium import PartitionWriteError
from emporium.cart import CartLine, partition, price_partitions
from emporium.config import CheckoutConfig
from emporium.identity import Address
from emporium.orders import OrderStatus, OrderWriter, PaymentStatus
from emporium.pricing import TaxConfig
from emporium.shipping import PICKUP
from emporium.store import MemoryStore

from tests.conftest import COURIER

TAX = TaxConfig(vat_enabled=True, vat_rate=Decimal("15"), commission_enabled=True)
ADDRESS = Address("12 Samora Machel Ave", "Harare", "Harare", "0000", "Zimbabwe")


def _parts(shipping_cost: str = "6"):
    lines = [
        CartLine("p-1", "a", Decimal("10"), 2),
        CartLine("p-3", "a", Decimal("2.50"), 1),
        CartLine("p-2", "b", Decimal("5"), 1),
    ]
    return price_partitions(partition(lines), Decimal(shipping_cost), TAX)


async def test_order_and_items_written_pending() -> None:
    store = MemoryStore()
    writer = OrderWriter(store)
    part = _parts()[0]

    order = await writer.write(part, COURIER, "iveri", "cust-1", ADDRESS, batch_id="batch-1")

    assert (order.status, order.payment_status) == (OrderStatus.PENDING, PaymentStatus.PENDING)
    assert order.vendor_id == "a"
    assert order.payment_method == "iveri"
    assert order.shipping_method_id == "courier"
    assert order.shipping_address["city"] == "Harare"
    assert order.batch_id == "batch-1"
    assert order.total == order.subtotal + order.tax_total + order.shipping_total
    assert sum(i.total_price for i in order.items) == order.subtotal
    assert [i.product_id for i in order.items] == ["p-1", "p-3"]
    assert len(store.rows("order_items")) == 2


async def test_pickup_gets_canned_address() -> None:
    writer = OrderWriter(MemoryStore(), CheckoutConfig())

    order = await writer.write(_parts("0")[1], PICKUP, "cash", "cust-1", ADDRESS)

    assert order.shipping_address == {"type": "pickup", "label": "Store Pickup"}
    assert order.shipping_method_id is None


def test_order_number_format() -> None:
    writer = OrderWriter(MemoryStore(), CheckoutConfig().with_order_number_prefix("EMP"), clock=lambda: 1700000000.5)

    number = writer.order_number()

    assert re.fullmatch(r"EMP-1700000000500-\d{3}", number)


async def test_order_write_failure_is_partition_error() -> None:
    store = MemoryStore()
    store.fail_on("orders", "insert")

    with pytest.raises(PartitionWriteError) as exc:
        await OrderWriter(store).write(_parts()[0], COURIER, "cash", "cust-1", ADDRESS)

    assert exc.value.vendor_id == "a"
    assert store.rows("orders") == []


async def test_item_failure_leaves_order_row() -> None:
    store = MemoryStore()
    store.fail_on("order_items", "insert")

    with pytest.raises(PartitionWriteError, match="items"):
        await OrderWriter(store).write(_parts()[0], COURIER, "cash", "cust-1", ADDRESS)

    assert len(store.rows("orders")) == 1


async def test_mark_paid() -> None:
    store = MemoryStore()
    writer = OrderWriter(store)
    order = await writer.write(_parts()[0], COURIER, "iveri", "cust-1", ADDRESS)

    paid = await writer.mark_paid(order)

    assert paid.is_paid
    stored = await writer.load(order.id)
    assert stored is not None
    assert (stored.status, stored.payment_status) == (OrderStatus.PROCESSING, PaymentStatus.PAID)
    assert len(stored.items) == 2


async def test_cancel_only_touches_unpaid_orders() -> None:
    store = MemoryStore()
    writer = OrderWriter(store)
    unpaid = await writer.write(_parts()[0], COURIER, "iveri", "cust-1", ADDRESS)
    paid = await writer.mark_paid(await writer.write(_parts()[1], COURIER, "iveri", "cust-1", ADDRESS))

    cancelled = await writer.cancel(unpaid)
    untouched = await writer.cancel(paid)

    assert cancelled.status is OrderStatus.CANCELLED
    assert untouched.status is OrderStatus.PROCESSING
    stored = await writer.load(paid.id)
    assert stored is not None and stored.is_paid


async def test_batch_lists_orders_of_one_checkout() -> None:
    store = MemoryStore()
    writer = OrderWriter(store)
    for part in _parts():
        await writer.write(part, COURIER, "cash", "cust-1", ADDRESS, batch_id="b-1")
    await writer.write(_parts()[0], COURIER, "cash", "cust-1", ADDRESS, batch_id="b-2")

    assert [o.vendor_id for o in await writer.batch("b-1")] == ["a", "b"]
