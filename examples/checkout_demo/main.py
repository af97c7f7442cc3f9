"""
Checkout Example

Run: uv run python -m examples.checkout_demo.main
"""

from decimal import Decimal

from examples._infra import run, banner
from emporium.cart import Cart, CartLine, cart_totals
from emporium.checkout import Checkout, CheckoutResult, CheckoutSession
from emporium.config import CheckoutConfig, PartialFailurePolicy
from emporium.identity import Address, Contact, MemoryIdentityProvider
from emporium.payments import (
    CardDetails,
    GatewayType,
    PaymentRequest,
    PaymentResult,
    PaymentSelection,
    SubMethod,
)
from emporium.store import SQLAlchemyStore, create_database


class DemoGateway:
    """Pretend processor: declines anything over $100, asks for 3-D Secure on card ending 0002."""

    def __init__(self) -> None:
        self.call_count = 0

    async def initiate(self, request: PaymentRequest) -> PaymentResult:
        self.call_count += 1
        if request.amount > Decimal("100"):
            return PaymentResult.failed("Insufficient funds")
        if str(request.metadata.get("card_pan", "")).endswith("0002"):
            return PaymentResult.redirect(f"https://3ds.example/verify/{request.order_id}")
        return PaymentResult.succeeded(f"tx_{request.order_id[:8]}")


async def seed(store: SQLAlchemyStore) -> None:
    await store.insert(
        "shipping_methods",
        [
            {
                "id": "courier",
                "display_name": "Courier",
                "base_cost": Decimal("6.00"),
                "delivery_time_min": 1,
                "delivery_time_max": 3,
                "is_active": True,
                "sort_order": 1,
            }
        ],
    )
    await store.insert(
        "payment_gateways",
        [
            {
                "id": "gw-iveri",
                "gateway_name": "iVeri",
                "gateway_type": "iveri",
                "display_name": "Card / EcoCash",
                "is_active": True,
                "configuration": {},
                "supported_currencies": ["USD"],
                "sort_order": 1,
            }
        ],
    )
    await store.insert(
        "vat_settings",
        [{"jurisdiction": "default", "is_enabled": True, "default_rate": Decimal("15"), "commission_enabled": True}],
    )


def cart(*prices: str) -> Cart:
    return Cart(
        CartLine(f"p-{i}", f"vendor-{chr(ord('a') + i)}", Decimal(p), 1, f"Item {i}")
        for i, p in enumerate(prices)
    )


def show(result: CheckoutResult) -> None:
    print(f"   Status: {result.status.value}")
    for order in result.orders:
        print(
            f"   {order.vendor_id}: {order.order_number} "
            f"total={order.total} {order.status.value}/{order.payment_status.value}"
        )
    if result.redirect_url:
        print(f"   Redirect: {result.redirect_url}")
    if result.error:
        print(f"   Error: {result.error.message}")
    if result.cancelled:
        print(f"   Cancelled: {len(result.cancelled)} order(s)")
    notice = result.notice()
    print(f"   Notice: {notice.title} {list(notice.actions)}")


async def main() -> None:
    banner("Multi-vendor Checkout")

    session_factory, engine = await create_database()
    store = SQLAlchemyStore(session_factory)
    await seed(store)

    provider = MemoryIdentityProvider(store)
    gateway = DemoGateway()
    config = CheckoutConfig().with_partial_failure(PartialFailurePolicy.CANCEL_UNPAID)
    checkout = Checkout.create(store, provider, gateway, config)
    await checkout.load_tax()

    contact = Contact("guest@example.com", "Tariro Moyo", "+263771234567")
    address = Address("12 Samora Machel Ave", "Harare", "Harare", "0000", "Zimbabwe")
    card = PaymentSelection(GatewayType.IVERI, SubMethod.CARD)

    try:
        # 1. Guest pays cash, two vendors
        print("1. Cash, two vendors (guest):")
        items = cart("20.00", "5.00")
        options = await checkout.shipping_options(cart_totals(items.lines, checkout.tax)[2])
        session = CheckoutSession.start(items, contact, options, await checkout.payment_options())
        session = session.with_shipping(options[-1]).with_address(address)
        session = session.with_payment(PaymentSelection.cash())
        result = await checkout.run(session)
        show(result)
        if result.credentials:
            print(f"   Guest password: {result.credentials.reveal()}")
        print(f"   Cart lines left: {len(items)}\n")

        # 2. Card, charged once per vendor order
        print("2. Card:")
        result = await checkout.run(
            CheckoutSession(cart("12.00", "8.00"), contact, address).with_payment(
                card, CardDetails("4539 1488 0343 6467", "1230", "123")
            )
        )
        show(result)
        print(f"   Gateway calls: {gateway.call_count}\n")

        # 3. 3-D Secure
        print("3. Card needing verification:")
        result = await checkout.run(
            CheckoutSession(cart("12.00"), contact, address).with_payment(
                card, CardDetails("4000 0000 0000 0002", "1230", "123")
            )
        )
        show(result)
        print()

        # 4. One vendor declines, the unpaid sibling is cancelled
        print("4. Partial failure:")
        result = await checkout.run(
            CheckoutSession(cart("150.00", "9.00"), contact, address).with_payment(
                card, CardDetails("4539 1488 0343 6467", "1230", "123")
            )
        )
        show(result)

    finally:
        await engine.dispose()


if __name__ == "__main__":
    run(main)
