"""
Shared fixtures: a seeded MemoryStore, a scripted gateway, a wired Checkout.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable

import pytest

from emporium.cart import Cart, CartLine
from emporium.checkout import Checkout, CheckoutSession
from emporium.config import CheckoutConfig
from emporium.identity import Address, Contact, MemoryIdentityProvider
from emporium.payments import PaymentRequest, PaymentResult
from emporium.shipping import ShippingMethod
from emporium.store import MemoryStore

GATEWAYS: list[dict[str, Any]] = [
    {
        "id": "gw-iveri",
        "gateway_name": "iVeri",
        "gateway_type": "iveri",
        "display_name": "Card / EcoCash",
        "is_active": True,
        "configuration": {"merchant_id": "m-1"},
        "supported_currencies": ["USD"],
        "sort_order": 1,
    },
    {
        "id": "gw-paynow",
        "gateway_name": "Paynow",
        "gateway_type": "paynow",
        "display_name": "Paynow",
        "is_active": True,
        "configuration": {},
        "supported_currencies": [],
        "sort_order": 2,
    },
    {
        "id": "gw-stripe",
        "gateway_name": "Stripe",
        "gateway_type": "stripe",
        "display_name": "Stripe",
        "is_active": False,
        "configuration": {},
        "supported_currencies": ["USD"],
        "sort_order": 3,
    },
]

SHIPPING_METHODS: list[dict[str, Any]] = [
    {
        "id": "courier",
        "display_name": "Courier",
        "base_cost": Decimal("6.00"),
        "delivery_time_min": 1,
        "delivery_time_max": 3,
        "min_order_total": None,
        "max_order_total": None,
        "is_active": True,
        "sort_order": 1,
    },
    {
        "id": "free-over-50",
        "display_name": "Free Delivery",
        "base_cost": Decimal("0.00"),
        "delivery_time_min": 3,
        "delivery_time_max": 7,
        "min_order_total": Decimal("50.00"),
        "max_order_total": None,
        "is_active": True,
        "sort_order": 2,
    },
]

COURIER = ShippingMethod.from_row(SHIPPING_METHODS[0])

VALID_CARD = "4539 1488 0343 6467"


class ScriptedGateway:
    """GatewayClient double. Answers with ``respond(request)``; records every request."""

    def __init__(self, respond: Callable[[PaymentRequest], PaymentResult] | None = None) -> None:
        self.requests: list[PaymentRequest] = []
        self._respond = respond or (lambda req: PaymentResult.succeeded(f"tx-{req.order_id}"))

    async def initiate(self, request: PaymentRequest) -> PaymentResult:
        self.requests.append(request)
        return self._respond(request)


@pytest.fixture
def store() -> MemoryStore:
    db = MemoryStore()
    db.seed("payment_gateways", GATEWAYS)
    db.seed("shipping_methods", SHIPPING_METHODS)
    return db


@pytest.fixture
def provider(store: MemoryStore) -> MemoryIdentityProvider:
    return MemoryIdentityProvider(store)


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def config() -> CheckoutConfig:
    return CheckoutConfig()


@pytest.fixture
def checkout(
    store: MemoryStore,
    provider: MemoryIdentityProvider,
    gateway: ScriptedGateway,
    config: CheckoutConfig,
) -> Checkout:
    return Checkout.create(store, provider, gateway, config)


def two_vendor_cart() -> Cart:
    return Cart(
        [
            CartLine("p-1", "vendor-a", Decimal("10"), 2, "Mug"),
            CartLine("p-2", "vendor-b", Decimal("5"), 1, "Pen"),
        ]
    )


def contact() -> Contact:
    return Contact("guest@example.com", "Tariro Moyo", "+263771234567")


def address() -> Address:
    return Address("12 Samora Machel Ave", "Harare", "Harare", "0000", "Zimbabwe")


def session(cart: Cart | None = None, **changes: Any) -> CheckoutSession:
    values: dict[str, Any] = {
        "cart": cart if cart is not None else two_vendor_cart(),
        "contact": contact(),
        "address": address(),
    }
    values.update(changes)
    return CheckoutSession(**values)
