"""
HTTP surface: FastAPI app over one Checkout.

    app = create_app(Checkout.create(store, provider, client, config), provider)

Routes:
    GET  /shipping-methods?amount=   eligible methods, pickup first
    GET  /payment-methods            active gateways + default selection
    POST /quote                      per-vendor split of a cart
    POST /checkout                   run the checkout

The customer comes from an "Authorization: Bearer <token>" header, checked
with IdentityProvider.verify_token. No header means a guest checkout.

Payment identifiers like "iveri_card" are parsed here and nowhere else.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any

import fastapi
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from emporium._errors import AuthenticationError, CheckoutError, IdentityError, ValidationError
from emporium._money import ZERO
from emporium.cart import Cart, CartLine, VendorPartition, cart_totals
from emporium.checkout import Checkout, CheckoutResult, CheckoutSession, Notice, default_payment
from emporium.identity import Address, Contact, IdentityProvider, Principal
from emporium.orders import Order
from emporium.payments import (
    CardDetails,
    GatewayType,
    MobileMoneyDetails,
    PaymentDetails,
    PaymentGateway,
    PaymentSelection,
    SubMethod,
)
from emporium.shipping import PICKUP_ID, ShippingMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Payment identifiers
# ═══════════════════════════════════════════════════════════════════════════════


def parse_payment_method(identifier: str) -> PaymentSelection:
    """
    "iveri_card" → PaymentSelection(IVERI, CARD); "cash" → PaymentSelection(CASH).

    Raises:
        ValidationError: unknown gateway or sub-method
    """
    gateway, _, sub = identifier.strip().lower().partition("_")
    try:
        return PaymentSelection(GatewayType(gateway), SubMethod(sub) if sub else None)
    except ValueError:
        raise ValidationError("payment_method", f"Unknown payment method: {identifier}") from None


def format_payment_method(selection: PaymentSelection) -> str:
    if selection.sub_method is None:
        return selection.gateway.value
    return f"{selection.gateway.value}_{selection.sub_method.value}"


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class CartLineIn(BaseModel):
    product_id: str
    vendor_id: str = ""
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(gt=0)
    name: str = ""

    def to_domain(self) -> CartLine:
        return CartLine(self.product_id, self.vendor_id, self.unit_price, self.quantity, self.name)


class ShippingQueryIn(BaseModel):
    amount: Decimal = Field(default=ZERO, ge=0)


class QuoteIn(BaseModel):
    items: list[CartLineIn]
    shipping_method_id: str = PICKUP_ID

    def to_cart(self) -> Cart:
        return Cart(item.to_domain() for item in self.items)


class ContactIn(BaseModel):
    email: str = ""
    full_name: str = ""
    phone: str = ""

    def to_domain(self) -> Contact:
        return Contact(self.email, self.full_name, self.phone)


class AddressIn(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    def to_domain(self) -> Address:
        return Address(self.street, self.city, self.state, self.postal_code, self.country)


class CardIn(BaseModel):
    number: str
    expiry: str
    cvv: str
    holder: str = ""

    def to_domain(self) -> CardDetails:
        return CardDetails(self.number, self.expiry, self.cvv, self.holder)


class CheckoutIn(BaseModel):
    items: list[CartLineIn]
    contact: ContactIn
    address: AddressIn = AddressIn()
    shipping_method_id: str = PICKUP_ID
    payment_method: str = ""
    card: CardIn | None = None
    mobile_number: str | None = None

    def to_cart(self) -> Cart:
        return Cart(item.to_domain() for item in self.items)

    def to_domain(self, shipping: ShippingMethod, principal: Principal | None = None) -> CheckoutSession:
        if not self.payment_method:
            raise ValidationError("payment_method", "Please select a payment method")
        selection = parse_payment_method(self.payment_method)

        details: PaymentDetails = None
        if selection.needs_card and self.card is not None:
            details = self.card.to_domain()
        elif selection.needs_mobile_number and self.mobile_number is not None:
            details = MobileMoneyDetails(self.mobile_number)

        return CheckoutSession(
            cart=self.to_cart(),
            contact=self.contact.to_domain(),
            address=self.address.to_domain(),
            shipping=shipping,
            payment=selection,
            details=details,
            principal=principal,
            use_session=False,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingMethodOut(BaseModel):
    id: str
    display_name: str
    base_cost: Decimal
    delivery_time_min: int
    delivery_time_max: int

    @classmethod
    def from_domain(cls, m: ShippingMethod) -> ShippingMethodOut:
        return cls(
            id=m.id,
            display_name=m.display_name,
            base_cost=m.base_cost,
            delivery_time_min=m.delivery_time_min,
            delivery_time_max=m.delivery_time_max,
        )


class PaymentOptionOut(BaseModel):
    gateway_type: str
    display_name: str
    supported_currencies: list[str]


class PaymentOptionsOut(BaseModel):
    gateways: list[PaymentOptionOut]
    default: str | None

    @classmethod
    def from_domain(cls, gateways: list[PaymentGateway]) -> PaymentOptionsOut:
        selection = default_payment(gateways)
        return cls(
            gateways=[
                PaymentOptionOut(
                    gateway_type=g.gateway_type,
                    display_name=g.display_name,
                    supported_currencies=list(g.supported_currencies),
                )
                for g in gateways
            ],
            default=format_payment_method(selection) if selection else None,
        )


class VendorQuoteOut(BaseModel):
    vendor_id: str
    subtotal: Decimal
    tax_total: Decimal
    shipping_total: Decimal
    total: Decimal

    @classmethod
    def from_domain(cls, part: VendorPartition) -> VendorQuoteOut:
        return cls(
            vendor_id=part.vendor_id,
            subtotal=part.subtotal,
            tax_total=part.tax_total,
            shipping_total=part.shipping_total,
            total=part.total,
        )


class QuoteOut(BaseModel):
    vendors: list[VendorQuoteOut]
    subtotal: Decimal
    tax_total: Decimal
    shipping_total: Decimal
    total: Decimal

    @classmethod
    def from_domain(cls, parts: list[VendorPartition]) -> QuoteOut:
        return cls(
            vendors=[VendorQuoteOut.from_domain(p) for p in parts],
            subtotal=sum((p.subtotal for p in parts), ZERO),
            tax_total=sum((p.tax_total for p in parts), ZERO),
            shipping_total=sum((p.shipping_total for p in parts), ZERO),
            total=sum((p.total for p in parts), ZERO),
        )


class OrderOut(BaseModel):
    id: str
    order_number: str
    vendor_id: str
    status: str
    payment_status: str
    total: Decimal

    @classmethod
    def from_domain(cls, order: Order) -> OrderOut:
        return cls(
            id=order.id,
            order_number=order.order_number,
            vendor_id=order.vendor_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            total=order.total,
        )


class NoticeOut(BaseModel):
    kind: str
    title: str
    message: str
    actions: list[str]
    auto_dismiss_seconds: float | None
    navigate_to: str | None

    @classmethod
    def from_domain(cls, notice: Notice) -> NoticeOut:
        return cls(
            kind=notice.kind,
            title=notice.title,
            message=notice.message,
            actions=list(notice.actions),
            auto_dismiss_seconds=(
                notice.auto_dismiss_after.total_seconds() if notice.auto_dismiss_after else None
            ),
            navigate_to=notice.navigate_to,
        )


class CheckoutOut(BaseModel):
    status: str
    batch_id: str
    confirmation_order_id: str | None
    redirect_url: str | None
    error: str | None
    orders: list[OrderOut]
    cancelled: list[str]
    guest_password: str | None
    notice: NoticeOut

    @classmethod
    def from_domain(cls, result: CheckoutResult, notice: Notice) -> CheckoutOut:
        return cls(
            status=result.status.value,
            batch_id=result.batch_id,
            confirmation_order_id=result.confirmation_order_id,
            redirect_url=result.redirect_url,
            error=result.error.message if result.error else None,
            orders=[OrderOut.from_domain(o) for o in result.orders],
            cancelled=list(result.cancelled),
            guest_password=result.credentials.reveal() if result.credentials else None,
            notice=NoticeOut.from_domain(notice),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# App
# ═══════════════════════════════════════════════════════════════════════════════


def _error_body(e: CheckoutError) -> dict[str, Any]:
    body: dict[str, Any] = {"code": e.code, "message": e.message}
    if isinstance(e, ValidationError):
        body["field"] = e.field
    return body


def _status_for(e: CheckoutError) -> int:
    if isinstance(e, ValidationError):
        return 422
    if isinstance(e, AuthenticationError):
        return 401
    if isinstance(e, IdentityError):
        return 409
    return 502


def create_app(checkout: Checkout, provider: IdentityProvider) -> fastapi.FastAPI:
    app = fastapi.FastAPI(title="emporium checkout")

    @app.exception_handler(CheckoutError)
    async def _checkout_error(request: fastapi.Request, e: CheckoutError) -> JSONResponse:
        return JSONResponse(status_code=_status_for(e), content=_error_body(e))

    async def _principal(
        authorization: Annotated[str | None, fastapi.Header()] = None,
    ) -> Principal | None:
        if authorization is None:
            return None
        scheme, _, token = authorization.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationError("Malformed authorization header")
        principal = await provider.verify_token(token)
        if principal is None:
            raise AuthenticationError("Your session has expired. Please sign in again.")
        return principal

    async def _shipping(method_id: str, cart: Cart) -> ShippingMethod:
        _, _, merchandise = cart_totals(cart.lines, checkout.tax)
        options = await checkout.shipping_options(merchandise)
        for method in options:
            if method.id == method_id:
                return method
        raise ValidationError("shipping_method", "Selected shipping method is not available")

    @app.get("/shipping-methods")
    async def shipping_methods(
        query: Annotated[ShippingQueryIn, fastapi.Query()],
    ) -> list[ShippingMethodOut]:
        options = await checkout.shipping_options(query.amount)
        return [ShippingMethodOut.from_domain(m) for m in options]

    @app.get("/payment-methods")
    async def payment_methods() -> PaymentOptionsOut:
        return PaymentOptionsOut.from_domain(await checkout.payment_options())

    @app.post("/quote")
    async def quote(req: QuoteIn) -> QuoteOut:
        cart = req.to_cart()
        shipping = await _shipping(req.shipping_method_id, cart)
        return QuoteOut.from_domain(checkout.quote(cart, shipping))

    @app.post("/checkout")
    async def run_checkout(
        req: CheckoutIn,
        principal: Principal | None = fastapi.Depends(_principal),
    ) -> CheckoutOut:
        session = req.to_domain(await _shipping(req.shipping_method_id, req.to_cart()), principal)
        result = await checkout.run(session)
        return CheckoutOut.from_domain(result, result.notice(checkout.config.success_dismiss_after))

    return app


__all__ = (
    "parse_payment_method",
    "format_payment_method",
    "CartLineIn",
    "ShippingQueryIn",
    "QuoteIn",
    "ContactIn",
    "AddressIn",
    "CardIn",
    "CheckoutIn",
    "ShippingMethodOut",
    "PaymentOptionsOut",
    "QuoteOut",
    "OrderOut",
    "NoticeOut",
    "CheckoutOut",
    "create_app",
)
