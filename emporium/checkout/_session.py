"""
Checkout session: everything the customer entered, as one value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from emporium.cart import Cart
from emporium.identity import Address, Contact, Principal
from emporium.payments import (
    GatewayType,
    PaymentDetails,
    PaymentGateway,
    PaymentSelection,
    SubMethod,
)
from emporium.shipping import PICKUP, ShippingMethod, default_shipping, reselect

_GATEWAY_TYPES = frozenset(t.value for t in GatewayType)


def default_payment(gateways: Sequence[PaymentGateway]) -> PaymentSelection | None:
    """
    Initial payment selection: the composite gateway's card option when it
    is offered, otherwise the first known gateway, otherwise nothing.
    """
    known = [g for g in gateways if g.is_active and g.gateway_type in _GATEWAY_TYPES]
    for gateway in known:
        if gateway.gateway_type == GatewayType.IVERI.value:
            return PaymentSelection(GatewayType.IVERI, SubMethod.CARD)
    if not known:
        return None
    return PaymentSelection(GatewayType(known[0].gateway_type))


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    Input to Checkout.run().

    The cart is the one mutable piece; it is cleared by the checkout only
    after every vendor order succeeded.

    use_session=False: without a principal the checkout is a guest checkout,
    even if the identity provider holds a signed-in session.
    """

    cart: Cart = field(compare=False)
    contact: Contact
    address: Address = Address()
    shipping: ShippingMethod = PICKUP
    payment: PaymentSelection | None = None
    details: PaymentDetails = None
    principal: Principal | None = None
    use_session: bool = True

    @classmethod
    def start(
        cls,
        cart: Cart,
        contact: Contact,
        shipping_options: Sequence[ShippingMethod],
        gateways: Sequence[PaymentGateway],
        principal: Principal | None = None,
    ) -> CheckoutSession:
        """New session with the default shipping and payment selections."""
        return cls(
            cart=cart,
            contact=contact,
            shipping=default_shipping(shipping_options),
            payment=default_payment(gateways),
            principal=principal,
        )

    def with_contact(self, contact: Contact) -> CheckoutSession:
        return replace(self, contact=contact)

    def with_address(self, address: Address) -> CheckoutSession:
        return replace(self, address=address)

    def with_shipping(self, shipping: ShippingMethod) -> CheckoutSession:
        return replace(self, shipping=shipping)

    def with_payment(
        self,
        payment: PaymentSelection,
        details: PaymentDetails = None,
    ) -> CheckoutSession:
        return replace(self, payment=payment, details=details)

    def reselect_shipping(self, options: Sequence[ShippingMethod]) -> CheckoutSession:
        """Re-run the selection policy after the cart changed."""
        return replace(self, shipping=reselect(self.shipping, options))


__all__ = ("default_payment", "CheckoutSession")
