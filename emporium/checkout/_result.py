"""
Checkout result: what happened, and what to show.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from emporium._errors import CheckoutError
from emporium.identity import GuestCredentials
from emporium.orders import Order
from emporium.payments import PaymentResult


class CheckoutStatus(Enum):
    SUCCEEDED = "succeeded"
    REDIRECT_REQUIRED = "redirect_required"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LegOutcome:
    """One vendor's write-then-pay."""

    vendor_id: str
    order: Order | None = None
    payment: PaymentResult | None = None
    error: CheckoutError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_redirect(self) -> bool:
        return self.payment is not None and self.payment.is_redirect


@dataclass(frozen=True, slots=True)
class Notice:
    """
    The modal shown after a checkout.

    Success dismisses itself after ``auto_dismiss_after`` and moves on to
    ``navigate_to``. Failure stays until the customer picks an action.
    """

    kind: str
    title: str
    message: str
    actions: tuple[str, ...] = ()
    auto_dismiss_after: timedelta | None = None
    navigate_to: str | None = None


ORDER_HISTORY = "/orders"


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    status: CheckoutStatus
    batch_id: str
    legs: tuple[LegOutcome, ...] = ()
    confirmation_order_id: str | None = None
    redirect_url: str | None = None
    error: CheckoutError | None = None
    credentials: GuestCredentials | None = None
    cancelled: tuple[str, ...] = ()

    @property
    def orders(self) -> tuple[Order, ...]:
        return tuple(leg.order for leg in self.legs if leg.order is not None)

    @property
    def succeeded(self) -> bool:
        return self.status is CheckoutStatus.SUCCEEDED

    def notice(self, dismiss_after: timedelta = timedelta(seconds=3)) -> Notice:
        match self.status:
            case CheckoutStatus.SUCCEEDED:
                return Notice(
                    kind="success",
                    title="Order Placed",
                    message="Your order has been placed successfully.",
                    auto_dismiss_after=dismiss_after,
                    navigate_to=ORDER_HISTORY,
                )
            case CheckoutStatus.REDIRECT_REQUIRED:
                return Notice(
                    kind="redirect",
                    title="Complete Verification",
                    message="Please complete the payment verification in your browser.",
                    actions=("Open Verification",),
                    navigate_to=self.redirect_url,
                )
            case _:
                return Notice(
                    kind="failure",
                    title="Payment Failed",
                    message=self.error.message if self.error else "Failed to place order",
                    actions=("Try Again", "Change Method"),
                )


__all__ = ("CheckoutStatus", "LegOutcome", "Notice", "ORDER_HISTORY", "CheckoutResult")
