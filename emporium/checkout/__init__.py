"""
Checkout: the whole submission.

    checkout = Checkout.create(store, provider, HttpGatewayClient(settings), config)

    session = CheckoutSession.start(cart, contact, shipping_options, gateways, principal)
    session = session.with_payment(
        PaymentSelection(GatewayType.IVERI, SubMethod.CARD),
        CardDetails("4539 1488 0343 6467", "1230", "123"),
    )

    result = await checkout.run(session)

    match result.status:
        case CheckoutStatus.SUCCEEDED:          show(result.notice())
        case CheckoutStatus.REDIRECT_REQUIRED:  open_browser(result.redirect_url)
        case CheckoutStatus.FAILED:             show(result.notice())  # Try Again / Change Method

Input errors (ValidationError) and account creation errors (IdentityError)
are raised before anything is written.
"""

from emporium.checkout._session import CheckoutSession, default_payment
from emporium.checkout._result import (
    CheckoutStatus,
    LegOutcome,
    Notice,
    ORDER_HISTORY,
    CheckoutResult,
)
from emporium.checkout._compensation import (
    Compensator,
    RecordedCompensator,
    CompensationLog,
    run_compensators,
)
from emporium.checkout._checkout import Checkout

__all__ = (
    "CheckoutSession",
    "default_payment",
    "CheckoutStatus",
    "LegOutcome",
    "Notice",
    "ORDER_HISTORY",
    "CheckoutResult",
    "Compensator",
    "RecordedCompensator",
    "CompensationLog",
    "run_compensators",
    "Checkout",
)
