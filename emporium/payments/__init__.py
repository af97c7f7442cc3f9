"""
Payments: one gateway charge per vendor order.

    dispatcher = PaymentDispatcher(store, HttpGatewayClient(settings), writer, config)

    selection = PaymentSelection(GatewayType.IVERI, SubMethod.CARD)
    details = CardDetails("4539 1488 0343 6467", "1230", "123")

    dispatcher.validate(selection, details)      # before any network call
    result = await dispatcher.pay(order, selection, details)

    match result.kind:
        case ResultKind.SUCCESS:  ...  # order is processing/paid
        case ResultKind.REDIRECT: ...  # send the customer to result.redirect_url

Failures raise ValidationError, GatewayError or NetworkError.
"""

from emporium.payments._types import (
    GatewayType,
    SubMethod,
    PaymentSelection,
    CardDetails,
    MobileMoneyDetails,
    PaymentDetails,
    PaymentGateway,
    PaymentRequest,
    ResultKind,
    PaymentResult,
)
from emporium.payments._validation import (
    clean_card_number,
    clean_mobile_number,
    luhn_valid,
    validate_card_number,
    validate_expiry,
    validate_cvv,
    validate_card,
    validate_mobile_money,
    validate_details,
)
from emporium.payments._adapters import (
    GatewayAdapter,
    DefaultAdapter,
    IveriAdapter,
    DEFAULT_ADAPTERS,
    adapter_for,
    redact,
)
from emporium.payments._messages import SESSION_EXPIRED, NETWORK_ERROR, friendly_message
from emporium.payments._client import GatewaySettings, GatewayClient, HttpGatewayClient
from emporium.payments._ledger import ChargeState, ChargeLedger
from emporium.payments._dispatcher import PaymentDispatcher

__all__ = (
    "GatewayType",
    "SubMethod",
    "PaymentSelection",
    "CardDetails",
    "MobileMoneyDetails",
    "PaymentDetails",
    "PaymentGateway",
    "PaymentRequest",
    "ResultKind",
    "PaymentResult",
    "clean_card_number",
    "clean_mobile_number",
    "luhn_valid",
    "validate_card_number",
    "validate_expiry",
    "validate_cvv",
    "validate_card",
    "validate_mobile_money",
    "validate_details",
    "GatewayAdapter",
    "DefaultAdapter",
    "IveriAdapter",
    "DEFAULT_ADAPTERS",
    "adapter_for",
    "redact",
    "SESSION_EXPIRED",
    "NETWORK_ERROR",
    "friendly_message",
    "GatewaySettings",
    "GatewayClient",
    "HttpGatewayClient",
    "ChargeState",
    "ChargeLedger",
    "PaymentDispatcher",
)
