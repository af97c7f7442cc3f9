"""
Gateway adapters: per-gateway request metadata.

Each gateway gets its payload shaped by its own adapter, so conventions of
one provider (the composite gateway's virtual PAN for mobile money) stay out
of everyone else's requests.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from emporium._errors import ValidationError
from emporium.payments._types import (
    CardDetails,
    GatewayType,
    MobileMoneyDetails,
    PaymentDetails,
    PaymentSelection,
    SubMethod,
)
from emporium.payments._validation import clean_card_number, clean_mobile_number


class GatewayAdapter(Protocol):
    def metadata(
        self,
        selection: PaymentSelection,
        details: PaymentDetails,
        base: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Gateway-specific metadata on top of the common fields in base."""
        ...


class DefaultAdapter:
    """Common fields only."""

    def metadata(
        self,
        selection: PaymentSelection,
        details: PaymentDetails,
        base: Mapping[str, Any],
    ) -> dict[str, Any]:
        return dict(base)


class IveriAdapter:
    """
    Composite gateway: card and mobile money share one card API.

    Mobile money is sent as a virtual card: PAN = prefix + phone digits,
    a fixed far-future expiry, empty CVV.
    """

    MOBILE_MONEY_PAN_PREFIX = "910012"
    MOBILE_MONEY_EXPIRY = "1228"

    def metadata(
        self,
        selection: PaymentSelection,
        details: PaymentDetails,
        base: Mapping[str, Any],
    ) -> dict[str, Any]:
        meta = dict(base)
        match selection.sub_method, details:
            case SubMethod.CARD, CardDetails(number=number, expiry=expiry, cvv=cvv):
                meta.update(
                    card_pan=clean_card_number(number),
                    card_expiry=expiry.strip(),
                    card_cvv=cvv.strip(),
                    payment_subtype=SubMethod.CARD.value,
                )
            case SubMethod.MOBILE_MONEY, MobileMoneyDetails(number=number):
                meta.update(
                    card_pan=f"{self.MOBILE_MONEY_PAN_PREFIX}{clean_mobile_number(number)}",
                    card_expiry=self.MOBILE_MONEY_EXPIRY,
                    card_cvv="",
                    payment_subtype=SubMethod.MOBILE_MONEY.value,
                )
            case None, _:
                pass
            case _:
                raise ValidationError("payment_method", "Payment details do not match the selected method")
        return meta


DEFAULT_ADAPTERS: Mapping[str, GatewayAdapter] = {
    GatewayType.IVERI.value: IveriAdapter(),
}


def adapter_for(
    gateway_type: str,
    adapters: Mapping[str, GatewayAdapter] = DEFAULT_ADAPTERS,
) -> GatewayAdapter:
    return adapters.get(gateway_type, DefaultAdapter())


SENSITIVE_KEYS = frozenset({"card_cvv", "card_expiry"})


def redact(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Metadata safe to log or persist: PAN masked, CVV and expiry dropped."""
    safe = {k: v for k, v in metadata.items() if k not in SENSITIVE_KEYS}
    if pan := safe.get("card_pan"):
        safe["card_pan"] = f"****{str(pan)[-4:]}"
    return safe


__all__ = (
    "GatewayAdapter",
    "DefaultAdapter",
    "IveriAdapter",
    "DEFAULT_ADAPTERS",
    "adapter_for",
    "redact",
)
