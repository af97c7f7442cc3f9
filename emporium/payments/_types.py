"""
Payment types: selection, details, gateway config, request, result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from emporium._money import Money


# ═══════════════════════════════════════════════════════════════════════════════
# Selection
# ═══════════════════════════════════════════════════════════════════════════════


class GatewayType(Enum):
    PAYNOW = "paynow"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    CASH = "cash"
    MANUAL = "manual"
    IVERI = "iveri"


class SubMethod(Enum):
    """Second-level option under one gateway."""

    CARD = "card"
    MOBILE_MONEY = "ecocash"


@dataclass(frozen=True, slots=True)
class PaymentSelection:
    """
    What the customer picked.

    Built explicitly at the boundary:

        PaymentSelection(GatewayType.IVERI, SubMethod.CARD)
        PaymentSelection.cash()
    """

    gateway: GatewayType
    sub_method: SubMethod | None = None

    @classmethod
    def cash(cls) -> PaymentSelection:
        return cls(GatewayType.CASH)

    @property
    def is_cash(self) -> bool:
        return self.gateway is GatewayType.CASH

    @property
    def needs_card(self) -> bool:
        return self.sub_method is SubMethod.CARD

    @property
    def needs_mobile_number(self) -> bool:
        return self.sub_method is SubMethod.MOBILE_MONEY


# ═══════════════════════════════════════════════════════════════════════════════
# Details the customer typed
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CardDetails:
    number: str
    expiry: str
    cvv: str
    holder: str = ""

    def __repr__(self) -> str:
        return f"CardDetails(number=***{self.number.strip()[-4:]}, expiry=***, cvv=***)"


@dataclass(frozen=True, slots=True)
class MobileMoneyDetails:
    number: str


PaymentDetails = CardDetails | MobileMoneyDetails | None


# ═══════════════════════════════════════════════════════════════════════════════
# Gateway configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentGateway:
    """A configured gateway. Read-only for checkout."""

    id: str
    gateway_type: str
    display_name: str
    is_active: bool = True
    configuration: Mapping[str, Any] = field(default_factory=dict)
    supported_currencies: tuple[str, ...] = ()
    sort_order: int = 0
    is_default: bool = False

    def supports(self, currency: str) -> bool:
        """An empty currency list means any currency."""
        return not self.supported_currencies or currency.upper() in self.supported_currencies

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> PaymentGateway:
        return cls(
            id=str(row["id"]),
            gateway_type=row["gateway_type"],
            display_name=row.get("display_name") or row["gateway_type"],
            is_active=bool(row.get("is_active", True)),
            configuration=dict(row.get("configuration") or {}),
            supported_currencies=tuple(c.upper() for c in row.get("supported_currencies") or ()),
            sort_order=int(row.get("sort_order") or 0),
            is_default=bool(row.get("is_default", False)),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Request / Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentRequest:
    """One gateway call for one vendor order. amount is that order's total."""

    order_id: str
    gateway_type: str
    amount: Money
    currency: str
    return_url: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "gateway_type": self.gateway_type,
            "amount": float(self.amount),
            "currency": self.currency,
            "return_url": self.return_url,
            "metadata": dict(self.metadata),
        }


class ResultKind(Enum):
    SUCCESS = "success"
    REDIRECT = "redirect"
    ERROR = "error"


def error_text(value: Any) -> str | None:
    """
    Readable text from a gateway error field.

    Gateways send either a string or an object such as {"message": "..."}.
    """
    if not value:
        return None
    if isinstance(value, Mapping):
        return error_text(value.get("message") or value.get("error")) or str(dict(value))
    return str(value)


@dataclass(frozen=True, slots=True)
class PaymentResult:
    """
    Outcome of one payment attempt. Exactly one kind holds.

    REDIRECT is not a success: the outcome is decided out of band after the
    customer completes verification in a browser.
    """

    kind: ResultKind
    error: str | None = None
    redirect_url: str | None = None
    transaction_reference: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ResultKind.REDIRECT and not self.redirect_url:
            raise ValueError("Redirect result needs a redirect_url")
        if self.kind is ResultKind.ERROR and not self.error:
            raise ValueError("Error result needs an error")

    @classmethod
    def succeeded(cls, transaction_reference: str | None = None) -> PaymentResult:
        return cls(ResultKind.SUCCESS, transaction_reference=transaction_reference)

    @classmethod
    def redirect(cls, url: str, transaction_reference: str | None = None) -> PaymentResult:
        return cls(ResultKind.REDIRECT, redirect_url=url, transaction_reference=transaction_reference)

    @classmethod
    def failed(cls, error: Any) -> PaymentResult:
        return cls(ResultKind.ERROR, error=error_text(error) or "Payment failed")

    @classmethod
    def from_response(cls, body: Mapping[str, Any]) -> PaymentResult:
        """
        Read a gateway response body.

        A redirect_url wins over success=true.
        """
        reference = body.get("transaction_id") or body.get("transaction_reference")
        if body.get("redirect_url"):
            return cls.redirect(body["redirect_url"], reference)
        if body.get("success"):
            return cls.succeeded(reference)
        return cls.failed(body.get("error") or body.get("message"))

    @property
    def success(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    @property
    def is_redirect(self) -> bool:
        return self.kind is ResultKind.REDIRECT


__all__ = (
    "GatewayType",
    "error_text",
    "SubMethod",
    "PaymentSelection",
    "CardDetails",
    "MobileMoneyDetails",
    "PaymentDetails",
    "PaymentGateway",
    "PaymentRequest",
    "ResultKind",
    "PaymentResult",
)
