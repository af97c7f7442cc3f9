"""
Checkout error taxonomy.

Every failure carries a machine-readable ``code`` and a human ``message``.
A 3-D Secure redirect is deliberately absent: it is an outcome, not an error
(see ``PaymentResult.redirect`` and ``CheckoutStatus.REDIRECT_REQUIRED``).
"""

from __future__ import annotations


class CheckoutError(Exception):
    """Base for everything the checkout core reports to its caller."""

    code = "CHECKOUT_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(CheckoutError):
    """User-correctable input problem. Raised before any backend call."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class IdentityError(CheckoutError):
    """Guest account could not be created. Fatal to the whole checkout."""

    code = "IDENTITY_ERROR"


class AuthenticationError(IdentityError):
    """A presented credential is missing, malformed or no longer valid."""

    code = "AUTHENTICATION_ERROR"


class PartitionWriteError(CheckoutError):
    """One vendor order (or its items) failed to persist."""

    code = "PARTITION_WRITE_ERROR"

    def __init__(self, vendor_id: str, message: str) -> None:
        super().__init__(message)
        self.vendor_id = vendor_id


class GatewayError(CheckoutError):
    """The gateway explicitly declined or rejected the payment."""

    code = "GATEWAY_ERROR"


class NetworkError(CheckoutError):
    """Gateway unreachable or stalled. Transient, never retried by the core."""

    code = "NETWORK_ERROR"


class StoreError(CheckoutError):
    """Data store operation failed."""

    code = "STORE_ERROR"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


__all__ = (
    "CheckoutError",
    "ValidationError",
    "IdentityError",
    "AuthenticationError",
    "PartitionWriteError",
    "GatewayError",
    "NetworkError",
    "StoreError",
)
