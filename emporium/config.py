"""
Checkout configuration.

Immutable and fluent: each ``with_*`` returns a new config:

    config = (
        CheckoutConfig()
        .with_currency("ZWG")
        .with_gateway_timeout(seconds=45)
        .with_partial_failure(PartialFailurePolicy.CANCEL_UNPAID)
    )

Or from the environment (EMPORIUM_* variables):

    config = CheckoutConfig.from_env()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum


# ═══════════════════════════════════════════════════════════════════════════════
# Partial Failure Policy
# ═══════════════════════════════════════════════════════════════════════════════


class PartialFailurePolicy(Enum):
    """
    What happens to sibling vendor orders when one leg of a checkout fails.

    KEEP: Leave every written order as it is. Sibling orders that were paid
          stay paid, unpaid ones stay pending/pending and can be reconciled
          later. This is the historical behaviour and the default.

    CANCEL_UNPAID: Replay the checkout batch log and cancel sibling orders
          that are still pending/pending. Paid orders are never touched;
          refunds belong to the refund workflow.
    """

    KEEP = "keep"
    CANCEL_UNPAID = "cancel_unpaid"


# ═══════════════════════════════════════════════════════════════════════════════
# CheckoutConfig
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutConfig:
    """
    Knobs for one checkout deployment.

    gateway_timeout: None waits for the gateway indefinitely. A value turns
    a stalled gateway call into a NetworkError for that vendor leg.
    """

    currency: str = "USD"
    return_url: str = "app://checkout/success"
    gateway_timeout: timedelta | None = None
    partial_failure: PartialFailurePolicy = PartialFailurePolicy.KEEP
    order_number_prefix: str = "ORD"
    pickup_label: str = "Store Pickup"
    success_dismiss_after: timedelta = timedelta(seconds=3)

    def with_currency(self, currency: str) -> CheckoutConfig:
        return replace(self, currency=currency.upper())

    def with_return_url(self, url: str) -> CheckoutConfig:
        return replace(self, return_url=url)

    def with_gateway_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutConfig:
        """
        Set the per-call gateway timeout.

        Example:
            .with_gateway_timeout(seconds=30)
            .with_gateway_timeout()  # back to "wait forever"
        """
        if delta is not None:
            return replace(self, gateway_timeout=delta)
        if seconds:
            return replace(self, gateway_timeout=timedelta(seconds=seconds))
        return replace(self, gateway_timeout=None)

    def with_partial_failure(self, policy: PartialFailurePolicy) -> CheckoutConfig:
        return replace(self, partial_failure=policy)

    def with_order_number_prefix(self, prefix: str) -> CheckoutConfig:
        return replace(self, order_number_prefix=prefix)

    @classmethod
    def from_env(cls) -> CheckoutConfig:
        config = cls()
        if currency := os.getenv("EMPORIUM_CURRENCY"):
            config = config.with_currency(currency)
        if return_url := os.getenv("EMPORIUM_RETURN_URL"):
            config = config.with_return_url(return_url)
        if timeout := os.getenv("EMPORIUM_GATEWAY_TIMEOUT"):
            config = config.with_gateway_timeout(seconds=float(timeout))
        if policy := os.getenv("EMPORIUM_PARTIAL_FAILURE"):
            config = config.with_partial_failure(PartialFailurePolicy(policy.lower()))
        if prefix := os.getenv("EMPORIUM_ORDER_PREFIX"):
            config = config.with_order_number_prefix(prefix)
        return config


__all__ = ("PartialFailurePolicy", "CheckoutConfig")
