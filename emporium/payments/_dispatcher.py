"""
Payment dispatcher: turn one vendor order into at most one gateway charge.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Mapping

from emporium._errors import GatewayError, NetworkError
from emporium.config import CheckoutConfig
from emporium.orders import Order, OrderWriter
from emporium.payments._adapters import DEFAULT_ADAPTERS, GatewayAdapter, adapter_for, redact
from emporium.payments._client import GatewayClient
from emporium.payments._ledger import ChargeLedger
from emporium.payments._messages import NETWORK_ERROR, friendly_message
from emporium.payments._types import (
    PaymentDetails,
    PaymentGateway,
    PaymentRequest,
    PaymentResult,
    PaymentSelection,
)
from emporium.payments._validation import validate_details
from emporium.store import PAYMENT_GATEWAYS, PAYMENT_TRANSACTIONS, DataStore, Eq

logger = logging.getLogger(__name__)


class PaymentDispatcher:
    """
    Pay one order.

    cash:      synthetic success, no gateway call, order stays pending/pending
    success:   order → processing/paid
    redirect:  order untouched, result carries the verification URL
    failure:   GatewayError / NetworkError raised, order untouched

    A second pay() for an order that was already charged (or redirected)
    replays the recorded result without calling the gateway again. A
    replayed success re-applies processing/paid, so a failed status update
    heals on retry.
    """

    def __init__(
        self,
        store: DataStore,
        client: GatewayClient,
        writer: OrderWriter,
        config: CheckoutConfig | None = None,
        *,
        ledger: ChargeLedger | None = None,
        adapters: Mapping[str, GatewayAdapter] = DEFAULT_ADAPTERS,
    ) -> None:
        self._store = store
        self._client = client
        self._writer = writer
        self._config = config or CheckoutConfig()
        self._ledger = ledger or ChargeLedger()
        self._adapters = adapters

    @property
    def ledger(self) -> ChargeLedger:
        return self._ledger

    # ═══════════════════════════════════════════════════════════════════════════
    # Gateway lookup
    # ═══════════════════════════════════════════════════════════════════════════

    async def active_gateways(self) -> list[PaymentGateway]:
        rows = await self._store.select(PAYMENT_GATEWAYS, Eq("is_active", True), order_by="sort_order")
        return [PaymentGateway.from_row(r) for r in rows]

    async def gateway_for(self, selection: PaymentSelection) -> PaymentGateway:
        rows = await self._store.select(
            PAYMENT_GATEWAYS,
            Eq("gateway_type", selection.gateway.value),
            Eq("is_active", True),
        )
        if not rows:
            raise GatewayError("Payment gateway not found or inactive")
        gateway = PaymentGateway.from_row(rows[0])
        if not gateway.supports(self._config.currency):
            raise GatewayError(f"{gateway.display_name} does not accept {self._config.currency}")
        return gateway

    # ═══════════════════════════════════════════════════════════════════════════
    # Pay
    # ═══════════════════════════════════════════════════════════════════════════

    def validate(
        self,
        selection: PaymentSelection,
        details: PaymentDetails,
        today: date | None = None,
    ) -> None:
        """Synchronous checks. Raises ValidationError."""
        validate_details(selection, details, today)

    def build_request(
        self,
        order: Order,
        gateway: PaymentGateway,
        selection: PaymentSelection,
        details: PaymentDetails,
    ) -> PaymentRequest:
        base: dict[str, Any] = {
            "customer_id": order.customer_id,
            "order_number": order.order_number,
            "order_ids": [order.id],
        }
        adapter = adapter_for(gateway.gateway_type, self._adapters)
        return PaymentRequest(
            order_id=order.id,
            gateway_type=gateway.gateway_type,
            amount=order.total,
            currency=self._config.currency,
            return_url=self._config.return_url,
            metadata=adapter.metadata(selection, details, base),
        )

    async def pay(
        self,
        order: Order,
        selection: PaymentSelection,
        details: PaymentDetails = None,
    ) -> PaymentResult:
        result, _ = await self.charge(order, selection, details)
        return result

    async def charge(
        self,
        order: Order,
        selection: PaymentSelection,
        details: PaymentDetails = None,
    ) -> tuple[PaymentResult, Order]:
        """Like pay(), also returning the order as it stands afterwards."""
        if selection.is_cash:
            logger.info("Order %s is cash on delivery", order.order_number)
            return PaymentResult.succeeded(), order

        self.validate(selection, details)

        recorded = await self._ledger.begin(order.id)
        if recorded is not None:
            logger.info("Order %s already charged, replaying result", order.order_number)
            if recorded.success:
                order = await self._settle(order)
            return recorded, order

        try:
            result = await self._attempt(order, selection, details)
        except BaseException:
            # no-op once the charge is recorded as completed
            await self._ledger.release(order.id)
            raise

        if result.success:
            order = await self._settle(order)
        return result, order

    async def _settle(self, order: Order) -> Order:
        """processing/paid for a charged order. Safe to repeat."""
        if order.is_paid:
            return order
        return await self._writer.mark_paid(order)

    async def _attempt(
        self,
        order: Order,
        selection: PaymentSelection,
        details: PaymentDetails,
    ) -> PaymentResult:
        gateway = await self.gateway_for(selection)
        request = self.build_request(order, gateway, selection, details)

        [txn] = await self._store.insert(
            PAYMENT_TRANSACTIONS,
            [
                {
                    "order_id": order.id,
                    "user_id": order.customer_id,
                    "gateway_id": gateway.id,
                    "gateway_type": gateway.gateway_type,
                    "amount": order.total,
                    "currency": request.currency,
                    "status": "pending",
                    "metadata": redact(request.metadata),
                }
            ],
        )

        try:
            result = await self._call(request)
        except (GatewayError, NetworkError) as e:
            await self._record(txn["id"], "failed", error=e.message)
            raise type(e)(friendly_message(e.message)) from e

        if result.is_redirect or result.success:
            await self._ledger.complete(order.id, result)

        if result.is_redirect:
            logger.info("Order %s needs verification at %s", order.order_number, result.redirect_url)
            await self._record(txn["id"], "pending", reference=result.transaction_reference)
            return result

        if result.success:
            await self._record(txn["id"], "completed", reference=result.transaction_reference)
            return result

        await self._record(txn["id"], "failed", error=result.error)
        raise GatewayError(friendly_message(result.error))

    async def _call(self, request: PaymentRequest) -> PaymentResult:
        timeout = self._config.gateway_timeout
        if timeout is None:
            return await self._client.initiate(request)
        try:
            return await asyncio.wait_for(self._client.initiate(request), timeout.total_seconds())
        except asyncio.TimeoutError as e:
            logger.warning("Gateway timed out after %s for order %s", timeout, request.order_id)
            raise NetworkError(NETWORK_ERROR) from e

    async def _record(
        self,
        txn_id: str,
        status: str,
        *,
        reference: str | None = None,
        error: str | None = None,
    ) -> None:
        values: dict[str, Any] = {"status": status}
        if reference is not None:
            values["transaction_reference"] = reference
        if error is not None:
            values["error_message"] = error
        await self._store.update(PAYMENT_TRANSACTIONS, values, Eq("id", txn_id))


__all__ = ("PaymentDispatcher",)
