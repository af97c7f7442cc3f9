"""
Checkout orchestrator: validate, resolve, split, write, pay, aggregate.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

from emporium._errors import CheckoutError, GatewayError, PartitionWriteError, ValidationError
from emporium._money import Money
from emporium.cart import Cart, VendorPartition, cart_totals, partition, price_partitions
from emporium.config import CheckoutConfig, PartialFailurePolicy
from emporium.identity import IdentityProvider, IdentityResolver
from emporium.orders import OrderWriter
from emporium.payments import (
    GatewayClient,
    PaymentDispatcher,
    PaymentGateway,
    PaymentResult,
    PaymentSelection,
)
from emporium.pricing import NO_TAX, TaxConfig
from emporium.shipping import ShippingMethod, eligible, is_eligible
from emporium.store import SHIPPING_METHODS, VAT_SETTINGS, DataStore, Eq
from emporium.checkout._compensation import CompensationLog, run_compensators
from emporium.checkout._result import CheckoutResult, CheckoutStatus, LegOutcome
from emporium.checkout._session import CheckoutSession

logger = logging.getLogger(__name__)


class Checkout:
    """
    One checkout submission, end to end.

    Steps:
        1. cart lines valid, contact fields present
        2. delivery address present (unless pickup), method still eligible
        3. payment method chosen, card / mobile-money details valid
        4. customer resolved (guest account created if needed)
        5. cart split into vendor partitions
        6. per vendor, concurrently: write order + items, then pay
        7. any redirect → REDIRECT_REQUIRED
        8. all legs fine → cart cleared, SUCCEEDED
        9. otherwise → FAILED with the first leg's error

    Steps 1-4 raise (ValidationError, IdentityError) before any order is
    written. From step 6 on, failures are reported in the CheckoutResult.
    """

    def __init__(
        self,
        store: DataStore,
        identity: IdentityResolver,
        writer: OrderWriter,
        dispatcher: PaymentDispatcher,
        config: CheckoutConfig | None = None,
        tax: TaxConfig = NO_TAX,
    ) -> None:
        self._store = store
        self._identity = identity
        self._writer = writer
        self._dispatcher = dispatcher
        self._config = config or CheckoutConfig()
        self._tax = tax

    @classmethod
    def create(
        cls,
        store: DataStore,
        provider: IdentityProvider,
        client: GatewayClient,
        config: CheckoutConfig | None = None,
        tax: TaxConfig = NO_TAX,
    ) -> Checkout:
        """Wire the default collaborators around one store."""
        config = config or CheckoutConfig()
        writer = OrderWriter(store, config)
        return cls(
            store,
            IdentityResolver(provider, store),
            writer,
            PaymentDispatcher(store, client, writer, config),
            config,
            tax,
        )

    @property
    def config(self) -> CheckoutConfig:
        return self._config

    @property
    def tax(self) -> TaxConfig:
        return self._tax

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads for the checkout form
    # ═══════════════════════════════════════════════════════════════════════════

    async def load_tax(self, jurisdiction: str = "default") -> TaxConfig:
        """Refresh the tax settings from the store. Keeps the current ones if none are stored."""
        rows = await self._store.select(VAT_SETTINGS, Eq("jurisdiction", jurisdiction))
        if rows:
            self._tax = TaxConfig.from_row(rows[0])
        return self._tax

    async def shipping_options(self, merchandise_total: Money) -> list[ShippingMethod]:
        rows = await self._store.select(SHIPPING_METHODS, Eq("is_active", True), order_by="sort_order")
        return eligible([ShippingMethod.from_row(r) for r in rows], merchandise_total)

    async def payment_options(self) -> list[PaymentGateway]:
        return await self._dispatcher.active_gateways()

    def quote(self, cart: Cart, shipping: ShippingMethod) -> list[VendorPartition]:
        """Per-vendor split of a cart, without writing anything."""
        return price_partitions(partition(cart.lines), shipping.base_cost, self._tax)

    # ═══════════════════════════════════════════════════════════════════════════
    # Run
    # ═══════════════════════════════════════════════════════════════════════════

    def validate(self, session: CheckoutSession) -> PaymentSelection:
        if not session.cart:
            raise ValidationError("cart", "Your cart is empty")
        for line in session.cart.lines:
            if line.quantity <= 0:
                raise ValidationError("quantity", f"Invalid quantity for {line.name or line.product_id}")
            if line.unit_price < 0:
                raise ValidationError("unit_price", f"Invalid price for {line.name or line.product_id}")

        if missing := session.contact.missing():
            raise ValidationError(missing[0], "Please fill in all required contact fields")

        if not session.shipping.is_pickup:
            if missing := session.address.missing():
                raise ValidationError(missing[0], "Please fill in your delivery address")
            _, _, merchandise = cart_totals(session.cart.lines, self._tax)
            if not is_eligible(session.shipping, merchandise):
                raise ValidationError(
                    "shipping_method",
                    f"{session.shipping.display_name} is not available for this order total",
                )

        if session.payment is None:
            raise ValidationError("payment_method", "Please select a payment method")
        self._dispatcher.validate(session.payment, session.details)
        return session.payment

    async def run(self, session: CheckoutSession) -> CheckoutResult:
        selection = self.validate(session)

        resolution = await self._identity.resolve(
            session.principal,
            session.contact,
            session.address,
            use_session=session.use_session,
        )

        groups = partition(session.cart.lines)
        parts = price_partitions(groups, session.shipping.base_cost, self._tax)
        batch_id = str(uuid.uuid4())
        logger.info(
            "Checkout %s: %d vendor order(s) for customer %s",
            batch_id,
            len(parts),
            resolution.user_id,
        )

        legs = tuple(
            await asyncio.gather(
                *(
                    self._leg(part, session, selection, resolution.user_id, batch_id)
                    for part in parts
                )
            )
        )

        redirect = next((leg for leg in legs if leg.is_redirect), None)
        if redirect is not None:
            logger.info("Checkout %s waits for verification (vendor %s)", batch_id, redirect.vendor_id)
            return CheckoutResult(
                status=CheckoutStatus.REDIRECT_REQUIRED,
                batch_id=batch_id,
                legs=legs,
                confirmation_order_id=redirect.order.id if redirect.order else None,
                redirect_url=redirect.payment.redirect_url if redirect.payment else None,
                credentials=resolution.credentials,
            )

        failed = next((leg for leg in legs if leg.failed), None)
        if failed is not None:
            logger.warning("Checkout %s failed for vendor %s: %s", batch_id, failed.vendor_id, failed.error)
            cancelled = await self._compensate(batch_id)
            return CheckoutResult(
                status=CheckoutStatus.FAILED,
                batch_id=batch_id,
                legs=legs,
                error=failed.error,
                credentials=resolution.credentials,
                cancelled=cancelled,
            )

        session.cart.clear()
        first = legs[0].order
        logger.info("Checkout %s succeeded", batch_id)
        return CheckoutResult(
            status=CheckoutStatus.SUCCEEDED,
            batch_id=batch_id,
            legs=legs,
            confirmation_order_id=first.id if first else None,
            credentials=resolution.credentials,
        )

    async def _leg(
        self,
        part: VendorPartition,
        session: CheckoutSession,
        selection: PaymentSelection,
        customer_id: str,
        batch_id: str,
    ) -> LegOutcome:
        try:
            order = await self._writer.write(
                part,
                session.shipping,
                selection.gateway.value,
                customer_id,
                session.address,
                batch_id,
            )
        except CheckoutError as e:
            return LegOutcome(part.vendor_id, error=e)
        except Exception as e:
            logger.exception("Unexpected error writing the order for vendor %s", part.vendor_id)
            error = PartitionWriteError(part.vendor_id, f"Failed to create order: {e}")
            return LegOutcome(part.vendor_id, error=error)

        if selection.is_cash:
            return LegOutcome(part.vendor_id, order=order, payment=PaymentResult.succeeded())

        try:
            result, order = await self._dispatcher.charge(order, selection, session.details)
        except CheckoutError as e:
            return LegOutcome(part.vendor_id, order=order, error=e)
        except Exception:
            logger.exception("Unexpected error paying order %s", order.order_number)
            return LegOutcome(part.vendor_id, order=order, error=GatewayError("Payment failed"))
        return LegOutcome(part.vendor_id, order=order, payment=result)

    async def _compensate(self, batch_id: str) -> tuple[str, ...]:
        if self._config.partial_failure is not PartialFailurePolicy.CANCEL_UNPAID:
            return ()
        try:
            entries = await CompensationLog(batch_id, self._writer).entries()
        except CheckoutError as e:
            logger.error("Could not read batch %s for compensation: %s", batch_id, e.message)
            return ()
        done, failed = await run_compensators(entries)
        logger.info("Checkout %s: cancelled %d unpaid order(s), %d failed", batch_id, len(done), failed)
        return tuple(done)


__all__ = ("Checkout",)
