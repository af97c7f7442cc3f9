"""
Compensation: cancel what a failed checkout left unpaid.

Only used under PartialFailurePolicy.CANCEL_UNPAID.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from emporium._errors import CheckoutError
from emporium.orders import Order, OrderWriter

logger = logging.getLogger(__name__)

Compensator = Callable[[Order], Awaitable[Order]]
RecordedCompensator = tuple[Order, Compensator]


class CompensationLog:
    """Orders of one checkout batch that can still be undone."""

    def __init__(self, batch_id: str, writer: OrderWriter) -> None:
        self.batch_id = batch_id
        self._writer = writer

    async def entries(self) -> list[RecordedCompensator]:
        """Every open (unpaid, uncancelled) order written under this batch."""
        orders = await self._writer.batch(self.batch_id)
        return [(order, self._writer.cancel) for order in orders if order.is_open]


async def run_compensators(compensators: list[RecordedCompensator]) -> tuple[list[str], int]:
    """Run compensators in reverse. Returns (compensated order ids, failed)."""
    done: list[str] = []
    failed = 0

    for order, comp in reversed(compensators):
        try:
            result = await comp(order)
        except CheckoutError as e:
            logger.error("Could not cancel order %s: %s", order.order_number, e.message)
            failed += 1
            continue
        if not result.is_open:
            done.append(order.id)

    return done, failed


__all__ = ("Compensator", "RecordedCompensator", "CompensationLog", "run_compensators")
