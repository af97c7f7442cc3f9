"""
Charge ledger: at most one charge per order.

State machine per order id:

    (none) ──begin──▶ PENDING ──complete──▶ COMPLETED   (result replayed)
                         │
                         └──release──▶ (none)           (may try again)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum

from emporium._errors import GatewayError
from emporium.payments._types import PaymentResult


class ChargeState(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(slots=True)
class _Entry:
    state: ChargeState
    result: PaymentResult | None = None


class ChargeLedger:
    """
    In-memory idempotency record keyed by order id.

    Note: Single process only.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    async def begin(self, order_id: str) -> PaymentResult | None:
        """
        Claim the order for charging.

        Returns the recorded result if the order was already charged
        (or sent to verification); None if the caller should charge now.

        Raises:
            GatewayError: another attempt for this order is in flight
        """
        async with self._lock:
            entry = self._entries.get(order_id)
            if entry is None:
                self._entries[order_id] = _Entry(ChargeState.PENDING)
                return None
            if entry.state is ChargeState.COMPLETED:
                return entry.result
            raise GatewayError(f"A payment for order {order_id} is already in progress")

    async def complete(self, order_id: str, result: PaymentResult) -> None:
        async with self._lock:
            self._entries[order_id] = _Entry(ChargeState.COMPLETED, result)

    async def release(self, order_id: str) -> None:
        async with self._lock:
            entry = self._entries.get(order_id)
            if entry is not None and entry.state is ChargeState.PENDING:
                del self._entries[order_id]

    def state(self, order_id: str) -> ChargeState | None:
        entry = self._entries.get(order_id)
        return entry.state if entry else None


__all__ = ("ChargeState", "ChargeLedger")
