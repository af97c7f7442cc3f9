"""
Store types: collections, filters, the DataStore protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, Union

Row: TypeAlias = dict[str, Any]

ORDERS = "orders"
ORDER_ITEMS = "order_items"
SHIPPING_METHODS = "shipping_methods"
PAYMENT_GATEWAYS = "payment_gateways"
PAYMENT_TRANSACTIONS = "payment_transactions"
PROFILES = "profiles"
VAT_SETTINGS = "vat_settings"


# ═══════════════════════════════════════════════════════════════════════════════
# Filters
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Eq:
    field: str
    value: Any

    def matches(self, row: Row) -> bool:
        return row.get(self.field) == self.value


@dataclass(frozen=True, slots=True)
class Gte:
    field: str
    value: Any

    def matches(self, row: Row) -> bool:
        current = row.get(self.field)
        return current is not None and current >= self.value


@dataclass(frozen=True, slots=True)
class Lte:
    field: str
    value: Any

    def matches(self, row: Row) -> bool:
        current = row.get(self.field)
        return current is not None and current <= self.value


Filter: TypeAlias = Union[Eq, Gte, Lte]


# ═══════════════════════════════════════════════════════════════════════════════
# DataStore Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class DataStore(Protocol):
    """
    CRUD over named collections.

    Rows are plain dicts keyed by column name. Inserted rows come back with
    their generated ``id``. All methods raise StoreError on failure.
    """

    async def select(
        self,
        collection: str,
        *filters: Filter,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        ...

    async def insert(self, collection: str, rows: list[Row]) -> list[Row]:
        ...

    async def update(self, collection: str, values: Row, *filters: Filter) -> list[Row]:
        """Update every matching row. Returns the rows after the update."""
        ...


__all__ = (
    "Row",
    "ORDERS",
    "ORDER_ITEMS",
    "SHIPPING_METHODS",
    "PAYMENT_GATEWAYS",
    "PAYMENT_TRANSACTIONS",
    "PROFILES",
    "VAT_SETTINGS",
    "Eq",
    "Gte",
    "Lte",
    "Filter",
    "DataStore",
)
