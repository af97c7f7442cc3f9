"""
Store: the generic data store the checkout reads and writes.

    from emporium import store as St

    rows = await db.select("shipping_methods", St.Eq("is_active", True))
    [order] = await db.insert("orders", [{...}])
    await db.update("orders", {"status": "processing"}, St.Eq("id", order["id"]))

Backends:
    MemoryStore      in-process, for tests and demos
    SQLAlchemyStore  async SQLAlchemy (sqlite+aiosqlite by default)

Every backend raises StoreError, never a driver exception.
"""

from emporium.store._types import (
    DataStore,
    Filter,
    Eq,
    Gte,
    Lte,
    Row,
    ORDERS,
    ORDER_ITEMS,
    SHIPPING_METHODS,
    PAYMENT_GATEWAYS,
    PAYMENT_TRANSACTIONS,
    PROFILES,
    VAT_SETTINGS,
)
from emporium.store._memory import MemoryStore
from emporium.store._sqlalchemy import (
    Base,
    OrderRow,
    OrderItemRow,
    ShippingMethodRow,
    PaymentGatewayRow,
    PaymentTransactionRow,
    ProfileRow,
    VatSettingsRow,
    SQLAlchemyStore,
    create_database,
)

__all__ = (
    "DataStore",
    "Filter",
    "Eq",
    "Gte",
    "Lte",
    "Row",
    "ORDERS",
    "ORDER_ITEMS",
    "SHIPPING_METHODS",
    "PAYMENT_GATEWAYS",
    "PAYMENT_TRANSACTIONS",
    "PROFILES",
    "VAT_SETTINGS",
    "MemoryStore",
    "Base",
    "OrderRow",
    "OrderItemRow",
    "ShippingMethodRow",
    "PaymentGatewayRow",
    "PaymentTransactionRow",
    "ProfileRow",
    "VatSettingsRow",
    "SQLAlchemyStore",
    "create_database",
)
