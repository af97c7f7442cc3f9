"""
SQLAlchemy backend: async ORM models and a DataStore over them.

Usage:
    session_factory, engine = await create_database()
    db = SQLAlchemyStore(session_factory)

    await db.insert("shipping_methods", [{"display_name": "Courier", "base_cost": Decimal("6")}])
    rows = await db.select("shipping_methods", Eq("is_active", True))

Rows go in and come out as dicts keyed by column name, so the checkout code
does not care which backend it talks to.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from emporium._errors import StoreError
from emporium.store._types import (
    ORDER_ITEMS,
    ORDERS,
    PAYMENT_GATEWAYS,
    PAYMENT_TRANSACTIONS,
    PROFILES,
    SHIPPING_METHODS,
    VAT_SETTINGS,
    Eq,
    Filter,
    Gte,
    Lte,
    Row,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


_MONEY = Numeric(12, 2)


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class OrderRow(Base):
    """
    One vendor's share of a checkout.

    Note: order_number is indexed but not unique. Uniqueness is advisory.
    """

    __tablename__ = ORDERS

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=_new_id)
    order_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    customer_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    vendor_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    batch_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)

    shipping_method_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    shipping_address: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    subtotal: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    tax_total: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    shipping_total: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    total: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class OrderItemRow(Base):
    __tablename__ = ORDER_ITEMS

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=_new_id)
    order_id: Mapped[str] = mapped_column(ForeignKey(f"{ORDERS}.id"), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class ShippingMethodRow(Base):
    __tablename__ = SHIPPING_METHODS

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=_new_id)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    base_cost: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    delivery_time_min: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    delivery_time_max: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_order_total: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    max_order_total: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class PaymentGatewayRow(Base):
    """Gateway configuration. Read-only for checkout."""

    __tablename__ = PAYMENT_GATEWAYS

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=_new_id)
    gateway_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    gateway_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    configuration: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    supported_currencies: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class PaymentTransactionRow(Base):
    __tablename__ = PAYMENT_TRANSACTIONS

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=_new_id)
    order_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(50), nullable=False)
    gateway_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gateway_type: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    transaction_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class ProfileRow(Base):
    __tablename__ = PROFILES

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="customer")
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class VatSettingsRow(Base):
    __tablename__ = VAT_SETTINGS

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default=_new_id)
    jurisdiction: Mapped[str] = mapped_column(String(50), nullable=False, default="default")
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    default_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    commission_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    commission_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


MODELS: Mapping[str, type[Base]] = {
    model.__tablename__: model
    for model in (
        OrderRow,
        OrderItemRow,
        ShippingMethodRow,
        PaymentGatewayRow,
        PaymentTransactionRow,
        ProfileRow,
        VatSettingsRow,
    )
}


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create database and return (session_factory, engine)."""
    if ":memory:" in url:
        # one shared connection, otherwise every session sees an empty database
        engine = create_async_engine(url, echo=False, poolclass=StaticPool)
    else:
        engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyStore:
    """
    DataStore over the ORM models above.

    Each call runs in its own session and commits before returning.
    Driver errors are wrapped in StoreError.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        models: Mapping[str, type[Base]] = MODELS,
    ) -> None:
        self._session_factory = session_factory
        self._models = models

    async def select(
        self,
        collection: str,
        *filters: Filter,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        model = self._model(collection)
        stmt = select(model)
        for f in filters:
            stmt = stmt.where(_clause(model, f))
        if order_by is not None:
            column = _column(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [_to_row(obj) for obj in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to select from {collection}: {e}", e) from e

    async def insert(self, collection: str, rows: list[Row]) -> list[Row]:
        model = self._model(collection)
        objects = [model(**_to_attrs(model, row)) for row in rows]

        try:
            async with self._session_factory() as session:
                session.add_all(objects)
                await session.commit()
                return [_to_row(obj) for obj in objects]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to insert into {collection}: {e}", e) from e

    async def update(self, collection: str, values: Row, *filters: Filter) -> list[Row]:
        model = self._model(collection)
        attrs = _to_attrs(model, values)
        stmt = select(model)
        for f in filters:
            stmt = stmt.where(_clause(model, f))

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                objects = list(result.scalars().all())
                for obj in objects:
                    for key, value in attrs.items():
                        setattr(obj, key, value)
                await session.commit()
                return [_to_row(obj) for obj in objects]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update {collection}: {e}", e) from e

    def _model(self, collection: str) -> type[Base]:
        try:
            return self._models[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None


# ═══════════════════════════════════════════════════════════════════════════════
# Row mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _attr_names(model: type[Base]) -> dict[str, str]:
    """Column name → mapped attribute name."""
    return {
        attr.columns[0].name: attr.key
        for attr in model.__mapper__.column_attrs
    }


def _column(model: type[Base], name: str) -> Any:
    try:
        return model.__table__.c[name]
    except KeyError:
        raise StoreError(f"Unknown column {model.__tablename__}.{name}") from None


def _clause(model: type[Base], f: Filter) -> Any:
    column = _column(model, f.field)
    match f:
        case Eq(value=value):
            return column.is_(None) if value is None else column == value
        case Gte(value=value):
            return column >= value
        case Lte(value=value):
            return column <= value
    raise StoreError(f"Unsupported filter: {f!r}")


def _to_attrs(model: type[Base], row: Row) -> dict[str, Any]:
    names = _attr_names(model)
    attrs: dict[str, Any] = {}
    for column, value in row.items():
        if column not in names:
            raise StoreError(f"Unknown column {model.__tablename__}.{column}")
        attrs[names[column]] = value
    return attrs


def _to_row(obj: Base) -> Row:
    return {
        column: getattr(obj, key)
        for column, key in _attr_names(type(obj)).items()
    }


__all__ = (
    "Base",
    "OrderRow",
    "OrderItemRow",
    "ShippingMethodRow",
    "PaymentGatewayRow",
    "PaymentTransactionRow",
    "ProfileRow",
    "VatSettingsRow",
    "MODELS",
    "create_database",
    "SQLAlchemyStore",
)
