from decimal import Decimal

import pytest

from emporium import StoreError
from emporium.store import Eq, Gte, Lte, MemoryStore, SQLAlchemyStore, create_database


@pytest.fixture(params=["memory", "sqlalchemy"])
async def db(request: pytest.FixtureRequest):
    if request.param == "memory":
        yield MemoryStore()
        return
    session_factory, engine = await create_database()
    yield SQLAlchemyStore(session_factory)
    await engine.dispose()


def _method(name: str, cost: str, sort_order: int, active: bool = True) -> dict:
    return {
        "display_name": name,
        "base_cost": Decimal(cost),
        "is_active": active,
        "sort_order": sort_order,
    }


async def test_insert_assigns_ids(db) -> None:
    rows = await db.insert("shipping_methods", [_method("A", "1", 1), _method("B", "2", 2)])

    assert len({r["id"] for r in rows}) == 2
    assert [r["display_name"] for r in rows] == ["A", "B"]


async def test_select_with_filters_and_order(db) -> None:
    await db.insert(
        "shipping_methods",
        [
            _method("Slow", "2.00", 3),
            _method("Fast", "9.50", 1),
            _method("Hidden", "1.00", 2, active=False),
        ],
    )

    active = await db.select("shipping_methods", Eq("is_active", True), order_by="sort_order")
    assert [r["display_name"] for r in active] == ["Fast", "Slow"]

    cheap = await db.select("shipping_methods", Lte("base_cost", Decimal("2.00")), order_by="base_cost")
    assert [r["display_name"] for r in cheap] == ["Hidden", "Slow"]

    pricey = await db.select("shipping_methods", Gte("base_cost", Decimal("5")))
    assert [r["base_cost"] for r in pricey] == [Decimal("9.50")]


async def test_update_returns_updated_rows(db) -> None:
    [row] = await db.insert("shipping_methods", [_method("A", "1", 1)])

    updated = await db.update("shipping_methods", {"is_active": False}, Eq("id", row["id"]))

    assert [r["is_active"] for r in updated] == [False]
    assert await db.select("shipping_methods", Eq("is_active", True)) == []


async def test_update_without_match_returns_nothing(db) -> None:
    assert await db.update("shipping_methods", {"is_active": False}, Eq("id", "missing")) == []


async def test_json_columns_round_trip(db) -> None:
    [row] = await db.insert(
        "payment_transactions",
        [
            {
                "order_id": "o-1",
                "user_id": "u-1",
                "gateway_type": "iveri",
                "amount": Decimal("23.00"),
                "currency": "USD",
                "metadata": {"payment_subtype": "card"},
            }
        ],
    )

    [found] = await db.select("payment_transactions", Eq("id", row["id"]))
    assert found["metadata"] == {"payment_subtype": "card"}
    assert found["amount"] == Decimal("23.00")


async def test_sqlalchemy_unknown_collection_and_column() -> None:
    session_factory, engine = await create_database()
    db = SQLAlchemyStore(session_factory)

    with pytest.raises(StoreError, match="Unknown collection"):
        await db.select("nope")
    with pytest.raises(StoreError, match="Unknown column"):
        await db.insert("orders", [{"bogus": 1}])
    await engine.dispose()


async def test_sqlalchemy_driver_errors_wrapped() -> None:
    session_factory, engine = await create_database()
    db = SQLAlchemyStore(session_factory)

    # missing NOT NULL columns
    with pytest.raises(StoreError) as exc:
        await db.insert("orders", [{"order_number": "ORD-1"}])
    assert exc.value.cause is not None
    await engine.dispose()


async def test_memory_fault_injection_with_predicate() -> None:
    db = MemoryStore()
    db.fail_on("orders", "insert", when=lambda row: row.get("vendor_id") == "b")

    await db.insert("orders", [{"vendor_id": "a"}])
    with pytest.raises(StoreError, match="Injected failure"):
        await db.insert("orders", [{"vendor_id": "b"}])

    assert [r["vendor_id"] for r in db.rows("orders")] == ["a"]


async def test_memory_rows_are_copies() -> None:
    db = MemoryStore()
    [row] = await db.insert("orders", [{"shipping_address": {"city": "Harare"}}])

    row["shipping_address"]["city"] = "Bulawayo"

    [stored] = db.rows("orders")
    assert stored["shipping_address"] == {"city": "Harare"}


async def test_memory_order_by_tolerates_missing_values() -> None:
    db = MemoryStore()
    await db.insert("shipping_methods", [{"display_name": "None"}, {"display_name": "B", "sort_order": 2}])
    await db.insert("shipping_methods", [{"display_name": "A", "sort_order": 1}])

    rows = await db.select("shipping_methods", order_by="sort_order")

    assert [r["display_name"] for r in rows] == ["A", "B", "None"]


async def test_memory_faults_can_be_cleared() -> None:
    db = MemoryStore()
    db.fail_on("orders", "insert")
    db.clear_faults()

    await db.insert("orders", [{"vendor_id": "a"}])

    assert len(db.rows("orders")) == 1
