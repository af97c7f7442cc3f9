"""
Memory store: dict-backed DataStore.

Note: Single process only. Nothing survives a restart.
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from emporium._errors import StoreError
from emporium.store._types import Filter, Row


@dataclass(frozen=True, slots=True)
class _Fault:
    collection: str
    op: str
    when: Callable[[Row], bool] | None


class MemoryStore:
    """
    In-memory DataStore.

    Faults can be injected per collection and operation, optionally only for
    rows matching a predicate:

        db.fail_on("orders", "insert", when=lambda row: row["vendor_id"] == "v2")
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, Row]] = {}
        self._faults: list[_Fault] = []
        self._lock = asyncio.Lock()

    def seed(self, collection: str, rows: list[Row]) -> None:
        table = self._tables.setdefault(collection, {})
        for row in rows:
            stored = self._with_defaults(row)
            table[stored["id"]] = stored

    def fail_on(
        self,
        collection: str,
        op: str,
        when: Callable[[Row], bool] | None = None,
    ) -> None:
        self._faults.append(_Fault(collection, op, when))

    def clear_faults(self) -> None:
        self._faults.clear()

    def rows(self, collection: str) -> list[Row]:
        """Synchronous snapshot, for assertions."""
        return [copy.deepcopy(r) for r in self._tables.get(collection, {}).values()]

    async def select(
        self,
        collection: str,
        *filters: Filter,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        async with self._lock:
            self._check_fault(collection, "select", [])
            found = [
                copy.deepcopy(row)
                for row in self._tables.get(collection, {}).values()
                if all(f.matches(row) for f in filters)
            ]
        if order_by is not None:
            # rows missing the key sort after the rest (before, when descending)
            found.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        return found

    async def insert(self, collection: str, rows: list[Row]) -> list[Row]:
        async with self._lock:
            prepared = [self._with_defaults(row) for row in rows]
            self._check_fault(collection, "insert", prepared)
            table = self._tables.setdefault(collection, {})
            for row in prepared:
                if row["id"] in table:
                    raise StoreError(f"Duplicate id in {collection}: {row['id']}")
            for row in prepared:
                table[row["id"]] = row
            return [copy.deepcopy(r) for r in prepared]

    async def update(self, collection: str, values: Row, *filters: Filter) -> list[Row]:
        async with self._lock:
            table = self._tables.get(collection, {})
            matched = [row for row in table.values() if all(f.matches(row) for f in filters)]
            self._check_fault(collection, "update", matched)
            for row in matched:
                row.update(copy.deepcopy(values))
            return [copy.deepcopy(r) for r in matched]

    def _check_fault(self, collection: str, op: str, rows: list[Row]) -> None:
        for fault in self._faults:
            if fault.collection != collection or fault.op != op:
                continue
            if fault.when is None or any(fault.when(r) for r in rows):
                raise StoreError(f"Injected failure: {op} on {collection}")

    @staticmethod
    def _with_defaults(row: Row) -> Row:
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", datetime.now(timezone.utc))
        return stored


__all__ = ("MemoryStore",)
