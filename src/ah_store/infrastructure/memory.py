"""InMemoryEntityStore — single-process implementation of EntityStoreProtocol.

Used for local development (STORE_BACKEND=memory) and unit tests. One asyncio
lock serialises writes, which gives every call the same all-or-nothing
semantics the PostgreSQL store gets from row versions.
"""

import asyncio
import copy
import logging

from src.ah_common.enums import StoreTable
from src.ah_common.errors import ConditionFailedError, TransactionCancelledError
from src.ah_store.domain.expressions import (
    Condition,
    DeleteOp,
    TransactionIntent,
    UpdateAction,
    apply_actions,
    condition_holds,
    next_document,
    target_of,
)
from src.ah_store.domain.tables import key_of, key_tuple

logger = logging.getLogger(__name__)

_Row = tuple[str, str, str]


class InMemoryEntityStore:
    def __init__(self) -> None:
        self._rows: dict[_Row, dict] = {}
        self._lock = asyncio.Lock()

    def _row(self, table: StoreTable, key: dict[str, str]) -> _Row:
        pk, sk = key_tuple(table, key)
        return table.value, pk, sk

    async def get(self, table: StoreTable, key: dict[str, str]) -> dict | None:
        doc = self._rows.get(self._row(table, key))
        return copy.deepcopy(doc) if doc is not None else None

    async def put(
        self, table: StoreTable, doc: dict, condition: Condition | None = None
    ) -> None:
        key = key_of(table, doc)
        row = self._row(table, key)
        async with self._lock:
            current = self._rows.get(row)
            if not condition_holds(condition, current):
                raise ConditionFailedError(table.value, key, copy.deepcopy(current))
            self._rows[row] = copy.deepcopy(doc)

    async def update(
        self,
        table: StoreTable,
        key: dict[str, str],
        actions: tuple[UpdateAction, ...],
        condition: Condition | None = None,
    ) -> dict:
        row = self._row(table, key)
        async with self._lock:
            current = self._rows.get(row)
            if not condition_holds(condition, current):
                raise ConditionFailedError(table.value, key, copy.deepcopy(current))
            new_doc = apply_actions(current, key, actions)
            self._rows[row] = new_doc
            return copy.deepcopy(new_doc)

    async def delete(
        self, table: StoreTable, key: dict[str, str], condition: Condition | None = None
    ) -> None:
        row = self._row(table, key)
        async with self._lock:
            current = self._rows.get(row)
            if not condition_holds(condition, current):
                raise ConditionFailedError(table.value, key, copy.deepcopy(current))
            self._rows.pop(row, None)

    async def query(
        self, table: StoreTable, partition_value: str, filter: Condition | None = None
    ) -> list[dict]:
        rows = sorted(
            (r for r in self._rows if r[0] == table.value and r[1] == partition_value),
            key=lambda r: r[2],
        )
        docs = [self._rows[r] for r in rows]
        return [copy.deepcopy(d) for d in docs if condition_holds(filter, d)]

    async def scan(self, table: StoreTable, filter: Condition | None = None) -> list[dict]:
        rows = sorted(r for r in self._rows if r[0] == table.value)
        docs = [self._rows[r] for r in rows]
        return [copy.deepcopy(d) for d in docs if condition_holds(filter, d)]

    async def transact(self, intent: TransactionIntent) -> None:
        intent.validate()
        async with self._lock:
            failed: list[str] = []
            staged: list[tuple[_Row, dict | None, bool]] = []
            for op in intent.ops:
                row = target_of(op)
                current = self._rows.get(row)
                if not condition_holds(op.condition, current):
                    failed.append(op.label)
                    continue
                staged.append((row, next_document(op, current), isinstance(op, DeleteOp)))
            if failed:
                logger.info("Transaction cancelled: failed=%s labels=%s", failed, intent.labels)
                raise TransactionCancelledError(failed)
            for row, new_doc, is_delete in staged:
                if is_delete:
                    self._rows.pop(row, None)
                else:
                    assert new_doc is not None
                    self._rows[row] = new_doc

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None

    def snapshot(self) -> dict[_Row, dict]:
        """Deep copy of every row — lets tests assert that a failed call changed nothing."""
        return copy.deepcopy(self._rows)
