"""PostgresEntityStore — EntityStoreProtocol over a single JSONB `entities` table.

Every write follows the same optimistic-concurrency pattern:
  1. SELECT doc, version
  2. evaluate the condition in Python against the document
  3. INSERT ... ON CONFLICT DO NOTHING / UPDATE ... WHERE version = :version
A result of 0 rows means another writer got there first; the whole call is
re-evaluated from a fresh read (bounded), so a condition is never checked
against a stale version. A deadlock or serialization failure reported by
PostgreSQL is rolled back by the server and retried the same way. No row
lock outlives one adapter call.

Transactions run every participant inside one database transaction, so any
failed condition or lost version race rolls the whole unit back.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from src.ah_common.database import dispose_engine, get_session_factory
from src.ah_common.enums import StoreTable
from src.ah_common.errors import (
    ConditionFailedError,
    StoreUnavailableError,
    TransactionCancelledError,
)
from src.ah_store.domain.expressions import (
    Condition,
    DeleteOp,
    PutOp,
    TransactionIntent,
    TransactOp,
    UpdateAction,
    UpdateOp,
    condition_holds,
    next_document,
    target_of,
)
from src.ah_store.domain.tables import key_of, key_tuple

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_VERSION_RACES = 5

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_SQL = text("""
    SELECT doc::text AS doc, version
    FROM entities
    WHERE table_name = :table_name AND pk = :pk AND sk = :sk
""")

_INSERT_SQL = text("""
    INSERT INTO entities (table_name, pk, sk, doc, version)
    VALUES (:table_name, :pk, :sk, CAST(:doc AS JSONB), 1)
    ON CONFLICT (table_name, pk, sk) DO NOTHING
""")

_UPDATE_SQL = text("""
    UPDATE entities
    SET doc = CAST(:doc AS JSONB),
        version = version + 1,
        updated_at = NOW()
    WHERE table_name = :table_name AND pk = :pk AND sk = :sk
      AND version = :version
""")

_DELETE_SQL = text("""
    DELETE FROM entities
    WHERE table_name = :table_name AND pk = :pk AND sk = :sk
      AND version = :version
""")

_QUERY_SQL = text("""
    SELECT doc::text AS doc
    FROM entities
    WHERE table_name = :table_name AND pk = :pk
    ORDER BY sk
""")

_SCAN_SQL = text("""
    SELECT doc::text AS doc
    FROM entities
    WHERE table_name = :table_name
    ORDER BY pk, sk
""")


class _VersionRace(Exception):
    """A guarded write matched 0 rows: the row changed after it was read."""


# SQLSTATEs after which PostgreSQL has rolled the transaction back: deadlock
# detected, serialization failure
_RACE_SQLSTATES = frozenset({"40P01", "40001"})


def _lost_race(e: DBAPIError) -> bool:
    code = getattr(e.orig, "sqlstate", None) or getattr(e.orig, "pgcode", None)
    return code in _RACE_SQLSTATES


def _params(row: tuple[str, str, str]) -> dict[str, str]:
    table_name, pk, sk = row
    return {"table_name": table_name, "pk": pk, "sk": sk}


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class PostgresEntityStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._session_factory = session_factory or get_session_factory()
        self._timeout = timeout_seconds or settings.STORE_TIMEOUT_SECONDS

    async def _run(self, operation: str, coro: Awaitable[T]) -> T:
        """Apply the call timeout and translate transport failures.

        A timeout does not mean the write failed: the database may have
        committed it. Callers re-read before retrying.
        """
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            logger.error("Store %s timed out after %.1fs", operation, self._timeout)
            raise StoreUnavailableError(f"{operation} timed out") from e
        except (DBAPIError, InterfaceError, OSError) as e:
            logger.error("Store %s failed: %s", operation, e)
            raise StoreUnavailableError(f"{operation} failed: {e.__class__.__name__}") from e

    # --- row primitives (caller owns the transaction) ---

    async def _read(
        self, db: AsyncSession, row: tuple[str, str, str]
    ) -> tuple[dict | None, int | None]:
        result = await db.execute(_GET_SQL, _params(row))
        found = result.fetchone()
        if found is None:
            return None, None
        return json.loads(found.doc), found.version

    async def _write(
        self,
        db: AsyncSession,
        row: tuple[str, str, str],
        new_doc: dict | None,
        version: int | None,
    ) -> None:
        params = _params(row)
        if new_doc is None:
            if version is None:
                return  # deleting an absent row is a no-op
            result = await db.execute(_DELETE_SQL, {**params, "version": version})
        elif version is None:
            result = await db.execute(_INSERT_SQL, {**params, "doc": json.dumps(new_doc)})
        else:
            result = await db.execute(
                _UPDATE_SQL, {**params, "doc": json.dumps(new_doc), "version": version}
            )
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise _VersionRace()

    async def _single(self, op: TransactOp, table: StoreTable, key: dict[str, str]) -> dict | None:
        """Conditional single-item write; retries only lost version races."""
        row = target_of(op)
        current: dict | None = None
        for _ in range(_MAX_VERSION_RACES):
            try:
                async with self._session_factory() as db, db.begin():
                    current, version = await self._read(db, row)
                    if not condition_holds(op.condition, current):
                        raise ConditionFailedError(table.value, key, current)
                    new_doc = next_document(op, current)
                    await self._write(db, row, new_doc, version)
                    return new_doc
            except _VersionRace:
                continue
            except DBAPIError as e:
                if not _lost_race(e):
                    raise
                logger.info("Write on %s %s rolled back by the database, retrying", table.value, key)
                continue
        logger.warning("Write contention on %s %s, giving up", table.value, key)
        raise ConditionFailedError(table.value, key, current)

    # --- EntityStoreProtocol ---

    async def get(self, table: StoreTable, key: dict[str, str]) -> dict | None:
        pk, sk = key_tuple(table, key)

        async def _get() -> dict | None:
            async with self._session_factory() as db:
                doc, _ = await self._read(db, (table.value, pk, sk))
                return doc

        return await self._run("get", _get())

    async def put(
        self, table: StoreTable, doc: dict, condition: Condition | None = None
    ) -> None:
        op = PutOp(table, doc, condition)
        await self._run("put", self._single(op, table, key_of(table, doc)))

    async def update(
        self,
        table: StoreTable,
        key: dict[str, str],
        actions: tuple[UpdateAction, ...],
        condition: Condition | None = None,
    ) -> dict:
        op = UpdateOp(table, key, actions, condition)
        new_doc = await self._run("update", self._single(op, table, key))
        assert new_doc is not None
        return new_doc

    async def delete(
        self, table: StoreTable, key: dict[str, str], condition: Condition | None = None
    ) -> None:
        op = DeleteOp(table, key, condition)
        await self._run("delete", self._single(op, table, key))

    async def query(
        self, table: StoreTable, partition_value: str, filter: Condition | None = None
    ) -> list[dict]:
        async def _query() -> list[dict]:
            async with self._session_factory() as db:
                result = await db.execute(
                    _QUERY_SQL, {"table_name": table.value, "pk": partition_value}
                )
                return [json.loads(r.doc) for r in result.fetchall()]

        docs = await self._run("query", _query())
        return [d for d in docs if condition_holds(filter, d)]

    async def scan(self, table: StoreTable, filter: Condition | None = None) -> list[dict]:
        async def _scan() -> list[dict]:
            async with self._session_factory() as db:
                result = await db.execute(_SCAN_SQL, {"table_name": table.value})
                return [json.loads(r.doc) for r in result.fetchall()]

        docs = await self._run("scan", _scan())
        return [d for d in docs if condition_holds(filter, d)]

    async def transact(self, intent: TransactionIntent) -> None:
        intent.validate()
        await self._run("transact", self._transact(intent))

    async def _transact(self, intent: TransactionIntent) -> None:
        for _ in range(_MAX_VERSION_RACES):
            try:
                async with self._session_factory() as db, db.begin():
                    reads = []
                    failed: list[str] = []
                    for op in intent.ops:
                        row = target_of(op)
                        current, version = await self._read(db, row)
                        if not condition_holds(op.condition, current):
                            failed.append(op.label)
                        reads.append((op, row, current, version))
                    if failed:
                        logger.info(
                            "Transaction cancelled: failed=%s labels=%s", failed, intent.labels
                        )
                        raise TransactionCancelledError(failed)
                    for op, row, current, version in reads:
                        await self._write(db, row, next_document(op, current), version)
                    return
            except _VersionRace:
                continue
            except DBAPIError as e:
                if not _lost_race(e):
                    raise
                logger.info("Transaction rolled back by the database, retrying: labels=%s", intent.labels)
                continue
        logger.warning("Transaction lost %d version races: labels=%s", _MAX_VERSION_RACES, intent.labels)
        raise TransactionCancelledError(["transaction_conflict"])

    async def ping(self) -> None:
        async def _ping() -> None:
            async with self._session_factory() as db:
                await db.execute(text("SELECT 1"))

        await self._run("ping", _ping())

    async def close(self) -> None:
        await dispose_engine()
