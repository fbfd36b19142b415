"""Integration-test fixtures.

Pre-condition: a PostgreSQL reachable at DATABASE_URL and `alembic upgrade head`.
Skipped unless AH_INTEGRATION=1.

All integration tests share a single event loop so that the lazily created
SQLAlchemy async engine pool stays valid across the session.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import text

from src.ah_common.database import get_session_factory
from src.ah_store.infrastructure.postgres import PostgresEntityStore


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("AH_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set AH_INTEGRATION=1 to run against PostgreSQL")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def pg_store() -> AsyncGenerator[PostgresEntityStore, None]:
    store = PostgresEntityStore()
    yield store
    await store.close()


@pytest_asyncio.fixture(loop_scope="session")
async def store(pg_store: PostgresEntityStore) -> PostgresEntityStore:  # type: ignore[override]
    """The shared store, emptied before each test."""
    async with get_session_factory()() as db, db.begin():
        await db.execute(text("DELETE FROM entities"))
    return pg_store
