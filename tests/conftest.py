"""Shared test fixtures.

Settings are read at import time, so the environment is prepared before any
application module is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("STORE_BACKEND", "memory")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.ah_common.enums import UserRole  # noqa: E402
from src.ah_common.principal import Principal  # noqa: E402
from src.ah_store.infrastructure.memory import InMemoryEntityStore  # noqa: E402
from src.ah_store.infrastructure.provider import get_entity_store  # noqa: E402
from src.main import app  # noqa: E402
from tests.helpers import FakeClock, SequentialIds  # noqa: E402


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def seller() -> Principal:
    return Principal(user_id="seller-1", role=UserRole.SELLER)


@pytest.fixture
def buyer_a() -> Principal:
    return Principal(user_id="buyer-a", role=UserRole.BUYER)


@pytest.fixture
def buyer_b() -> Principal:
    return Principal(user_id="buyer-b", role=UserRole.BUYER)


@pytest.fixture
def admin() -> Principal:
    return Principal(user_id="admin-1", role=UserRole.ADMIN)


@pytest.fixture
async def app_store() -> AsyncGenerator[InMemoryEntityStore, None]:
    """Fresh in-memory store wired into the FastAPI app for one test."""
    mem = InMemoryEntityStore()
    app.dependency_overrides[get_entity_store] = lambda: mem
    yield mem
    app.dependency_overrides.pop(get_entity_store, None)


@pytest.fixture
async def client(app_store: InMemoryEntityStore) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
