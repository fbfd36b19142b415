"""EntityStore Protocol — the only way the engine touches persistent state.

Unit tests inject InMemoryEntityStore (or a mock) that conforms to this Protocol.
Infrastructure layer provides the PostgreSQL implementation.

Error contract:
  - ConditionFailedError: single-item condition did not hold, nothing written.
  - TransactionCancelledError: at least one participant failed, nothing written.
  - StoreUnavailableError: transport failure or timeout, outcome UNKNOWN.
"""

from typing import Protocol

from src.ah_common.enums import StoreTable
from src.ah_store.domain.expressions import Condition, TransactionIntent, UpdateAction


class EntityStoreProtocol(Protocol):
    async def get(self, table: StoreTable, key: dict[str, str]) -> dict | None: ...

    async def put(
        self, table: StoreTable, doc: dict, condition: Condition | None = None
    ) -> None: ...

    async def update(
        self,
        table: StoreTable,
        key: dict[str, str],
        actions: tuple[UpdateAction, ...],
        condition: Condition | None = None,
    ) -> dict: ...

    async def delete(
        self, table: StoreTable, key: dict[str, str], condition: Condition | None = None
    ) -> None: ...

    async def query(
        self, table: StoreTable, partition_value: str, filter: Condition | None = None
    ) -> list[dict]: ...

    async def scan(self, table: StoreTable, filter: Condition | None = None) -> list[dict]: ...

    async def transact(self, intent: TransactionIntent) -> None: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...
