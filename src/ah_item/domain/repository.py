"""Repository Protocol — dependency inversion for testability.

Conditional writes raise ConditionFailedError unchanged; the application
service turns it into a business error from the document it carries.
"""

from typing import Protocol

from src.ah_item.domain.models import Item
from src.ah_store.domain.expressions import Condition, UpdateAction
from src.ah_store.domain.repository import EntityStoreProtocol


class ItemRepositoryProtocol(Protocol):
    async def get_item(
        self, store: EntityStoreProtocol, seller_id: str, item_id: str
    ) -> Item | None: ...

    async def list_seller_items(
        self, store: EntityStoreProtocol, seller_id: str
    ) -> list[Item]: ...

    async def scan_items(
        self, store: EntityStoreProtocol, filter: Condition
    ) -> list[Item]: ...

    async def insert_item(self, store: EntityStoreProtocol, item: Item) -> None: ...

    async def update_item(
        self,
        store: EntityStoreProtocol,
        seller_id: str,
        item_id: str,
        actions: tuple[UpdateAction, ...],
        condition: Condition,
    ) -> Item: ...

    async def delete_item(
        self,
        store: EntityStoreProtocol,
        seller_id: str,
        item_id: str,
        condition: Condition,
    ) -> None: ...
