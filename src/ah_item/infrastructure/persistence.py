"""ItemRepository — concrete implementation of ItemRepositoryProtocol.

Updates and deletes are always conditional on the caller's condition, with
existence added here so an absent item is never created by an update.
"""

from src.ah_common.enums import StoreTable
from src.ah_item.domain.models import Item
from src.ah_store.domain.expressions import And, AttrExists, AttrNotExists, Condition, UpdateAction
from src.ah_store.domain.repository import EntityStoreProtocol


def _key(seller_id: str, item_id: str) -> dict[str, str]:
    return {"sellerId": seller_id, "id": item_id}


class ItemRepository:
    async def get_item(
        self, store: EntityStoreProtocol, seller_id: str, item_id: str
    ) -> Item | None:
        doc = await store.get(StoreTable.ITEMS, _key(seller_id, item_id))
        return Item.from_doc(doc) if doc is not None else None

    async def list_seller_items(
        self, store: EntityStoreProtocol, seller_id: str
    ) -> list[Item]:
        docs = await store.query(StoreTable.ITEMS, seller_id)
        return [Item.from_doc(d) for d in docs]

    async def scan_items(
        self, store: EntityStoreProtocol, filter: Condition
    ) -> list[Item]:
        docs = await store.scan(StoreTable.ITEMS, filter)
        return [Item.from_doc(d) for d in docs]

    async def insert_item(self, store: EntityStoreProtocol, item: Item) -> None:
        await store.put(StoreTable.ITEMS, item.to_doc(), AttrNotExists("id"))

    async def update_item(
        self,
        store: EntityStoreProtocol,
        seller_id: str,
        item_id: str,
        actions: tuple[UpdateAction, ...],
        condition: Condition,
    ) -> Item:
        doc = await store.update(
            StoreTable.ITEMS,
            _key(seller_id, item_id),
            actions,
            And(AttrExists("id"), condition),
        )
        return Item.from_doc(doc)

    async def delete_item(
        self,
        store: EntityStoreProtocol,
        seller_id: str,
        item_id: str,
        condition: Condition,
    ) -> None:
        await store.delete(
            StoreTable.ITEMS, _key(seller_id, item_id), And(AttrExists("id"), condition)
        )
