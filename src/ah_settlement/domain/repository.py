"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from src.ah_settlement.domain.models import Purchase
from src.ah_store.domain.repository import EntityStoreProtocol


class PurchaseRepositoryProtocol(Protocol):
    async def list_purchases(
        self, store: EntityStoreProtocol, buyer_id: str
    ) -> list[Purchase]: ...
