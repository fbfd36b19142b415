"""PurchaseRepository — reads of the purchases table.

Purchases are written only by the fulfill transaction.
"""

from src.ah_common.enums import StoreTable
from src.ah_settlement.domain.models import Purchase
from src.ah_store.domain.repository import EntityStoreProtocol


class PurchaseRepository:
    async def list_purchases(
        self, store: EntityStoreProtocol, buyer_id: str
    ) -> list[Purchase]:
        docs = await store.query(StoreTable.PURCHASES, buyer_id)
        return [Purchase.from_doc(d) for d in docs]
