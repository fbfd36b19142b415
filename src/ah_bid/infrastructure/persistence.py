"""BidRepository — reads of the bids table.

Bids are only written inside place-bid and fulfill transactions (see
ah_bid.domain.operations), never through this repository.
"""

from src.ah_bid.domain.models import Bid
from src.ah_common.enums import StoreTable
from src.ah_store.domain.expressions import AttrEq
from src.ah_store.domain.repository import EntityStoreProtocol


class BidRepository:
    async def get_bid(
        self, store: EntityStoreProtocol, buyer_id: str, bid_id: str
    ) -> Bid | None:
        doc = await store.get(StoreTable.BIDS, {"buyerId": buyer_id, "id": bid_id})
        return Bid.from_doc(doc) if doc is not None else None

    async def list_bids(
        self, store: EntityStoreProtocol, buyer_id: str, active_only: bool
    ) -> list[Bid]:
        docs = await store.query(
            StoreTable.BIDS, buyer_id, AttrEq("isActive", True) if active_only else None
        )
        return [Bid.from_doc(d) for d in docs]
