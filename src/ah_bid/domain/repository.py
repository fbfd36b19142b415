"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from src.ah_bid.domain.models import Bid
from src.ah_store.domain.repository import EntityStoreProtocol


class BidRepositoryProtocol(Protocol):
    async def get_bid(
        self, store: EntityStoreProtocol, buyer_id: str, bid_id: str
    ) -> Bid | None: ...

    async def list_bids(
        self, store: EntityStoreProtocol, buyer_id: str, active_only: bool
    ) -> list[Bid]: ...
