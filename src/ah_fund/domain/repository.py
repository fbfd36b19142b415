"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from src.ah_fund.domain.models import BuyerFunds, SellerFunds
from src.ah_store.domain.repository import EntityStoreProtocol


class FundRepositoryProtocol(Protocol):
    async def get_buyer_funds(
        self, store: EntityStoreProtocol, buyer_id: str
    ) -> BuyerFunds: ...

    async def get_seller_funds(
        self, store: EntityStoreProtocol, seller_id: str
    ) -> SellerFunds: ...

    async def add_buyer_funds(
        self, store: EntityStoreProtocol, buyer_id: str, amount: int
    ) -> BuyerFunds: ...
