"""FundRepository — concrete implementation of FundRepositoryProtocol.

Balances are only ever changed with AddTo actions, never read-modify-write,
so concurrent deposits and bids cannot lose an update.
"""

from src.ah_common.enums import StoreTable
from src.ah_fund.domain.models import BuyerFunds, SellerFunds
from src.ah_store.domain.expressions import AddTo
from src.ah_store.domain.repository import EntityStoreProtocol


class FundRepository:
    async def get_buyer_funds(
        self, store: EntityStoreProtocol, buyer_id: str
    ) -> BuyerFunds:
        doc = await store.get(StoreTable.BUYERS, {"id": buyer_id})
        return BuyerFunds.from_doc(buyer_id, doc)

    async def get_seller_funds(
        self, store: EntityStoreProtocol, seller_id: str
    ) -> SellerFunds:
        doc = await store.get(StoreTable.SELLERS, {"id": seller_id})
        return SellerFunds.from_doc(seller_id, doc)

    async def add_buyer_funds(
        self, store: EntityStoreProtocol, buyer_id: str, amount: int
    ) -> BuyerFunds:
        # fundOnHold += 0 materialises the attribute on first deposit
        doc = await store.update(
            StoreTable.BUYERS,
            {"id": buyer_id},
            (AddTo("fund", amount), AddTo("fundOnHold", 0)),
        )
        return BuyerFunds.from_doc(buyer_id, doc)
