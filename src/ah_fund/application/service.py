"""FundApplicationService — add-funds and balance reads.

Bids and settlement move money through the op builders in
ah_fund.domain.operations; this service only handles deposits and reads.
"""

import logging

from src.ah_common.enums import StoreTable, UserRole
from src.ah_common.errors import InvalidAmountError
from src.ah_common.principal import Principal, require_role
from src.ah_fund.application.schemas import BuyerBalanceResponse, SellerBalanceResponse
from src.ah_fund.domain.operations import fund_table_for
from src.ah_fund.domain.repository import FundRepositoryProtocol
from src.ah_fund.infrastructure.persistence import FundRepository
from src.ah_store.domain.repository import EntityStoreProtocol

logger = logging.getLogger(__name__)


class FundApplicationService:
    def __init__(self, repo: FundRepositoryProtocol | None = None) -> None:
        self._repo: FundRepositoryProtocol = repo or FundRepository()

    async def add_funds(
        self, store: EntityStoreProtocol, principal: Principal, amount: int
    ) -> BuyerBalanceResponse:
        buyer_id = require_role(principal, UserRole.BUYER)
        if amount <= 0:
            raise InvalidAmountError(amount)
        funds = await self._repo.add_buyer_funds(store, buyer_id, amount)
        logger.info("Buyer %s added %d, fund=%d", buyer_id, amount, funds.fund)
        return BuyerBalanceResponse.from_domain(funds)

    async def get_balance(
        self, store: EntityStoreProtocol, principal: Principal
    ) -> BuyerBalanceResponse | SellerBalanceResponse:
        table = fund_table_for(principal.role)
        if table is StoreTable.BUYERS:
            buyer = await self._repo.get_buyer_funds(store, principal.user_id)
            return BuyerBalanceResponse.from_domain(buyer)
        seller = await self._repo.get_seller_funds(store, principal.user_id)
        return SellerBalanceResponse.from_domain(seller)
