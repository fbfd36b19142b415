"""SettlementApplicationService — fulfill protocol and purchase reads.

fulfill submits one TransactionIntent:

    seller_fund   fund += income
    buyer_fund    fundOnHold -= amount                 WHERE fundOnHold >= amount
    purchase      Put Purchase                         WHERE id not exists
    item          soldBid/soldTime/soldPrice, ARCHIVED, currentBid removed
                                                       WHERE state = ACTIVE AND currentBid == winner
    winning_bid   isActive = false                     WHERE isActive = true

A replay of a committed fulfill finds the item ARCHIVED and fails on the item
guard, so the seller can never be credited twice.
"""

import logging
from collections.abc import Callable

from config.settings import settings
from src.ah_bid.domain.operations import deactivate_bid
from src.ah_bid.domain.repository import BidRepositoryProtocol
from src.ah_bid.infrastructure.persistence import BidRepository
from src.ah_common.datetime_utils import now_ms
from src.ah_common.enums import ItemState, StoreTable, UserRole
from src.ah_common.errors import (
    AlreadySettledError,
    InternalError,
    ItemNotFoundError,
    NotReadyToFulfillError,
    SettlementConflictError,
    TransactionCancelledError,
)
from src.ah_common.id_generator import generate_id
from src.ah_common.money import cents_to_display, platform_fee, seller_income
from src.ah_common.principal import Principal, require_role
from src.ah_fund.domain.operations import credit_seller, settle_hold
from src.ah_item.domain import transitions
from src.ah_item.domain.repository import ItemRepositoryProtocol
from src.ah_item.infrastructure.persistence import ItemRepository
from src.ah_settlement.application.schemas import FulfillResponse, PurchaseResponse
from src.ah_settlement.domain.models import Purchase
from src.ah_settlement.domain.operations import put_new_purchase
from src.ah_settlement.domain.repository import PurchaseRepositoryProtocol
from src.ah_settlement.infrastructure.persistence import PurchaseRepository
from src.ah_store.domain.expressions import TransactionIntent, UpdateOp
from src.ah_store.domain.repository import EntityStoreProtocol

logger = logging.getLogger(__name__)


class SettlementApplicationService:
    def __init__(
        self,
        repo: PurchaseRepositoryProtocol | None = None,
        item_repo: ItemRepositoryProtocol | None = None,
        bid_repo: BidRepositoryProtocol | None = None,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = generate_id,
        fee_bps: int | None = None,
    ) -> None:
        self._repo: PurchaseRepositoryProtocol = repo or PurchaseRepository()
        self._items: ItemRepositoryProtocol = item_repo or ItemRepository()
        self._bids: BidRepositoryProtocol = bid_repo or BidRepository()
        self._clock = clock
        self._id_factory = id_factory
        self._fee_bps = settings.PLATFORM_FEE_BPS if fee_bps is None else fee_bps

    async def fulfill(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> FulfillResponse:
        seller_id = require_role(principal, UserRole.SELLER)
        item = await self._items.get_item(store, seller_id, item_id)
        if item is None:
            raise ItemNotFoundError(seller_id, item_id)
        if item.state is ItemState.ARCHIVED and item.sold_bid is not None:
            raise AlreadySettledError(item_id)

        now = self._clock()
        effective = item.effective_state(now)
        if effective is not ItemState.COMPLETED:
            reason = (
                "auction still running"
                if effective is ItemState.ACTIVE
                else f"state is {effective.value}"
            )
            raise NotReadyToFulfillError(item_id, reason)
        if item.current_bid is None:
            raise NotReadyToFulfillError(item_id, "no winning bid")

        winner = await self._bids.get_bid(
            store, item.current_bid.buyer_id, item.current_bid.id
        )
        if winner is None:
            raise InternalError(f"Winning bid of item {item_id} is missing")

        income = seller_income(winner.amount, self._fee_bps)
        purchase = Purchase(
            buyer_id=winner.buyer_id,
            id=self._id_factory(),
            item=item.ref,
            bid=winner.ref,
            price=winner.amount,
            sold_time=winner.create_at,
            create_at=now,
        )

        intent = TransactionIntent()
        intent.add(credit_seller(seller_id, income, label="seller_fund"))
        intent.add(settle_hold(winner.buyer_id, winner.amount, label="buyer_fund"))
        intent.add(put_new_purchase(purchase, label="purchase"))
        intent.add(
            UpdateOp(
                StoreTable.ITEMS,
                item.ref.to_doc(),
                transitions.settle_actions(
                    winner.ref, purchase.sold_time, winner.amount, now
                ),
                condition=transitions.settle_condition(winner.ref),
                label="item",
            )
        )
        intent.add(deactivate_bid(winner.ref, label="winning_bid"))

        try:
            await store.transact(intent)
        except TransactionCancelledError as e:
            current = await self._items.get_item(store, seller_id, item_id)
            if current is not None and current.sold_bid is not None:
                logger.info("Fulfill replay on settled item %s/%s", seller_id, item_id)
                raise AlreadySettledError(item_id) from None
            logger.warning(
                "Fulfill of %s/%s cancelled: failed=%s", seller_id, item_id, e.failed
            )
            raise SettlementConflictError(item_id, e.failed) from None

        logger.info(
            "Item settled: %s/%s bid=%s price=%d seller_income=%d",
            seller_id,
            item_id,
            winner.id,
            winner.amount,
            income,
        )
        fee = platform_fee(winner.amount, self._fee_bps)
        return FulfillResponse(
            item_id=item_id,
            state=ItemState.ARCHIVED.value,
            purchase=PurchaseResponse.from_domain(purchase),
            seller_income=income,
            seller_income_display=cents_to_display(income),
            platform_fee=fee,
            platform_fee_display=cents_to_display(fee),
        )

    async def list_purchases(
        self, store: EntityStoreProtocol, principal: Principal
    ) -> list[PurchaseResponse]:
        buyer_id = require_role(principal, UserRole.BUYER)
        purchases = await self._repo.list_purchases(store, buyer_id)
        return [PurchaseResponse.from_domain(p) for p in purchases]
