"""BidApplicationService — place-bid protocol and bid reads.

place_bid submits one TransactionIntent:

    bid               Put new Bid                      WHERE id not exists
    buyer_fund        fund -= amount, hold += amount   WHERE fund >= amount
    item              currentBid = new, pastBids += new
                                                       WHERE state = ACTIVE AND endDate >= now
                                                         AND currentBid == observed prior
    prior_bid         isActive = false                 WHERE isActive = true
    prior_buyer_fund  release prior hold               (RELEASE_SUPERSEDED_HOLDS only)

All five land or none do. The transaction is never retried here: a
cancelled intent is mapped to a business error and the buyer decides.
"""

import logging
from collections.abc import Callable

from config.settings import settings
from src.ah_bid.application.schemas import BidResponse
from src.ah_bid.domain.models import Bid
from src.ah_bid.domain.operations import deactivate_bid, put_new_bid
from src.ah_bid.domain.repository import BidRepositoryProtocol
from src.ah_bid.infrastructure.persistence import BidRepository
from src.ah_common.datetime_utils import now_ms
from src.ah_common.enums import ItemState, StoreTable, UserRole
from src.ah_common.errors import (
    AppError,
    AuctionClosedError,
    BidNotFoundError,
    BidTooLowError,
    InsufficientFundsError,
    InternalError,
    InvalidAmountError,
    ItemNotFoundError,
    PreconditionFailedError,
    StaleBidError,
    TransactionCancelledError,
)
from src.ah_common.id_generator import generate_id
from src.ah_common.principal import Principal, require_role
from src.ah_fund.domain.operations import hold_funds, raise_hold, release_hold
from src.ah_fund.domain.repository import FundRepositoryProtocol
from src.ah_fund.infrastructure.persistence import FundRepository
from src.ah_item.domain import transitions
from src.ah_item.domain.models import Item
from src.ah_item.domain.repository import ItemRepositoryProtocol
from src.ah_item.infrastructure.persistence import ItemRepository
from src.ah_store.domain.expressions import TransactionIntent, UpdateOp
from src.ah_store.domain.repository import EntityStoreProtocol

logger = logging.getLogger(__name__)


class BidApplicationService:
    def __init__(
        self,
        repo: BidRepositoryProtocol | None = None,
        item_repo: ItemRepositoryProtocol | None = None,
        fund_repo: FundRepositoryProtocol | None = None,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = generate_id,
        release_superseded_holds: bool | None = None,
    ) -> None:
        self._repo: BidRepositoryProtocol = repo or BidRepository()
        self._items: ItemRepositoryProtocol = item_repo or ItemRepository()
        self._funds: FundRepositoryProtocol = fund_repo or FundRepository()
        self._clock = clock
        self._id_factory = id_factory
        self._release_superseded = (
            settings.RELEASE_SUPERSEDED_HOLDS
            if release_superseded_holds is None
            else release_superseded_holds
        )

    async def place_bid(
        self,
        store: EntityStoreProtocol,
        principal: Principal,
        seller_id: str,
        item_id: str,
        amount: int,
    ) -> BidResponse:
        buyer_id = require_role(principal, UserRole.BUYER)
        if amount <= 0:
            raise InvalidAmountError(amount)

        item = await self._items.get_item(store, seller_id, item_id)
        if item is None:
            raise ItemNotFoundError(seller_id, item_id)
        now = self._clock()
        if item.effective_state(now) is not ItemState.ACTIVE:
            raise AuctionClosedError(item_id)

        prior: Bid | None = None
        if item.current_bid is not None:
            prior = await self._repo.get_bid(
                store, item.current_bid.buyer_id, item.current_bid.id
            )
            if prior is None:
                raise InternalError(f"Current bid of item {item_id} is missing")

        minimum = item.init_price if prior is None else prior.amount + 1
        if amount < minimum:
            raise BidTooLowError(amount, minimum)

        bid = Bid(
            buyer_id=buyer_id,
            id=self._id_factory(),
            item=item.ref,
            amount=amount,
            create_at=now,
        )
        intent = self._build_intent(item, bid, prior, now)
        try:
            await store.transact(intent)
        except TransactionCancelledError as e:
            raise await self._classify(store, e, item, bid) from None

        logger.info(
            "Bid placed: %s on %s/%s amount=%d", bid.id, seller_id, item_id, amount
        )
        if prior is not None and not self._release_superseded:
            logger.warning(
                "Superseded bid %s keeps %d on hold for buyer %s",
                prior.id,
                prior.amount,
                prior.buyer_id,
            )
        return BidResponse.from_domain(bid)

    def _build_intent(
        self, item: Item, bid: Bid, prior: Bid | None, now: int
    ) -> TransactionIntent:
        intent = TransactionIntent()
        intent.add(put_new_bid(bid, label="bid"))

        if prior is not None and prior.buyer_id == bid.buyer_id and self._release_superseded:
            # Same fund record on both sides: one op grows the hold
            intent.add(raise_hold(bid.buyer_id, prior.amount, bid.amount, label="buyer_fund"))
        else:
            intent.add(hold_funds(bid.buyer_id, bid.amount, label="buyer_fund"))

        intent.add(
            UpdateOp(
                StoreTable.ITEMS,
                item.ref.to_doc(),
                transitions.record_bid(bid.ref),
                condition=transitions.accepting_bid(now, item.current_bid),
                label="item",
            )
        )
        if prior is not None:
            intent.add(deactivate_bid(prior.ref, label="prior_bid"))
            if self._release_superseded and prior.buyer_id != bid.buyer_id:
                intent.add(
                    release_hold(prior.buyer_id, prior.amount, label="prior_buyer_fund")
                )
        return intent

    async def _classify(
        self,
        store: EntityStoreProtocol,
        exc: TransactionCancelledError,
        item: Item,
        bid: Bid,
    ) -> AppError:
        failed = set(exc.failed)
        logger.info("Bid on %s/%s cancelled: %s", item.seller_id, item.id, exc.failed)
        if "item" in failed:
            current = await self._items.get_item(store, item.seller_id, item.id)
            if current is None:
                return ItemNotFoundError(item.seller_id, item.id)
            if current.effective_state(self._clock()) is not ItemState.ACTIVE:
                return AuctionClosedError(item.id)
            return StaleBidError(item.id)
        if "buyer_fund" in failed:
            funds = await self._funds.get_buyer_funds(store, bid.buyer_id)
            return InsufficientFundsError(bid.amount, funds.fund)
        if "prior_bid" in failed or "transaction_conflict" in failed:
            return StaleBidError(item.id)
        return PreconditionFailedError(
            f"bid on item {item.id} rejected: {', '.join(exc.failed)}"
        )

    async def list_active_bids(
        self, store: EntityStoreProtocol, principal: Principal
    ) -> list[BidResponse]:
        buyer_id = require_role(principal, UserRole.BUYER)
        bids = await self._repo.list_bids(store, buyer_id, active_only=True)
        return [BidResponse.from_domain(b) for b in bids]

    async def list_bids(
        self, store: EntityStoreProtocol, principal: Principal
    ) -> list[BidResponse]:
        buyer_id = require_role(principal, UserRole.BUYER)
        bids = await self._repo.list_bids(store, buyer_id, active_only=False)
        return [BidResponse.from_domain(b) for b in bids]

    async def get_bid(
        self, store: EntityStoreProtocol, principal: Principal, bid_id: str
    ) -> BidResponse:
        buyer_id = require_role(principal, UserRole.BUYER)
        bid = await self._repo.get_bid(store, buyer_id, bid_id)
        if bid is None:
            raise BidNotFoundError(buyer_id, bid_id)
        return BidResponse.from_domain(bid)
