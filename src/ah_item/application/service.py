"""ItemApplicationService — item lifecycle for sellers plus public listings.

Every mutation is one conditional write whose condition re-states the source
state (see ah_item.domain.transitions). When the store rejects it, the
rejected document tells us why:
    absent                        -> ItemNotFoundError
    state not a source state      -> InvalidStateError
    right state, other guard lost -> PreconditionFailedError
"""

import logging
from collections.abc import Callable

from config.settings import settings
from src.ah_common.datetime_utils import now_ms
from src.ah_common.enums import ItemState, UserRole
from src.ah_common.errors import (
    AppError,
    BadRequestError,
    ConditionFailedError,
    EmptyUpdateError,
    InvalidStateError,
    ItemNotFoundError,
    PreconditionFailedError,
)
from src.ah_common.id_generator import generate_id
from src.ah_common.principal import Principal, require_role
from src.ah_item.application.schemas import (
    CreateItemRequest,
    ExpirationStatus,
    ItemResponse,
    UpdateItemRequest,
)
from src.ah_item.domain import transitions
from src.ah_item.domain.models import Item
from src.ah_item.domain.repository import ItemRepositoryProtocol
from src.ah_item.infrastructure.persistence import ItemRepository
from src.ah_store.domain.expressions import And, AttrEq, AttrExists, AttrGte
from src.ah_store.domain.repository import EntityStoreProtocol

logger = logging.getLogger(__name__)

_MS_PER_HOUR = 3600 * 1000


class ItemApplicationService:
    def __init__(
        self,
        repo: ItemRepositoryProtocol | None = None,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self._repo: ItemRepositoryProtocol = repo or ItemRepository()
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Seller operations
    # ------------------------------------------------------------------

    async def create_item(
        self, store: EntityStoreProtocol, principal: Principal, req: CreateItemRequest
    ) -> ItemResponse:
        seller_id = require_role(principal, UserRole.SELLER)
        if not req.name.strip():
            raise BadRequestError("Item name must not be empty")
        if req.init_price < 1:
            raise BadRequestError("initPrice must be at least 1")
        if req.auction_length <= 0:
            raise BadRequestError("auctionLength must be positive")

        now = self._clock()
        item = Item(
            seller_id=seller_id,
            id=self._id_factory(),
            create_at=now,
            name=req.name,
            description=req.description,
            init_price=req.init_price,
            auction_length=req.auction_length,
            images=list(req.images),
        )
        await self._repo.insert_item(store, item)
        logger.info("Item created: %s/%s", seller_id, item.id)
        return ItemResponse.from_domain(item, now)

    async def get_seller_item(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> ItemResponse:
        seller_id = require_role(principal, UserRole.SELLER)
        item = await self._load(store, seller_id, item_id)
        return ItemResponse.from_domain(item, self._clock())

    async def list_seller_items(
        self, store: EntityStoreProtocol, principal: Principal
    ) -> list[ItemResponse]:
        seller_id = require_role(principal, UserRole.SELLER)
        items = await self._repo.list_seller_items(store, seller_id)
        now = self._clock()
        return [ItemResponse.from_domain(i, now) for i in items]

    async def update_item(
        self,
        store: EntityStoreProtocol,
        principal: Principal,
        item_id: str,
        req: UpdateItemRequest,
    ) -> ItemResponse:
        seller_id = require_role(principal, UserRole.SELLER)
        changes = req.changes()
        if not changes:
            raise EmptyUpdateError()
        if "name" in changes and not changes["name"].strip():
            raise BadRequestError("Item name must not be empty")
        return await self._transition(store, seller_id, item_id, transitions.edit(changes))

    async def delete_item(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> None:
        seller_id = require_role(principal, UserRole.SELLER)
        try:
            await self._repo.delete_item(
                store, seller_id, item_id, transitions.delete_condition()
            )
        except ConditionFailedError as e:
            raise self._classify(e, item_id, "delete") from None
        logger.info("Item deleted: %s/%s", seller_id, item_id)

    async def publish_item(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> ItemResponse:
        seller_id = require_role(principal, UserRole.SELLER)
        item = await self._load(store, seller_id, item_id)
        if item.state is not ItemState.INACTIVE:
            raise InvalidStateError(item_id, item.state.value, "publish")
        return await self._transition(
            store, seller_id, item_id, transitions.publish(item, self._clock())
        )

    async def unpublish_item(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> ItemResponse:
        seller_id = require_role(principal, UserRole.SELLER)
        return await self._transition(store, seller_id, item_id, transitions.unpublish())

    async def archive_item(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> ItemResponse:
        """Archive without settlement; items holding a bid must be fulfilled instead."""
        seller_id = require_role(principal, UserRole.SELLER)
        return await self._transition(
            store, seller_id, item_id, transitions.archive(self._clock())
        )

    async def mark_failed(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> ItemResponse:
        seller_id = require_role(principal, UserRole.SELLER)
        return await self._transition(store, seller_id, item_id, transitions.mark_failed())

    async def check_expiration(
        self, store: EntityStoreProtocol, principal: Principal, item_id: str
    ) -> ExpirationStatus:
        seller_id = require_role(principal, UserRole.SELLER)
        item = await self._load(store, seller_id, item_id)
        now = self._clock()
        effective = item.effective_state(now)
        return ExpirationStatus(
            seller_id=item.seller_id,
            id=item.id,
            state=item.state.value,
            effective_state=effective.value,
            window_elapsed=item.window_elapsed(now),
            ready_to_fulfill=effective is ItemState.COMPLETED and item.current_bid is not None,
            end_date=item.end_date,
            checked_at=now,
        )

    # ------------------------------------------------------------------
    # Public listings
    # ------------------------------------------------------------------

    async def get_item(
        self, store: EntityStoreProtocol, seller_id: str, item_id: str
    ) -> ItemResponse:
        item = await self._load(store, seller_id, item_id)
        return ItemResponse.from_domain(item, self._clock())

    async def list_active_items(self, store: EntityStoreProtocol) -> list[ItemResponse]:
        now = self._clock()
        items = await self._repo.scan_items(
            store, And(AttrEq("state", ItemState.ACTIVE.value), AttrGte("endDate", now))
        )
        items.sort(key=lambda i: (i.end_date or 0, i.id))
        return [ItemResponse.from_domain(i, now) for i in items]

    async def list_recently_sold(
        self, store: EntityStoreProtocol, limit: int | None = None
    ) -> list[ItemResponse]:
        now = self._clock()
        since = now - settings.RECENTLY_SOLD_WINDOW_HOURS * _MS_PER_HOUR
        items = await self._repo.scan_items(
            store,
            And(
                AttrEq("state", ItemState.ARCHIVED.value),
                AttrExists("soldBid"),
                AttrGte("settledAt", since),
            ),
        )
        items.sort(key=lambda i: i.settled_at or 0, reverse=True)
        return [ItemResponse.from_domain(i, now) for i in items[: limit or settings.RECENTLY_SOLD_LIMIT]]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, store: EntityStoreProtocol, seller_id: str, item_id: str) -> Item:
        item = await self._repo.get_item(store, seller_id, item_id)
        if item is None:
            raise ItemNotFoundError(seller_id, item_id)
        return item

    async def _transition(
        self,
        store: EntityStoreProtocol,
        seller_id: str,
        item_id: str,
        transition: transitions.Transition,
    ) -> ItemResponse:
        try:
            item = await self._repo.update_item(
                store, seller_id, item_id, transition.actions, transition.condition
            )
        except ConditionFailedError as e:
            logger.info("Item %s/%s: %s rejected", seller_id, item_id, transition.name)
            raise self._classify(e, item_id, transition.name) from None
        logger.info(
            "Item %s/%s: %s -> %s", seller_id, item_id, transition.name, item.state.value
        )
        return ItemResponse.from_domain(item, self._clock())

    def _classify(self, exc: ConditionFailedError, item_id: str, action: str) -> AppError:
        if exc.current is None:
            seller_id = exc.key.get("sellerId", "")
            return ItemNotFoundError(seller_id, item_id)
        item = Item.from_doc(exc.current)
        if item.state not in transitions.allowed_from(action):
            return InvalidStateError(item_id, item.state.value, action)
        if item.has_bids:
            return PreconditionFailedError(f"item {item_id} has bids")
        if action == "archive" and item.state is ItemState.ACTIVE:
            return PreconditionFailedError(f"auction of item {item_id} is still running")
        return PreconditionFailedError(f"item {item_id} changed concurrently, refresh and retry")
