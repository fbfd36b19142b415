"""PostgresEntityStore against a real database (requires running PG).

Pre-condition: alembic upgrade head, AH_INTEGRATION=1.
"""

import asyncio

import pytest

from src.ah_bid.application.service import BidApplicationService
from src.ah_common.enums import StoreTable, UserRole
from src.ah_common.errors import AppError, ConditionFailedError, TransactionCancelledError
from src.ah_common.principal import Principal
from src.ah_fund.application.service import FundApplicationService
from src.ah_fund.domain.operations import hold_funds
from src.ah_item.application.schemas import CreateItemRequest
from src.ah_item.application.service import ItemApplicationService
from src.ah_store.domain.expressions import (
    AddTo,
    AttrEq,
    AttrNotExists,
    PutOp,
    SetAttr,
    TransactionIntent,
)
from src.ah_store.infrastructure.postgres import PostgresEntityStore

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]

SELLER = Principal(user_id="seller-pg", role=UserRole.SELLER)


class TestSingleWrites:
    async def test_put_get_roundtrip(self, store: PostgresEntityStore) -> None:
        doc = {"sellerId": "s1", "id": "i1", "name": "Lamp", "pastBids": []}
        await store.put(StoreTable.ITEMS, doc, AttrNotExists("id"))
        assert await store.get(StoreTable.ITEMS, {"sellerId": "s1", "id": "i1"}) == doc

    async def test_conditional_put_rejects_existing(self, store: PostgresEntityStore) -> None:
        await store.put(StoreTable.BUYERS, {"id": "b1", "fund": 1})
        with pytest.raises(ConditionFailedError) as exc_info:
            await store.put(StoreTable.BUYERS, {"id": "b1", "fund": 2}, AttrNotExists("id"))
        assert exc_info.value.current == {"id": "b1", "fund": 1}

    async def test_update_creates_and_increments(self, store: PostgresEntityStore) -> None:
        await store.update(StoreTable.SELLERS, {"id": "s1"}, (AddTo("fund", 10),))
        doc = await store.update(StoreTable.SELLERS, {"id": "s1"}, (AddTo("fund", 5),))
        assert doc == {"id": "s1", "fund": 15}

    async def test_query_is_partition_scoped_and_ordered(self, store: PostgresEntityStore) -> None:
        for item_id in ("b", "a"):
            await store.put(StoreTable.BIDS, {"buyerId": "x", "id": item_id, "isActive": True})
        await store.put(StoreTable.BIDS, {"buyerId": "y", "id": "c", "isActive": True})
        docs = await store.query(StoreTable.BIDS, "x", AttrEq("isActive", True))
        assert [d["id"] for d in docs] == ["a", "b"]


class TestTransact:
    async def test_failed_participant_rolls_back_all(self, store: PostgresEntityStore) -> None:
        await store.put(StoreTable.BUYERS, {"id": "b1", "fund": 50, "fundOnHold": 0})
        intent = TransactionIntent([
            PutOp(StoreTable.BIDS, {"buyerId": "b1", "id": "x1"}, AttrNotExists("id"), label="bid"),
            hold_funds("b1", 100),
        ])
        with pytest.raises(TransactionCancelledError) as exc_info:
            await store.transact(intent)

        assert exc_info.value.failed == ["buyer_fund"]
        assert await store.get(StoreTable.BIDS, {"buyerId": "b1", "id": "x1"}) is None
        assert await store.get(StoreTable.BUYERS, {"id": "b1"}) == {
            "id": "b1", "fund": 50, "fundOnHold": 0,
        }

    async def test_concurrent_updates_keep_every_increment(self, store: PostgresEntityStore) -> None:
        await store.put(StoreTable.SELLERS, {"id": "s1", "fund": 0})
        await asyncio.gather(*(
            store.update(StoreTable.SELLERS, {"id": "s1"}, (AddTo("fund", 1),)) for _ in range(4)
        ))
        doc = await store.get(StoreTable.SELLERS, {"id": "s1"})
        assert doc is not None and doc["fund"] == 4

    async def test_set_attr_persists(self, store: PostgresEntityStore) -> None:
        await store.put(StoreTable.BIDS, {"buyerId": "b1", "id": "x1", "isActive": True})
        await store.update(
            StoreTable.BIDS, {"buyerId": "b1", "id": "x1"}, (SetAttr("isActive", False),)
        )
        doc = await store.get(StoreTable.BIDS, {"buyerId": "b1", "id": "x1"})
        assert doc is not None and doc["isActive"] is False


class TestRacingBids:
    async def test_one_of_two_equal_bids_wins(self, store: PostgresEntityStore) -> None:
        items = ItemApplicationService()
        bids = BidApplicationService(release_superseded_holds=False)
        funds = FundApplicationService()
        created = await items.create_item(
            store, SELLER, CreateItemRequest(name="Lamp", init_price=100, auction_length=60_000)
        )
        await items.publish_item(store, SELLER, created.id)
        racers = [Principal(user_id=f"racer-{n}", role=UserRole.BUYER) for n in range(2)]
        for racer in racers:
            await funds.add_funds(store, racer, 500)

        results = await asyncio.gather(
            *(bids.place_bid(store, r, SELLER.user_id, created.id, 120) for r in racers),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, AppError)]
        assert len(winners) == 1
        assert len(losers) == 1
        item = await items.get_item(store, SELLER.user_id, created.id)
        assert len(item.past_bids) == 1
        total_hold = 0
        for racer in racers:
            doc = await store.get(StoreTable.BUYERS, {"id": racer.user_id})
            assert doc is not None
            total_hold += doc["fundOnHold"]
        assert total_hold == 120
