"""Tests for ah_fund: op builders, add-funds and balance reads."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.ah_common.enums import StoreTable, UserRole
from src.ah_common.errors import ForbiddenError, InvalidAmountError, TransactionCancelledError
from src.ah_common.principal import Principal
from src.ah_fund.application.schemas import BuyerBalanceResponse, SellerBalanceResponse
from src.ah_fund.application.service import FundApplicationService
from src.ah_fund.domain.models import BuyerFunds
from src.ah_fund.domain.operations import (
    credit_seller,
    fund_table_for,
    hold_funds,
    raise_hold,
    release_hold,
    settle_hold,
)
from src.ah_store.domain.expressions import TransactionIntent
from src.ah_store.infrastructure.memory import InMemoryEntityStore


class TestFundTableFor:
    def test_buyer_and_seller(self) -> None:
        assert fund_table_for(UserRole.BUYER) is StoreTable.BUYERS
        assert fund_table_for(UserRole.SELLER) is StoreTable.SELLERS

    def test_admin_has_no_fund_record(self) -> None:
        with pytest.raises(ForbiddenError):
            fund_table_for(UserRole.ADMIN)


class TestOperations:
    async def _buyer(self, store: InMemoryEntityStore, fund: int, hold: int = 0) -> None:
        await store.put(StoreTable.BUYERS, {"id": "b1", "fund": fund, "fundOnHold": hold})

    async def test_hold_moves_fund_to_hold(self, store: InMemoryEntityStore) -> None:
        await self._buyer(store, 150)
        await store.transact(TransactionIntent([hold_funds("b1", 120)]))
        assert await store.get(StoreTable.BUYERS, {"id": "b1"}) == {
            "id": "b1", "fund": 30, "fundOnHold": 120,
        }

    async def test_hold_guarded_by_fund(self, store: InMemoryEntityStore) -> None:
        await self._buyer(store, 100)
        with pytest.raises(TransactionCancelledError) as exc_info:
            await store.transact(TransactionIntent([hold_funds("b1", 101)]))
        assert exc_info.value.failed == ["buyer_fund"]

    async def test_hold_without_record_fails(self, store: InMemoryEntityStore) -> None:
        with pytest.raises(TransactionCancelledError):
            await store.transact(TransactionIntent([hold_funds("ghost", 1)]))
        assert await store.get(StoreTable.BUYERS, {"id": "ghost"}) is None

    async def test_release_returns_hold(self, store: InMemoryEntityStore) -> None:
        await self._buyer(store, 30, 120)
        await store.transact(TransactionIntent([release_hold("b1", 120)]))
        assert await store.get(StoreTable.BUYERS, {"id": "b1"}) == {
            "id": "b1", "fund": 150, "fundOnHold": 0,
        }

    async def test_settle_consumes_hold(self, store: InMemoryEntityStore) -> None:
        await self._buyer(store, 50, 150)
        await store.transact(TransactionIntent([settle_hold("b1", 150)]))
        doc = await store.get(StoreTable.BUYERS, {"id": "b1"})
        assert doc is not None and doc["fundOnHold"] == 0 and doc["fund"] == 50

    async def test_settle_guarded_by_hold(self, store: InMemoryEntityStore) -> None:
        await self._buyer(store, 500, 10)
        with pytest.raises(TransactionCancelledError):
            await store.transact(TransactionIntent([settle_hold("b1", 11)]))

    async def test_credit_seller_creates_record(self, store: InMemoryEntityStore) -> None:
        await store.transact(TransactionIntent([credit_seller("s1", 142)]))
        assert await store.get(StoreTable.SELLERS, {"id": "s1"}) == {"id": "s1", "fund": 142}

    async def test_raise_hold_moves_only_the_difference(self, store: InMemoryEntityStore) -> None:
        await self._buyer(store, 80, 120)
        await store.transact(TransactionIntent([raise_hold("b1", 120, 150)]))
        assert await store.get(StoreTable.BUYERS, {"id": "b1"}) == {
            "id": "b1", "fund": 50, "fundOnHold": 150,
        }

    def test_non_positive_amounts_rejected(self) -> None:
        with pytest.raises(InvalidAmountError):
            hold_funds("b1", 0)
        with pytest.raises(InvalidAmountError):
            release_hold("b1", -5)
        with pytest.raises(InvalidAmountError):
            credit_seller("s1", -1)


class TestFundService:
    async def test_add_funds_creates_and_accumulates(
        self, store: InMemoryEntityStore, buyer_a: Principal
    ) -> None:
        svc = FundApplicationService()
        first = await svc.add_funds(store, buyer_a, 100)
        second = await svc.add_funds(store, buyer_a, 50)

        assert first.fund == 100
        assert second.fund == 150
        assert second.fund_on_hold == 0
        assert second.fund_display == "$1.50"

    async def test_add_funds_rejects_non_positive(
        self, store: InMemoryEntityStore, buyer_a: Principal
    ) -> None:
        with pytest.raises(InvalidAmountError):
            await FundApplicationService().add_funds(store, buyer_a, 0)

    async def test_add_funds_is_buyer_only(
        self, store: InMemoryEntityStore, seller: Principal, admin: Principal
    ) -> None:
        svc = FundApplicationService()
        with pytest.raises(ForbiddenError):
            await svc.add_funds(store, seller, 10)
        with pytest.raises(ForbiddenError):
            await svc.add_funds(store, admin, 10)

    async def test_buyer_balance_via_mock_repo(self, buyer_a: Principal) -> None:
        mock_repo = AsyncMock()
        mock_repo.get_buyer_funds.return_value = BuyerFunds("buyer-a", fund=30, fund_on_hold=120)
        svc = FundApplicationService(repo=mock_repo)

        result = await svc.get_balance(MagicMock(), buyer_a)

        assert isinstance(result, BuyerBalanceResponse)
        assert result.total == 150
        mock_repo.get_seller_funds.assert_not_called()

    async def test_seller_balance_defaults_to_zero(
        self, store: InMemoryEntityStore, seller: Principal
    ) -> None:
        result = await FundApplicationService().get_balance(store, seller)
        assert isinstance(result, SellerBalanceResponse)
        assert result.fund == 0

    async def test_admin_balance_forbidden(
        self, store: InMemoryEntityStore, admin: Principal
    ) -> None:
        with pytest.raises(ForbiddenError):
            await FundApplicationService().get_balance(store, admin)
