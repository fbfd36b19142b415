"""Tests for ah_common.errors and ah_common.response."""

import pytest

from src.ah_common.errors import (
    AlreadySettledError,
    AppError,
    AuctionClosedError,
    BadRequestError,
    BidNotFoundError,
    BidTooLowError,
    ConditionFailedError,
    EmptyUpdateError,
    ForbiddenError,
    InsufficientFundsError,
    InvalidCredentialsError,
    InvalidStateError,
    ItemNotFoundError,
    NotReadyToFulfillError,
    PreconditionFailedError,
    SettlementConflictError,
    StaleBidError,
    StoreUnavailableError,
    TransactionCancelledError,
)
from src.ah_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    @pytest.mark.parametrize(
        ("err", "code", "status"),
        [
            (InvalidCredentialsError(), 1001, 401),
            (ForbiddenError(), 1002, 403),
            (InsufficientFundsError(120, 30), 2001, 422),
            (ItemNotFoundError("s1", "i1"), 3001, 404),
            (InvalidStateError("i1", "ACTIVE", "delete"), 3002, 409),
            (PreconditionFailedError("item has bids"), 3003, 409),
            (EmptyUpdateError(), 3004, 400),
            (BidNotFoundError("b1", "x1"), 4001, 404),
            (BidTooLowError(90, 100), 4002, 422),
            (AuctionClosedError("i1"), 4003, 409),
            (StaleBidError("i1"), 4004, 409),
            (AlreadySettledError("i1"), 5001, 409),
            (SettlementConflictError("i1", ["buyer_fund"]), 5002, 409),
            (NotReadyToFulfillError("i1", "auction still running"), 5003, 400),
            (BadRequestError("bad"), 9003, 400),
            (ConditionFailedError("items", {"id": "i1"}, None), 9101, 409),
            (TransactionCancelledError(["item"]), 9102, 409),
            (StoreUnavailableError("get timed out"), 9103, 503),
        ],
    )
    def test_code_and_status(self, err: AppError, code: int, status: int) -> None:
        assert err.code == code
        assert err.http_status == status

    def test_insufficient_funds_message(self) -> None:
        err = InsufficientFundsError(required=150, available=30)
        assert "150" in err.message
        assert "30" in err.message

    def test_transaction_cancelled_keeps_labels(self) -> None:
        err = TransactionCancelledError(["buyer_fund", "item"])
        assert err.failed == ["buyer_fund", "item"]
        assert "buyer_fund" in err.message

    def test_store_unavailable_says_outcome_unknown(self) -> None:
        assert "unknown" in StoreUnavailableError("transact timed out").message


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "i1"})
        assert isinstance(resp, ApiResponse)
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "i1"}
        assert resp.request_id.startswith("req_")

    def test_error(self) -> None:
        resp = error_response(3001, "Item not found")
        assert resp.code == 3001
        assert resp.data is None
