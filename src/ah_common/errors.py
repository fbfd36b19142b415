"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Principal
  2xxx: Funds
  3xxx: Item
  4xxx: Bid
  5xxx: Settlement
  9xxx: System/Store

Conflict-class errors (409) mean "refresh state and retry"; everything else
is final for the request that produced it.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Principal ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(1002, detail, 403)


# --- 2xxx: Funds ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int | None = None) -> None:
        detail = f"Insufficient funds: required {required}"
        if available is not None:
            detail += f", available {available}"
        super().__init__(2001, detail, 422)


class InvalidAmountError(AppError):
    def __init__(self, amount: int) -> None:
        super().__init__(2002, f"Amount must be a positive integer, got {amount}", 422)


# --- 3xxx: Item ---

class ItemNotFoundError(AppError):
    def __init__(self, seller_id: str, item_id: str) -> None:
        super().__init__(3001, f"Item not found: {seller_id}/{item_id}", 404)


class InvalidStateError(AppError):
    def __init__(self, item_id: str, state: str, action: str) -> None:
        super().__init__(3002, f"Item {item_id} in state {state} cannot {action}", 409)


class PreconditionFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Precondition failed: {detail}", 409)


class EmptyUpdateError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "At least one field must be supplied", 400)


# --- 4xxx: Bid ---

class BidNotFoundError(AppError):
    def __init__(self, buyer_id: str, bid_id: str) -> None:
        super().__init__(4001, f"Bid not found: {buyer_id}/{bid_id}", 404)


class BidTooLowError(AppError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(4002, f"Bid {amount} is too low, must be at least {minimum}", 422)


class AuctionClosedError(AppError):
    def __init__(self, item_id: str) -> None:
        super().__init__(4003, f"Item {item_id} is not accepting bids", 409)


class StaleBidError(AppError):
    def __init__(self, item_id: str) -> None:
        super().__init__(
            4004, f"Item {item_id} received another bid, refresh and retry", 409
        )


# --- 5xxx: Settlement ---

class AlreadySettledError(AppError):
    def __init__(self, item_id: str) -> None:
        super().__init__(5001, f"Item {item_id} is already settled", 409)


class SettlementConflictError(AppError):
    def __init__(self, item_id: str, failed: list[str]) -> None:
        super().__init__(
            5002,
            f"Settlement of item {item_id} aborted, failed conditions: {', '.join(failed)}",
            409,
        )


class NotReadyToFulfillError(AppError):
    def __init__(self, item_id: str, reason: str) -> None:
        super().__init__(5003, f"Item {item_id} is not ready to fulfill: {reason}", 400)


# --- 9xxx: System/Store ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class BadRequestError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, detail, 400)


class ConditionFailedError(AppError):
    """A single-item conditional write was rejected.

    ``current`` holds the document as the store saw it (None when absent).
    """

    def __init__(self, table: str, key: dict[str, str], current: dict | None) -> None:
        self.table = table
        self.key = key
        self.current = current
        super().__init__(9101, f"Condition failed on {table} {key}", 409)


class TransactionCancelledError(AppError):
    """An atomic multi-item transaction was rolled back as a whole.

    ``failed`` lists the labels of the participants whose condition did not hold.
    """

    def __init__(self, failed: list[str]) -> None:
        self.failed = failed
        super().__init__(
            9102, f"Transaction cancelled, failed participants: {', '.join(failed)}", 409
        )


class StoreUnavailableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9103, f"Store unavailable, outcome unknown: {detail}", 503)
