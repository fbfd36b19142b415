"""Fund ledger transaction participants.

Pure builders: each returns one guarded UpdateOp that the caller adds to a
TransactionIntent. Nothing here touches the store.

    hold_funds     buyer  fund -= a, fundOnHold += a   WHERE fund >= a
    release_hold   buyer  fund += a, fundOnHold -= a   WHERE fundOnHold >= a
    settle_hold    buyer  fundOnHold -= a              WHERE fundOnHold >= a
    credit_seller  seller fund += a
    raise_hold     buyer  fund -= d, fundOnHold += d   WHERE fund >= d AND fundOnHold >= held

Records are created lazily: an UpdateOp on an absent key starts from the key,
and a missing balance attribute never satisfies a >= guard.
"""

from typing import assert_never

from src.ah_common.enums import StoreTable, UserRole
from src.ah_common.errors import ForbiddenError, InvalidAmountError
from src.ah_store.domain.expressions import AddTo, And, AttrGte, UpdateOp


def fund_table_for(role: UserRole) -> StoreTable:
    """Store table holding the balance of a principal with ``role``."""
    match role:
        case UserRole.BUYER:
            return StoreTable.BUYERS
        case UserRole.SELLER:
            return StoreTable.SELLERS
        case UserRole.ADMIN:
            raise ForbiddenError("Admin principals have no fund record")
        case _:
            assert_never(role)


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount)


def hold_funds(buyer_id: str, amount: int, label: str = "buyer_fund") -> UpdateOp:
    _check_amount(amount)
    return UpdateOp(
        StoreTable.BUYERS,
        {"id": buyer_id},
        (AddTo("fund", -amount), AddTo("fundOnHold", amount)),
        condition=AttrGte("fund", amount),
        label=label,
    )


def release_hold(buyer_id: str, amount: int, label: str = "buyer_fund") -> UpdateOp:
    _check_amount(amount)
    return UpdateOp(
        StoreTable.BUYERS,
        {"id": buyer_id},
        (AddTo("fund", amount), AddTo("fundOnHold", -amount)),
        condition=AttrGte("fundOnHold", amount),
        label=label,
    )


def settle_hold(buyer_id: str, amount: int, label: str = "buyer_fund") -> UpdateOp:
    _check_amount(amount)
    return UpdateOp(
        StoreTable.BUYERS,
        {"id": buyer_id},
        (AddTo("fundOnHold", -amount),),
        condition=AttrGte("fundOnHold", amount),
        label=label,
    )


def credit_seller(seller_id: str, amount: int, label: str = "seller_fund") -> UpdateOp:
    # A zero credit is legal: a fee of 100% leaves the seller nothing.
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmountError(amount)
    return UpdateOp(
        StoreTable.SELLERS,
        {"id": seller_id},
        (AddTo("fund", amount),),
        label=label,
    )


def raise_hold(buyer_id: str, held: int, amount: int, label: str = "buyer_fund") -> UpdateOp:
    """A buyer outbidding themself: grow an existing hold of ``held`` to ``amount``.

    One participant per fund record, so release and re-hold collapse into the delta.
    """
    _check_amount(held)
    _check_amount(amount - held)
    delta = amount - held
    return UpdateOp(
        StoreTable.BUYERS,
        {"id": buyer_id},
        (AddTo("fund", -delta), AddTo("fundOnHold", delta)),
        condition=And(AttrGte("fund", delta), AttrGte("fundOnHold", held)),
        label=label,
    )
