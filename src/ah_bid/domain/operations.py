"""Bid ledger transaction participants."""

from src.ah_bid.domain.models import Bid
from src.ah_common.enums import StoreTable
from src.ah_item.domain.models import BidRef
from src.ah_store.domain.expressions import AttrEq, AttrNotExists, PutOp, SetAttr, UpdateOp


def put_new_bid(bid: Bid, label: str = "bid") -> PutOp:
    return PutOp(StoreTable.BIDS, bid.to_doc(), condition=AttrNotExists("id"), label=label)


def deactivate_bid(ref: BidRef, label: str) -> UpdateOp:
    """isActive true -> false; fails if the bid is absent or already inactive."""
    return UpdateOp(
        StoreTable.BIDS,
        ref.to_doc(),
        (SetAttr("isActive", False),),
        condition=AttrEq("isActive", True),
        label=label,
    )
