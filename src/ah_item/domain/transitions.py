"""Item state machine, expressed as guarded store writes.

    INACTIVE --publish--> ACTIVE --(endDate passes)--> COMPLETED (derived)
    ACTIVE (no bids ever) --unpublish--> INACTIVE
    INACTIVE --mark_failed--> FAILED
    INACTIVE | FAILED | ACTIVE (lapsed, no bids ever) --archive--> ARCHIVED
    COMPLETED (with currentBid) --fulfill--> ARCHIVED      (ah_settlement)

Every transition is a single conditional write: the condition re-states the
source state, so two racing callers cannot both win. COMPLETED is never
stored; it is the ACTIVE state observed after endDate.
"""

from dataclasses import dataclass

from src.ah_common.enums import ItemState
from src.ah_item.domain.models import BidRef, Item
from src.ah_store.domain.expressions import (
    And,
    AppendTo,
    AttrEq,
    AttrGte,
    AttrIn,
    AttrLt,
    AttrNotExists,
    Condition,
    IsEmpty,
    Or,
    RemoveAttr,
    SetAttr,
    UpdateAction,
)

# Attributes a seller may change while the item is INACTIVE
EDITABLE_FIELDS: dict[str, str] = {
    "name": "name",
    "description": "description",
    "init_price": "initPrice",
    "auction_length": "auctionLength",
    "images": "images",
}


@dataclass(frozen=True)
class Transition:
    name: str
    condition: Condition
    actions: tuple[UpdateAction, ...]


def _in_state(state: ItemState) -> Condition:
    return AttrEq("state", state.value)


def _never_bid() -> Condition:
    return And(AttrNotExists("currentBid"), IsEmpty("pastBids"))


def publish(item: Item, now: int) -> Transition:
    # auctionLength guard: endDate must come from the length that is stored
    return Transition(
        "publish",
        And(_in_state(ItemState.INACTIVE), AttrEq("auctionLength", item.auction_length)),
        (
            SetAttr("state", ItemState.ACTIVE.value),
            SetAttr("startDate", now),
            SetAttr("endDate", now + item.auction_length),
        ),
    )


def unpublish() -> Transition:
    return Transition(
        "unpublish",
        And(_in_state(ItemState.ACTIVE), _never_bid()),
        (
            SetAttr("state", ItemState.INACTIVE.value),
            RemoveAttr("startDate"),
            RemoveAttr("endDate"),
        ),
    )


def mark_failed() -> Transition:
    return Transition(
        "mark_failed",
        _in_state(ItemState.INACTIVE),
        (SetAttr("state", ItemState.FAILED.value),),
    )


def archive(now: int) -> Transition:
    """Direct archive: no fund movement, never for an item holding a bid."""
    lapsed_without_bids = And(
        _in_state(ItemState.ACTIVE), _never_bid(), AttrLt("endDate", now)
    )
    return Transition(
        "archive",
        Or(
            AttrIn("state", (ItemState.INACTIVE.value, ItemState.FAILED.value)),
            lapsed_without_bids,
        ),
        (SetAttr("state", ItemState.ARCHIVED.value),),
    )


def edit(changes: dict) -> Transition:
    """Field edits keyed by snake_case name; only while INACTIVE."""
    actions = tuple(SetAttr(EDITABLE_FIELDS[k], v) for k, v in changes.items())
    return Transition("update", _in_state(ItemState.INACTIVE), actions)


def delete_condition() -> Condition:
    return _in_state(ItemState.INACTIVE)


def accepting_bid(now: int, prior: BidRef | None) -> Condition:
    """Item guard of the place-bid transaction.

    Open auction, and the high bid is still the one the bidder saw.
    """
    observed = AttrNotExists("currentBid") if prior is None else AttrEq("currentBid", prior.to_doc())
    return And(_in_state(ItemState.ACTIVE), AttrGte("endDate", now), observed)


def record_bid(bid: BidRef) -> tuple[UpdateAction, ...]:
    return (SetAttr("currentBid", bid.to_doc()), AppendTo("pastBids", (bid.to_doc(),)))


def settle_condition(winning: BidRef) -> Condition:
    return And(_in_state(ItemState.ACTIVE), AttrEq("currentBid", winning.to_doc()))


def settle_actions(
    winning: BidRef, sold_time: int, sold_price: int, settled_at: int
) -> tuple[UpdateAction, ...]:
    """soldTime is when the winning bid was placed; settledAt is when fulfill ran."""
    return (
        SetAttr("soldBid", winning.to_doc()),
        SetAttr("soldTime", sold_time),
        SetAttr("soldPrice", sold_price),
        SetAttr("settledAt", settled_at),
        SetAttr("state", ItemState.ARCHIVED.value),
        RemoveAttr("currentBid"),
    )


def allowed_from(transition_name: str) -> tuple[ItemState, ...]:
    """Source states of a transition, for error messages and classification."""
    return _SOURCES[transition_name]


_SOURCES: dict[str, tuple[ItemState, ...]] = {
    "publish": (ItemState.INACTIVE,),
    "unpublish": (ItemState.ACTIVE,),
    "mark_failed": (ItemState.INACTIVE,),
    "archive": (ItemState.INACTIVE, ItemState.FAILED, ItemState.ACTIVE),
    "update": (ItemState.INACTIVE,),
    "delete": (ItemState.INACTIVE,),
}
