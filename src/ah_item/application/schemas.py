"""Pydantic schemas for ah_item API."""

from pydantic import BaseModel, Field

from src.ah_common.datetime_utils import ms_to_iso
from src.ah_common.money import cents_to_display
from src.ah_item.domain.models import BidRef, Item

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateItemRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    init_price: int = Field(..., ge=1, description="Starting price, smallest currency unit")
    auction_length: int = Field(..., gt=0, description="Auction window in milliseconds")
    images: list[str] = Field(default_factory=list, description="Image storage keys")


class UpdateItemRequest(BaseModel):
    """All fields optional; at least one must be present."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    init_price: int | None = Field(None, ge=1)
    auction_length: int | None = Field(None, gt=0)
    images: list[str] | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BidRefOut(BaseModel):
    buyer_id: str
    id: str

    @classmethod
    def from_domain(cls, ref: BidRef) -> "BidRefOut":
        return cls(buyer_id=ref.buyer_id, id=ref.id)


def _ref_out(ref: BidRef | None) -> BidRefOut | None:
    return BidRefOut.from_domain(ref) if ref is not None else None


class ItemResponse(BaseModel):
    seller_id: str
    id: str
    name: str
    description: str
    init_price: int
    init_price_display: str
    auction_length: int
    images: list[str]
    state: str            # stored state
    effective_state: str  # COMPLETED once an ACTIVE auction has ended
    is_frozen: bool
    create_at: int
    start_date: int | None
    end_date: int | None
    end_date_iso: str | None
    current_bid: BidRefOut | None
    past_bids: list[BidRefOut]
    sold_bid: BidRefOut | None
    sold_time: int | None
    sold_price: int | None
    settled_at: int | None

    @classmethod
    def from_domain(cls, item: Item, now: int) -> "ItemResponse":
        return cls(
            seller_id=item.seller_id,
            id=item.id,
            name=item.name,
            description=item.description,
            init_price=item.init_price,
            init_price_display=cents_to_display(item.init_price),
            auction_length=item.auction_length,
            images=list(item.images),
            state=item.state.value,
            effective_state=item.effective_state(now).value,
            is_frozen=item.is_frozen,
            create_at=item.create_at,
            start_date=item.start_date,
            end_date=item.end_date,
            end_date_iso=ms_to_iso(item.end_date),
            current_bid=_ref_out(item.current_bid),
            past_bids=[BidRefOut.from_domain(b) for b in item.past_bids],
            sold_bid=_ref_out(item.sold_bid),
            sold_time=item.sold_time,
            sold_price=item.sold_price,
            settled_at=item.settled_at,
        )


class ExpirationStatus(BaseModel):
    seller_id: str
    id: str
    state: str
    effective_state: str
    window_elapsed: bool
    ready_to_fulfill: bool
    end_date: int | None
    checked_at: int
