"""Pydantic schemas for ah_bid API."""

from pydantic import BaseModel, Field

from src.ah_bid.domain.models import Bid
from src.ah_common.datetime_utils import ms_to_iso
from src.ah_common.money import cents_to_display


class PlaceBidRequest(BaseModel):
    seller_id: str = Field(..., min_length=1)
    item_id: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, description="Bid amount, smallest currency unit")


class BidResponse(BaseModel):
    buyer_id: str
    id: str
    seller_id: str
    item_id: str
    amount: int
    amount_display: str
    create_at: int
    created_at_iso: str | None
    is_active: bool

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidResponse":
        return cls(
            buyer_id=bid.buyer_id,
            id=bid.id,
            seller_id=bid.item.seller_id,
            item_id=bid.item.id,
            amount=bid.amount,
            amount_display=cents_to_display(bid.amount),
            create_at=bid.create_at,
            created_at_iso=ms_to_iso(bid.create_at),
            is_active=bid.is_active,
        )
