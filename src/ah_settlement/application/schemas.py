"""Pydantic schemas for ah_settlement API."""

from pydantic import BaseModel

from src.ah_common.datetime_utils import ms_to_iso
from src.ah_common.money import cents_to_display
from src.ah_settlement.domain.models import Purchase


class PurchaseResponse(BaseModel):
    buyer_id: str
    id: str
    seller_id: str
    item_id: str
    bid_id: str
    price: int
    price_display: str
    sold_time: int
    sold_time_iso: str | None
    create_at: int

    @classmethod
    def from_domain(cls, p: Purchase) -> "PurchaseResponse":
        return cls(
            buyer_id=p.buyer_id,
            id=p.id,
            seller_id=p.item.seller_id,
            item_id=p.item.id,
            bid_id=p.bid.id,
            price=p.price,
            price_display=cents_to_display(p.price),
            sold_time=p.sold_time,
            sold_time_iso=ms_to_iso(p.sold_time),
            create_at=p.create_at,
        )


class FulfillResponse(BaseModel):
    item_id: str
    state: str
    purchase: PurchaseResponse
    seller_income: int
    seller_income_display: str
    platform_fee: int
    platform_fee_display: str
