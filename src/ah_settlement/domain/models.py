"""Domain models for ah_settlement."""

from dataclasses import dataclass

from src.ah_item.domain.models import BidRef, ItemRef


@dataclass
class Purchase:
    """Write-once record of a settled auction, keyed (buyerId, id)."""

    buyer_id: str
    id: str
    item: ItemRef
    bid: BidRef
    price: int
    sold_time: int   # creation time of the winning bid
    create_at: int

    def to_doc(self) -> dict:
        return {
            "buyerId": self.buyer_id,
            "id": self.id,
            "item": self.item.to_doc(),
            "bid": self.bid.to_doc(),
            "price": self.price,
            "soldTime": self.sold_time,
            "createAt": self.create_at,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> "Purchase":
        return cls(
            buyer_id=doc["buyerId"],
            id=doc["id"],
            item=ItemRef.from_doc(doc["item"]),
            bid=BidRef.from_doc(doc["bid"]),
            price=doc["price"],
            sold_time=doc["soldTime"],
            create_at=doc["createAt"],
        )
