"""Domain models for ah_bid."""

from dataclasses import dataclass

from src.ah_item.domain.models import BidRef, ItemRef


@dataclass
class Bid:
    buyer_id: str
    id: str
    item: ItemRef
    amount: int
    create_at: int          # epoch ms
    is_active: bool = True  # flips to False exactly once, when superseded or settled

    @property
    def ref(self) -> BidRef:
        return BidRef(buyer_id=self.buyer_id, id=self.id)

    def to_doc(self) -> dict:
        return {
            "buyerId": self.buyer_id,
            "id": self.id,
            "item": self.item.to_doc(),
            "amount": self.amount,
            "createAt": self.create_at,
            "isActive": self.is_active,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> "Bid":
        return cls(
            buyer_id=doc["buyerId"],
            id=doc["id"],
            item=ItemRef.from_doc(doc["item"]),
            amount=doc["amount"],
            create_at=doc["createAt"],
            is_active=bool(doc.get("isActive", False)),
        )
