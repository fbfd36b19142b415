"""Domain models for ah_item — dataclasses mapped to camelCase store documents."""

from dataclasses import dataclass, field

from src.ah_common.enums import ItemState


@dataclass(frozen=True)
class ItemRef:
    seller_id: str
    id: str

    def to_doc(self) -> dict:
        return {"sellerId": self.seller_id, "id": self.id}

    @classmethod
    def from_doc(cls, doc: dict) -> "ItemRef":
        return cls(seller_id=doc["sellerId"], id=doc["id"])


@dataclass(frozen=True)
class BidRef:
    buyer_id: str
    id: str

    def to_doc(self) -> dict:
        return {"buyerId": self.buyer_id, "id": self.id}

    @classmethod
    def from_doc(cls, doc: dict) -> "BidRef":
        return cls(buyer_id=doc["buyerId"], id=doc["id"])


@dataclass
class Item:
    seller_id: str
    id: str
    create_at: int                   # epoch ms
    name: str
    description: str
    init_price: int                  # >= 1
    auction_length: int              # ms
    images: list[str] = field(default_factory=list)
    state: ItemState = ItemState.INACTIVE
    is_frozen: bool = False
    start_date: int | None = None    # set while ACTIVE
    end_date: int | None = None      # set while ACTIVE
    current_bid: BidRef | None = None
    past_bids: list[BidRef] = field(default_factory=list)
    sold_bid: BidRef | None = None
    sold_time: int | None = None
    sold_price: int | None = None
    settled_at: int | None = None    # when fulfill committed

    @property
    def ref(self) -> ItemRef:
        return ItemRef(seller_id=self.seller_id, id=self.id)

    @property
    def has_bids(self) -> bool:
        return self.current_bid is not None or bool(self.past_bids)

    def window_elapsed(self, now: int) -> bool:
        """The closing millisecond itself still belongs to the auction."""
        return self.end_date is not None and now > self.end_date

    def effective_state(self, now: int) -> ItemState:
        """Stored state, with COMPLETED derived for an ACTIVE item past its end date."""
        if self.state is ItemState.ACTIVE and self.window_elapsed(now):
            return ItemState.COMPLETED
        return self.state

    def to_doc(self) -> dict:
        doc: dict = {
            "sellerId": self.seller_id,
            "id": self.id,
            "createAt": self.create_at,
            "name": self.name,
            "description": self.description,
            "initPrice": self.init_price,
            "auctionLength": self.auction_length,
            "images": list(self.images),
            "state": self.state.value,
            "isFrozen": self.is_frozen,
            "pastBids": [b.to_doc() for b in self.past_bids],
        }
        optional = {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "currentBid": self.current_bid.to_doc() if self.current_bid else None,
            "soldBid": self.sold_bid.to_doc() if self.sold_bid else None,
            "soldTime": self.sold_time,
            "soldPrice": self.sold_price,
            "settledAt": self.settled_at,
        }
        doc.update({k: v for k, v in optional.items() if v is not None})
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> "Item":
        current_bid = doc.get("currentBid")
        sold_bid = doc.get("soldBid")
        return cls(
            seller_id=doc["sellerId"],
            id=doc["id"],
            create_at=doc["createAt"],
            name=doc["name"],
            description=doc.get("description", ""),
            init_price=doc["initPrice"],
            auction_length=doc["auctionLength"],
            images=list(doc.get("images") or []),
            state=ItemState(doc["state"]),
            is_frozen=bool(doc.get("isFrozen", False)),
            start_date=doc.get("startDate"),
            end_date=doc.get("endDate"),
            current_bid=BidRef.from_doc(current_bid) if current_bid else None,
            past_bids=[BidRef.from_doc(b) for b in doc.get("pastBids") or []],
            sold_bid=BidRef.from_doc(sold_bid) if sold_bid else None,
            sold_time=doc.get("soldTime"),
            sold_price=doc.get("soldPrice"),
            settled_at=doc.get("settledAt"),
        )
