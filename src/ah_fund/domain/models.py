"""Domain models for ah_fund — pure dataclasses over the buyers/sellers documents."""

from dataclasses import dataclass


@dataclass
class BuyerFunds:
    buyer_id: str
    fund: int = 0            # spendable
    fund_on_hold: int = 0    # committed to active bids

    @property
    def total(self) -> int:
        return self.fund + self.fund_on_hold

    @classmethod
    def from_doc(cls, buyer_id: str, doc: dict | None) -> "BuyerFunds":
        """A buyer without a record has zero funds."""
        if doc is None:
            return cls(buyer_id=buyer_id)
        return cls(
            buyer_id=buyer_id,
            fund=int(doc.get("fund", 0)),
            fund_on_hold=int(doc.get("fundOnHold", 0)),
        )


@dataclass
class SellerFunds:
    seller_id: str
    fund: int = 0

    @classmethod
    def from_doc(cls, seller_id: str, doc: dict | None) -> "SellerFunds":
        if doc is None:
            return cls(seller_id=seller_id)
        return cls(seller_id=seller_id, fund=int(doc.get("fund", 0)))
