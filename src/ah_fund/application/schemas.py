"""Pydantic schemas for ah_fund API."""

from pydantic import BaseModel, Field

from src.ah_common.money import cents_to_display
from src.ah_fund.domain.models import BuyerFunds, SellerFunds


class AddFundRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount to add, in the smallest currency unit")


class BuyerBalanceResponse(BaseModel):
    id: str
    fund: int
    fund_display: str
    fund_on_hold: int
    fund_on_hold_display: str
    total: int
    total_display: str

    @classmethod
    def from_domain(cls, funds: BuyerFunds) -> "BuyerBalanceResponse":
        return cls(
            id=funds.buyer_id,
            fund=funds.fund,
            fund_display=cents_to_display(funds.fund),
            fund_on_hold=funds.fund_on_hold,
            fund_on_hold_display=cents_to_display(funds.fund_on_hold),
            total=funds.total,
            total_display=cents_to_display(funds.total),
        )


class SellerBalanceResponse(BaseModel):
    id: str
    fund: int
    fund_display: str

    @classmethod
    def from_domain(cls, funds: SellerFunds) -> "SellerBalanceResponse":
        return cls(
            id=funds.seller_id,
            fund=funds.fund,
            fund_display=cents_to_display(funds.fund),
        )
