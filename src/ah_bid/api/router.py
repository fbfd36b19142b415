"""ah_bid REST endpoints (buyer only).

POST /buyer/bids            — place a bid
GET  /buyer/bids            — all own bids
GET  /buyer/bids/active     — own bids still holding the lead
GET  /buyer/bids/{bid_id}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.ah_bid.application.schemas import PlaceBidRequest
from src.ah_bid.application.service import BidApplicationService
from src.ah_common.principal import Principal
from src.ah_common.response import ApiResponse, respond
from src.ah_gateway.auth.dependencies import require_buyer
from src.ah_store.domain.repository import EntityStoreProtocol
from src.ah_store.infrastructure.provider import get_entity_store

router = APIRouter(prefix="/buyer/bids", tags=["buyer"])

_service = BidApplicationService()

Store = Annotated[EntityStoreProtocol, Depends(get_entity_store)]
Buyer = Annotated[Principal, Depends(require_buyer)]


@router.post("")
async def place_bid(
    body: PlaceBidRequest, request: Request, principal: Buyer, store: Store
) -> ApiResponse:
    data = await _service.place_bid(store, principal, body.seller_id, body.item_id, body.amount)
    return respond(request, data)


@router.get("")
async def list_bids(request: Request, principal: Buyer, store: Store) -> ApiResponse:
    data = await _service.list_bids(store, principal)
    return respond(request, data)


@router.get("/active")
async def list_active_bids(request: Request, principal: Buyer, store: Store) -> ApiResponse:
    data = await _service.list_active_bids(store, principal)
    return respond(request, data)


@router.get("/{bid_id}")
async def get_bid(bid_id: str, request: Request, principal: Buyer, store: Store) -> ApiResponse:
    data = await _service.get_bid(store, principal, bid_id)
    return respond(request, data)
