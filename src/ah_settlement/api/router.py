"""ah_settlement REST endpoints.

POST /seller/items/{item_id}/fulfill   — settle a completed auction
GET  /buyer/purchases                  — own purchases
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.ah_common.principal import Principal
from src.ah_common.response import ApiResponse, respond
from src.ah_gateway.auth.dependencies import require_buyer, require_seller
from src.ah_settlement.application.service import SettlementApplicationService
from src.ah_store.domain.repository import EntityStoreProtocol
from src.ah_store.infrastructure.provider import get_entity_store

router = APIRouter(tags=["settlement"])

_service = SettlementApplicationService()


@router.post("/seller/items/{item_id}/fulfill")
async def fulfill(
    item_id: str,
    request: Request,
    principal: Annotated[Principal, Depends(require_seller)],
    store: Annotated[EntityStoreProtocol, Depends(get_entity_store)],
) -> ApiResponse:
    data = await _service.fulfill(store, principal, item_id)
    return respond(request, data)


@router.get("/buyer/purchases")
async def list_purchases(
    request: Request,
    principal: Annotated[Principal, Depends(require_buyer)],
    store: Annotated[EntityStoreProtocol, Depends(get_entity_store)],
) -> ApiResponse:
    data = await _service.list_purchases(store, principal)
    return respond(request, data)
