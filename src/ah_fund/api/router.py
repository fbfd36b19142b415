"""ah_fund REST endpoints.

POST /buyer/add-fund    — deposit into the caller's buyer account
GET  /buyer/balance     — fund + fundOnHold
GET  /seller/balance    — settled income
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.ah_common.principal import Principal
from src.ah_common.response import ApiResponse, respond
from src.ah_fund.application.schemas import AddFundRequest
from src.ah_fund.application.service import FundApplicationService
from src.ah_gateway.auth.dependencies import require_buyer, require_seller
from src.ah_store.domain.repository import EntityStoreProtocol
from src.ah_store.infrastructure.provider import get_entity_store

router = APIRouter(tags=["funds"])

_service = FundApplicationService()


@router.post("/buyer/add-fund")
async def add_fund(
    body: AddFundRequest,
    principal: Annotated[Principal, Depends(require_buyer)],
    store: Annotated[EntityStoreProtocol, Depends(get_entity_store)],
    request: Request,
) -> ApiResponse:
    data = await _service.add_funds(store, principal, body.amount)
    return respond(request, data)


@router.get("/buyer/balance")
async def buyer_balance(
    principal: Annotated[Principal, Depends(require_buyer)],
    store: Annotated[EntityStoreProtocol, Depends(get_entity_store)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(store, principal)
    return respond(request, data)


@router.get("/seller/balance")
async def seller_balance(
    principal: Annotated[Principal, Depends(require_seller)],
    store: Annotated[EntityStoreProtocol, Depends(get_entity_store)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(store, principal)
    return respond(request, data)
