"""ah_item REST endpoints.

Public (no token):
GET    /items/active                        — open auctions
GET    /items/recently-sold                 — settled within the window, newest first
GET    /items/{seller_id}/{item_id}         — single item

Seller:
GET    /seller/items                        — own items
POST   /seller/items                        — create (INACTIVE)
GET    /seller/items/{item_id}
PATCH  /seller/items/{item_id}              — edit while INACTIVE
DELETE /seller/items/{item_id}              — only while INACTIVE
POST   /seller/items/{item_id}/publish      — INACTIVE -> ACTIVE
POST   /seller/items/{item_id}/unpublish    — ACTIVE (never bid on) -> INACTIVE
POST   /seller/items/{item_id}/archive      — direct archive, no settlement
POST   /seller/items/{item_id}/fail         — INACTIVE -> FAILED
GET    /seller/items/{item_id}/expiration   — derived state / ready to fulfill
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.ah_common.principal import Principal
from src.ah_common.response import ApiResponse, respond
from src.ah_gateway.auth.dependencies import require_seller
from src.ah_item.application.schemas import CreateItemRequest, UpdateItemRequest
from src.ah_item.application.service import ItemApplicationService
from src.ah_store.domain.repository import EntityStoreProtocol
from src.ah_store.infrastructure.provider import get_entity_store

items_router = APIRouter(prefix="/items", tags=["items"])
seller_router = APIRouter(prefix="/seller/items", tags=["seller"])

_service = ItemApplicationService()

Store = Annotated[EntityStoreProtocol, Depends(get_entity_store)]
Seller = Annotated[Principal, Depends(require_seller)]


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@items_router.get("/active")
async def list_active_items(request: Request, store: Store) -> ApiResponse:
    data = await _service.list_active_items(store)
    return respond(request, data)


@items_router.get("/recently-sold")
async def list_recently_sold(
    request: Request,
    store: Store,
    limit: int | None = Query(None, ge=1, le=200),
) -> ApiResponse:
    data = await _service.list_recently_sold(store, limit)
    return respond(request, data)


@items_router.get("/{seller_id}/{item_id}")
async def get_item(seller_id: str, item_id: str, request: Request, store: Store) -> ApiResponse:
    data = await _service.get_item(store, seller_id, item_id)
    return respond(request, data)


# ---------------------------------------------------------------------------
# Seller
# ---------------------------------------------------------------------------


@seller_router.get("")
async def list_seller_items(request: Request, principal: Seller, store: Store) -> ApiResponse:
    data = await _service.list_seller_items(store, principal)
    return respond(request, data)


@seller_router.post("")
async def create_item(
    body: CreateItemRequest, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.create_item(store, principal, body)
    return respond(request, data)


@seller_router.get("/{item_id}")
async def get_seller_item(
    item_id: str, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.get_seller_item(store, principal, item_id)
    return respond(request, data)


@seller_router.patch("/{item_id}")
async def update_item(
    item_id: str, body: UpdateItemRequest, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.update_item(store, principal, item_id, body)
    return respond(request, data)


@seller_router.delete("/{item_id}")
async def delete_item(
    item_id: str, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    await _service.delete_item(store, principal, item_id)
    return respond(request, None, message="deleted")


@seller_router.post("/{item_id}/publish")
async def publish_item(
    item_id: str, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.publish_item(store, principal, item_id)
    return respond(request, data)


@seller_router.post("/{item_id}/unpublish")
async def unpublish_item(
    item_id: str, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.unpublish_item(store, principal, item_id)
    return respond(request, data)


@seller_router.post("/{item_id}/archive")
async def archive_item(
    item_id: str, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.archive_item(store, principal, item_id)
    return respond(request, data)


@seller_router.post("/{item_id}/fail")
async def mark_failed(
    item_id: str, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.mark_failed(store, principal, item_id)
    return respond(request, data)


@seller_router.get("/{item_id}/expiration")
async def check_expiration(
    item_id: str, request: Request, principal: Seller, store: Store
) -> ApiResponse:
    data = await _service.check_expiration(store, principal, item_id)
    return respond(request, data)
