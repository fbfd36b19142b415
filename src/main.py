"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.ah_bid.api.router import router as bid_router
from src.ah_common.errors import AppError
from src.ah_common.response import error_response
from src.ah_fund.api.router import router as fund_router
from src.ah_gateway.middleware.request_log import RequestLogMiddleware
from src.ah_item.api.router import items_router, seller_router
from src.ah_settlement.api.router import router as settlement_router
from src.ah_store.infrastructure.provider import close_entity_store, get_entity_store

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the entity store. Shutdown: release it."""
    # Startup
    await get_entity_store().ping()
    logger.info("Entity store ready: backend=%s", settings.STORE_BACKEND)
    yield
    # Shutdown
    await close_entity_store()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(items_router, prefix="/api/v1")
app.include_router(seller_router, prefix="/api/v1")
app.include_router(settlement_router, prefix="/api/v1")
app.include_router(bid_router, prefix="/api/v1")
app.include_router(fund_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0", "store": settings.STORE_BACKEND}
