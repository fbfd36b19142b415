"""Unified API response envelope.

Every endpoint returns:
{
    "code": 0,           // 0=success, non-0=AppError code
    "message": "success",
    "data": { ... },     // null on error
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)


def request_id_of(request: Request) -> str | None:
    """Read request_id injected by RequestLogMiddleware."""
    return getattr(request.state, "request_id", None)


def respond(request: Request, data: BaseModel | list[BaseModel] | None, message: str = "success") -> ApiResponse:
    """Wrap a schema (or list of schemas) in the envelope, carrying the request id."""
    if isinstance(data, list):
        payload: Any = [d.model_dump() for d in data]
    elif data is None:
        payload = None
    else:
        payload = data.model_dump()
    resp = success_response(payload)
    resp.message = message
    resp.request_id = request_id_of(request) or resp.request_id
    return resp
