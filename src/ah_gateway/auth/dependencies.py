"""FastAPI dependencies: get_current_principal and role guards.

Usage in any protected router:
    from src.ah_gateway.auth.dependencies import require_buyer

    @router.post("/bids")
    async def place_bid(principal: Annotated[Principal, Depends(require_buyer)]):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.ah_common.enums import UserRole
from src.ah_common.errors import ForbiddenError, InvalidCredentialsError
from src.ah_common.principal import Principal
from src.ah_gateway.auth.jwt_handler import decode_token

# Tokens are issued outside this service; tokenUrl only feeds Swagger UI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    """Extract and validate the JWT Bearer token, return the Principal.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an
    unknown role.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None
    return Principal(user_id=user_id, role=role)


async def require_buyer(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if principal.role is not UserRole.BUYER:
        raise ForbiddenError("buyer role required")
    return principal


async def require_seller(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if principal.role is not UserRole.SELLER:
        raise ForbiddenError("seller role required")
    return principal
