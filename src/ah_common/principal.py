"""Authenticated caller passed to every core operation."""

from dataclasses import dataclass

from src.ah_common.enums import UserRole
from src.ah_common.errors import ForbiddenError


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: UserRole


def require_role(principal: Principal, role: UserRole) -> str:
    """Return the principal's user id, or raise ForbiddenError for any other role."""
    if principal.role is not role:
        raise ForbiddenError(f"{role.value.lower()} role required")
    return principal.user_id
