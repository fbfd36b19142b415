"""Test doubles shared by unit and API tests."""

from src.ah_common.enums import UserRole
from src.ah_gateway.auth.jwt_handler import create_access_token

T0 = 1_760_000_000_000  # fixed "now" for service tests, epoch ms
MINUTE = 60 * 1000
HOUR = 60 * MINUTE


class FakeClock:
    """Settable millisecond clock injected into services."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class SequentialIds:
    """Deterministic, sortable ids: 00000000000000000001, ..."""

    def __init__(self) -> None:
        self._n = 0

    def __call__(self) -> str:
        self._n += 1
        return f"{self._n:020d}"


def bearer(user_id: str, role: UserRole) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}
