"""UTC datetime utilities.

Entity documents store instants as integer epoch milliseconds.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """Current UTC time as epoch milliseconds."""
    return int(utc_now().timestamp() * 1000)


def ms_to_iso(ms: int | None) -> str | None:
    """Epoch milliseconds -> ISO8601 string, None passes through."""
    if ms is None:
        return None
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()
