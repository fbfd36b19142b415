"""Tests for ah_common.datetime_utils."""

from datetime import UTC, datetime

from src.ah_common.datetime_utils import ms_to_iso, now_ms, utc_now


def test_utc_now_is_aware() -> None:
    now = utc_now()
    assert isinstance(now, datetime)
    assert now.tzinfo == UTC


def test_now_ms_is_epoch_millis() -> None:
    assert now_ms() > 1_700_000_000_000


def test_ms_to_iso() -> None:
    assert ms_to_iso(0) == "1970-01-01T00:00:00+00:00"
    assert ms_to_iso(None) is None
