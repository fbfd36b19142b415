"""Tests for config.settings validation."""

import pytest
from pydantic import ValidationError

from config.settings import Settings


def _settings(**overrides: object) -> Settings:
    return Settings(JWT_SECRET="test-secret", **overrides)  # type: ignore[arg-type]


def test_defaults() -> None:
    s = _settings()
    assert s.PLATFORM_FEE_BPS == 500
    assert s.RELEASE_SUPERSEDED_HOLDS is False


@pytest.mark.parametrize("bps", [0, 10000])
def test_fee_bounds_accepted(bps: int) -> None:
    assert _settings(PLATFORM_FEE_BPS=bps).PLATFORM_FEE_BPS == bps


@pytest.mark.parametrize("bps", [-1, 10001])
def test_fee_out_of_range_rejected_at_startup(bps: int) -> None:
    with pytest.raises(ValidationError):
        _settings(PLATFORM_FEE_BPS=bps)


def test_recently_sold_window_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        _settings(RECENTLY_SOLD_WINDOW_HOURS=0)
