"""Tests for ah_common.money."""

import pytest

from src.ah_common.money import cents_to_display, platform_fee, seller_income


class TestSellerIncome:
    def test_truncates(self) -> None:
        assert seller_income(150, 500) == 142   # 142.5 rounds down
        assert seller_income(120, 500) == 114
        assert seller_income(1, 500) == 0

    def test_zero_fee(self) -> None:
        assert seller_income(150, 0) == 150

    def test_fee_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            seller_income(100, 10001)


class TestPlatformFee:
    def test_fee_is_remainder(self) -> None:
        assert platform_fee(150, 500) == 8
        assert seller_income(150, 500) + platform_fee(150, 500) == 150


class TestCentsToDisplay:
    def test_display(self) -> None:
        assert cents_to_display(6500) == "$65.00"
        assert cents_to_display(123456) == "$1,234.56"
        assert cents_to_display(-1200) == "-$12.00"
