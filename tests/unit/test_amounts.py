"""Tests for bl_common.amounts — micro-unit integer arithmetic."""

from decimal import Decimal

import pytest

from src.bl_common.amounts import (
    MICRO_PER_USDC,
    bps_ceil,
    bps_floor,
    micro_to_display,
    usdc_to_micro,
)


class TestUsdcToMicro:
    def test_whole_and_fraction(self) -> None:
        assert usdc_to_micro("12.34") == 12_340_000
        assert usdc_to_micro(5) == 5 * MICRO_PER_USDC
        assert usdc_to_micro(Decimal("0.000001")) == 1

    def test_truncates_beyond_six_decimals(self) -> None:
        assert usdc_to_micro("1.0000019") == 1_000_001

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            usdc_to_micro("abc")

    def test_rejects_infinity(self) -> None:
        with pytest.raises(ValueError, match="finite"):
            usdc_to_micro("Infinity")


class TestMicroToDisplay:
    def test_basic(self) -> None:
        assert micro_to_display(148_500_000) == "$148.50"

    def test_thousands_separator(self) -> None:
        assert micro_to_display(1_234_560_000) == "$1,234.56"

    def test_truncates_sub_cent(self) -> None:
        assert micro_to_display(9_999) == "$0.00"

    def test_negative(self) -> None:
        assert micro_to_display(-1_500_000) == "-$1.50"


class TestBps:
    def test_ceil_rounds_up(self) -> None:
        # 50 * 300 / 10000 = 1.5 -> 2
        assert bps_ceil(50, 300) == 2

    def test_ceil_exact(self) -> None:
        assert bps_ceil(50_000_000, 300) == 1_500_000

    def test_ceil_zero(self) -> None:
        assert bps_ceil(0, 300) == 0
        assert bps_ceil(100, 0) == 0

    def test_floor_rounds_down(self) -> None:
        assert bps_floor(50, 300) == 1
