"""Unit tests for VND rounding and formatting."""

import pytest

from vnpit.sdk import format_rate, format_vnd, round_vnd


class TestRoundVnd:

    @pytest.mark.parametrize("amount,expected", [
        (0, 0),
        (12.4, 12),
        (12.5, 13),
        (13.5, 14),  # half up, not banker's rounding
        (877_500.4999, 877_500),
        (-12.5, -13),
        (30_000_000, 30_000_000),
    ])
    def test_half_up(self, amount, expected):
        assert round_vnd(amount) == expected

    def test_returns_int(self):
        assert isinstance(round_vnd(1.0), int)


class TestFormatting:

    @pytest.mark.parametrize("amount,expected", [
        (30_000_000, "30.000.000 ₫"),
        (0, "0 ₫"),
        (999, "999 ₫"),
        (-1_500, "-1.500 ₫"),
    ])
    def test_format_vnd(self, amount, expected):
        assert format_vnd(amount) == expected

    def test_format_vnd_without_symbol(self):
        assert format_vnd(1_627_500, symbol=False) == "1.627.500"

    @pytest.mark.parametrize("rate,expected", [
        (0.105, "10.5%"),
        (0.35, "35%"),
        (0, "0%"),
        (0.0542, "5.42%"),
    ])
    def test_format_rate(self, rate, expected):
        assert format_rate(rate) == expected
