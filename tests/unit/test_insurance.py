"""Unit tests for compulsory insurance contributions."""

from datetime import date

import pytest

from vnpit.sdk.taxes import InsuranceOptions, calc_insurance, get_insurance_rates


@pytest.fixture
def rates_2025():
    return get_insurance_rates(date(2025, 6, 1))


@pytest.fixture
def rates_2026():
    return get_insurance_rates(date(2026, 6, 1))


class TestBelowCap:

    def test_30m_is_ten_and_a_half_percent(self, rates_2025):
        result = calc_insurance(30_000_000, rates_2025)

        assert result.social == 2_400_000
        assert result.health == 450_000
        assert result.unemployment == 300_000
        assert result.total == 3_150_000

    def test_zero_gross(self, rates_2025):
        assert calc_insurance(0, rates_2025).total == 0

    def test_each_component_rounded_separately(self, rates_2025):
        result = calc_insurance(10_000_005, rates_2025)
        # 800000.4 / 150000.075 / 100000.05
        assert (result.social, result.health, result.unemployment) == (800_000, 150_000, 100_000)


class TestCaps:

    def test_social_and_health_capped(self, rates_2025):
        result = calc_insurance(100_000_000, rates_2025)

        assert result.social == 3_744_000  # 8% x 46.8M
        assert result.health == 702_000  # 1.5% x 46.8M

    @pytest.mark.parametrize("region,expected", [
        (1, 992_000),
        (2, 882_000),
        (3, 772_000),
        (4, 690_000),
    ])
    def test_unemployment_cap_by_region(self, rates_2025, region, expected):
        result = calc_insurance(150_000_000, rates_2025, region=region)
        assert result.unemployment == expected

    def test_unemployment_cap_follows_calendar(self, rates_2025, rates_2026):
        """2026 regional minimum wages raise the cap."""
        assert calc_insurance(100_000_000, rates_2025).unemployment == 992_000
        assert calc_insurance(100_000_000, rates_2026).unemployment == 1_000_000

    def test_total_rate(self, rates_2025):
        assert rates_2025.total_rate == pytest.approx(0.105)


class TestOptions:

    def test_exclude_components(self, rates_2025):
        result = calc_insurance(30_000_000, rates_2025, options=InsuranceOptions(unemployment=False))
        assert result.unemployment == 0
        assert result.total == 2_850_000

    def test_none(self, rates_2025):
        assert calc_insurance(30_000_000, rates_2025, options=InsuranceOptions.none()).total == 0
