"""Unit tests for the GROSS->NET pipeline and NET->GROSS solver."""

import logging
from datetime import date

import pytest

from vnpit.sdk import (
    InsuranceOptions,
    InvalidInputError,
    LawRegime,
    compare_laws,
    gross_from_net,
    net_from_gross,
)


class TestNetFromGross:

    def test_old_law_30m_no_dependents(self):
        """Hand-computed: insurance 3.15M, taxable 15.85M, tax 1.6275M."""
        result = net_from_gross(30_000_000, 6, 2025)

        assert result.law_used == LawRegime.OLD
        assert result.insurance.total == 3_150_000
        assert result.family_deduction == 11_000_000
        assert result.taxable_income == 15_850_000
        assert result.tax == 1_627_500
        assert result.net == 25_222_500
        assert result.marginal_rate == 0.15

    def test_new_law_30m_no_dependents(self):
        result = net_from_gross(30_000_000, 1, 2026)

        assert result.law_used == LawRegime.NEW
        assert result.family_deduction == 15_500_000
        assert result.taxable_income == 11_350_000
        assert result.tax == 635_000  # 500k + 1.35M * 10%
        assert result.net == 26_215_000

    def test_dependents_reduce_taxable_income(self):
        result = net_from_gross(30_000_000, 6, 2025, dependents=2)

        assert result.family_deduction == 11_000_000 + 2 * 4_400_000
        assert result.taxable_income == 7_050_000
        assert result.tax == 455_000  # 250k + 2.05M * 10%

    def test_deductions_above_income_clamp_to_zero(self):
        result = net_from_gross(12_000_000, 6, 2025, dependents=3)

        assert result.taxable_income == 0
        assert result.tax == 0
        assert result.net == 12_000_000 - result.insurance.total

    def test_other_deductions(self):
        result = net_from_gross(30_000_000, 6, 2025, other_deductions=850_000)
        assert result.taxable_income == 15_000_000
        assert result.tax == 1_500_000

    def test_zero_income(self):
        result = net_from_gross(0, 6, 2025)

        assert result.insurance.total == 0
        assert result.tax == 0
        assert result.net == 0
        assert result.effective_rate == 0

    def test_net_identity(self):
        result = net_from_gross(87_654_321, 3, 2026, dependents=1, region=3)
        assert result.net == result.gross - result.insurance.total - result.tax

    def test_fractional_gross_rounded(self):
        assert net_from_gross(30_000_000.4, 6, 2025).gross == 30_000_000

    def test_no_insurance(self):
        result = net_from_gross(30_000_000, 6, 2025, insurance_options=InsuranceOptions.none())
        assert result.insurance.total == 0
        assert result.taxable_income == 19_000_000

    def test_law_change_date_override(self):
        result = net_from_gross(30_000_000, 3, 2026, law_change_date=date(2026, 7, 1))
        assert result.law_used == LawRegime.OLD
        assert result.tax == 1_627_500


class TestMonotonicity:

    @pytest.mark.parametrize("year,month", [(2025, 6), (2026, 6)])
    def test_net_non_decreasing_in_gross(self, year, month):
        previous = None
        for gross in range(0, 150_000_001, 500_000):
            net = net_from_gross(gross, month, year, dependents=1).net
            if previous is not None:
                assert net >= previous, f"net dropped at gross {gross}"
            previous = net

    def test_net_non_decreasing_per_vnd(self):
        previous = None
        for gross in range(29_095_000, 29_105_000):
            net = net_from_gross(gross, 6, 2025).net
            if previous is not None:
                assert net >= previous, f"net dropped at gross {gross}"
            previous = net


class TestGrossFromNet:

    @pytest.mark.parametrize("gross", [5_000_000, 10_000_000, 30_000_000, 50_000_000, 120_000_000])
    @pytest.mark.parametrize("year", [2025, 2026])
    def test_round_trip(self, gross, year):
        net = net_from_gross(gross, 6, year).net
        result = gross_from_net(net, 6, year)

        assert abs(result.gross - gross) <= 1
        assert result.net == net
        assert result.target_net == net
        assert result.approximate is False
        assert 0 < result.iterations <= 100

    def test_round_trip_with_dependents_and_region(self):
        net = net_from_gross(70_000_000, 9, 2026, dependents=2, region=4).net
        result = gross_from_net(net, 9, 2026, dependents=2, region=4)
        assert abs(result.gross - 70_000_000) <= 1

    def test_zero_net(self):
        result = gross_from_net(0, 6, 2025)
        assert result.gross == 0
        assert result.net == 0
        assert result.approximate is False

    def test_exact_net_reached(self):
        result = gross_from_net(25_000_000, 6, 2025)

        assert result.net == 25_000_000
        assert net_from_gross(result.gross - 2, 6, 2025).net < 25_000_000
        assert net_from_gross(result.gross + 2, 6, 2025).net > 25_000_000

    @pytest.mark.parametrize("gross,year", [
        (34_719_501, 2025),
        (34_719_499, 2025),
        (43_699_995, 2026),
        (28_529_682, 2026),
    ])
    def test_round_trip_on_flat_stretch(self, gross, year):
        """Several gross values can share one net; the answer sits in the middle."""
        net = net_from_gross(gross, 6, year).net
        result = gross_from_net(net, 6, year)

        assert abs(result.gross - gross) <= 1
        assert result.net == net

    def test_round_trip_on_one_vnd_grid(self):
        for gross in range(34_719_490, 34_719_520):
            net = net_from_gross(gross, 6, 2025).net
            assert abs(gross_from_net(net, 6, 2025).gross - gross) <= 1, gross

    def test_iteration_cap_flags_approximate(self, caplog):
        with caplog.at_level(logging.WARNING, logger="vnpit.sdk.gross_net"):
            result = gross_from_net(25_000_000, 6, 2025, max_iterations=3)

        assert result.approximate is True
        assert result.iterations == 3
        assert result.target_net == 25_000_000
        assert "stopped after 3 iteration(s)" in caplog.text

    def test_deterministic(self):
        first = gross_from_net(33_333_333, 11, 2026, dependents=1)
        second = gross_from_net(33_333_333, 11, 2026, dependents=1)
        assert first == second


class TestValidation:

    @pytest.mark.parametrize("kwargs", [
        {"gross": -1, "month": 1, "year": 2025},
        {"gross": 1, "month": 0, "year": 2025},
        {"gross": 1, "month": 13, "year": 2025},
        {"gross": 1, "month": 1, "year": 0},
        {"gross": 1, "month": 1, "year": 2025, "dependents": -1},
        {"gross": 1, "month": 1, "year": 2025, "region": 5},
        {"gross": 1, "month": 1, "year": 2025, "other_deductions": -1},
        {"gross": float("nan"), "month": 1, "year": 2025},
        {"gross": "30000000", "month": 1, "year": 2025},
    ])
    def test_net_from_gross_rejects(self, kwargs):
        with pytest.raises(InvalidInputError):
            net_from_gross(**kwargs)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            net_from_gross(-1, 1, 2025)

    def test_gross_from_net_rejects_negative(self):
        with pytest.raises(InvalidInputError, match="net must be non-negative"):
            gross_from_net(-1, 1, 2025)

    @pytest.mark.parametrize("max_iterations", [0, -1, 2.5, True])
    def test_gross_from_net_rejects_bad_iteration_cap(self, max_iterations):
        with pytest.raises(InvalidInputError, match="max_iterations"):
            gross_from_net(1_000_000, 1, 2025, max_iterations=max_iterations)

    def test_gross_from_net_rejects_small_multiplier(self):
        with pytest.raises(InvalidInputError, match="upper_multiplier"):
            gross_from_net(1_000_000, 1, 2025, upper_multiplier=0.5)


class TestCompareLaws:

    def test_new_law_cheaper_at_30m(self):
        comparison = compare_laws(30_000_000, 6, 2025)

        assert comparison.old_law.law_used == LawRegime.OLD
        assert comparison.new_law.law_used == LawRegime.NEW
        assert comparison.old_tax == 1_627_500
        assert comparison.new_tax == 635_000
        assert comparison.savings == 992_500

    def test_same_insurance_under_both_laws(self):
        comparison = compare_laws(60_000_000, 6, 2025)
        assert comparison.old_law.insurance == comparison.new_law.insurance

    def test_ignores_calendar_law(self):
        """A 2027 month can still be priced under the old schedule."""
        comparison = compare_laws(30_000_000, 6, 2027)
        assert comparison.old_law.law_used == LawRegime.OLD
        assert comparison.old_tax == 1_627_500
