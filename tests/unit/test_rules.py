"""Unit tests for tax rule loading and static accessors."""

from datetime import date

import pytest
import yaml
from pydantic import ValidationError

from vnpit.sdk import set_setting
from vnpit.sdk.taxes import (
    EFFECTIVE_DATES,
    LawRegime,
    RulesNotFoundError,
    clear_rules_cache,
    get_bracket_schedule,
    get_deductions,
    get_insurance_rates,
    get_rule_set,
    load_rule_sets,
)


def make_rule_data(effective: str, law: str = "old", brackets=None) -> dict:
    """Minimal valid rule set."""
    if brackets is None:
        brackets = [{"up_to": 5_000_000, "rate": 0.05}, {"up_to": None, "rate": 0.1}]
    return {
        "effective": effective,
        "law": law,
        "brackets": brackets,
        "deductions": {"personal": 11_000_000, "dependent": 4_400_000},
        "insurance": {
            "social_rate": 0.08,
            "health_rate": 0.015,
            "unemployment_rate": 0.01,
            "salary_cap": 46_800_000,
        },
    }


def write_rules(directory, data: dict, name: str = None):
    path = directory / f"{name or data['effective']}.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestBundledRules:

    def test_sorted_by_effective_date(self):
        rule_sets = load_rule_sets()
        dates = [r.effective for r in rule_sets]

        assert dates == sorted(dates)
        assert {r.law for r in rule_sets} == {LawRegime.OLD, LawRegime.NEW}

    def test_rule_set_in_force(self):
        assert get_rule_set(date(2025, 6, 1)).effective == date(2024, 7, 1)
        assert get_rule_set(date(2026, 6, 1)).effective == date(2026, 1, 1)

    def test_date_before_all_rule_sets_uses_earliest(self):
        assert get_rule_set(date(2000, 1, 1)).effective == load_rule_sets()[0].effective

    def test_filter_by_law(self):
        assert get_rule_set(date(2026, 6, 1), LawRegime.OLD).law == LawRegime.OLD

    def test_bracket_schedules(self):
        old = get_bracket_schedule(LawRegime.OLD)
        new = get_bracket_schedule(LawRegime.NEW)

        assert [b.rate for b in old] == [0.05, 0.10, 0.15, 0.20, 0.25, 0.30, 0.35]
        assert [b.rate for b in new] == [0.05, 0.10, 0.20, 0.30, 0.35]
        assert old[0].lower == 0
        assert old[-1].upper is None
        assert all(a.upper == b.lower for a, b in zip(old, old[1:]))

    def test_deductions_and_insurance_accessors(self):
        assert get_deductions(date(2025, 1, 1)).total(2) == 19_800_000
        assert get_insurance_rates(date(2025, 1, 1)).salary_cap == 46_800_000

    def test_effective_dates_are_read_only(self):
        assert EFFECTIVE_DATES["new_pit_law"] == date(2026, 1, 1)
        with pytest.raises(TypeError):
            EFFECTIVE_DATES["new_pit_law"] = date(2026, 7, 1)


class TestRuleValidation:

    def test_empty_directory(self, tmp_path):
        with pytest.raises(RulesNotFoundError):
            load_rule_sets(tmp_path)

    def test_rules_not_found_is_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rule_sets(tmp_path)

    def test_file_name_must_match_effective_date(self, tmp_path):
        write_rules(tmp_path, make_rule_data("2025-01-01"), name="2025-02-01")
        with pytest.raises(ValueError, match="does not match file name"):
            load_rule_sets(tmp_path)

    @pytest.mark.parametrize("brackets", [
        [{"up_to": 5_000_000, "rate": 0.05}],  # top bracket bounded
        [{"up_to": None, "rate": 0.05}, {"up_to": None, "rate": 0.1}],  # unbounded in the middle
        [{"up_to": 5_000_000, "rate": 0.05}, {"up_to": 4_000_000, "rate": 0.1},
         {"up_to": None, "rate": 0.2}],  # bounds decrease
        [{"up_to": 5_000_000, "rate": 0.10}, {"up_to": None, "rate": 0.05}],  # rates decrease
        [],
    ])
    def test_invalid_brackets(self, tmp_path, brackets):
        write_rules(tmp_path, make_rule_data("2025-01-01", brackets=brackets))
        with pytest.raises(ValidationError):
            load_rule_sets(tmp_path)

    def test_unknown_law(self, tmp_path):
        write_rules(tmp_path, make_rule_data("2025-01-01", law="future"))
        with pytest.raises(ValidationError):
            load_rule_sets(tmp_path)


class TestCustomRulesDir:

    def test_tax_rules_dir_setting(self, tmp_path):
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        write_rules(rules_dir, make_rule_data("2024-01-01"))
        write_rules(rules_dir, make_rule_data("2026-01-01", law="new", brackets=[{"up_to": None, "rate": 0.1}]))

        set_setting("tax_rules_dir", str(rules_dir))
        clear_rules_cache()

        assert [r.effective for r in load_rule_sets()] == [date(2024, 1, 1), date(2026, 1, 1)]
        assert len(get_bracket_schedule(LawRegime.NEW)) == 1

    def test_missing_law_raises(self, tmp_path):
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        write_rules(rules_dir, make_rule_data("2024-01-01"))

        set_setting("tax_rules_dir", str(rules_dir))
        clear_rules_cache()

        with pytest.raises(RulesNotFoundError, match="new law"):
            get_rule_set(date(2026, 6, 1), LawRegime.NEW)
