"""Tax rules loading and static accessors.

Rule sets live in tax-rules/YYYY-MM-DD.yaml, one file per effective date.
A new law year is added as a new file; existing files are never edited, so
historical months always recompute with the rules that applied to them.
"""

import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Optional

import yaml

from .schemas import DeductionRules, InsuranceRules, LawRegime, RuleSet

logger = logging.getLogger(__name__)


class RulesNotFoundError(FileNotFoundError):
    """Raised when no tax-rules/*.yaml file is available."""
    pass


# Named calendar dates used by the resolvers (read-only)
EFFECTIVE_DATES = MappingProxyType({
    "new_pit_law": date(2026, 1, 1),
    "gold_transfer_tax": date(2026, 7, 1),
})

NEW_LAW_EFFECTIVE_DATE = EFFECTIVE_DATES["new_pit_law"]


@lru_cache(maxsize=None)
def _get_tax_rules_dir() -> Path:
    """Get the tax-rules directory path (resolved once per process).

    A tax_rules_dir setting wins over the rules bundled with the package.
    """
    from ..config import get_tax_rules_dir

    custom = get_tax_rules_dir()
    if custom is not None:
        return custom
    return Path(__file__).parent.parent.parent / "tax-rules"  # taxes -> sdk -> vnpit


def _load_rule_file(path: Path) -> RuleSet:
    with open(path, "r") as f:
        data = yaml.safe_load(f)

    rule_set = RuleSet.model_validate(data)
    if rule_set.effective.isoformat() != path.stem:
        raise ValueError(
            f"{path.name}: effective date {rule_set.effective} does not match file name"
        )
    return rule_set


@lru_cache(maxsize=None)
def _load_from_dir(rules_dir: Path) -> tuple:
    files = sorted(rules_dir.glob("*.yaml"))
    if not files:
        raise RulesNotFoundError(f"No tax rules files found in {rules_dir}")

    rule_sets = tuple(sorted((_load_rule_file(p) for p in files), key=lambda r: r.effective))
    logger.debug(
        f"loaded {len(rule_sets)} rule set(s) from {rules_dir}: "
        + ", ".join(f"{r.effective} ({r.law.value})" for r in rule_sets)
    )
    return rule_sets


def load_rule_sets(rules_dir: Optional[Path] = None) -> tuple:
    """Load every rule set, sorted by effective date (ascending).

    Results are cached per directory for the life of the process.
    """
    return _load_from_dir(Path(rules_dir) if rules_dir else _get_tax_rules_dir())


def clear_rules_cache() -> None:
    """Forget loaded rule sets (used after changing tax_rules_dir)."""
    _get_tax_rules_dir.cache_clear()
    _load_from_dir.cache_clear()


def get_rule_set(on: date, law: Optional[LawRegime] = None) -> RuleSet:
    """Get the rule set in force on a date.

    Picks the latest rule set whose effective date is on or before `on`.
    If `on` predates every rule set, the earliest one is used.

    Args:
        on: Date to look up
        law: Restrict the search to rule sets of one law. Used when the
            law-change date has been moved away from the rule file dates,
            e.g. the July 2026 draft where January-June 2026 stay on the
            old schedule.
    """
    candidates = [r for r in load_rule_sets() if law is None or r.law == law]
    if not candidates:
        raise RulesNotFoundError(f"No rule set defined for the {law.value} law")

    in_force = [r for r in candidates if r.effective <= on]
    if not in_force:
        return candidates[0]
    return in_force[-1]


def get_bracket_schedule(law: LawRegime, on: Optional[date] = None) -> tuple:
    """Resolved brackets for a law (latest version of that law by default)."""
    if on is None:
        on = date.max
    return get_rule_set(on, law).schedule


def get_deductions(on: date, law: Optional[LawRegime] = None) -> DeductionRules:
    """Family deductions in force on a date."""
    return get_rule_set(on, law).deductions


def get_insurance_rates(on: date) -> InsuranceRules:
    """Insurance rates and caps in force on a date.

    Insurance follows the calendar, not the PIT law.
    """
    return get_rule_set(on).insurance
