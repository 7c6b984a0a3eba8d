"""Income-timing strategies across the law-transition window.

A strategy is two years of MonthInput entries. Presets are registered
generators mapping (base salary, bonus, dependents) to a Strategy; new
presets are added to PRESETS, the aggregator never branches on them.

Presets:
- normal: bonus paid in its natural month of the first year
- defer-bonus: bonus moved to January of the second year
- optimize: tries every single-month placement across both years plus an
  even 12-way split in each year, keeps the one with the lowest combined tax
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .money import round_vnd
from .schemas import MonthInput, Strategy, StrategyComparison, TwoYearResult
from .taxes import InsuranceOptions
from .validation import (
    InvalidInputError,
    require_amount,
    require_dependents,
    require_period,
    require_region,
)
from .yearly import calculate_two_years

logger = logging.getLogger(__name__)


DEFAULT_FIRST_YEAR = 2025
DEFAULT_BONUS_MONTH = 12


@dataclass(frozen=True)
class PresetParams:
    """Inputs shared by every preset generator."""
    base_salary: int
    bonus: int
    dependents: int = 0
    first_year: int = DEFAULT_FIRST_YEAR
    bonus_month: int = DEFAULT_BONUS_MONTH
    region: int = 1
    insurance_options: Optional[InsuranceOptions] = None
    other_deductions: int = 0
    law_change_date: Optional[date] = None

    @property
    def second_year(self) -> int:
        return self.first_year + 1

    def calc_kwargs(self) -> dict:
        return {
            "region": self.region,
            "insurance_options": self.insurance_options,
            "other_deductions": self.other_deductions,
            "law_change_date": self.law_change_date,
        }


@dataclass(frozen=True)
class PresetConfig:
    """A registered strategy preset."""
    id: str
    name: str
    description: str
    generator: Callable[[PresetParams], Strategy]


def _year_entries(year: int, salary: int, bonuses: Dict[int, int], label: str = "bonus") -> List[MonthInput]:
    """Twelve salary entries, each followed by that month's bonus if any."""
    entries = []
    for month in range(1, 13):
        entries.append(MonthInput.salary(year, month, salary))
        if bonuses.get(month):
            entries.append(MonthInput.bonus(year, month, bonuses[month], label=label))
    return entries


def _even_split(amount: int) -> Dict[int, int]:
    """Split an amount over 12 months; December absorbs the rounding."""
    share = amount // 12
    split = {month: share for month in range(1, 12)}
    split[12] = amount - share * 11
    return split


def _strategy(
    params: PresetParams,
    name: str,
    preset_id: str,
    first_bonuses: Dict[int, int],
    second_bonuses: Dict[int, int],
) -> Strategy:
    return Strategy(
        name=name,
        preset_id=preset_id,
        first_year=_year_entries(params.first_year, params.base_salary, first_bonuses),
        second_year=_year_entries(params.second_year, params.base_salary, second_bonuses),
    )


def _normal(params: PresetParams) -> Strategy:
    return _strategy(
        params, f"Bonus in {params.first_year}-{params.bonus_month:02d}", "normal",
        {params.bonus_month: params.bonus}, {},
    )


def _defer_bonus(params: PresetParams) -> Strategy:
    return _strategy(
        params, f"Bonus deferred to {params.second_year}-01", "defer-bonus",
        {}, {1: params.bonus},
    )


def _optimize_candidates(params: PresetParams) -> List[Tuple[str, Dict[int, int], Dict[int, int]]]:
    """(name, first-year bonuses, second-year bonuses) in evaluation order."""
    candidates = []
    for month in range(1, 13):
        candidates.append((f"Bonus in {params.first_year}-{month:02d}", {month: params.bonus}, {}))
    for month in range(1, 13):
        candidates.append((f"Bonus in {params.second_year}-{month:02d}", {}, {month: params.bonus}))
    split = _even_split(params.bonus)
    candidates.append((f"Bonus spread over {params.first_year}", split, {}))
    candidates.append((f"Bonus spread over {params.second_year}", {}, split))
    return candidates


def _optimize(params: PresetParams) -> Strategy:
    if params.bonus == 0:
        return _strategy(params, "No bonus to place", "optimize", {}, {})

    best: Optional[Strategy] = None
    best_tax = 0
    for name, first_bonuses, second_bonuses in _optimize_candidates(params):
        candidate = _strategy(params, name, "optimize", first_bonuses, second_bonuses)
        result = calculate_two_years(
            candidate.first_year, candidate.second_year, params.dependents,
            years=(params.first_year, params.second_year), **params.calc_kwargs(),
        )
        logger.debug(f"optimize candidate '{name}': combined tax {result.combined_tax}")
        # Strict comparison keeps the earliest candidate on ties
        if best is None or result.combined_tax < best_tax:
            best, best_tax = candidate, result.combined_tax

    logger.debug(f"optimize picked '{best.name}' (combined tax {best_tax})")
    return best.model_copy(update={"name": f"Optimized: {best.name}"})


PRESETS: Dict[str, PresetConfig] = {
    "normal": PresetConfig(
        id="normal",
        name="Normal",
        description="Bonus paid in its natural month",
        generator=_normal,
    ),
    "defer-bonus": PresetConfig(
        id="defer-bonus",
        name="Defer bonus",
        description="Bonus shifted to January of the following year",
        generator=_defer_bonus,
    ),
    "optimize": PresetConfig(
        id="optimize",
        name="Optimize",
        description="Bonus placed in the month (or even split) with the lowest combined tax",
        generator=_optimize,
    ),
}


def get_preset(preset_id: str) -> PresetConfig:
    """Look up a registered preset.

    Raises:
        InvalidInputError: Unknown preset id
    """
    if preset_id not in PRESETS:
        valid = ", ".join(PRESETS)
        raise InvalidInputError(f"Unknown preset '{preset_id}'. Must be one of: {valid}")
    return PRESETS[preset_id]


def build_preset_strategy(
    preset_id: str,
    base_salary: float,
    bonus: float,
    dependents: int = 0,
    *,
    first_year: int = DEFAULT_FIRST_YEAR,
    bonus_month: int = DEFAULT_BONUS_MONTH,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
    law_change_date: Optional[date] = None,
) -> Strategy:
    """Generate the two-year entries of a preset.

    Args:
        preset_id: Key of PRESETS
        base_salary: Monthly gross salary in VND
        bonus: Bonus gross in VND
        dependents: Registered dependents
        first_year: Earlier year of the window (the later one is first_year + 1)
        bonus_month: Natural bonus month in the first year
        region, insurance_options, other_deductions, law_change_date: Used
            by optimize to price candidates

    Raises:
        InvalidInputError: Unknown preset or invalid amounts
    """
    preset = get_preset(preset_id)
    require_amount(base_salary, "base_salary")
    require_amount(bonus, "bonus")
    require_dependents(dependents)
    require_period(bonus_month, first_year)
    require_period(1, first_year + 1)
    require_region(region)
    require_amount(other_deductions, "other_deductions")

    params = PresetParams(
        base_salary=round_vnd(base_salary),
        bonus=round_vnd(bonus),
        dependents=dependents,
        first_year=first_year,
        bonus_month=bonus_month,
        region=region,
        insurance_options=insurance_options,
        other_deductions=round_vnd(other_deductions),
        law_change_date=law_change_date,
    )
    return preset.generator(params)


def custom_strategy(
    name: str,
    first_year: Sequence[MonthInput],
    second_year: Sequence[MonthInput],
) -> Strategy:
    """Strategy from explicit per-month entries, bypassing presets."""
    try:
        return Strategy(name=name, first_year=list(first_year), second_year=list(second_year))
    except ValueError as e:
        raise InvalidInputError(f"Invalid strategy '{name}': {e}")


def compare_strategies(
    strategies: Sequence[Strategy],
    dependents: int = 0,
    *,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
    law_change_date: Optional[date] = None,
) -> StrategyComparison:
    """Price each strategy over its two years and rank by combined tax.

    best_strategy is the index of the lowest combined tax; the earliest
    strategy wins ties. max_savings is measured against strategies[0] and
    is never negative.

    Raises:
        InvalidInputError: No strategies, or a strategy with invalid entries
    """
    if not strategies:
        raise InvalidInputError("At least one strategy is required")

    results: List[TwoYearResult] = [
        calculate_two_years(
            strategy.first_year, strategy.second_year, dependents,
            name=strategy.name,
            region=region,
            insurance_options=insurance_options,
            other_deductions=other_deductions,
            law_change_date=law_change_date,
        )
        for strategy in strategies
    ]

    best_index = 0
    for index, result in enumerate(results):
        if result.combined_tax < results[best_index].combined_tax:
            best_index = index

    baseline = results[0].combined_tax
    return StrategyComparison(
        strategies=results,
        best_strategy=best_index,
        max_savings=max(0, baseline - results[best_index].combined_tax),
        savings_vs_first=[baseline - result.combined_tax for result in results],
    )


def compare_presets(
    base_salary: float,
    bonus: float,
    dependents: int = 0,
    *,
    presets: Sequence[str] = ("normal", "defer-bonus", "optimize"),
    first_year: int = DEFAULT_FIRST_YEAR,
    bonus_month: int = DEFAULT_BONUS_MONTH,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
    law_change_date: Optional[date] = None,
) -> StrategyComparison:
    """Build the given presets for one salary/bonus and compare them."""
    options = {
        "first_year": first_year,
        "bonus_month": bonus_month,
        "region": region,
        "insurance_options": insurance_options,
        "other_deductions": other_deductions,
        "law_change_date": law_change_date,
    }
    strategies = [
        build_preset_strategy(preset_id, base_salary, bonus, dependents, **options)
        for preset_id in presets
    ]
    return compare_strategies(
        strategies, dependents,
        region=region,
        insurance_options=insurance_options,
        other_deductions=other_deductions,
        law_change_date=law_change_date,
    )
