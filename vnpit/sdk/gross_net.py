"""GROSS->NET pipeline and NET->GROSS solver for a single month.

GROSS->NET is a fixed sequence of pure steps:
    1. resolve the law, brackets, deductions and insurance for the month
    2. insurance on gross (capped)
    3. taxable = max(0, gross - insurance - family deduction - other deductions)
    4. progressive tax on taxable
    5. net = gross - insurance - tax

NET->GROSS has no closed form (bracket edges and the insurance cap bend the
curve), so it is a bounded binary search over whole VND using the forward
pipeline. If the iteration cap is hit before the gap closes, the best
candidate found is returned with approximate=True instead of failing.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .money import round_vnd
from .schemas import LawComparison, MonthResult
from .taxes import (
    InsuranceOptions,
    LawRegime,
    MonthRules,
    calc_insurance,
    calculate_progressive_tax,
    resolve_month_rules,
    rules_for_law,
)
from .validation import (
    InvalidInputError,
    require_amount,
    require_dependents,
    require_period,
    require_region,
)

logger = logging.getLogger(__name__)


DEFAULT_MAX_ITERATIONS = 100
DEFAULT_UPPER_MULTIPLIER = 2.0  # net >= 54.5% of gross even at the top bracket
DEFAULT_TOLERANCE = 1  # VND
MAX_FLAT_STRETCH = 8  # gross values sharing one net; 3 seen in practice


@dataclass(frozen=True)
class MonthContext:
    """Everything about a month except the amount."""
    year: int
    month: int
    rules: MonthRules
    dependents: int = 0
    region: int = 1
    insurance_options: Optional[InsuranceOptions] = None
    other_deductions: int = 0
    is_bonus: bool = False
    label: Optional[str] = None


def build_context(
    month: int,
    year: int,
    dependents: int = 0,
    *,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
    is_bonus: bool = False,
    label: Optional[str] = None,
    law_change_date: Optional[date] = None,
    law: Optional[LawRegime] = None,
) -> MonthContext:
    """Validate the month parameters and resolve its rules.

    Args:
        law: Force a schedule instead of resolving it from the date
    """
    require_period(month, year)
    require_dependents(dependents)
    require_region(region)
    require_amount(other_deductions, "other_deductions")

    if law is None:
        rules = resolve_month_rules(year, month, law_change_date)
    else:
        rules = rules_for_law(year, month, law)

    return MonthContext(
        year=year,
        month=month,
        rules=rules,
        dependents=dependents,
        region=region,
        insurance_options=insurance_options,
        other_deductions=round_vnd(other_deductions),
        is_bonus=is_bonus,
        label=label,
    )


def run_pipeline(gross: int, ctx: MonthContext) -> MonthResult:
    """Forward computation for an already-validated month. Never fails."""
    gross = max(0, gross)
    insurance = calc_insurance(gross, ctx.rules.insurance, ctx.region, ctx.insurance_options)
    family_deduction = round_vnd(ctx.rules.deductions.total(ctx.dependents))

    taxable = max(0, gross - insurance.total - family_deduction - ctx.other_deductions)
    computation = calculate_progressive_tax(taxable, ctx.rules.brackets)

    net = gross - insurance.total - computation.tax

    return MonthResult(
        month=ctx.month,
        year=ctx.year,
        gross=gross,
        insurance=insurance,
        family_deduction=family_deduction,
        other_deductions=ctx.other_deductions,
        taxable_income=taxable,
        tax=computation.tax,
        net=net,
        law_used=ctx.rules.law,
        marginal_rate=computation.marginal_rate,
        effective_rate=computation.tax / gross if gross > 0 else 0,
        dependents=ctx.dependents,
        is_bonus=ctx.is_bonus,
        label=ctx.label,
        brackets=computation.breakdown,
    )


def _centre_of_flat_stretch(lowest: MonthResult, ctx: MonthContext) -> MonthResult:
    """Move from the lowest gross giving a net to the middle of its stretch.

    Rounding insurance components and tax separately lets a few consecutive
    gross values share one net. The middle of that run is within 1 VND of
    every gross in it.
    """
    highest = lowest
    for _ in range(MAX_FLAT_STRETCH):
        candidate = run_pipeline(highest.gross + 1, ctx)
        if candidate.net != lowest.net:
            break
        highest = candidate

    if highest.gross - lowest.gross < 2:
        return lowest
    return run_pipeline((lowest.gross + highest.gross) // 2, ctx)


def solve_gross(
    target_net: int,
    ctx: MonthContext,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    upper_multiplier: float = DEFAULT_UPPER_MULTIPLIER,
    tolerance: int = DEFAULT_TOLERANCE,
) -> MonthResult:
    """Binary search for the gross whose net equals target_net.

    The search interval is [target_net, target_net * upper_multiplier]. The
    candidate with the smallest |net - target| is kept (lower gross wins
    ties); the result is approximate when that gap is not below tolerance.
    On an exact hit the middle of the run of gross values sharing that net
    is returned, so converting a gross to net and back lands within 1 VND.
    """
    target_net = max(0, target_net)

    if target_net == 0:
        result = run_pipeline(0, ctx)
        return result.model_copy(update={"target_net": 0})

    lo = target_net
    hi = max(lo, int(math.ceil(target_net * upper_multiplier)))
    best: Optional[MonthResult] = None
    best_gap = 0
    iterations = 0

    while lo <= hi and iterations < max_iterations:
        iterations += 1
        mid = (lo + hi) // 2
        candidate = run_pipeline(mid, ctx)
        gap = candidate.net - target_net

        if best is None or abs(gap) < abs(best_gap) or (abs(gap) == abs(best_gap) and mid < best.gross):
            best, best_gap = candidate, gap

        if gap >= 0:
            hi = mid - 1
        else:
            lo = mid + 1

    if best_gap == 0:
        best = _centre_of_flat_stretch(best, ctx)

    approximate = abs(best_gap) >= tolerance
    if approximate:
        logger.warning(
            f"NET->GROSS for {ctx.year}-{ctx.month:02d} stopped after {iterations} iteration(s): "
            f"target {target_net}, closest net {best.net} at gross {best.gross}"
        )
    else:
        logger.debug(f"NET->GROSS {target_net} -> {best.gross} in {iterations} iteration(s)")

    return best.model_copy(update={
        "target_net": target_net,
        "approximate": approximate,
        "iterations": iterations,
    })


def net_from_gross(
    gross: float,
    month: int,
    year: int,
    dependents: int = 0,
    *,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
    is_bonus: bool = False,
    law_change_date: Optional[date] = None,
) -> MonthResult:
    """Compute take-home pay for a monthly gross.

    Args:
        gross: Monthly gross income in VND (>= 0), rounded to whole VND
        month: Calendar month (1-12)
        year: Calendar year
        dependents: Registered dependents
        region: Minimum-wage region 1-4 (unemployment insurance cap)
        insurance_options: Insurance components to include (all by default)
        other_deductions: Voluntary pension and charity contributions that
            reduce taxable income
        is_bonus: Mark the result as a bonus payment
        law_change_date: Override the date the new law takes effect

    Returns:
        MonthResult

    Raises:
        InvalidInputError: Negative amounts, invalid month/year/region or
            dependents
    """
    require_amount(gross, "gross")
    ctx = build_context(
        month, year, dependents,
        region=region,
        insurance_options=insurance_options,
        other_deductions=other_deductions,
        is_bonus=is_bonus,
        law_change_date=law_change_date,
    )
    return run_pipeline(round_vnd(gross), ctx)


def gross_from_net(
    net: float,
    month: int,
    year: int,
    dependents: int = 0,
    *,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
    is_bonus: bool = False,
    law_change_date: Optional[date] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    upper_multiplier: float = DEFAULT_UPPER_MULTIPLIER,
    tolerance: int = DEFAULT_TOLERANCE,
) -> MonthResult:
    """Find the monthly gross that produces a target take-home pay.

    Same parameters as net_from_gross, plus solver controls. The result's
    approximate flag is set when the iteration cap stopped the search with
    a gap of at least `tolerance` VND; it is never an error.

    Raises:
        InvalidInputError: As net_from_gross, or invalid solver controls
    """
    require_amount(net, "net")
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, int) or max_iterations < 1:
        raise InvalidInputError(f"max_iterations must be a positive integer, got {max_iterations!r}")
    if upper_multiplier < 1:
        raise InvalidInputError(f"upper_multiplier must be >= 1, got {upper_multiplier}")

    ctx = build_context(
        month, year, dependents,
        region=region,
        insurance_options=insurance_options,
        other_deductions=other_deductions,
        is_bonus=is_bonus,
        law_change_date=law_change_date,
    )
    return solve_gross(round_vnd(net), ctx, max_iterations, upper_multiplier, tolerance)


def compare_laws(
    gross: float,
    month: int,
    year: int,
    dependents: int = 0,
    *,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
) -> LawComparison:
    """Price the same month under the old and the new schedule.

    Returns:
        LawComparison; savings > 0 means the new law taxes less
    """
    require_amount(gross, "gross")
    results = {}
    for law in (LawRegime.OLD, LawRegime.NEW):
        ctx = build_context(
            month, year, dependents,
            region=region,
            insurance_options=insurance_options,
            other_deductions=other_deductions,
            law=law,
        )
        results[law] = run_pipeline(round_vnd(gross), ctx)

    return LawComparison(
        old_law=results[LawRegime.OLD],
        new_law=results[LawRegime.NEW],
        savings=results[LawRegime.OLD].tax - results[LawRegime.NEW].tax,
    )
