"""Monthly/yearly aggregation.

Runs the single-month pipeline over a year of MonthInput entries and folds
the results into a YearlyResult. Law selection happens per month, so a year
that straddles the law-change date shows both schedules in its breakdown.

Entries sharing a calendar month are stacked in input order: the month is
taxed progressively on its cumulative income, and each entry reports the
increment it adds. A 60M bonus paid with a 30M salary is therefore taxed
as 90M of ordinary income for that month, not at a flat supplemental rate.

Usage:
    from vnpit.sdk.yearly import calculate_year, regular_months

    entries = regular_months(2026, 30_000_000)
    entries.append(MonthInput.bonus(2026, 12, 60_000_000, label="13th month"))
    result = calculate_year(entries, dependents=1)
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .gross_net import (
    DEFAULT_MAX_ITERATIONS,
    MonthContext,
    build_context,
    run_pipeline,
    solve_gross,
)
from .money import round_vnd
from .schemas import MonthInput, MonthResult, TwoYearResult, YearlyResult
from .taxes import NEW_LAW_EFFECTIVE_DATE, InsuranceBreakdown, InsuranceOptions, LawRegime
from .validation import InvalidInputError, require_amount, require_dependents

logger = logging.getLogger(__name__)


# Bonus shapes from the monthly planner: month -> multiple of base salary
BONUS_SHAPES: Dict[str, Dict[int, float]] = {
    "tet-bonus": {1: 1.0},
    "mid-year": {6: 0.5, 12: 0.5},
    "13th-month": {12: 1.0},
}


def regular_months(year: int, salary: float, months: Iterable[int] = range(1, 13)) -> List[MonthInput]:
    """Regular salary entries for the given months of a year."""
    require_amount(salary, "salary")
    return [MonthInput.salary(year, month, salary) for month in months]


def build_year_inputs(year: int, salary: float, bonus_shape: Optional[str] = None) -> List[MonthInput]:
    """Twelve salary entries plus the bonus entries of a named shape.

    Bonus entries are interleaved right after the salary of their month.

    Raises:
        InvalidInputError: Unknown bonus shape
    """
    if bonus_shape is not None and bonus_shape not in BONUS_SHAPES:
        valid = ", ".join(sorted(BONUS_SHAPES))
        raise InvalidInputError(f"Unknown bonus shape '{bonus_shape}'. Must be one of: {valid}")

    shape = BONUS_SHAPES.get(bonus_shape, {}) if bonus_shape else {}
    entries = []
    for month in range(1, 13):
        entries.append(MonthInput.salary(year, month, salary))
        if month in shape:
            entries.append(MonthInput.bonus(year, month, salary * shape[month], label=bonus_shape))
    return entries


def _coerce_entries(entries: Sequence[Union[MonthInput, dict]]) -> List[MonthInput]:
    coerced = []
    for entry in entries:
        if isinstance(entry, MonthInput):
            coerced.append(entry)
        else:
            try:
                coerced.append(MonthInput.model_validate(entry))
            except ValueError as e:
                raise InvalidInputError(f"Invalid month entry {entry!r}: {e}")
    return coerced


def _increment(cumulative: MonthResult, previous: Optional[MonthResult], entry: MonthInput) -> MonthResult:
    """What `entry` adds on top of the month's earlier entries."""
    update = {"is_bonus": entry.is_bonus, "label": entry.label}
    if previous is None:
        return cumulative.model_copy(update=update)

    gross = cumulative.gross - previous.gross
    tax = cumulative.tax - previous.tax
    insurance = InsuranceBreakdown(
        social=cumulative.insurance.social - previous.insurance.social,
        health=cumulative.insurance.health - previous.insurance.health,
        unemployment=cumulative.insurance.unemployment - previous.insurance.unemployment,
    )
    target_net = None
    if cumulative.target_net is not None:
        target_net = cumulative.target_net - previous.net

    return MonthResult(
        month=cumulative.month,
        year=cumulative.year,
        gross=gross,
        insurance=insurance,
        family_deduction=0,
        other_deductions=0,
        taxable_income=cumulative.taxable_income - previous.taxable_income,
        tax=tax,
        net=cumulative.net - previous.net,
        law_used=cumulative.law_used,
        marginal_rate=cumulative.marginal_rate,
        effective_rate=min(1.0, max(0.0, tax / gross)) if gross > 0 else 0,
        dependents=cumulative.dependents,
        target_net=target_net,
        approximate=cumulative.approximate,
        iterations=cumulative.iterations,
        **update,
    )


def _uniform_total_tax(total_gross: int, contexts: Dict[int, MonthContext]) -> int:
    """Tax if total_gross were paid as twelve equal regular months."""
    if total_gross <= 0:
        return 0
    monthly = round_vnd(total_gross / 12)
    return sum(run_pipeline(monthly, contexts[month]).tax for month in range(1, 13))


def calculate_year(
    entries: Sequence[Union[MonthInput, dict]],
    dependents: int = 0,
    *,
    year: Optional[int] = None,
    region: int = 1,
    insurance_options: Optional[InsuranceOptions] = None,
    other_deductions: float = 0,
    law_change_date: Optional[date] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> YearlyResult:
    """Aggregate a year of entries into a YearlyResult.

    Args:
        entries: MonthInput entries (or dicts) for one calendar year, in
            chronological order; bonus entries interleaved at their month
        dependents: Default dependents (an entry's dependents_override wins;
            the first entry of a month fixes the month's count)
        year: Required when entries is empty; otherwise checked against them
        region: Minimum-wage region 1-4
        insurance_options: Insurance components to include
        other_deductions: Monthly pension/charity contributions, applied
            once per month
        law_change_date: Override the date the new law takes effect
        max_iterations: Solver cap for net_income entries

    Returns:
        YearlyResult; monthly_breakdown preserves input order

    Raises:
        InvalidInputError: Invalid entries, or entries from another year
    """
    entries = _coerce_entries(entries)
    require_dependents(dependents)

    years = {entry.year for entry in entries}
    if year is None:
        if not entries:
            raise InvalidInputError("year is required when there are no entries")
        year = entries[0].year
    if years - {year}:
        raise InvalidInputError(
            f"All entries must belong to {year}; found {', '.join(str(y) for y in sorted(years - {year}))}"
        )

    if law_change_date is None:
        law_change_date = NEW_LAW_EFFECTIVE_DATE

    def context_for(month: int, month_dependents: int) -> MonthContext:
        return build_context(
            month, year, month_dependents,
            region=region,
            insurance_options=insurance_options,
            other_deductions=other_deductions,
            law_change_date=law_change_date,
        )

    # month -> (context, cumulative result so far)
    months: Dict[int, Tuple[MonthContext, Optional[MonthResult]]] = {}
    breakdown: List[MonthResult] = []

    for entry in entries:
        if entry.month not in months:
            month_dependents = entry.dependents_override if entry.dependents_override is not None else dependents
            months[entry.month] = (context_for(entry.month, month_dependents), None)

        ctx, previous = months[entry.month]
        previous_gross = previous.gross if previous else 0
        previous_net = previous.net if previous else 0

        if entry.gross_income is not None:
            cumulative = run_pipeline(previous_gross + round_vnd(entry.gross_income), ctx)
        else:
            amount = round_vnd(entry.net_income)
            if amount == 0 and previous is not None:
                cumulative = previous
            else:
                cumulative = solve_gross(previous_net + amount, ctx, max_iterations)
                if previous is not None and cumulative.gross < previous.gross:
                    cumulative = previous.model_copy(update={"approximate": True})

        breakdown.append(_increment(cumulative, previous, entry))
        months[entry.month] = (ctx, cumulative)

    total_gross = sum(r.gross for r in breakdown)
    total_insurance = sum(r.insurance.total for r in breakdown)
    total_tax = sum(r.tax for r in breakdown)

    contexts = {month: ctx for month, (ctx, _) in months.items()}
    for month in range(1, 13):
        if month not in contexts:
            contexts[month] = context_for(month, dependents)
    uniform_tax = _uniform_total_tax(total_gross, contexts)

    old_law_months = sum(1 for r in breakdown if r.law_used == LawRegime.OLD)

    result = YearlyResult(
        year=year,
        total_gross=total_gross,
        total_bonus_gross=sum(r.gross for r in breakdown if r.is_bonus),
        total_insurance=total_insurance,
        total_taxable_income=sum(r.taxable_income for r in breakdown),
        total_tax=total_tax,
        total_net=sum(r.net for r in breakdown),
        effective_rate=min(1.0, total_tax / total_gross) if total_gross > 0 else 0,
        monthly_breakdown=breakdown,
        old_law_months=old_law_months,
        new_law_months=len(breakdown) - old_law_months,
        approximate=any(r.approximate for r in breakdown),
        uniform_total_tax=uniform_tax,
        tax_difference=total_tax - uniform_tax,
    )

    logger.debug(
        f"{year}: {len(breakdown)} entries, gross {total_gross}, tax {total_tax} "
        f"({old_law_months} old-law / {len(breakdown) - old_law_months} new-law)"
    )
    return result


def calculate_two_years(
    first_year: Sequence[Union[MonthInput, dict]],
    second_year: Sequence[Union[MonthInput, dict]],
    dependents: int = 0,
    *,
    years: Optional[Tuple[int, int]] = None,
    name: Optional[str] = None,
    **kwargs,
) -> TwoYearResult:
    """Aggregate two consecutive years and combine their totals.

    Args:
        years: (first, second) calendar years; inferred from entries if omitted
        name: Strategy name carried on the result
        **kwargs: Passed through to calculate_year

    Raises:
        InvalidInputError: The years are not consecutive
    """
    first_year_number, second_year_number = years if years else (None, None)
    first = calculate_year(first_year, dependents, year=first_year_number, **kwargs)
    second = calculate_year(second_year, dependents, year=second_year_number, **kwargs)

    if second.year != first.year + 1:
        raise InvalidInputError(f"Years must be consecutive, got {first.year} and {second.year}")

    return TwoYearResult.combine(first, second, name=name)
