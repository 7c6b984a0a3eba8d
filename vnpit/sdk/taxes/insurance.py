"""Compulsory insurance contributions (BHXH, BHYT, BHTN).

Each component is rate x min(gross, cap), rounded to whole VND on its own
before the components are summed, as payroll does.
"""

from typing import Optional

from ..money import round_vnd
from .schemas import InsuranceBreakdown, InsuranceOptions, InsuranceRules


def calc_insurance(
    gross: float,
    rates: InsuranceRules,
    region: int = 1,
    options: Optional[InsuranceOptions] = None,
) -> InsuranceBreakdown:
    """Calculate employee insurance for one month.

    Args:
        gross: Monthly gross salary (>= 0)
        rates: Insurance rules in force for the month
        region: Minimum-wage region (selects the BHTN cap)
        options: Components to include (all by default)

    Returns:
        InsuranceBreakdown with social, health, unemployment and total
    """
    if options is None:
        options = InsuranceOptions()

    if gross <= 0:
        return InsuranceBreakdown.zero()

    capped = min(gross, rates.salary_cap)
    unemployment_base = min(gross, rates.unemployment_cap(region))

    return InsuranceBreakdown(
        social=round_vnd(capped * rates.social_rate) if options.social else 0,
        health=round_vnd(capped * rates.health_rate) if options.health else 0,
        unemployment=round_vnd(unemployment_base * rates.unemployment_rate) if options.unemployment else 0,
    )
