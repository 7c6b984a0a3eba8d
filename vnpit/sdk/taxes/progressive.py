"""Progressive bracket tax engine.

Walks a bracket schedule in ascending order, taxing the slice of income
inside each bracket at that bracket's rate. Rounding happens once, on the
total, so per-bracket fractions never compound.
"""

from typing import Sequence

from ..money import round_vnd
from .schemas import Bracket, BracketTax, TaxComputation


def calculate_progressive_tax(taxable_income: float, brackets: Sequence[Bracket]) -> TaxComputation:
    """Calculate tax on monthly taxable income.

    Args:
        taxable_income: Income after insurance and deductions. Zero or
            negative values yield zero tax and zero rates.
        brackets: Resolved bracket schedule, ascending, covering [0, inf)

    Returns:
        TaxComputation with rounded tax, marginal and effective rates, and
        the per-bracket breakdown
    """
    if taxable_income <= 0:
        return TaxComputation(taxable_income=0, tax=0, marginal_rate=0, effective_rate=0)

    total = 0.0
    marginal_rate = 0.0
    breakdown = []

    for bracket in brackets:
        if taxable_income <= bracket.lower:
            break

        upper = bracket.upper if bracket.upper is not None else taxable_income
        amount = min(taxable_income, upper) - bracket.lower
        bracket_tax = amount * bracket.rate

        breakdown.append(BracketTax(
            lower=bracket.lower,
            upper=bracket.upper,
            rate=bracket.rate,
            taxable_amount=amount,
            tax=bracket_tax,
        ))
        total += bracket_tax
        marginal_rate = bracket.rate

        if bracket.upper is None or taxable_income <= bracket.upper:
            break

    tax = round_vnd(total)

    return TaxComputation(
        taxable_income=taxable_income,
        tax=tax,
        marginal_rate=marginal_rate,
        effective_rate=min(1.0, tax / taxable_income),
        breakdown=breakdown,
    )
