"""Pydantic schemas for monthly, yearly and strategy results.

Result models are frozen: they are computed values, recomputed whenever the
inputs change, never patched in place. Input models use extra='forbid' so a
misspelled field in a strategy file is an error rather than silently ignored.
All money fields are whole VND.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .taxes.schemas import BracketTax, InsuranceBreakdown, LawRegime


# =============================================================================
# Inputs
# =============================================================================


class MonthInput(BaseModel):
    """One income entry in a calendar month.

    A month normally has one regular entry; bonus entries (Tet bonus,
    13th-month pay) are extra entries for the month they are paid in.
    Exactly one of gross_income / net_income is given; a net_income entry
    is solved back to gross.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: int = Field(..., ge=1, le=12, description="Calendar month (1-12)")
    year: int = Field(..., ge=1, le=9999, description="Calendar year")
    gross_income: Optional[float] = Field(default=None, ge=0, description="Gross amount paid")
    net_income: Optional[float] = Field(default=None, ge=0, description="Take-home amount to solve for")
    is_bonus: bool = Field(default=False, description="Irregular income, not regular salary")
    dependents_override: Optional[int] = Field(
        default=None, ge=0, description="Dependents for this month if different from the default"
    )
    label: Optional[str] = Field(default=None, description="Free-text label (e.g., 'Tet bonus')")

    @model_validator(mode="after")
    def check_one_amount(self) -> "MonthInput":
        """Exactly one of gross_income and net_income must be set."""
        if (self.gross_income is None) == (self.net_income is None):
            raise ValueError("exactly one of gross_income or net_income is required")
        return self

    @classmethod
    def salary(cls, year: int, month: int, gross: float) -> "MonthInput":
        """Regular salary entry."""
        return cls(year=year, month=month, gross_income=gross)

    @classmethod
    def bonus(cls, year: int, month: int, gross: float, label: Optional[str] = None) -> "MonthInput":
        """Bonus entry paid in the given month."""
        return cls(year=year, month=month, gross_income=gross, is_bonus=True, label=label)


class Strategy(BaseModel):
    """A named plan for timing income across two consecutive years."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    first_year: List[MonthInput] = Field(..., description="Entries for the earlier year")
    second_year: List[MonthInput] = Field(..., description="Entries for the later year")
    preset_id: Optional[str] = Field(default=None, description="Preset that generated it, if any")


# =============================================================================
# Results
# =============================================================================


class MonthResult(BaseModel):
    """Result of the GROSS->NET pipeline for one entry.

    For stacked entries (a bonus on top of salary in the same month) the
    amounts are the increment this entry adds to the month.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)
    gross: int = Field(..., ge=0, description="Gross income")
    insurance: InsuranceBreakdown = Field(..., description="Employee insurance contributions")
    family_deduction: int = Field(default=0, description="Personal + dependent deduction applied")
    other_deductions: int = Field(default=0, description="Pension/charity contributions applied")
    taxable_income: int = Field(..., description="Income the brackets were applied to")
    tax: int = Field(..., description="PIT")
    net: int = Field(..., description="gross - insurance - tax")
    law_used: LawRegime
    marginal_rate: float = Field(default=0, ge=0, le=1)
    effective_rate: float = Field(default=0, ge=0, le=1, description="tax / gross")
    dependents: int = Field(default=0, ge=0)
    is_bonus: bool = False
    label: Optional[str] = None
    brackets: List[BracketTax] = Field(default_factory=list, description="Per-bracket tax detail")
    # NET->GROSS only
    target_net: Optional[int] = Field(default=None, description="Requested take-home, if solved")
    approximate: bool = Field(default=False, description="Solver stopped before reaching the target")
    iterations: int = Field(default=0, ge=0, description="Solver iterations used")

    @model_validator(mode="after")
    def check_coherence(self) -> "MonthResult":
        """net must equal gross - insurance - tax exactly."""
        expected = self.gross - self.insurance.total - self.tax
        if self.net != expected:
            raise ValueError(
                f"net ({self.net}) != gross - insurance - tax ({expected})"
            )
        return self


class YearlyResult(BaseModel):
    """Per-entry results for one calendar year and their totals."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    total_gross: int = 0
    total_bonus_gross: int = Field(default=0, description="Part of total_gross paid as bonuses")
    total_insurance: int = 0
    total_taxable_income: int = 0
    total_tax: int = 0
    total_net: int = 0
    effective_rate: float = Field(default=0, ge=0, le=1, description="total_tax / total_gross")
    monthly_breakdown: List[MonthResult] = Field(default_factory=list)
    old_law_months: int = Field(default=0, ge=0)
    new_law_months: int = Field(default=0, ge=0)
    approximate: bool = Field(default=False, description="Any entry was solved approximately")
    uniform_total_tax: int = Field(
        default=0, description="Tax if total_gross were paid as 12 equal regular months"
    )
    tax_difference: int = Field(default=0, description="total_tax - uniform_total_tax")

    @model_validator(mode="after")
    def check_totals(self) -> "YearlyResult":
        """Law partition and net identity."""
        errors = []
        if self.old_law_months + self.new_law_months != len(self.monthly_breakdown):
            errors.append(
                f"old_law_months + new_law_months ({self.old_law_months + self.new_law_months}) "
                f"!= entries ({len(self.monthly_breakdown)})"
            )
        if self.total_net != self.total_gross - self.total_insurance - self.total_tax:
            errors.append(
                f"total_net ({self.total_net}) != total_gross - total_insurance - total_tax "
                f"({self.total_gross - self.total_insurance - self.total_tax})"
            )
        if errors:
            raise ValueError("; ".join(errors))
        return self

    @property
    def regular_gross(self) -> int:
        """Gross paid as regular salary (bonuses excluded)."""
        return self.total_gross - self.total_bonus_gross


class TwoYearResult(BaseModel):
    """Two consecutive YearlyResults (2025 + 2026 by default) combined."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Optional[str] = None
    first_year: YearlyResult
    second_year: YearlyResult
    combined_gross: int
    combined_insurance: int
    combined_tax: int
    combined_net: int
    combined_effective_rate: float = Field(..., ge=0, le=1)

    @classmethod
    def combine(cls, first: YearlyResult, second: YearlyResult, name: Optional[str] = None) -> "TwoYearResult":
        """Fold two YearlyResults into combined totals."""
        gross = first.total_gross + second.total_gross
        tax = first.total_tax + second.total_tax
        return cls(
            name=name,
            first_year=first,
            second_year=second,
            combined_gross=gross,
            combined_insurance=first.total_insurance + second.total_insurance,
            combined_tax=tax,
            combined_net=first.total_net + second.total_net,
            combined_effective_rate=tax / gross if gross > 0 else 0,
        )


class StrategyComparison(BaseModel):
    """Ranked comparison of strategies by combined tax."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    strategies: List[TwoYearResult]
    best_strategy: int = Field(..., ge=0, description="Index of lowest combined_tax (earliest wins ties)")
    max_savings: int = Field(..., ge=0, description="strategies[0] tax minus best tax, never negative")
    savings_vs_first: List[int] = Field(
        default_factory=list, description="strategies[0].combined_tax - each strategy's combined_tax"
    )

    @property
    def best(self) -> TwoYearResult:
        return self.strategies[self.best_strategy]


class LawComparison(BaseModel):
    """The same month priced under both schedules."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    old_law: MonthResult
    new_law: MonthResult
    savings: int = Field(..., description="old_law.tax - new_law.tax (negative = new law costs more)")

    @property
    def old_tax(self) -> int:
        return self.old_law.tax

    @property
    def new_tax(self) -> int:
        return self.new_law.tax
