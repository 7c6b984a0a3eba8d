"""Pydantic schemas for tax rules validation.

These schemas validate the tax-rules/*.yaml files and provide typed access
to bracket schedules, family deductions, and insurance rates and caps.
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class LawRegime(str, Enum):
    """Which PIT law governs a month."""

    OLD = "old"
    NEW = "new"


class TaxBracket(BaseModel):
    """Single progressive bracket entry as written in the YAML file."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[float] = Field(default=None, gt=0, description="Upper bound (None for the top bracket)")
    rate: float = Field(..., ge=0, le=1, description="Tax rate as decimal")


class Bracket(BaseModel):
    """A bracket with both bounds resolved: [lower, upper)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    lower: float = Field(..., ge=0)
    upper: Optional[float] = Field(default=None, description="None = no cap")
    rate: float = Field(..., ge=0, le=1)


class DeductionRules(BaseModel):
    """Monthly family deductions (giảm trừ gia cảnh)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    personal: float = Field(..., ge=0, description="Personal deduction per month")
    dependent: float = Field(..., ge=0, description="Deduction per dependent per month")

    def total(self, dependents: int) -> float:
        """Total family deduction for a dependent count."""
        return self.personal + self.dependent * dependents


class InsuranceRules(BaseModel):
    """Employee-side compulsory insurance rates and salary caps."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    social_rate: float = Field(..., ge=0, le=1, description="BHXH rate")
    health_rate: float = Field(..., ge=0, le=1, description="BHYT rate")
    unemployment_rate: float = Field(..., ge=0, le=1, description="BHTN rate")
    salary_cap: float = Field(..., gt=0, description="Cap on salary subject to BHXH/BHYT")
    unemployment_caps: Dict[int, float] = Field(
        default_factory=dict,
        description="Cap on salary subject to BHTN, keyed by minimum-wage region",
    )

    @property
    def total_rate(self) -> float:
        """Combined employee rate (10.5% under current rules)."""
        return self.social_rate + self.health_rate + self.unemployment_rate

    def unemployment_cap(self, region: int) -> float:
        """BHTN cap for a region, falling back to the general salary cap."""
        return self.unemployment_caps.get(region, self.salary_cap)


class RuleSet(BaseModel):
    """Complete tax rules effective from a date."""
    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow unknown fields for forward compat

    effective: date
    law: LawRegime
    brackets: List[TaxBracket] = Field(..., min_length=1)
    deductions: DeductionRules
    insurance: InsuranceRules

    @model_validator(mode="after")
    def check_brackets(self) -> "RuleSet":
        """Brackets must cover [0, inf) with increasing bounds and rates."""
        errors = []
        previous_upper = 0.0
        previous_rate = 0.0
        for i, bracket in enumerate(self.brackets):
            is_last = i == len(self.brackets) - 1
            if bracket.up_to is None and not is_last:
                errors.append(f"bracket {i + 1}: only the last bracket may be unbounded")
            if bracket.up_to is not None and is_last:
                errors.append(f"bracket {i + 1}: the last bracket must be unbounded (up_to: null)")
            if bracket.up_to is not None and bracket.up_to <= previous_upper:
                errors.append(
                    f"bracket {i + 1}: up_to {bracket.up_to:,.0f} must exceed {previous_upper:,.0f}"
                )
            if bracket.rate < previous_rate:
                errors.append(
                    f"bracket {i + 1}: rate {bracket.rate} is lower than previous rate {previous_rate}"
                )
            if bracket.up_to is not None:
                previous_upper = bracket.up_to
            previous_rate = bracket.rate

        if errors:
            raise ValueError("; ".join(errors))

        return self

    @property
    def schedule(self) -> tuple:
        """Brackets with resolved lower bounds, ascending."""
        resolved = []
        lower = 0.0
        for bracket in self.brackets:
            resolved.append(Bracket(lower=lower, upper=bracket.up_to, rate=bracket.rate))
            if bracket.up_to is not None:
                lower = bracket.up_to
        return tuple(resolved)


# =============================================================================
# Calculation results
# =============================================================================


class BracketTax(BaseModel):
    """Tax attributed to one bracket (unrounded)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    lower: float
    upper: Optional[float] = Field(default=None, description="None = top bracket")
    rate: float
    taxable_amount: float = Field(..., ge=0, description="Portion of income inside this bracket")
    tax: float = Field(..., ge=0)


class TaxComputation(BaseModel):
    """Result of one progressive bracket walk."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    taxable_income: float = Field(..., ge=0)
    tax: int = Field(..., ge=0, description="Tax rounded to whole VND")
    marginal_rate: float = Field(..., ge=0, le=1, description="Rate of the last bracket touched")
    effective_rate: float = Field(..., ge=0, le=1, description="tax / taxable_income")
    breakdown: List[BracketTax] = Field(default_factory=list)


class InsuranceOptions(BaseModel):
    """Which compulsory insurance components the employee pays."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    social: bool = True
    health: bool = True
    unemployment: bool = True

    @classmethod
    def none(cls) -> "InsuranceOptions":
        """No insurance (e.g., short contracts outside the scheme)."""
        return cls(social=False, health=False, unemployment=False)


class InsuranceBreakdown(BaseModel):
    """Employee insurance contributions for one month, each rounded to VND."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    social: int = Field(default=0, description="BHXH")
    health: int = Field(default=0, description="BHYT")
    unemployment: int = Field(default=0, description="BHTN")

    @computed_field
    @property
    def total(self) -> int:
        """Sum of the three components."""
        return self.social + self.health + self.unemployment

    @classmethod
    def zero(cls) -> "InsuranceBreakdown":
        return cls(social=0, health=0, unemployment=0)
