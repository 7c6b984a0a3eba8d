"""taxes - Tax rules and the leaf calculations built on them.

Scope:
- Versioned rule sets (brackets, family deductions, insurance) from
  tax-rules/YYYY-MM-DD.yaml
- Law selection per calendar month (old vs new PIT schedule)
- Progressive bracket tax
- Compulsory insurance contributions with salary caps

Constraints:
- Pure calculation - no settings lookups beyond locating the rules directory
- No aggregation across months (that's yearly.py)
- Rules are loaded once per process and never mutated

Modules:
- schemas: Pydantic models for rule files and leaf results
- rules: Rule loading, EFFECTIVE_DATES, static accessors
- law: Old/new law resolution per month
- progressive: Bracket walk
- insurance: BHXH/BHYT/BHTN contributions

Usage:
    from vnpit.sdk.taxes import calculate_progressive_tax, get_bracket_schedule, LawRegime

    result = calculate_progressive_tax(15_850_000, get_bracket_schedule(LawRegime.OLD))
    result.tax  # 1627500
"""

from .schemas import (
    Bracket,
    BracketTax,
    DeductionRules,
    InsuranceBreakdown,
    InsuranceOptions,
    InsuranceRules,
    LawRegime,
    RuleSet,
    TaxBracket,
    TaxComputation,
)

from .rules import (
    EFFECTIVE_DATES,
    NEW_LAW_EFFECTIVE_DATE,
    RulesNotFoundError,
    clear_rules_cache,
    get_bracket_schedule,
    get_deductions,
    get_insurance_rates,
    get_rule_set,
    load_rule_sets,
)

from .law import MonthRules, resolve_law, resolve_month_rules, rules_for_law
from .progressive import calculate_progressive_tax
from .insurance import calc_insurance

__all__ = [
    # Schemas
    "Bracket",
    "BracketTax",
    "DeductionRules",
    "InsuranceBreakdown",
    "InsuranceOptions",
    "InsuranceRules",
    "LawRegime",
    "RuleSet",
    "TaxBracket",
    "TaxComputation",
    # Rules
    "EFFECTIVE_DATES",
    "NEW_LAW_EFFECTIVE_DATE",
    "RulesNotFoundError",
    "clear_rules_cache",
    "get_bracket_schedule",
    "get_deductions",
    "get_insurance_rates",
    "get_rule_set",
    "load_rule_sets",
    # Law selection
    "MonthRules",
    "resolve_law",
    "resolve_month_rules",
    "rules_for_law",
    # Calculations
    "calculate_progressive_tax",
    "calc_insurance",
]
