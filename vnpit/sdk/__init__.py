"""vnpit SDK - Vietnamese PIT and take-home pay calculations."""

from .config import (
    ConfigError,
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    unset_setting,
    get_law_change_date,
    get_default_region,
    get_default_dependents,
    get_tax_rules_dir,
)

from .money import round_vnd, format_vnd, format_rate

from .validation import InvalidInputError, REGIONS

from .taxes import (
    EFFECTIVE_DATES,
    NEW_LAW_EFFECTIVE_DATE,
    LawRegime,
    InsuranceOptions,
    InsuranceBreakdown,
    RulesNotFoundError,
    calculate_progressive_tax,
    calc_insurance,
    get_bracket_schedule,
    get_deductions,
    get_insurance_rates,
    get_rule_set,
    resolve_law,
)

from .schemas import (
    MonthInput,
    MonthResult,
    YearlyResult,
    TwoYearResult,
    Strategy,
    StrategyComparison,
    LawComparison,
)

from .gross_net import net_from_gross, gross_from_net, compare_laws

from .yearly import (
    BONUS_SHAPES,
    build_year_inputs,
    calculate_year,
    calculate_two_years,
    regular_months,
)

from .strategies import (
    PRESETS,
    PresetConfig,
    build_preset_strategy,
    compare_presets,
    compare_strategies,
    custom_strategy,
    get_preset,
)

__all__ = [
    # Config
    "ConfigError",
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "unset_setting",
    "get_law_change_date",
    "get_default_region",
    "get_default_dependents",
    "get_tax_rules_dir",
    # Money
    "round_vnd",
    "format_vnd",
    "format_rate",
    # Validation
    "InvalidInputError",
    "REGIONS",
    # Tax rules
    "EFFECTIVE_DATES",
    "NEW_LAW_EFFECTIVE_DATE",
    "LawRegime",
    "InsuranceOptions",
    "InsuranceBreakdown",
    "RulesNotFoundError",
    "calculate_progressive_tax",
    "calc_insurance",
    "get_bracket_schedule",
    "get_deductions",
    "get_insurance_rates",
    "get_rule_set",
    "resolve_law",
    # Schemas
    "MonthInput",
    "MonthResult",
    "YearlyResult",
    "TwoYearResult",
    "Strategy",
    "StrategyComparison",
    "LawComparison",
    # Single month
    "net_from_gross",
    "gross_from_net",
    "compare_laws",
    # Yearly
    "BONUS_SHAPES",
    "build_year_inputs",
    "calculate_year",
    "calculate_two_years",
    "regular_months",
    # Strategies
    "PRESETS",
    "PresetConfig",
    "build_preset_strategy",
    "compare_presets",
    "compare_strategies",
    "custom_strategy",
    "get_preset",
]
