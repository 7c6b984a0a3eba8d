"""Law selection: which PIT schedule governs a calendar month.

There are exactly two states, old and new, and one transition at the
law-change date. Resolution is a plain date comparison done per month, so a
year can switch schedules part-way through when the law-change date is not
January 1st.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .rules import NEW_LAW_EFFECTIVE_DATE, get_rule_set
from .schemas import DeductionRules, InsuranceRules, LawRegime


@dataclass(frozen=True)
class MonthRules:
    """Everything the pipeline needs for one month."""
    law: LawRegime
    brackets: tuple
    deductions: DeductionRules
    insurance: InsuranceRules


def resolve_law(on: date, law_change_date: Optional[date] = None) -> LawRegime:
    """Old law before the change date, new law on or after it."""
    if law_change_date is None:
        law_change_date = NEW_LAW_EFFECTIVE_DATE
    return LawRegime.NEW if on >= law_change_date else LawRegime.OLD


def resolve_month_rules(year: int, month: int, law_change_date: Optional[date] = None) -> MonthRules:
    """Resolve schedule, deductions and insurance for a calendar month.

    A month belongs to the law in force on its first day. Brackets and
    deductions come from the latest rule set of that law; insurance comes
    from whatever rule set is in force on the calendar, regardless of law.
    """
    law = resolve_law(date(year, month, 1), law_change_date)
    return rules_for_law(year, month, law)


def rules_for_law(year: int, month: int, law: LawRegime) -> MonthRules:
    """Rules for a month under a given law, ignoring the law-change date.

    Used to price the same month under both schedules.
    """
    first_day = date(year, month, 1)
    law_rules = get_rule_set(first_day, law)

    return MonthRules(
        law=law,
        brackets=law_rules.schedule,
        deductions=law_rules.deductions,
        insurance=get_rule_set(first_day).insurance,
    )
