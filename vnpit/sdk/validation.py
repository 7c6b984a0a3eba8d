"""Input validation at the public boundary of the SDK.

The engine clamps negative intermediate values, but it never accepts
impossible inputs: negative incomes, months outside 1-12, negative
dependent counts. Each check raises InvalidInputError with the offending
value in the message.
"""

from datetime import date
from typing import Any


class InvalidInputError(ValueError):
    """Raised when a caller passes a value the engine cannot represent."""
    pass


REGIONS = (1, 2, 3, 4)


def require_amount(value: Any, name: str) -> float:
    """Validate a monetary amount (>= 0, finite)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if value != value or value in (float("inf"), float("-inf")):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")
    return value


def require_period(month: Any, year: Any) -> date:
    """Validate month/year and return the first day of that month."""
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidInputError(f"month must be an integer 1-12, got {month!r}")
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
        raise InvalidInputError(f"year must be an integer 1-9999, got {year!r}")
    return date(year, month, 1)


def require_dependents(value: Any) -> int:
    """Validate a dependent count (integer >= 0)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"dependents must be an integer, got {value!r}")
    if value < 0:
        raise InvalidInputError(f"dependents must be non-negative, got {value}")
    return value


def require_region(value: Any) -> int:
    """Validate a minimum-wage region (1-4)."""
    if value not in REGIONS or isinstance(value, bool):
        raise InvalidInputError(f"region must be one of {REGIONS}, got {value!r}")
    return value
