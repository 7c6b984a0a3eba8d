"""VND rounding and display conventions.

Shared by the tax engine and by anything that renders amounts, so that a
figure shown to the user is always the figure the engine computed.
"""

from typing import Union

Number = Union[int, float]


def round_vnd(amount: Number) -> int:
    """Round to the nearest whole dong (0.5 rounds away from zero).

    Example: 877500.4999999 -> 877500, 12.5 -> 13, -12.5 -> -13
    """
    return int(amount + 0.5) if amount >= 0 else int(amount - 0.5)


def format_vnd(amount: Number, symbol: bool = True) -> str:
    """Format an amount the way Vietnamese payslips do: 30.000.000 ₫"""
    value = round_vnd(amount)
    text = f"{abs(value):,}".replace(",", ".")
    if value < 0:
        text = "-" + text
    return f"{text} ₫" if symbol else text


def format_rate(rate: float) -> str:
    """Format a fractional rate as a percentage: 0.105 -> '10.5%'"""
    pct = round(rate * 100, 2)
    if pct == int(pct):
        return f"{int(pct)}%"
    return f"{pct:g}%"
