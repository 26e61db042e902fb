"""Rounding and rendering of numbers in subtitles."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

MISSING = "NA"
P_FLOOR = 0.001


def _is_missing(x: Optional[float]) -> bool:
    if x is None:
        return True
    try:
        return not math.isfinite(float(x))
    except (TypeError, ValueError):
        return True


def _quantize(x: float, k: int) -> Decimal:
    quantum = Decimal(1).scaleb(-k)
    try:
        return Decimal(repr(float(x))).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context holds; already far beyond k decimals
        return Decimal(repr(float(x)))


def round_half_up(x: float, k: int = 2) -> float:
    """Round to ``k`` decimals with ties going away from zero (0.125 -> 0.13).

    The decimal expansion of ``repr(x)`` is used, so values that print as an
    exact tie are treated as ties.
    """
    if _is_missing(x):
        return math.nan
    return float(_quantize(x, k))


def format_value(x: Optional[float], k: int = 2) -> str:
    """Render a number with exactly ``k`` decimals; non-finite values become "NA"."""
    if _is_missing(x):
        return MISSING
    value = _quantize(x, k)
    if value == 0:
        value = abs(value)
    return f"{value:.{k}f}"


def format_p(p: Optional[float], k: int = 2) -> str:
    """Render a p-value; anything below 0.001 becomes "< 0.001"."""
    if _is_missing(p):
        return MISSING
    if float(p) < P_FLOOR:
        return f"< {P_FLOOR}"
    return format_value(p, k)


def format_df(df: Optional[float], k: int = 2) -> Optional[str]:
    """Render degrees of freedom.

    Integer-valued df are printed without decimals (``52``), fractional df
    (Welch, trimmed means) with ``k`` decimals. Returns None when there are
    no degrees of freedom to print.
    """
    if df is None:
        return None
    if _is_missing(df):
        return MISSING
    if float(df).is_integer():
        return str(int(df))
    return format_value(df, k)


def format_n(n: Optional[float]) -> str:
    if _is_missing(n):
        return MISSING
    return str(int(n))


def format_conf_level(conf_level: float) -> str:
    """Confidence level as a percentage label (0.95 -> "95", 0.999 -> "99.9")."""
    pct = (Decimal(repr(float(conf_level))) * 100).normalize()
    return format(pct, "f")


def format_percent(x: float, perc_k: int = 0) -> str:
    """Render a percentage (already on the 0-100 scale) for slice and bar labels."""
    return f"{format_value(x, perc_k)}%"
