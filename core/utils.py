from __future__ import annotations

import math

import numpy as np


def round_half_up(x: float) -> float:
    """Round to a whole currency unit, halves toward +inf: floor(x + 0.5)."""
    # np.floor keeps nan/inf flowing through instead of raising like math.floor
    return float(np.floor(float(x) + 0.5))


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def format_pct(value: float) -> str:
    """
    Exact percentage for step notes: 40 -> '40', 12.5 -> '12.5',
    100/3 -> '33.333333333333336'. Never truncated, never in exponent form.
    """
    v = float(value)
    if math.isfinite(v) and v.is_integer():
        return str(int(v))
    # shortest round-tripping digits, positional even for tiny values
    return np.format_float_positional(v, trim="-")


def format_money(value: float) -> str:
    """Whole-dollar display used by tables, the round log and the flow map."""
    return f"${round_half_up(value):.0f}"
