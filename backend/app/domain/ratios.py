# backend/app/domain/ratios.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable


def money(v: Any) -> float:
    """Coerce a nullable amount column to float (None -> 0.0)."""
    if v is None:
        return 0.0
    return float(v)


def total(values: Iterable[Any]) -> float:
    return float(sum(money(v) for v in values))


def safe_ratio(num: float, den: float) -> float:
    """
    num / den with the zero-denominator contract: 0.0, never NaN or Infinity.
    Every percentage in the rollup goes through here.
    """
    den = money(den)
    if den == 0:
        return 0.0
    out = money(num) / den
    if math.isnan(out) or math.isinf(out):
        return 0.0
    return out


def pct(num: float, den: float) -> float:
    return safe_ratio(num, den) * 100.0


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def mean(values: list[float]) -> float:
    # Unweighted; empty -> 0.0
    return safe_ratio(sum(values), len(values))


@dataclass(frozen=True)
class Variance:
    variance: float
    variance_percentage: float


def variance(actual: float, expected: float) -> Variance:
    """
    variance = actual - expected
    variance_percentage = variance / |expected| * 100, 0 when expected == 0
    """
    a = money(actual)
    e = money(expected)
    v = a - e
    return Variance(variance=v, variance_percentage=safe_ratio(v, abs(e)) * 100.0)
