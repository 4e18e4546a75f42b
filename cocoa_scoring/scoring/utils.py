"""
Numeric Utilities
cocoa_scoring/scoring/utils.py

Small helpers shared by the scorers, the outlier filter and the ranking
aggregator. Judge scores live on a 0-10 scale.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

SCORE_MIN = 0.0
SCORE_MAX = 10.0


def to_decimal(value: float, places: int = 2) -> Decimal:
    """Convert float to Decimal with explicit precision."""
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places, rounding=ROUND_HALF_UP
    )


def clamp(
    value: float,
    min_val: float = SCORE_MIN,
    max_val: float = SCORE_MAX,
) -> float:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def sample_std_dev(values: Sequence[float], avg: float = None) -> float:
    """
    Sample standard deviation with Bessel's correction.

    Formula: sqrt(Σ(value_i − mean)² / (n − 1))
    Returns 0.0 when fewer than two values are given.
    """
    if len(values) < 2:
        return 0.0

    avg = mean(values) if avg is None else avg
    variance = sum((v - avg) ** 2 for v in values) / (len(values) - 1)
    return math.sqrt(variance)


def weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
    """
    Calculate weighted mean.

    Formula: Σ(value_i × weight_i) / Σ(weight_i)
    Returns 0.0 if all weights are zero.
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")

    total_weight = sum(weights)
    if total_weight == 0:
        return 0.0

    return sum(v * w for v, w in zip(values, weights)) / total_weight
