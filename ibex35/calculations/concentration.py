"""Market concentration measures."""

from collections.abc import Sequence
from math import floor

from ibex35.common.constants import (
    HHI_HIGHLY_CONCENTRATED,
    HHI_MODERATELY_CONCENTRATED,
    HHI_SCALE,
)


def market_shares(values: Sequence[float]) -> list[float]:
    total = sum(values)
    if total <= 0:
        return []
    return [v / total for v in values]


def herfindahl_index(values: Sequence[float]) -> float:
    """Herfindahl-Hirschman Index: sum of squared shares x 10000.

    Unrounded so that threshold checks see the exact value. 0 when the total is 0.
    """
    return sum(share * share for share in market_shares(values)) * HHI_SCALE


def classify_concentration(hhi: float) -> str:
    """Bucket an HHI value. Boundaries are exclusive: 2500 is moderately concentrated."""
    if hhi > HHI_HIGHLY_CONCENTRATED:
        return "highly_concentrated"
    if hhi > HHI_MODERATELY_CONCENTRATED:
        return "moderately_concentrated"
    return "competitive"


def round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def top_share(values: Sequence[float], top: int = 3) -> float:
    """Combined percentage share of the first `top` values (caller orders them)"""
    total = sum(values)
    if total <= 0:
        return 0.0
    return sum(values[:top]) / total * 100


def concentration_ratio(values: Sequence[float], top: int = 4) -> float:
    """CR-n: percentage share of the n largest values"""
    ordered = sorted(values, reverse=True)
    return top_share(ordered, top)


def percentile_rank(value: float | None, dataset: Sequence[float | None]) -> float:
    """Position of value within dataset as a percentage (0 for missing value or data)"""
    if not value or not dataset:
        return 0.0
    ordered = sorted(v for v in dataset if v is not None)
    if not ordered:
        return 0.0
    index = next((i for i, v in enumerate(ordered) if v >= value), None)
    if index is None:
        return 100.0
    return index / len(ordered) * 100
