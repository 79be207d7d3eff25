"""Price performance calculations.

All price lists are ordered most recent first (index 0 = latest close).
"""

from collections.abc import Sequence
from math import sqrt

from ibex35.common.constants import TRADING_DAYS_PER_YEAR
from ibex35.models import HistoricalPrice


def period_change(prices: Sequence[HistoricalPrice]) -> float | None:
    """Percent change from the oldest to the most recent close.

    Returns None with fewer than two points or a zero starting close.
    """
    if len(prices) < 2:
        return None
    recent = prices[0].close
    old = prices[-1].close
    if old == 0:
        return None
    return (recent - old) / old * 100


def daily_returns(prices: Sequence[HistoricalPrice]) -> list[float]:
    """Fractional returns between consecutive closes, newest first"""
    returns = []
    for i in range(1, len(prices)):
        previous = prices[i].close
        if previous == 0:
            continue
        returns.append((prices[i - 1].close - previous) / previous)
    return returns


def dispersion(values: Sequence[float]) -> float:
    """Population standard deviation, 0 for an empty sequence"""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return sqrt(variance)


def annualized_volatility(prices: Sequence[HistoricalPrice]) -> float:
    """Population std of daily returns scaled by sqrt(252)"""
    returns = daily_returns(prices)
    if not returns:
        return 0.0
    return dispersion(returns) * sqrt(TRADING_DAYS_PER_YEAR)


def calculate_performance(prices: Sequence[HistoricalPrice]) -> dict[str, float] | None:
    """Window summary used by comparisons; None below two points"""
    change = period_change(prices)
    if change is None:
        return None
    return {
        "period_change": change,
        "current_price": prices[0].close,
        "starting_price": prices[-1].close,
        "volatility": annualized_volatility(prices),
    }
