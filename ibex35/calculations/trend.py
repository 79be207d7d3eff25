"""Trend classification and naive forecasting.

Heuristics only: no statistical model is fitted.
"""

from collections.abc import Sequence
from typing import Any, TypedDict

from ibex35.common.constants import (
    FORECAST_WINDOW,
    MILD_MOVE_PCT,
    RESISTANCE_ZONE,
    STRONG_MOVE_PCT,
    SUPPORT_ZONE,
    TREND_THRESHOLD,
)
from ibex35.models import HistoricalPrice


class PriceTrend(TypedDict):
    direction: str
    strength: float
    support_level: float
    resistance_level: float
    current_position: str


def analyze_price_trend(prices: Sequence[HistoricalPrice]) -> PriceTrend | None:
    """Classify the window trend; None with fewer than two points.

    direction: upward at >= +5% change, downward at <= -5%, else sideways.
    current_position: where the latest close sits in the [min, max] range.
    """
    if len(prices) < 2:
        return None

    closes = [p.close for p in reversed(prices)]  # chronological
    first, last = closes[0], closes[-1]
    support, resistance = min(closes), max(closes)

    change = (last - first) / first if first else 0.0
    if change >= TREND_THRESHOLD:
        direction = "upward"
    elif change <= -TREND_THRESHOLD:
        direction = "downward"
    else:
        direction = "sideways"

    position = "middle"
    price_range = resistance - support
    if price_range > 0:
        relative = (last - support) / price_range
        if relative > RESISTANCE_ZONE:
            position = "near_resistance"
        elif relative < SUPPORT_ZONE:
            position = "near_support"

    return PriceTrend(
        direction=direction,
        strength=abs(change),
        support_level=support,
        resistance_level=resistance,
        current_position=position,
    )


def naive_forecast(prices: Sequence[HistoricalPrice]) -> dict[str, Any] | None:
    """One step ahead: last close x (1 + mean daily return of the last 5 closes)"""
    if len(prices) < FORECAST_WINDOW:
        return None

    closes = [p.close for p in reversed(prices)][-FORECAST_WINDOW:]
    returns = [
        (closes[i] - closes[i - 1]) / closes[i - 1]
        for i in range(1, len(closes))
        if closes[i - 1]
    ]
    avg_return = sum(returns) / len(returns) if returns else 0.0
    last_price = closes[-1]

    return {
        "method": "mean_daily_return",
        "window": FORECAST_WINDOW,
        "forecast_price": last_price * (1 + avg_return),
        "average_daily_return": avg_return,
        "confidence": "low",
        "timeframe": "1 day ahead",
        "disclaimer": "This is a basic forecast and should not be used for investment decisions",
    }


def market_direction(avg_change: float) -> str:
    """Bucket an average percent change into five bands"""
    if avg_change > STRONG_MOVE_PCT:
        return "strongly_bullish"
    if avg_change > MILD_MOVE_PCT:
        return "bullish"
    if avg_change < -STRONG_MOVE_PCT:
        return "strongly_bearish"
    if avg_change < -MILD_MOVE_PCT:
        return "bearish"
    return "neutral"
