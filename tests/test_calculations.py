#!/usr/bin/env python3
"""Test pure calculations: performance, concentration, trend, scoring."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ibex35.calculations.concentration import (
    classify_concentration,
    concentration_ratio,
    herfindahl_index,
    percentile_rank,
    round_half_up,
    top_share,
)
from ibex35.calculations.performance import (
    annualized_volatility,
    calculate_performance,
    dispersion,
    period_change,
)
from ibex35.calculations.scoring import assess_company_risk, governance_score, opportunity_score
from ibex35.calculations.trend import analyze_price_trend, market_direction, naive_forecast
from ibex35.models import Company, HistoricalPrice


def closes(*values: float) -> list[HistoricalPrice]:
    """Most recent first"""
    return [HistoricalPrice(close=v) for v in values]


def test_period_change_most_recent_first() -> None:
    assert period_change(closes(110, 100)) == pytest.approx(10.0)
    assert period_change(closes(90, 95, 100)) == pytest.approx(-10.0)
    assert period_change(closes(100)) is None
    assert period_change([]) is None
    assert period_change(closes(100, 0)) is None
    print("✓ Period change uses index 0 as latest")


def test_volatility_and_dispersion() -> None:
    assert dispersion([]) == 0.0
    assert dispersion([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert annualized_volatility(closes(100, 100, 100)) == 0.0
    assert annualized_volatility(closes(110, 100, 110)) > 0

    performance = calculate_performance(closes(110, 100))
    assert performance["period_change"] == pytest.approx(10.0)
    assert performance["current_price"] == 110
    assert performance["starting_price"] == 100
    assert calculate_performance(closes(110)) is None
    print("✓ Volatility and dispersion")


def test_hhi_two_company_scenario() -> None:
    hhi = herfindahl_index([60e9, 40e9])
    assert hhi == pytest.approx(5200)
    assert round_half_up(hhi) == 5200
    assert classify_concentration(hhi) == "highly_concentrated"
    print("✓ HHI 60/40 split is 5200")


def test_hhi_scale_invariant_and_bounded() -> None:
    caps = [30.0, 20.0, 10.0, 5.0]
    base = herfindahl_index(caps)
    for factor in (0.001, 3.0, 1e9):
        assert herfindahl_index([c * factor for c in caps]) == pytest.approx(base)
    assert 10000 / len(caps) <= base <= 10000

    assert herfindahl_index([5.0, 5.0, 5.0, 5.0]) == pytest.approx(2500)
    assert herfindahl_index([42.0]) == pytest.approx(10000)
    assert herfindahl_index([]) == 0
    assert herfindahl_index([0, 0]) == 0
    print("✓ HHI scale invariant and within [10000/N, 10000]")


def test_concentration_boundaries_are_strict() -> None:
    assert classify_concentration(2500) == "moderately_concentrated"
    assert classify_concentration(2500.0001) == "highly_concentrated"
    assert classify_concentration(1500) == "competitive"
    assert classify_concentration(1500.0001) == "moderately_concentrated"
    print("✓ Concentration thresholds are strict")


def test_shares_and_percentiles() -> None:
    assert top_share([50, 30, 10, 10], 3) == pytest.approx(90.0)
    assert top_share([], 3) == 0.0
    assert concentration_ratio([10, 40, 20, 5, 25], 4) == pytest.approx(95.0)
    assert percentile_rank(30, [10, 20, 30, 40]) == pytest.approx(50.0)
    assert percentile_rank(50, [10, 20]) == 100.0
    assert percentile_rank(None, [10]) == 0.0
    print("✓ Top share, CR-4 and percentile")


def test_price_trend_direction_thresholds() -> None:
    assert analyze_price_trend(closes(105, 100))["direction"] == "upward"
    assert analyze_price_trend(closes(95, 100))["direction"] == "downward"
    assert analyze_price_trend(closes(104.9, 100))["direction"] == "sideways"
    assert analyze_price_trend(closes(100)) is None
    print("✓ Trend direction at +/-5%")


def test_price_trend_levels_and_position() -> None:
    trend = analyze_price_trend(closes(118, 120, 100, 105))
    assert trend["support_level"] == 100
    assert trend["resistance_level"] == 120
    assert trend["strength"] == pytest.approx(118 / 105 - 1)
    assert trend["current_position"] == "near_resistance"

    assert analyze_price_trend(closes(101, 120, 100))["current_position"] == "near_support"
    assert analyze_price_trend(closes(110, 120, 100))["current_position"] == "middle"
    assert analyze_price_trend(closes(100, 100))["current_position"] == "middle"
    print("✓ Support, resistance and position")


def test_naive_forecast() -> None:
    assert naive_forecast(closes(1, 2, 3, 4)) is None

    # chronological 100, 110, 121, 133.1, 146.41: +10% every day
    forecast = naive_forecast(closes(146.41, 133.1, 121, 110, 100))
    assert forecast["forecast_price"] == pytest.approx(146.41 * 1.1)
    assert forecast["confidence"] == "low"
    assert "disclaimer" in forecast
    print("✓ Naive forecast from last 5 closes")


def test_market_direction_bands() -> None:
    assert market_direction(2.5) == "strongly_bullish"
    assert market_direction(1.0) == "bullish"
    assert market_direction(0.0) == "neutral"
    assert market_direction(0.5) == "neutral"
    assert market_direction(-1.0) == "bearish"
    assert market_direction(-2.5) == "strongly_bearish"
    print("✓ Market direction bands")


def test_company_risk_last_rule_wins() -> None:
    healthy = Company(symbol="SAN", market_cap=60e9, pe_ratio=6)
    assert assess_company_risk(healthy, 10) == "low"
    assert assess_company_risk(healthy, 16) == "medium"
    assert assess_company_risk(Company(symbol="X", market_cap=5e8, pe_ratio=10), 3) == "medium"
    assert assess_company_risk(Company(symbol="X", pe_ratio=10), 3) == "medium"
    # large board and small cap, but no P/E: high overrides
    assert assess_company_risk(Company(symbol="X", market_cap=5e8), 20) == "high"
    print("✓ Company risk rules applied in order")


def test_governance_score_penalties() -> None:
    assert governance_score(10, 0) == 8.0
    assert governance_score(16, 0) == 7.0
    assert governance_score(4, 0) == 7.5
    assert governance_score(16, 6) == 5.0
    print("✓ Governance score penalties")


def test_opportunity_score_rules_and_clamp() -> None:
    assert opportunity_score(Company()) == 5.0
    best = Company(pe_ratio=10, market_cap=20e9, sector="Banking")
    assert opportunity_score(best) == pytest.approx(6.8)
    worst = Company(pe_ratio=40, market_cap=1e8, sector="Steel")
    assert opportunity_score(worst) == pytest.approx(4.2)
    assert opportunity_score(Company(pe_ratio=-1e12, market_cap=1e15, sector="TECHNOLOGY")) <= 10
    for pe in (-1e9, 0, 14.99, 15, 25, 25.01, 1e9):
        for cap in (None, 0, 1, 1e9, 10e9, 1e20):
            score = opportunity_score(Company(pe_ratio=pe, market_cap=cap, sector="healthcare"))
            assert 0 <= score <= 10
    print("✓ Opportunity score within [0, 10]")


if __name__ == "__main__":
    print("Testing calculations...\n")
    test_period_change_most_recent_first()
    test_volatility_and_dispersion()
    test_hhi_two_company_scenario()
    test_hhi_scale_invariant_and_bounded()
    test_concentration_boundaries_are_strict()
    test_shares_and_percentiles()
    test_price_trend_direction_thresholds()
    test_price_trend_levels_and_position()
    test_naive_forecast()
    test_market_direction_bands()
    test_company_risk_last_rule_wins()
    test_governance_score_penalties()
    test_opportunity_score_rules_and_clamp()
    print("\n✓ All calculation tests passed!")
