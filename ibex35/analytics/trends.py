"""Company, sector and market trend analysis."""

from collections.abc import Awaitable, Callable
from typing import Any

from ibex35.analytics.performance import analyze_company_performances, average_change
from ibex35.analytics.sectors import get_sector_correlation_analysis
from ibex35.calculations.performance import dispersion
from ibex35.calculations.trend import analyze_price_trend, market_direction, naive_forecast
from ibex35.common.constants import MARKET_SCAN_CAP, SECTOR_SCAN_CAP
from ibex35.errors import NotFoundError
from ibex35.models import Performance
from ibex35.services.queries import Ibex35Queries

STRONG_TREND_STRENGTH = 0.1


def trend_insights(name: str, trend: dict[str, Any] | None) -> list[str]:
    if not trend:
        return ["Insufficient historical data for trend analysis"]

    insights = [f"{name} is in a {trend['direction']} trend"]
    if trend["strength"] > STRONG_TREND_STRENGTH:
        insights.append(f"Strong trend movement with {trend['strength'] * 100:.1f}% change")
    if trend["current_position"] == "near_resistance":
        insights.append("Price approaching resistance level - potential reversal area")
    elif trend["current_position"] == "near_support":
        insights.append("Price near support level - potential buying opportunity")
    return insights


def _performance_stats(performances: list[Performance]) -> dict[str, Any]:
    return {
        "average_performance": average_change(performances),
        "best_performer": performances[0] if performances else None,
        "worst_performer": performances[-1] if performances else None,
    }


async def company_trend(
    queries: Ibex35Queries, target: str, period: int, include_forecast: bool = False,
) -> dict[str, Any]:
    company = await queries.get_company_by_symbol(target)
    if company is None:
        msg = f"Company {target} not found"
        raise NotFoundError(msg)

    history = await queries.get_price_history(target, period)
    trend = analyze_price_trend(history)
    result = {
        "company": {"symbol": company.symbol, "name": company.name, "sector": company.sector},
        "historical_data_points": len(history),
        "trend_analysis": trend,
        "insights": trend_insights(company.name or target, trend),
    }
    if include_forecast:
        result["forecast"] = naive_forecast(history)
    return result


async def sector_trend(
    queries: Ibex35Queries, target: str, period: int, include_forecast: bool = False,
) -> dict[str, Any]:
    companies = await queries.get_companies_by_sector(target)
    performances = await analyze_company_performances(queries, companies, period, SECTOR_SCAN_CAP)
    return {
        "sector": target,
        "companies_analyzed": len(companies),
        "companies_with_prices": len(performances),
        **_performance_stats(performances),
        "sector_volatility": dispersion([p.period_change for p in performances]),
        "company_performances": performances,
    }


async def market_trend(
    queries: Ibex35Queries, target: str, period: int, include_forecast: bool = False,
) -> dict[str, Any]:
    companies = await queries.get_all_companies()
    performances = await analyze_company_performances(queries, companies, period, MARKET_SCAN_CAP)
    stats = _performance_stats(performances)
    return {
        "market": "IBEX 35",
        "companies_analyzed": len(performances),
        **stats,
        "market_direction": market_direction(stats["average_performance"]),
        "volatility_index": dispersion([p.period_change for p in performances]),
        "sector_performance": await get_sector_correlation_analysis(queries, period),
        "top_performers": performances[:5],
        "bottom_performers": performances[-5:][::-1],
    }


async def correlation_analysis(
    queries: Ibex35Queries, target: str, period: int, include_forecast: bool = False,
) -> dict[str, Any]:
    correlation = await get_sector_correlation_analysis(queries, period)
    concentration = correlation["market_concentration"]
    return {
        "correlation_data": correlation,
        "insights": [
            f"Market shows {concentration['concentration_level']} concentration",
            f"Largest sector: {correlation['largest_sector']}",
            f"Total sectors analyzed: {correlation['total_sectors']}",
        ],
    }


TrendAnalyzer = Callable[[Ibex35Queries, str, int, bool], Awaitable[dict[str, Any]]]

TREND_ANALYZERS: dict[str, TrendAnalyzer] = {
    "company_trend": company_trend,
    "sector_trend": sector_trend,
    "market_trend": market_trend,
    "correlation_analysis": correlation_analysis,
}

TARGETED_ANALYSES = frozenset({"company_trend", "sector_trend"})


async def analyze_trends(
    queries: Ibex35Queries,
    analysis_type: str,
    target: str | None = None,
    period: int = 30,
    include_forecast: bool = False,
) -> dict[str, Any]:
    """Run one trend analysis; company and sector trends need a target"""
    analyzer = TREND_ANALYZERS.get(analysis_type)
    if analyzer is None:
        msg = f"Unknown analysis type: {analysis_type}"
        raise ValueError(msg)
    if analysis_type in TARGETED_ANALYSES and not target:
        msg = f"{analysis_type} requires a target"
        raise ValueError(msg)

    results = await analyzer(queries, target or "", period, include_forecast)
    return {
        "analysis_type": analysis_type,
        "target": target,
        "period": period,
        "results": results,
    }
