"""Side-by-side company comparison."""

import logging
from collections.abc import Sequence
from typing import Any

from ibex35.calculations.performance import calculate_performance
from ibex35.calculations.scoring import assess_company_risk
from ibex35.errors import Ibex35Error
from ibex35.models import Company
from ibex35.services.queries import Ibex35Queries

logger = logging.getLogger(__name__)

COMPARISON_METRICS = ("governance", "shareholders", "performance", "news", "risk")
COMPARISON_PERIOD_DAYS = 30
COMPARISON_NEWS_LIMIT = 5


def resolve_metrics(metrics: Sequence[str] | None) -> set[str]:
    """Expand the metrics selector; None, [] and "all" select every section"""
    if not metrics or "all" in metrics:
        return set(COMPARISON_METRICS)
    unknown = [m for m in metrics if m not in COMPARISON_METRICS]
    if unknown:
        msg = f"Unknown comparison metric(s): {', '.join(unknown)}"
        raise ValueError(msg)
    return set(metrics)


async def _company_profile(queries: Ibex35Queries, company: Company, selected: set[str]) -> dict[str, Any]:
    entry: dict[str, Any] = {"symbol": company.symbol, "basic_info": company}

    directors = []
    if selected & {"governance", "risk"} and company.id:
        directors = await queries.get_company_directors(company.id)

    if "governance" in selected:
        entry["directors"] = len(directors)

    if "shareholders" in selected:
        shareholders = await queries.get_company_shareholders(company.id) if company.id else []
        entry["shareholders"] = len(shareholders)

    if "performance" in selected:
        history = await queries.get_price_history(company.symbol, COMPARISON_PERIOD_DAYS) if company.symbol else []
        entry["recent_performance"] = calculate_performance(history)

    if "news" in selected:
        news = await queries.get_recent_news(company.id, COMPARISON_NEWS_LIMIT) if company.id else []
        entry["news_coverage"] = len(news)

    if "risk" in selected:
        entry["risk_profile"] = assess_company_risk(company, len(directors))

    return entry


def _display_name(entry: dict[str, Any]) -> str:
    company = entry["basic_info"]
    return company.name or entry["symbol"] or "Unknown"


def comparison_summary(valid: Sequence[dict[str, Any]]) -> dict[str, Any]:
    best_performer = None
    best_change = float("-inf")
    most_covered = None
    most_news = -1
    for entry in valid:
        performance = entry.get("recent_performance")
        if performance and performance["period_change"] > best_change:
            best_change = performance["period_change"]
            best_performer = {
                "symbol": entry["symbol"],
                "name": _display_name(entry),
                "period_change": best_change,
            }
        news = entry.get("news_coverage")
        if news is not None and news > most_news:
            most_news = news
            most_covered = {"symbol": entry["symbol"], "name": _display_name(entry), "news_count": news}

    return {
        "best_performer": best_performer,
        "most_covered": most_covered,
        "risk_levels": [
            {"symbol": e["symbol"], "risk_level": e["risk_profile"]}
            for e in valid
            if "risk_profile" in e
        ],
    }


def comparison_recommendations(valid: Sequence[dict[str, Any]], summary: dict[str, Any]) -> list[str]:
    if not valid:
        return ["Unable to generate recommendations - no valid company data"]

    recommendations = []
    if summary["best_performer"]:
        recommendations.append(f"{summary['best_performer']['name']} shows strongest recent performance")

    low_risk = next((e for e in valid if e.get("risk_profile") == "low"), None)
    if low_risk:
        recommendations.append(f"Consider {_display_name(low_risk)} for lower risk exposure")

    recommendations.append("Monitor news coverage for market sentiment changes")
    return recommendations


async def compare_companies(
    queries: Ibex35Queries,
    companies: Sequence[str],
    metrics: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Collect the selected metrics for each symbol.

    A symbol that cannot be resolved, or whose data fails to load, becomes an
    inline {"symbol", "error"} entry; the rest of the comparison still runs.
    """
    selected = resolve_metrics(metrics)

    comparison_data: list[dict[str, Any]] = []
    for symbol in companies:
        try:
            company = await queries.get_company_by_symbol(symbol)
            if company is None:
                comparison_data.append({"symbol": symbol, "error": "Company not found"})
                continue
            comparison_data.append(await _company_profile(queries, company, selected))
        except Ibex35Error as e:
            logger.warning("Comparison failed for %s: %s", symbol, e)
            comparison_data.append({"symbol": symbol, "error": str(e)})

    valid = [entry for entry in comparison_data if "error" not in entry]
    summary = comparison_summary(valid)

    return {
        "companies": list(companies),
        "metrics": sorted(selected),
        "comparison_data": comparison_data,
        "summary": summary,
        "recommendations": comparison_recommendations(valid, summary),
    }
