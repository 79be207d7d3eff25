"""
Natural-language query routing.

Routes are an ordered list of (name, pattern, handler). The first route
whose pattern matches the lower-cased query handles it; `market_overview`
is the fallback. Handlers fill in `interpretation`, `execution_plan` and
`results` on a shared result dict.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from ibex35.analytics.comparison import compare_companies
from ibex35.analytics.network import governance_risk_factors
from ibex35.analytics.performance import analyze_company_performances, average_change
from ibex35.analytics.sectors import get_sector_correlation_analysis
from ibex35.errors import Ibex35Error
from ibex35.models import Performance
from ibex35.services.queries import Ibex35Queries

logger = logging.getLogger(__name__)

COMPANY_ALIASES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("SAN", re.compile(r"\b(santander|san\.mc|san)\b")),
    ("BBVA", re.compile(r"\b(bbva|bbva\.mc)\b")),
    ("IBE", re.compile(r"\b(iberdrola|ibe\.mc|ibe)\b")),
    ("TEF", re.compile(r"\b(telefonica|tef\.mc|tef)\b")),
    ("ITX", re.compile(r"\b(inditex|itx\.mc|itx)\b")),
)

SECTOR_TOKENS = re.compile(r"\b(banking|energy|telecom|textile|steel|aviation|infrastructure)\b")
DEFAULT_SECTOR = "energy"

RED_FLAG_RECOMMENDATIONS = {
    "high_director_interlocks": "Review board independence for companies with many interlocked directors",
    "market_dominance": "Monitor dominant companies for concentration risk",
}

FALLBACK_SUGGESTION = (
    "Try using specific tool names like get_all_companies, get_recent_news, or get_board_interlocks"
)


class QueryRoutingError(Ibex35Error):
    """A route matched but could not be carried out; `suggestion` tells the user what to try"""

    def __init__(self, message: str, suggestion: str) -> None:
        super().__init__(message)
        self.suggestion = suggestion


def extract_company_symbols(query: str) -> list[str]:
    """Canonical symbols of every known company alias in the query, in alias table order"""
    text = query.lower()
    return [symbol for symbol, pattern in COMPANY_ALIASES if pattern.search(text)]


def trend_summary(performances: list[Performance]) -> str:
    if not performances:
        return "No price data available for trend summary"
    avg = average_change(performances)
    direction = "upward" if avg > 0 else "downward"
    return f"Market showing {direction} trend with average change of {avg:.2f}%"


async def _banking_performance(queries: Ibex35Queries, query: str, result: dict[str, Any]) -> None:
    result["interpretation"] = "Banking sector performance analysis"
    result["execution_plan"] = [
        "Get banking sector companies",
        "Analyze historical performance",
        "Rank by growth",
    ]
    companies = await queries.get_companies_by_sector("banking")
    performances = await analyze_company_performances(queries, companies, 30)
    result["results"] = {
        "sector": "banking",
        "companies": companies,
        "performance_analysis": performances,
    }


async def _risk_governance(queries: Ibex35Queries, query: str, result: dict[str, Any]) -> None:
    result["interpretation"] = "Risk and governance analysis"
    result["execution_plan"] = [
        "Analyze board interlocks",
        "Identify governance red flags",
        "Assess concentration risks",
    ]
    companies = await queries.get_all_companies()
    interlocks = await queries.get_board_interlocks()
    risk_factors = governance_risk_factors(companies, interlocks)

    recommendations: dict[str, None] = {}
    for flag in risk_factors["governance_red_flags"]:
        recommendations.setdefault(RED_FLAG_RECOMMENDATIONS[flag["risk_type"]], None)

    result["results"] = {
        "governance_analysis": risk_factors,
        "recommendations": list(recommendations),
    }


async def _comparison(queries: Ibex35Queries, query: str, result: dict[str, Any]) -> None:
    result["interpretation"] = "Company comparison analysis"
    symbols = extract_company_symbols(query)
    if len(symbols) < 2:
        raise QueryRoutingError(
            "Could not identify companies to compare",
            'Try: "Compare Santander vs BBVA" or use company symbols like SAN.MC vs BBVA.MC',
        )

    result["interpretation"] = f"Comparison analysis of {', '.join(symbols)}"
    result["execution_plan"] = [
        "Identify companies",
        "Gather comparison metrics",
        "Generate comparative analysis",
    ]
    result["results"] = await compare_companies(queries, symbols, ["all"])


async def _sector_performance(queries: Ibex35Queries, query: str, result: dict[str, Any]) -> None:
    match = SECTOR_TOKENS.search(query.lower())
    sector = match.group(1) if match else DEFAULT_SECTOR

    result["interpretation"] = f"{sector} sector performance analysis"
    result["execution_plan"] = [
        "Get sector correlation data",
        "Focus on requested sector",
        "Analyze trends",
    ]
    result["results"] = {
        "focused_sector": sector,
        "sector_analysis": await get_sector_correlation_analysis(queries, 30),
    }


async def _price_trend(queries: Ibex35Queries, query: str, result: dict[str, Any]) -> None:
    result["interpretation"] = "Price trend analysis"
    result["execution_plan"] = [
        "Get top performers",
        "Analyze price movements",
        "Identify trends",
    ]
    performers = await queries.get_top_performers(30, 10)
    result["results"] = {
        "top_performers": performers,
        "trend_summary": trend_summary(performers),
    }


async def _market_overview(queries: Ibex35Queries, query: str, result: dict[str, Any]) -> None:
    result["interpretation"] = "General market overview"
    result["execution_plan"] = [
        "Get market overview",
        "Recent news",
        "Top performers",
    ]
    result["results"] = {
        "companies": await queries.get_all_companies(),
        "recent_news": await queries.get_recent_news(None, 5),
        "top_performers": await queries.get_top_performers(7, 5),
    }


RouteHandler = Callable[[Ibex35Queries, str, dict[str, Any]], Awaitable[None]]


@dataclass(frozen=True)
class IntentRoute:
    name: str
    pattern: re.Pattern[str] | None
    handler: RouteHandler

    def matches(self, text: str) -> bool:
        return self.pattern is None or self.pattern.search(text) is not None


INTENT_ROUTES: tuple[IntentRoute, ...] = (
    IntentRoute(
        "banking_performance",
        re.compile(r"\b(bank|banking|financial)\b.*\b(grow|growth|performance|best|worst)\b"),
        _banking_performance,
    ),
    IntentRoute("risk_governance", re.compile(r"\b(risk|risky|governance|red flag)\b"), _risk_governance),
    IntentRoute("comparison", re.compile(r"\b(compare|vs|versus|against)\b"), _comparison),
    IntentRoute(
        "sector_performance",
        re.compile(r"\b(sector|industry).*\b(performance|trend|growth)\b"),
        _sector_performance,
    ),
    IntentRoute("price_trend", re.compile(r"\b(price|trend|forecast|prediction)\b"), _price_trend),
)

FALLBACK_ROUTE = IntentRoute("market_overview", None, _market_overview)


def classify_query(query: str) -> IntentRoute:
    text = query.lower()
    return next((route for route in INTENT_ROUTES if route.matches(text)), FALLBACK_ROUTE)


def suggest_actions(interpretation: str) -> list[str]:
    text = interpretation.lower()
    actions = []
    if "banking" in text:
        actions.append('Use get_companies_by_sector with "banking" for more details')
        actions.append("Try compare_companies to compare specific banks")
    if "risk" in text:
        actions.append("Use assess_investment_risk for detailed risk analysis")
        actions.append("Try get_board_interlocks for governance insights")
    actions.append("Use generate_analyst_report for comprehensive analysis")
    actions.append("Try screen_opportunities to find investment candidates")
    return actions


async def analyze_natural_query(
    queries: Ibex35Queries,
    query: str,
    context: str | None = None,
) -> dict[str, Any]:
    """Route a free-text question to the matching analysis.

    Never raises: any failure comes back as a result carrying `error` and
    `fallback_suggestion`.
    """
    route = classify_query(query)
    result: dict[str, Any] = {
        "query": query,
        "context": context,
        "route": route.name,
        "interpretation": "",
        "execution_plan": [],
        "results": {},
        "suggested_actions": [],
    }

    try:
        await route.handler(queries, query, result)
    except QueryRoutingError as e:
        logger.info("Query %r could not be routed: %s", query, e)
        return {**result, "error": str(e), "suggestion": e.suggestion, "fallback_suggestion": FALLBACK_SUGGESTION}
    except Exception as e:  # noqa: BLE001
        logger.warning("Natural query %r failed on route %s: %s", query, route.name, e)
        return {**result, "error": str(e), "fallback_suggestion": FALLBACK_SUGGESTION}

    result["suggested_actions"] = suggest_actions(result["interpretation"])
    return result
