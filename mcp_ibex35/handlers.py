"""
Tool handlers - single source of truth for tool execution logic.

This module contains the routing that both server.py (stdio) and
server_http.py (HTTP/SSE) use.

Architecture:
- Protocol layer (server.py, server_http.py) handles MCP transport
- This module handles argument parsing and routing to ibex35
- ibex35 handles remote data access and analytics
"""

from collections.abc import Awaitable, Callable
from typing import Any

from ibex35.analytics.comparison import compare_companies
from ibex35.analytics.network import get_network_analysis
from ibex35.analytics.query_router import analyze_natural_query
from ibex35.analytics.reports import generate_analyst_report
from ibex35.analytics.risk import assess_investment_risk
from ibex35.analytics.screening import screen_opportunities
from ibex35.analytics.sectors import get_sector_correlation_analysis
from ibex35.analytics.trends import analyze_trends
from ibex35.common.config import load_config
from ibex35.services.gateway import RemoteDataGateway
from ibex35.services.queries import Ibex35Queries

from .formatters.results import format_result
from .logging_config import get_logger

logger = get_logger(__name__)

ToolHandler = Callable[[Ibex35Queries, dict[str, Any]], Awaitable[Any]]


def require(arguments: dict[str, Any], tool: str, key: str) -> Any:  # noqa: ANN401
    """Return a required argument or raise the standard missing-parameter error"""
    value = arguments.get(key)
    if value is None or value == "" or value == []:
        msg = f"{tool}() requires '{key}' parameter"
        raise ValueError(msg)
    return value


def normalize_list(value: str | list[str] | None) -> list[str]:
    """
    Normalize list arguments.

    Handles:
    - None: []
    - Comma-separated string: "SAN.MC,BBVA.MC" -> ["SAN.MC", "BBVA.MC"]
    - List: [" SAN.MC "] -> ["SAN.MC"]
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [s.strip() for s in value if s and s.strip()]


# Data tools


async def handle_get_all_companies(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_all_companies()


async def handle_get_company_by_symbol(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    symbol = require(arguments, "get_company_by_symbol", "symbol")
    return await queries.get_company_by_symbol(symbol)


async def handle_get_companies_by_sector(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    sector = require(arguments, "get_companies_by_sector", "sector")
    return await queries.get_companies_by_sector(sector)


async def handle_get_companies_with_pe_ratio(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_companies_with_pe_ratio(arguments.get("minPE"), arguments.get("maxPE"))


async def handle_get_company_directors(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    company_id = require(arguments, "get_company_directors", "companyId")
    return await queries.get_company_directors(str(company_id))


async def handle_get_board_interlocks(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_board_interlocks()


async def handle_get_directors_by_name(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    name = require(arguments, "get_directors_by_name", "name")
    return await queries.get_directors_by_name(name)


async def handle_get_company_shareholders(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    company_id = require(arguments, "get_company_shareholders", "companyId")
    return await queries.get_company_shareholders(str(company_id))


async def handle_get_shareholder_overlap(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_shareholder_overlap()


async def handle_get_top_shareholders_by_sector(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    sector = require(arguments, "get_top_shareholders_by_sector", "sector")
    return await queries.get_top_shareholders_by_sector(sector, arguments.get("limit") or 10)


async def handle_get_historical_prices(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    company_id = require(arguments, "get_historical_prices", "companyId")
    return await queries.get_historical_prices(str(company_id), arguments.get("days") or 30)


async def handle_get_top_performers(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_top_performers(arguments.get("days") or 7, arguments.get("limit") or 10)


async def handle_get_recent_news(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    company_id = arguments.get("companyId")
    return await queries.get_recent_news(
        str(company_id) if company_id else None, arguments.get("limit") or 20
    )


async def handle_get_news_by_sentiment(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    sentiment = require(arguments, "get_news_by_sentiment", "sentiment")
    return await queries.get_news_by_sentiment(sentiment, arguments.get("limit") or 20)


async def handle_get_lobbying_meetings(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    company_id = arguments.get("companyId")
    return await queries.get_lobbying_meetings(
        str(company_id) if company_id else None, arguments.get("limit") or 20
    )


async def handle_get_most_active_lobbyists(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_most_active_lobbyists(arguments.get("limit") or 10)


async def handle_get_esg_scores(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_esg_scores(arguments.get("companyId"))


async def handle_get_weekly_reports(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await queries.get_weekly_reports(arguments.get("reportType"), arguments.get("limit") or 10)


async def handle_execute_custom_query(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    sql = require(arguments, "execute_custom_query", "sql")
    return await queries.execute_custom_query(sql, arguments.get("params"))


# Analytics tools


async def handle_get_network_analysis(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await get_network_analysis(queries)


async def handle_get_sector_correlation_analysis(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await get_sector_correlation_analysis(queries, arguments.get("days") or 30)


async def handle_analyze_natural_query(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    query = require(arguments, "analyze_natural_query", "query")
    return await analyze_natural_query(queries, query, arguments.get("context"))


async def handle_compare_companies(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    companies = normalize_list(require(arguments, "compare_companies", "companies"))
    if not companies:
        msg = "compare_companies() requires 'companies' parameter"
        raise ValueError(msg)
    metrics = normalize_list(arguments.get("metrics")) or ["all"]
    return await compare_companies(queries, companies, metrics)


async def handle_analyze_trends(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    analysis_type = require(arguments, "analyze_trends", "analysisType")
    return await analyze_trends(
        queries,
        analysis_type,
        arguments.get("target"),
        arguments.get("period") or 30,
        bool(arguments.get("includeForecast", False)),
    )


async def handle_assess_investment_risk(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    target = require(arguments, "assess_investment_risk", "target")
    risk_types = normalize_list(arguments.get("riskTypes")) or ["all"]
    return await assess_investment_risk(queries, target, risk_types)


async def handle_generate_analyst_report(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    subject = require(arguments, "generate_analyst_report", "subject")
    report_type = require(arguments, "generate_analyst_report", "reportType")
    include_charts = arguments.get("includeCharts")
    return await generate_analyst_report(
        queries, subject, report_type, True if include_charts is None else bool(include_charts)
    )


async def handle_screen_opportunities(queries: Ibex35Queries, arguments: dict[str, Any]) -> Any:  # noqa: ANN401
    return await screen_opportunities(queries, arguments.get("criteria"), arguments.get("limit") or 10)


TOOL_HANDLERS: dict[str, ToolHandler] = {
    "get_all_companies": handle_get_all_companies,
    "get_company_by_symbol": handle_get_company_by_symbol,
    "get_companies_by_sector": handle_get_companies_by_sector,
    "get_companies_with_pe_ratio": handle_get_companies_with_pe_ratio,
    "get_company_directors": handle_get_company_directors,
    "get_board_interlocks": handle_get_board_interlocks,
    "get_directors_by_name": handle_get_directors_by_name,
    "get_company_shareholders": handle_get_company_shareholders,
    "get_shareholder_overlap": handle_get_shareholder_overlap,
    "get_top_shareholders_by_sector": handle_get_top_shareholders_by_sector,
    "get_historical_prices": handle_get_historical_prices,
    "get_top_performers": handle_get_top_performers,
    "get_recent_news": handle_get_recent_news,
    "get_news_by_sentiment": handle_get_news_by_sentiment,
    "get_lobbying_meetings": handle_get_lobbying_meetings,
    "get_most_active_lobbyists": handle_get_most_active_lobbyists,
    "get_esg_scores": handle_get_esg_scores,
    "get_weekly_reports": handle_get_weekly_reports,
    "execute_custom_query": handle_execute_custom_query,
    "get_network_analysis": handle_get_network_analysis,
    "get_sector_correlation_analysis": handle_get_sector_correlation_analysis,
    "analyze_natural_query": handle_analyze_natural_query,
    "compare_companies": handle_compare_companies,
    "analyze_trends": handle_analyze_trends,
    "assess_investment_risk": handle_assess_investment_risk,
    "generate_analyst_report": handle_generate_analyst_report,
    "screen_opportunities": handle_screen_opportunities,
}


async def call_tool(
    name: str,
    arguments: dict[str, Any],
    queries: Ibex35Queries | None = None,
) -> str:
    """
    Route tool call to appropriate handler.

    Returns the result serialized as JSON text.
    Raises ValueError for unknown tools or missing parameters; data layer
    errors (RemoteRequestError, UnsupportedOperationError, ...) propagate.

    Without `queries`, a fresh gateway is opened for this call and closed
    afterwards.
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        msg = f"Unknown tool: {name}"
        raise ValueError(msg)

    logger.info("call_tool: name=%s, arguments=%s", name, arguments)
    try:
        if queries is not None:
            result = format_result(await handler(queries, arguments))
        else:
            async with RemoteDataGateway(load_config()) as gateway:
                result = format_result(await handler(Ibex35Queries(gateway), arguments))
    except Exception as e:
        logger.error("%s() failed: %s", name, e)
        raise

    logger.info("%s() returning %d chars", name, len(result))
    return result
