#!/usr/bin/env python3
"""
MCP Tool Definitions - Single Source of Truth

Tool definitions shared between server.py (stdio) and server_http.py (SSE/HTTP).
Argument names here are the ones handlers.py reads.
"""

from typing import Any

from mcp.types import Tool


def _schema(properties: dict[str, Any] | None = None, required: list[str] | None = None) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": properties or {},
        "required": required or [],
    }


COMPANY_ID = {"type": "string", "description": "Company ID"}


def _limit(default: int) -> dict[str, Any]:
    return {"type": "number", "description": "Maximum number of results", "default": default}


def _data_tools() -> list[Tool]:
    return [
        Tool(
            name="get_all_companies",
            description="Get all IBEX 35 companies with symbol, sector, market cap, P/E and board",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_company_by_symbol",
            description="""Get a company by its ticker symbol.

get_company_by_symbol("SAN.MC") → company record, or null if unknown
""",
            inputSchema=_schema(
                {"symbol": {"type": "string", "description": "Ticker symbol (e.g., SAN.MC, BBVA.MC)"}},
                ["symbol"],
            ),
        ),
        Tool(
            name="get_companies_by_sector",
            description="Get companies whose sector contains the given text (case-insensitive)",
            inputSchema=_schema(
                {"sector": {"type": "string", "description": "Sector name (e.g., Banking, Energy)"}},
                ["sector"],
            ),
        ),
        Tool(
            name="get_companies_with_pe_ratio",
            description="Get companies with a known P/E ratio, optionally within [minPE, maxPE]",
            inputSchema=_schema({
                "minPE": {"type": "number", "description": "Minimum P/E ratio"},
                "maxPE": {"type": "number", "description": "Maximum P/E ratio"},
            }),
        ),
        Tool(
            name="get_company_directors",
            description="Get board directors of a company",
            inputSchema=_schema({"companyId": COMPANY_ID}, ["companyId"]),
        ),
        Tool(
            name="get_board_interlocks",
            description="Directors sitting on two or more IBEX 35 boards, most boards first",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_directors_by_name",
            description="Search directors by name (case-insensitive substring)",
            inputSchema=_schema(
                {"name": {"type": "string", "description": "Director name or part of it"}},
                ["name"],
            ),
        ),
        Tool(
            name="get_company_shareholders",
            description="Get major shareholders of a company",
            inputSchema=_schema({"companyId": COMPANY_ID}, ["companyId"]),
        ),
        Tool(
            name="get_shareholder_overlap",
            description="Shareholders with positions in two or more companies",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_top_shareholders_by_sector",
            description="Largest shareholder positions within a sector, by percentage",
            inputSchema=_schema(
                {
                    "sector": {"type": "string", "description": "Sector name"},
                    "limit": _limit(10),
                },
                ["sector"],
            ),
        ),
        Tool(
            name="get_historical_prices",
            description="Historical closes for a company, most recent first",
            inputSchema=_schema(
                {
                    "companyId": COMPANY_ID,
                    "days": {"type": "number", "description": "Number of days of history", "default": 30},
                },
                ["companyId"],
            ),
        ),
        Tool(
            name="get_top_performers",
            description="""Best performing companies by percent price change.

get_top_performers(days=7, limit=10) → ranked by period_change
""",
            inputSchema=_schema({
                "days": {"type": "number", "description": "Window in days", "default": 7},
                "limit": _limit(10),
            }),
        ),
        Tool(
            name="get_recent_news",
            description="Recent news, for one company when companyId is given",
            inputSchema=_schema({
                "companyId": {"type": "string", "description": "Company ID (optional)"},
                "limit": _limit(20),
            }),
        ),
        Tool(
            name="get_news_by_sentiment",
            description="News filtered by sentiment",
            inputSchema=_schema(
                {
                    "sentiment": {
                        "type": "string",
                        "enum": ["positive", "negative", "neutral"],
                        "description": "Sentiment to filter by",
                    },
                    "limit": _limit(20),
                },
                ["sentiment"],
            ),
        ),
        Tool(
            name="get_lobbying_meetings",
            description="EU lobbying meetings, for one company when companyId is given",
            inputSchema=_schema({
                "companyId": {"type": "string", "description": "Company ID (optional)"},
                "limit": _limit(20),
            }),
        ),
        Tool(
            name="get_most_active_lobbyists",
            description="Organizations with the most lobbying meetings",
            inputSchema=_schema({"limit": _limit(10)}),
        ),
        Tool(
            name="get_esg_scores",
            description="ESG scores (not available through the remote API; always returns an error)",
            inputSchema=_schema({"companyId": {"type": "string", "description": "Company ID (optional)"}}),
        ),
        Tool(
            name="get_weekly_reports",
            description="Weekly market reports",
            inputSchema=_schema({
                "reportType": {"type": "string", "description": "Report type (optional)"},
                "limit": _limit(10),
            }),
        ),
        Tool(
            name="execute_custom_query",
            description="Custom SQL (not supported by the remote API; always returns an error)",
            inputSchema=_schema(
                {
                    "sql": {"type": "string", "description": "SQL query"},
                    "params": {"type": "array", "description": "Query parameters"},
                },
                ["sql"],
            ),
        ),
    ]


def _analytics_tools() -> list[Tool]:
    return [
        Tool(
            name="get_network_analysis",
            description="""Board and shareholder network analysis.

Interlocked directors, network density, cross-ownership, governance red flags.
""",
            inputSchema=_schema(),
        ),
        Tool(
            name="get_sector_correlation_analysis",
            description="""Sector aggregates and market concentration.

Per-sector market cap and P/E, Herfindahl-Hirschman Index, top-3 sector share.
""",
            inputSchema=_schema({
                "days": {"type": "number", "description": "Analysis period in days", "default": 30},
            }),
        ),
        Tool(
            name="analyze_natural_query",
            description="""Answer a free-text question about the IBEX 35.

analyze_natural_query("Compare Santander vs BBVA") → company comparison
analyze_natural_query("Which banks show the best growth?") → banking performance
""",
            inputSchema=_schema(
                {
                    "query": {"type": "string", "description": "Question in natural language"},
                    "context": {"type": "string", "description": "Optional extra context"},
                },
                ["query"],
            ),
        ),
        Tool(
            name="compare_companies",
            description="Compare companies on governance, shareholders, performance, news and risk",
            inputSchema=_schema(
                {
                    "companies": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Company symbols to compare",
                    },
                    "metrics": {
                        "type": "array",
                        "items": {
                            "type": "string",
                            "enum": ["all", "governance", "shareholders", "performance", "news", "risk"],
                        },
                        "description": "Sections to include",
                        "default": ["all"],
                    },
                },
                ["companies"],
            ),
        ),
        Tool(
            name="analyze_trends",
            description="""Trend analysis for a company, sector or the whole market.

company_trend: direction, strength, support/resistance, optional 1-day forecast
sector_trend / market_trend: average change, best/worst, volatility
correlation_analysis: sector concentration insights
""",
            inputSchema=_schema(
                {
                    "analysisType": {
                        "type": "string",
                        "enum": ["company_trend", "sector_trend", "market_trend", "correlation_analysis"],
                        "description": "Kind of analysis",
                    },
                    "target": {"type": "string", "description": "Company symbol or sector name"},
                    "period": {"type": "number", "description": "Window in days", "default": 30},
                    "includeForecast": {
                        "type": "boolean",
                        "description": "Add a naive one-step forecast (company_trend only)",
                        "default": False,
                    },
                },
                ["analysisType"],
            ),
        ),
        Tool(
            name="assess_investment_risk",
            description="Risk assessment for a company, sector or portfolio",
            inputSchema=_schema(
                {
                    "target": {"type": "string", "description": "Company symbol, sector or portfolio name"},
                    "riskTypes": {
                        "type": "array",
                        "items": {
                            "type": "string",
                            "enum": [
                                "all", "market_risk", "governance_risk", "sector_risk",
                                "liquidity_risk", "concentration_risk",
                            ],
                        },
                        "default": ["all"],
                    },
                },
                ["target"],
            ),
        ),
        Tool(
            name="generate_analyst_report",
            description="Analyst report: company_deep_dive or sector_overview",
            inputSchema=_schema(
                {
                    "subject": {"type": "string", "description": "Company symbol or sector name"},
                    "reportType": {
                        "type": "string",
                        "enum": ["company_deep_dive", "sector_overview"],
                    },
                    "includeCharts": {"type": "boolean", "default": True},
                },
                ["subject", "reportType"],
            ),
        ),
        Tool(
            name="screen_opportunities",
            description="Screen companies by P/E, market cap and sector, ranked by opportunity score",
            inputSchema=_schema({
                "criteria": {
                    "type": "object",
                    "properties": {
                        "pe_ratio_min": {"type": "number"},
                        "pe_ratio_max": {"type": "number"},
                        "market_cap_min": {"type": "number"},
                        "market_cap_max": {"type": "number"},
                        "sectors": {"type": "array", "items": {"type": "string"}},
                        "exclude_sectors": {"type": "array", "items": {"type": "string"}},
                    },
                },
                "limit": _limit(10),
            }),
        ),
    ]


def get_mcp_tools() -> list[Tool]:
    """
    Return list of MCP tools.

    Single source of truth for tool definitions.
    Both stdio and HTTP servers import this function.
    """
    return _data_tools() + _analytics_tools()
