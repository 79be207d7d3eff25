"""Analyst report assembly (company deep dive, sector overview)."""

from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from ibex35.analytics.risk import assess_investment_risk
from ibex35.analytics.sectors import get_sector_correlation_analysis
from ibex35.analytics.trends import analyze_trends
from ibex35.calculations.concentration import concentration_ratio, percentile_rank
from ibex35.calculations.scoring import governance_score
from ibex35.common.constants import (
    CHALLENGER_RANK,
    HIGH_COMPETITION_COUNT,
    INTERLOCK_FLAG_THRESHOLD,
    LEADER_RANK,
    MEDIUM_COMPETITION_COUNT,
)
from ibex35.errors import NotFoundError
from ibex35.models import Company
from ibex35.services.queries import Ibex35Queries

REPORT_NEWS_LIMIT = 10
KEY_PLAYERS_LIMIT = 10


def _billions(value: float | None) -> str:
    if not value:
        return "an undisclosed market cap"
    return f"market cap of EUR {value / 1e9:.1f}B"


async def company_governance_analysis(queries: Ibex35Queries, company: Company) -> dict[str, Any]:
    directors = await queries.get_company_directors(company.id) if company.id else []
    interlocks = await queries.get_board_interlocks()
    company_interlocks = [i for i in interlocks if company.symbol and company.symbol in i.company_symbols]

    return {
        "board_size": len(directors),
        "director_interlocks": len(company_interlocks),
        "governance_score": governance_score(len(directors), len(company_interlocks)),
        "risk_factors": (
            ["High director interlocks"] if len(company_interlocks) > INTERLOCK_FLAG_THRESHOLD else []
        ),
    }


def competitive_position(rank: int) -> str:
    if rank <= 0:
        return "unranked"
    if rank <= LEADER_RANK:
        return "leader"
    if rank <= CHALLENGER_RANK:
        return "challenger"
    return "follower"


async def company_market_position(queries: Ibex35Queries, company: Company) -> dict[str, Any]:
    """Rank is the 1-based position in the sector listing (0 when absent)"""
    sector_companies = await queries.get_companies_by_sector(company.sector) if company.sector else []
    rank = next(
        (i + 1 for i, c in enumerate(sector_companies) if c.symbol == company.symbol),
        0,
    )
    return {
        "sector_rank": rank,
        "sector_size": len(sector_companies),
        "market_cap_percentile": percentile_rank(
            company.market_cap, [c.market_cap for c in sector_companies]
        ),
        "competitive_position": competitive_position(rank),
    }


def sector_competition(companies: Sequence[Company]) -> dict[str, Any]:
    count = len(companies)
    if count > HIGH_COMPETITION_COUNT:
        intensity = "high"
    elif count > MEDIUM_COMPETITION_COUNT:
        intensity = "medium"
    else:
        intensity = "low"

    return {
        "total_competitors": count,
        "market_leaders": [c.symbol for c in companies[:3]],
        "competition_intensity": intensity,
        "concentration_ratio": concentration_ratio([c.market_cap or 0 for c in companies], 4),
    }


async def company_deep_dive(queries: Ibex35Queries, subject: str, include_charts: bool) -> dict[str, Any]:
    company = await queries.get_company_by_symbol(subject)
    if company is None:
        msg = f"Company {subject} not found"
        raise NotFoundError(msg)

    risk = await assess_investment_risk(queries, subject)
    sections = {
        "company_overview": company,
        "financial_metrics": {
            "market_cap": company.market_cap,
            "pe_ratio": company.pe_ratio,
            "sector": company.sector,
        },
        "governance_analysis": await company_governance_analysis(queries, company),
        "market_position": await company_market_position(queries, company),
        "risk_assessment": risk,
        "recent_developments": (
            await queries.get_recent_news(company.id, REPORT_NEWS_LIMIT) if company.id else []
        ),
    }

    summary = (
        f"{company.name or subject} is a {company.sector or 'unclassified'} company with "
        f"{_billions(company.market_cap)}. Overall risk assessment: {risk['overall_risk_level']}. "
        "Recent developments and market position analysis included."
    )

    charts = [{
        "type": "bar",
        "title": "Risk breakdown",
        "series": {name: d.get("score") for name, d in risk["risk_breakdown"].items()},
    }]
    return {"sections": sections, "executive_summary": summary, "charts": charts if include_charts else None}


async def sector_overview(queries: Ibex35Queries, subject: str, include_charts: bool) -> dict[str, Any]:
    sector_companies = await queries.get_companies_by_sector(subject)
    total_cap = sum(c.market_cap or 0 for c in sector_companies)
    competition = sector_competition(sector_companies)

    sections = {
        "sector_overview": {
            "sector_name": subject,
            "company_count": len(sector_companies),
            "total_market_cap": total_cap,
        },
        "performance_analysis": await get_sector_correlation_analysis(queries, 30),
        "key_players": sector_companies[:KEY_PLAYERS_LIMIT],
        "market_trends": await analyze_trends(queries, "sector_trend", subject, 30),
        "competitive_landscape": competition,
    }

    summary = (
        f"The {subject} sector counts {len(sector_companies)} companies with a combined "
        f"{_billions(total_cap)}. Competition intensity: {competition['competition_intensity']}; "
        f"top-4 concentration ratio {competition['concentration_ratio']:.1f}%."
    )

    charts = [{
        "type": "bar",
        "title": "Market cap by company",
        "series": {c.symbol or c.name: c.market_cap for c in sector_companies[:KEY_PLAYERS_LIMIT]},
    }]
    return {"sections": sections, "executive_summary": summary, "charts": charts if include_charts else None}


ReportBuilder = Callable[[Ibex35Queries, str, bool], Awaitable[dict[str, Any]]]

REPORT_BUILDERS: dict[str, ReportBuilder] = {
    "company_deep_dive": company_deep_dive,
    "sector_overview": sector_overview,
}


async def generate_analyst_report(
    queries: Ibex35Queries,
    subject: str,
    report_type: str,
    include_charts: bool = True,
) -> dict[str, Any]:
    builder = REPORT_BUILDERS.get(report_type)
    if builder is None:
        msg = f"Unknown report type: {report_type}"
        raise ValueError(msg)

    report = await builder(queries, subject, include_charts)
    return {
        "report_type": report_type,
        "subject": subject,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "executive_summary": report["executive_summary"],
        "sections": report["sections"],
        "conclusions": [
            f"Analysis completed for {subject}",
            "Market conditions and competitive position evaluated",
            "Risk assessment and opportunities identified",
        ],
        "recommendations": [
            "Continue monitoring market developments",
            "Review risk factors regularly",
            "Consider sector rotation opportunities",
        ],
        "charts": report["charts"],
    }
