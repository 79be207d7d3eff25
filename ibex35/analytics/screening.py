"""Opportunity screening and ranking."""

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel

from ibex35.calculations.scoring import opportunity_score
from ibex35.models import Company
from ibex35.services.queries import Ibex35Queries


class ScreeningCriteria(BaseModel):
    """Optional filters; an unset bound or empty list is not applied"""

    pe_ratio_min: float | None = None
    pe_ratio_max: float | None = None
    market_cap_min: float | None = None
    market_cap_max: float | None = None
    sectors: list[str] = []
    exclude_sectors: list[str] = []


def _sector_matches(company: Company, needles: Sequence[str]) -> bool:
    sector = (company.sector or "").lower()
    return any(needle.lower() in sector for needle in needles)


def apply_screens(companies: Sequence[Company], criteria: ScreeningCriteria) -> list[Company]:
    """P/E bounds, market-cap bounds, sector include list, sector exclude list, in that order.

    A company missing the value a bound tests is filtered out by that bound.
    """
    survivors = list(companies)

    if criteria.pe_ratio_min is not None:
        survivors = [c for c in survivors if c.pe_ratio is not None and c.pe_ratio >= criteria.pe_ratio_min]
    if criteria.pe_ratio_max is not None:
        survivors = [c for c in survivors if c.pe_ratio is not None and c.pe_ratio <= criteria.pe_ratio_max]

    if criteria.market_cap_min is not None:
        survivors = [c for c in survivors if c.market_cap and c.market_cap >= criteria.market_cap_min]
    if criteria.market_cap_max is not None:
        survivors = [c for c in survivors if c.market_cap and c.market_cap <= criteria.market_cap_max]

    if criteria.sectors:
        survivors = [c for c in survivors if _sector_matches(c, criteria.sectors)]
    if criteria.exclude_sectors:
        survivors = [c for c in survivors if not _sector_matches(c, criteria.exclude_sectors)]

    return survivors


def score_opportunities(companies: Sequence[Company]) -> list[dict[str, Any]]:
    scored = [
        {
            "symbol": c.symbol,
            "name": c.name,
            "sector": c.sector,
            "market_cap": c.market_cap,
            "pe_ratio": c.pe_ratio,
            "opportunity_score": opportunity_score(c),
        }
        for c in companies
    ]
    scored.sort(key=lambda o: o["opportunity_score"], reverse=True)
    return scored


def top_sector(opportunities: Sequence[dict[str, Any]]) -> str:
    """Sector with the most opportunities; ties go to the sector seen first"""
    counts: dict[str, int] = {}
    for opportunity in opportunities:
        sector = opportunity["sector"] or "Other"
        counts[sector] = counts.get(sector, 0) + 1
    if not counts:
        return "Other"
    return max(counts, key=counts.__getitem__)


async def screen_opportunities(
    queries: Ibex35Queries,
    criteria: ScreeningCriteria | dict[str, Any] | None = None,
    limit: int = 10,
) -> dict[str, Any]:
    if not isinstance(criteria, ScreeningCriteria):
        criteria = ScreeningCriteria.model_validate(criteria or {})

    companies = await queries.get_all_companies()
    scored = score_opportunities(apply_screens(companies, criteria))

    return {
        "screening_criteria": criteria.model_dump(),
        "total_candidates": len(scored),
        "opportunities": scored[:limit],
        "summary": {
            "top_sector": top_sector(scored),
            "average_score": (
                sum(o["opportunity_score"] for o in scored) / len(scored) if scored else 0
            ),
        },
    }
