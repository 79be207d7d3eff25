"""Board interlock and shareholder network analysis."""

from collections.abc import Sequence
from typing import Any

from ibex35.common.constants import (
    INDEX_SIZE,
    INTERLOCK_FLAG_THRESHOLD,
    MARKET_DOMINANCE_CAP,
    SEVERITY_RANK,
)
from ibex35.models import Company, Interlock, ShareholderOverlap
from ibex35.services.queries import Ibex35Queries


def director_network_metrics(interlocks: Sequence[Interlock], index_size: int = INDEX_SIZE) -> dict[str, Any]:
    """Summary of interlocked directors.

    Density divides by the fixed index size, not by the number of companies
    actually returned by the API.
    """
    total = len(interlocks)
    top_directors = list(interlocks[:10])
    return {
        "total_interlocks": total,
        "interlocked_directors": top_directors,
        "most_connected_directors": top_directors[:5],
        "network_density": total / index_size if total else 0,
        "density_basis": "fixed_index_size",
    }


def shareholder_network_metrics(overlaps: Sequence[ShareholderOverlap]) -> dict[str, Any]:
    return {
        "multi_company_shareholders": list(overlaps),
        "cross_sector_investors": [o for o in overlaps if o.company_count > 2],
        "total_overlap_connections": len(overlaps),
        "average_holdings_per_investor": (
            sum(o.company_count for o in overlaps) / len(overlaps) if overlaps else 0
        ),
    }


def rank_red_flags(flags: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Stable sort by severity rank, highest first; equal ranks keep insertion order"""
    return sorted(flags, key=lambda f: SEVERITY_RANK.get(f["severity"], 0), reverse=True)


def governance_risk_factors(companies: Sequence[Company], interlocks: Sequence[Interlock]) -> dict[str, Any]:
    """Per-company governance red flags (interlock count, market dominance)"""
    red_flags: list[dict[str, Any]] = []
    for company in companies:
        if company.symbol:
            linked = [i for i in interlocks if company.symbol in i.company_symbols]
            if len(linked) > INTERLOCK_FLAG_THRESHOLD:
                red_flags.append({
                    "company": company.symbol,
                    "risk_type": "high_director_interlocks",
                    "description": f"Company has {len(linked)} interlocked directors",
                    "severity": "medium",
                })

        if company.market_cap and company.market_cap > MARKET_DOMINANCE_CAP:
            red_flags.append({
                "company": company.symbol,
                "risk_type": "market_dominance",
                "description": "Large market cap may indicate market concentration",
                "severity": "low",
            })

    return {
        "governance_red_flags": rank_red_flags(red_flags),
        "total_red_flags": len(red_flags),
        "high_risk_companies": sum(1 for f in red_flags if f["severity"] == "high"),
    }


async def get_network_analysis(queries: Ibex35Queries) -> dict[str, Any]:
    companies = await queries.get_all_companies()
    interlocks = await queries.get_board_interlocks()
    overlaps = await queries.get_shareholder_overlap()

    return {
        "director_network": director_network_metrics(interlocks),
        "shareholder_network": shareholder_network_metrics(overlaps),
        "cross_ownership_analysis": overlaps,
        "governance_risk_factors": governance_risk_factors(companies, interlocks),
    }
