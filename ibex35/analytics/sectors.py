"""Sector aggregation and market concentration (HHI)."""

from collections.abc import Sequence
from typing import Any

from ibex35.calculations.concentration import (
    classify_concentration,
    herfindahl_index,
    round_half_up,
    top_share,
)
from ibex35.models import Company
from ibex35.services.queries import Ibex35Queries


def concentration_summary(values: Sequence[float]) -> dict[str, Any]:
    """HHI (rounded for display) plus its bucket, computed on the exact value"""
    if sum(values) <= 0:
        return {"hhi_index": 0, "concentration_level": "unknown"}
    hhi = herfindahl_index(values)
    return {"hhi_index": round_half_up(hhi), "concentration_level": classify_concentration(hhi)}


def summarize_sectors(companies: Sequence[Company]) -> list[dict[str, Any]]:
    """Group by sector (companies without one are dropped), largest total cap first"""
    groups: dict[str, list[Company]] = {}
    for company in companies:
        if not company.sector:
            continue
        groups.setdefault(company.sector, []).append(company)

    sectors = []
    for sector, members in groups.items():
        caps = [c.market_cap for c in members if c.market_cap]
        pes = [c.pe_ratio for c in members if c.pe_ratio is not None]
        total_cap = sum(caps)
        intra = concentration_summary([c.market_cap or 0 for c in members])
        sectors.append({
            "sector": sector,
            "company_count": len(members),
            "total_market_cap": total_cap,
            "avg_market_cap": total_cap / len(caps) if caps else 0,
            "avg_pe_ratio": sum(pes) / len(pes) if pes else None,
            "hhi_index": intra["hhi_index"],
            "concentration_level": intra["concentration_level"],
            "companies": [
                {"symbol": c.symbol, "name": c.name, "market_cap": c.market_cap}
                for c in members[:5]
            ],
        })

    sectors.sort(key=lambda s: s["total_market_cap"], reverse=True)
    return sectors


def market_concentration(sector_performance: Sequence[dict[str, Any]]) -> dict[str, Any]:
    """HHI across sectors plus the combined share of the three largest"""
    caps = [s["total_market_cap"] for s in sector_performance]
    summary = concentration_summary(caps)
    summary["top_3_market_share"] = top_share(caps, 3)
    return summary


async def get_sector_correlation_analysis(queries: Ibex35Queries, days: int = 30) -> dict[str, Any]:
    companies = await queries.get_all_companies()
    sector_performance = summarize_sectors(companies)

    return {
        "period_days": days,
        "sector_performance": sector_performance,
        "total_sectors": len(sector_performance),
        "largest_sector": sector_performance[0]["sector"] if sector_performance else "Unknown",
        "market_concentration": market_concentration(sector_performance),
    }
