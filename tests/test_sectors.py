#!/usr/bin/env python3
"""
Test sector aggregation and market concentration.
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ibex35.analytics.sectors import get_sector_correlation_analysis, summarize_sectors
from ibex35.models import Company
from tests.fakes import company, make_queries


def analyze(companies, days=30):
    queries, _ = make_queries(companies)
    return asyncio.run(get_sector_correlation_analysis(queries, days))


def test_banking_two_company_scenario():
    """SAN 60B + BBVA 40B: one sector, 100B, intra-sector HHI 5200"""
    result = analyze([
        company("SAN", "Banking", 60e9),
        company("BBVA", "Banking", 40e9),
    ])
    assert result["total_sectors"] == 1
    assert result["largest_sector"] == "Banking"

    banking = result["sector_performance"][0]
    assert banking["sector"] == "Banking"
    assert banking["total_market_cap"] == pytest.approx(100e9)
    assert banking["avg_market_cap"] == pytest.approx(50e9)
    assert banking["hhi_index"] == 5200
    assert banking["concentration_level"] == "highly_concentrated"

    # one sector holds the whole market
    assert result["market_concentration"]["hhi_index"] == 10000
    assert result["market_concentration"]["top_3_market_share"] == pytest.approx(100.0)
    print("✓ Banking scenario yields HHI 5200")


def test_sectors_sorted_and_unsectored_dropped():
    result = analyze([
        company("SAN", "Banking", 60e9, pe_ratio=6),
        company("IBE", "Energy", 80e9, price_to_earnings=18),
        company("REP", "Energy", 20e9, pe_ratio=4),
        company("TEF", None, 500e9),
        company("ITX", "Textile", 90e9),
    ])
    sectors = result["sector_performance"]
    assert [s["sector"] for s in sectors] == ["Energy", "Textile", "Banking"]
    assert sectors[0]["avg_pe_ratio"] == pytest.approx(11.0)
    assert sectors[1]["avg_pe_ratio"] is None
    assert result["period_days"] == 30
    print("✓ Sectors sorted by total cap; missing sector dropped")


def test_market_concentration_competitive_and_boundary():
    companies = [company(f"C{i}", f"Sector{i}", 10e9) for i in range(4)]
    result = analyze(companies)
    concentration = result["market_concentration"]
    assert concentration["hhi_index"] == 2500
    assert concentration["concentration_level"] == "moderately_concentrated"

    companies = [company(f"C{i}", f"Sector{i}", 10e9) for i in range(10)]
    concentration = analyze(companies)["market_concentration"]
    assert concentration["hhi_index"] == 1000
    assert concentration["concentration_level"] == "competitive"
    assert concentration["top_3_market_share"] == pytest.approx(30.0)
    print("✓ Exactly 2500 is not highly concentrated")


def test_empty_and_zero_caps():
    result = analyze([])
    assert result["total_sectors"] == 0
    assert result["largest_sector"] == "Unknown"
    assert result["market_concentration"]["concentration_level"] == "unknown"
    assert result["market_concentration"]["hhi_index"] == 0

    sectors = summarize_sectors([Company(symbol="X", sector="Steel", market_cap=None)])
    assert sectors[0]["total_market_cap"] == 0
    assert sectors[0]["avg_market_cap"] == 0
    assert sectors[0]["concentration_level"] == "unknown"
    print("✓ Empty and zero-cap inputs")


def test_sector_companies_listed():
    companies = [company(f"B{i}", "Banking", float(10 - i) * 1e9) for i in range(7)]
    sectors = summarize_sectors([Company.model_validate(c) for c in companies])
    assert sectors[0]["company_count"] == 7
    assert [c["symbol"] for c in sectors[0]["companies"]] == ["B0", "B1", "B2", "B3", "B4"]
    print("✓ Top 5 companies per sector listed")


if __name__ == "__main__":
    print("\nTesting sector analysis...\n")
    test_banking_two_company_scenario()
    test_sectors_sorted_and_unsectored_dropped()
    test_market_concentration_competitive_and_boundary()
    test_empty_and_zero_caps()
    test_sector_companies_listed()
    print("\n✓ All sector tests passed!\n")
