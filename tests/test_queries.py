#!/usr/bin/env python3
"""
Test the query facade over an in-memory gateway.
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ibex35.common.constants import (
    COMPANIES_ENDPOINT,
    COMPANY_NEWS_ENDPOINT,
    HISTORICAL_PRICES_ENDPOINT,
    LOBBYING_ENDPOINT,
    NEWS_ENDPOINT,
    REPORTS_ENDPOINT,
    SHAREHOLDER_POSITIONS_ENDPOINT,
)
from ibex35.errors import RemoteRequestError, UnsupportedOperationError
from tests.fakes import company, make_queries

COMPANIES = [
    company("SAN", "Banking", 60e9, price_to_earnings=6.5),
    company("BBVA", "Banking", 40e9, pe_ratio=7.1),
    company("IBE", "Energy / Utilities", 70e9, pe_ratio=18),
    company("TEF", None, 20e9),
    company("ITX", "Textile", 90e9, pe_ratio=26),
]


def run(coro):
    return asyncio.run(coro)


def test_get_all_companies_missing_envelope():
    queries, _ = make_queries(routes={COMPANIES_ENDPOINT: {"status": "ok"}})
    assert run(queries.get_all_companies()) == []
    print("✓ Missing data key yields empty list")


def test_get_company_by_symbol_exact_match():
    queries, _ = make_queries(COMPANIES)
    assert run(queries.get_company_by_symbol("BBVA")).name == "BBVA SA"
    assert run(queries.get_company_by_symbol("bbva")) is None
    assert run(queries.get_company_by_symbol("XXX")) is None
    print("✓ Symbol lookup is exact")


def test_get_companies_by_sector_substring():
    """Case-insensitive substring; companies without sector never match"""
    queries, _ = make_queries(COMPANIES)
    banking = run(queries.get_companies_by_sector("bank"))
    assert [c.symbol for c in banking] == ["SAN", "BBVA"]
    energy = run(queries.get_companies_by_sector("UTILITIES"))
    assert [c.symbol for c in energy] == ["IBE"]
    everything = run(queries.get_companies_by_sector(""))
    assert "TEF" not in [c.symbol for c in everything]
    assert len(everything) == 4
    print("✓ Sector filter matches substrings")


def test_get_companies_with_pe_ratio_bounds():
    queries, _ = make_queries(COMPANIES)
    assert [c.symbol for c in run(queries.get_companies_with_pe_ratio())] == ["SAN", "BBVA", "IBE", "ITX"]
    assert [c.symbol for c in run(queries.get_companies_with_pe_ratio(min_pe=7))] == ["BBVA", "IBE", "ITX"]
    assert [c.symbol for c in run(queries.get_companies_with_pe_ratio(max_pe=18))] == ["SAN", "BBVA", "IBE"]
    assert [c.symbol for c in run(queries.get_companies_with_pe_ratio(7, 18))] == ["BBVA", "IBE"]
    print("✓ P/E bounds applied only when given")


def test_board_interlocks_distinct_companies():
    """board_count counts distinct companies; output sorted by board_count"""
    companies = [
        company("SAN", directors=[
            {"name": "Ana", "position": "Chair"},
            {"name": "Luis", "position": "Director"},
            {"name": "Ana", "position": "Vice Chair"},
        ]),
        company("BBVA", directors=[{"name": "Luis", "position": "Director"}, {"name": "Eva"}]),
        company("IBE", directors=[{"name": "Luis", "position": "Advisor"}, {"name": "Ana"}]),
        company("TEF", directors=[{"name": "Marta"}]),
    ]
    queries, _ = make_queries(companies)
    interlocks = run(queries.get_board_interlocks())

    assert [i.director_name for i in interlocks] == ["Luis", "Ana"]
    luis, ana = interlocks
    assert luis.board_count == 3
    assert luis.company_symbols == ["SAN", "BBVA", "IBE"]
    assert luis.companies == "SAN SA, BBVA SA, IBE SA"
    assert ana.board_count == 2
    assert all(i.board_count >= 2 for i in interlocks)
    counts = [i.board_count for i in interlocks]
    assert counts == sorted(counts, reverse=True)
    print("✓ Interlocks count distinct boards")


def test_company_directors_and_name_search():
    directors = [
        {"name": "Ana Botín", "position": "Chair", "company_id": "san"},
        {"name": "Carlos Torres", "position": "Chair", "company_id": "bbva"},
        {"name": "Ana Pérez", "position": "CFO", "company_id": 5},
    ]
    queries, gateway = make_queries(directors=directors)
    assert [d.name for d in run(queries.get_company_directors("san"))] == ["Ana Botín"]
    assert [d.name for d in run(queries.get_company_directors("5"))] == ["Ana Pérez"]
    assert [d.name for d in run(queries.get_directors_by_name("ana"))] == ["Ana Botín", "Ana Pérez"]
    assert gateway.count(COMPANIES_ENDPOINT) == 0
    print("✓ Directors filtered by company and name")


def test_company_shareholders_resolve_symbol():
    positions = [
        {"shareholder_name": "BlackRock", "company_symbol": "SAN", "percentage": 5.0},
        {"name": "Norges", "ticker": "SAN", "percentage": 3.0},
        {"shareholder_name": "BlackRock", "company_symbol": "BBVA", "percentage": 6.0},
    ]
    queries, gateway = make_queries(COMPANIES, positions=positions)
    holders = run(queries.get_company_shareholders("san"))
    assert [h.shareholder_name for h in holders] == ["BlackRock", "Norges"]

    assert run(queries.get_company_shareholders("unknown")) == []
    assert gateway.count(SHAREHOLDER_POSITIONS_ENDPOINT) == 1
    print("✓ Shareholders resolved through symbol")


def test_positions_envelope_fallback_key():
    queries, _ = make_queries(COMPANIES, routes={
        SHAREHOLDER_POSITIONS_ENDPOINT: {"positions": [{"name": "Amancio", "ticker": "ITX", "percentage": 59}]},
    })
    holders = run(queries.get_company_shareholders("itx"))
    assert holders[0].shareholder_name == "Amancio"
    print("✓ positions key accepted")


def test_top_shareholders_by_sector():
    positions = [
        {"shareholder_name": "A", "company_symbol": "SAN", "percentage": 2.0},
        {"shareholder_name": "B", "company_symbol": "BBVA", "percentage": 7.0},
        {"shareholder_name": "C", "company_symbol": "ITX", "percentage": 59.0},
        {"shareholder_name": "D", "company_symbol": "SAN", "percentage": 4.0},
    ]
    queries, _ = make_queries(COMPANIES, positions=positions)
    top = run(queries.get_top_shareholders_by_sector("banking", limit=2))
    assert [p.shareholder_name for p in top] == ["B", "D"]
    print("✓ Top sector shareholders sorted and truncated")


def test_shareholder_overlap():
    positions = [
        {"shareholder_name": "BlackRock", "company_symbol": "SAN", "percentage": 5.0},
        {"shareholder_name": "BlackRock", "company_symbol": "BBVA", "percentage": 6.0},
        {"shareholder_name": "BlackRock", "company_symbol": "IBE", "percentage": 4.0},
        {"shareholder_name": "Norges", "company_symbol": "SAN", "percentage": 3.0},
        {"shareholder_name": "Norges", "company_symbol": "ITX", "percentage": 1.0},
        {"shareholder_name": "Amancio", "company_symbol": "ITX", "percentage": 59.0},
    ]
    queries, _ = make_queries(positions=positions)
    overlaps = run(queries.get_shareholder_overlap())
    assert [o.shareholder_name for o in overlaps] == ["BlackRock", "Norges"]
    assert overlaps[0].company_count == 3
    assert overlaps[0].companies == "SAN,BBVA,IBE"
    assert overlaps[0].avg_percentage == pytest.approx(5.0)
    assert overlaps[1].avg_percentage == pytest.approx(2.0)
    print("✓ Shareholder overlap grouped by name")


def test_historical_prices_resolution():
    queries, gateway = make_queries(COMPANIES, prices={"SAN": (110, 105, 100)})
    history = run(queries.get_historical_prices("san", days=3))
    assert [p.close for p in history] == [110, 105, 100]
    assert gateway.calls[-1] == (HISTORICAL_PRICES_ENDPOINT, {"symbol": "SAN", "days": 3})

    assert run(queries.get_historical_prices("missing")) == []
    assert gateway.count(HISTORICAL_PRICES_ENDPOINT) == 1
    print("✓ Historical prices resolved via symbol")


def test_top_performers_ranking():
    """Sorted by change, limited, skipping short histories and failures"""
    prices = {
        "SAN": (110, 100),     # +10%
        "BBVA": (95, 100),     # -5%
        "IBE": (120,),         # one point, excluded
        "ITX": (103, 101, 100),  # +3%
        # TEF has no route -> fetch fails, skipped
    }
    queries, _ = make_queries(COMPANIES, prices=prices)
    performers = run(queries.get_top_performers(days=7, limit=10))
    assert [p.symbol for p in performers] == ["SAN", "ITX", "BBVA"]
    assert performers[0].period_change == pytest.approx(10.0)
    assert performers[0].current_price == 110

    limited = run(queries.get_top_performers(days=7, limit=2))
    assert len(limited) == 2
    changes = [p.period_change for p in limited]
    assert changes == sorted(changes, reverse=True)
    print("✓ Top performers ranked")


def test_top_performers_scan_cap():
    companies = [company(f"C{i:02d}") for i in range(30)]
    prices = {f"C{i:02d}": (100 + i, 100) for i in range(30)}
    queries, gateway = make_queries(companies, prices=prices)

    performers = run(queries.get_top_performers(limit=50))
    assert gateway.count(HISTORICAL_PRICES_ENDPOINT) == 20
    assert len(performers) == 20
    assert performers[0].symbol == "C19"

    queries, gateway = make_queries(companies, prices=prices)
    run(queries.get_top_performers(limit=5, scan_cap=3))
    assert gateway.count(HISTORICAL_PRICES_ENDPOINT) == 3
    print("✓ Scan cap bounds outbound calls")


def test_recent_news_routes():
    queries, gateway = make_queries(COMPANIES, routes={
        NEWS_ENDPOINT: {"news": [{"title": "Market up"}]},
        COMPANY_NEWS_ENDPOINT: lambda params: {"news": [{"title": f"{params['symbol']} news"}]},
    })
    assert run(queries.get_recent_news())[0].title == "Market up"
    assert gateway.calls[-1] == (NEWS_ENDPOINT, {"limit": 20})

    company_news = run(queries.get_recent_news("bbva", limit=3))
    assert company_news[0].title == "BBVA news"
    assert gateway.calls[-1] == (COMPANY_NEWS_ENDPOINT, {"symbol": "BBVA", "limit": 3})

    assert run(queries.get_recent_news("nope")) == []
    print("✓ News routed globally or per company")


def test_lobbying_queries():
    meetings = [
        {"organization_name": "Iberdrola SA", "eu_institution": "Commission", "quarterly_spending": 100.0},
        {"organization_name": "Iberdrola SA", "eu_institution": "Parliament", "quarterly_spending": 300.0},
        {"organization_name": "Iberdrola SA", "eu_institution": "Commission"},
        {"organization_name": "Telefonica SA", "eu_institution": "Commission"},
    ]
    companies = [company("IBE", name="Iberdrola"), company("TEF", name="Telefonica")]
    queries, _ = make_queries(companies, routes={LOBBYING_ENDPOINT: {"lobbying": meetings}})

    ibe_meetings = run(queries.get_lobbying_meetings("ibe"))
    assert len(ibe_meetings) == 3

    lobbyists = run(queries.get_most_active_lobbyists())
    assert lobbyists[0].organization_name == "Iberdrola SA"
    assert lobbyists[0].meeting_count == 3
    assert lobbyists[0].institutions == "Commission,Parliament"
    assert lobbyists[0].spending == [100.0, 300.0]
    assert lobbyists[0].avg_spending == pytest.approx(200.0)
    assert lobbyists[1].avg_spending is None
    print("✓ Lobbying filtered and grouped")


def test_weekly_reports_params():
    queries, gateway = make_queries(routes={REPORTS_ENDPOINT: {"reports": [{"title": "W1"}]}})
    reports = run(queries.get_weekly_reports("market", 5))
    assert reports[0].title == "W1"
    assert gateway.calls[-1] == (REPORTS_ENDPOINT, {"type": "market", "limit": 5})
    print("✓ Weekly reports forwarded params")


def test_unsupported_operations_raise():
    queries, gateway = make_queries(COMPANIES)
    with pytest.raises(UnsupportedOperationError, match="not supported"):
        run(queries.execute_custom_query("SELECT * FROM companies"))
    with pytest.raises(UnsupportedOperationError, match="ESG"):
        run(queries.get_esg_scores("san"))
    assert gateway.calls == []
    print("✓ Unsupported operations raise without calling the API")


def test_remote_errors_propagate():
    queries, _ = make_queries(routes={COMPANIES_ENDPOINT: RemoteRequestError("API request failed: 500", 500)})
    with pytest.raises(RemoteRequestError):
        run(queries.get_company_by_symbol("SAN"))
    print("✓ Remote errors propagate from lookups")


if __name__ == "__main__":
    print("\nTesting query facade...\n")
    test_get_all_companies_missing_envelope()
    test_get_company_by_symbol_exact_match()
    test_get_companies_by_sector_substring()
    test_get_companies_with_pe_ratio_bounds()
    test_board_interlocks_distinct_companies()
    test_company_directors_and_name_search()
    test_company_shareholders_resolve_symbol()
    test_positions_envelope_fallback_key()
    test_top_shareholders_by_sector()
    test_shareholder_overlap()
    test_historical_prices_resolution()
    test_top_performers_ranking()
    test_top_performers_scan_cap()
    test_recent_news_routes()
    test_lobbying_queries()
    test_weekly_reports_params()
    test_unsupported_operations_raise()
    test_remote_errors_propagate()
    print("\n✓ All query tests passed!\n")
