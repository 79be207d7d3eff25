"""
Query Facade - read operations over the remote IBEX 35 API.

The API only exposes a handful of list endpoints, so most query shapes
(sector filter, P/E range, interlocks, overlaps) are computed here in memory.
Lookups that find nothing return None or [] rather than raising.
"""

import logging
from typing import Any

from ibex35.calculations.performance import period_change
from ibex35.common.constants import (
    COMPANIES_ENDPOINT,
    COMPANY_NEWS_ENDPOINT,
    ENVELOPE_KEYS,
    HISTORICAL_PRICES_ENDPOINT,
    LOBBYING_ENDPOINT,
    NETWORK_ENDPOINT,
    NEWS_ENDPOINT,
    NEWS_SENTIMENT_ENDPOINT,
    REPORTS_ENDPOINT,
    SHAREHOLDER_POSITIONS_ENDPOINT,
    TOP_PERFORMERS_SCAN_CAP,
)
from ibex35.errors import RemoteRequestError, UnsupportedOperationError
from ibex35.models import (
    Company,
    Director,
    HistoricalPrice,
    Interlock,
    LobbyingMeeting,
    LobbyistActivity,
    NewsItem,
    Performance,
    RecordT,
    ShareholderOverlap,
    ShareholderPosition,
    WeeklyReport,
    extract_payload,
    parse_records,
)
from ibex35.services.gateway import DataGateway

logger = logging.getLogger(__name__)


class Ibex35Queries:
    """Read-only query layer built on a DataGateway"""

    def __init__(self, gateway: DataGateway) -> None:
        self.gateway = gateway

    async def _fetch_records(
        self,
        model: type[RecordT],
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> list[RecordT]:
        payload = await self.gateway.fetch(endpoint, params)
        items = extract_payload(payload, ENVELOPE_KEYS[endpoint], endpoint)
        return parse_records(model, items, endpoint)

    # Companies

    async def get_all_companies(self) -> list[Company]:
        return await self._fetch_records(Company, COMPANIES_ENDPOINT)

    async def get_company_by_symbol(self, symbol: str) -> Company | None:
        """Exact symbol match, None if absent"""
        companies = await self.get_all_companies()
        return next((c for c in companies if c.symbol == symbol), None)

    async def get_company_by_id(self, company_id: str) -> Company | None:
        companies = await self.get_all_companies()
        return next((c for c in companies if c.id == str(company_id)), None)

    async def get_companies_by_sector(self, sector: str) -> list[Company]:
        """Case-insensitive substring match on sector; companies without a sector never match"""
        needle = sector.lower()
        companies = await self.get_all_companies()
        return [c for c in companies if c.sector and needle in c.sector.lower()]

    async def get_companies_with_pe_ratio(
        self,
        min_pe: float | None = None,
        max_pe: float | None = None,
    ) -> list[Company]:
        companies = await self.get_all_companies()
        results = []
        for company in companies:
            pe = company.pe_ratio
            if pe is None:
                continue
            if min_pe is not None and pe < min_pe:
                continue
            if max_pe is not None and pe > max_pe:
                continue
            results.append(company)
        return results

    # Directors and governance

    async def get_company_directors(self, company_id: str) -> list[Director]:
        directors = await self._fetch_records(Director, NETWORK_ENDPOINT)
        return [d for d in directors if d.company_id == str(company_id)]

    async def get_board_interlocks(self) -> list[Interlock]:
        """Directors (matched by exact name) sitting on two or more boards"""
        companies = await self.get_all_companies()

        # name -> {company key -> (company name, symbol, position)}
        boards: dict[str, dict[str, tuple[str, str | None, str | None]]] = {}
        for company in companies:
            company_key = company.symbol or company.name or ""
            for director in company.directors:
                if not director.name:
                    continue
                seats = boards.setdefault(director.name, {})
                if company_key not in seats:
                    seats[company_key] = (company.name or company_key, company.symbol, director.position)

        interlocks = []
        for name, seats in boards.items():
            if len(seats) < 2:
                continue
            entries = list(seats.values())
            interlocks.append(Interlock(
                director_name=name,
                companies=", ".join(company_name for company_name, _, _ in entries),
                company_symbols=[symbol for _, symbol, _ in entries if symbol],
                board_count=len(entries),
                positions="; ".join(f"{company_name} ({position})" for company_name, _, position in entries),
            ))

        # sorted() is stable: equal board counts keep first-seen order
        return sorted(interlocks, key=lambda i: i.board_count, reverse=True)

    async def get_directors_by_name(self, name: str) -> list[Director]:
        needle = name.lower()
        directors = await self._fetch_records(Director, NETWORK_ENDPOINT)
        return [d for d in directors if d.name and needle in d.name.lower()]

    # Shareholders

    async def _get_shareholder_positions(self) -> list[ShareholderPosition]:
        return await self._fetch_records(ShareholderPosition, SHAREHOLDER_POSITIONS_ENDPOINT)

    async def get_company_shareholders(self, company_id: str) -> list[ShareholderPosition]:
        company = await self.get_company_by_id(company_id)
        if company is None or not company.symbol:
            return []
        positions = await self._get_shareholder_positions()
        return [p for p in positions if p.company_symbol == company.symbol]

    async def get_top_shareholders_by_sector(self, sector: str, limit: int = 10) -> list[ShareholderPosition]:
        companies = await self.get_companies_by_sector(sector)
        sector_symbols = {c.symbol for c in companies if c.symbol}
        positions = await self._get_shareholder_positions()
        in_sector = [p for p in positions if p.company_symbol in sector_symbols]
        in_sector.sort(key=lambda p: p.percentage or 0, reverse=True)
        return in_sector[:limit]

    async def get_shareholder_overlap(self) -> list[ShareholderOverlap]:
        """Shareholders holding positions in two or more companies"""
        positions = await self._get_shareholder_positions()

        holdings: dict[str, list[ShareholderPosition]] = {}
        for position in positions:
            if not position.shareholder_name:
                continue
            holdings.setdefault(position.shareholder_name, []).append(position)

        overlaps = []
        for name, held in holdings.items():
            if len(held) < 2:
                continue
            symbols = [p.company_symbol for p in held if p.company_symbol]
            overlaps.append(ShareholderOverlap(
                shareholder_name=name,
                companies=",".join(symbols),
                company_count=len(symbols),
                avg_percentage=sum(p.percentage or 0 for p in held) / len(held),
            ))
        return sorted(overlaps, key=lambda o: o.company_count, reverse=True)

    # Prices

    async def get_price_history(self, symbol: str, days: int = 30) -> list[HistoricalPrice]:
        """Historical closes for a symbol, most recent first"""
        return await self._fetch_records(
            HistoricalPrice, HISTORICAL_PRICES_ENDPOINT, {"symbol": symbol, "days": days}
        )

    async def get_historical_prices(self, company_id: str, days: int = 30) -> list[HistoricalPrice]:
        company = await self.get_company_by_id(company_id)
        if company is None or not company.symbol:
            return []
        return await self.get_price_history(company.symbol, days)

    async def get_top_performers(
        self,
        days: int = 7,
        limit: int = 10,
        scan_cap: int = TOP_PERFORMERS_SCAN_CAP,
    ) -> list[Performance]:
        """Rank the first scan_cap companies by percent change over the window

        One price request per company, issued sequentially. Companies whose
        history fails to load or has fewer than two points are skipped.
        """
        companies = await self.get_all_companies()
        performances = []
        for company in companies[:scan_cap]:
            if not company.symbol:
                continue
            try:
                history = await self.get_price_history(company.symbol, days)
            except RemoteRequestError as e:
                logger.debug("Skipping %s in top performers: %s", company.symbol, e)
                continue
            change = period_change(history)
            if change is None:
                continue
            performances.append(Performance(
                symbol=company.symbol,
                name=company.name,
                sector=company.sector,
                current_price=history[0].close,
                period_change=change,
            ))
        performances.sort(key=lambda p: p.period_change, reverse=True)
        return performances[:limit]

    # News

    async def get_recent_news(self, company_id: str | None = None, limit: int = 20) -> list[NewsItem]:
        if company_id:
            company = await self.get_company_by_id(company_id)
            if company is None or not company.symbol:
                return []
            return await self._fetch_records(
                NewsItem, COMPANY_NEWS_ENDPOINT, {"symbol": company.symbol, "limit": limit}
            )
        return await self._fetch_records(NewsItem, NEWS_ENDPOINT, {"limit": limit})

    async def get_news_by_sentiment(self, sentiment: str, limit: int = 20) -> list[NewsItem]:
        return await self._fetch_records(
            NewsItem, NEWS_SENTIMENT_ENDPOINT, {"sentiment": sentiment, "limit": limit}
        )

    # Lobbying

    async def get_lobbying_meetings(self, company_id: str | None = None, limit: int = 20) -> list[LobbyingMeeting]:
        meetings = await self._fetch_records(LobbyingMeeting, LOBBYING_ENDPOINT, {"limit": limit})
        if not company_id:
            return meetings
        company = await self.get_company_by_id(company_id)
        if company is None or not company.name:
            return []
        needle = company.name.lower()
        return [m for m in meetings if m.organization_name and needle in m.organization_name.lower()]

    async def get_most_active_lobbyists(self, limit: int = 10) -> list[LobbyistActivity]:
        meetings = await self._fetch_records(LobbyingMeeting, LOBBYING_ENDPOINT)

        counts: dict[str, int] = {}
        institutions: dict[str, dict[str, None]] = {}  # ordered set
        spending: dict[str, list[float]] = {}
        for meeting in meetings:
            org = meeting.organization_name
            if not org:
                continue
            counts[org] = counts.get(org, 0) + 1
            institutions.setdefault(org, {})
            spending.setdefault(org, [])
            if meeting.eu_institution:
                institutions[org][meeting.eu_institution] = None
            if meeting.quarterly_spending:
                spending[org].append(meeting.quarterly_spending)

        activity = [
            LobbyistActivity(
                organization_name=org,
                meeting_count=count,
                institutions=",".join(institutions[org]),
                spending=spending[org],
                avg_spending=sum(spending[org]) / len(spending[org]) if spending[org] else None,
            )
            for org, count in counts.items()
        ]
        activity.sort(key=lambda a: a.meeting_count, reverse=True)
        return activity[:limit]

    # Reports and unsupported data

    async def get_weekly_reports(self, report_type: str | None = None, limit: int = 10) -> list[WeeklyReport]:
        return await self._fetch_records(WeeklyReport, REPORTS_ENDPOINT, {"type": report_type, "limit": limit})

    async def get_esg_scores(self, company_id: str | None = None) -> list[dict[str, Any]]:
        msg = "ESG scores are not available through the remote API."
        raise UnsupportedOperationError(msg)

    async def execute_custom_query(self, sql: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        msg = (
            "Custom SQL queries are not supported via the remote API. "
            "Please use the specific endpoints available."
        )
        raise UnsupportedOperationError(msg)
