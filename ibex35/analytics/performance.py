"""Sequential performance scan over a list of companies."""

import logging
from collections.abc import Sequence

from ibex35.calculations.performance import annualized_volatility, period_change
from ibex35.common.constants import SECTOR_SCAN_CAP
from ibex35.errors import RemoteRequestError
from ibex35.models import Company, Performance
from ibex35.services.queries import Ibex35Queries

logger = logging.getLogger(__name__)


async def analyze_company_performances(
    queries: Ibex35Queries,
    companies: Sequence[Company],
    period: int,
    cap: int = SECTOR_SCAN_CAP,
) -> list[Performance]:
    """Period change and volatility for up to `cap` companies, best first.

    Companies without a symbol, without two price points, or whose history
    request fails are left out; one bad company never aborts the scan.
    """
    performances = []
    for company in companies[:cap]:
        if not company.symbol:
            continue
        try:
            history = await queries.get_price_history(company.symbol, period)
        except RemoteRequestError as e:
            logger.debug("Skipping %s in performance scan: %s", company.symbol, e)
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
            volatility=annualized_volatility(history),
        ))

    performances.sort(key=lambda p: p.period_change, reverse=True)
    return performances


def average_change(performances: Sequence[Performance]) -> float:
    if not performances:
        return 0.0
    return sum(p.period_change for p in performances) / len(performances)
