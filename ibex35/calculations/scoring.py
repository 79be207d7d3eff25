"""Rule-based scores and labels for companies."""

from ibex35.common.constants import (
    EXCESSIVE_INTERLOCKS,
    FAVORED_SECTORS,
    GOVERNANCE_BASE_SCORE,
    HIGH_PE_THRESHOLD,
    LARGE_BOARD_SIZE,
    LARGE_CAP_THRESHOLD,
    LOW_PE_THRESHOLD,
    OPPORTUNITY_BASE_SCORE,
    SCORE_MAX,
    SCORE_MIN,
    SMALL_BOARD_SIZE,
    SMALL_CAP_THRESHOLD,
)
from ibex35.models import Company


def clamp_score(score: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, score))


def assess_company_risk(company: Company, director_count: int) -> str:
    """Coarse risk label.

    Rules are applied in order and are not exclusive; the last matching rule
    sets the label (missing P/E therefore always means "high").
    """
    risk_level = "low"
    if director_count > LARGE_BOARD_SIZE:
        risk_level = "medium"
    if not company.market_cap or company.market_cap < SMALL_CAP_THRESHOLD:
        risk_level = "medium"
    if company.pe_ratio is None:
        risk_level = "high"
    return risk_level


def governance_score(board_size: int, interlock_count: int) -> float:
    """Start at 8, penalize outlier board sizes and heavy interlocking"""
    score = GOVERNANCE_BASE_SCORE
    if board_size > LARGE_BOARD_SIZE:
        score -= 1.0
    if board_size < SMALL_BOARD_SIZE:
        score -= 0.5
    if interlock_count > EXCESSIVE_INTERLOCKS:
        score -= 2.0
    return clamp_score(score)


def opportunity_score(company: Company) -> float:
    score = OPPORTUNITY_BASE_SCORE

    pe = company.pe_ratio
    if pe is not None and pe < LOW_PE_THRESHOLD:
        score += 1.0
    if pe is not None and pe > HIGH_PE_THRESHOLD:
        score -= 0.5

    cap = company.market_cap
    if cap is not None and cap > LARGE_CAP_THRESHOLD:
        score += 0.5
    if cap is not None and cap < SMALL_CAP_THRESHOLD:
        score -= 0.3

    if company.sector and company.sector.lower() in FAVORED_SECTORS:
        score += 0.3

    return clamp_score(score)
