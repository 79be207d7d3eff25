"""
Investment risk assessment.

Each risk dimension is scored by a pluggable evaluator. The default
evaluators are static stand-ins: they return fixed scores independent of
the target and say so with "placeholder": True. Pass `evaluators=` to
substitute real implementations without touching the aggregation.
"""

from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ibex35.common.constants import DEFAULT_DIMENSION_SCORE, HIGH_RISK_SCORE, MEDIUM_RISK_SCORE
from ibex35.models import Company
from ibex35.services.queries import Ibex35Queries


@dataclass
class RiskTarget:
    name: str
    target_type: str  # company | sector | portfolio
    company: Company | None = None
    companies: list[Company] = field(default_factory=list)


RiskEvaluator = Callable[[Ibex35Queries, RiskTarget], Awaitable[dict[str, Any]]]


def placeholder_evaluator(
    score: float,
    level: str,
    factors: Sequence[str],
    recommendations: Sequence[str],
) -> RiskEvaluator:
    """Build an evaluator that always reports the same fixed result"""

    async def evaluate(queries: Ibex35Queries, target: RiskTarget) -> dict[str, Any]:
        return {
            "score": score,
            "level": level,
            "factors": list(factors),
            "recommendations": list(recommendations),
            "placeholder": True,
        }

    return evaluate


DEFAULT_RISK_EVALUATORS: dict[str, RiskEvaluator] = {
    "market_risk": placeholder_evaluator(
        6.5, "medium",
        ["Market volatility", "Sector concentration"],
        ["Diversify across sectors", "Monitor market trends"],
    ),
    "governance_risk": placeholder_evaluator(
        3.2, "low",
        ["Board composition", "Director interlocks"],
        ["Review board independence", "Monitor governance changes"],
    ),
    "sector_risk": placeholder_evaluator(
        5.8, "medium",
        ["Sector volatility", "Regulatory environment"],
        ["Consider sector rotation", "Monitor regulatory changes"],
    ),
    "liquidity_risk": placeholder_evaluator(
        2.9, "low",
        ["Trading volume", "Market cap"],
        ["Monitor trading volumes", "Ensure sufficient liquidity for position size"],
    ),
    "concentration_risk": placeholder_evaluator(
        6.1, "medium",
        ["Position size", "Sector exposure"],
        ["Diversify holdings", "Limit single position exposure"],
    ),
}


async def resolve_risk_target(queries: Ibex35Queries, target: str) -> RiskTarget:
    """First successful resolution wins: company symbol, then sector, then portfolio"""
    company = await queries.get_company_by_symbol(target)
    if company is not None:
        return RiskTarget(name=target, target_type="company", company=company, companies=[company])

    sector_companies = await queries.get_companies_by_sector(target)
    if sector_companies:
        return RiskTarget(name=target, target_type="sector", companies=sector_companies)

    return RiskTarget(name=target, target_type="portfolio")


def select_risk_types(
    risk_types: Sequence[str] | None,
    evaluators: dict[str, RiskEvaluator],
) -> list[str]:
    if not risk_types or "all" in risk_types:
        return list(evaluators)
    unknown = [r for r in risk_types if r not in evaluators]
    if unknown:
        msg = f"Unknown risk type(s): {', '.join(unknown)}"
        raise ValueError(msg)
    return list(risk_types)


def overall_risk_score(dimensions: Iterable[dict[str, Any]]) -> float | None:
    scores = [DEFAULT_DIMENSION_SCORE if d.get("score") is None else d["score"] for d in dimensions]
    if not scores:
        return None
    return sum(scores) / len(scores)


def overall_risk_level(score: float | None) -> str:
    if score is None:
        return "Unknown"
    if score > HIGH_RISK_SCORE:
        return "High"
    if score > MEDIUM_RISK_SCORE:
        return "Medium"
    return "Low"


def collect_recommendations(dimensions: Iterable[dict[str, Any]]) -> list[str]:
    """Union of every dimension's recommendations, first occurrence order"""
    seen: dict[str, None] = {}
    for dimension in dimensions:
        for recommendation in dimension.get("recommendations", []):
            seen.setdefault(recommendation, None)
    return list(seen)


async def assess_investment_risk(
    queries: Ibex35Queries,
    target: str,
    risk_types: Sequence[str] | None = None,
    evaluators: dict[str, RiskEvaluator] | None = None,
) -> dict[str, Any]:
    evaluators = evaluators if evaluators is not None else DEFAULT_RISK_EVALUATORS
    selected = select_risk_types(risk_types, evaluators)
    resolved = await resolve_risk_target(queries, target)

    breakdown: dict[str, dict[str, Any]] = {}
    for risk_type in selected:
        breakdown[risk_type] = await evaluators[risk_type](queries, resolved)

    score = overall_risk_score(breakdown.values())
    return {
        "target": target,
        "target_type": resolved.target_type,
        "assessment_date": datetime.now(timezone.utc).isoformat(),
        "risk_breakdown": breakdown,
        "overall_risk_score": score,
        "overall_risk_level": overall_risk_level(score),
        "recommendations": collect_recommendations(breakdown.values()),
        "placeholder_dimensions": [k for k, v in breakdown.items() if v.get("placeholder")],
    }
