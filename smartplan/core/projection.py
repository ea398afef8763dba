"""Consolidation of capital sources and funding checks against a target."""

from __future__ import annotations

from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from smartplan.config import DEFAULT_FUNDING_THRESHOLDS, FundingThresholds
from smartplan.core.accumulation import (
    AccumulationStrategy,
    SourceOrSources,
    accumulate_each,
    sum_results,
)
from smartplan.core.timevalue import finite_or, present_value, real_annuity_factor
from smartplan.models import AccumulationResult, FundingAssessment, FundingTier


class SourceSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str
    nominal: float
    real: float


class ConsolidatedProjection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    horizon_years: float
    total: AccumulationResult
    nominal: float
    real: float
    sources: List[SourceSnapshot]


def combine(results: Sequence[AccumulationResult]) -> AccumulationResult:
    return sum_results(results)


def project_sources(
    source_or_sources: SourceOrSources,
    horizon_years: float,
    inflation_rate: float,
    strategy: AccumulationStrategy = AccumulationStrategy.CLOSED_FORM,
) -> ConsolidatedProjection:
    """Accumulate each source, then report nominal and today's-money totals."""
    results = accumulate_each(source_or_sources, horizon_years, strategy)
    total = combine(results)
    years = max(0.0, finite_or(horizon_years))

    return ConsolidatedProjection(
        horizon_years=years,
        total=total,
        nominal=total.final_value,
        real=present_value(total.final_value, years, inflation_rate),
        sources=[
            SourceSnapshot(
                label=result.label or "",
                nominal=result.final_value,
                real=present_value(result.final_value, years, inflation_rate),
            )
            for result in results
        ],
    )


def required_capital(
    target_annual_income_today: float,
    real_discount_rate: float,
    periods: float,
) -> float:
    """Capital (today's money) that funds the target income for ``periods`` years."""
    income = max(0.0, finite_or(target_annual_income_today))
    return income * real_annuity_factor(real_discount_rate, periods)


def classify_funding(
    funded_ratio: float,
    thresholds: FundingThresholds = DEFAULT_FUNDING_THRESHOLDS,
) -> FundingTier:
    if funded_ratio >= thresholds.fully_funded:
        return FundingTier.FUNDED
    if funded_ratio >= thresholds.partially_funded:
        return FundingTier.PARTIAL
    return FundingTier.UNDERFUNDED


def assess_funding(
    projected_capital: float,
    target_income_today: float,
    real_discount_rate: float,
    periods_in_retirement: float,
    thresholds: Optional[FundingThresholds] = None,
) -> FundingAssessment:
    """Compare projected capital (today's money) with the capital the target needs.

    With nothing required the ratio is reported as 0 but the plan counts as
    fully funded.
    """
    thresholds = thresholds or DEFAULT_FUNDING_THRESHOLDS
    projected = finite_or(projected_capital)
    required = required_capital(target_income_today, real_discount_rate, periods_in_retirement)

    if required <= 0:
        ratio = 0.0
        tier = FundingTier.FUNDED
    else:
        ratio = projected / required
        tier = classify_funding(ratio, thresholds)

    return FundingAssessment(
        required_capital=required,
        projected_capital=projected,
        funded_ratio=ratio,
        shortfall=max(0.0, required - projected),
        tier=tier,
    )
