from __future__ import annotations

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from smartplan.config import INVESTMENT_DEFAULTS as DEFAULTS
from smartplan.core.solver import bisect_goal
from smartplan.core.timevalue import (
    AnnuityTiming,
    clamp_rate,
    future_value_annuity,
    future_value_escalating_annuity,
    future_value_lump_sum,
    growth_factor,
    months_from_years,
    present_value,
)
from smartplan.models import GoalSolution

Mode = Literal["lump", "monthly", "lump_plus_monthly"]


class InvestmentPlan(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: Mode = "lump_plus_monthly"
    lump_sum: float = Field(default=0.0, ge=0)
    monthly_contribution: float = Field(default=0.0, ge=0)
    years: float = Field(default=DEFAULTS.years, ge=0, le=100)
    nominal_return: float = Field(default=DEFAULTS.nominal_return, gt=-1, le=1)
    inflation: float = Field(default=DEFAULTS.inflation, gt=-1, le=1)
    contribution_escalation: float = Field(default=DEFAULTS.contribution_escalation, gt=-1, le=1)
    timing: AnnuityTiming = AnnuityTiming.END
    target_amount_today: Optional[float] = Field(default=None, ge=0)


class TargetCheck(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target_today: float
    target_nominal: float
    gap_nominal: float
    reached: bool
    required_monthly_contribution: GoalSolution


class InvestmentProjection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    months: int
    fv_lump: float
    fv_contributions: float
    projected_nominal: float
    projected_real: float
    series_lump: List[float]
    series_contributions: List[float]
    series_total: List[float]
    target: Optional[TargetCheck] = None


def contributions_value(plan: InvestmentPlan, monthly: float, years: float) -> float:
    """Escalating contributions use the yearly step-up; flat ones the chosen timing."""
    if plan.mode == "lump" or monthly <= 0:
        return 0.0
    if plan.contribution_escalation > 0:
        return future_value_escalating_annuity(
            monthly, plan.nominal_return, plan.contribution_escalation, years
        )
    return future_value_annuity(monthly, plan.nominal_return, years, plan.timing)


def lump_value(plan: InvestmentPlan, months: int) -> float:
    if plan.mode == "monthly":
        return 0.0
    return future_value_lump_sum(plan.lump_sum, plan.nominal_return, months)


def recompute_investment_projection(plan: InvestmentPlan) -> InvestmentProjection:
    months = months_from_years(plan.years)
    fv_lump = lump_value(plan, months)
    fv_contrib = contributions_value(plan, plan.monthly_contribution, plan.years)
    nominal = fv_lump + fv_contrib

    # year 0 .. at least year 1 so a chart always has two points
    last_year = max(1, math.floor(plan.years))
    series_lump = [lump_value(plan, year * 12) for year in range(last_year + 1)]
    series_contrib = [
        contributions_value(plan, plan.monthly_contribution, year)
        for year in range(last_year + 1)
    ]

    target: Optional[TargetCheck] = None
    if plan.target_amount_today:
        target_nominal = plan.target_amount_today * growth_factor(
            clamp_rate(plan.inflation), plan.years
        )

        def reaches_target(monthly: float) -> bool:
            value = lump_value(plan, months) + contributions_value(
                plan.model_copy(update={"mode": "lump_plus_monthly"}), monthly, plan.years
            )
            return value >= target_nominal

        target = TargetCheck(
            target_today=plan.target_amount_today,
            target_nominal=target_nominal,
            gap_nominal=max(0.0, target_nominal - nominal),
            reached=nominal >= target_nominal,
            required_monthly_contribution=bisect_goal(reaches_target),
        )

    return InvestmentProjection(
        months=months,
        fv_lump=fv_lump,
        fv_contributions=fv_contrib,
        projected_nominal=nominal,
        projected_real=present_value(nominal, plan.years, plan.inflation),
        series_lump=series_lump,
        series_contributions=series_contrib,
        series_total=[lump + contrib for lump, contrib in zip(series_lump, series_contrib)],
        target=target,
    )
