from __future__ import annotations

import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from smartplan.config import RETIREMENT_DEFAULTS as DEFAULTS
from smartplan.core.accumulation import accumulate_each, sum_results
from smartplan.core.drawdown import outcome_is_acceptable, simulate_drawdown
from smartplan.core.projection import assess_funding
from smartplan.core.solver import bisect_goal, solve_capital_for_drawdown
from smartplan.core.timevalue import (
    clamp_rate,
    growth_factor,
    level_annual_contribution,
    months_from_years,
    present_value,
    real_rate,
)
from smartplan.models import (
    AccumulationResult,
    CapitalSource,
    DerivedSource,
    DrawdownResult,
    FundingAssessment,
    GoalSolution,
    ProductType,
    UserSource,
)

logger = logging.getLogger(__name__)

EMPLOYER_FUND_LABEL = "Employer Fund (Auto)"
ADDITIONAL_SAVINGS_LABEL = "Additional savings"


class RetirementProduct(BaseModel):
    """A product the client already holds. Missing rates fall back to the plan's."""

    model_config = ConfigDict(extra="forbid")

    type: ProductType = ProductType.RA
    provider: str = ""
    current_balance: float = Field(default=0.0, ge=0)
    monthly_contribution: float = Field(default=0.0, ge=0)
    annual_contribution_escalation: Optional[float] = Field(default=None, gt=-1, le=1)
    nominal_return: Optional[float] = Field(default=None, gt=-1, le=1)
    annual_fees: float = Field(default=0.0, ge=0, le=1)


class RetirementPlan(BaseModel):
    model_config = ConfigDict(extra="forbid")

    current_age: float = Field(ge=0, le=110)
    retire_age: float = Field(default=DEFAULTS.retire_age, ge=0, le=120)
    life_expectancy: float = Field(default=DEFAULTS.life_expectancy, ge=0, le=130)

    monthly_salary: float = Field(default=0.0, ge=0)
    other_monthly_income: float = Field(default=0.0, ge=0)
    monthly_expenses: float = Field(default=0.0, ge=0)
    salary_growth: float = Field(default=DEFAULTS.salary_growth, gt=-1, le=1)

    employee_contribution_pct: float = Field(default=0.0, ge=0, le=1)
    employer_contribution_pct: float = Field(default=0.0, ge=0, le=1)
    contribution_escalation: float = Field(default=DEFAULTS.contribution_escalation, gt=-1, le=1)

    inflation: float = Field(default=DEFAULTS.inflation, gt=-1, le=1)
    pre_retirement_return: float = Field(default=DEFAULTS.pre_retirement_return, gt=-1, le=1)
    post_retirement_return: float = Field(default=DEFAULTS.post_retirement_return, gt=-1, le=1)

    income_mode: Literal["replacement", "absolute"] = "replacement"
    target_replacement_ratio: float = Field(default=DEFAULTS.target_replacement_ratio, ge=0)
    target_monthly_income_today: float = Field(
        default=DEFAULTS.target_monthly_income_today, ge=0
    )
    once_off_capital_need: float = Field(default=0.0, ge=0)

    products: List[RetirementProduct] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_validity(self) -> "RetirementPlan":
        if self.retire_age <= self.current_age:
            raise ValueError("retire_age must be greater than current_age")
        if self.life_expectancy < self.retire_age:
            raise ValueError("life_expectancy must not be before retire_age")
        return self


class RetirementProjection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    years_to_retire: float
    years_in_retirement: float
    assets_nominal: float
    assets_real: float
    final_salary: float
    target_annual_income_today: float
    required_capital_real: float
    required_capital_nominal: float
    funding: FundingAssessment
    additional_monthly_today: float
    monthly_surplus: float
    accumulation: AccumulationResult
    sources: List[AccumulationResult]
    drawdown: DrawdownResult
    capital_needed_at_retirement: GoalSolution
    additional_monthly_contribution: GoalSolution


def years_to_retire(plan: RetirementPlan) -> float:
    """Whole months to retirement, in years; the drawdown counts months the same way."""
    return months_from_years(plan.retire_age - plan.current_age) / 12


def derive_employer_source(plan: RetirementPlan) -> Optional[DerivedSource]:
    """Payroll-funded employer fund, or None when no payroll percentages are set."""
    if plan.employee_contribution_pct <= 0 and plan.employer_contribution_pct <= 0:
        return None

    employee_monthly = plan.monthly_salary * plan.employee_contribution_pct
    employer_monthly = plan.monthly_salary * plan.employer_contribution_pct
    return DerivedSource(
        label=EMPLOYER_FUND_LABEL,
        derivation="payroll",
        product_type=ProductType.PENSION,
        starting_balance=0.0,
        monthly_contribution=round(employee_monthly + employer_monthly),
        contribution_escalation=plan.contribution_escalation,
        growth_rate=plan.pre_retirement_return,
        fee_rate=DEFAULTS.employer_fund_fee,
    )


def user_sources(plan: RetirementPlan) -> List[UserSource]:
    sources: List[UserSource] = []
    for index, product in enumerate(plan.products):
        escalation = product.annual_contribution_escalation
        growth = product.nominal_return
        sources.append(
            UserSource(
                label=product.provider or f"{product.type.value} #{index + 1}",
                product_type=product.type,
                provider=product.provider,
                starting_balance=product.current_balance,
                monthly_contribution=product.monthly_contribution,
                contribution_escalation=plan.inflation if escalation is None else escalation,
                growth_rate=plan.pre_retirement_return if growth is None else growth,
                fee_rate=product.annual_fees,
            )
        )
    return sources


def plan_sources(plan: RetirementPlan) -> List[CapitalSource]:
    """Derived sources first, then the user's own products."""
    sources: List[CapitalSource] = []
    derived = derive_employer_source(plan)
    if derived is not None:
        sources.append(derived)
    sources.extend(user_sources(plan))
    return sources


def recompute_retirement_projection(plan: RetirementPlan) -> RetirementProjection:
    """Full retirement picture for one snapshot of calculator inputs."""
    n = years_to_retire(plan)
    years_in_retirement = months_from_years(plan.life_expectancy - plan.retire_age) / 12
    inflation = plan.inflation
    pre_return = clamp_rate(plan.pre_retirement_return)
    post_return = clamp_rate(plan.post_retirement_return)
    sources = plan_sources(plan)

    # ---------- Accumulation ----------
    per_source = accumulate_each(sources, n)
    total = sum_results(per_source)
    assets_nominal = total.final_value
    assets_real = present_value(assets_nominal, n, inflation)

    # ---------- Income target ----------
    final_salary = plan.monthly_salary * 12 * growth_factor(clamp_rate(plan.salary_growth), n)
    if plan.income_mode == "replacement":
        target_annual_today = present_value(
            final_salary * plan.target_replacement_ratio, n, inflation
        )
    else:
        target_annual_today = plan.target_monthly_income_today * 12

    # ---------- Funding ----------
    funding = assess_funding(
        projected_capital=assets_real,
        target_income_today=target_annual_today,
        real_discount_rate=real_rate(post_return, inflation),
        periods_in_retirement=years_in_retirement,
    )
    required_nominal = funding.required_capital * growth_factor(clamp_rate(inflation), n)

    # extra saving in today's money, escalating with CPI
    additional_annual_today = level_annual_contribution(
        funding.shortfall, real_rate(pre_return, inflation), n
    )

    # ---------- Drawdown ----------
    monthly_income_today = target_annual_today / 12
    drawdown = simulate_drawdown(
        start_capital=assets_nominal,
        current_age=plan.current_age,
        retire_age=plan.retire_age,
        end_age=plan.life_expectancy,
        post_retirement_rate=post_return,
        cpi_rate=inflation,
        monthly_income_today=monthly_income_today,
        once_off_capital_need=plan.once_off_capital_need,
    )
    capital_needed = solve_capital_for_drawdown(
        current_age=plan.current_age,
        retire_age=plan.retire_age,
        end_age=plan.life_expectancy,
        post_retirement_rate=post_return,
        cpi_rate=inflation,
        monthly_income_today=monthly_income_today,
        once_off_capital_need=plan.once_off_capital_need,
    )
    extra_contribution = solve_additional_contribution(plan, total, monthly_income_today)

    logger.debug(
        "retirement projection: assets %.2f nominal, funded %.3f, drawdown survived=%s",
        assets_nominal,
        funding.funded_ratio,
        drawdown.survived,
    )

    return RetirementProjection(
        years_to_retire=n,
        years_in_retirement=years_in_retirement,
        assets_nominal=assets_nominal,
        assets_real=assets_real,
        final_salary=final_salary,
        target_annual_income_today=target_annual_today,
        required_capital_real=funding.required_capital,
        required_capital_nominal=required_nominal,
        funding=funding,
        additional_monthly_today=additional_annual_today / 12,
        monthly_surplus=plan.monthly_salary + plan.other_monthly_income - plan.monthly_expenses,
        accumulation=total,
        sources=per_source,
        drawdown=drawdown,
        capital_needed_at_retirement=capital_needed,
        additional_monthly_contribution=extra_contribution,
    )


def solve_additional_contribution(
    plan: RetirementPlan,
    existing: AccumulationResult,
    monthly_income_today: float,
) -> GoalSolution:
    """Extra monthly saving (escalating with the plan) that makes the drawdown last."""
    n = years_to_retire(plan)
    template = DerivedSource(
        label=ADDITIONAL_SAVINGS_LABEL,
        derivation="solver",
        contribution_escalation=plan.contribution_escalation,
        growth_rate=plan.pre_retirement_return,
    )

    def survives(contribution: float) -> bool:
        extra = accumulate_each(
            template.model_copy(update={"monthly_contribution": contribution}), n
        )[0]
        result = simulate_drawdown(
            start_capital=existing.final_value + extra.final_value,
            current_age=plan.current_age,
            retire_age=plan.retire_age,
            end_age=plan.life_expectancy,
            post_retirement_rate=plan.post_retirement_return,
            cpi_rate=plan.inflation,
            monthly_income_today=monthly_income_today,
            once_off_capital_need=plan.once_off_capital_need,
        )
        return outcome_is_acceptable(result)

    return bisect_goal(survives)
