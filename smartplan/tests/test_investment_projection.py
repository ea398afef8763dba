from __future__ import annotations

from math import isclose

from smartplan.core.timevalue import (
    AnnuityTiming,
    future_value_annuity,
    future_value_escalating_annuity,
)
from smartplan.domain.investment import InvestmentPlan, recompute_investment_projection


def test_lump_only_compounds_monthly():
    plan = InvestmentPlan(mode="lump", lump_sum=100_000.0, monthly_contribution=5_000.0, years=10)

    projection = recompute_investment_projection(plan)

    assert projection.months == 120
    assert isclose(projection.fv_lump, 100_000.0 * (1 + 0.08 / 12) ** 120, rel_tol=1e-12)
    assert projection.fv_contributions == 0.0
    assert projection.projected_nominal == projection.fv_lump


def test_flat_contributions_respect_timing():
    end = InvestmentPlan(mode="monthly", monthly_contribution=1_000.0, years=5, contribution_escalation=0.0)
    begin = end.model_copy(update={"timing": AnnuityTiming.BEGIN})

    end_projection = recompute_investment_projection(end)
    begin_projection = recompute_investment_projection(begin)

    assert end_projection.fv_lump == 0.0
    assert isclose(
        end_projection.fv_contributions,
        future_value_annuity(1_000.0, 0.08, 5, AnnuityTiming.END),
        rel_tol=1e-12,
    )
    assert isclose(
        begin_projection.fv_contributions,
        end_projection.fv_contributions * (1 + 0.08 / 12),
        rel_tol=1e-12,
    )


def test_escalating_contributions_use_yearly_step_up():
    plan = InvestmentPlan(monthly_contribution=2_000.0, years=8, contribution_escalation=0.10)

    projection = recompute_investment_projection(plan)

    assert isclose(
        projection.fv_contributions,
        future_value_escalating_annuity(2_000.0, 0.08, 0.10, 8),
        rel_tol=1e-12,
    )


def test_series_run_from_year_zero():
    plan = InvestmentPlan(lump_sum=10_000.0, monthly_contribution=500.0, years=3)

    projection = recompute_investment_projection(plan)

    assert len(projection.series_total) == 4
    assert projection.series_lump[0] == 10_000.0
    assert projection.series_contributions[0] == 0.0
    assert isclose(projection.series_total[-1], projection.projected_nominal, rel_tol=1e-12)


def test_short_horizon_still_has_two_points():
    projection = recompute_investment_projection(InvestmentPlan(lump_sum=1_000.0, years=0.5))
    assert len(projection.series_total) == 2
    assert projection.months == 6


def test_real_value_discounts_inflation():
    plan = InvestmentPlan(lump_sum=50_000.0, years=12, inflation=0.05)
    projection = recompute_investment_projection(plan)
    assert isclose(projection.projected_real, projection.projected_nominal / 1.05**12, rel_tol=1e-12)


def test_target_solves_for_monthly_contribution():
    plan = InvestmentPlan(
        lump_sum=20_000.0,
        monthly_contribution=1_000.0,
        years=10,
        contribution_escalation=0.0,
        target_amount_today=500_000.0,
    )

    projection = recompute_investment_projection(plan)

    target = projection.target
    assert target is not None
    assert isclose(target.target_nominal, 500_000.0 * 1.055**10, rel_tol=1e-12)
    assert not target.reached
    assert target.gap_nominal > 0.0
    solution = target.required_monthly_contribution
    assert solution.feasible

    topped_up = recompute_investment_projection(
        plan.model_copy(update={"monthly_contribution": solution.value + 0.01})
    )
    assert topped_up.projected_nominal >= target.target_nominal
    assert topped_up.target.reached


def test_no_target_means_no_target_check():
    projection = recompute_investment_projection(InvestmentPlan(lump_sum=1_000.0, years=2))
    assert projection.target is None
