"""Projection engine: time value math, simulators, solver and aggregation."""

from smartplan.core.accumulation import (
    AccumulationStrategy,
    accumulate,
    accumulate_each,
    accumulate_source,
)
from smartplan.core.drawdown import outcome_is_acceptable, simulate_drawdown
from smartplan.core.projection import (
    assess_funding,
    classify_funding,
    combine,
    project_sources,
    required_capital,
)
from smartplan.core.solver import (
    NO_FEASIBLE_SOLUTION,
    bisect_goal,
    solve_capital_for_drawdown,
    solve_contribution_for_target,
    solve_for_contribution,
)
from smartplan.core.timevalue import (
    AnnuityTiming,
    EscalationCompounding,
    future_value_annuity,
    future_value_escalating_annuity,
    future_value_lump_sum,
    present_value,
    real_annuity_factor,
)

__all__ = [
    "AccumulationStrategy",
    "accumulate",
    "accumulate_each",
    "accumulate_source",
    "outcome_is_acceptable",
    "simulate_drawdown",
    "assess_funding",
    "classify_funding",
    "combine",
    "project_sources",
    "required_capital",
    "NO_FEASIBLE_SOLUTION",
    "bisect_goal",
    "solve_capital_for_drawdown",
    "solve_contribution_for_target",
    "solve_for_contribution",
    "AnnuityTiming",
    "EscalationCompounding",
    "future_value_annuity",
    "future_value_escalating_annuity",
    "future_value_lump_sum",
    "present_value",
    "real_annuity_factor",
]
