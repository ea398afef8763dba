"""Bracket-then-bisect inversion of the simulators.

The simulators are non-decreasing in contribution and capital, so the set
of acceptable candidates is an interval ``[x*, inf)`` and bisection on
"acceptable or not" converges to ``x*``. Every loop has a fixed budget, so
a non-monotonic predicate still terminates with a best estimate.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from smartplan.config import DEFAULT_SOLVER_SETTINGS, SolverSettings
from smartplan.core.accumulation import accumulate
from smartplan.core.drawdown import outcome_is_acceptable, simulate_drawdown
from smartplan.models import CapitalSource, GoalSolution

logger = logging.getLogger(__name__)

NO_FEASIBLE_SOLUTION = "no feasible contribution found, outcome may be unreliable"

Predicate = Callable[[float], bool]


def bisect_goal(
    is_acceptable: Predicate,
    lower_bound: float = 0.0,
    upper_bound: Optional[float] = None,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS,
) -> GoalSolution:
    """Smallest non-negative candidate for which ``is_acceptable`` holds."""
    lo = max(0.0, lower_bound)
    hi = settings.upper_bound if upper_bound is None else upper_bound
    # a zero bound would never grow under geometric expansion
    hi = max(hi, lo, 1.0)

    if is_acceptable(lo):
        return GoalSolution(value=round(lo, settings.precision))

    expansions = 0
    bracketed = is_acceptable(hi)
    while not bracketed and expansions < settings.max_expansions:
        hi *= settings.expansion_factor
        expansions += 1
        bracketed = is_acceptable(hi)
        logger.debug("solver expanded upper bound to %.2f", hi)

    if not bracketed:
        logger.warning("%s (upper bound %.2f)", NO_FEASIBLE_SOLUTION, hi)
        return GoalSolution(
            value=round(hi, settings.precision),
            feasible=False,
            expansions=expansions,
            message=NO_FEASIBLE_SOLUTION,
        )

    for _ in range(settings.iterations):
        mid = (lo + hi) / 2
        if is_acceptable(mid):
            hi = mid
        else:
            lo = mid

    return GoalSolution(
        value=round((lo + hi) / 2, settings.precision),
        iterations=settings.iterations,
        expansions=expansions,
    )


def solve_for_contribution(
    target_outcome_predicate: Predicate,
    lower_bound: float = 0.0,
    upper_bound: Optional[float] = None,
) -> float:
    """Solved value only.

    A failed bracket still yields its best estimate here; use
    :func:`bisect_goal` when the ``feasible`` flag matters.
    """
    return bisect_goal(target_outcome_predicate, lower_bound, upper_bound).value


def solve_contribution_for_target(
    source: CapitalSource,
    horizon_years: float,
    target_value: float,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS,
) -> GoalSolution:
    """Monthly contribution that lets ``source`` grow to ``target_value``."""

    def reaches_target(contribution: float) -> bool:
        candidate = source.model_copy(update={"monthly_contribution": contribution})
        return accumulate(candidate, horizon_years).final_value >= target_value

    return bisect_goal(reaches_target, settings=settings)


def solve_capital_for_drawdown(
    current_age: float,
    retire_age: float,
    end_age: float,
    post_retirement_rate: float,
    cpi_rate: float,
    monthly_income_today: float,
    once_off_capital_need: float = 0.0,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS,
) -> GoalSolution:
    """Capital needed at retirement for the income to last until ``end_age``."""

    def survives(capital: float) -> bool:
        result = simulate_drawdown(
            start_capital=capital,
            current_age=current_age,
            retire_age=retire_age,
            end_age=end_age,
            post_retirement_rate=post_retirement_rate,
            cpi_rate=cpi_rate,
            monthly_income_today=monthly_income_today,
            once_off_capital_need=once_off_capital_need,
        )
        return outcome_is_acceptable(result)

    return bisect_goal(survives, settings=settings)
