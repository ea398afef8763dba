"""Month-by-month consumption of retirement capital."""

from __future__ import annotations

import logging
from typing import List, Optional

from smartplan.core.timevalue import (
    clamp_money,
    clamp_rate,
    finite_or,
    growth_factor,
    months_from_years,
    present_value,
)
from smartplan.models import DrawdownPoint, DrawdownResult

logger = logging.getLogger(__name__)


def simulate_drawdown(
    start_capital: float,
    current_age: float,
    retire_age: float,
    end_age: float,
    post_retirement_rate: float,
    cpi_rate: float,
    monthly_income_today: float,
    once_off_capital_need: float = 0.0,
) -> DrawdownResult:
    """
    Draw an inflation-linked income from capital between retire_age and end_age.

    Conventions:
      - The once-off need is taken from the capital before the first month.
      - Each month: grow the balance, then withdraw the income need
        (capped at what is left; the balance never goes negative).
      - The income need is stated in today's money and indexed by CPI for
        every month since *today*, i.e. months_to_retire + m. Inflation before
        retirement is therefore applied exactly once.
      - The first month with a need that leaves the balance at zero is the
        exhaustion point; the run carries on to end_age with a zero balance
        so the series is complete.
    """
    opening = max(0.0, clamp_money(start_capital) - clamp_money(once_off_capital_need))
    monthly_rate = clamp_rate(post_retirement_rate) / 12
    monthly_cpi = clamp_rate(cpi_rate) / 12
    income_today = clamp_money(monthly_income_today)

    current_age = finite_or(current_age)
    retire_age = finite_or(retire_age)
    end_age = finite_or(end_age)
    months_to_retire = months_from_years(retire_age - current_age)
    months_to_end = months_from_years(end_age - retire_age)

    balance = opening
    withdrawn = 0.0
    exhaustion_point: Optional[int] = None
    series: List[DrawdownPoint] = []

    for month in range(months_to_end):
        # 1) growth
        balance *= 1 + monthly_rate

        # 2) inflation-escalated need for this month
        income_need = income_today * growth_factor(monthly_cpi, months_to_retire + month)

        # 3) withdraw what is available
        withdrawal = min(balance, income_need)
        balance = max(0.0, balance - withdrawal)
        withdrawn += withdrawal

        if exhaustion_point is None and balance <= 0 and income_need > 0:
            exhaustion_point = month

        series.append(
            DrawdownPoint(
                month_index=month,
                age=retire_age + month / 12,
                balance=balance,
                withdrawal=withdrawal,
                income_need=income_need,
            )
        )

    if exhaustion_point is not None:
        logger.debug(
            "drawdown exhausted at month %d (age %.2f)",
            exhaustion_point,
            retire_age + exhaustion_point / 12,
        )

    return DrawdownResult(
        monthly_series=series,
        opening_balance=opening,
        ending_balance=balance,
        ending_balance_today=present_value(balance, max(0.0, end_age - current_age), cpi_rate),
        exhaustion_point=exhaustion_point,
        exhaustion_age=(
            retire_age + exhaustion_point / 12 if exhaustion_point is not None else None
        ),
        total_withdrawn=withdrawn,
    )


def outcome_is_acceptable(result: DrawdownResult) -> bool:
    """Capital lasted to the horizon and nothing is owed at the end."""
    return result.exhaustion_point is None and result.ending_balance >= 0
