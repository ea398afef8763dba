"""Accumulation-phase growth of one or more capital sources."""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence, Union

from smartplan.core.timevalue import (
    EscalationCompounding,
    clamp_money,
    clamp_rate,
    future_value_escalating_annuity,
    future_value_lump_sum,
    growth_factor,
    months_from_years,
)
from smartplan.models import AccumulationResult, CapitalSource


class AccumulationStrategy(str, Enum):
    CLOSED_FORM = "closed_form"
    MONTHLY = "monthly"


SourceOrSources = Union[CapitalSource, Sequence[CapitalSource]]


def net_growth_rate(source: CapitalSource) -> float:
    """Growth after fees, floored like any other rate."""
    return clamp_rate(clamp_rate(source.growth_rate) - clamp_money(source.fee_rate))


def effective_monthly_contribution(source: CapitalSource) -> float:
    """Member contribution plus any employer match on top of it."""
    contribution = clamp_money(source.monthly_contribution)
    return contribution * (1 + clamp_money(source.employer_match))


def _total_contributions(monthly: float, escalation: float, months: int) -> float:
    full_years, remainder = divmod(months, 12)
    total = 0.0
    for year in range(full_years):
        total += monthly * 12 * growth_factor(escalation, year)
    total += monthly * remainder * growth_factor(escalation, full_years)
    return total


def _closed_form(source: CapitalSource, months: int) -> AccumulationResult:
    rate = net_growth_rate(source)
    escalation = clamp_rate(source.contribution_escalation)
    balance = clamp_money(source.starting_balance)
    monthly = effective_monthly_contribution(source)

    def value_at(month: int) -> float:
        grown = future_value_lump_sum(balance, rate, month)
        contributed = future_value_escalating_annuity(
            monthly,
            rate,
            escalation,
            month / 12,
            compounding=EscalationCompounding.MONTHLY,
        )
        return grown + contributed

    series = [value_at(year * 12) for year in range(1, months // 12 + 1)]
    return AccumulationResult(
        label=source.label,
        final_value=value_at(months),
        yearly_series=series,
        total_contributions=_total_contributions(monthly, escalation, months),
    )


def _month_stepper(source: CapitalSource, months: int) -> AccumulationResult:
    """
    Walk month 1..N:
      1) add this month's contribution (employer match included)
      2) grow the balance by the monthly rate
      3) at every 12-month boundary record the balance and step the contribution
    """
    monthly_rate = net_growth_rate(source) / 12
    escalation = clamp_rate(source.contribution_escalation)
    balance = clamp_money(source.starting_balance)
    contribution = effective_monthly_contribution(source)

    series: List[float] = []
    paid_in = 0.0
    for month in range(1, months + 1):
        balance += contribution
        paid_in += contribution
        balance *= 1 + monthly_rate

        if month % 12 == 0:
            series.append(balance)
            contribution *= 1 + escalation

    return AccumulationResult(
        label=source.label,
        final_value=balance,
        yearly_series=series,
        total_contributions=paid_in,
    )


def accumulate_source(
    source: CapitalSource,
    horizon_years: float,
    strategy: AccumulationStrategy = AccumulationStrategy.CLOSED_FORM,
) -> AccumulationResult:
    months = months_from_years(horizon_years)
    if months == 0:
        return AccumulationResult(
            label=source.label,
            final_value=clamp_money(source.starting_balance),
            yearly_series=[],
        )
    if AccumulationStrategy(strategy) is AccumulationStrategy.MONTHLY:
        return _month_stepper(source, months)
    return _closed_form(source, months)


def _as_list(source_or_sources: SourceOrSources) -> List[CapitalSource]:
    if isinstance(source_or_sources, CapitalSource):
        return [source_or_sources]
    return list(source_or_sources)


def accumulate_each(
    source_or_sources: SourceOrSources,
    horizon_years: float,
    strategy: AccumulationStrategy = AccumulationStrategy.CLOSED_FORM,
) -> List[AccumulationResult]:
    """Per-source results, labels preserved, in input order."""
    return [
        accumulate_source(source, horizon_years, strategy)
        for source in _as_list(source_or_sources)
    ]


def sum_results(results: Sequence[AccumulationResult]) -> AccumulationResult:
    """Sum final values and aligned yearly series of independent sources."""
    length = max((len(result.yearly_series) for result in results), default=0)
    series = [0.0] * length
    for result in results:
        for index, value in enumerate(result.yearly_series):
            series[index] += value

    return AccumulationResult(
        final_value=sum(result.final_value for result in results),
        yearly_series=series,
        total_contributions=sum(result.total_contributions for result in results),
    )


def accumulate(
    source_or_sources: SourceOrSources,
    horizon_years: float,
    strategy: AccumulationStrategy = AccumulationStrategy.CLOSED_FORM,
) -> AccumulationResult:
    """Project one source, or several summed source-by-source.

    Sources never share a balance: each compounds on its own and the
    results are added afterwards, so growth is not double counted.
    """
    results = accumulate_each(source_or_sources, horizon_years, strategy)
    if len(results) == 1:
        return results[0]
    return sum_results(results)
