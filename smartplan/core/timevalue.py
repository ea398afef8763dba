"""Present/future value primitives shared by every calculator.

All functions are pure and never raise for numeric reasons: rates are
clamped to ``RATE_FLOOR``, negative or non-finite horizons and amounts
collapse to zero, rate differences below ``RATE_EPSILON`` take the
closed-form limit instead of dividing by ~0, and compounding factors
saturate at ``GROWTH_FACTOR_CAP`` instead of overflowing.
"""

from __future__ import annotations

import math
from enum import Enum

from smartplan.config import GROWTH_FACTOR_CAP, RATE_EPSILON, RATE_FLOOR


class AnnuityTiming(str, Enum):
    END = "end"
    BEGIN = "begin"


class EscalationCompounding(str, Enum):
    """How a year's escalating contributions are grown to the horizon.

    ANNUAL: the year's total is invested at the start of the year and
    compounds once a year (calculator convention).
    MONTHLY: each monthly payment is invested at the start of its month
    and compounds monthly (month-stepper convention).
    """

    ANNUAL = "annual"
    MONTHLY = "monthly"


def finite_or(value: float, default: float = 0.0) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def clamp_rate(rate: float) -> float:
    """Coerce an annual rate into the range the simulators can handle."""
    return max(RATE_FLOOR, finite_or(rate))


def clamp_money(amount: float) -> float:
    return max(0.0, finite_or(amount))


def months_from_years(years: float) -> int:
    """Whole months in a horizon; negative or missing horizons are 0."""
    years = finite_or(years)
    if years <= 0:
        return 0
    # half-up, so 0.5 of a month counts as a month
    return int(math.floor(years * 12 + 0.5))


def growth_factor(rate: float, periods: float) -> float:
    """``(1 + rate) ** periods``, held within ``[1 / GROWTH_FACTOR_CAP, GROWTH_FACTOR_CAP]``."""
    try:
        factor = (1 + rate) ** periods
    except OverflowError:
        return GROWTH_FACTOR_CAP
    return min(max(factor, 1 / GROWTH_FACTOR_CAP), GROWTH_FACTOR_CAP)


def real_rate(nominal_rate: float, inflation_rate: float) -> float:
    """Growth above inflation (Fisher relation)."""
    return (1 + clamp_rate(nominal_rate)) / (1 + clamp_rate(inflation_rate)) - 1


def future_value_lump_sum(present_value: float, annual_rate: float, months: int) -> float:
    """Compound ``present_value`` monthly at ``annual_rate / 12``."""
    months = max(0, int(finite_or(months)))
    monthly_rate = clamp_rate(annual_rate) / 12
    return finite_or(present_value) * growth_factor(monthly_rate, months)


def _annuity_due_factor(monthly_rate: float, months: int) -> float:
    # value after `months` start-of-month payments of 1
    if months <= 0:
        return 0.0
    if abs(monthly_rate) < RATE_EPSILON:
        return float(months)
    return (growth_factor(monthly_rate, months) - 1) / monthly_rate * (1 + monthly_rate)


def future_value_annuity(
    monthly_payment: float,
    annual_rate: float,
    years: float,
    timing: AnnuityTiming = AnnuityTiming.END,
) -> float:
    """Future value of a level monthly annuity.

    ``AnnuityTiming.BEGIN`` (annuity-due) scales the ordinary result by
    ``1 + annual_rate / 12``.
    """
    payment = finite_or(monthly_payment)
    months = months_from_years(years)
    if payment <= 0 or months <= 0:
        return 0.0

    monthly_rate = clamp_rate(annual_rate) / 12
    if abs(monthly_rate) < RATE_EPSILON:
        fv = payment * months
    else:
        fv = payment * (growth_factor(monthly_rate, months) - 1) / monthly_rate

    if AnnuityTiming(timing) is AnnuityTiming.BEGIN:
        return fv * (1 + monthly_rate)
    return fv


def _escalating_sum(growth: float, escalation: float, years: float) -> float:
    """sum_{t=0}^{n-1} (1+g)^t (1+r)^(n-1-t), with the r == g limit."""
    if abs(growth - escalation) < RATE_EPSILON:
        return years * growth_factor(growth, years - 1)
    return (growth_factor(growth, years) - growth_factor(escalation, years)) / (growth - escalation)


def future_value_escalating_annuity(
    initial_monthly_payment: float,
    annual_rate: float,
    annual_escalation: float,
    years: float,
    compounding: EscalationCompounding = EscalationCompounding.ANNUAL,
) -> float:
    """Future value of contributions that step up once per completed year.

    The contribution is flat within a year and jumps by
    ``1 + annual_escalation`` at each anniversary. See
    :class:`EscalationCompounding` for how each year's money is grown.
    """
    payment = finite_or(initial_monthly_payment)
    months = months_from_years(years)
    if payment <= 0 or months <= 0:
        return 0.0

    rate = clamp_rate(annual_rate)
    escalation = clamp_rate(annual_escalation)

    full_years, remainder = divmod(months, 12)

    if EscalationCompounding(compounding) is EscalationCompounding.ANNUAL:
        annual_payment = payment * 12
        total = annual_payment * _escalating_sum(rate, escalation, full_years) * (1 + rate)
        if remainder:
            # part year: its months go in at the start and grow for the part year
            part = payment * remainder * growth_factor(escalation, full_years)
            total = (total + part) * growth_factor(rate, remainder / 12)
        return total

    monthly_rate = rate / 12
    effective_annual = growth_factor(monthly_rate, 12) - 1

    total = 0.0
    if full_years:
        year_value = payment * _annuity_due_factor(monthly_rate, 12)
        total = year_value * _escalating_sum(effective_annual, escalation, full_years)
    total *= growth_factor(monthly_rate, remainder)

    # partial final year at the escalated contribution
    stepped_payment = payment * growth_factor(escalation, full_years)
    total += stepped_payment * _annuity_due_factor(monthly_rate, remainder)
    return total


def present_value(nominal_value: float, years: float, discount_rate: float) -> float:
    """Discount ``nominal_value`` back ``years`` at ``discount_rate``."""
    years = max(0.0, finite_or(years))
    return finite_or(nominal_value) / growth_factor(clamp_rate(discount_rate), years)


def real_annuity_factor(real_discount_rate: float, periods: float) -> float:
    """PV of 1 paid for ``periods`` years; turns a target income into capital."""
    periods = finite_or(periods)
    if periods <= 0:
        return 0.0
    rate = clamp_rate(real_discount_rate)
    if abs(rate) < RATE_EPSILON:
        return periods
    return (1 - growth_factor(rate, -periods)) / rate


def level_annual_contribution(target_value: float, annual_rate: float, years: float) -> float:
    """Level start-of-year payment that grows to ``target_value`` in ``years``."""
    target = finite_or(target_value)
    years = max(0.0, finite_or(years))
    if target <= 0 or years <= 0:
        return 0.0
    rate = clamp_rate(annual_rate)
    if abs(rate) < RATE_EPSILON:
        denom = years
    else:
        denom = (growth_factor(rate, years) - 1) / rate * (1 + rate)
    return target / denom if denom > 0 else 0.0
