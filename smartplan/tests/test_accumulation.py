from __future__ import annotations

import math
from math import isclose

import pytest

from smartplan.core.accumulation import AccumulationStrategy, accumulate, accumulate_each
from smartplan.core.timevalue import AnnuityTiming, future_value_annuity
from smartplan.models import CapitalSource, DerivedSource, UserSource


def make_source(**overrides) -> CapitalSource:
    values = dict(
        label="RA",
        starting_balance=100_000.0,
        monthly_contribution=2_000.0,
        contribution_escalation=0.05,
        growth_rate=0.09,
        fee_rate=0.01,
    )
    values.update(overrides)
    return UserSource(**values)


def test_zero_horizon_returns_starting_balance():
    source = make_source(starting_balance=123_456.78)

    for strategy in AccumulationStrategy:
        result = accumulate(source, 0, strategy)
        assert result.final_value == 123_456.78
        assert result.yearly_series == []


@pytest.mark.parametrize("years", [1, 7.5, 16, 30.25])
def test_closed_form_and_month_stepper_agree(years):
    source = make_source(employer_match=0.5)

    closed = accumulate(source, years, AccumulationStrategy.CLOSED_FORM)
    stepped = accumulate(source, years, AccumulationStrategy.MONTHLY)

    assert isclose(closed.final_value, stepped.final_value, rel_tol=1e-9)
    assert len(closed.yearly_series) == len(stepped.yearly_series) == int(years)
    for a, b in zip(closed.yearly_series, stepped.yearly_series):
        assert isclose(a, b, rel_tol=1e-9)
    assert isclose(closed.total_contributions, stepped.total_contributions, rel_tol=1e-12)


def test_zero_growth_accumulates_contributions_only():
    """
    With zero investment return, the balance is the starting amount plus the contributions paid in.
    """
    source = make_source(
        starting_balance=1000.0,
        monthly_contribution=500.0,
        contribution_escalation=0.0,
        growth_rate=0.0,
        fee_rate=0.0,
    )

    result = accumulate(source, 3, AccumulationStrategy.MONTHLY)

    expected_totals = [7000.0, 13000.0, 19000.0]
    for value, expected in zip(result.yearly_series, expected_totals):
        assert isclose(value, expected, abs_tol=0.01)
    assert isclose(result.final_value, 19000.0, abs_tol=0.01)
    assert isclose(result.total_contributions, 18000.0, abs_tol=0.01)


def test_flat_contributions_match_annuity_due():
    source = make_source(starting_balance=0.0, contribution_escalation=0.0, fee_rate=0.0)

    result = accumulate(source, 10)

    expected = future_value_annuity(2000.0, 0.09, 10, AnnuityTiming.BEGIN)
    assert isclose(result.final_value, expected, rel_tol=1e-12)


@pytest.mark.parametrize(
    "field, low, high",
    [
        ("starting_balance", 10_000.0, 20_000.0),
        ("monthly_contribution", 500.0, 750.0),
        ("growth_rate", 0.04, 0.08),
    ],
)
def test_result_is_monotonic_in_inputs(field, low, high):
    for strategy in AccumulationStrategy:
        lower = accumulate(make_source(**{field: low}), 12, strategy)
        higher = accumulate(make_source(**{field: high}), 12, strategy)
        assert higher.final_value >= lower.final_value
        for a, b in zip(lower.yearly_series, higher.yearly_series):
            assert b >= a


def test_end_to_end_escalating_scenario():
    source = UserSource(
        starting_balance=500_000.0,
        monthly_contribution=9_000.0,
        contribution_escalation=0.06,
        growth_rate=0.085,
    )
    flat = source.model_copy(update={"contribution_escalation": 0.0})

    first = accumulate(source, 16)
    second = accumulate(source, 16)
    stepped = accumulate(source, 16, AccumulationStrategy.MONTHLY)

    assert first.final_value == second.final_value
    assert first.yearly_series == second.yearly_series
    assert isclose(first.final_value, stepped.final_value, rel_tol=1e-9)
    assert first.final_value > accumulate(flat, 16).final_value
    assert len(first.yearly_series) == 16
    assert isclose(first.final_value, 7_265_961.0335986577, rel_tol=1e-12)
    assert isclose(stepped.final_value, 7_265_961.0335986838, rel_tol=1e-12)


def test_multiple_sources_are_summed_not_merged():
    employer = DerivedSource(
        label="Employer Fund (Auto)",
        derivation="payroll",
        monthly_contribution=3000.0,
        contribution_escalation=0.065,
        growth_rate=0.09,
        fee_rate=0.01,
    )
    ra = make_source()

    combined = accumulate([employer, ra], 20)
    separate = accumulate_each([employer, ra], 20)

    assert [result.label for result in separate] == ["Employer Fund (Auto)", "RA"]
    assert isclose(combined.final_value, sum(r.final_value for r in separate), rel_tol=1e-12)
    for year, value in enumerate(combined.yearly_series):
        assert isclose(
            value,
            separate[0].yearly_series[year] + separate[1].yearly_series[year],
            rel_tol=1e-12,
        )


def test_single_source_list_behaves_like_source():
    source = make_source()
    assert accumulate([source], 5) == accumulate(source, 5)


def test_empty_source_list_is_zero():
    result = accumulate([], 10)
    assert result.final_value == 0.0
    assert result.yearly_series == []


def test_negative_inputs_are_treated_as_zero():
    negative = make_source(starting_balance=-5000.0, monthly_contribution=-100.0, employer_match=-1.0)
    zero = make_source(starting_balance=0.0, monthly_contribution=0.0)

    for strategy in AccumulationStrategy:
        assert accumulate(negative, 10, strategy).final_value == 0.0
        assert accumulate(zero, 10, strategy).final_value == 0.0


def test_fees_reduce_growth_one_for_one():
    with_fee = make_source(growth_rate=0.10, fee_rate=0.02)
    net = make_source(growth_rate=0.08, fee_rate=0.0)
    assert isclose(accumulate(with_fee, 15).final_value, accumulate(net, 15).final_value, rel_tol=1e-12)


def test_employer_match_scales_contribution():
    matched = make_source(monthly_contribution=1000.0, employer_match=0.5)
    plain = make_source(monthly_contribution=1500.0)
    assert isclose(accumulate(matched, 10).final_value, accumulate(plain, 10).final_value, rel_tol=1e-12)


def test_escalation_steps_contributions_each_year():
    source = make_source(
        starting_balance=0.0,
        monthly_contribution=1000.0,
        contribution_escalation=0.10,
        growth_rate=0.0,
        fee_rate=0.0,
    )
    result = accumulate(source, 2)
    assert isclose(result.total_contributions, 12000.0 + 13200.0, rel_tol=1e-12)
    assert isclose(result.final_value, 25200.0, rel_tol=1e-12)


def test_catastrophic_rates_do_not_crash():
    source = make_source(growth_rate=-4.0, contribution_escalation=-2.0)
    for strategy in AccumulationStrategy:
        result = accumulate(source, 5, strategy)
        assert result.final_value >= 0.0


def test_sources_are_not_mutated():
    source = make_source()
    before = source.model_dump()
    accumulate([source, source], 12, AccumulationStrategy.MONTHLY)
    assert source.model_dump() == before


def test_extreme_growth_over_a_century_does_not_overflow():
    source = UserSource(growth_rate=50.0, monthly_contribution=100.0)

    result = accumulate(source, 100)

    assert math.isfinite(result.final_value)
    assert result.final_value > 0
    assert len(result.yearly_series) == 100
