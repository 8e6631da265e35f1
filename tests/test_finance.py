from __future__ import annotations

import math
import random

import pytest

from forecast_app.services.finance import (
    debt_service_for_month,
    internal_rate_of_return,
    monthly_rate_from_annual,
    net_present_value,
    payback_period,
    profitability_index,
    solve_monthly_irr,
    standard_normal,
    straight_line_depreciation,
    working_capital_levels,
)


class SequenceSource:
    def __init__(self, values):
        self._values = iter(values)

    def random(self) -> float:
        return next(self._values)


def test_monthly_rate_compounds_to_annual():
    rate = monthly_rate_from_annual(12)
    assert (1 + rate) ** 12 == pytest.approx(1.12)
    assert monthly_rate_from_annual(0) == 0


def test_straight_line_depreciation():
    assert straight_line_depreciation(120000, 5) == pytest.approx(2000.0)
    assert straight_line_depreciation(0, 5) == 0.0
    assert straight_line_depreciation(1000, 0) == 0.0


def test_working_capital_levels_use_thirty_day_month():
    levels = working_capital_levels(3000, 1500, dso=30, dio=60, dpo=15)
    assert levels.receivables == pytest.approx(3000)
    assert levels.inventory == pytest.approx(3000)
    assert levels.payables == pytest.approx(750)
    assert levels.net == pytest.approx(5250)


def test_debt_service_charges_interest_on_original_principal():
    first = debt_service_for_month(120000, 12, 12, month=1, interest_only=False)
    last = debt_service_for_month(120000, 12, 12, month=12, interest_only=False)
    assert first.interest == pytest.approx(1200)
    assert last.interest == pytest.approx(1200)
    assert first.principal_payment == pytest.approx(10000)
    assert first.total == pytest.approx(11200)


def test_debt_service_without_repayment():
    after_term = debt_service_for_month(120000, 12, 12, month=13, interest_only=False)
    interest_only = debt_service_for_month(120000, 12, 12, month=1, interest_only=True)
    assert after_term.principal_payment == 0
    assert after_term.interest == pytest.approx(1200)
    assert interest_only.principal_payment == 0
    assert interest_only.total == pytest.approx(1200)


def test_debt_service_degenerate_inputs_are_zero():
    for service in (
        debt_service_for_month(0, 12, 12, 1, False),
        debt_service_for_month(1000, 12, 0, 1, False),
    ):
        assert service.interest == 0
        assert service.principal_payment == 0
        assert service.total == 0


def test_net_present_value_leaves_first_flow_undiscounted():
    assert net_present_value(0, [100, 100]) == pytest.approx(200)
    rate = monthly_rate_from_annual(12)
    assert net_present_value(12, [100, 100]) == pytest.approx(100 + 100 / (1 + rate))


def test_irr_round_trip():
    flows = [-1000, 300, 400, 500]
    monthly = solve_monthly_irr(flows)
    assert monthly is not None
    annual_equivalent = ((1 + monthly) ** 12 - 1) * 100
    assert abs(net_present_value(annual_equivalent, flows)) < 1e-4
    assert internal_rate_of_return(flows) == pytest.approx(monthly * 12 * 100)


def test_irr_unsolvable_cases():
    assert solve_monthly_irr([100]) is None
    assert solve_monthly_irr([]) is None
    assert internal_rate_of_return([100, 100, 100]) is None


def test_profitability_index():
    assert profitability_index(50, 100) == pytest.approx(1.5)
    assert profitability_index(50, 0) is None
    assert profitability_index(50, -10) is None


def test_payback_period():
    assert payback_period(100, [30, 30, 50]) == 3
    assert payback_period(100, [10, 10]) is None
    assert payback_period(0, [0]) == 1


def test_standard_normal_box_muller():
    value = standard_normal(10, 2, SequenceSource([0.5, 0.0]))
    assert value == pytest.approx(10 + 2 * math.sqrt(-2 * math.log(0.5)))


def test_standard_normal_distribution():
    source = random.Random(42)
    samples = [standard_normal(0, 1, source) for _ in range(20000)]
    mean = sum(samples) / len(samples)
    variance = sum((s - mean) ** 2 for s in samples) / len(samples)
    assert abs(mean) < 0.05
    assert abs(math.sqrt(variance) - 1) < 0.05
