from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence


IRR_INITIAL_GUESS = 0.10
IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-6
DAYS_PER_MONTH = 30


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class WorkingCapitalLevels:
    receivables: float = 0.0
    inventory: float = 0.0
    payables: float = 0.0

    @property
    def net(self) -> float:
        return self.receivables + self.inventory - self.payables


@dataclass(frozen=True)
class DebtService:
    interest: float = 0.0
    principal_payment: float = 0.0

    @property
    def total(self) -> float:
        return self.interest + self.principal_payment


def monthly_rate_from_annual(annual_pct: float) -> float:
    return (1 + annual_pct / 100) ** (1 / 12) - 1


def straight_line_depreciation(investment: float, life_years: float) -> float:
    if investment <= 0 or life_years <= 0:
        return 0.0
    return investment / (life_years * 12)


def working_capital_levels(revenue: float, cogs: float, dso: float, dio: float, dpo: float) -> WorkingCapitalLevels:
    return WorkingCapitalLevels(
        receivables=revenue * dso / DAYS_PER_MONTH,
        inventory=cogs * dio / DAYS_PER_MONTH,
        payables=cogs * dpo / DAYS_PER_MONTH,
    )


def debt_service_for_month(
    principal: float,
    annual_rate_pct: float,
    term_months: int,
    month: int,
    interest_only: bool,
) -> DebtService:
    # Interest accrues on the original principal every period; the balance is not amortized.
    if principal <= 0 or term_months <= 0:
        return DebtService()
    interest = principal * (annual_rate_pct / 100 / 12)
    if interest_only or month > term_months:
        return DebtService(interest=interest)
    return DebtService(interest=interest, principal_payment=principal / term_months)


def net_present_value(annual_discount_pct: float, cash_flows: Sequence[float]) -> float:
    rate = monthly_rate_from_annual(annual_discount_pct)
    return sum(cf / (1 + rate) ** i for i, cf in enumerate(cash_flows))


def solve_monthly_irr(cash_flows: Sequence[float]) -> Optional[float]:
    """Newton-Raphson root of the discounted sum, index 0 holding the outlay.

    Returns the monthly rate, or ``None`` when the iteration cannot converge.
    """
    if len(cash_flows) < 2:
        return None
    rate = IRR_INITIAL_GUESS
    for _ in range(IRR_MAX_ITERATIONS):
        if rate <= -1:
            return None
        try:
            value = sum(cf / (1 + rate) ** t for t, cf in enumerate(cash_flows))
            derivative = -sum(t * cf / (1 + rate) ** (t + 1) for t, cf in enumerate(cash_flows))
        except OverflowError:
            return None
        if abs(value) < IRR_TOLERANCE:
            return rate
        if abs(derivative) < IRR_TOLERANCE:
            return None
        rate -= value / derivative
    return None


def internal_rate_of_return(cash_flows: Sequence[float]) -> Optional[float]:
    monthly = solve_monthly_irr(cash_flows)
    if monthly is None:
        return None
    # Linear annualization of the monthly root, as reported historically.
    return monthly * 12 * 100


def profitability_index(npv: float, investment: float) -> Optional[float]:
    if investment <= 0:
        return None
    return (npv + investment) / investment


def payback_period(investment: float, cash_flows: Sequence[float]) -> Optional[int]:
    cumulative = -investment
    for month, cf in enumerate(cash_flows, start=1):
        cumulative += cf
        if cumulative >= 0:
            return month
    return None


def standard_normal(mean: float, std: float, random_source: RandomSource) -> float:
    """Box-Muller transform over two uniform draws from ``random_source``."""
    u1 = 1.0 - random_source.random()
    u2 = random_source.random()
    z = math.sqrt(-2 * math.log(u1)) * math.cos(2 * math.pi * u2)
    return mean + z * std
