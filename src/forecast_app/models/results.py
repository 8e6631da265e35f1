from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class PeriodRecord(BaseModel):
    month: int
    period_start: Optional[date] = None
    revenue: float
    cogs: float
    gross_profit: float
    operating_expenses: float
    ebitda: float
    depreciation: float
    ebit: float
    interest: float
    ebt: float
    taxes: float
    net_income: float
    receivables: float
    inventory: float
    payables: float
    change_in_working_capital: float
    operating_cash_flow: float
    capex: float
    debt_service: float
    free_cash_flow: float
    ending_cash: float


class UnitEconomicsResult(BaseModel):
    contribution_margin_pct: Optional[float] = None
    break_even_units: Optional[float] = None
    lifetime_value: Optional[float] = None
    ltv_to_cac: Optional[float] = None
    cac_payback_months: Optional[float] = None


class ResultSet(BaseModel):
    periods: List[PeriodRecord]
    total_revenue: float
    avg_gross_margin_pct: float
    avg_ebitda_margin_pct: float
    avg_ebit_margin_pct: float
    avg_net_margin_pct: float
    avg_cash_conversion_cycle_days: float
    avg_monthly_burn: float
    final_cash: float
    cash_runway_months: float
    npv: float
    irr_pct: Optional[float] = None
    profitability_index: Optional[float] = None
    avg_dscr: float
    annualized_growth_pct: float
    rule_of_40: float
    burn_multiple: Optional[float] = None
    payback_months: Optional[int] = None
    break_even_revenue: Optional[float] = None
    unit_economics: Optional[UnitEconomicsResult] = None

    @property
    def free_cash_flows(self) -> List[float]:
        return [period.free_cash_flow for period in self.periods]
