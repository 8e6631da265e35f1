from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..models.assumptions import Assumptions, UnitEconomicsInputs
from ..models.results import PeriodRecord, ResultSet, UnitEconomicsResult
from .finance import (
    WorkingCapitalLevels,
    debt_service_for_month,
    internal_rate_of_return,
    net_present_value,
    payback_period,
    profitability_index,
    straight_line_depreciation,
    working_capital_levels,
)


logger = logging.getLogger(__name__)

RUNWAY_CAP_MONTHS = 999.0


@dataclass(frozen=True)
class PeriodState:
    working_capital: WorkingCapitalLevels
    cash: float


class ProjectionCalculator:
    def run(self, assumptions: Assumptions) -> ResultSet:
        logger.debug("Projecting %d periods", assumptions.horizon_months)
        depreciation = straight_line_depreciation(assumptions.investment, assumptions.asset_life_years)

        state = PeriodState(working_capital=WorkingCapitalLevels(), cash=assumptions.opening_cash)
        periods: List[PeriodRecord] = []
        for month in range(1, assumptions.horizon_months + 1):
            record, state = self._compute_period(month, assumptions, depreciation, state)
            periods.append(record)

        return self._build_results(periods, assumptions)

    def _compute_period(
        self,
        month: int,
        assumptions: Assumptions,
        depreciation: float,
        previous: PeriodState,
    ) -> Tuple[PeriodRecord, PeriodState]:
        revenue = assumptions.initial_revenue * (1 + assumptions.growth_rate_pct / 100) ** (month - 1)
        cogs = revenue * (assumptions.cogs_pct / 100)
        gross_profit = revenue - cogs
        operating_expenses = assumptions.fixed_operating_costs
        ebitda = gross_profit - operating_expenses
        ebit = ebitda - depreciation

        debt = assumptions.debt
        debt_service = debt_service_for_month(debt.principal, debt.annual_rate_pct, debt.term_months, month, debt.interest_only)
        interest = debt_service.interest
        ebt = ebit - interest
        taxes = ebt * (assumptions.tax_rate_pct / 100) if ebt > 0 else 0.0
        net_income = ebt - taxes

        levels = working_capital_levels(revenue, cogs, assumptions.dso_days, assumptions.dio_days, assumptions.dpo_days)
        change_in_working_capital = levels.net - previous.working_capital.net

        operating_cash_flow = net_income + depreciation - change_in_working_capital
        # The whole investment is booked as capex in the first period.
        capex = assumptions.investment if month == 1 else 0.0
        free_cash_flow = operating_cash_flow - capex - debt_service.total
        cash = previous.cash + free_cash_flow

        record = PeriodRecord(
            month=month,
            period_start=self._period_start(assumptions.start_date, month),
            revenue=revenue,
            cogs=cogs,
            gross_profit=gross_profit,
            operating_expenses=operating_expenses,
            ebitda=ebitda,
            depreciation=depreciation,
            ebit=ebit,
            interest=interest,
            ebt=ebt,
            taxes=taxes,
            net_income=net_income,
            receivables=levels.receivables,
            inventory=levels.inventory,
            payables=levels.payables,
            change_in_working_capital=change_in_working_capital,
            operating_cash_flow=operating_cash_flow,
            capex=capex,
            debt_service=debt_service.total,
            free_cash_flow=free_cash_flow,
            ending_cash=cash,
        )
        return record, PeriodState(working_capital=levels, cash=cash)

    def _period_start(self, start_date: Optional[date], month: int) -> Optional[date]:
        if start_date is None:
            return None
        return start_date + relativedelta(months=month - 1)

    def _build_results(self, periods: List[PeriodRecord], assumptions: Assumptions) -> ResultSet:
        count = len(periods)
        total_revenue = sum(p.revenue for p in periods)

        def margin(values: List[float]) -> float:
            return sum(values) / total_revenue * 100 if total_revenue > 0 else 0.0

        avg_gross_margin = margin([p.gross_profit for p in periods])
        avg_ebitda_margin = margin([p.ebitda for p in periods])
        avg_ebit_margin = margin([p.ebit for p in periods])
        avg_net_margin = margin([p.net_income for p in periods])

        free_cash_flows = [p.free_cash_flow for p in periods]
        final_cash = periods[-1].ending_cash
        avg_burn = sum(max(0.0, -fcf) for fcf in free_cash_flows) / count
        runway = min(final_cash / avg_burn, RUNWAY_CAP_MONTHS) if avg_burn > 0 else RUNWAY_CAP_MONTHS

        npv = net_present_value(assumptions.discount_rate_pct, free_cash_flows)
        irr = internal_rate_of_return([-assumptions.investment] + free_cash_flows)
        pi = profitability_index(npv, assumptions.investment)

        avg_dscr = sum(p.operating_cash_flow / p.debt_service if p.debt_service > 0 else 0.0 for p in periods) / count
        annualized_growth = assumptions.growth_rate_pct * 12
        burn_multiple = (total_revenue / count) / avg_burn if avg_burn > 0 else None

        cogs_fraction = assumptions.cogs_pct / 100
        break_even_revenue = assumptions.fixed_operating_costs / (1 - cogs_fraction) if cogs_fraction < 1 else None

        unit_economics = None
        if assumptions.unit_economics is not None:
            unit_economics = self._compute_unit_economics(assumptions.unit_economics, assumptions)

        return ResultSet(
            periods=periods,
            total_revenue=total_revenue,
            avg_gross_margin_pct=avg_gross_margin,
            avg_ebitda_margin_pct=avg_ebitda_margin,
            avg_ebit_margin_pct=avg_ebit_margin,
            avg_net_margin_pct=avg_net_margin,
            avg_cash_conversion_cycle_days=assumptions.dso_days + assumptions.dio_days - assumptions.dpo_days,
            avg_monthly_burn=avg_burn,
            final_cash=final_cash,
            cash_runway_months=runway,
            npv=npv,
            irr_pct=irr,
            profitability_index=pi,
            avg_dscr=avg_dscr,
            annualized_growth_pct=annualized_growth,
            rule_of_40=annualized_growth + avg_ebitda_margin,
            burn_multiple=burn_multiple,
            payback_months=payback_period(assumptions.investment, free_cash_flows),
            break_even_revenue=break_even_revenue,
            unit_economics=unit_economics,
        )

    def _compute_unit_economics(self, inputs: UnitEconomicsInputs, assumptions: Assumptions) -> UnitEconomicsResult:
        contribution = None
        contribution_margin_pct = None
        if inputs.unit_price is not None and inputs.unit_variable_cost is not None:
            contribution = inputs.unit_price - inputs.unit_variable_cost
            if inputs.unit_price > 0:
                contribution_margin_pct = contribution / inputs.unit_price * 100
        break_even_units = assumptions.fixed_operating_costs / contribution if contribution and contribution > 0 else None

        gross_margin_fraction = 1 - assumptions.cogs_pct / 100
        monthly_margin = None
        if inputs.arpu_monthly is not None:
            monthly_margin = inputs.arpu_monthly * gross_margin_fraction

        lifetime_value = None
        if monthly_margin is not None and inputs.churn_monthly_pct is not None and inputs.churn_monthly_pct > 0:
            lifetime_value = monthly_margin / (inputs.churn_monthly_pct / 100)

        cac = inputs.acquisition_cost
        ltv_to_cac = lifetime_value / cac if lifetime_value is not None and cac is not None and cac > 0 else None
        cac_payback = cac / monthly_margin if cac is not None and monthly_margin is not None and monthly_margin > 0 else None

        return UnitEconomicsResult(
            contribution_margin_pct=contribution_margin_pct,
            break_even_units=break_even_units,
            lifetime_value=lifetime_value,
            ltv_to_cac=ltv_to_cac,
            cac_payback_months=cac_payback,
        )


calculator = ProjectionCalculator()


def project(assumptions: Assumptions) -> ResultSet:
    return calculator.run(assumptions)
