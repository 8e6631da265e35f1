from __future__ import annotations

from datetime import date

from .models.assumptions import Assumptions, DebtTerms, DepreciationMethod, UnitEconomicsInputs


def build_sample_assumptions() -> Assumptions:
    return Assumptions(
        initial_revenue=50000,
        growth_rate_pct=5,
        cogs_pct=35,
        staff_costs=25000,
        marketing_costs=8000,
        admin_costs=5000,
        investment=200000,
        tax_rate_pct=25,
        horizon_months=24,
        discount_rate_pct=12,
        asset_life_years=5,
        depreciation_method=DepreciationMethod.STRAIGHT_LINE,
        dso_days=30,
        dio_days=45,
        dpo_days=30,
        opening_cash=100000,
        debt=DebtTerms(
            principal=150000,
            annual_rate_pct=8,
            term_months=60,
            interest_only=False,
        ),
        unit_economics=UnitEconomicsInputs(
            unit_price=100,
            unit_variable_cost=35,
            acquisition_cost=50,
            arpu_monthly=85,
            churn_monthly_pct=2,
        ),
        start_date=date(2025, 1, 1),
    )


def build_flat_assumptions() -> Assumptions:
    return Assumptions(
        initial_revenue=50000,
        growth_rate_pct=0,
        cogs_pct=0,
        investment=0,
        tax_rate_pct=0,
        horizon_months=3,
    )
