from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


DISCOUNT_RATE_FLOOR_PCT = -99.0

PERTURBABLE_FIELDS: Tuple[str, ...] = (
    "initial_revenue",
    "growth_rate_pct",
    "cogs_pct",
    "staff_costs",
    "marketing_costs",
    "admin_costs",
    "investment",
    "tax_rate_pct",
    "discount_rate_pct",
    "asset_life_years",
    "dso_days",
    "dio_days",
    "dpo_days",
    "opening_cash",
)


class UnknownInputError(ValueError):
    pass


class DepreciationMethod(str, Enum):
    STRAIGHT_LINE = "straight-line"


class DebtTerms(BaseModel):
    model_config = ConfigDict(frozen=True)

    principal: float = 0.0
    annual_rate_pct: float = 0.0
    term_months: int = 0
    interest_only: bool = False

    @field_validator("term_months", mode="before")
    @classmethod
    def _whole_months(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(value)
        return value


class UnitEconomicsInputs(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit_price: Optional[float] = None
    unit_variable_cost: Optional[float] = None
    acquisition_cost: Optional[float] = Field(default=None, description="Customer acquisition cost (CAC)")
    arpu_monthly: Optional[float] = Field(default=None, description="Monthly recurring revenue per user")
    churn_monthly_pct: Optional[float] = None


class Assumptions(BaseModel):
    """Business assumptions for a single projection run.

    Instances are frozen. What-if runs go through :meth:`with_overrides` or
    :meth:`scaled`, which return validated copies and leave the receiver untouched.
    Out-of-range values are clamped rather than rejected.
    """

    model_config = ConfigDict(frozen=True)

    initial_revenue: float = Field(..., description="Revenue of the first period")
    growth_rate_pct: float = Field(0.0, description="Compounding monthly revenue growth in percent")
    cogs_pct: float = 0.0
    staff_costs: float = 0.0
    marketing_costs: float = 0.0
    admin_costs: float = 0.0
    investment: float = Field(0.0, description="Up-front outlay, booked as capex in the first period")
    tax_rate_pct: float = 0.0
    horizon_months: int = 12
    discount_rate_pct: float = Field(10.0, description="Annual discount rate in percent")
    asset_life_years: float = 5.0
    depreciation_method: DepreciationMethod = DepreciationMethod.STRAIGHT_LINE
    dso_days: float = 0.0
    dio_days: float = 0.0
    dpo_days: float = 0.0
    opening_cash: float = 0.0
    debt: DebtTerms = Field(default_factory=DebtTerms)
    unit_economics: Optional[UnitEconomicsInputs] = None
    start_date: Optional[date] = None

    @field_validator("horizon_months", mode="before")
    @classmethod
    def _clamp_horizon(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return max(1, int(value))
        return value

    @field_validator("horizon_months")
    @classmethod
    def _horizon_floor(cls, value: int) -> int:
        # numeric strings skip the truncating clamp above
        return max(1, value)

    @field_validator("discount_rate_pct")
    @classmethod
    def _clamp_discount_rate(cls, value: float) -> float:
        return max(DISCOUNT_RATE_FLOOR_PCT, value)

    @field_validator("dso_days", "dio_days", "dpo_days")
    @classmethod
    def _clamp_day_counts(cls, value: float) -> float:
        return max(0.0, value)

    @property
    def fixed_operating_costs(self) -> float:
        return self.staff_costs + self.marketing_costs + self.admin_costs

    def with_overrides(self, **changes: Any) -> "Assumptions":
        values = self.model_dump()
        values.update(changes)
        return type(self).model_validate(values)

    def scaled(self, name: str, fraction: float) -> "Assumptions":
        if name not in PERTURBABLE_FIELDS:
            raise UnknownInputError(f"Input '{name}' cannot be perturbed")
        return self.with_overrides(**{name: getattr(self, name) * (1 + fraction)})
