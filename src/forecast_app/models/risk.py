from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class ValuationMetric(str, Enum):
    NPV = "npv"
    TOTAL_REVENUE = "total_revenue"
    FINAL_CASH = "final_cash"


class SensitivityResult(BaseModel):
    name: str
    label: str
    baseline: float
    upside: float
    downside: float
    swing: float

    @property
    def upside_change(self) -> float:
        return self.upside - self.baseline

    @property
    def downside_change(self) -> float:
        return self.downside - self.baseline


class DiscountRatePoint(BaseModel):
    discount_rate_pct: float
    npv: float


class HistogramBin(BaseModel):
    start: float
    end: float
    count: int

    @property
    def center(self) -> float:
        return (self.start + self.end) / 2


class MonteCarloSummary(BaseModel):
    draws: int
    p5: float
    p50: float
    p95: float
    mean: float
    std: float
    minimum: float
    maximum: float
    probability_negative: float = Field(..., description="Share of draws with a negative NPV")
    histogram: List[HistogramBin]
