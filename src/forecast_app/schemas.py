from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .models.assumptions import Assumptions
from .models.results import ResultSet
from .models.risk import DiscountRatePoint, MonteCarloSummary, SensitivityResult, ValuationMetric


class ProjectionRequest(BaseModel):
    assumptions: Assumptions


class ProjectionResponse(BaseModel):
    result: ResultSet


class TornadoRequest(BaseModel):
    assumptions: Assumptions
    spec: Optional[Dict[str, float]] = Field(default=None, description="Input name to delta in percent")
    metric: ValuationMetric = ValuationMetric.NPV


class TornadoResponse(BaseModel):
    baseline: float
    results: List[SensitivityResult]


class SimulationRequest(BaseModel):
    assumptions: Assumptions
    draws: Optional[int] = None
    seed: Optional[int] = None
    workers: Optional[int] = None


class SimulationResponse(BaseModel):
    summary: MonteCarloSummary


class DiscountCurveRequest(BaseModel):
    assumptions: Assumptions
    steps: int = Field(5, ge=0, le=50)
    step_pct: float = 2.0


class DiscountCurveResponse(BaseModel):
    points: List[DiscountRatePoint]
