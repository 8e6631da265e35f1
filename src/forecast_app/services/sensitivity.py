from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional

from ..models.assumptions import DISCOUNT_RATE_FLOOR_PCT, Assumptions
from ..models.results import ResultSet
from ..models.risk import DiscountRatePoint, SensitivityResult, ValuationMetric
from .projection import project


logger = logging.getLogger(__name__)

DEFAULT_TORNADO_SPEC: Dict[str, float] = {
    "growth_rate_pct": 20.0,
    "initial_revenue": 15.0,
    "cogs_pct": 15.0,
    "staff_costs": 10.0,
    "discount_rate_pct": 10.0,
}

INPUT_LABELS: Dict[str, str] = {
    "initial_revenue": "Initial Revenue",
    "growth_rate_pct": "Revenue Growth",
    "cogs_pct": "COGS",
    "staff_costs": "Staff Costs",
    "marketing_costs": "Marketing Costs",
    "admin_costs": "Admin Costs",
    "investment": "Investment",
    "tax_rate_pct": "Tax Rate",
    "discount_rate_pct": "Discount Rate",
    "asset_life_years": "Asset Life",
    "dso_days": "DSO",
    "dio_days": "DIO",
    "dpo_days": "DPO",
    "opening_cash": "Opening Cash",
}


def metric_value(result: ResultSet, metric: ValuationMetric) -> float:
    return getattr(result, metric.value)


def tornado(
    baseline_value: float,
    run: Callable[[str, float], float],
    spec: Mapping[str, float],
) -> List[SensitivityResult]:
    """Rank inputs by the swing of ``run`` between a +delta and -delta shift.

    ``spec`` maps input names to a delta in percent; ``run`` receives the delta as a
    signed fraction. Ties keep the order of ``spec``.
    """
    results: List[SensitivityResult] = []
    for name, delta_pct in spec.items():
        upside = run(name, delta_pct / 100)
        downside = run(name, -delta_pct / 100)
        logger.debug("Sensitivity %s: up=%.2f down=%.2f", name, upside, downside)
        results.append(
            SensitivityResult(
                name=name,
                label=INPUT_LABELS.get(name, name),
                baseline=baseline_value,
                upside=upside,
                downside=downside,
                swing=abs(upside - downside),
            )
        )
    return sorted(results, key=lambda item: item.swing, reverse=True)


def run_tornado(
    assumptions: Assumptions,
    spec: Optional[Mapping[str, float]] = None,
    metric: ValuationMetric = ValuationMetric.NPV,
) -> List[SensitivityResult]:
    spec = DEFAULT_TORNADO_SPEC if spec is None else spec
    # Resolve every perturbation up front so an unknown name fails before any run.
    for name in spec:
        assumptions.scaled(name, 0.0)

    def run(name: str, fraction: float) -> float:
        return metric_value(project(assumptions.scaled(name, fraction)), metric)

    baseline = metric_value(project(assumptions), metric)
    return tornado(baseline, run, spec)


def discount_rate_curve(assumptions: Assumptions, steps: int = 5, step_pct: float = 2.0) -> List[DiscountRatePoint]:
    points: List[DiscountRatePoint] = []
    for offset in range(-steps, steps + 1):
        rate = assumptions.discount_rate_pct + offset * step_pct
        if rate < DISCOUNT_RATE_FLOOR_PCT:
            continue
        result = project(assumptions.with_overrides(discount_rate_pct=rate))
        points.append(DiscountRatePoint(discount_rate_pct=rate, npv=result.npv))
    return points
