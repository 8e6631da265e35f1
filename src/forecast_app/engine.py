"""
Public entry points of the projection and risk-analysis engine.

All three functions take and return plain pydantic models and keep no state
between calls.
"""

from __future__ import annotations

from typing import List, Mapping, Optional

from .models.assumptions import Assumptions
from .models.results import ResultSet
from .models.risk import MonteCarloSummary, SensitivityResult, ValuationMetric
from .services import montecarlo
from .services.projection import project as _project
from .services.sensitivity import run_tornado
from .settings import get_settings


def project(assumptions: Assumptions) -> ResultSet:
    return _project(assumptions)


def tornado(
    assumptions: Assumptions,
    spec: Optional[Mapping[str, float]] = None,
    metric: ValuationMetric = ValuationMetric.NPV,
) -> List[SensitivityResult]:
    return run_tornado(assumptions, spec, metric)


def simulate(
    assumptions: Assumptions,
    draws: Optional[int] = None,
    *,
    seed: Optional[int] = None,
    workers: Optional[int] = None,
    random_source: Optional[montecarlo.RandomSource] = None,
) -> MonteCarloSummary:
    settings = get_settings()
    if workers is None:
        workers = 1 if random_source is not None else settings.monte_carlo_workers
    return montecarlo.simulate(
        assumptions,
        settings.monte_carlo_draws if draws is None else draws,
        random_source=random_source,
        seed=seed,
        workers=workers,
        bins=settings.histogram_bins,
    )
