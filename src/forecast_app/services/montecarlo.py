"""
Monte Carlo risk simulation over the projection engine.

Each draw clones the assumptions, multiplies a handful of drivers by
``1 + N(0, std)`` and re-projects. The NPV of every draw is collected and
summarised as percentile bands plus an equal-width histogram.

Draws are independent, so they can be split across a thread pool. Every
worker owns its own generator (spawned from one SeedSequence) and its own
result buffer; buffers are concatenated in chunk order once all workers are
done, which keeps a seeded run reproducible for a given worker count.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..models.assumptions import PERTURBABLE_FIELDS, Assumptions, UnknownInputError
from ..models.risk import HistogramBin, MonteCarloSummary
from .finance import RandomSource, standard_normal
from .projection import project


logger = logging.getLogger(__name__)

DEFAULT_DRAWS = 1000
DEFAULT_BINS = 20


@dataclass(frozen=True)
class Perturbation:
    field: str
    std: float


DEFAULT_PERTURBATIONS: Tuple[Perturbation, ...] = (
    Perturbation("initial_revenue", 0.10),
    Perturbation("growth_rate_pct", 0.20),
    Perturbation("cogs_pct", 0.05),
    Perturbation("staff_costs", 0.10),
)


def perturb(
    assumptions: Assumptions,
    perturbations: Sequence[Perturbation],
    random_source: RandomSource,
) -> Assumptions:
    changes = {
        item.field: getattr(assumptions, item.field) * (1 + standard_normal(0.0, item.std, random_source))
        for item in perturbations
    }
    return assumptions.with_overrides(**changes)


def _run_draws(
    assumptions: Assumptions,
    count: int,
    perturbations: Sequence[Perturbation],
    random_source: RandomSource,
) -> List[float]:
    buffer: List[float] = []
    for _ in range(count):
        buffer.append(project(perturb(assumptions, perturbations, random_source)).npv)
    return buffer


def _split(draws: int, workers: int) -> List[int]:
    size, remainder = divmod(draws, workers)
    return [size + (1 if i < remainder else 0) for i in range(workers)]


def summarize(values: Sequence[float], bins: int = DEFAULT_BINS) -> MonteCarloSummary:
    ordered = np.sort(np.asarray(values, dtype=float))
    count = len(ordered)

    def pick(percentile: float) -> float:
        return float(ordered[min(count - 1, math.floor(count * percentile))])

    low, high = float(ordered[0]), float(ordered[-1])
    if low == high:
        # np.histogram would widen the range by 0.5 on each side
        histogram = [HistogramBin(start=low, end=high, count=count if i == 0 else 0) for i in range(bins)]
    else:
        # np.histogram closes the last bin on the right, so the maximum is counted.
        counts, edges = np.histogram(ordered, bins=bins, range=(low, high))
        histogram = [
            HistogramBin(start=float(edges[i]), end=float(edges[i + 1]), count=int(counts[i]))
            for i in range(len(counts))
        ]
    return MonteCarloSummary(
        draws=count,
        p5=pick(0.05),
        p50=pick(0.50),
        p95=pick(0.95),
        mean=float(np.mean(ordered)),
        std=float(np.std(ordered)),
        minimum=low,
        maximum=high,
        probability_negative=float(np.mean(ordered < 0)),
        histogram=histogram,
    )


def simulate(
    assumptions: Assumptions,
    draws: int = DEFAULT_DRAWS,
    *,
    random_source: Optional[RandomSource] = None,
    seed: Optional[int] = None,
    workers: int = 1,
    perturbations: Sequence[Perturbation] = DEFAULT_PERTURBATIONS,
    bins: int = DEFAULT_BINS,
) -> MonteCarloSummary:
    draws = max(1, int(draws))
    workers = max(1, min(int(workers), draws))
    for item in perturbations:
        if item.field not in PERTURBABLE_FIELDS:
            raise UnknownInputError(f"Input '{item.field}' cannot be perturbed")
    if random_source is not None and workers > 1:
        raise ValueError("An explicit random source cannot be shared across workers")

    if workers == 1:
        source = random_source if random_source is not None else np.random.default_rng(seed)
        values = _run_draws(assumptions, draws, perturbations, source)
    else:
        children = np.random.SeedSequence(seed).spawn(workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(_run_draws, assumptions, size, perturbations, np.random.default_rng(child))
                for size, child in zip(_split(draws, workers), children)
            ]
            buffers = [future.result() for future in futures]
        values = [value for buffer in buffers for value in buffer]

    summary = summarize(values, bins=bins)
    logger.info(
        "Monte Carlo finished: draws=%d workers=%d p5=%.2f p50=%.2f p95=%.2f",
        summary.draws,
        workers,
        summary.p5,
        summary.p50,
        summary.p95,
    )
    return summary
