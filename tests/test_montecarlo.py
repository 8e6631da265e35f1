from __future__ import annotations

import random

import pytest

from forecast_app.models.assumptions import UnknownInputError
from forecast_app.sample_data import build_sample_assumptions
from forecast_app.services.montecarlo import Perturbation, perturb, simulate, summarize
from forecast_app.services.projection import project


def test_simulation_summary_shape():
    summary = simulate(build_sample_assumptions(), 200, seed=7)

    assert summary.draws == 200
    assert summary.p5 <= summary.p50 <= summary.p95
    assert summary.minimum <= summary.p5
    assert summary.p95 <= summary.maximum
    assert len(summary.histogram) == 20
    assert sum(b.count for b in summary.histogram) == 200
    assert summary.histogram[0].start == pytest.approx(summary.minimum)
    assert summary.histogram[-1].end == pytest.approx(summary.maximum)
    assert 0 <= summary.probability_negative <= 1


def test_seeded_simulation_is_reproducible():
    assumptions = build_sample_assumptions()
    first = simulate(assumptions, 100, seed=3)
    second = simulate(assumptions, 100, seed=3)
    assert first.model_dump() == second.model_dump()


def test_parallel_workers_use_every_draw():
    assumptions = build_sample_assumptions()
    summary = simulate(assumptions, 103, seed=11, workers=4)
    again = simulate(assumptions, 103, seed=11, workers=4)

    assert summary.draws == 103
    assert sum(b.count for b in summary.histogram) == 103
    assert summary.model_dump() == again.model_dump()


def test_draws_are_clamped():
    summary = simulate(build_sample_assumptions(), 0, seed=1)
    assert summary.draws == 1
    assert summary.p5 == summary.p50 == summary.p95
    assert sum(b.count for b in summary.histogram) == 1
    assert summary.histogram[0].start == summary.histogram[0].end == summary.minimum


def test_injected_random_source():
    summary = simulate(build_sample_assumptions(), 50, random_source=random.Random(5))
    assert summary.draws == 50


def test_explicit_source_cannot_be_shared_across_workers():
    with pytest.raises(ValueError):
        simulate(build_sample_assumptions(), 50, random_source=random.Random(5), workers=2)


def test_unknown_perturbation_rejected():
    with pytest.raises(UnknownInputError):
        simulate(build_sample_assumptions(), 10, perturbations=[Perturbation("horizon_months", 0.1)])


def test_zero_volatility_reproduces_baseline():
    assumptions = build_sample_assumptions()
    still = [Perturbation("initial_revenue", 0.0), Perturbation("staff_costs", 0.0)]
    summary = simulate(assumptions, 25, seed=2, perturbations=still)
    baseline = project(assumptions).npv

    assert summary.p5 == pytest.approx(baseline)
    assert summary.p95 == pytest.approx(baseline)
    assert sum(b.count for b in summary.histogram) == 25
    assert summary.histogram[0].count == 25
    assert all(b.start == b.end == summary.minimum for b in summary.histogram)


def test_perturb_returns_clone():
    assumptions = build_sample_assumptions()
    changed = perturb(assumptions, [Perturbation("staff_costs", 0.1)], random.Random(1))
    assert assumptions.staff_costs == 25000
    assert changed.staff_costs != 25000
    assert changed.initial_revenue == assumptions.initial_revenue


def test_summarize_percentiles_and_histogram():
    summary = summarize([float(v) for v in range(100)])

    assert summary.p5 == 5
    assert summary.p50 == 50
    assert summary.p95 == 95
    assert summary.mean == pytest.approx(49.5)
    assert summary.histogram[0].count == 5
    assert summary.histogram[-1].count == 5
    assert sum(b.count for b in summary.histogram) == 100
    assert summary.histogram[0].center == pytest.approx((0 + 99 / 20) / 2)
    assert summary.histogram[-1].end == pytest.approx(99)


def test_summarize_negative_share():
    summary = summarize([-1.0, 1.0, 2.0, 3.0])
    assert summary.probability_negative == pytest.approx(0.25)


def test_summarize_identical_values_keep_zero_width_bins():
    summary = summarize([250.0] * 8, bins=4)

    assert [b.count for b in summary.histogram] == [8, 0, 0, 0]
    assert all(b.start == b.end == 250.0 for b in summary.histogram)
    assert summary.histogram[0].center == 250.0
