from __future__ import annotations

import logging
import time
from typing import Dict

from fastapi import FastAPI, HTTPException, Request

from . import engine
from .schemas import (
    DiscountCurveRequest,
    DiscountCurveResponse,
    ProjectionRequest,
    ProjectionResponse,
    SimulationRequest,
    SimulationResponse,
    TornadoRequest,
    TornadoResponse,
)
from .services.sensitivity import discount_rate_curve, metric_value
from .settings import get_settings


logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger("forecast_app")

app = FastAPI(title="Financial Projection Engine", version="0.1.0")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d in %.4fs",
        request.method,
        request.url.path,
        response.status_code,
        time.time() - start_time,
    )
    return response


@app.post("/project", response_model=ProjectionResponse)
def project(payload: ProjectionRequest) -> ProjectionResponse:
    return ProjectionResponse(result=engine.project(payload.assumptions))


@app.post("/tornado", response_model=TornadoResponse)
def tornado(payload: TornadoRequest) -> TornadoResponse:
    try:
        results = engine.tornado(payload.assumptions, payload.spec, payload.metric)
    except ValueError as exc:
        logger.warning("Rejected tornado request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    if results:
        baseline = results[0].baseline
    else:
        baseline = metric_value(engine.project(payload.assumptions), payload.metric)
    return TornadoResponse(baseline=baseline, results=results)


@app.post("/simulate", response_model=SimulationResponse)
def simulate(payload: SimulationRequest) -> SimulationResponse:
    try:
        summary = engine.simulate(payload.assumptions, payload.draws, seed=payload.seed, workers=payload.workers)
    except ValueError as exc:
        logger.warning("Rejected simulation request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    return SimulationResponse(summary=summary)


@app.post("/discount-curve", response_model=DiscountCurveResponse)
def discount_curve(payload: DiscountCurveRequest) -> DiscountCurveResponse:
    points = discount_rate_curve(payload.assumptions, steps=payload.steps, step_pct=payload.step_pct)
    return DiscountCurveResponse(points=points)


@app.get("/health")
def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}
