from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, Literal

from pydantic import BaseModel, Field


ENV_PREFIX = "FORECAST_"

_ENV_FIELDS: Dict[str, str] = {
    "MC_DRAWS": "monte_carlo_draws",
    "MC_WORKERS": "monte_carlo_workers",
    "HISTOGRAM_BINS": "histogram_bins",
    "LOG_LEVEL": "log_level",
}


class EngineSettings(BaseModel):
    monte_carlo_draws: int = Field(1000, ge=1, description="Default number of Monte Carlo draws")
    monte_carlo_workers: int = Field(1, ge=1, description="Threads used to run Monte Carlo draws")
    histogram_bins: int = Field(20, ge=1)
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"

    @classmethod
    def from_env(cls) -> "EngineSettings":
        values = {
            field: os.environ[ENV_PREFIX + key]
            for key, field in _ENV_FIELDS.items()
            if ENV_PREFIX + key in os.environ
        }
        return cls.model_validate(values)


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    return EngineSettings.from_env()
