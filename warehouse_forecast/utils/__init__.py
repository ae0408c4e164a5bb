"""Utility modules."""
from .config import (
    PROJECT_ROOT,
    DATA_RAW,
    RESULTS_DIR,
    ForecastConfig,
    DEFAULT_FORECAST_CONFIG,
)

__all__ = [
    "PROJECT_ROOT",
    "DATA_RAW",
    "RESULTS_DIR",
    "ForecastConfig",
    "DEFAULT_FORECAST_CONFIG",
]
