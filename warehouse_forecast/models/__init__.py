"""Forecasting engine: method cascade, confidence band and orchestrator."""
from .methods import (
    ForecastMethod,
    ModelParameters,
    ar_forecast,
    smoothing_forecast,
    arima_forecast,
    select_method,
    resolve_arima_backend,
)
from .confidence import confidence_band
from .forecaster import OccupancyForecaster, ForecastResult, ForecastPoint, ForecastFailure

__all__ = [
    "ForecastMethod",
    "ModelParameters",
    "ar_forecast",
    "smoothing_forecast",
    "arima_forecast",
    "select_method",
    "resolve_arima_backend",
    "confidence_band",
    "OccupancyForecaster",
    "ForecastResult",
    "ForecastPoint",
    "ForecastFailure",
]
