"""
Warehouse occupancy forecasting.

Derives daily occupancy from shipment volumes and projects it forward with
an ARIMA / AR approximation / exponential smoothing cascade.
"""
from .models import OccupancyForecaster, ForecastResult, ForecastFailure, ForecastMethod

__version__ = "1.0.0"

__all__ = [
    "OccupancyForecaster",
    "ForecastResult",
    "ForecastFailure",
    "ForecastMethod",
]
