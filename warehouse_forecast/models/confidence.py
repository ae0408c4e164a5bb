"""Confidence band around a point forecast."""
from typing import Sequence, Tuple

import numpy as np

from warehouse_forecast.utils.config import DEFAULT_FORECAST_CONFIG
from warehouse_forecast.utils.exceptions import InvalidParameterError


def confidence_band(
    forecast: Sequence[float],
    history: Sequence[float],
    window: int = DEFAULT_FORECAST_CONFIG.band_window,
    z_score: float = DEFAULT_FORECAST_CONFIG.band_z_score
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Symmetric band ``forecast +/- z * std(recent history)``.

    The spread is the sample standard deviation of the last ``window``
    observations (zero when fewer than two are available). The lower bound
    is floored at zero.

    Returns:
        Tuple of (lower, upper) arrays, same length as ``forecast``.
    """
    if window < 1:
        raise InvalidParameterError("window", window, "must be at least 1")

    forecast = np.asarray(forecast, dtype=float)
    recent = np.asarray(history, dtype=float)[-window:]

    spread = float(np.std(recent, ddof=1)) if len(recent) > 1 else 0.0
    margin = z_score * spread

    lower = np.maximum(forecast - margin, 0.0)
    upper = forecast + margin
    return lower, upper
