"""
Forecasting methods for warehouse occupancy.

Three methods form a cascade chosen by series length:
a full ARIMA fit (statsmodels, optional), an AR(p) least-squares
approximation on the first-differenced series, and Holt's double
exponential smoothing for very short histories.
"""
import logging
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np
from scipy import linalg

from warehouse_forecast.utils.config import DEFAULT_FORECAST_CONFIG, ForecastConfig
from warehouse_forecast.utils.exceptions import (
    InsufficientDataError,
    InvalidParameterError,
    ModelFitError,
)

# Try to import statsmodels
try:
    from statsmodels.tsa.arima.model import ARIMA
    from statsmodels.tools.sm_exceptions import ConvergenceWarning
    STATSMODELS_AVAILABLE = True
except ImportError:
    STATSMODELS_AVAILABLE = False

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _check_steps(steps) -> None:
    if not _is_int(steps) or steps < 1:
        raise InvalidParameterError("steps", steps, "must be a positive integer")


def _as_array(values: Sequence[float]) -> np.ndarray:
    """Copy input into a 1-D float array so callers' data is never touched."""
    y = np.array(values, dtype=float)
    if y.ndim != 1:
        raise InvalidParameterError("series", y.shape, "must be one-dimensional")
    return y


@dataclass(frozen=True)
class ModelParameters:
    """Per-call model parameters. ``d`` is fixed at 1."""
    p: int = 1
    d: int = 1
    q: int = 1
    steps: int = 7

    def validate(self) -> "ModelParameters":
        """Reject invalid parameters before any computation."""
        if not _is_int(self.p) or self.p < 1:
            raise InvalidParameterError("p", self.p, "AR order must be a positive integer")
        if not _is_int(self.d) or self.d < 1:
            raise InvalidParameterError("d", self.d, "differencing order must be a positive integer")
        if self.d != 1:
            raise InvalidParameterError("d", self.d, "differencing order is fixed at 1")
        if not _is_int(self.q) or self.q < 0:
            raise InvalidParameterError("q", self.q, "MA order must be a non-negative integer")
        _check_steps(self.steps)
        return self

    def ar_order(self, n: int) -> int:
        """Effective AR order: never more than a third of the data."""
        return min(self.p, n // 3)


def ar_forecast(
    values: Sequence[float],
    order: int,
    steps: int,
    config: ForecastConfig = DEFAULT_FORECAST_CONFIG
) -> np.ndarray:
    """
    AR(p) approximation of ARIMA(p,1,0) fitted by least squares.

    The series is first-differenced, an AR model with intercept is fitted
    to the differences, the differences are forecast recursively and then
    integrated back onto the last observed level.

    Args:
        values: Ordered observations.
        order: Number of lagged differences (0 gives an intercept-only model).
        steps: Forecast horizon.
        config: Engine constants.

    Returns:
        Array of ``steps`` level forecasts, floored at zero.

    Raises:
        InvalidParameterError: Negative order or non-positive horizon.
        InsufficientDataError: Fewer than ``order + 5`` observations.
        ModelFitError: Underdetermined or inconsistent rank-deficient regression.
    """
    if not _is_int(order) or order < 0:
        raise InvalidParameterError("order", order, "AR order must be a non-negative integer")
    _check_steps(steps)

    y = _as_array(values)
    n = len(y)
    method = f"AR({order}) approximation"
    required = order + config.ar_safety_margin
    if n < required:
        raise InsufficientDataError(method, required, n)

    diff_y = np.diff(y)
    m = len(diff_y)

    # Row for target d[t] is [1, d[t-1], ..., d[t-order]]
    target = diff_y[order:]
    design = np.ones((len(target), order + 1))
    for j in range(1, order + 1):
        design[:, j] = diff_y[order - j:m - j]

    coeffs = _solve_least_squares(design, target, method, config)

    history = list(diff_y)
    diff_forecasts = np.empty(steps)
    for step in range(steps):
        lags = np.array(history[len(history) - order:][::-1])
        next_diff = coeffs[0] + float(np.dot(coeffs[1:], lags))
        diff_forecasts[step] = next_diff
        history.append(next_diff)

    levels = y[-1] + np.cumsum(diff_forecasts)

    # Occupancy cannot be negative: hard floor applied after the fact
    return np.maximum(levels, 0.0)


def _solve_least_squares(
    design: np.ndarray,
    target: np.ndarray,
    method: str,
    config: ForecastConfig
) -> np.ndarray:
    """
    Ordinary least squares via SVD.

    A rank-deficient design is accepted only when the minimum-norm solution
    reproduces the targets exactly (e.g. a constant or perfectly linear
    series, where every lag column is a multiple of the intercept).
    """
    rows, cols = design.shape
    if rows < cols:
        raise ModelFitError(method, f"{rows} equations for {cols} coefficients")

    try:
        coeffs, _, rank, _ = linalg.lstsq(design, target, cond=config.rank_tolerance)
    except (linalg.LinAlgError, ValueError) as e:
        raise ModelFitError(method, str(e)) from e

    if not np.all(np.isfinite(coeffs)):
        raise ModelFitError(method, "non-finite coefficients")

    if rank < cols:
        residual = float(np.linalg.norm(design @ coeffs - target))
        scale = max(1.0, float(np.linalg.norm(target)))
        if residual > config.consistency_tolerance * scale:
            raise ModelFitError(
                method,
                f"design matrix is rank deficient (rank {rank} < {cols})"
            )
        logger.debug(f"{method}: rank-deficient design (rank {rank} < {cols}) fits exactly")

    return coeffs


def smoothing_forecast(
    values: Sequence[float],
    steps: int,
    alpha: float = None,
    beta: float = None,
    config: ForecastConfig = DEFAULT_FORECAST_CONFIG
) -> np.ndarray:
    """
    Double exponential smoothing (Holt's linear trend method).

    Level starts at the mean of the first three observations and trend at
    the mean of their first differences. Smoothing constants are fixed,
    not fitted.

    Returns:
        Array of ``steps`` forecasts ``level + h * trend``, floored at zero.
    """
    alpha = config.smoothing_alpha if alpha is None else alpha
    beta = config.smoothing_beta if beta is None else beta
    if not 0 < alpha <= 1:
        raise InvalidParameterError("alpha", alpha, "must be in (0, 1]")
    if not 0 < beta <= 1:
        raise InvalidParameterError("beta", beta, "must be in (0, 1]")
    _check_steps(steps)

    y = _as_array(values)
    n = len(y)
    if n < config.smoothing_min_points:
        raise InsufficientDataError(
            ForecastMethod.EXPONENTIAL_SMOOTHING.label(),
            config.smoothing_min_points,
            n
        )

    level = float(np.mean(y[:3]))
    trend = float(np.mean(np.diff(y[:3])))

    for value in y[1:]:
        prev_level = level
        level = alpha * value + (1 - alpha) * (level + trend)
        trend = beta * (level - prev_level) + (1 - beta) * trend

    horizons = np.arange(1, steps + 1)
    return np.maximum(level + horizons * trend, 0.0)


def arima_forecast(
    values: Sequence[float],
    p: int,
    d: int,
    q: int,
    steps: int,
    config: ForecastConfig = DEFAULT_FORECAST_CONFIG
) -> np.ndarray:
    """
    Full state-space ARIMA(p,d,q) forecast using statsmodels.

    Any failure inside the backend is reported as a ModelFitError.
    """
    method = f"ARIMA({p},{d},{q})"
    _check_steps(steps)

    if not STATSMODELS_AVAILABLE:
        raise ModelFitError(method, "statsmodels is not installed")

    y = _as_array(values)
    if len(y) < config.arima_min_points:
        raise InsufficientDataError(method, config.arima_min_points, len(y))

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            warnings.simplefilter("ignore", UserWarning)
            results = ARIMA(y, order=(p, d, q)).fit()
            forecast = np.asarray(results.get_forecast(steps=steps).predicted_mean, dtype=float)
    except Exception as e:
        raise ModelFitError(method, str(e)) from e

    if not np.all(np.isfinite(forecast)):
        raise ModelFitError(method, "backend returned non-finite forecasts")

    return forecast


class ForecastMethod(Enum):
    """Closed set of forecasting methods."""
    ARIMA = "arima"
    AR_APPROXIMATION = "ar_approximation"
    EXPONENTIAL_SMOOTHING = "exponential_smoothing"

    def label(self, params: ModelParameters = None) -> str:
        """Method tag reported with every forecast."""
        params = params or ModelParameters()
        if self is ForecastMethod.ARIMA:
            return f"ARIMA({params.p},{params.d},{params.q})"
        if self is ForecastMethod.AR_APPROXIMATION:
            return f"AR({params.p}) approximation"
        return "Exponential Smoothing"

    def fit_and_forecast(
        self,
        values: Sequence[float],
        params: ModelParameters,
        config: ForecastConfig = DEFAULT_FORECAST_CONFIG
    ) -> np.ndarray:
        """Fit this method to ``values`` and forecast ``params.steps`` ahead."""
        if self is ForecastMethod.ARIMA:
            return arima_forecast(values, params.p, params.d, params.q, params.steps, config)
        if self is ForecastMethod.AR_APPROXIMATION:
            return ar_forecast(values, params.ar_order(len(values)), params.steps, config)
        return smoothing_forecast(values, params.steps, config=config)


def select_method(
    n: int,
    arima_available: bool,
    config: ForecastConfig = DEFAULT_FORECAST_CONFIG
) -> ForecastMethod:
    """
    Choose the forecasting method for a series of length ``n``.

    Full ARIMA needs the backend and at least 10 points, the AR
    approximation at least 8; anything shorter falls back to exponential
    smoothing, which itself rejects fewer than 3 points.
    """
    if arima_available and n >= config.arima_min_points:
        return ForecastMethod.ARIMA
    if n >= config.ar_min_points:
        return ForecastMethod.AR_APPROXIMATION
    return ForecastMethod.EXPONENTIAL_SMOOTHING


def resolve_arima_backend(enabled: bool = True) -> bool:
    """Whether the full ARIMA backend can be used in this process."""
    available = enabled and STATSMODELS_AVAILABLE
    if enabled and not STATSMODELS_AVAILABLE:
        logger.warning("statsmodels not available - using AR approximation")
    elif available:
        logger.info("statsmodels available - using full ARIMA for long series")
    return available
