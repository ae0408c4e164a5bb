"""
Occupancy forecast orchestration.
Selects a forecasting method, runs it and attaches dates and confidence bands.
"""
import pandas as pd
import numpy as np
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field
import logging

from warehouse_forecast.data.validator import SeriesValidator
from warehouse_forecast.models.confidence import confidence_band
from warehouse_forecast.models.methods import ForecastMethod, ModelParameters, select_method
from warehouse_forecast.utils.config import DEFAULT_FORECAST_CONFIG, ForecastConfig
from warehouse_forecast.utils.exceptions import (
    InvalidParameterError,
    ModelFitError,
    WarehouseForecastError,
)

logger = logging.getLogger(__name__)

SeriesLike = Union[pd.DataFrame, pd.Series]

DATE_COLUMNS = ["date", "timestamp", "datetime", "day"]
VALUE_COLUMNS = ["occupancy", "value", "volume"]


@dataclass(frozen=True)
class ForecastPoint:
    """A single forecast day."""
    date: date
    forecast: float
    lower: Optional[float] = None
    upper: Optional[float] = None


@dataclass
class ForecastResult:
    """Container for forecast results."""
    points: List[ForecastPoint]
    method: str  # Tag, e.g. "AR(2) approximation"
    method_kind: ForecastMethod
    observations: int
    ar_order: Optional[int] = None  # Effective order on the AR path

    @property
    def dates(self) -> List[date]:
        return [p.date for p in self.points]

    @property
    def values(self) -> np.ndarray:
        return np.array([p.forecast for p in self.points], dtype=float)

    @property
    def has_confidence_band(self) -> bool:
        return bool(self.points) and self.points[0].lower is not None

    def to_dataframe(self) -> pd.DataFrame:
        """Convert forecast to a DataFrame with date, forecast and bound columns."""
        return pd.DataFrame({
            "date": pd.to_datetime(self.dates),
            "forecast": self.values,
            "lower_bound": [p.lower for p in self.points],
            "upper_bound": [p.upper for p in self.points],
        })

    def to_records(self) -> List[Dict[str, Any]]:
        """JSON-friendly list of forecast days."""
        return [
            {
                "date": p.date.isoformat(),
                "forecast": p.forecast,
                "lower_bound": p.lower,
                "upper_bound": p.upper,
            }
            for p in self.points
        ]


@dataclass(frozen=True)
class ForecastFailure:
    """Structured failure returned instead of a forecast."""
    method: Optional[str]
    error_code: str
    detail: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "error_code": self.error_code,
            "detail": self.detail,
            "details": self.details,
        }


class OccupancyForecaster:
    """
    Stateless forecasting engine for a single occupancy series.

    Method cascade (evaluated once per call, no downgrade after selection):
    - full ARIMA when the backend is available and n >= 10
    - AR(min(p, n // 3)) approximation when n >= 8
    - double exponential smoothing otherwise (needs n >= 3)

    Non-smoothing forecasts carry a 95% band from the spread of the
    recent history.
    """

    def __init__(self, arima_available: bool = False, config: ForecastConfig = None):
        """
        Initialize forecaster.

        Args:
            arima_available: Whether the full ARIMA backend may be used.
            config: Engine constants.
        """
        self.arima_available = arima_available
        self.config = config or DEFAULT_FORECAST_CONFIG

    def select(self, n: int) -> ForecastMethod:
        """Method that would be used for a series of length ``n``."""
        return select_method(n, self.arima_available, self.config)

    def forecast(
        self,
        series: SeriesLike,
        p: int = None,
        d: int = None,
        q: int = None,
        steps: int = None
    ) -> ForecastResult:
        """
        Forecast the series ``steps`` days past its last date.

        Args:
            series: DataFrame with date and occupancy columns, or a Series
                indexed by date.
            p: AR order (upper bound on the AR path).
            d: Differencing order (fixed at 1).
            q: MA order, used only by the full ARIMA backend.
            steps: Forecast horizon in days.

        Returns:
            ForecastResult with one point per future day.

        Raises:
            InvalidParameterError: Bad parameters or malformed series.
            InsufficientDataError: Series too short for the selected method.
            ModelFitError: The selected method could not be fitted.
        """
        params = ModelParameters(
            p=self.config.default_p if p is None else p,
            d=self.config.default_d if d is None else d,
            q=self.config.default_q if q is None else q,
            steps=self.config.default_steps if steps is None else steps,
        ).validate()

        dates, values = self._prepare_series(series)
        n = len(values)

        method = self.select(n)
        label = method.label(params)
        logger.info(
            f"Running {label} on {n} observations ({params.steps} steps)",
            extra={"method": label, "observations": n, "steps": params.steps}
        )

        raw = np.asarray(method.fit_and_forecast(values, params, self.config), dtype=float)

        if len(raw) > params.steps:
            logger.warning(f"{label} produced {len(raw)} values, keeping the first {params.steps}")
            raw = raw[:params.steps]
        elif len(raw) < params.steps:
            raise ModelFitError(label, f"produced {len(raw)} of {params.steps} forecasts")

        forecast_values = np.maximum(raw, 0.0)

        lower = upper = None
        if method is not ForecastMethod.EXPONENTIAL_SMOOTHING:
            lower, upper = confidence_band(
                forecast_values,
                values,
                window=self.config.band_window,
                z_score=self.config.band_z_score
            )

        last_date = dates[-1].normalize()
        points = [
            ForecastPoint(
                date=(last_date + pd.Timedelta(days=i + 1)).date(),
                forecast=float(forecast_values[i]),
                lower=float(lower[i]) if lower is not None else None,
                upper=float(upper[i]) if upper is not None else None,
            )
            for i in range(params.steps)
        ]

        return ForecastResult(
            points=points,
            method=label,
            method_kind=method,
            observations=n,
            ar_order=params.ar_order(n) if method is ForecastMethod.AR_APPROXIMATION else None,
        )

    def try_forecast(self, series: SeriesLike, **kwargs) -> Union[ForecastResult, ForecastFailure]:
        """Like ``forecast`` but returns a ForecastFailure instead of raising."""
        try:
            return self.forecast(series, **kwargs)
        except WarehouseForecastError as e:
            logger.warning(f"Forecast failed: {e.message}", extra={"details": e.details})
            return ForecastFailure(
                method=e.details.get("method"),
                error_code=e.error_code,
                detail=e.message,
                details=e.details,
            )

    def _prepare_series(self, series: SeriesLike) -> Tuple[pd.DatetimeIndex, np.ndarray]:
        """Extract and validate dates and values; returns copies."""
        if isinstance(series, pd.Series):
            raw_dates, raw_values = series.index, series
        elif isinstance(series, pd.DataFrame):
            date_col = _find_column(series, DATE_COLUMNS)
            value_col = _find_column(series, VALUE_COLUMNS)
            if date_col is None or value_col is None:
                raise InvalidParameterError(
                    "series",
                    list(series.columns),
                    "expected a date column and an occupancy column"
                )
            raw_dates, raw_values = series[date_col], series[value_col]
        else:
            raise InvalidParameterError(
                "series",
                type(series).__name__,
                "expected a pandas DataFrame or Series"
            )

        dates = pd.DatetimeIndex(pd.to_datetime(raw_dates, errors="coerce"))
        values = pd.to_numeric(pd.Series(raw_values), errors="coerce").to_numpy(dtype=float, copy=True)

        result = SeriesValidator().validate(dates, values)
        if not result.is_valid:
            first = result.errors[0]
            raise InvalidParameterError("series", first.code, first.message)
        for issue in result.warnings:
            logger.warning(f"Series check: {issue.message}")

        return dates, values


def _find_column(df: pd.DataFrame, candidates: List[str]) -> Optional[str]:
    """Find a column by case-insensitive name."""
    lookup = {str(col).lower().strip(): col for col in df.columns}
    for name in candidates:
        if name in lookup:
            return lookup[name]
    return None
