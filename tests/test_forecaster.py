"""Tests for the forecast orchestrator."""
from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from warehouse_forecast.models.forecaster import ForecastFailure, ForecastResult, OccupancyForecaster
from warehouse_forecast.models.methods import ForecastMethod
from warehouse_forecast.utils.exceptions import (
    InsufficientDataError,
    InvalidParameterError,
    ModelFitError,
)


@pytest.fixture
def forecaster():
    return OccupancyForecaster(arima_available=False)


def assert_contiguous_after(result: ForecastResult, last_date: date):
    expected = [last_date + timedelta(days=i) for i in range(1, len(result.points) + 1)]
    assert result.dates == expected


# ===========================================
# Scenarios
# ===========================================

def test_trend_scenario_uses_ar_path(forecaster, scenario_series, last_scenario_date):
    result = forecaster.forecast(scenario_series, p=2, steps=3)

    assert result.method_kind is ForecastMethod.AR_APPROXIMATION
    assert result.method == "AR(2) approximation"
    assert result.ar_order == 2
    assert result.observations == 8
    assert len(result.points) == 3
    assert all(point.forecast > 100 for point in result.points)
    assert result.values == pytest.approx([111.0, 115.0, 117.0], rel=1e-6)
    assert_contiguous_after(result, last_scenario_date)


def test_trend_scenario_has_confidence_band(forecaster, scenario_series):
    result = forecaster.forecast(scenario_series, p=2, steps=3)

    spread = 1.96 * np.std(scenario_series["occupancy"], ddof=1)
    for point in result.points:
        assert point.upper == pytest.approx(point.forecast + spread)
        assert point.lower == pytest.approx(max(0.0, point.forecast - spread))


def test_short_series_uses_smoothing_without_band(forecaster, make_series):
    result = forecaster.forecast(make_series([10, 12, 14, 15, 17]), steps=4)

    assert result.method == "Exponential Smoothing"
    assert result.ar_order is None
    assert not result.has_confidence_band
    assert all(point.lower is None and point.upper is None for point in result.points)


def test_two_points_is_insufficient(forecaster, make_series):
    with pytest.raises(InsufficientDataError):
        forecaster.forecast(make_series([10, 12]))


def test_two_points_structured_failure(forecaster, make_series):
    outcome = forecaster.try_forecast(make_series([10, 12]))

    assert isinstance(outcome, ForecastFailure)
    assert outcome.error_code == "INSUFFICIENT_DATA"
    assert outcome.method == "Exponential Smoothing"
    assert outcome.to_dict()["detail"]


def test_nine_points_without_backend_uses_ar(forecaster, make_series):
    result = forecaster.forecast(make_series([5, 6, 8, 7, 9, 11, 10, 12, 13]))

    assert result.method_kind is ForecastMethod.AR_APPROXIMATION
    assert result.method == "AR(1) approximation"
    assert result.ar_order == 1


def test_backend_is_not_used_below_ten_points(scenario_series):
    result = OccupancyForecaster(arima_available=True).forecast(scenario_series, p=2, steps=3)

    assert result.method_kind is ForecastMethod.AR_APPROXIMATION


def test_full_arima_path(make_series):
    pytest.importorskip("statsmodels")
    rng = np.random.default_rng(1)
    values = 300 + np.cumsum(rng.normal(0.5, 3.0, size=30))

    result = OccupancyForecaster(arima_available=True).forecast(make_series(values), steps=5)

    assert result.method == "ARIMA(1,1,1)"
    assert len(result.points) == 5
    assert result.has_confidence_band
    assert all(point.forecast >= 0 for point in result.points)


# ===========================================
# Properties
# ===========================================

@pytest.mark.parametrize("steps", [1, 3, 7, 30])
def test_output_length_and_dates(forecaster, make_series, steps):
    values = [120, 118, 125, 130, 128, 135, 140, 138, 145, 150, 149, 155]
    series = make_series(values, start="2023-12-25")

    result = forecaster.forecast(series, p=3, steps=steps)

    assert len(result.points) == steps
    assert all(point.forecast >= 0 for point in result.points)
    assert all(point.lower >= 0 for point in result.points)
    assert_contiguous_after(result, date(2024, 1, 5))


def test_constant_series_forecast_stays_flat(forecaster, make_series):
    result = forecaster.forecast(make_series([250.0] * 10), p=2, steps=14)

    np.testing.assert_allclose(result.values, 250.0, atol=1e-9)
    # No spread in the history, so the band collapses
    assert all(point.lower == pytest.approx(250.0) for point in result.points)


def test_falling_series_is_clamped(forecaster, make_series):
    result = forecaster.forecast(make_series([30 - 4 * i for i in range(8)]), steps=5)

    assert all(point.forecast == 0.0 for point in result.points)
    assert all(point.lower == 0.0 for point in result.points)


def test_idempotent_and_input_untouched(forecaster, scenario_series):
    snapshot = scenario_series.copy()

    first = forecaster.forecast(scenario_series, p=2, steps=5)
    second = forecaster.forecast(scenario_series, p=2, steps=5)

    assert first.points == second.points
    pd.testing.assert_frame_equal(scenario_series, snapshot)


def test_accepts_series_indexed_by_date(forecaster, scenario_series, last_scenario_date):
    series = scenario_series.set_index("date")["occupancy"]

    result = forecaster.forecast(series, p=2, steps=2)

    assert_contiguous_after(result, last_scenario_date)


def test_accepts_capitalized_columns(forecaster, scenario_series):
    renamed = scenario_series.rename(columns={"date": "Date", "occupancy": "Occupancy"})

    result = forecaster.forecast(renamed, p=2, steps=2)

    assert len(result.points) == 2


def test_date_gaps_are_tolerated(forecaster):
    dates = pd.to_datetime([
        "2024-01-01", "2024-01-02", "2024-01-05", "2024-01-06",
        "2024-01-07", "2024-01-09", "2024-01-10", "2024-01-11",
    ])
    series = pd.DataFrame({"date": dates, "occupancy": [100, 102, 101, 105, 107, 106, 110, 112]})

    result = forecaster.forecast(series, steps=2)

    assert_contiguous_after(result, date(2024, 1, 11))


# ===========================================
# Truncation and length checks
# ===========================================

def test_over_production_is_truncated(forecaster, scenario_series, monkeypatch):
    monkeypatch.setattr(
        ForecastMethod, "fit_and_forecast",
        lambda self, values, params, config: np.arange(params.steps + 3, dtype=float)
    )

    result = forecaster.forecast(scenario_series, steps=4)

    assert result.values.tolist() == [0.0, 1.0, 2.0, 3.0]


def test_under_production_is_a_fit_failure(forecaster, scenario_series, monkeypatch):
    monkeypatch.setattr(
        ForecastMethod, "fit_and_forecast",
        lambda self, values, params, config: np.ones(params.steps - 1)
    )

    with pytest.raises(ModelFitError):
        forecaster.forecast(scenario_series, steps=4)


# ===========================================
# Invalid input
# ===========================================

@pytest.mark.parametrize("kwargs", [
    {"p": 0}, {"p": -2}, {"d": 0}, {"steps": 0}, {"steps": -7},
])
def test_invalid_parameters(forecaster, scenario_series, kwargs):
    with pytest.raises(InvalidParameterError):
        forecaster.forecast(scenario_series, **kwargs)


def test_invalid_parameters_structured_failure(forecaster, scenario_series):
    outcome = forecaster.try_forecast(scenario_series, steps=0)

    assert isinstance(outcome, ForecastFailure)
    assert outcome.error_code == "INVALID_PARAMETER"
    assert outcome.method is None


def test_non_increasing_dates_rejected(forecaster, scenario_series):
    shuffled = scenario_series.iloc[[0, 2, 1, 3, 4, 5, 6, 7]]

    with pytest.raises(InvalidParameterError) as exc_info:
        forecaster.forecast(shuffled)

    assert exc_info.value.details["value"] == "NON_INCREASING_DATES"


def test_duplicate_dates_rejected(forecaster, make_series):
    series = make_series([1, 2, 3, 4, 5])
    series.loc[4, "date"] = series.loc[3, "date"]

    with pytest.raises(InvalidParameterError):
        forecaster.forecast(series)


def test_same_calendar_day_rejected(forecaster):
    series = pd.DataFrame({
        "date": pd.to_datetime(["2024-01-01 08:00", "2024-01-01 16:00", "2024-01-02 08:00", "2024-01-03 08:00"]),
        "occupancy": [10.0, 11.0, 12.0, 13.0],
    })

    with pytest.raises(InvalidParameterError) as exc_info:
        forecaster.forecast(series)

    assert exc_info.value.details["value"] == "DUPLICATE_DATES"


def test_missing_values_rejected(forecaster, make_series):
    series = make_series([1, 2, 3, 4, 5])
    series.loc[2, "occupancy"] = np.nan

    with pytest.raises(InvalidParameterError):
        forecaster.forecast(series)


def test_missing_columns_rejected(forecaster):
    with pytest.raises(InvalidParameterError):
        forecaster.forecast(pd.DataFrame({"when": [1, 2, 3], "level": [1, 2, 3]}))


def test_unsupported_input_type_rejected(forecaster):
    with pytest.raises(InvalidParameterError):
        forecaster.forecast([1.0, 2.0, 3.0])


def test_empty_series_rejected(forecaster):
    with pytest.raises(InvalidParameterError):
        forecaster.forecast(pd.DataFrame({"date": [], "occupancy": []}))


# ===========================================
# Result conversion
# ===========================================

def test_result_conversions(forecaster, scenario_series):
    result = forecaster.forecast(scenario_series, p=2, steps=3)

    df = result.to_dataframe()
    records = result.to_records()

    assert list(df.columns) == ["date", "forecast", "lower_bound", "upper_bound"]
    assert len(df) == 3
    assert records[0]["date"] == "2024-01-09"
    assert records[0]["forecast"] == pytest.approx(111.0, rel=1e-6)
