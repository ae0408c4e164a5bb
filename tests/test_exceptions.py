"""Tests for the structured error hierarchy."""
import pytest

from warehouse_forecast.utils import exceptions
from warehouse_forecast.utils.exceptions import (
    DataError,
    DataLoadError,
    ExportFormatError,
    InsufficientDataError,
    InvalidParameterError,
    MissingDataError,
    ModelError,
    ModelFitError,
    WarehouseForecastError,
)


@pytest.mark.parametrize("error, parent, code", [
    (DataLoadError("in.csv", "File not found."), DataError, "DATA_LOAD_ERROR"),
    (MissingDataError("date column", ["date"]), DataError, "DATA_MISSING"),
    (InsufficientDataError("AR(2) approximation", 7, 6), ModelError, "INSUFFICIENT_DATA"),
    (ModelFitError("AR(1) approximation", "singular"), ModelError, "MODEL_FIT_FAILED"),
    (InvalidParameterError("steps", 0, "must be a positive integer"), WarehouseForecastError, "INVALID_PARAMETER"),
    (ExportFormatError("gif", ["html"]), WarehouseForecastError, "EXPORT_FORMAT_ERROR"),
])
def test_errors_carry_codes_and_details(error, parent, code):
    payload = error.to_dict()

    assert isinstance(error, parent)
    assert payload["error_code"] == code
    assert payload["message"] == str(error)
    assert payload["details"]


def test_only_raised_error_types_are_defined():
    error_types = {
        name for name, obj in vars(exceptions).items()
        if isinstance(obj, type) and issubclass(obj, WarehouseForecastError)
    }

    assert error_types == {
        "WarehouseForecastError",
        "DataError", "DataLoadError", "MissingDataError",
        "ModelError", "InsufficientDataError", "ModelFitError",
        "ConfigurationError", "InvalidParameterError",
        "ExportError", "ExportFormatError",
    }
