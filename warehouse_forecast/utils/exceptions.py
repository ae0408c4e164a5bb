"""
Custom exceptions for the warehouse forecasting application.
Provides structured error handling with user-friendly messages.
"""
from typing import Optional, Dict, Any


class WarehouseForecastError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        user_message: str = None
    ):
        self.message = message
        self.error_code = error_code or "UNKNOWN_ERROR"
        self.details = details or {}
        self.user_message = user_message or message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details
        }


# ===========================================
# Data Errors
# ===========================================

class DataError(WarehouseForecastError):
    """Data related errors."""
    pass


class DataLoadError(DataError):
    """Error loading data from file."""

    def __init__(self, filepath: str, reason: str = None):
        super().__init__(
            message=f"Failed to load data from: {filepath}",
            error_code="DATA_LOAD_ERROR",
            user_message=f"Could not load the data file. {reason or 'Please check the file format.'}",
            details={"filepath": str(filepath), "reason": reason}
        )


class MissingDataError(DataError):
    """Required data is missing."""

    def __init__(self, data_type: str, required_columns: list = None):
        super().__init__(
            message=f"Missing required data: {data_type}",
            error_code="DATA_MISSING",
            user_message=f"Required data is missing: {data_type}. Please provide the shipment files.",
            details={"data_type": data_type, "required_columns": required_columns}
        )


# ===========================================
# Model Errors
# ===========================================

class ModelError(WarehouseForecastError):
    """Forecast model related errors."""
    pass


class InsufficientDataError(ModelError):
    """Series is shorter than the selected method needs."""

    def __init__(self, method: str, required: int, available: int):
        super().__init__(
            message=f"Not enough data points for {method}. Need at least {required} points, got {available}",
            error_code="INSUFFICIENT_DATA",
            user_message=f"At least {required} days of history are needed to forecast with {method}.",
            details={"method": method, "required": required, "available": available}
        )


class ModelFitError(ModelError):
    """Model could not be fitted (singular or ill-conditioned problem)."""

    def __init__(self, method: str, reason: str = None):
        super().__init__(
            message=f"Model fit failed for {method}: {reason}",
            error_code="MODEL_FIT_FAILED",
            user_message=f"The {method} model could not be fitted. {reason or 'Please check the data.'}",
            details={"method": method, "reason": reason}
        )


# ===========================================
# Configuration Errors
# ===========================================

class ConfigurationError(WarehouseForecastError):
    """Configuration related errors."""
    pass


class InvalidParameterError(ConfigurationError):
    """Invalid forecast parameter or malformed input series."""

    def __init__(self, parameter: str, value: Any = None, reason: str = None):
        super().__init__(
            message=f"Invalid parameter: {parameter}" + (f" ({reason})" if reason else ""),
            error_code="INVALID_PARAMETER",
            user_message=f"Invalid value for {parameter}. {reason or ''}".strip(),
            details={"parameter": parameter, "value": str(value), "reason": reason}
        )


# ===========================================
# Export Errors
# ===========================================

class ExportError(WarehouseForecastError):
    """Export related errors."""
    pass


class ExportFormatError(ExportError):
    """Unsupported export format."""

    def __init__(self, format: str, supported_formats: list = None):
        super().__init__(
            message=f"Unsupported export format: {format}",
            error_code="EXPORT_FORMAT_ERROR",
            user_message=f"Export format '{format}' is not supported.",
            details={"format": format, "supported_formats": supported_formats or ["csv", "xlsx", "html"]}
        )
