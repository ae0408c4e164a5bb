"""Data loading and validation modules."""
from .loader import DataLoader, compute_occupancy, add_rolling_average, load_occupancy
from .validator import SeriesValidator, ValidationResult, validate_series

__all__ = [
    "DataLoader",
    "compute_occupancy",
    "add_rolling_average",
    "load_occupancy",
    "SeriesValidator",
    "ValidationResult",
    "validate_series",
]
