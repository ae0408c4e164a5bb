"""
Configuration and constants for the warehouse occupancy forecasting engine.
"""
from pathlib import Path
from dataclasses import dataclass

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_RAW = PROJECT_ROOT / "data"
RESULTS_DIR = PROJECT_ROOT / "results"


@dataclass(frozen=True)
class ForecastConfig:
    """Engine constants for the forecasting cascade."""
    # Default model parameters
    default_p: int = 1
    default_d: int = 1
    default_q: int = 1
    default_steps: int = 7

    # Method selection thresholds (series length)
    arima_min_points: int = 10
    ar_min_points: int = 8
    smoothing_min_points: int = 3

    # AR regression needs p lags plus this many extra points
    ar_safety_margin: int = 5
    # Relative singular value cutoff for the least-squares solve
    rank_tolerance: float = 1e-10
    # Residual tolerance for accepting a rank-deficient but consistent system
    consistency_tolerance: float = 1e-8

    # Holt's linear trend smoothing constants (not fitted)
    smoothing_alpha: float = 0.3  # Level
    smoothing_beta: float = 0.1   # Trend

    # Confidence band
    band_window: int = 11  # Last observations used for the spread
    band_z_score: float = 1.96  # 95%

    # Rolling average used by the occupancy report
    rolling_window: int = 3


# Default configuration
DEFAULT_FORECAST_CONFIG = ForecastConfig()
