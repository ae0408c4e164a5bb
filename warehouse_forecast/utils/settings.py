"""
Environment-based settings management.
Loads configuration from environment variables and .env file.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: str = None, cast: type = str) -> any:
    """Get environment variable with type casting."""
    value = os.getenv(key, default)
    if value is None:
        return None

    if cast == bool:
        return value.lower() in ("true", "1", "yes", "on")
    elif cast == int:
        return int(value)
    elif cast == float:
        return float(value)
    return value


@dataclass
class AppSettings:
    """Application settings loaded from environment."""

    # Application
    app_name: str = "Warehouse Forecast API"
    app_env: str = "development"
    version: str = "1.0.0"

    # Paths
    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent.parent)
    incoming_file: Path = None
    outgoing_file: Path = None
    results_path: Path = None
    logs_path: Path = None

    # Forecasting
    arima_backend_enabled: bool = True
    default_forecast_days: int = 7
    max_forecast_days: int = 365

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_to_file: bool = False

    def __post_init__(self):
        """Initialize paths after dataclass creation."""
        if self.incoming_file is None:
            self.incoming_file = self.project_root / "data" / "incoming_shipments.csv"
        if self.outgoing_file is None:
            self.outgoing_file = self.project_root / "data" / "outgoing_shipments.csv"
        if self.results_path is None:
            self.results_path = self.project_root / "results"
        if self.logs_path is None:
            self.logs_path = self.project_root / "logs"

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Create settings from environment variables."""
        project_root = Path(__file__).parent.parent.parent

        return cls(
            app_name=get_env("APP_NAME", "Warehouse Forecast API"),
            app_env=get_env("APP_ENV", "development"),

            project_root=project_root,
            incoming_file=project_root / get_env("INCOMING_FILE", "data/incoming_shipments.csv"),
            outgoing_file=project_root / get_env("OUTGOING_FILE", "data/outgoing_shipments.csv"),
            results_path=project_root / get_env("RESULTS_PATH", "results"),
            logs_path=project_root / get_env("LOGS_PATH", "logs"),

            arima_backend_enabled=get_env("ARIMA_BACKEND_ENABLED", "true", bool),
            default_forecast_days=get_env("DEFAULT_FORECAST_DAYS", "7", int),
            max_forecast_days=get_env("MAX_FORECAST_DAYS", "365", int),

            api_host=get_env("API_HOST", "127.0.0.1"),
            api_port=get_env("API_PORT", "8080", int),

            log_level=get_env("LOG_LEVEL", "INFO"),
            log_format=get_env("LOG_FORMAT", "text"),
            log_to_file=get_env("LOG_TO_FILE", "false", bool),
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env.lower() == "production"


@lru_cache()
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings.from_env()
