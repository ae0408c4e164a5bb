"""
REST API routes for the warehouse forecast service.
Uses Flask for lightweight API endpoints.
"""
import logging
import pandas as pd
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, request, jsonify

from warehouse_forecast.data.loader import load_occupancy
from warehouse_forecast.models.forecaster import ForecastFailure, OccupancyForecaster
from warehouse_forecast.models.methods import resolve_arima_backend
from warehouse_forecast.utils.exceptions import WarehouseForecastError
from warehouse_forecast.utils.logging_config import get_logger
from warehouse_forecast.utils.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

TREND_WINDOW = 7


def create_app(
    settings: AppSettings = None,
    forecaster: OccupancyForecaster = None,
    data: Optional[pd.DataFrame] = None,
    config: dict = None
) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        settings: Application settings (defaults to environment settings)
        forecaster: Forecasting engine; built from settings when omitted
        data: Preloaded occupancy frame; loaded lazily from the shipment
            files when omitted
        config: Optional Flask configuration dictionary

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)

    app.config.update(config or {})
    app.json.sort_keys = False

    app.settings = settings or get_settings()
    get_logger()

    app.forecaster = forecaster or OccupancyForecaster(
        arima_available=resolve_arima_backend(app.settings.arima_backend_enabled)
    )
    app.data = data
    app.last_updated = datetime.now(timezone.utc) if data is not None else None

    def load_warehouse_data() -> Optional[pd.DataFrame]:
        """Load shipment files into app state; None when unavailable."""
        try:
            app.data = load_occupancy(app.settings.incoming_file, app.settings.outgoing_file)
        except WarehouseForecastError as e:
            logger.error(f"Error loading data: {e.message}", extra={"details": e.details})
            return None
        app.last_updated = datetime.now(timezone.utc)
        logger.info(f"Data loaded: {len(app.data)} days of data")
        return app.data

    def current_data() -> Optional[pd.DataFrame]:
        if app.data is None:
            load_warehouse_data()
        return app.data

    def no_data_response():
        return jsonify({
            "error": "No data available",
            "message": "Shipment data could not be loaded"
        }), 503

    # ===========================================
    # MIDDLEWARE
    # ===========================================

    @app.before_request
    def log_request():
        """Log incoming requests."""
        logger.info(f"API Request: {request.method} {request.path}")

    @app.after_request
    def add_headers(response):
        """Add common headers (CORS for web dashboards)."""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    # ===========================================
    # ERROR HANDLERS
    # ===========================================

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            "error": "Not found",
            "path": request.path
        }), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }), 500

    # ===========================================
    # HEALTH & STATUS ENDPOINTS
    # ===========================================

    @app.route("/", methods=["GET"])
    @app.route("/health", methods=["GET"])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            "status": "ok",
            "service": app.settings.app_name,
            "version": app.settings.version,
            "data_loaded": app.data is not None,
            "last_updated": app.last_updated.isoformat() if app.last_updated else "never",
            "arima_backend": app.forecaster.arima_available
        })

    @app.route("/api/current", methods=["GET"])
    @app.route("/current", methods=["GET"])
    def current_occupancy():
        """Current occupancy statistics."""
        df = current_data()
        if df is None or df.empty:
            return no_data_response()

        occupancy = df["occupancy"]
        recent = occupancy.tail(TREND_WINDOW)
        trend = float(recent.iloc[-1] - recent.iloc[0])

        return jsonify({
            "current_occupancy": round(float(occupancy.iloc[-1]), 2),
            "average_occupancy": round(float(occupancy.mean()), 2),
            "max_occupancy": round(float(occupancy.max()), 2),
            "min_occupancy": round(float(occupancy.min()), 2),
            "recent_trend": "increasing" if trend > 0 else "decreasing",
            "trend_value": round(trend, 2),
            "last_date": pd.Timestamp(df["date"].iloc[-1]).date().isoformat(),
            "data_points": len(df)
        })

    # ===========================================
    # FORECAST ENDPOINTS
    # ===========================================

    @app.route("/api/forecast", methods=["GET"])
    @app.route("/forecast", methods=["GET"])
    def generate_forecast():
        """
        Generate a forecast.

        Query parameters:
            days: Forecast horizon (default from settings)
        """
        raw_days = request.args.get("days", str(app.settings.default_forecast_days))
        try:
            days = int(raw_days)
        except ValueError:
            days = None
        if days is None or days < 1 or days > app.settings.max_forecast_days:
            return jsonify({
                "error": "Invalid request",
                "message": f"'days' must be an integer between 1 and {app.settings.max_forecast_days}"
            }), 400

        df = current_data()
        if df is None or df.empty:
            return no_data_response()

        logger.info(f"Generating forecast for {days} days")
        result = app.forecaster.try_forecast(df, steps=days)

        if isinstance(result, ForecastFailure):
            return jsonify({
                "error": "Forecast generation failed",
                **result.to_dict()
            }), 422

        values = result.values
        return jsonify({
            "forecast_horizon": days,
            "method": result.method,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "forecasts": [
                {
                    "date": point.date.isoformat(),
                    "predicted_occupancy": round(point.forecast, 2),
                    "lower_bound": round(point.lower, 2) if point.lower is not None else None,
                    "upper_bound": round(point.upper, 2) if point.upper is not None else None
                }
                for point in result.points
            ],
            "summary": {
                "avg_forecast": round(float(values.mean()), 2),
                "max_forecast": round(float(values.max()), 2),
                "min_forecast": round(float(values.min()), 2)
            }
        })

    # ===========================================
    # DATA ENDPOINTS
    # ===========================================

    @app.route("/api/reload", methods=["GET", "POST"])
    @app.route("/reload", methods=["GET", "POST"])
    def reload_data():
        """Reload shipment data from disk."""
        logger.info("Reloading warehouse data")
        df = load_warehouse_data()
        if df is None:
            return jsonify({
                "error": "Failed to reload data"
            }), 500

        dates = pd.to_datetime(df["date"])
        return jsonify({
            "status": "success",
            "message": "Data reloaded successfully",
            "data_points": len(df),
            "date_range": f"{dates.min().date().isoformat()} to {dates.max().date().isoformat()}"
        })

    return app


def run_api(host: str = None, port: int = None, debug: bool = False):
    """
    Run the API server.

    Args:
        host: Host to bind to (default from settings)
        port: Port number (default from settings)
        debug: Enable debug mode
    """
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    app = create_app(settings)

    logger.info(f"Starting API server on http://{host}:{port}")
    logger.info("Endpoints: GET /health, GET /api/current, GET /api/forecast?days=7, GET|POST /api/reload")

    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_api(debug=True)
