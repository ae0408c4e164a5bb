"""
End-to-end occupancy pipeline.

Loads incoming/outgoing shipments, derives daily occupancy, saves the
occupancy report, runs the forecast and exports CSV, Excel and chart.

Usage:
    python -m warehouse_forecast.pipeline --incoming data/incoming_shipments.csv \
        --outgoing data/outgoing_shipments.csv --steps 7 --order 2
"""
import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from warehouse_forecast.data.loader import load_occupancy
from warehouse_forecast.models.forecaster import ForecastFailure, ForecastResult, OccupancyForecaster
from warehouse_forecast.models.methods import resolve_arima_backend
from warehouse_forecast.utils.config import DEFAULT_FORECAST_CONFIG
from warehouse_forecast.utils.exceptions import WarehouseForecastError
from warehouse_forecast.utils.export import (
    ForecastReportExporter,
    save_forecast_chart,
    save_forecast_csv,
    save_occupancy_csv,
)
from warehouse_forecast.utils.logging_config import setup_logging
from warehouse_forecast.utils.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class PipelineOutput:
    """Artifacts produced by one pipeline run."""
    occupancy: pd.DataFrame
    forecast: Union[ForecastResult, ForecastFailure]
    files: Dict[str, Path] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return isinstance(self.forecast, ForecastResult)


def run_pipeline(
    incoming_file: Union[str, Path],
    outgoing_file: Union[str, Path],
    output_dir: Union[str, Path],
    p: int = 2,
    steps: int = DEFAULT_FORECAST_CONFIG.default_steps,
    arima_available: bool = False,
    excel: bool = True,
    chart: bool = True
) -> PipelineOutput:
    """
    Run load -> aggregate -> forecast -> export.

    The occupancy report is written even when the forecast fails.
    """
    output_dir = Path(output_dir)

    logger.info("Loading and processing shipment data")
    occupancy = load_occupancy(incoming_file, outgoing_file)

    files = {"occupancy_csv": save_occupancy_csv(occupancy, output_dir)}

    logger.info("Running occupancy forecast")
    forecaster = OccupancyForecaster(arima_available=arima_available)
    result = forecaster.try_forecast(occupancy, p=p, steps=steps)

    if isinstance(result, ForecastFailure):
        logger.warning(f"Forecast failed ({result.error_code}): {result.detail}")
        return PipelineOutput(occupancy=occupancy, forecast=result, files=files)

    files["forecast_csv"] = save_forecast_csv(result, output_dir)
    if excel:
        files["forecast_xlsx"] = ForecastReportExporter(output_dir).export_forecast(
            result, history=occupancy, filename="space_forecast_arima.xlsx"
        )
    if chart:
        files["forecast_chart"] = save_forecast_chart(occupancy, result, output_dir)

    logger.info(f"Method used: {result.method}")
    return PipelineOutput(occupancy=occupancy, forecast=result, files=files)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Forecast warehouse occupancy from shipment files.")
    parser.add_argument("--incoming", type=Path, default=settings.incoming_file,
                        help="Incoming shipments CSV/Excel file")
    parser.add_argument("--outgoing", type=Path, default=settings.outgoing_file,
                        help="Outgoing shipments CSV/Excel file")
    parser.add_argument("--output-dir", type=Path, default=settings.results_path,
                        help="Directory for results")
    parser.add_argument("--steps", type=int, default=settings.default_forecast_days,
                        help="Forecast horizon in days")
    parser.add_argument("--order", type=int, default=2,
                        help="AR order (upper bound)")
    parser.add_argument("--no-arima", action="store_true",
                        help="Never use the full ARIMA backend")
    parser.add_argument("--no-excel", action="store_true", help="Skip the Excel report")
    parser.add_argument("--no-chart", action="store_true", help="Skip the chart")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    args = build_parser().parse_args(argv)
    setup_logging(level=settings.log_level, log_format=settings.log_format)

    arima_available = resolve_arima_backend(settings.arima_backend_enabled and not args.no_arima)

    try:
        output = run_pipeline(
            incoming_file=args.incoming,
            outgoing_file=args.outgoing,
            output_dir=args.output_dir,
            p=args.order,
            steps=args.steps,
            arima_available=arima_available,
            excel=not args.no_excel,
            chart=not args.no_chart
        )
    except WarehouseForecastError as e:
        logger.error(f"Pipeline failed: {e.message}", extra={"details": e.to_dict()})
        return 1

    for name, path in output.files.items():
        logger.info(f"{name}: {path}")

    return 0 if output.succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
