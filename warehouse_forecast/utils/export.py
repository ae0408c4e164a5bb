"""
Export functionality for occupancy history and forecasts.

Writes CSV files, a formatted Excel report with a line chart, and an
interactive plotly chart of history plus forecast.
"""
import pandas as pd
import plotly.graph_objects as go
from pathlib import Path
from datetime import datetime
from typing import Optional
import logging

from warehouse_forecast.models.forecaster import ForecastResult
from warehouse_forecast.utils.config import RESULTS_DIR
from warehouse_forecast.utils.exceptions import ExportFormatError

logger = logging.getLogger(__name__)

CHART_FORMATS = ["html", "png", "svg", "pdf"]


class ForecastReportExporter:
    """
    Export forecast results to Excel with formatting.

    The workbook holds a Forecast sheet (with chart) and, when given, a
    History sheet with the occupancy series.
    """

    def __init__(self, output_dir: Path = None):
        """
        Initialize exporter.

        Args:
            output_dir: Directory for output files.
        """
        self.output_dir = Path(output_dir) if output_dir else RESULTS_DIR
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _add_header_format(self, workbook):
        """Create header format for Excel."""
        return workbook.add_format({
            "bold": True,
            "font_color": "white",
            "bg_color": "#4472C4",
            "border": 1,
            "align": "center",
            "valign": "vcenter"
        })

    def _add_decimal_format(self, workbook):
        """Create decimal format for Excel."""
        return workbook.add_format({
            "num_format": "#,##0.00",
            "border": 1,
            "align": "center"
        })

    def _add_date_format(self, workbook):
        """Create date format for Excel."""
        return workbook.add_format({
            "num_format": "yyyy-mm-dd",
            "border": 1,
            "align": "center"
        })

    def export_forecast(
        self,
        result: ForecastResult,
        history: Optional[pd.DataFrame] = None,
        filename: str = None
    ) -> Path:
        """
        Export a forecast to Excel.

        Args:
            result: Forecast to export.
            history: Optional occupancy frame (date, occupancy, ...).
            filename: Output filename.

        Returns:
            Path to the exported file.
        """
        if filename is None:
            filename = f"space_forecast_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"

        filepath = self.output_dir / filename
        forecast_df = result.to_dataframe()
        rows = len(forecast_df)

        with pd.ExcelWriter(filepath, engine="xlsxwriter") as writer:
            workbook = writer.book

            header_fmt = self._add_header_format(workbook)
            decimal_fmt = self._add_decimal_format(workbook)
            date_fmt = self._add_date_format(workbook)

            forecast_df.to_excel(writer, sheet_name="Forecast", index=False)
            worksheet = writer.sheets["Forecast"]

            for col_num, value in enumerate(forecast_df.columns):
                worksheet.write(0, col_num, value, header_fmt)

            worksheet.set_column("A:A", 14, date_fmt)
            worksheet.set_column("B:D", 14, decimal_fmt)
            worksheet.write(rows + 2, 0, "Method")
            worksheet.write(rows + 2, 1, result.method)

            chart = workbook.add_chart({"type": "line"})
            chart.add_series({
                "name": result.method,
                "categories": f"='Forecast'!$A$2:$A${rows + 1}",
                "values": f"='Forecast'!$B$2:$B${rows + 1}",
            })
            if result.has_confidence_band:
                for col_letter, name in (("C", "Lower 95%"), ("D", "Upper 95%")):
                    chart.add_series({
                        "name": name,
                        "categories": f"='Forecast'!$A$2:$A${rows + 1}",
                        "values": f"='Forecast'!${col_letter}$2:${col_letter}${rows + 1}",
                        "line": {"dash_type": "dash", "color": "#999999"},
                    })

            chart.set_title({"name": "Warehouse Occupancy Forecast"})
            chart.set_x_axis({"name": "Date"})
            chart.set_y_axis({"name": "Occupancy"})
            chart.set_size({"width": 720, "height": 400})
            worksheet.insert_chart("G2", chart)

            if history is not None and not history.empty:
                history.to_excel(writer, sheet_name="History", index=False)
                ws_history = writer.sheets["History"]
                for col_num, value in enumerate(history.columns):
                    ws_history.write(0, col_num, value, header_fmt)
                ws_history.set_column("A:A", 14, date_fmt)
                ws_history.set_column("B:Z", 14, decimal_fmt)

        logger.info(f"Exported forecast to: {filepath}")
        return filepath


def save_occupancy_csv(
    occupancy_df: pd.DataFrame,
    output_dir: Path = None,
    filename: str = "space_usage.csv"
) -> Path:
    """
    CSV export for the occupancy history.

    Returns:
        Path to exported file.
    """
    output_dir = Path(output_dir) if output_dir else RESULTS_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    filepath = output_dir / filename
    occupancy_df.to_csv(filepath, index=False)

    logger.info(f"Exported occupancy CSV to: {filepath}")
    return filepath


def save_forecast_csv(
    result: ForecastResult,
    output_dir: Path = None,
    filename: str = "space_forecast_arima.csv"
) -> Path:
    """
    CSV export for a forecast (date, forecast, lower_bound, upper_bound, method).

    Returns:
        Path to exported file.
    """
    output_dir = Path(output_dir) if output_dir else RESULTS_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    forecast_df = result.to_dataframe()
    forecast_df["method"] = result.method

    filepath = output_dir / filename
    forecast_df.to_csv(filepath, index=False, date_format="%Y-%m-%d")

    logger.info(f"Exported forecast CSV to: {filepath}")
    return filepath


def build_forecast_figure(
    history: pd.DataFrame,
    result: ForecastResult,
    title: str = None
) -> go.Figure:
    """
    Plot history, forecast and (when present) the 95% band.

    Args:
        history: Occupancy frame with date and occupancy columns.
        result: Forecast to plot.
        title: Chart title; defaults to one naming the method.

    Returns:
        Plotly figure.
    """
    forecast_df = result.to_dataframe()
    last_date = pd.to_datetime(history["date"]).max()

    fig = go.Figure()

    if result.has_confidence_band:
        fig.add_trace(go.Scatter(
            x=forecast_df["date"], y=forecast_df["upper_bound"],
            mode="lines",
            line=dict(width=0),
            showlegend=False,
            hoverinfo="skip"
        ))
        fig.add_trace(go.Scatter(
            x=forecast_df["date"], y=forecast_df["lower_bound"],
            name="95% Confidence",
            mode="lines",
            line=dict(width=0),
            fill="tonexty",
            fillcolor="rgba(128, 128, 128, 0.2)"
        ))

    fig.add_trace(go.Scatter(
        x=history["date"], y=history["occupancy"],
        name="Historical Occupancy",
        mode="lines",
        line=dict(color="#667eea", width=2)
    ))

    if "rolling_avg" in history.columns:
        fig.add_trace(go.Scatter(
            x=history["date"], y=history["rolling_avg"],
            name="Rolling Avg",
            mode="lines",
            line=dict(color="#10b981", width=1, dash="dot")
        ))

    fig.add_trace(go.Scatter(
        x=forecast_df["date"], y=forecast_df["forecast"],
        name=f"{result.method} Forecast",
        mode="lines+markers",
        line=dict(color="#f59e0b", width=2, dash="dash")
    ))

    fig.add_shape(
        type="line",
        x0=last_date, x1=last_date, y0=0, y1=1,
        xref="x", yref="paper",
        line=dict(color="gray", dash="dot")
    )

    fig.update_layout(
        title=title or f"Warehouse Forecast ({result.method})",
        xaxis_title="Date",
        yaxis_title="Occupancy",
        hovermode="x unified",
        template="plotly_white"
    )

    return fig


def save_forecast_chart(
    history: pd.DataFrame,
    result: ForecastResult,
    output_dir: Path = None,
    filename: str = "space_forecast_arima.html"
) -> Path:
    """
    Write the forecast chart to disk.

    HTML is written directly; image formats need the kaleido engine.
    """
    output_dir = Path(output_dir) if output_dir else RESULTS_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    suffix = Path(filename).suffix.lower().lstrip(".")
    if suffix not in CHART_FORMATS:
        raise ExportFormatError(suffix, CHART_FORMATS)

    fig = build_forecast_figure(history, result)
    filepath = output_dir / filename
    if suffix == "html":
        fig.write_html(str(filepath), include_plotlyjs="cdn")
    else:
        fig.write_image(str(filepath))

    logger.info(f"Saved forecast chart to: {filepath}")
    return filepath
