"""
Data loader for shipment CSV and Excel files.
Loads incoming and outgoing shipments and derives daily warehouse occupancy.
"""
import pandas as pd
import numpy as np
from pathlib import Path
from typing import List, Optional, Union
import logging

from warehouse_forecast.utils.config import DATA_RAW, DEFAULT_FORECAST_CONFIG
from warehouse_forecast.utils.exceptions import DataLoadError, MissingDataError

logger = logging.getLogger(__name__)

DATE_CANDIDATES = ["date", "timestamp", "datetime", "day"]
VOLUME_CANDIDATES = ["volume", "quantity", "amount", "count"]


class DataLoader:
    """
    Load shipment records and compute warehouse occupancy.

    Each shipment file needs a date column and, optionally, a volume column.
    Files without a volume column count one unit per record.
    """

    def __init__(self, data_dir: Path = None):
        """
        Initialize the data loader.

        Args:
            data_dir: Directory containing shipment files. Defaults to DATA_RAW.
        """
        self.data_dir = Path(data_dir) if data_dir else DATA_RAW

    def _resolve(self, filepath: Union[str, Path]) -> Path:
        path = Path(filepath)
        if not path.is_absolute() and not path.exists():
            path = self.data_dir / path
        return path

    def _read_file(self, filepath: Path) -> pd.DataFrame:
        """
        Read a CSV or Excel file.

        Args:
            filepath: Path to the file.

        Returns:
            DataFrame with normalized column names.
        """
        if not filepath.exists():
            raise DataLoadError(filepath, "File not found.")

        suffix = filepath.suffix.lower()

        try:
            if suffix == ".csv":
                df = pd.read_csv(filepath)
            elif suffix in [".xlsx", ".xls"]:
                df = pd.read_excel(filepath)
            else:
                raise DataLoadError(filepath, f"Unsupported file format: {suffix}")
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise DataLoadError(filepath, str(e)) from e

        # Normalize column names (lowercase, strip whitespace)
        df.columns = df.columns.str.lower().str.strip().str.replace(" ", "_")

        return df

    def _standardize_columns(self, df: pd.DataFrame, source: str) -> pd.DataFrame:
        """Rename date/volume columns to ``date`` and ``volume``."""
        df = df.copy()

        date_col = _find_column(df, DATE_CANDIDATES)
        if date_col is None:
            raise MissingDataError(f"date column in {source}", required_columns=DATE_CANDIDATES)
        df = df.rename(columns={date_col: "date"})

        volume_col = _find_column(df, VOLUME_CANDIDATES)
        if volume_col is not None:
            df = df.rename(columns={volume_col: "volume"})
            df["volume"] = pd.to_numeric(df["volume"], errors="coerce").fillna(0.0)
        else:
            logger.warning(f"No volume column found in {source}, using count of records")
            df["volume"] = 1.0

        df["date"] = pd.to_datetime(df["date"], errors="coerce").dt.normalize()
        null_count = df["date"].isnull().sum()
        if null_count > 0:
            logger.warning(f"Found {null_count} unparseable dates in {source}, will be dropped")
            df = df.dropna(subset=["date"])

        return df[["date", "volume"]]

    def load_shipments(
        self,
        incoming_file: Union[str, Path],
        outgoing_file: Union[str, Path]
    ) -> pd.DataFrame:
        """
        Load incoming and outgoing shipments into one frame.

        Args:
            incoming_file: File with incoming shipments.
            outgoing_file: File with outgoing shipments.

        Returns:
            DataFrame with columns date, volume, direction.
        """
        frames = []
        for direction, filepath in (("incoming", incoming_file), ("outgoing", outgoing_file)):
            path = self._resolve(filepath)
            logger.info(f"Loading {direction} shipments from: {path}")
            df = self._standardize_columns(self._read_file(path), path.name)
            df["direction"] = direction
            frames.append(df)

        shipments = pd.concat(frames, ignore_index=True)
        logger.info(f"Loaded {len(shipments)} shipment records")
        return shipments


def compute_occupancy(shipments: pd.DataFrame) -> pd.DataFrame:
    """
    Compute daily cumulative incoming, outgoing and occupancy.

    Args:
        shipments: DataFrame with date, volume, direction columns.

    Returns:
        DataFrame with date, incoming, outgoing, cumulative_incoming,
        cumulative_outgoing and occupancy columns, one row per date.
    """
    missing = [c for c in ["date", "volume", "direction"] if c not in shipments.columns]
    if missing:
        raise MissingDataError("shipments", required_columns=missing)

    daily = shipments.groupby(["date", "direction"])["volume"].sum().reset_index()
    wide = daily.pivot(index="date", columns="direction", values="volume").fillna(0.0)

    # Ensure we have both columns
    for direction in ["incoming", "outgoing"]:
        if direction not in wide.columns:
            wide[direction] = 0.0

    wide = wide[["incoming", "outgoing"]].sort_index().reset_index()
    wide.columns.name = None

    wide["cumulative_incoming"] = wide["incoming"].cumsum()
    wide["cumulative_outgoing"] = wide["outgoing"].cumsum()
    wide["occupancy"] = np.maximum(0.0, wide["cumulative_incoming"] - wide["cumulative_outgoing"])

    return wide


def add_rolling_average(
    df: pd.DataFrame,
    window: int = DEFAULT_FORECAST_CONFIG.rolling_window
) -> pd.DataFrame:
    """Add a trailing rolling average of occupancy (partial windows at the start)."""
    df = df.copy()
    df["rolling_avg"] = df["occupancy"].rolling(window=window, min_periods=1).mean()
    return df


def load_occupancy(
    incoming_file: Union[str, Path],
    outgoing_file: Union[str, Path],
    data_dir: Optional[Path] = None,
    window: int = DEFAULT_FORECAST_CONFIG.rolling_window
) -> pd.DataFrame:
    """Load shipments and return the occupancy frame with rolling average."""
    loader = DataLoader(data_dir)
    shipments = loader.load_shipments(incoming_file, outgoing_file)
    return add_rolling_average(compute_occupancy(shipments), window=window)


def _find_column(df: pd.DataFrame, candidates: List[str]) -> Optional[str]:
    """Find first matching column from candidates."""
    for col in candidates:
        if col in df.columns:
            return col
    return None
