"""Shared fixtures for the forecasting test suite."""
from datetime import date

import pandas as pd
import pytest


SCENARIO_VALUES = [100, 102, 101, 105, 107, 106, 110, 112]


def build_series(values, start="2024-01-01") -> pd.DataFrame:
    """Daily occupancy frame starting at ``start``."""
    return pd.DataFrame({
        "date": pd.date_range(start=start, periods=len(values), freq="D"),
        "occupancy": [float(v) for v in values],
    })


@pytest.fixture
def make_series():
    return build_series


@pytest.fixture
def scenario_series() -> pd.DataFrame:
    return build_series(SCENARIO_VALUES)


@pytest.fixture
def last_scenario_date() -> date:
    return date(2024, 1, 8)


@pytest.fixture
def shipment_files(tmp_path):
    """Incoming/outgoing CSVs covering ten days with steadily growing stock."""
    days = pd.date_range("2024-03-01", periods=10, freq="D")
    incoming = pd.DataFrame({
        "Date": days.strftime("%Y-%m-%d"),
        "Volume": [50, 40, 60, 55, 45, 70, 65, 50, 60, 75],
    })
    outgoing = pd.DataFrame({
        "timestamp": days.strftime("%Y-%m-%d"),
        "Quantity": [20, 25, 30, 20, 35, 40, 30, 25, 30, 35],
    })

    incoming_path = tmp_path / "incoming_shipments.csv"
    outgoing_path = tmp_path / "outgoing_shipments.csv"
    incoming.to_csv(incoming_path, index=False)
    outgoing.to_csv(outgoing_path, index=False)
    return incoming_path, outgoing_path
