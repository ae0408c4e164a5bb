"""Tests for shipment loading and occupancy aggregation."""
import pandas as pd
import pytest

from warehouse_forecast.data.loader import (
    DataLoader,
    add_rolling_average,
    compute_occupancy,
    load_occupancy,
)
from warehouse_forecast.utils.exceptions import DataLoadError, MissingDataError


@pytest.fixture
def small_shipment_files(tmp_path):
    incoming = pd.DataFrame({
        " Date ": ["2024-01-01", "2024-01-01", "2024-01-02", "2024-01-03"],
        "Volume": [10, 5, 20, 0],
    })
    outgoing = pd.DataFrame({
        "timestamp": ["2024-01-02", "2024-01-04"],
        "amount": [8, 40],
    })
    incoming_path = tmp_path / "in.csv"
    outgoing_path = tmp_path / "out.csv"
    incoming.to_csv(incoming_path, index=False)
    outgoing.to_csv(outgoing_path, index=False)
    return incoming_path, outgoing_path


def test_load_shipments_normalizes_columns(small_shipment_files):
    shipments = DataLoader().load_shipments(*small_shipment_files)

    assert list(shipments.columns) == ["date", "volume", "direction"]
    assert len(shipments) == 6
    assert set(shipments["direction"]) == {"incoming", "outgoing"}
    assert pd.api.types.is_datetime64_any_dtype(shipments["date"])


def test_compute_occupancy(small_shipment_files):
    shipments = DataLoader().load_shipments(*small_shipment_files)

    occupancy = compute_occupancy(shipments)

    assert occupancy["date"].dt.strftime("%Y-%m-%d").tolist() == [
        "2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"
    ]
    assert occupancy["incoming"].tolist() == [15.0, 20.0, 0.0, 0.0]
    assert occupancy["outgoing"].tolist() == [0.0, 8.0, 0.0, 40.0]
    assert occupancy["cumulative_incoming"].tolist() == [15.0, 35.0, 35.0, 35.0]
    assert occupancy["cumulative_outgoing"].tolist() == [0.0, 8.0, 8.0, 48.0]
    # Outflow beyond stock is floored at zero
    assert occupancy["occupancy"].tolist() == [15.0, 27.0, 27.0, 0.0]


def test_rolling_average_uses_partial_windows(small_shipment_files):
    occupancy = compute_occupancy(DataLoader().load_shipments(*small_shipment_files))

    with_avg = add_rolling_average(occupancy, window=3)

    assert with_avg["rolling_avg"].tolist() == pytest.approx([15.0, 21.0, 23.0, 18.0])
    assert "rolling_avg" not in occupancy.columns


def test_missing_volume_counts_records(tmp_path):
    pd.DataFrame({"date": ["2024-01-01", "2024-01-01", "2024-01-02"]}).to_csv(tmp_path / "in.csv", index=False)
    pd.DataFrame({"date": ["2024-01-02"]}).to_csv(tmp_path / "out.csv", index=False)

    occupancy = compute_occupancy(DataLoader(tmp_path).load_shipments("in.csv", "out.csv"))

    assert occupancy["occupancy"].tolist() == [2.0, 2.0]


def test_missing_only_one_direction(tmp_path):
    pd.DataFrame({"date": ["2024-01-01"], "volume": [3]}).to_csv(tmp_path / "in.csv", index=False)
    pd.DataFrame({"date": [], "volume": []}).to_csv(tmp_path / "out.csv", index=False)

    occupancy = compute_occupancy(DataLoader(tmp_path).load_shipments("in.csv", "out.csv"))

    assert occupancy["outgoing"].tolist() == [0.0]
    assert occupancy["occupancy"].tolist() == [3.0]


def test_missing_date_column(tmp_path):
    pd.DataFrame({"volume": [1, 2]}).to_csv(tmp_path / "in.csv", index=False)
    pd.DataFrame({"date": ["2024-01-01"], "volume": [1]}).to_csv(tmp_path / "out.csv", index=False)

    with pytest.raises(MissingDataError) as exc_info:
        DataLoader(tmp_path).load_shipments("in.csv", "out.csv")

    assert exc_info.value.error_code == "DATA_MISSING"


def test_missing_file(tmp_path):
    with pytest.raises(DataLoadError):
        DataLoader(tmp_path).load_shipments("nope.csv", "also_nope.csv")


def test_unsupported_format(tmp_path):
    (tmp_path / "in.json").write_text("{}")
    (tmp_path / "out.csv").write_text("date,volume\n2024-01-01,1\n")

    with pytest.raises(DataLoadError):
        DataLoader(tmp_path).load_shipments("in.json", "out.csv")


def test_load_occupancy_end_to_end(shipment_files):
    occupancy = load_occupancy(*shipment_files)

    assert len(occupancy) == 10
    assert occupancy["occupancy"].iloc[0] == 30.0
    assert occupancy["occupancy"].is_monotonic_increasing
    assert "rolling_avg" in occupancy.columns


def test_excel_shipment_files(tmp_path):
    pd.DataFrame({"Date": pd.to_datetime(["2024-02-01", "2024-02-02"]), "Quantity": [12, 8]}).to_excel(
        tmp_path / "in.xlsx", index=False, engine="xlsxwriter"
    )
    pd.DataFrame({"Date": pd.to_datetime(["2024-02-02"]), "Quantity": [5]}).to_excel(
        tmp_path / "out.xlsx", index=False, engine="xlsxwriter"
    )

    occupancy = compute_occupancy(DataLoader(tmp_path).load_shipments("in.xlsx", "out.xlsx"))

    assert occupancy["occupancy"].tolist() == [12.0, 15.0]
