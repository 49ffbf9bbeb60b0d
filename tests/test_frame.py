"""Tests for the polars views of measures."""

from datetime import datetime, timezone

import polars as pl
import pytest

from synop_ingest.data.frame import (
    MEASURE_SCHEMA,
    compute_completeness,
    measures_to_frame,
    stations_to_frame,
    summarize_by_station,
)
from synop_ingest.data.measure import Measure
from synop_ingest.data.station import Station


@pytest.fixture
def measures() -> list[Measure]:
    return [
        Measure(station_id="07005", date=datetime(2023, 1, 1, 0, tzinfo=timezone.utc), temperature=280.0, humidity=90),
        Measure(station_id="07005", date=datetime(2023, 1, 1, 3, tzinfo=timezone.utc), temperature=282.0),
        Measure(station_id="07015", date=datetime(2023, 1, 1, 0, tzinfo=timezone.utc), wind_speed=4.1),
    ]


def test_measures_to_frame(measures):
    df = measures_to_frame(measures)

    assert df.shape == (3, len(MEASURE_SCHEMA))
    assert df["station_id"].to_list() == ["07005", "07005", "07015"]
    assert df["temperature"].to_list() == [280.0, 282.0, None]
    assert df.schema["humidity"] == pl.Int64
    assert df.schema["special_phenomenon_1"] == pl.Utf8


def test_empty_frame_keeps_schema():
    df = measures_to_frame([])

    assert len(df) == 0
    assert df.columns == list(MEASURE_SCHEMA)


def test_stations_to_frame(abbeville: Station):
    df = stations_to_frame([abbeville])

    assert df.row(0, named=True) == {
        "id": "07005",
        "name": "ABBEVILLE",
        "latitude": 50.136,
        "longitude": 1.834,
        "altitude": 69.0,
    }


def test_compute_completeness(measures):
    df = measures_to_frame(measures)

    assert compute_completeness(df, "temperature") == pytest.approx(200 / 3)
    assert compute_completeness(df, "dew_point") == 0.0
    assert compute_completeness(df, "not_a_column") == 0.0
    assert compute_completeness(measures_to_frame([]), "temperature") == 0.0


def test_summarize_by_station(measures):
    summary = summarize_by_station(measures_to_frame(measures))

    assert summary["station_id"].to_list() == ["07005", "07015"]
    assert summary["observations"].to_list() == [2, 1]
    assert summary["mean_temperature"].to_list() == [281.0, None]
    assert summary["temperature_completeness_pct"].to_list() == [100.0, 0.0]
    assert summary["humidity_completeness_pct"].to_list() == [50.0, 0.0]
    assert summary["wind_speed_completeness_pct"].to_list() == [0.0, 100.0]

    first = summary.row(0, named=True)
    assert first["first"] == datetime(2023, 1, 1, 0, tzinfo=timezone.utc)
    assert first["last"] == datetime(2023, 1, 1, 3, tzinfo=timezone.utc)


def test_summarize_adds_station_names(measures, abbeville: Station):
    summary = summarize_by_station(measures_to_frame(measures), stations_to_frame([abbeville]))

    assert summary["name"].to_list() == ["ABBEVILLE", None]
