"""Shared fixtures for SYNOP ingestion tests."""

import gzip
from datetime import datetime, timezone

import pytest

from synop_ingest.config.settings import FetchSettings
from synop_ingest.data.measure import MEASURE_COLUMNS, Measure
from synop_ingest.data.station import Station

STATION_CSV = (
    "ID;Nom;Latitude;Longitude;Altitude\n"
    "07005;ABBEVILLE;50.136000;1.834000;69\n"
    "07015;LILLE-LESQUIN;50.570000;3.097500;47\n"
    "89642;DUMONT D'URVILLE;-66.663167;140.001000;43\n"
)

MEASURE_HEADER = ["numer_sta", "date"] + [column.name for column in MEASURE_COLUMNS]


def measure_line(station: str, date: str, **values: str) -> str:
    """One measure row; columns not given in ``values`` are ``mq``."""
    cells = [station, date] + [values.get(column.name, "mq") for column in MEASURE_COLUMNS]
    return ";".join(cells)


def measure_csv(*lines: str) -> str:
    return "\n".join([";".join(MEASURE_HEADER), *lines]) + "\n"


class FakeSource:
    """Serves canned bytes per URL suffix and records every fetch."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = files or {}
        self.calls: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        for suffix, content in self.files.items():
            if url.endswith(suffix):
                return content
        raise AssertionError(f"unexpected fetch of {url}")


class RecordingSink:
    """Keeps every batch it is asked to write."""

    def __init__(self) -> None:
        self.batches: list[list] = []
        self.closed = False

    def write(self, points: list) -> None:
        self.batches.append(list(points))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def station_bytes() -> bytes:
    return STATION_CSV.encode("utf-8")


@pytest.fixture
def fetch_settings(tmp_path) -> FetchSettings:
    return FetchSettings(cache_dir=tmp_path / "cache")


@pytest.fixture
def fake_source(station_bytes: bytes) -> FakeSource:
    """Station list, two monthly archives (gzip, as served) and one hourly file."""
    january = measure_csv(
        measure_line("07005", "20230101000000", t="280.450000", u="93"),
        measure_line("07015", "20230101000000", t="279.150000", ff="4.100000"),
    )
    february = measure_csv(
        measure_line("07005", "20230201000000", t="275.050000"),
    )
    march = measure_csv(
        measure_line("07005", "20230301000000", t="281.000000"),
    )
    hourly = measure_csv(
        measure_line("07005", "20230101060000", t="278.650000"),
    )
    return FakeSource(
        {
            "postesSynop.csv": station_bytes,
            "synop.202301.csv.gz": gzip.compress(january.encode("utf-8")),
            "synop.202302.csv.gz": gzip.compress(february.encode("utf-8")),
            "synop.202303.csv.gz": gzip.compress(march.encode("utf-8")),
            "synop.2023010106.csv": hourly.encode("utf-8"),
        }
    )


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def abbeville() -> Station:
    return Station(id="07005", name="ABBEVILLE", latitude=50.136, longitude=1.834, altitude=69.0)


@pytest.fixture
def sample_measure() -> Measure:
    return Measure(
        station_id="07005",
        date=datetime(2023, 1, 1, tzinfo=timezone.utc),
        temperature=280.45,
        humidity=93,
        wind_speed=0.0,
        special_phenomenon_1="1 2",
    )
