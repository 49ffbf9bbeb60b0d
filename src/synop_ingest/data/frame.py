"""Polars views of decoded SYNOP measures."""

import logging
from dataclasses import asdict
from typing import Iterable

import polars as pl

from synop_ingest.data.measure import MEASURE_COLUMNS, Measure
from synop_ingest.data.station import Station

logger = logging.getLogger(__name__)

_KIND_DTYPES = {
    "int": pl.Int64,
    "code": pl.Int64,
    "float": pl.Float64,
    "string": pl.Utf8,
}

MEASURE_SCHEMA: dict[str, pl.DataType] = {
    "station_id": pl.Utf8,
    "date": pl.Datetime(time_unit="us", time_zone="UTC"),
    **{column.attr: _KIND_DTYPES[column.kind] for column in MEASURE_COLUMNS},
}

# Variables reported by the summary, with their completeness
SUMMARY_VARIABLES = ["temperature", "humidity", "wind_speed", "sea_pressure", "precipitation_1h"]


def measures_to_frame(measures: Iterable[Measure]) -> pl.DataFrame:
    """Convert measures into a DataFrame with one column per field.

    Absent values become nulls; the schema is fixed so an empty input still
    yields every column.
    """
    rows = [asdict(measure) for measure in measures]
    return pl.DataFrame(rows, schema=MEASURE_SCHEMA)


def stations_to_frame(stations: Iterable[Station]) -> pl.DataFrame:
    """Convert stations into a DataFrame."""
    return pl.DataFrame(
        [asdict(station) for station in stations],
        schema={
            "id": pl.Utf8,
            "name": pl.Utf8,
            "latitude": pl.Float64,
            "longitude": pl.Float64,
            "altitude": pl.Float64,
        },
    )


def compute_completeness(df: pl.DataFrame, column: str) -> float:
    """Percentage of rows where ``column`` has a value (0-100)."""
    if column not in df.columns or len(df) == 0:
        return 0.0
    return (df[column].is_not_null().sum() / len(df)) * 100


def summarize_by_station(
    measures: pl.DataFrame,
    stations: pl.DataFrame | None = None,
) -> pl.DataFrame:
    """Per-station observation counts, time span and variable completeness.

    Args:
        measures: Frame from :func:`measures_to_frame`
        stations: Optional frame from :func:`stations_to_frame` to add names

    Returns:
        One row per station, sorted by station id
    """
    aggregations = [
        pl.len().alias("observations"),
        pl.col("date").min().alias("first"),
        pl.col("date").max().alias("last"),
        pl.col("temperature").mean().alias("mean_temperature"),
    ]
    for variable in SUMMARY_VARIABLES:
        aggregations.append(
            (pl.col(variable).is_not_null().mean() * 100).alias(f"{variable}_completeness_pct")
        )

    summary = measures.group_by("station_id").agg(aggregations).sort("station_id")

    if stations is not None:
        names = stations.select(pl.col("id").alias("station_id"), "name")
        summary = summary.join(names, on="station_id", how="left").sort("station_id")

    logger.debug(f"Summarized {len(measures)} measures over {len(summary)} stations")
    return summary
