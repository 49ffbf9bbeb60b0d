"""SYNOP station list mapping."""

import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterable

from synop_ingest.data.decoder import MISSING, DecodeContext
from synop_ingest.data.table import Row, parse_table
from synop_ingest.exceptions import FieldDecodeError

logger = logging.getLogger(__name__)

# Columns of postesSynop.csv
ID_COLUMN = "ID"
NAME_COLUMN = "Nom"
LATITUDE_COLUMN = "Latitude"
LONGITUDE_COLUMN = "Longitude"
ALTITUDE_COLUMN = "Altitude"


@dataclass(frozen=True)
class Station:
    """A SYNOP station as published in the station list."""

    id: str
    name: str
    latitude: float
    longitude: float
    altitude: float


def _required_float(ctx: DecodeContext, row: Row, column: str) -> float:
    raw = row.get(column)
    value = ctx.float_(column, raw)
    if value is None and raw == MISSING:
        ctx.fail(column, raw, ValueError(f"{column} is mandatory"))
    return value  # type: ignore[return-value]


def _required_string(ctx: DecodeContext, row: Row, column: str) -> str:
    raw = row.get(column)
    if raw is None:
        ctx.fail(column, None, KeyError(f"missing column {column!r}"))
    return raw  # type: ignore[return-value]


def decode_station(row: Row) -> Station:
    """Build a :class:`Station` from one row of the station list.

    Raises:
        FieldDecodeError: If a column is missing or a coordinate is not a number
    """
    ctx = DecodeContext()
    station_id = _required_string(ctx, row, ID_COLUMN)
    name = _required_string(ctx, row, NAME_COLUMN)
    latitude = _required_float(ctx, row, LATITUDE_COLUMN)
    longitude = _required_float(ctx, row, LONGITUDE_COLUMN)
    altitude = _required_float(ctx, row, ALTITUDE_COLUMN)
    ctx.raise_for_error()
    return Station(
        id=station_id,
        name=name,
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
    )


def parse_stations(stream: BinaryIO) -> list[Station]:
    """Parse a station list formatted like ``postesSynop.csv``.

    Any bad row aborts the whole parse; no partial list is returned.

    Raises:
        FieldDecodeError: If a row has an invalid coordinate (row index attached)
        MalformedRecord: If a row has the wrong number of columns
        TableReadError: If the stream cannot be read
    """
    table = parse_table(stream)
    stations = []
    for index, row in enumerate(table.rows, start=1):
        try:
            stations.append(decode_station(row))
        except FieldDecodeError as e:
            raise e.at_row(index) from e.cause
    logger.info(f"Parsed {len(stations)} stations")
    return stations


def stations_by_id(stations: Iterable[Station]) -> dict[str, Station]:
    """Index stations by identifier; later duplicates win."""
    return {station.id: station for station in stations}
