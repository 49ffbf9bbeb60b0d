"""SYNOP measure mapping.

Column meanings follow Météo-France's SYNOP parameter documentation
(doc_parametres_synop_168.pdf); code tables are those of WMO-No. 306.
Field names are English so they can be used directly as time-series fields.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO, Literal, NamedTuple

from synop_ingest.data.decoder import CodeValidators, DecodeContext
from synop_ingest.data.table import Row, parse_table
from synop_ingest.exceptions import FieldDecodeError

logger = logging.getLogger(__name__)

STATION_COLUMN = "numer_sta"
DATE_COLUMN = "date"

ColumnKind = Literal["int", "float", "code", "string"]


class Column(NamedTuple):
    """How one optional source column maps onto a :class:`Measure` attribute."""

    attr: str
    name: str
    kind: ColumnKind
    code_table: str | None = None


@dataclass(frozen=True)
class Measure:
    """One SYNOP observation of a station. ``None`` means not measured."""

    station_id: str
    date: datetime
    sea_pressure: int | None = None  # Pa
    pressure_variation: int | None = None  # Pa
    barometric_trend: int | None = None
    wind_direction: int | None = None  # degrees, 10 min mean
    wind_speed: float | None = None  # m/s, 10 min mean
    temperature: float | None = None  # K
    dew_point: float | None = None  # K
    humidity: int | None = None  # %
    horizontal_visibility: float | None = None  # m
    present_weather: int | None = None
    past_weather_1: int | None = None
    past_weather_2: int | None = None
    total_cloud_cover: float | None = None  # %
    low_cloud_cover: int | None = None  # octa
    low_cloud_height: int | None = None  # m
    low_cloud_type: int | None = None
    middle_cloud_type: int | None = None
    high_cloud_type: int | None = None
    station_pressure: int | None = None  # Pa
    barometric_level: int | None = None  # Pa
    geopotential: int | None = None  # m2/s2
    pressure_variation_24h: int | None = None  # Pa
    min_temperature_12h: float | None = None  # K
    min_temperature_24h: float | None = None  # K
    max_temperature_12h: float | None = None  # K
    max_temperature_24h: float | None = None  # K
    min_ground_temperature_12h: float | None = None  # K
    wet_bulb_method: int | None = None
    wet_bulb_temperature: float | None = None  # K
    gust_10min: float | None = None  # m/s
    gust_over_period: float | None = None  # m/s
    gust_period: float | None = None  # min
    ground_state: int | None = None
    snow_height: float | None = None  # m
    fresh_snow_height: float | None = None  # m
    fresh_snow_period: float | None = None  # 1/10 h
    precipitation_1h: float | None = None  # mm
    precipitation_3h: float | None = None  # mm
    precipitation_6h: float | None = None  # mm
    precipitation_12h: float | None = None  # mm
    precipitation_24h: float | None = None  # mm
    special_phenomenon_1: str | None = None
    special_phenomenon_2: str | None = None
    special_phenomenon_3: str | None = None
    special_phenomenon_4: str | None = None
    cloud_cover_1: int | None = None  # octa
    cloud_cover_2: int | None = None
    cloud_cover_3: int | None = None
    cloud_cover_4: int | None = None
    cloud_type_1: int | None = None
    cloud_type_2: int | None = None
    cloud_type_3: int | None = None
    cloud_type_4: int | None = None
    cloud_base_height_1: int | None = None  # m
    cloud_base_height_2: int | None = None
    cloud_base_height_3: int | None = None
    cloud_base_height_4: int | None = None

    def present_fields(self) -> dict[str, Any]:
        """Optional measurements that have a value, in column order."""
        values = {}
        for column in MEASURE_COLUMNS:
            value = getattr(self, column.attr)
            if value is not None:
                values[column.attr] = value
        return values


# Optional columns of synop.*.csv, in file order
MEASURE_COLUMNS: tuple[Column, ...] = (
    Column("sea_pressure", "pmer", "int"),
    Column("pressure_variation", "tend", "int"),
    Column("barometric_trend", "cod_tend", "code", "0200"),
    Column("wind_direction", "dd", "int"),
    Column("wind_speed", "ff", "float"),
    Column("temperature", "t", "float"),
    Column("dew_point", "td", "float"),
    Column("humidity", "u", "int"),
    Column("horizontal_visibility", "vv", "float"),
    Column("present_weather", "ww", "int"),
    Column("past_weather_1", "w1", "int"),
    Column("past_weather_2", "w2", "int"),
    Column("total_cloud_cover", "n", "float"),
    Column("low_cloud_cover", "nbas", "int"),
    Column("low_cloud_height", "hbas", "int"),
    Column("low_cloud_type", "cl", "code", "0513"),
    Column("middle_cloud_type", "cm", "code", "0515"),
    Column("high_cloud_type", "ch", "code", "0509"),
    Column("station_pressure", "pres", "int"),
    Column("barometric_level", "niv_bar", "int"),
    Column("geopotential", "geop", "int"),
    Column("pressure_variation_24h", "tend24", "int"),
    Column("min_temperature_12h", "tn12", "float"),
    Column("min_temperature_24h", "tn24", "float"),
    Column("max_temperature_12h", "tx12", "float"),
    Column("max_temperature_24h", "tx24", "float"),
    Column("min_ground_temperature_12h", "tminsol", "float"),
    Column("wet_bulb_method", "sw", "int"),
    Column("wet_bulb_temperature", "tw", "float"),
    Column("gust_10min", "raf10", "float"),
    Column("gust_over_period", "rafper", "float"),
    Column("gust_period", "per", "float"),
    Column("ground_state", "etat_sol", "code", "0901"),
    Column("snow_height", "ht_neige", "float"),
    Column("fresh_snow_height", "ssfrai", "float"),
    Column("fresh_snow_period", "perssfrai", "float"),
    Column("precipitation_1h", "rr1", "float"),
    Column("precipitation_3h", "rr3", "float"),
    Column("precipitation_6h", "rr6", "float"),
    Column("precipitation_12h", "rr12", "float"),
    Column("precipitation_24h", "rr24", "float"),
    Column("special_phenomenon_1", "phenspe1", "string"),
    Column("special_phenomenon_2", "phenspe2", "string"),
    Column("special_phenomenon_3", "phenspe3", "string"),
    Column("special_phenomenon_4", "phenspe4", "string"),
    Column("cloud_cover_1", "nnuage1", "int"),
    Column("cloud_cover_2", "nnuage2", "int"),
    Column("cloud_cover_3", "nnuage3", "int"),
    Column("cloud_cover_4", "nnuage4", "int"),
    Column("cloud_type_1", "ctype1", "code", "0500"),
    Column("cloud_type_2", "ctype2", "code", "0500"),
    Column("cloud_type_3", "ctype3", "code", "0500"),
    Column("cloud_type_4", "ctype4", "code", "0500"),
    Column("cloud_base_height_1", "hnuage1", "int"),
    Column("cloud_base_height_2", "hnuage2", "int"),
    Column("cloud_base_height_3", "hnuage3", "int"),
    Column("cloud_base_height_4", "hnuage4", "int"),
)

MEASURE_FIELD_NAMES = tuple(column.attr for column in MEASURE_COLUMNS)


def _decode_column(ctx: DecodeContext, column: Column, raw: str | None) -> Any:
    if column.kind == "float":
        return ctx.float_(column.name, raw)
    if column.kind == "int":
        return ctx.int_(column.name, raw)
    if column.kind == "code":
        return ctx.code(column.name, raw, column.code_table or "")
    return ctx.string(column.name, raw)


def decode_measure(row: Row, validators: CodeValidators | None = None) -> Measure:
    """Build a :class:`Measure` from one row of a SYNOP measure file.

    Every column is visited even after a failure; the first failure is then
    raised and no Measure is produced for the row.

    Raises:
        FieldDecodeError: If any field cannot be decoded
    """
    ctx = DecodeContext(validators)
    station_id = row.get(STATION_COLUMN)
    if station_id is None:
        ctx.fail(STATION_COLUMN, None, KeyError(f"missing column {STATION_COLUMN!r}"))
    date = ctx.timestamp(DATE_COLUMN, row.get(DATE_COLUMN))
    values = {column.attr: _decode_column(ctx, column, row.get(column.name)) for column in MEASURE_COLUMNS}
    ctx.raise_for_error()
    return Measure(station_id=station_id, date=date, **values)


def parse_measures(stream: BinaryIO, validators: CodeValidators | None = None) -> list[Measure]:
    """Parse a SYNOP measure file (hourly ``synop.YYYYMMDDHH.csv`` or monthly archive).

    One bad field invalidates its record and aborts the whole file.

    Raises:
        FieldDecodeError: If a row has an undecodable field (row index attached)
        MalformedRecord: If a row has the wrong number of columns
        TableReadError: If the stream cannot be read
    """
    table = parse_table(stream)
    measures = []
    for index, row in enumerate(table.rows, start=1):
        try:
            measures.append(decode_measure(row, validators))
        except FieldDecodeError as e:
            raise e.at_row(index) from e.cause
    logger.debug(f"Parsed {len(measures)} measures")
    return measures
