"""Time-series points built from SYNOP measures.

Points are validated here and handed to the InfluxDB client as JSON points;
rendering to line protocol is left to :mod:`influxdb.line_protocol`.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from synop_ingest.data.measure import Measure
from synop_ingest.data.station import Station
from synop_ingest.exceptions import PointConstructionError

logger = logging.getLogger(__name__)

STATION_TAG = "station_id"

FieldValue = bool | int | float | str


@dataclass(frozen=True)
class Point:
    """A single time-series point: series name, tags, fields and a timestamp."""

    measurement: str
    tags: Mapping[str, str]
    fields: Mapping[str, FieldValue]
    time: datetime

    def to_dict(self) -> dict[str, Any]:
        """JSON point as accepted by ``InfluxDBClient.write_points``.

        The time is given in epoch seconds, matching a ``time_precision`` of ``"s"``.
        """
        return {
            "measurement": self.measurement,
            "tags": dict(self.tags),
            "fields": dict(self.fields),
            "time": int(self.time.timestamp()),
        }


def new_point(
    measurement: str,
    tags: Mapping[str, str],
    fields: Mapping[str, Any],
    time: datetime,
) -> Point:
    """Validate and build a :class:`Point`.

    Raises:
        PointConstructionError: On an empty series name, no fields, or a field
            value that is not a finite number, a bool or a string
    """
    station_id = tags.get(STATION_TAG, "")
    if not measurement:
        raise PointConstructionError(station_id, "empty measurement name")
    if not fields:
        raise PointConstructionError(station_id, "point has no fields")
    for key, value in fields.items():
        if not key:
            raise PointConstructionError(station_id, "empty field name")
        if not isinstance(value, (bool, int, float, str)):
            raise PointConstructionError(
                station_id, f"field {key!r} has unsupported type {type(value).__name__}"
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise PointConstructionError(station_id, f"field {key!r} is not finite: {value}")
    for key, value in tags.items():
        if not key or not value:
            raise PointConstructionError(station_id, f"empty tag {key!r}={value!r}")
    return Point(measurement=measurement, tags=dict(tags), fields=dict(fields), time=time)


def build_point(measure: Measure, stations: Mapping[str, Station], measurement: str) -> Point:
    """Convert a measure, joined with its station, into a point.

    Fields are the station position plus every measurement present on the
    measure; absent measurements are left out of the point entirely.

    Raises:
        PointConstructionError: If the station is unknown or a field is invalid
    """
    station = stations.get(measure.station_id)
    if station is None:
        raise PointConstructionError(measure.station_id, "unknown station")

    fields: dict[str, Any] = {
        "longitude": station.longitude,
        "latitude": station.latitude,
        "altitude": station.altitude,
    }
    fields.update(measure.present_fields())
    return new_point(measurement, {STATION_TAG: measure.station_id}, fields, measure.date)
