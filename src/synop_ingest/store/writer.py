"""Batched writes of time-series points.

Points are accumulated into batches of ``batch_size`` and each full batch is
flushed to a :class:`PointSink`. The final partial batch is flushed when the
writer is closed. Batches already flushed stay written if a later flush
fails; there is no transaction across batches.
"""

import logging
from typing import Callable, Iterable, Mapping, Protocol
from urllib.parse import urlparse

import requests
from influxdb import InfluxDBClient
from influxdb.exceptions import InfluxDBClientError, InfluxDBServerError

from synop_ingest.config.settings import StoreSettings
from synop_ingest.data.measure import Measure
from synop_ingest.data.station import Station
from synop_ingest.exceptions import WriteFailure
from synop_ingest.store.points import Point, build_point

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5000


class PointSink(Protocol):
    """A store that accepts one batch of points at a time."""

    def write(self, points: list[Point]) -> None: ...


def client_options(settings: StoreSettings) -> dict:
    """Keyword arguments for :class:`InfluxDBClient` derived from the store URL.

    Example:
        >>> options = client_options(StoreSettings(url="https://influx.example:8087/db"))
        >>> options["host"], options["port"], options["ssl"], options["path"]
        ('influx.example', 8087, True, '/db')
    """
    if not settings.url:
        raise ValueError("store url is not configured")
    parsed = urlparse(settings.url)
    if not parsed.hostname:
        raise ValueError(f"store url has no host: {settings.url!r}")
    options = {
        "host": parsed.hostname,
        "port": parsed.port or 8086,
        "ssl": parsed.scheme == "https",
        "verify_ssl": parsed.scheme == "https",
        "path": parsed.path.rstrip("/"),
        "database": settings.database,
        "timeout": settings.timeout_seconds,
        # a single attempt per batch
        "retries": 1,
    }
    if settings.user:
        options["username"] = settings.user
        options["password"] = settings.password or ""
    return options


class InfluxSink:
    """Writes batches to an InfluxDB 1.x server through :class:`InfluxDBClient`.

    Args:
        settings: Store settings; ``url`` must be set
        client: Client to use instead of one built from ``settings``
    """

    def __init__(self, settings: StoreSettings, client: InfluxDBClient | None = None) -> None:
        if client is None:
            client = InfluxDBClient(**client_options(settings))
        self.settings = settings
        self.client = client

    def write(self, points: list[Point]) -> None:
        """Send one batch with second precision.

        Raises:
            WriteFailure: If the request fails or the store rejects the batch
        """
        try:
            self.client.write_points(
                [point.to_dict() for point in points],
                time_precision="s",
                database=self.settings.database,
            )
        except (InfluxDBClientError, InfluxDBServerError) as e:
            raise WriteFailure(len(points), e) from e
        except requests.exceptions.RequestException as e:
            raise WriteFailure(len(points), e) from e
        logger.debug(f"Wrote {len(points)} points to {self.settings.database}")

    def close(self) -> None:
        self.client.close()


class BatchWriter:
    """Accumulates points and flushes them to a sink in bounded batches.

    Usage:
        with BatchWriter(sink) as writer:
            for point in points:
                writer.add(point)
    """

    def __init__(
        self,
        sink: PointSink,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_flush: Callable[[int], None] | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.sink = sink
        self.batch_size = batch_size
        self.on_flush = on_flush
        self.batch: list[Point] = []
        self.written = 0
        self.flushes = 0

    def add(self, point: Point) -> None:
        self.batch.append(point)
        if len(self.batch) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        """Write the pending batch, if any, and start a new one.

        Raises:
            WriteFailure: If the sink rejects the batch
        """
        if not self.batch:
            return
        batch, self.batch = self.batch, []
        self.sink.write(batch)
        self.written += len(batch)
        self.flushes += 1
        logger.info(f"Flushed batch {self.flushes} ({len(batch)} points, {self.written} total)")
        if self.on_flush is not None:
            self.on_flush(len(batch))

    def close(self) -> None:
        self.flush()

    def __enter__(self) -> "BatchWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # pending points are dropped when the run failed
        if exc_type is None:
            self.close()


def ingest_measures(
    measures: Iterable[Measure],
    stations: Mapping[str, Station],
    sink: PointSink,
    measurement: str,
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_flush: Callable[[int], None] | None = None,
) -> int:
    """Convert measures to points and write them in batches.

    Args:
        measures: Decoded measures
        stations: Stations keyed by identifier
        sink: Destination store
        measurement: Series name of the points
        batch_size: Points per flush
        on_flush: Called with the size of every flushed batch

    Returns:
        Number of points written

    Raises:
        PointConstructionError: If a measure cannot be converted
        WriteFailure: If a batch is rejected
    """
    with BatchWriter(sink, batch_size=batch_size, on_flush=on_flush) as writer:
        for measure in measures:
            writer.add(build_point(measure, stations, measurement))
    logger.info(f"Ingested {writer.written} points in {writer.flushes} batches")
    return writer.written
