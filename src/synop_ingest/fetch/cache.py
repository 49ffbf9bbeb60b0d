"""Cached download-then-parse pipeline for SYNOP files.

Each resolved key (``stations``, ``YYYYMM`` or ``YYYYMMDDHH``) is stored once
under the cache directory as ``<key>.csv``. A file that is present is trusted
as complete: downloads are written to a temporary file in the same directory
and renamed into place, so an interrupted download never leaves a truncated
cache entry behind. Files are always parsed from the local copy.
"""

import logging
import os
import tempfile
from pathlib import Path

from synop_ingest.config.paths import STATIONS_KEY, ensure_cache_dir, get_cache_path
from synop_ingest.config.settings import FetchSettings
from synop_ingest.data.decoder import CodeValidators
from synop_ingest.data.measure import Measure, parse_measures
from synop_ingest.data.station import Station, parse_stations
from synop_ingest.exceptions import CacheWriteError, TableReadError
from synop_ingest.fetch.remote import RemoteSource, Source, hour_url, month_url, station_url
from synop_ingest.utils.parsing import iter_month_keys, parse_hour_key, parse_month_key

logger = logging.getLogger(__name__)


def write_atomic(path: Path, content: bytes) -> None:
    """Write ``content`` to ``path`` through a temporary file and a rename.

    Raises:
        CacheWriteError: If the file cannot be written
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".part")
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise CacheWriteError(f"Cannot write cache file {path}: {e}", path=str(path)) from e


class SynopCache:
    """Resolves keys to local files, downloading each one at most once.

    Args:
        settings: Fetch settings (base URL, cache directory, timeout)
        source: Where bytes come from; defaults to an HTTP :class:`RemoteSource`
        validators: Code validators handed to the measure mapper
    """

    def __init__(
        self,
        settings: FetchSettings | None = None,
        source: Source | None = None,
        validators: CodeValidators | None = None,
    ) -> None:
        self.settings = settings or FetchSettings()
        self.source = source or RemoteSource.from_settings(self.settings)
        self.validators = validators

    @property
    def cache_dir(self) -> Path:
        return Path(self.settings.cache_dir)

    def path_for(self, key: str) -> Path:
        return get_cache_path(self.cache_dir, key)

    def ensure(self, key: str, url: str) -> Path:
        """Return the cached file for ``key``, downloading ``url`` if absent.

        Raises:
            FetchFailure: If the download fails
            CacheWriteError: If the download cannot be stored
        """
        path = self.path_for(key)
        if path.exists():
            logger.debug(f"Cache hit for {key}: {path}")
            return path

        logger.info(f"Cache miss for {key}, downloading {url}")
        content = self.source.fetch(url)
        ensure_cache_dir(self.cache_dir)
        write_atomic(path, content)
        logger.info(f"Stored {len(content)} bytes in {path}")
        return path

    def _open(self, path: Path):
        try:
            return open(path, "rb")
        except OSError as e:
            raise TableReadError(f"Cannot open {path}: {e}", path=str(path)) from e

    def fetch_stations(self) -> list[Station]:
        """Station list, from the cache or the remote site."""
        path = self.ensure(STATIONS_KEY, station_url(self.settings))
        with self._open(path) as f:
            return parse_stations(f)

    def fetch_hour(self, key: str) -> list[Measure]:
        """Measures of one hourly snapshot (``YYYYMMDDHH``).

        Raises:
            InvalidDateFormat: If the key is malformed
        """
        parse_hour_key(key)
        path = self.ensure(key, hour_url(self.settings, key))
        with self._open(path) as f:
            return parse_measures(f, self.validators)

    def fetch_month(self, key: str) -> list[Measure]:
        """Measures of one monthly archive (``YYYYMM``).

        Raises:
            InvalidDateFormat: If the key is malformed
        """
        parse_month_key(key)
        path = self.ensure(key, month_url(self.settings, key))
        with self._open(path) as f:
            return parse_measures(f, self.validators)

    def fetch_range(self, start: str, end: str) -> list[Measure]:
        """Measures of every month in ``[start, end)``, in chronological order.

        The first failure aborts the whole range.

        Raises:
            InvalidDateFormat: If either key is malformed
        """
        keys = list(iter_month_keys(start, end))
        measures: list[Measure] = []
        for key in keys:
            monthly = self.fetch_month(key)
            logger.info(f"Decoded {len(monthly)} measures for {key}")
            measures.extend(monthly)
        return measures

    def fetch_measures(
        self,
        at: str | None = None,
        start: str | None = None,
        end: str | None = None,
    ) -> list[Measure]:
        """Measures for either a single hour (``at``) or a month range.

        Raises:
            ValueError: Unless exactly one of ``at`` or ``start``/``end`` is given
        """
        if at is not None:
            if start is not None or end is not None:
                raise ValueError("'at' is incompatible with 'start'/'end'")
            return self.fetch_hour(at)
        if start is None or end is None:
            raise ValueError("need either 'at' or both 'start' and 'end'")
        return self.fetch_range(start, end)
