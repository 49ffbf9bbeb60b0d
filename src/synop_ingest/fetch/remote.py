"""Retrieval of SYNOP files from Météo-France's open data site.

Files are fetched in a single request with a fixed timeout. Failures are not
retried: a timeout, connection error or HTTP error status surfaces as
:class:`FetchFailure` for that resource.
"""

import logging
from typing import Protocol
from urllib.parse import urljoin

import requests

from synop_ingest.config.settings import FetchSettings
from synop_ingest.exceptions import FetchFailure
from synop_ingest.utils.parsing import parse_hour_key, parse_month_key

logger = logging.getLogger(__name__)


class Source(Protocol):
    """Anything that turns a URL into bytes."""

    def fetch(self, url: str) -> bytes: ...


def station_url(settings: FetchSettings) -> str:
    """URL of the station list (postesSynop.csv)."""
    return urljoin(settings.base_url, settings.station_path)


def month_url(settings: FetchSettings, key: str) -> str:
    """URL of a monthly archive: ``Archive/synop.YYYYMM.csv.gz``."""
    parse_month_key(key)
    return urljoin(settings.base_url, f"Archive/synop.{key}.csv.gz")


def hour_url(settings: FetchSettings, key: str) -> str:
    """URL of an hourly snapshot: ``synop.YYYYMMDDHH.csv``."""
    parse_hour_key(key)
    return urljoin(settings.base_url, f"synop.{key}.csv")


class RemoteSource:
    """HTTP source backed by a :class:`requests.Session`."""

    def __init__(self, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: FetchSettings) -> "RemoteSource":
        return cls(timeout=settings.timeout_seconds)

    def fetch(self, url: str) -> bytes:
        """Download ``url`` and return its body.

        Raises:
            FetchFailure: On timeout, connection error or HTTP error status
        """
        logger.info(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise FetchFailure(url, f"timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise FetchFailure(url, e) from e

        content = response.content
        logger.debug(f"Fetched {len(content)} bytes from {url}")
        return content
