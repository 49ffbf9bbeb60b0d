"""Fetch and store configuration for SYNOP ingestion."""

from pathlib import Path

from pydantic import Field, field_validator

from synop_ingest.config.base import BaseConfig
from synop_ingest.config.paths import DEFAULT_CACHE_DIR


class FetchSettings(BaseConfig):
    """Configuration for SYNOP file retrieval and caching."""

    # Météo-France open data
    base_url: str = Field(
        default="https://donneespubliques.meteofrance.fr/donnees_libres/Txt/Synop/",
        description="Base URL of the SYNOP open data directory",
    )
    station_path: str = Field(
        default="postesSynop.csv",
        description="Station list path, relative to base_url",
    )

    # Network settings (fixed, no retries)
    timeout_seconds: float = Field(default=10.0, gt=0, le=300)

    cache_dir: Path = Field(
        default=DEFAULT_CACHE_DIR,
        description="Directory where downloaded files are kept",
    )

    @field_validator("base_url")
    @classmethod
    def base_url_ends_with_slash(cls, v: str) -> str:
        """Relative paths are joined onto base_url, so it must end with '/'."""
        return v if v.endswith("/") else v + "/"


class StoreSettings(BaseConfig):
    """Configuration for the time-series store (InfluxDB 1.x HTTP API)."""

    url: str | None = Field(
        default=None,
        description="Store URL, e.g. http://localhost:8086. Writes are skipped when unset",
    )
    database: str = Field(default="synop", min_length=1)
    user: str | None = None
    password: str | None = None
    measurement: str = Field(
        default="measurements",
        min_length=1,
        description="Series name the points are written under",
    )
    batch_size: int = Field(default=5000, ge=1, le=100_000)
    timeout_seconds: float = Field(default=10.0, gt=0, le=300)

    @property
    def enabled(self) -> bool:
        """Whether a store is configured and points should be written."""
        return bool(self.url)


class IngestConfig(BaseConfig):
    """Top-level configuration for an ingestion run.

    Example:
        >>> config = IngestConfig.from_yaml('''
        ... fetch:
        ...   cache_dir: /var/cache/synop
        ... store:
        ...   url: http://localhost:8086
        ...   database: meteo
        ... ''')
        >>> config.store.enabled
        True
    """

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)


# Default settings instance
DEFAULT_INGEST_CONFIG = IngestConfig()
