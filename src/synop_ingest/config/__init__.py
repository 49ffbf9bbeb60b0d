"""Configuration management for SYNOP ingestion."""

from synop_ingest.config.base import BaseConfig
from synop_ingest.config.paths import (
    DEFAULT_CACHE_DIR,
    STATIONS_KEY,
    get_cache_path,
)
from synop_ingest.config.settings import (
    DEFAULT_INGEST_CONFIG,
    FetchSettings,
    IngestConfig,
    StoreSettings,
)

__all__ = [
    "BaseConfig",
    "FetchSettings",
    "StoreSettings",
    "IngestConfig",
    "DEFAULT_INGEST_CONFIG",
    "DEFAULT_CACHE_DIR",
    "STATIONS_KEY",
    "get_cache_path",
]
