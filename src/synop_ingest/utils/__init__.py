"""Utility functions for SYNOP ingestion."""

from synop_ingest.utils.parsing import (
    iter_month_keys,
    parse_hour_key,
    parse_month_key,
)

__all__ = [
    "iter_month_keys",
    "parse_hour_key",
    "parse_month_key",
]
