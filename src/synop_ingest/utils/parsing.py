"""Parsing utilities for date keys given on the command line."""

import logging
import re
from datetime import datetime
from typing import Iterator

from synop_ingest.exceptions import InvalidDateFormat

logger = logging.getLogger(__name__)

MONTH_KEY_FORMAT = "%Y%m"
HOUR_KEY_FORMAT = "%Y%m%d%H"

_MONTH_KEY_RE = re.compile(r"\d{6}")
_HOUR_KEY_RE = re.compile(r"\d{10}")


def _parse_key(key: str, pattern: re.Pattern, fmt: str, expected: str) -> datetime:
    if not isinstance(key, str) or not pattern.fullmatch(key):
        raise InvalidDateFormat(str(key), expected)
    try:
        return datetime.strptime(key, fmt)
    except ValueError as e:
        raise InvalidDateFormat(key, expected) from e


def parse_month_key(key: str) -> datetime:
    """Parse a ``YYYYMM`` key into the first instant of that month.

    Examples:
        >>> parse_month_key("202301")
        datetime.datetime(2023, 1, 1, 0, 0)

    Raises:
        InvalidDateFormat: If the key is not a valid ``YYYYMM`` month
    """
    return _parse_key(key, _MONTH_KEY_RE, MONTH_KEY_FORMAT, "YYYYMM")


def parse_hour_key(key: str) -> datetime:
    """Parse a ``YYYYMMDDHH`` key.

    Examples:
        >>> parse_hour_key("2023010106")
        datetime.datetime(2023, 1, 1, 6, 0)

    Raises:
        InvalidDateFormat: If the key is not a valid ``YYYYMMDDHH`` hour
    """
    return _parse_key(key, _HOUR_KEY_RE, HOUR_KEY_FORMAT, "YYYYMMDDHH")


def month_key(date: datetime) -> str:
    return date.strftime(MONTH_KEY_FORMAT)


def next_month(date: datetime) -> datetime:
    """First instant of the month after ``date``."""
    if date.month == 12:
        return date.replace(year=date.year + 1, month=1, day=1)
    return date.replace(month=date.month + 1, day=1)


def iter_month_keys(start: str, end: str) -> Iterator[str]:
    """Yield month keys from ``start`` inclusive to ``end`` exclusive.

    Both keys are validated before anything is yielded. An empty or reversed
    range yields nothing.

    Examples:
        >>> list(iter_month_keys("202211", "202302"))
        ['202211', '202212', '202301']

    Raises:
        InvalidDateFormat: If either key is not a valid ``YYYYMM`` month
    """
    current = parse_month_key(start)
    stop = parse_month_key(end)
    if current >= stop:
        logger.warning(f"Empty month range [{start}, {end})")
    while current < stop:
        yield month_key(current)
        current = next_month(current)
