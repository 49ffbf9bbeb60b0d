"""Typed, sentinel-aware decoding of raw SYNOP field values.

A :class:`DecodeContext` lives for exactly one row. It keeps the first
:class:`FieldDecodeError` raised by any decode call; once an error is held,
every later call returns ``None`` without looking at its input. A mapper can
therefore decode all fields of a row unconditionally and check the context
once at the end.

Example:
    >>> ctx = DecodeContext()
    >>> ctx.float_("t", "280.45")
    280.45
    >>> ctx.float_("td", "mq") is None
    True
    >>> ctx.int_("u", "high") is None
    True
    >>> ctx.error.field
    'u'
"""

import logging
import re
from datetime import datetime, timezone
from typing import Callable, Mapping

from synop_ingest.exceptions import FieldDecodeError, InvalidCode

logger = logging.getLogger(__name__)

# "missing quantity": the source format's explicit no-value marker
MISSING = "mq"

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

CodeValidator = Callable[[int], bool]

# WMO code tables referenced by coded measure fields (WMO-No. 306)
CODE_TABLES = {
    "0200": "barometric tendency",
    "0500": "cloud genus",
    "0509": "high cloud type",
    "0513": "low cloud type",
    "0515": "middle cloud type",
    "0901": "state of the ground",
    "3778": "special phenomena",
    "3855": "wet bulb measurement method",
    "4561": "past weather",
    "4677": "present weather",
}


def accept_all(value: int) -> bool:
    """Default validator: every value is a legal code."""
    return True


class CodeValidators:
    """Registry of validators keyed by code table.

    Every known table accepts all values until reference data is available
    to check them. Register a stricter validator with :meth:`register`.
    Unknown tables are rejected so that a typo in a column definition fails
    loudly instead of silently accepting data.
    """

    def __init__(self, validators: Mapping[str, CodeValidator] | None = None) -> None:
        self._validators: dict[str, CodeValidator] = {table: accept_all for table in CODE_TABLES}
        if validators:
            self._validators.update(validators)

    def register(self, table: str, validator: CodeValidator) -> None:
        self._validators[table] = validator

    def is_valid(self, value: int, table: str) -> bool:
        validator = self._validators.get(table)
        if validator is None:
            return False
        return validator(value)

    def __contains__(self, table: str) -> bool:
        return table in self._validators


DEFAULT_VALIDATORS = CodeValidators()


def _parse_int(raw: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ValueError(f"invalid integer literal {raw!r}")
    return int(raw)


def _parse_float(raw: str) -> float:
    if not _FLOAT_RE.fullmatch(raw):
        raise ValueError(f"invalid float literal {raw!r}")
    return float(raw)


class DecodeContext:
    """Per-row decoder that holds the first decoding error."""

    def __init__(self, validators: CodeValidators | None = None) -> None:
        self.validators = validators or DEFAULT_VALIDATORS
        self.error: FieldDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the held error, if any."""
        if self.error is not None:
            raise self.error

    def fail(self, field: str, raw: str | None, cause: Exception) -> None:
        """Record a decoding error unless one is already held."""
        if self.error is None:
            self.error = FieldDecodeError(field, raw, cause)
            logger.debug(f"Decode error held: {self.error}")

    def _convert(self, field: str, raw: str | None, convert: Callable[[str], object]):
        if self.error is not None or raw == MISSING:
            return None
        if raw is None:
            self.fail(field, raw, KeyError(f"missing column {field!r}"))
            return None
        try:
            return convert(raw)
        except ValueError as e:
            self.fail(field, raw, e)
            return None

    def float_(self, field: str, raw: str | None) -> float | None:
        return self._convert(field, raw, _parse_float)

    def int_(self, field: str, raw: str | None) -> int | None:
        return self._convert(field, raw, _parse_int)

    def string(self, field: str, raw: str | None) -> str | None:
        return self._convert(field, raw, str)

    def code(self, field: str, raw: str | None, table: str) -> int | None:
        """Decode an integer whose legal values come from a WMO code table."""
        value = self.int_(field, raw)
        if value is None:
            return None
        if not self.validators.is_valid(value, table):
            self.fail(field, raw, InvalidCode(value, table))
            return None
        return value

    def timestamp(self, field: str, raw: str | None) -> datetime | None:
        """Decode a ``YYYYMMDDHHMMSS`` UTC timestamp.

        The ``mq`` sentinel is not honoured here: a timestamp is mandatory.
        """
        if self.error is not None:
            return None
        if raw is None:
            self.fail(field, raw, KeyError(f"missing column {field!r}"))
            return None
        try:
            if not raw.isdigit() or len(raw) != 14:
                raise ValueError(f"timestamp {raw!r} does not match {TIMESTAMP_FORMAT}")
            return datetime.strptime(raw, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError as e:
            self.fail(field, raw, e)
            return None
