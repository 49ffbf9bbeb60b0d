"""Error types raised while fetching, decoding and writing SYNOP data.

Every error derives from :class:`SynopError` so the command line boundary can
catch them in one place. Errors are chained with ``raise ... from ...`` and
never retried.
"""

from __future__ import annotations


class SynopError(Exception):
    """Base class for all ingestion errors."""


class InvalidDateFormat(SynopError, ValueError):
    """Raised when a date key does not match its expected format."""

    def __init__(self, key: str, expected: str) -> None:
        super().__init__(f"Invalid date key {key!r}, expected {expected}")
        self.key = key
        self.expected = expected


class MalformedRecord(SynopError):
    """Raised when a data row does not have as many values as the header."""

    def __init__(self, row: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Malformed record at row {row}: expected {expected} columns, got {actual}"
        )
        self.row = row
        self.expected = expected
        self.actual = actual


class InvalidCode(SynopError, ValueError):
    """Raised when a coded integer is rejected by its code table validator."""

    def __init__(self, value: int, table: str) -> None:
        super().__init__(f"Invalid code {value} for code table {table}")
        self.value = value
        self.table = table


class FieldDecodeError(SynopError):
    """Raised when a single field of a row cannot be decoded.

    ``row`` is filled in by the record mapper once the failing row is known.
    """

    def __init__(
        self,
        field: str,
        raw_value: str | None,
        cause: Exception,
        row: int | None = None,
    ) -> None:
        self.field = field
        self.raw_value = raw_value
        self.cause = cause
        self.row = row
        super().__init__(self._message())

    def _message(self) -> str:
        where = f" at row {self.row}" if self.row is not None else ""
        return f"Cannot decode field {self.field!r}{where} from {self.raw_value!r}: {self.cause}"

    def at_row(self, row: int) -> "FieldDecodeError":
        """Return a copy of this error located at ``row``."""
        return FieldDecodeError(self.field, self.raw_value, self.cause, row=row)


class FetchFailure(SynopError):
    """Raised when a remote resource cannot be retrieved."""

    def __init__(self, url: str, cause: Exception | str) -> None:
        super().__init__(f"Failed to fetch {url}: {cause}")
        self.url = url
        self.cause = cause


class SynopIOError(SynopError, OSError):
    """Raised on local read or write failures."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return self.args[0]


class TableReadError(SynopIOError):
    """Raised when the table stream cannot be read or decoded as text."""


class CacheWriteError(SynopIOError):
    """Raised when a downloaded file cannot be persisted to the cache."""


class PointConstructionError(SynopError):
    """Raised when a measure cannot be converted into a time-series point."""

    def __init__(self, station_id: str, reason: str) -> None:
        super().__init__(f"Cannot build point for station {station_id!r}: {reason}")
        self.station_id = station_id
        self.reason = reason


class WriteFailure(SynopError):
    """Raised when the store rejects a batch of points."""

    def __init__(self, size: int, cause: Exception | str) -> None:
        super().__init__(f"Failed to write batch of {size} points: {cause}")
        self.size = size
        self.cause = cause


def error_chain(error: BaseException) -> list[str]:
    """Describe an error and all of its causes, outermost first."""
    messages = []
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        messages.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or current.__context__
    return messages
