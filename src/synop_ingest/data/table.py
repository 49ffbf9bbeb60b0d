"""Header-indexed reader for semicolon-delimited SYNOP files."""

import csv
import gzip
import io
import logging
import zlib
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

from synop_ingest.exceptions import MalformedRecord, TableReadError

logger = logging.getLogger(__name__)

DELIMITER = ";"
# A leading byte order mark is dropped
ENCODING = "utf-8-sig"

# Monthly archives are served gzip-compressed and cached verbatim
GZIP_MAGIC = b"\x1f\x8b"

Row = dict[str, str]


@dataclass
class Table:
    """Column names plus rows keyed by those names."""

    headers: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    @property
    def is_empty(self) -> bool:
        """True when not even a header row was read."""
        return not self.headers


def _read_text(stream: BinaryIO) -> str:
    try:
        data = stream.read()
        if data[:2] == GZIP_MAGIC:
            data = gzip.decompress(data)
        return data.decode(ENCODING)
    except (OSError, EOFError, zlib.error) as e:
        raise TableReadError(f"Cannot read table stream: {e}") from e
    except UnicodeDecodeError as e:
        raise TableReadError(f"Table stream is not valid UTF-8: {e}") from e


def parse_table(stream: BinaryIO) -> Table:
    """Parse a semicolon-delimited byte stream into a :class:`Table`.

    The first record is always the header. Every following record must have
    exactly as many values as the header, otherwise :class:`MalformedRecord`
    is raised with the 1-based index of the offending data row. An empty
    stream yields a table without headers or rows. Blank lines are skipped.

    Args:
        stream: Binary stream of UTF-8 text, optionally gzip-compressed

    Returns:
        Parsed table

    Raises:
        MalformedRecord: If a data row's column count differs from the header
        TableReadError: If the stream cannot be read or decoded
    """
    reader = csv.reader(io.StringIO(_read_text(stream), newline=""), delimiter=DELIMITER)
    table = Table()

    try:
        for record in reader:
            if not record:
                # blank line
                continue
            if not table.headers:
                table.headers = record
                continue
            if len(record) != len(table.headers):
                raise MalformedRecord(len(table.rows) + 1, len(table.headers), len(record))
            table.rows.append(dict(zip(table.headers, record)))
    except csv.Error as e:
        raise TableReadError(f"Cannot parse line {reader.line_num}: {e}") from e

    logger.debug(f"Parsed table with {len(table.headers)} columns and {len(table.rows)} rows")
    return table
