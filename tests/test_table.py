"""Tests for the semicolon-delimited table parser."""

import gzip
import io

import pytest

from synop_ingest.data.table import Table, parse_table
from synop_ingest.exceptions import MalformedRecord, SynopIOError, TableReadError


def parse(text: str) -> Table:
    return parse_table(io.BytesIO(text.encode("utf-8")))


def test_first_record_is_header():
    table = parse("a;b;c\n1;2;3\n4;5;6\n")

    assert table.headers == ["a", "b", "c"]
    assert table.rows == [
        {"a": "1", "b": "2", "c": "3"},
        {"a": "4", "b": "5", "c": "6"},
    ]
    assert len(table) == 2


def test_header_only_has_no_rows():
    table = parse("a;b\n")

    assert table.headers == ["a", "b"]
    assert table.rows == []
    assert not table.is_empty


def test_empty_stream_yields_empty_table():
    table = parse("")

    assert table.headers == []
    assert table.rows == []
    assert table.is_empty


def test_trailing_delimiter_is_an_empty_column():
    """Météo-France files end every line, header included, with ';'."""
    table = parse("numer_sta;t;\n07005;280.45;\n")

    assert table.headers == ["numer_sta", "t", ""]
    assert table.rows[0]["t"] == "280.45"


def test_crlf_and_blank_lines():
    table = parse("a;b\r\n1;2\r\n\r\n3;4\r\n")

    assert [row["b"] for row in table] == ["2", "4"]


def test_values_are_kept_verbatim():
    table = parse("ID;Nom\n89642;DUMONT D'URVILLE\n")

    assert table.rows[0]["Nom"] == "DUMONT D'URVILLE"


@pytest.mark.parametrize(
    "text, row, actual",
    [
        ("a;b;c\n1;2;3\n1;2\n", 2, 2),
        ("a;b;c\n1;2;3;4\n", 1, 4),
    ],
)
def test_column_count_mismatch_is_malformed(text, row, actual):
    with pytest.raises(MalformedRecord) as exc_info:
        parse(text)

    assert exc_info.value.row == row
    assert exc_info.value.expected == 3
    assert exc_info.value.actual == actual


def test_gzip_stream_is_decompressed():
    data = gzip.compress(b"a;b\n1;2\n")

    table = parse_table(io.BytesIO(data))

    assert table.rows == [{"a": "1", "b": "2"}]


def test_byte_order_mark_is_dropped():
    table = parse_table(io.BytesIO(b"\xef\xbb\xbfID;Nom\n07005;ABBEVILLE\n"))

    assert table.headers == ["ID", "Nom"]
    assert table.rows[0]["ID"] == "07005"


def test_byte_order_mark_in_gzip_archive():
    data = gzip.compress("\ufeffnumer_sta;t\n07005;280.45\n".encode("utf-8"))

    table = parse_table(io.BytesIO(data))

    assert table.headers == ["numer_sta", "t"]


def test_invalid_utf8_is_read_error():
    with pytest.raises(TableReadError):
        parse_table(io.BytesIO(b"a;b\n\xff\xfe;2\n"))


def test_truncated_gzip_is_read_error():
    data = gzip.compress(b"a;b\n1;2\n" * 100)[:20]

    with pytest.raises(TableReadError):
        parse_table(io.BytesIO(data))


def test_read_failure_is_io_error():
    class BrokenStream(io.RawIOBase):
        def read(self, size=-1):
            raise OSError("disk on fire")

    with pytest.raises(TableReadError) as exc_info:
        parse_table(BrokenStream())

    assert isinstance(exc_info.value, SynopIOError)
    assert isinstance(exc_info.value, OSError)
    assert "disk on fire" in str(exc_info.value)
