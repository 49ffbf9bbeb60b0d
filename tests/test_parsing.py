"""Tests for date key parsing."""

from datetime import datetime

import pytest

from synop_ingest.exceptions import InvalidDateFormat
from synop_ingest.utils.parsing import (
    iter_month_keys,
    next_month,
    parse_hour_key,
    parse_month_key,
)


def test_parse_month_key():
    assert parse_month_key("202301") == datetime(2023, 1, 1)


def test_parse_hour_key():
    assert parse_hour_key("2023010106") == datetime(2023, 1, 1, 6)


@pytest.mark.parametrize("key", ["2023", "2023-01", "202313", "20230", "2023011", "abcdef", ""])
def test_invalid_month_key(key):
    with pytest.raises(InvalidDateFormat) as exc_info:
        parse_month_key(key)

    assert exc_info.value.expected == "YYYYMM"


@pytest.mark.parametrize("key", ["202301", "2023010124", "2023013106x", "20230101 6"])
def test_invalid_hour_key(key):
    with pytest.raises(InvalidDateFormat):
        parse_hour_key(key)


def test_invalid_date_format_is_value_error():
    with pytest.raises(ValueError):
        parse_month_key("nope")


def test_next_month_wraps_year():
    assert next_month(datetime(2022, 12, 1)) == datetime(2023, 1, 1)
    assert next_month(datetime(2023, 1, 1)) == datetime(2023, 2, 1)


def test_iter_month_keys_excludes_end():
    assert list(iter_month_keys("202301", "202303")) == ["202301", "202302"]


def test_iter_month_keys_across_years():
    assert list(iter_month_keys("202211", "202302")) == ["202211", "202212", "202301"]


@pytest.mark.parametrize("start, end", [("202303", "202303"), ("202304", "202301")])
def test_iter_month_keys_empty(start, end):
    assert list(iter_month_keys(start, end)) == []


def test_iter_month_keys_validates_end():
    with pytest.raises(InvalidDateFormat):
        list(iter_month_keys("202301", "2023-03"))
