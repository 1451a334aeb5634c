"""Timestamp normalization tests."""
from datetime import datetime, timedelta, timezone

import pytest

from flightoracle.providers.timestamps import parse_timestamp, to_unix_seconds

EXPECTED = datetime(2024, 6, 15, 14, 5, tzinfo=timezone.utc)
EPOCH = 1718460300  # 2024-06-15T14:05:00Z


@pytest.mark.parametrize(
    "value",
    [
        "2024-06-15T14:05:00Z",
        "2024-06-15T14:05:00z",
        "2024-06-15T14:05:00+00:00",
        "2024-06-15T10:05:00-04:00",
        "2024-06-15T16:05:00+02:00",
        "2024-06-15T14:05:00",
        " 2024-06-15T14:05:00Z ",
        EPOCH,
        float(EPOCH),
        EPOCH * 1000,
        str(EPOCH),
        str(EPOCH * 1000),
    ],
)
def test_accepted_formats(value):
    assert parse_timestamp(value) == EXPECTED


def test_fractional_seconds():
    parsed = parse_timestamp("2024-06-15T14:05:00.000Z")
    assert parsed == EXPECTED
    assert parse_timestamp("2024-06-15T14:05:00.250Z") == EXPECTED + timedelta(milliseconds=250)


def test_result_is_aware_utc():
    parsed = parse_timestamp("2024-06-15T10:05:00-04:00")
    assert parsed.utcoffset() == timedelta(0)


def test_aware_datetime_converted():
    eastern = timezone(timedelta(hours=-4))
    assert parse_timestamp(datetime(2024, 6, 15, 10, 5, tzinfo=eastern)) == EXPECTED


@pytest.mark.parametrize("value", [None, "", "   "])
def test_absent_values(value):
    assert parse_timestamp(value) is None


@pytest.mark.parametrize("value", ["yesterday", "15/06/2024 14:05", True, {"x": 1}])
def test_rejected_values(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_to_unix_seconds():
    assert to_unix_seconds(EXPECTED) == EPOCH
    assert to_unix_seconds(None) is None
    assert to_unix_seconds(datetime(2024, 6, 15, 14, 5)) == EPOCH


@pytest.mark.parametrize(
    "value",
    ["99999999999999999999", 10**20, -(10**20), 1e300, "9" * 400],
)
def test_out_of_range_epoch_is_value_error(value):
    with pytest.raises(ValueError, match="out of range"):
        parse_timestamp(value)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-06-15T14:05:00.5Z", EXPECTED + timedelta(milliseconds=500)),
        ("2024-06-15T14:05:00.12Z", EXPECTED + timedelta(milliseconds=120)),
        ("2024-06-15T14:05:00.1234567Z", EXPECTED + timedelta(microseconds=123456)),
        ("2024-06-15T10:05:00.5-04:00", EXPECTED + timedelta(milliseconds=500)),
        ("2024-06-15T14:05:00.5", EXPECTED + timedelta(milliseconds=500)),
    ],
)
def test_uneven_fraction_digits(value, expected):
    assert parse_timestamp(value) == expected
