from datetime import datetime, timedelta, timezone

import pytest

from hubblecli import timeutil

NOW = datetime(2019, 7, 1, 14, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "given, expected",
    [
        ("10s", "2019-07-01T13:59:50Z"),
        ("5m", "2019-07-01T13:55:00Z"),
        ("20h", "2019-06-30T18:00:00Z"),
        ("2019-06-30T18:00:00Z", "2019-06-30T18:00:00Z"),
    ],
)
def test_from_string(given, expected):
    got = timeutil.from_string(given, NOW)
    assert got == timeutil.from_string(expected, NOW)


def test_from_string_rejects_garbage():
    with pytest.raises(ValueError, match="failed to convert"):
        timeutil.from_string("yesterday", NOW)


def test_from_string_rfc1123z():
    got = timeutil.from_string("Sun, 30 Jun 2019 18:00:00 +0000", NOW)
    assert got == timeutil.from_string("2019-06-30T18:00:00Z", NOW)


def test_parse_duration_compound():
    assert timeutil.parse_duration("1h30m") == timedelta(hours=1, minutes=30)
    assert timeutil.parse_duration("-1.5s") == -timedelta(seconds=1.5)
    assert timeutil.parse_duration("0") == timedelta(0)


@pytest.mark.parametrize("bad", ["", "10", "s", "1x", "1h-"])
def test_parse_duration_invalid(bad):
    with pytest.raises(ValueError):
        timeutil.parse_duration(bad)


def test_format_name_to_layout():
    assert timeutil.format_name_to_layout("RFC3339") == timeutil.RFC3339
    assert timeutil.format_name_to_layout("rfc1123z") == timeutil.RFC1123Z
    assert timeutil.format_name_to_layout("whatever") == timeutil.STAMP_MILLI
    for name in timeutil.FORMAT_NAMES:
        assert timeutil.format_name_to_layout(name)


def test_format_stamp_milli():
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert timeutil.format_time(epoch, timeutil.STAMP_MILLI) == "Jan  1 00:00:00.000"
    moment = epoch + timedelta(seconds=1530984600, microseconds=123000)
    assert timeutil.format_time(moment, timeutil.STAMP_MILLI) == "Jul  7 17:30:00.123"


@pytest.mark.parametrize(
    "layout",
    [timeutil.RFC3339, timeutil.RFC3339_MILLI, timeutil.RFC3339_MICRO,
     timeutil.RFC3339_NANO, timeutil.RFC1123Z],
)
def test_format_round_trip(layout):
    moment = datetime(2019, 6, 30, 18, 0, 5, tzinfo=timezone.utc)
    assert timeutil.from_string(timeutil.format_time(moment, layout), NOW) == moment