"""Time parsing and formatting helpers using Go-style layout strings."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from fractions import Fraction
from typing import Callable, Optional

RFC3339 = "2006-01-02T15:04:05Z07:00"
RFC3339_MILLI = "2006-01-02T15:04:05.999Z07:00"
RFC3339_MICRO = "2006-01-02T15:04:05.999999Z07:00"
RFC3339_NANO = "2006-01-02T15:04:05.999999999Z07:00"
RFC1123Z = "Mon, 02 Jan 2006 15:04:05 -0700"
STAMP_MILLI = "Jan _2 15:04:05.000"

FORMAT_NAMES = (
    "StampMilli",
    "RFC3339",
    "RFC3339Milli",
    "RFC3339Micro",
    "RFC3339Nano",
    "RFC1123Z",
)

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_UNIT_PATTERN = "ns|us|µs|μs|ms|s|m|h"
_DURATION_RE = re.compile(rf"^[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:{_UNIT_PATTERN}))+$")
_PART_RE = re.compile(rf"(\d+\.?\d*|\.\d+)({_UNIT_PATTERN})")

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "1h30m" or "-1.5s"."""
    if text in ("0", "+0", "-0"):
        return timedelta(0)
    if not text or not _DURATION_RE.match(text):
        raise ValueError(f"invalid duration {text!r}")
    negative = text.startswith("-")
    total = Fraction(0)
    for number, unit in _PART_RE.findall(text.lstrip("+-")):
        total += Fraction(number) * _UNIT_NANOS[unit]
    nanos = int(total)
    if negative:
        nanos = -nanos
    return timedelta(microseconds=nanos // 1000)


def _parse_rfc3339(value: str) -> datetime:
    match = _RFC3339_RE.match(value)
    if not match:
        raise ValueError(value)
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    fraction, zone = match.group(7), match.group(8)
    micro = int((fraction[1:] + "000000")[:6]) if fraction else 0
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)


def _parse_rfc1123z(value: str) -> datetime:
    return datetime.strptime(value, "%a, %d %b %Y %H:%M:%S %z")


def from_string(value: str, now: Optional[datetime] = None) -> datetime:
    """Convert a relative duration (in the past) or an absolute time to a datetime."""
    try:
        delta = parse_duration(value)
    except ValueError:
        pass
    else:
        current = now if now is not None else datetime.now(timezone.utc)
        return current - delta
    for parser in (_parse_rfc3339, _parse_rfc1123z):
        try:
            return parser(value)
        except ValueError:
            continue
    raise ValueError(f"failed to convert {value} to time")


def format_name_to_layout(name: str) -> str:
    """Return the layout for a time format name; unknown names give StampMilli."""
    return {
        "rfc3339": RFC3339,
        "rfc3339milli": RFC3339_MILLI,
        "rfc3339micro": RFC3339_MICRO,
        "rfc3339nano": RFC3339_NANO,
        "rfc1123z": RFC1123Z,
    }.get(name.lower(), STAMP_MILLI)


def _offset(moment: datetime, colon: bool, zulu: bool) -> str:
    minutes = int(moment.utcoffset().total_seconds() // 60)
    if zulu and minutes == 0:
        return "Z"
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{':' if colon else ''}{mins:02d}"


_TOKENS: tuple[tuple[str, Callable[[datetime], str]], ...] = (
    ("Jan", lambda m: _MONTHS[m.month - 1]),
    ("Mon", lambda m: _WEEKDAYS[m.weekday()]),
    ("2006", lambda m: f"{m.year:04d}"),
    ("-0700", lambda m: _offset(m, False, False)),
    ("Z07:00", lambda m: _offset(m, True, True)),
    ("01", lambda m: f"{m.month:02d}"),
    ("02", lambda m: f"{m.day:02d}"),
    ("_2", lambda m: f"{m.day:2d}"),
    ("15", lambda m: f"{m.hour:02d}"),
    ("04", lambda m: f"{m.minute:02d}"),
    ("05", lambda m: f"{m.second:02d}"),
)


def format_time(moment: datetime, layout: str) -> str:
    """Format a datetime with a Go-style layout; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    digits = f"{moment.microsecond * 1000:09d}"
    out = []
    i = 0
    while i < len(layout):
        rest = layout[i:]
        for token, render in _TOKENS:
            if rest.startswith(token):
                out.append(render(moment))
                i += len(token)
                break
        else:
            if rest[0] == "." and len(rest) > 1 and rest[1] in "09":
                digit = rest[1]
                count = 1
                while 1 + count < len(rest) and rest[1 + count] == digit:
                    count += 1
                frac = digits[:count]
                if digit == "9":
                    frac = frac.rstrip("0")
                    out.append("." + frac if frac else "")
                else:
                    out.append("." + frac)
                i += 1 + count
            else:
                out.append(rest[0])
                i += 1
    return "".join(out)