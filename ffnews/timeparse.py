"""Resolve the scheduled instant of a raw calendar record to UTC.

Feeds mix three encodings:

1. an explicit epoch-like field (seconds or milliseconds),
2. an ISO-8601 date-time, usually with an offset
   (``2024-03-05T08:30:00-05:00``),
3. separate date and time strings without zone information
   (``03-05-2024`` + ``8:30am``), published in a fixed source zone.

:func:`resolve_instant` tries them in that order and returns the first
that parses.  The source zone is applied only to values that carry no
offset of their own.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import DEFAULT_SOURCE_TZ
from .errors import ConfigError

EPOCH_KEYS = ("epoch", "timestamp", "time_stamp", "timeStamp", "unixtime", "unix")
DATE_KEYS = ("date", "Date", "datetime", "datetime_utc")
TIME_KEYS = ("time", "Time")

# Values above this are millisecond timestamps.
_MS_THRESHOLD = 1e12

# Time tokens meaning "no specific time"; compared lower-cased, spaces removed.
_NO_TIME_TOKENS = frozenset({"", "all-day", "allday", "tentative", "n/a"})
_MIDNIGHT = "12:00am"

_DATE_FORMATS = ("%Y-%m-%d", "%m-%d-%Y", "%m/%d/%Y")
_TIME_FORMATS = ("%I:%M%p", "%I%p", "%H:%M")


class Instant(NamedTuple):
    epoch: int | None
    iso_utc: str | None


UNRESOLVED = Instant(None, None)


def source_zone(name: str = DEFAULT_SOURCE_TZ) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigError(f"Unknown source time zone: {name!r}") from None


def format_utc(dt: datetime) -> str:
    """Return ``YYYY-MM-DDTHH:MM:SSZ`` for an aware datetime."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def from_epoch(epoch: int) -> Instant:
    dt = datetime.fromtimestamp(epoch, tz=timezone.utc)
    return Instant(epoch, format_utc(dt))


def _from_datetime(dt: datetime) -> Instant:
    try:
        utc = dt.astimezone(timezone.utc)
        return Instant(math.floor(utc.timestamp()), format_utc(utc))
    except (OverflowError, ValueError):
        # Near datetime.min / datetime.max the shift to UTC leaves the range.
        return UNRESOLVED


def _first(raw: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = raw.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def parse_epoch_field(raw: dict) -> int | None:
    """Return seconds since epoch from the first usable alias field."""
    for key in EPOCH_KEYS:
        value = raw.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            if not math.isfinite(value) or value <= 0:
                continue
            n = math.floor(value)
        elif isinstance(value, str) and value.isascii() and value.isdigit():
            n = int(value)
            if n <= 0:
                continue
        else:
            continue
        if n > _MS_THRESHOLD:
            n //= 1000
        return n
    return None


def parse_iso(value: str, tz: ZoneInfo) -> Instant:
    """Parse a combined ISO date-time, honouring any embedded offset."""
    s = value.strip()
    if not s:
        return UNRESOLVED
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return UNRESOLVED
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return _from_datetime(dt)


def parse_date_time(date_str: str, time_str: str, tz: ZoneInfo) -> Instant:
    """Parse a split date + time pair interpreted in the source zone *tz*."""
    d = date_str.strip()
    if not d:
        return UNRESOLVED
    t = time_str.strip()
    if t.lower().replace(" ", "") in _NO_TIME_TOKENS:
        t = _MIDNIGHT
    value = f"{d} {t}"
    for date_fmt in _DATE_FORMATS:
        for time_fmt in _TIME_FORMATS:
            try:
                naive = datetime.strptime(value, f"{date_fmt} {time_fmt}")
            except ValueError:
                continue
            return _from_datetime(naive.replace(tzinfo=tz))
    return UNRESOLVED


def resolve_instant(raw: dict, tz: ZoneInfo | None = None) -> Instant:
    """Return the UTC instant of *raw*, or :data:`UNRESOLVED`."""
    tz = tz or source_zone()

    epoch = parse_epoch_field(raw)
    if epoch is not None:
        try:
            return from_epoch(epoch)
        except (OverflowError, OSError, ValueError):
            return UNRESOLVED

    date_str = _first(raw, DATE_KEYS)
    if "T" in date_str:
        return parse_iso(date_str, tz)

    return parse_date_time(
        _first(raw, ("date", "Date")), _first(raw, TIME_KEYS), tz,
    )
