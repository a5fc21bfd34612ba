"""Turn a raw feed record into a :class:`~ffnews.models.CalendarEvent`."""

from __future__ import annotations

import re
from zoneinfo import ZoneInfo

from .models import IMPACT_LEVELS, IMPACT_UNKNOWN, CalendarEvent
from .timeparse import resolve_instant

CURRENCY_KEYS = ("currency", "country", "ccy")
TITLE_KEYS = ("title", "event", "name")
IMPACT_KEYS = ("impact", "Impact")

_ID_TITLE_MAX = 60
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_NON_ALPHA = re.compile(r"[^A-Z]")


def _first_text(raw: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def empty_to_none(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_impact(raw) -> str:
    """Map a provider impact string onto the contract enum (case-insensitive)."""
    s = str(raw or "").strip().lower()
    return s if s in IMPACT_LEVELS else IMPACT_UNKNOWN


def make_id(currency: str | None, epoch: int | None, title: str | None) -> str:
    """Deterministic identity from (currency, epoch, title slug).

    Two different events sharing currency, instant and the first 60
    characters of their slug collapse to the same id.
    """
    ccy = _NON_ALPHA.sub("", (currency or "UNK").upper())[:3] or "UNK"
    ep = str(epoch) if epoch is not None else "0"
    slug = _NON_ALNUM.sub("-", (title or "").lower()).strip("-")[:_ID_TITLE_MAX]
    return f"{ccy}-{ep}-{slug or 'event'}"


def to_event(raw: dict, tz: ZoneInfo | None = None) -> CalendarEvent:
    """Build an event from *raw* without checking required fields."""
    currency = _first_text(raw, CURRENCY_KEYS).upper() or None
    title = _first_text(raw, TITLE_KEYS) or None
    epoch, iso_utc = resolve_instant(raw, tz)

    return CalendarEvent(
        id=make_id(currency, epoch, title),
        datetime_utc=iso_utc,
        epoch=epoch,
        currency=currency,
        impact=normalize_impact(_first_text(raw, IMPACT_KEYS)),
        title=title,
        actual=empty_to_none(raw.get("actual")),
        forecast=empty_to_none(raw.get("forecast")),
        previous=empty_to_none(raw.get("previous")),
        url=empty_to_none(raw.get("url")),
    )


def canonicalize(raw, tz: ZoneInfo | None = None) -> CalendarEvent | None:
    """Return the canonical event, or ``None`` if *raw* must be dropped."""
    if not isinstance(raw, dict):
        return None
    event = to_event(raw, tz)
    return event if event.is_complete else None
