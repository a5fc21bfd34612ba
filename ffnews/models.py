"""Canonical economic event model shared across all fetchers."""

from __future__ import annotations

from dataclasses import dataclass

IMPACT_LOW = "low"
IMPACT_MEDIUM = "medium"
IMPACT_HIGH = "high"
IMPACT_HOLIDAY = "holiday"
IMPACT_UNKNOWN = "unknown"

IMPACT_LEVELS: frozenset[str] = frozenset(
    {IMPACT_LOW, IMPACT_MEDIUM, IMPACT_HIGH, IMPACT_HOLIDAY, IMPACT_UNKNOWN}
)


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    """Source-agnostic representation of a single calendar event.

    Every fetcher maps its raw records into this shape, so the snapshot
    contract never depends on which feed was used.
    """

    id: str                          # e.g. "USD-1709645400-non-farm-payrolls"
    datetime_utc: str | None         # ISO-8601, seconds precision, "Z" suffix
    epoch: int | None                # UTC seconds since epoch
    currency: str | None             # e.g. "USD", "JPY"
    impact: str                      # one of IMPACT_LEVELS
    title: str | None
    actual: str | None = None
    forecast: str | None = None
    previous: str | None = None
    url: str | None = None

    @property
    def is_complete(self) -> bool:
        """True when the event may be admitted into a published snapshot."""
        return bool(
            self.currency
            and self.title
            and self.datetime_utc
            and self.epoch is not None
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "datetime_utc": self.datetime_utc,
            "epoch": self.epoch,
            "currency": self.currency,
            "impact": self.impact,
            "title": self.title,
            "actual": self.actual,
            "forecast": self.forecast,
            "previous": self.previous,
            "url": self.url,
        }
