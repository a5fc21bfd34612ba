"""Calendar feed fetchers."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..errors import CombinedFetchFailure, FetchFailure
from ..timeparse import source_zone
from .base import BaseFetcher, FeedBatch
from .ff_json import FFJsonFetcher
from .ff_xml import FFXmlFetcher

__all__ = [
    "BaseFetcher",
    "FFJsonFetcher",
    "FFXmlFetcher",
    "FeedBatch",
    "FetchOutcome",
    "build_fetchers",
    "fetch_with_fallback",
    "get_fetcher",
]

# Registry of available fetchers – add new feeds here.
_FETCHERS: dict[str, type[BaseFetcher]] = {
    "ff_json": FFJsonFetcher,
    "ff_xml": FFXmlFetcher,
}


def get_fetcher(name: str, settings: Settings) -> BaseFetcher:
    """Return a fetcher instance by name, configured from *settings*.

    Raises ``KeyError`` if *name* is not registered.
    Available names: ff_json, ff_xml
    """
    try:
        cls = _FETCHERS[name]
    except KeyError:
        available = ", ".join(sorted(_FETCHERS))
        raise KeyError(
            f"Unknown fetcher '{name}'. Available: {available}"
        ) from None
    url = getattr(settings, cls.url_setting)
    return cls(url, tz=source_zone(settings.source_tz), timeout=settings.fetch_timeout)


def build_fetchers(settings: Settings) -> tuple[BaseFetcher, BaseFetcher]:
    """Return the ``(primary, secondary)`` pair: JSON first, XML as fallback."""
    return get_fetcher("ff_json", settings), get_fetcher("ff_xml", settings)


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Result of the two-step fetch.

    ``primary_error`` is set when the batch came from the fallback feed.
    """

    batch: FeedBatch
    primary_error: FetchFailure | None = None

    @property
    def used_fallback(self) -> bool:
        return self.primary_error is not None


def fetch_with_fallback(primary: BaseFetcher, secondary: BaseFetcher) -> FetchOutcome:
    """Fetch *primary*; only if it fails, fetch *secondary* once.

    Raises :class:`CombinedFetchFailure` carrying both causes when neither
    feed can be used.  No partial results are returned.
    """
    try:
        return FetchOutcome(batch=primary.fetch())
    except FetchFailure as primary_exc:
        print(f"[{primary.name}] fetch failed: {primary_exc.reason}; trying {secondary.name}")
        try:
            batch = secondary.fetch()
        except FetchFailure as secondary_exc:
            raise CombinedFetchFailure(primary_exc, secondary_exc) from secondary_exc
        return FetchOutcome(batch=batch, primary_error=primary_exc)
