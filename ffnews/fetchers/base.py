"""Abstract base class for calendar feed fetchers."""

from __future__ import annotations

import http.client
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from ..config import DEFAULT_FETCH_TIMEOUT, USER_AGENT
from ..errors import FetchFailure
from ..models import CalendarEvent
from ..normalize import canonicalize


@dataclass(frozen=True, slots=True)
class FeedBatch:
    """Events accepted from one feed, plus how many raw records were dropped."""

    source: str
    events: list[CalendarEvent] = field(default_factory=list)
    raw_count: int = 0

    @property
    def dropped(self) -> int:
        return self.raw_count - len(self.events)


class BaseFetcher(ABC):
    """Download one feed and canonicalize every record in it.

    Subclasses supply the request ``Accept`` header and the decoding of the
    payload into raw record dicts; :meth:`fetch` does the rest.
    """

    accept = "*/*"
    # Name of the Settings attribute holding this feed's URL.
    url_setting = ""

    def __init__(
        self,
        url: str,
        *,
        tz: ZoneInfo,
        timeout: int = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        self.url = url
        self.tz = tz
        self.timeout = timeout

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this feed (e.g. ``'ff_json'``)."""

    @abstractmethod
    def parse_records(self, payload: bytes) -> list:
        """Decode *payload* into raw records.

        Raises :class:`FetchFailure` when the payload as a whole is unusable.
        Individual records may be of any shape; bad ones are dropped later.
        """

    # ------------------------------------------------------------------ #
    # Public
    # ------------------------------------------------------------------ #

    def fetch(self) -> FeedBatch:
        records = self.parse_records(self._download())
        events: list[CalendarEvent] = []
        for raw in records:
            ev = canonicalize(raw, self.tz)
            if ev is not None:
                events.append(ev)
        batch = FeedBatch(source=self.name, events=events, raw_count=len(records))
        if batch.dropped:
            print(f"[{self.name}] dropped {batch.dropped} of {batch.raw_count} records")
        return batch

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _download(self) -> bytes:
        try:
            req = urllib.request.Request(
                self.url,
                headers={"User-Agent": USER_AGENT, "Accept": self.accept},
            )
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # noqa: S310
                status = resp.status
                body = resp.read()
        except urllib.error.HTTPError as exc:
            raise FetchFailure(self.name, f"HTTP {exc.code}") from exc
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise FetchFailure(self.name, f"request failed: {exc}") from exc
        except ValueError as exc:
            # Raised by Request for a malformed URL.
            raise FetchFailure(self.name, f"bad URL: {exc}") from exc
        if not 200 <= status < 300:
            raise FetchFailure(self.name, f"HTTP {status}")
        return body
