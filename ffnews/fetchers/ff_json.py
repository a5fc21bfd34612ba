"""Fetcher for the ForexFactory weekly JSON feed (primary source).

``nfs.faireconomy.media/ff_calendar_thisweek.json`` is a JSON array of
objects with ``title``, ``country`` (a currency code), ``date`` (ISO-8601
with offset), ``impact``, ``forecast`` and ``previous``.
"""

from __future__ import annotations

import json

from ..errors import FetchFailure
from .base import BaseFetcher


class FFJsonFetcher(BaseFetcher):
    """Fetch the calendar from the JSON feed."""

    accept = "application/json,text/plain,*/*"
    url_setting = "ff_json_url"

    @property
    def name(self) -> str:
        return "ff_json"

    def parse_records(self, payload: bytes) -> list:
        try:
            data = json.loads(payload)
        except ValueError as exc:
            raise FetchFailure(self.name, f"invalid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise FetchFailure(self.name, "JSON payload is not an array")
        return data
