"""Fetcher for the ForexFactory weekly XML feed (fallback source).

The document repeats ``<event>`` elements whose children carry
``country``, ``date`` (``mm-dd-yyyy``), ``time`` (``8:30am``, ``All Day``,
``Tentative``), ``impact``, ``title``, ``actual``, ``forecast``,
``previous`` and ``url``.  Date and time have no zone; they are read in
the configured source zone.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from ..errors import FetchFailure
from .base import BaseFetcher

EVENT_FIELDS = (
    "country", "date", "time", "impact", "title",
    "actual", "forecast", "previous", "url",
)


class FFXmlFetcher(BaseFetcher):
    """Fetch the calendar from the XML feed."""

    accept = "application/xml,text/xml,*/*"
    url_setting = "ff_xml_url"

    @property
    def name(self) -> str:
        return "ff_xml"

    def parse_records(self, payload: bytes) -> list:
        try:
            root = ET.fromstring(payload)
        except ET.ParseError as exc:
            raise FetchFailure(self.name, f"invalid XML: {exc}") from exc
        return [
            {tag: (item.findtext(tag) or "").strip() for tag in EVENT_FIELDS}
            for item in root.iter("event")
        ]
