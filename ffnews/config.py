"""Deployment configuration.

Defaults live in the constants below; :meth:`Settings.from_env` overlays
environment variables after loading an optional dotenv file
(``FFNEWS_ENV_FILE``, default ``.env``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .errors import ConfigError

# ---------------------------------------------------------------------------
# Configuration constants
# ---------------------------------------------------------------------------
SOURCE_NAME = "ForexFactory calendar"
USER_AGENT = "ff-news-ingest/1.0"

DEFAULT_CACHE_FILE = "/opt/ff-news/cache/latest.json"
DEFAULT_INGEST_LOG_FILE = "/opt/ff-news/logs/ingest.log"
DEFAULT_FF_JSON_URL = "https://nfs.faireconomy.media/ff_calendar_thisweek.json"
DEFAULT_FF_XML_URL = "https://nfs.faireconomy.media/ff_calendar_thisweek.xml"

# Naive date/time fields in the feed are published in this zone.
DEFAULT_SOURCE_TZ = "America/New_York"

DEFAULT_FETCH_TIMEOUT = 20        # seconds, per request
DEFAULT_REFRESH_SECONDS = 300     # expected ingest cadence
DEFAULT_STALE_GRACE_SECONDS = 60

DEFAULT_LOG_TAIL_LINES = 300
LOG_TAIL_MIN_LINES = 10
LOG_TAIL_MAX_LINES = 2000

# Contract impact level → EA bucket.  Holidays block trading like High
# events; anything unrecognised degrades to Low so the EA keeps running.
EA_IMPACT_BUCKETS: dict[str, str] = {
    "high": "High",
    "holiday": "High",
    "medium": "Medium",
    "low": "Low",
    "unknown": "Low",
}
EA_IMPACT_DEFAULT = "Low"


def clamp_int(value, lo: int, hi: int) -> int:
    """Clamp *value* into ``[lo, hi]``; non-integers collapse to *lo*."""
    if isinstance(value, bool) or not isinstance(value, int):
        return lo
    return max(lo, min(hi, value))


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True, slots=True)
class Settings:
    cache_file: str = DEFAULT_CACHE_FILE
    ingest_log_file: str = DEFAULT_INGEST_LOG_FILE
    ff_json_url: str = DEFAULT_FF_JSON_URL
    ff_xml_url: str = DEFAULT_FF_XML_URL
    source_tz: str = DEFAULT_SOURCE_TZ
    fetch_timeout: int = DEFAULT_FETCH_TIMEOUT
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS
    stale_grace_seconds: int = DEFAULT_STALE_GRACE_SECONDS
    log_tail_lines: int = DEFAULT_LOG_TAIL_LINES

    @property
    def stale_after_seconds(self) -> int:
        return self.refresh_seconds + self.stale_grace_seconds

    @classmethod
    def from_env(cls, env_file: str | None = None) -> Settings:
        """Build settings from the process environment.

        Variables already present in the environment take precedence over
        the dotenv file.
        """
        load_dotenv(env_file or os.environ.get("FFNEWS_ENV_FILE", ".env"))
        return cls(
            cache_file=os.environ.get("CACHE_FILE") or DEFAULT_CACHE_FILE,
            ingest_log_file=os.environ.get("INGEST_LOG_FILE") or DEFAULT_INGEST_LOG_FILE,
            ff_json_url=os.environ.get("FF_JSON_URL") or DEFAULT_FF_JSON_URL,
            ff_xml_url=os.environ.get("FF_XML_URL") or DEFAULT_FF_XML_URL,
            source_tz=os.environ.get("SOURCE_TZ") or DEFAULT_SOURCE_TZ,
            fetch_timeout=_env_int("FETCH_TIMEOUT_SECONDS", DEFAULT_FETCH_TIMEOUT),
            refresh_seconds=_env_int("REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS),
            stale_grace_seconds=_env_int("STALE_GRACE_SECONDS", DEFAULT_STALE_GRACE_SECONDS),
            log_tail_lines=clamp_int(
                _env_int("INGEST_LOG_TAIL_LINES", DEFAULT_LOG_TAIL_LINES),
                LOG_TAIL_MIN_LINES,
                LOG_TAIL_MAX_LINES,
            ),
        )
