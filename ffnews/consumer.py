"""Read side of the snapshot contract.

Every call re-reads the published file; nothing is cached in memory, so
freshness is always measured against the file as it is right now.
Reads never raise: a missing or corrupt snapshot becomes an empty,
well-formed document carrying ``meta.error``.
"""

from __future__ import annotations

import json
import math
import os
import time
from datetime import datetime, timezone

from .config import (
    DEFAULT_REFRESH_SECONDS,
    DEFAULT_STALE_GRACE_SECONDS,
    EA_IMPACT_BUCKETS,
    EA_IMPACT_DEFAULT,
    SOURCE_NAME,
)
from .snapshot import now_utc_iso


# ---------------------------------------------------------------------------
# File-system view
# ---------------------------------------------------------------------------

def file_stat(path: str | os.PathLike, now: float | None = None) -> dict:
    """Existence, size, mtime and whole-second age of *path*."""
    now = time.time() if now is None else now
    try:
        st = os.stat(path)
    except OSError:
        return {"exists": False, "bytes": 0, "mtime_utc": None, "age_sec": None}
    mtime = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
    return {
        "exists": True,
        "bytes": st.st_size,
        "mtime_utc": now_utc_iso(mtime),
        "age_sec": max(0, math.floor(now - st.st_mtime)),
    }


def is_stale(
    stat: dict,
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
    grace_seconds: int = DEFAULT_STALE_GRACE_SECONDS,
) -> bool:
    age = stat.get("age_sec")
    if not stat.get("exists") or not isinstance(age, int):
        return True
    return age > refresh_seconds + grace_seconds


def cache_freshness(
    path: str | os.PathLike,
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
    grace_seconds: int = DEFAULT_STALE_GRACE_SECONDS,
    now: float | None = None,
) -> dict:
    st = file_stat(path, now)
    return {
        **st,
        "refresh_seconds": refresh_seconds,
        "stale_grace_seconds": grace_seconds,
        "stale": is_stale(st, refresh_seconds, grace_seconds),
    }


# ---------------------------------------------------------------------------
# Reading and repair
# ---------------------------------------------------------------------------

def safe_read_json(path: str | os.PathLike) -> tuple[bool, object, str | None]:
    """Return ``(ok, data, error)``; an empty file reads as ``{}``."""
    try:
        with open(path, encoding="utf-8") as fh:
            raw = fh.read()
        return True, json.loads(raw or "{}"), None
    except (OSError, ValueError, RecursionError) as exc:
        return False, None, str(exc)


def repair_document(
    data,
    stat: dict,
    cache_file: str,
    read_error: str | None = None,
    source: str = SOURCE_NAME,
) -> dict:
    """Coerce whatever was read into a ``{meta, events}`` document.

    The live file-system fields (``cache_file``, ``cache_exists``,
    ``cache_mtime_utc``, ``cache_age_sec``) always overwrite stored ones.
    """
    live = {
        "cache_file": cache_file,
        "cache_exists": stat["exists"],
        "cache_mtime_utc": stat["mtime_utc"],
        "cache_age_sec": stat["age_sec"],
    }

    if read_error is not None or data is None:
        meta = {
            "generated_at_utc": now_utc_iso(),
            "source": source,
            "count": 0,
            **live,
            "error": read_error or "unknown",
        }
        return {"meta": meta, "events": []}

    if isinstance(data, list):
        meta = {
            "generated_at_utc": now_utc_iso(),
            "source": source,
            "count": len(data),
            **live,
            "note": "cache_was_array_wrapped",
        }
        return {"meta": meta, "events": data}

    doc = dict(data) if isinstance(data, dict) else {}
    meta = dict(doc.get("meta")) if isinstance(doc.get("meta"), dict) else {}
    events = doc.get("events") if isinstance(doc.get("events"), list) else []

    if not meta.get("generated_at_utc"):
        meta["generated_at_utc"] = now_utc_iso()
    if not meta.get("source"):
        meta["source"] = source
    count = meta.get("count")
    if isinstance(count, bool) or not isinstance(count, int):
        meta["count"] = len(events)
    meta.update(live)

    doc["meta"] = meta
    doc["events"] = events
    return doc


def read_snapshot(path: str | os.PathLike, now: float | None = None) -> dict:
    """Read the published snapshot; never raises."""
    stat = file_stat(path, now)
    ok, data, err = safe_read_json(path)
    return repair_document(data if ok else None, stat, str(path), None if ok else err)


def build_calendar_response(path: str | os.PathLike, now: float | None = None) -> tuple[int, dict]:
    """``(200, document)`` or ``(503, degraded document)`` when the read failed."""
    doc = read_snapshot(path, now)
    return (503 if "error" in doc["meta"] else 200), doc


# ---------------------------------------------------------------------------
# EA projection
# ---------------------------------------------------------------------------

def impact_for_ea(impact) -> str:
    """Re-bucket a contract impact level into the EA's High/Medium/Low.

    Lossy on purpose: holidays block like High events and unknown levels
    fall back to Low.
    """
    return EA_IMPACT_BUCKETS.get(str(impact or "").strip().lower(), EA_IMPACT_DEFAULT)


def _iso_to_epoch(value) -> int | None:
    if not isinstance(value, str) or not value.strip():
        return None
    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return math.floor(dt.timestamp())
    except (OverflowError, ValueError):
        return None


def event_epoch(event: dict) -> int | None:
    """Epoch of a stored event: numeric, digit string, or from ``datetime_utc``."""
    value = event.get("epoch")
    if isinstance(value, bool):
        value = None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return math.floor(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return _iso_to_epoch(event.get("datetime_utc"))


def project_minimal(document) -> list[dict]:
    """Flatten a document (or legacy bare array) into the EA array.

    Items are ``{currency, impact, title, epoch}`` sorted by epoch.  Events
    without currency, title or a resolvable epoch are skipped.
    """
    if isinstance(document, list):
        events = document
    elif isinstance(document, dict) and isinstance(document.get("events"), list):
        events = document["events"]
    else:
        events = []

    out: list[dict] = []
    for ev in events:
        if not isinstance(ev, dict):
            continue
        currency = str(ev.get("currency") or "").strip()
        title = str(ev.get("title") or ev.get("event") or "").strip()
        epoch = event_epoch(ev)
        if not currency or not title or epoch is None:
            continue
        out.append({
            "currency": currency,
            "impact": impact_for_ea(ev.get("impact")),
            "title": title,
            "epoch": epoch,
        })

    out.sort(key=lambda item: item["epoch"])
    return out
