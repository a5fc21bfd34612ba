"""Build the published calendar document and write it atomically.

Readers open the snapshot file without any locking, so the only write
path is: serialize into a temporary file in the same directory, then
``os.replace`` it over the published name.  A reader sees either the
whole previous document or the whole new one.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from .config import SOURCE_NAME
from .errors import PublishFailure
from .models import CalendarEvent


def now_utc_iso(now: datetime | None = None) -> str:
    """Current UTC time as ``YYYY-MM-DDTHH:MM:SSZ``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def sort_events(events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """Stable ascending sort by epoch."""
    return sorted(events, key=lambda ev: ev.epoch)


def count_duplicate_ids(events: Iterable[CalendarEvent]) -> int:
    """Number of ids that occur more than once."""
    return sum(1 for n in Counter(ev.id for ev in events).values() if n > 1)


def build_document(
    events: Iterable[CalendarEvent],
    *,
    generated_at_utc: str,
    source: str = SOURCE_NAME,
    extra_meta: dict | None = None,
) -> dict:
    """Assemble a ``{meta, events}`` document with events sorted by epoch.

    Only complete events are included; ``meta.count`` always matches.
    """
    ordered = sort_events(ev for ev in events if ev.is_complete)
    meta: dict = {
        "generated_at_utc": generated_at_utc,
        "source": source,
        "count": len(ordered),
    }
    if extra_meta:
        meta.update(extra_meta)
    return {"meta": meta, "events": [ev.to_dict() for ev in ordered]}


def _file_mode() -> int:
    """Mode a plain ``open()`` would give a new file under the current umask."""
    mask = os.umask(0)
    os.umask(mask)
    return 0o666 & ~mask


def atomic_write_json(path: str | os.PathLike, obj) -> None:
    """Write *obj* as JSON to *path* via temp file + rename.

    Raises :class:`PublishFailure` on any I/O error; the previously
    published file is left as it was.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".tmp-{os.getpid()}-", suffix=".json", dir=target.parent,
        )
    except OSError as exc:
        raise PublishFailure(f"cannot create temp file next to {target}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            # Readers may be other users: umask default, not mkstemp's 0600.
            os.fchmod(fh.fileno(), _file_mode())
            json.dump(obj, fh, ensure_ascii=False, separators=(",", ":"))
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except (OSError, TypeError, ValueError) as exc:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise PublishFailure(f"cannot publish {target}: {exc}") from exc


def publish(document: dict, path: str | os.PathLike) -> None:
    """Publish *document* at *path*, replacing the previous snapshot."""
    events = document.get("events")
    meta = document.get("meta")
    if not isinstance(events, list) or not isinstance(meta, dict):
        raise PublishFailure("document must have a meta object and an events list")
    if meta.get("count") != len(events):
        raise PublishFailure(
            f"meta.count={meta.get('count')} does not match {len(events)} events"
        )
    atomic_write_json(path, document)
