"""Append-only ingest run log.

One line per run::

    2024-03-05T13:30:00Z ingest_ok count=87
    2024-03-05T13:35:00Z ingest_error err=primary failed (...)

The writer only appends.  :func:`scan_tail` is the reader used by the
serving side to find the latest success and failure markers.
"""

from __future__ import annotations

import os
import sys
from collections import deque
from pathlib import Path

from .config import DEFAULT_LOG_TAIL_LINES, LOG_TAIL_MAX_LINES, LOG_TAIL_MIN_LINES, clamp_int

OK_MARKER = "ingest_ok"
ERROR_MARKER = "ingest_error"


def format_outcome(timestamp: str, ok: bool, detail) -> str:
    if ok:
        return f"{timestamp} {OK_MARKER} count={int(detail)}"
    # Keep the entry on a single line.
    msg = " ".join(str(detail).split())
    return f"{timestamp} {ERROR_MARKER} err={msg}"


def append_line(path: str | os.PathLike, line: str) -> bool:
    """Append *line* to the log, creating parent directories as needed.

    Returns ``False`` (after reporting on stderr) if the log cannot be
    written; a broken log must not fail the run.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
    except OSError as exc:
        print(f"[runlog] cannot append to {target}: {exc}", file=sys.stderr)
        return False
    return True


def log_outcome(path: str | os.PathLike, timestamp: str, ok: bool, detail) -> bool:
    """Record one run: *detail* is the event count on success, else the error."""
    return append_line(path, format_outcome(timestamp, ok, detail))


def scan_tail(path: str | os.PathLike, max_lines: int = DEFAULT_LOG_TAIL_LINES) -> dict:
    """Find the most recent ok / error entries within the last *max_lines*.

    *max_lines* is clamped to ``[10, 2000]``.
    """
    max_lines = clamp_int(max_lines, LOG_TAIL_MIN_LINES, LOG_TAIL_MAX_LINES)
    result = {
        "ok": False,
        "error": None,
        "last_ok_utc": None,
        "last_error_utc": None,
        "last_error_msg": None,
    }
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            tail = deque((ln.rstrip("\n") for ln in fh), maxlen=max_lines)
    except OSError as exc:
        result["error"] = str(exc)
        return result

    result["ok"] = True
    for line in reversed(tail):
        if result["last_ok_utc"] is None and f" {OK_MARKER} " in line:
            result["last_ok_utc"] = line.split(" ", 1)[0] or None
        if result["last_error_utc"] is None and f" {ERROR_MARKER} " in line:
            result["last_error_utc"] = line.split(" ", 1)[0] or None
            idx = line.find("err=")
            if idx >= 0:
                result["last_error_msg"] = line[idx + 4:].strip() or None
        if result["last_ok_utc"] and result["last_error_utc"]:
            break
    return result
