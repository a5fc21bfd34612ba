"""Health, status and metrics payloads for the serving side.

These are computed from the published snapshot and the ingest log only,
so any front end (or a cron check via ``ffnews-status``) gets the same
answer the API would.
"""

from __future__ import annotations

import argparse
import json
import math
import sys
import time
from datetime import datetime

from .config import Settings
from .consumer import cache_freshness, safe_read_json
from .runlog import scan_tail
from .snapshot import now_utc_iso

_STARTED_AT = time.monotonic()


def uptime_seconds() -> int:
    return math.floor(time.monotonic() - _STARTED_AT)


def health(settings: Settings, now: float | None = None) -> tuple[int, dict]:
    """``(http_code, body)``: 200/ok when fresh, 503/degraded when stale."""
    cache = cache_freshness(
        settings.cache_file, settings.refresh_seconds, settings.stale_grace_seconds, now,
    )
    body = {
        "status": "degraded" if cache["stale"] else "ok",
        "time_utc": now_utc_iso(),
        "cache": cache,
    }
    return (503 if cache["stale"] else 200), body


def status(settings: Settings, now: float | None = None) -> dict:
    cache = cache_freshness(
        settings.cache_file, settings.refresh_seconds, settings.stale_grace_seconds, now,
    )
    ok, data, err = safe_read_json(settings.cache_file)
    generated_at = None
    if ok and isinstance(data, dict) and isinstance(data.get("meta"), dict):
        generated_at = data["meta"].get("generated_at_utc")
    ingest = scan_tail(settings.ingest_log_file, settings.log_tail_lines)

    return {
        "status": "ok",
        "time_utc": now_utc_iso(),
        "uptime_sec": uptime_seconds(),
        "cache": {
            "path": settings.cache_file,
            "exists": cache["exists"],
            "bytes": cache["bytes"],
            "mtime_utc": cache["mtime_utc"],
            "age_sec": cache["age_sec"],
            "refresh_seconds": cache["refresh_seconds"],
            "stale_grace_seconds": cache["stale_grace_seconds"],
            "stale": cache["stale"],
            "json_read_ok": ok,
            "json_error": err,
        },
        "ingest": {
            "generated_at_utc": generated_at,
            "log_ok": ingest["ok"],
            "log_error": ingest["error"],
            "last_ok_utc": ingest["last_ok_utc"],
            "last_error_utc": ingest["last_error_utc"],
            "last_error_msg": ingest["last_error_msg"],
        },
    }


def _utc_to_epoch(value: str | None) -> int:
    if not value:
        return 0
    try:
        return math.floor(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except ValueError:
        return 0


def render_metrics(settings: Settings, now: float | None = None) -> str:
    """Plaintext exposition (``text/plain; version=0.0.4``)."""
    cache = cache_freshness(
        settings.cache_file, settings.refresh_seconds, settings.stale_grace_seconds, now,
    )
    ok, data, _ = safe_read_json(settings.cache_file)
    count = 0
    if ok and isinstance(data, dict) and isinstance(data.get("events"), list):
        count = len(data["events"])
    ingest = scan_tail(settings.ingest_log_file, settings.log_tail_lines)

    lines = [
        f"ffnews_cache_age_seconds {cache['age_sec'] or 0}",
        f"ffnews_cache_events_count {count}",
        f"ffnews_ingest_last_ok_epoch {_utc_to_epoch(ingest['last_ok_utc'])}",
        f"ffnews_service_uptime_seconds {uptime_seconds()}",
    ]
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="ffnews-status",
        description="Report snapshot freshness; exits non-zero when stale.",
    )
    parser.add_argument(
        "--format", choices=("health", "status", "metrics"), default="health",
    )
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    code, body = health(settings)
    if args.format == "metrics":
        sys.stdout.write(render_metrics(settings))
    elif args.format == "status":
        print(json.dumps(status(settings), indent=2))
    else:
        print(json.dumps(body, indent=2))
    sys.exit(0 if code == 200 else 1)


if __name__ == "__main__":
    main()
