"""Ingest the ForexFactory weekly calendar into the published snapshot.

One run: fetch the JSON feed (falling back to the XML feed), sort the
accepted events by time, publish the snapshot atomically and append one
line to the ingest log.  A failed run leaves the previous snapshot in
place, so its age keeps telling the truth.

Runs are expected not to overlap; there is no lock between them.
"""

from __future__ import annotations

import sys
from datetime import datetime

from .config import SOURCE_NAME, Settings
from .errors import FFNewsError
from .fetchers import BaseFetcher, build_fetchers, fetch_with_fallback
from .runlog import log_outcome
from .snapshot import build_document, count_duplicate_ids, now_utc_iso, publish


def run(
    settings: Settings,
    fetchers: tuple[BaseFetcher, BaseFetcher] | None = None,
    now: datetime | None = None,
) -> int:
    """Execute one ingest run and return the process exit code."""
    ts = now_utc_iso(now)

    try:
        primary, secondary = fetchers or build_fetchers(settings)
        outcome = fetch_with_fallback(primary, secondary)
        batch = outcome.batch
        print(f"[ingest] {batch.source}: {len(batch.events)} events ({batch.dropped} dropped)")

        duplicates = count_duplicate_ids(batch.events)
        if duplicates:
            print(f"[ingest] {duplicates} event ids are shared by more than one event")

        extra_meta = {
            "feed": batch.source,
            "raw_count": batch.raw_count,
            "dropped": batch.dropped,
            "duplicate_ids": duplicates,
        }
        if outcome.used_fallback:
            extra_meta["fallback_reason"] = str(outcome.primary_error)

        document = build_document(
            batch.events, generated_at_utc=ts, source=SOURCE_NAME, extra_meta=extra_meta,
        )
        publish(document, settings.cache_file)
    except FFNewsError as exc:
        print(f"[ingest] failed: {exc}", file=sys.stderr)
        log_outcome(settings.ingest_log_file, ts, False, exc)
        return 1
    except Exception as exc:
        log_outcome(settings.ingest_log_file, ts, False, f"{type(exc).__name__}: {exc}")
        raise

    log_outcome(settings.ingest_log_file, ts, True, document["meta"]["count"])
    print(f"[ingest] published {document['meta']['count']} events to {settings.cache_file}")
    return 0


def main() -> None:
    try:
        settings = Settings.from_env()
    except FFNewsError as exc:
        print(f"[ingest] configuration error: {exc}", file=sys.stderr)
        sys.exit(2)
    sys.exit(run(settings))


if __name__ == "__main__":
    main()
