"""Tests for health / status / metrics payloads."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from ffnews import status as status_mod
from ffnews.config import Settings

NOW = 1_709_645_400.0


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        cache_file=str(tmp_path / "latest.json"),
        ingest_log_file=str(tmp_path / "ingest.log"),
    )


def _publish(settings: Settings, n_events: int, age: float) -> None:
    doc = {
        "meta": {"generated_at_utc": "2024-03-05T13:25:00Z", "source": "x", "count": n_events},
        "events": [{"id": str(i)} for i in range(n_events)],
    }
    path = Path(settings.cache_file)
    path.write_text(json.dumps(doc))
    os.utime(path, (NOW - age, NOW - age))


class TestHealth:
    def test_ok_when_fresh(self, settings: Settings) -> None:
        _publish(settings, 2, age=30)
        code, body = status_mod.health(settings, now=NOW)
        assert code == 200
        assert body["status"] == "ok"
        assert body["cache"]["age_sec"] == 30

    def test_degraded_when_stale(self, settings: Settings) -> None:
        _publish(settings, 2, age=361)
        code, body = status_mod.health(settings, now=NOW)
        assert code == 503
        assert body["status"] == "degraded"

    def test_degraded_when_missing(self, settings: Settings) -> None:
        code, body = status_mod.health(settings, now=NOW)
        assert code == 503
        assert body["cache"]["exists"] is False


class TestStatus:
    def test_combines_cache_and_log(self, settings: Settings) -> None:
        _publish(settings, 2, age=30)
        Path(settings.ingest_log_file).write_text(
            "2024-03-05T13:20:00Z ingest_error err=ff_json: HTTP 500\n"
            "2024-03-05T13:25:00Z ingest_ok count=2\n"
        )
        body = status_mod.status(settings, now=NOW)
        assert body["cache"]["json_read_ok"] is True
        assert body["cache"]["stale"] is False
        assert body["ingest"]["generated_at_utc"] == "2024-03-05T13:25:00Z"
        assert body["ingest"]["last_ok_utc"] == "2024-03-05T13:25:00Z"
        assert body["ingest"]["last_error_msg"] == "ff_json: HTTP 500"
        assert body["uptime_sec"] >= 0

    def test_unreadable_cache(self, settings: Settings) -> None:
        Path(settings.cache_file).write_text("{not json")
        body = status_mod.status(settings, now=NOW)
        assert body["cache"]["json_read_ok"] is False
        assert body["cache"]["json_error"]
        assert body["ingest"]["log_ok"] is False


class TestMetrics:
    def test_exposition(self, settings: Settings) -> None:
        _publish(settings, 3, age=42)
        Path(settings.ingest_log_file).write_text("2023-11-14T22:13:20Z ingest_ok count=3\n")
        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(status_mod, "uptime_seconds", lambda: 7)
            text = status_mod.render_metrics(settings, now=NOW)
        assert text == (
            "ffnews_cache_age_seconds 42\n"
            "ffnews_cache_events_count 3\n"
            "ffnews_ingest_last_ok_epoch 1700000000\n"
            "ffnews_service_uptime_seconds 7\n"
        )

    def test_missing_everything(self, settings: Settings) -> None:
        text = status_mod.render_metrics(settings, now=NOW)
        assert "ffnews_cache_age_seconds 0\n" in text
        assert "ffnews_cache_events_count 0\n" in text
        assert "ffnews_ingest_last_ok_epoch 0\n" in text


class TestMain:
    def test_exit_code_follows_freshness(self, settings: Settings, monkeypatch, capsys) -> None:
        monkeypatch.setattr(status_mod.Settings, "from_env", classmethod(lambda cls: settings))
        with pytest.raises(SystemExit) as info:
            status_mod.main(["--format", "health"])
        assert info.value.code == 1
        assert json.loads(capsys.readouterr().out)["status"] == "degraded"
