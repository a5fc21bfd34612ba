"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from ffnews.config import Settings, clamp_int
from ffnews.errors import ConfigError

_VARS = (
    "CACHE_FILE", "INGEST_LOG_FILE", "FF_JSON_URL", "FF_XML_URL", "SOURCE_TZ",
    "FETCH_TIMEOUT_SECONDS", "REFRESH_SECONDS", "STALE_GRACE_SECONDS",
    "INGEST_LOG_TAIL_LINES",
)


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so the variable is removed again on teardown even if
    # load_dotenv sets it during the test.
    for name in _VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env, tmp_path: Path) -> None:
    s = Settings.from_env(str(tmp_path / "missing.env"))
    assert s == Settings()
    assert s.stale_after_seconds == 360
    assert s.source_tz == "America/New_York"


def test_environment_overrides(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("CACHE_FILE", "/tmp/ff/latest.json")
    clean_env.setenv("REFRESH_SECONDS", "600")
    clean_env.setenv("INGEST_LOG_TAIL_LINES", "5000")
    s = Settings.from_env(str(tmp_path / "missing.env"))
    assert s.cache_file == "/tmp/ff/latest.json"
    assert s.refresh_seconds == 600
    assert s.log_tail_lines == 2000


def test_dotenv_file(clean_env, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("SOURCE_TZ=Europe/London\nSTALE_GRACE_SECONDS=90\n")
    clean_env.setenv("STALE_GRACE_SECONDS", "30")
    s = Settings.from_env(str(env_file))
    assert s.source_tz == "Europe/London"
    # process environment wins over the file
    assert s.stale_grace_seconds == 30


def test_bad_integer(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("FETCH_TIMEOUT_SECONDS", "twenty")
    with pytest.raises(ConfigError, match="FETCH_TIMEOUT_SECONDS"):
        Settings.from_env(str(tmp_path / "missing.env"))


@pytest.mark.parametrize(
    ("value", "expected"),
    [(300, 300), (1, 10), (99999, 2000), ("300", 10), (None, 10), (True, 10)],
)
def test_clamp_int(value, expected: int) -> None:
    assert clamp_int(value, 10, 2000) == expected
