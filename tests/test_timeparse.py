"""Tests for UTC instant resolution.

Run with:  python -m pytest tests/ -v
"""

from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from ffnews.errors import ConfigError
from ffnews.timeparse import (
    UNRESOLVED,
    parse_date_time,
    parse_epoch_field,
    parse_iso,
    resolve_instant,
    source_zone,
)

NY = ZoneInfo("America/New_York")


class TestEpochField:
    def test_seconds_passthrough(self) -> None:
        assert parse_epoch_field({"epoch": 1700000000}) == 1700000000

    def test_milliseconds_are_floored_to_seconds(self) -> None:
        assert parse_epoch_field({"timestamp": 1700000000999}) == 1700000000

    def test_digit_string(self) -> None:
        assert parse_epoch_field({"unixtime": "1700000000000"}) == 1700000000

    def test_float_is_floored(self) -> None:
        assert parse_epoch_field({"unix": 1700000000.9}) == 1700000000

    def test_rejects_non_positive_bool_and_junk(self) -> None:
        assert parse_epoch_field({"epoch": 0}) is None
        assert parse_epoch_field({"epoch": -5}) is None
        assert parse_epoch_field({"epoch": True}) is None
        assert parse_epoch_field({"epoch": "17e8"}) is None
        assert parse_epoch_field({"epoch": float("nan")}) is None

    def test_zero_string_is_rejected_like_zero(self) -> None:
        assert parse_epoch_field({"epoch": "0"}) is None
        assert parse_epoch_field({"epoch": "000"}) is None

    @pytest.mark.parametrize("value", ["\u00b2", "\u0661\u0662\u0663", "\uff11\uff12"])
    def test_non_ascii_digits_are_not_epochs(self, value: str) -> None:
        assert parse_epoch_field({"epoch": value}) is None

    def test_alias_order(self) -> None:
        raw = {"timestamp": 1600000000, "epoch": 1700000000}
        assert parse_epoch_field(raw) == 1700000000


class TestIso:
    def test_offset_is_respected(self) -> None:
        inst = parse_iso("2026-02-20T08:30:00-05:00", NY)
        assert inst.iso_utc == "2026-02-20T13:30:00Z"

    def test_zulu_suffix(self) -> None:
        inst = parse_iso("2023-11-14T22:13:20Z", NY)
        assert inst.epoch == 1700000000

    def test_naive_iso_uses_source_zone(self) -> None:
        inst = parse_iso("2024-03-05T08:30:00", NY)
        assert inst.iso_utc == "2024-03-05T13:30:00Z"

    def test_milliseconds_are_dropped_from_output(self) -> None:
        inst = parse_iso("2024-03-05T13:30:00.250+00:00", NY)
        assert inst.iso_utc == "2024-03-05T13:30:00Z"
        assert inst.epoch == 1709645400

    @pytest.mark.parametrize(
        "value", ["0001-01-01T00:00:00+01:00", "9999-12-31T23:00:00-05:00"],
    )
    def test_out_of_utc_range(self, value: str) -> None:
        assert parse_iso(value, NY) == UNRESOLVED

    def test_garbage(self) -> None:
        assert parse_iso("2024-13-45Tnope", NY) == UNRESOLVED


class TestDateTime:
    """Split date + time pairs are read in the source zone."""

    def test_twelve_hour_in_winter(self) -> None:
        inst = parse_date_time("2024-03-05", "8:30am", NY)
        assert inst.epoch == 1709645400
        assert inst.iso_utc == "2024-03-05T13:30:00Z"

    def test_twelve_hour_in_summer(self) -> None:
        inst = parse_date_time("2024-07-04", "2:00pm", NY)
        assert inst.iso_utc == "2024-07-04T18:00:00Z"

    def test_month_first_dash(self) -> None:
        inst = parse_date_time("03-05-2024", "8:30am", NY)
        assert inst.iso_utc == "2024-03-05T13:30:00Z"

    def test_month_first_slash_and_bare_hour(self) -> None:
        inst = parse_date_time("03/05/2024", "8am", NY)
        assert inst.iso_utc == "2024-03-05T13:00:00Z"

    def test_twenty_four_hour(self) -> None:
        inst = parse_date_time("2024-03-05", "13:00", NY)
        assert inst.iso_utc == "2024-03-05T18:00:00Z"

    @pytest.mark.parametrize("token", ["All Day", "all-day", "Tentative", "N/A", ""])
    def test_no_specific_time_means_local_midnight(self, token: str) -> None:
        inst = parse_date_time("03-05-2024", token, NY)
        assert inst.iso_utc == "2024-03-05T05:00:00Z"
        assert inst.epoch == 1709614800

    def test_missing_date(self) -> None:
        assert parse_date_time("", "8:30am", NY) == UNRESOLVED

    def test_unknown_time_format(self) -> None:
        assert parse_date_time("2024-03-05", "half past eight", NY) == UNRESOLVED

    def test_last_representable_day_overflows_utc(self) -> None:
        assert parse_date_time("12-31-9999", "11:00pm", NY) == UNRESOLVED


class TestResolveInstant:
    def test_epoch_field_wins_over_date(self) -> None:
        raw = {"epoch": 1700000000000, "date": "2024-03-05T08:30:00-05:00"}
        inst = resolve_instant(raw, NY)
        assert inst.epoch == 1700000000
        assert inst.iso_utc == "2023-11-14T22:13:20Z"

    def test_iso_date_field(self) -> None:
        raw = {"date": "2026-02-20T08:30:00-05:00"}
        assert resolve_instant(raw, NY).epoch == 1771594200

    def test_split_fields(self) -> None:
        raw = {"date": "03-08-2024", "time": "8:30am"}
        assert resolve_instant(raw, NY).epoch == 1709904600

    def test_unresolvable(self) -> None:
        assert resolve_instant({"date": "soon", "time": "later"}, NY) == UNRESOLVED
        assert resolve_instant({}, NY) == UNRESOLVED

    def test_out_of_range_epoch(self) -> None:
        assert resolve_instant({"epoch": 900000000000}, NY) == UNRESOLVED

    def test_zero_epoch_string_falls_through_to_date(self) -> None:
        raw = {"epoch": "0", "date": "2024-03-05", "time": "8:30am"}
        assert resolve_instant(raw, NY).epoch == 1709645400

    def test_superscript_epoch_falls_through_to_date(self) -> None:
        raw = {"epoch": "\u00b2", "date": "2024-03-05", "time": "8:30am"}
        assert resolve_instant(raw, NY).epoch == 1709645400

    def test_default_zone(self) -> None:
        raw = {"date": "2024-03-05", "time": "8:30am"}
        assert resolve_instant(raw).epoch == 1709645400


def test_unknown_zone_is_config_error() -> None:
    with pytest.raises(ConfigError):
        source_zone("Mars/Olympus_Mons")
