"""Tests for shared helpers."""

from datetime import UTC, datetime

import pytest

from timew_timer.utils import format_elapsed, format_timew_timestamp, parse_timew_timestamp, ts2strtime


class TestTimewTimestamps:
    def test_parse(self) -> None:
        assert parse_timew_timestamp("20250101T120000Z") == datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def test_parse_rejects_other_formats(self) -> None:
        with pytest.raises(ValueError):
            parse_timew_timestamp("2025-01-01T12:00:00Z")

    def test_format_converts_to_utc(self) -> None:
        from datetime import timedelta, timezone

        ts = datetime(2025, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timew_timestamp(ts) == "20250101T120000Z"


class TestFormatElapsed:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0:00:00"), (59, "0:00:59"), (61, "0:01:01"), (3600, "1:00:00"), (90061, "25:01:01"), (-5, "0:00:00")],
    )
    def test_format(self, seconds: int, expected: str) -> None:
        assert format_elapsed(seconds) == expected


def test_ts2strtime_none() -> None:
    assert ts2strtime(None) == "XX:XX:XX"
