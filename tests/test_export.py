"""Tests for parsing `timew export` output into snapshots."""

import json
import logging
from datetime import UTC, datetime, timedelta

import pytest

from helpers import ExportBuilder
from timew_timer.errors import MalformedOutputError
from timew_timer.export import Interval, parse_export, snapshot_from_intervals

START = datetime(2025, 1, 1, 9, 0, 0, tzinfo=UTC)


class TestParseExport:
    def test_empty_output(self) -> None:
        assert parse_export("") == []
        assert parse_export("[\n]\n") == []

    def test_closed_and_open_intervals(self) -> None:
        output = ExportBuilder().add_interval(["work"], duration=600).add_open_interval(["tea"]).build()

        intervals = parse_export(output)

        assert intervals == [
            Interval(id="2", start=START, end=START + timedelta(minutes=10), tags=("work",)),
            Interval(id="1", start=START + timedelta(minutes=10), end=None, tags=("tea",)),
        ]
        assert not intervals[0].is_open
        assert intervals[1].is_open

    def test_missing_ids_fall_back_to_position(self) -> None:
        output = (
            ExportBuilder(with_ids=False)
            .add_interval(["a"])
            .add_interval(["b"])
            .add_open_interval(["c"])
            .build()
        )

        assert [interval.id for interval in parse_export(output)] == ["3", "2", "1"]

    def test_missing_tags_means_untagged(self) -> None:
        output = json.dumps([{"id": 1, "start": "20250101T090000Z"}])

        assert parse_export(output)[0].tags == ()

    def test_duplicate_tags_collapsed(self) -> None:
        output = json.dumps([{"id": 1, "start": "20250101T090000Z", "tags": ["a", "b", "a"]}])

        assert parse_export(output)[0].tags == ("a", "b")

    @pytest.mark.parametrize(
        "output",
        [
            "not json",
            '{"start": "20250101T090000Z"}',
            '[{"id": 1}]',
            '[{"id": 1, "start": "yesterday"}]',
            '[{"id": 1, "start": "20250101T090000Z", "tags": "work"}]',
            '[{"id": 1, "start": "20250101T090000Z", "tags": [1, 2]}]',
            "[42]",
        ],
    )
    def test_malformed_output(self, output: str) -> None:
        with pytest.raises(MalformedOutputError):
            parse_export(output)


class TestSnapshotFromIntervals:
    def test_no_intervals_is_idle(self) -> None:
        snapshot = snapshot_from_intervals([], now=START)

        assert not snapshot.active
        assert snapshot.id == ""
        assert snapshot.tags == ()

    def test_only_closed_intervals_is_idle(self) -> None:
        intervals = parse_export(ExportBuilder().add_interval(["work"]).build())

        assert not snapshot_from_intervals(intervals, now=START).active

    def test_single_open_interval_is_active(self) -> None:
        intervals = parse_export(
            ExportBuilder().add_interval(["old"]).add_open_interval(["work", "project"]).build()
        )
        now = START + timedelta(minutes=15)

        snapshot = snapshot_from_intervals(intervals, now=now)

        assert snapshot.active
        assert snapshot.id == "1"
        assert snapshot.tags == ("work", "project")
        assert snapshot.started_at == START + timedelta(minutes=10)
        assert snapshot.elapsed_seconds == 300

    def test_several_open_intervals_is_idle(self, caplog) -> None:
        caplog.set_level(logging.WARNING)
        output = json.dumps(
            [
                {"id": 2, "start": "20250101T090000Z", "tags": ["a"]},
                {"id": 1, "start": "20250101T100000Z", "tags": ["b"]},
            ]
        )

        snapshot = snapshot_from_intervals(parse_export(output), now=START)

        assert not snapshot.active
        assert snapshot.tags == ()
        assert "2 open intervals" in caplog.text
