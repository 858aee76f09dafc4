"""
Helper utilities for creating test fixtures and test data.

This module provides a fake clock, a builder for `timew export` output and
gateways that let tests control exactly what the tracker returns.
"""

import json
import threading
from datetime import UTC, datetime, timedelta

from timew_timer.gateway import DryRunGateway, TrackerGateway
from timew_timer.utils import format_timew_timestamp


class FakeClock:
    """Manually advanced clock, usable wherever a `clock` callable is accepted."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 9, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int | float | timedelta) -> "FakeClock":
        if not isinstance(seconds, timedelta):
            seconds = timedelta(seconds=seconds)
        self.now += seconds
        return self


class ExportBuilder:
    """
    Builder for `timew export` JSON.

    Example:
        >>> output = (ExportBuilder()
        ...     .add_interval(["work"], duration=600)
        ...     .add_open_interval(["work", "meeting"])
        ...     .build())
    """

    def __init__(self, start_time: datetime | None = None, with_ids: bool = True):
        self.current_time = start_time or datetime(2025, 1, 1, 9, 0, 0, tzinfo=UTC)
        self.with_ids = with_ids
        self.entries: list[dict] = []

    def add_interval(self, tags: list[str], duration: int = 600, gap: int = 0) -> "ExportBuilder":
        start = self.current_time + timedelta(seconds=gap)
        end = start + timedelta(seconds=duration)
        self.entries.append(
            {
                "start": format_timew_timestamp(start),
                "end": format_timew_timestamp(end),
                "tags": list(tags),
            }
        )
        self.current_time = end
        return self

    def add_open_interval(self, tags: list[str], gap: int = 0) -> "ExportBuilder":
        start = self.current_time + timedelta(seconds=gap)
        self.entries.append({"start": format_timew_timestamp(start), "tags": list(tags)})
        self.current_time = start
        return self

    def build(self) -> str:
        entries = []
        count = len(self.entries)
        for index, entry in enumerate(self.entries):
            entry = dict(entry)
            if self.with_ids:
                entry = {"id": count - index, **entry}
            entries.append(entry)
        return json.dumps(entries)


class ScriptedGateway(TrackerGateway):
    """Gateway returning canned export output.

    `export_output` is returned for every export; an exception placed in
    `errors[command]` is raised instead of answering that command.
    """

    def __init__(self, export_output: str = "[]"):
        super().__init__()
        self.export_output = export_output
        self.errors: dict[str, Exception] = {}
        self.calls: list[list[str]] = []

    def _execute(self, args: list[str]) -> str:
        self.calls.append(args)
        if args[0] in self.errors:
            raise self.errors[args[0]]
        if args[0] == "export":
            return self.export_output
        if args[0] == "--version":
            return "1.7.1\n"
        return ""


class BlockingGateway(DryRunGateway):
    """DryRunGateway that holds one command until the test releases it.

    With read_first=True the command runs before blocking, so a blocked
    export has already read the tracker's data.
    """

    def __init__(self, block_on: str, read_first: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.block_on = block_on
        self.read_first = read_first
        self.entered = threading.Event()
        self.release = threading.Event()
        self.counts: dict[str, int] = {}

    def _execute(self, args: list[str]) -> str:
        command = args[0] if args else ""
        self.counts[command] = self.counts.get(command, 0) + 1
        if command != self.block_on:
            return super()._execute(args)
        output = super()._execute(args) if self.read_first else None
        self.entered.set()
        assert self.release.wait(5), "test never released the gateway"
        return output if self.read_first else super()._execute(args)
