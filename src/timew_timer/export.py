"""Parsing of `timew export` output."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .errors import MalformedOutputError
from .state import TimerSnapshot
from .utils import parse_timew_timestamp, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    """One tracked interval as exported by TimeWarrior."""

    id: str
    start: datetime
    end: datetime | None
    tags: tuple[str, ...] = ()

    @property
    def is_open(self) -> bool:
        return self.end is None


def _parse_entry(entry: Any, fallback_id: int) -> Interval:
    if not isinstance(entry, dict):
        raise MalformedOutputError(f"Expected an interval object, got {type(entry).__name__}")
    try:
        start = parse_timew_timestamp(entry["start"])
        end = parse_timew_timestamp(entry["end"]) if "end" in entry else None
    except KeyError as e:
        raise MalformedOutputError(f"Interval is missing {e}") from e
    except (TypeError, ValueError) as e:
        raise MalformedOutputError(f"Bad timestamp in interval: {e}") from e

    tags = entry.get("tags", [])
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise MalformedOutputError(f"Interval tags must be a list of strings, got {tags!r}")

    # Older timew versions don't export ids; @1 is always the latest interval
    interval_id = entry.get("id", fallback_id)

    return Interval(
        id=str(interval_id),
        start=start,
        end=end,
        tags=tuple(dict.fromkeys(tags)),
    )


def parse_export(output: str) -> list[Interval]:
    """Parse the JSON printed by `timew export`.

    Args:
        output: stdout of the export command

    Returns:
        Intervals in export order (oldest first)

    Raises:
        MalformedOutputError: If the output is not a JSON array of intervals
    """
    if not output.strip():
        # Empty database
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Export is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise MalformedOutputError(f"Export must be a JSON array, got {type(data).__name__}")

    count = len(data)
    return [_parse_entry(entry, count - index) for index, entry in enumerate(data)]


def snapshot_from_intervals(intervals: list[Interval], now: datetime | None = None) -> TimerSnapshot:
    """Derive the timer snapshot from exported intervals.

    Exactly one open interval means the timer is running. More than one
    open interval should never happen in TimeWarrior; it is logged and
    treated as no timer running.
    """
    now = now or utcnow()
    open_intervals = [interval for interval in intervals if interval.is_open]

    if not open_intervals:
        return TimerSnapshot.inactive(now)

    if len(open_intervals) > 1:
        logger.warning(
            f"Tracker reports {len(open_intervals)} open intervals, treating timer as stopped",
            extra={"interval_id": ",".join(interval.id for interval in open_intervals)},
        )
        return TimerSnapshot.inactive(now)

    active = open_intervals[0]
    return TimerSnapshot.running(active.id, active.tags, active.start, now)
