"""Abstract interface for the tracker process gateway.

The gateway is the only component that talks to the outside world.
Everything else in timew-timer works against this interface, so a
DryRunGateway can stand in for TimeWarrior in tests and dry runs.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import datetime

from .errors import BinaryUnavailableError, CommandFailedError, GatewayError
from .utils import format_timew_timestamp, utcnow

logger = logging.getLogger(__name__)


class TrackerGateway(ABC):
    """Base class for tracker backends.

    Subclasses implement run(); the timer commands are built on top of it.
    """

    def __init__(self) -> None:
        # None until the first probe or command
        self.available: bool | None = None

    @abstractmethod
    def _execute(self, args: list[str]) -> str:
        """Run a tracker command and return its stdout.

        Raises:
            BinaryUnavailableError: If the tracker cannot be started
            CommandFailedError: If the tracker exits non-zero
            TrackerTimeoutError: If the tracker does not finish in time
        """
        pass

    def run(self, args: Sequence[str]) -> str:
        """Execute a tracker command, keeping the availability flag current."""
        try:
            output = self._execute(list(args))
        except BinaryUnavailableError:
            self.available = False
            raise
        self.available = True
        return output

    def probe(self) -> bool:
        """Check whether the tracker can be run at all."""
        try:
            self.run(["--version"])
        except BinaryUnavailableError:
            logger.warning("Tracker binary is not available")
            return False
        except GatewayError as e:
            # The binary exists, it just didn't like the probe
            logger.debug(f"Tracker probe failed: {e}")
            self.available = True
        return True

    def version(self) -> str:
        return self.run(["--version"]).strip()

    def export(self) -> str:
        return self.run(["export"])

    def start(self, tags: Sequence[str]) -> None:
        self.run(["start", *tags])

    def stop(self) -> None:
        self.run(["stop"])

    def retag(self, interval_id: str, tags: Sequence[str]) -> None:
        """Replace all tags of an interval without touching its times."""
        self.run(["retag", f"@{interval_id}", *tags])


class DryRunGateway(TrackerGateway):
    """In-memory imitation of TimeWarrior.

    Understands the commands timew-timer issues (export, start, stop,
    retag, --version) and keeps intervals in a list instead of a database.
    Useful for testing and for previewing commands with --dry-run.
    """

    VERSION = "1.7.1"

    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        capture_commands: list | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the dry-run gateway.

        Args:
            clock: Source of the current time for start/stop
            capture_commands: Optional list that receives every command
            verbose: If True, print "DRY RUN" lines for mutating commands
        """
        super().__init__()
        self.clock = clock
        self.capture_commands = capture_commands
        self.verbose = verbose
        self.intervals: list[dict] = []
        # command name -> error to raise instead of running it
        self.failures: dict[str, GatewayError] = {}

    def _execute(self, args: list[str]) -> str:
        if self.capture_commands is not None:
            self.capture_commands.append(["timew"] + args)

        if not args:
            return self._report_status()

        command, rest = args[0], args[1:]
        if command in self.failures:
            raise self.failures[command]

        if command == "--version":
            return f"{self.VERSION}\n"
        if command == "export":
            return self._export()
        if command == "start":
            return self._start(rest)
        if command == "stop":
            return self._stop()
        if command == "retag":
            return self._retag(rest)
        raise CommandFailedError(1, f"'{command}' is not a timew command.", ["timew"] + args)

    def _open_interval(self) -> dict | None:
        for interval in self.intervals:
            if interval["end"] is None:
                return interval
        return None

    def _report_status(self) -> str:
        current = self._open_interval()
        if current is None:
            return "There is no active time tracking.\n"
        return f"Tracking {' '.join(current['tags'])}\n"

    def _export(self) -> str:
        count = len(self.intervals)
        entries = []
        for index, interval in enumerate(self.intervals):
            entry = {
                "id": count - index,
                "start": format_timew_timestamp(interval["start"]),
                "tags": list(interval["tags"]),
            }
            if interval["end"] is not None:
                entry["end"] = format_timew_timestamp(interval["end"])
            entries.append(entry)
        return json.dumps(entries)

    def _start(self, tags: list[str]) -> str:
        now = self.clock()
        current = self._open_interval()
        if current is not None:
            current["end"] = now
        self.intervals.append({"start": now, "end": None, "tags": list(dict.fromkeys(tags))})
        if self.verbose:
            print(f"DRY RUN: Would start tracking {tags} at {now}")
        return f"Tracking {' '.join(tags)}\n"

    def _stop(self) -> str:
        current = self._open_interval()
        if current is None:
            raise CommandFailedError(1, "There is no active time tracking.", ["timew", "stop"])
        current["end"] = self.clock()
        if self.verbose:
            print(f"DRY RUN: Would stop tracking {current['tags']}")
        return f"Recorded {' '.join(current['tags'])}\n"

    def _retag(self, args: list[str]) -> str:
        if not args or not args[0].startswith("@"):
            raise CommandFailedError(1, "At least one ID must be specified.", ["timew", "retag"] + args)
        reference, tags = args[0], args[1:]
        try:
            position = int(reference[1:])
        except ValueError:
            raise CommandFailedError(1, f"'{reference}' is not a valid ID.") from None
        if not 1 <= position <= len(self.intervals):
            raise CommandFailedError(1, f"ID '{reference}' does not correspond to any tracking.")
        interval = self.intervals[len(self.intervals) - position]
        interval["tags"] = list(dict.fromkeys(tags))
        if self.verbose:
            print(f"DRY RUN: Would retag {reference} to {tags}")
        return f"Retagged interval {reference}\n"
