"""Assembly of the timer components.

The application entry point builds one TimerService and owns it; there is
no module-level instance.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from .config import get_section
from .coordinator import TimerCoordinator
from .events import EventBus
from .gateway import DryRunGateway, TrackerGateway
from .history import DEFAULT_HISTORY_SIZE, TagHistory
from .reconciler import DEFAULT_POLL_INTERVAL, DEFAULT_PROBE_INTERVAL, StateReconciler
from .state import TimerSnapshot
from .timew_gateway import DEFAULT_TIMEOUT, TimewGateway
from .utils import utcnow

logger = logging.getLogger(__name__)


class TimerService:
    """Owns gateway, reconciler, coordinator, history and event bus."""

    def __init__(
        self,
        gateway: TrackerGateway,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        probe_interval: float = DEFAULT_PROBE_INTERVAL,
        history_size: int = DEFAULT_HISTORY_SIZE,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.gateway = gateway
        self.events = EventBus()
        self.history = TagHistory(history_size)
        self.reconciler = StateReconciler(
            gateway,
            events=self.events,
            poll_interval=poll_interval,
            probe_interval=probe_interval,
            clock=clock,
        )
        self.coordinator = TimerCoordinator(gateway, self.reconciler, self.history, self.events)

    @classmethod
    def from_config(
        cls, cfg: dict, dry_run: bool = False, binary: str | None = None
    ) -> "TimerService":
        """Build a service from the loaded configuration.

        Args:
            cfg: Configuration dictionary (see config.default_config)
            dry_run: Use an in-memory tracker instead of timew
            binary: Override for tracker.binary
        """
        tracker = get_section(cfg, "tracker")
        reconciler = get_section(cfg, "reconciler")
        history = get_section(cfg, "history")

        if dry_run:
            gateway: TrackerGateway = DryRunGateway(verbose=True)
        else:
            gateway = TimewGateway(
                binary=binary or tracker.get("binary", "timew"),
                timeout=float(tracker.get("timeout", DEFAULT_TIMEOUT)),
                database=tracker.get("database"),
            )

        return cls(
            gateway,
            poll_interval=float(reconciler.get("poll_interval", DEFAULT_POLL_INTERVAL)),
            probe_interval=float(tracker.get("probe_interval", DEFAULT_PROBE_INTERVAL)),
            history_size=int(history.get("size", DEFAULT_HISTORY_SIZE)),
        )

    @property
    def snapshot(self) -> TimerSnapshot:
        return self.reconciler.snapshot

    @property
    def binary_available(self) -> bool:
        return self.reconciler.binary_available

    @property
    def last_error(self):
        return self.reconciler.last_error

    def open(self) -> bool:
        """Probe the tracker and load the initial snapshot.

        Returns:
            False if the tracker binary is not available
        """
        if not self.gateway.probe():
            logger.error("Tracker binary not found; timer state is unavailable")
            return False
        self.reconciler.refresh()
        return True

    def run_in_background(self) -> None:
        """Start periodic reconciliation."""
        self.reconciler.start()

    def close(self) -> None:
        self.reconciler.stop()
        self.coordinator.close()

    def __enter__(self) -> "TimerService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
