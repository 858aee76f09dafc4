"""Periodic reconciliation of the timer snapshot with the tracker.

The tracker is the only source of truth. The reconciler exports its data,
derives a TimerSnapshot and publishes it; nothing else writes the
snapshot. Failures leave the last good snapshot in place and are recorded
in last_error, and polling carries on.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from .errors import GatewayError, TrackerTimeoutError
from .events import EventBus, ReconcileFailed, SnapshotChanged
from .export import parse_export, snapshot_from_intervals
from .gateway import TrackerGateway
from .scheduler import PeriodicTask
from .state import ReconcilerState, TimerSnapshot
from .utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_PROBE_INTERVAL = 30.0


class StateReconciler:
    """Keeps a TimerSnapshot in line with the tracker's export.

    Only one export runs at a time. A forced refresh() that arrives while a
    poll is in flight waits for that poll instead of starting another one,
    unless it asks for a fresh result, and a scheduled tick() in the same
    situation is skipped.
    """

    def __init__(
        self,
        gateway: TrackerGateway,
        events: EventBus | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        probe_interval: float = DEFAULT_PROBE_INTERVAL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the reconciler.

        Args:
            gateway: Tracker gateway used for export and probes
            events: Bus receiving SnapshotChanged and ReconcileFailed
            poll_interval: Seconds between scheduled polls
            probe_interval: Minimum seconds between probes while the
                tracker binary is unavailable
            clock: Source of the current time for elapsed computation
        """
        self.gateway = gateway
        self.events = events or EventBus()
        self.poll_interval = poll_interval
        self.probe_interval = probe_interval
        self.clock = clock

        self._lock = threading.Lock()
        self._poll_done = threading.Condition(self._lock)
        self._state = ReconcilerState.IDLE
        self._snapshot = TimerSnapshot.inactive(clock())
        self._last_error: GatewayError | None = None
        self._last_probe: datetime | None = None
        self._task: PeriodicTask | None = None

        # Bumped after every completed poll; lets waiters detect completion
        self.poll_count = 0
        self.coalesced_requests = 0
        self.skipped_ticks = 0

    @property
    def snapshot(self) -> TimerSnapshot:
        """The latest published snapshot."""
        return self._snapshot

    @property
    def state(self) -> ReconcilerState:
        return self._state

    @property
    def last_error(self) -> GatewayError | None:
        return self._last_error

    @property
    def binary_available(self) -> bool:
        return self.gateway.available is not False

    def start(self) -> None:
        """Start polling on a background thread."""
        if self._task is None:
            self._task = PeriodicTask(self.poll_interval, self.tick, name="timew-reconciler")
        self._task.start()

    def stop(self, timeout: float | None = None) -> None:
        if self._task is not None:
            self._task.cancel(timeout)

    def refresh(self, timeout: float | None = None, fresh: bool = False) -> TimerSnapshot:
        """Poll the tracker now and return the resulting snapshot.

        If a poll is already running, wait for it. By default its result is
        returned rather than exporting a second time. With fresh=True the
        in-flight poll may have read the tracker too early, so another
        export is made once it has finished.

        Raises:
            TrackerTimeoutError: if timeout expires while waiting for the
                in-flight poll
        """
        with self._lock:
            if self._state is ReconcilerState.POLLING:
                if fresh:
                    finished = self._poll_done.wait_for(
                        lambda: self._state is ReconcilerState.IDLE, timeout
                    )
                else:
                    self.coalesced_requests += 1
                    generation = self.poll_count
                    finished = self._poll_done.wait_for(
                        lambda: self.poll_count != generation, timeout
                    )
                if not finished:
                    raise TrackerTimeoutError(timeout)
                if not fresh:
                    return self._snapshot
            self._state = ReconcilerState.POLLING
        self._poll()
        return self._snapshot

    def tick(self) -> None:
        """Scheduled poll, skipped if one is already in flight."""
        if not self.binary_available:
            self._probe()
            if not self.binary_available:
                return

        with self._lock:
            if self._state is ReconcilerState.POLLING:
                self.skipped_ticks += 1
                logger.debug("Poll still in flight, skipping tick")
                return
            self._state = ReconcilerState.POLLING
        self._poll()

    def _probe(self) -> None:
        now = self.clock()
        if self._last_probe is not None and (now - self._last_probe).total_seconds() < self.probe_interval:
            return
        self._last_probe = now
        if self.gateway.probe():
            logger.info("Tracker binary is available again")

    def _poll(self) -> None:
        # Caller has moved the state to POLLING
        try:
            self._reconcile()
        finally:
            with self._lock:
                self._state = ReconcilerState.IDLE
                self.poll_count += 1
                self._poll_done.notify_all()

    def _reconcile(self) -> None:
        try:
            intervals = parse_export(self.gateway.export())
        except GatewayError as e:
            self._record_failure(e)
            return

        new = snapshot_from_intervals(intervals, self.clock())
        with self._lock:
            old = self._snapshot
            self._snapshot = new
            recovered = self._last_error is not None
            self._last_error = None

        if recovered:
            logger.info("Tracker export succeeded again")
        if not new.same_interval(old):
            logger.info(
                "Timer state changed" if new.active else "Timer stopped",
                extra={"tags": list(new.tags), "interval_id": new.id},
            )
            self.events.emit(SnapshotChanged(old, new))

    def _record_failure(self, error: GatewayError) -> None:
        with self._lock:
            repeated = type(self._last_error) is type(error)
            self._last_error = error
        # Don't flood the log with the same failure every two seconds
        if repeated:
            logger.debug(f"Reconciliation failed again: {error}")
        else:
            logger.error(f"Reconciliation failed: {error}")
        self.events.emit(ReconcileFailed(error))
