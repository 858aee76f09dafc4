"""Cancellable fixed-interval background task."""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Call a function every `interval` seconds on a background thread.

    The first call happens immediately after start() when `run_immediately`
    is set. A call that raises is logged and the schedule continues.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "periodic-task",
        run_immediately: bool = True,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self, timeout: float | None = None) -> None:
        """Stop the schedule and wait for a call in progress to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _loop(self) -> None:
        if self.run_immediately:
            self._fire()
        while not self._stop_event.wait(self.interval):
            self._fire()

    def _fire(self) -> None:
        self.ticks += 1
        try:
            self.callback()
        except Exception:
            logger.exception(f"{self.name}: scheduled call failed")
