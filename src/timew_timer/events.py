"""Notifications emitted by the reconciler and the coordinator.

Subscribers are plain callables. They are invoked synchronously, in
subscription order, on the thread that emits the event.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from .errors import TimerError
from .state import TimerSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerStarted:
    tags: tuple[str, ...]


@dataclass(frozen=True)
class TimerStopped:
    last_tags: tuple[str, ...]


@dataclass(frozen=True)
class TagsUpdated:
    old_tags: tuple[str, ...]
    new_tags: tuple[str, ...]


@dataclass(frozen=True)
class TagUpdateFailed:
    reason: str


@dataclass(frozen=True)
class SnapshotChanged:
    old: TimerSnapshot
    new: TimerSnapshot


@dataclass(frozen=True)
class ReconcileFailed:
    error: TimerError


TimerEvent = TimerStarted | TimerStopped | TagsUpdated | TagUpdateFailed | SnapshotChanged | ReconcileFailed

Subscriber = Callable[[TimerEvent], None]


class EventBus:
    """Registry of event subscribers."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback.

        Returns:
            A function that removes the subscription again
        """
        with self._lock:
            self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def emit(self, event: TimerEvent) -> None:
        """Deliver an event to every subscriber.

        A subscriber that raises is logged; the remaining subscribers still
        receive the event.
        """
        with self._lock:
            subscribers = list(self._subscribers)
        logger.debug(f"Emitting {type(event).__name__}", extra={"event_data": event})
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed on {type(event).__name__}")
