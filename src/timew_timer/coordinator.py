"""Serialized timer operations: start, stop and tag edits.

Operations are queued and executed one at a time on a worker thread, so a
retag can never interleave with a stop of the same interval. The
coordinator never writes the timer snapshot itself; after every tracker
command it asks the reconciler for a fresh poll, one that starts after
the command has run.
"""

import logging
import queue
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from typing import Any

from .errors import (
    GatewayError,
    InvalidTagsError,
    InvalidTimerIdError,
    NoActiveTimerError,
    NoTagsError,
)
from .events import EventBus, TagsUpdated, TagUpdateFailed, TimerStarted, TimerStopped
from .gateway import TrackerGateway
from .history import TagHistory
from .reconciler import StateReconciler
from .tag_validator import validate_tags

logger = logging.getLogger(__name__)

_STOP = object()


class TimerCoordinator:
    """Runs mutating timer operations in FIFO order.

    The blocking methods (start, stop, update_tags) wait for their turn and
    raise the operation's error. The *_async variants return a Future
    instead, for callers that must not block.
    """

    def __init__(
        self,
        gateway: TrackerGateway,
        reconciler: StateReconciler,
        history: TagHistory | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.gateway = gateway
        self.reconciler = reconciler
        self.history = history if history is not None else TagHistory()
        self.events = events or reconciler.events
        self._queue: queue.Queue = queue.Queue()
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()
        self._closed = False

    # Public API

    def start(self, tags: Sequence[str] | str) -> None:
        self.start_async(tags).result()

    def stop(self) -> None:
        self.stop_async().result()

    def update_tags(self, tags: Sequence[str] | str) -> None:
        self.update_tags_async(tags).result()

    def start_async(self, tags: Sequence[str] | str) -> Future:
        return self._submit(self._start, tags)

    def stop_async(self) -> Future:
        return self._submit(self._stop)

    def update_tags_async(self, tags: Sequence[str] | str) -> Future:
        return self._submit(self._update_tags, tags)

    def close(self, timeout: float | None = None) -> None:
        """Finish queued operations and stop the worker thread."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            worker = self._worker
        if worker is not None:
            self._queue.put(_STOP)
            worker.join(timeout)

    # Queue handling

    def _submit(self, operation: Callable[..., None], *args: Any) -> Future:
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise RuntimeError("TimerCoordinator is closed")
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._work, name="timew-coordinator", daemon=True
                )
                self._worker.start()
            self._queue.put((future, operation, args))
        return future

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            future, operation, args = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(operation(*args))
            except Exception as e:
                future.set_exception(e)

    # Operations, always run on the worker thread

    def _validated(self, tags: Sequence[str] | str) -> list[str]:
        result = validate_tags(tags)
        if not result:
            raise InvalidTagsError(result.errors)
        return result.tags

    def _start(self, tags: Sequence[str] | str) -> None:
        result = validate_tags(tags)
        if not result.tags:
            raise NoTagsError()
        if not result:
            raise InvalidTagsError(result.errors)
        new_tags = result.tags

        self.gateway.start(new_tags)
        logger.info("Timer started", extra={"tags": new_tags})
        self.reconciler.refresh(fresh=True)
        self.history.record(new_tags)
        self.events.emit(TimerStarted(tuple(new_tags)))

    def _stop(self) -> None:
        snapshot = self.reconciler.snapshot
        if not snapshot.active:
            raise NoActiveTimerError()
        last_tags = snapshot.tags

        self.gateway.stop()
        logger.info("Timer stopped", extra={"tags": list(last_tags), "interval_id": snapshot.id})
        self.reconciler.refresh(fresh=True)
        self.events.emit(TimerStopped(last_tags))

    def _update_tags(self, tags: Sequence[str] | str) -> None:
        snapshot = self.reconciler.snapshot
        if not snapshot.active:
            raise NoActiveTimerError()
        if not snapshot.id:
            raise InvalidTimerIdError()
        new_tags = self._validated(tags)
        old_tags = snapshot.tags

        try:
            self.gateway.retag(snapshot.id, new_tags)
        except GatewayError as e:
            # The next poll is the only way the displayed state changes
            logger.warning(
                f"Retag failed: {e}", extra={"tags": new_tags, "interval_id": snapshot.id}
            )
            self.events.emit(TagUpdateFailed(str(e)))
            raise

        logger.info("Timer retagged", extra={"tags": new_tags, "interval_id": snapshot.id})
        self.history.record(new_tags)
        self.reconciler.refresh(fresh=True)
        self.events.emit(TagsUpdated(old_tags, tuple(new_tags)))
