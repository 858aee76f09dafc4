"""Bounded cache of recently used tags."""

import threading
from collections.abc import Iterable

DEFAULT_HISTORY_SIZE = 100


class TagHistory:
    """Insertion-ordered, capacity-bounded set of tags.

    Recording a tag that is already known leaves it where it is; only new
    tags are appended. When the cache grows past its capacity the oldest
    entries are dropped from the front.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._tags: list[str] = []
        self._lock = threading.Lock()

    def record(self, tags: Iterable[str]) -> None:
        """Add tags that are not yet in the history."""
        with self._lock:
            for tag in tags:
                if tag and tag not in self._tags:
                    self._tags.append(tag)
            overflow = len(self._tags) - self.capacity
            if overflow > 0:
                del self._tags[:overflow]

    def load(self, tags: Iterable[str]) -> None:
        """Replace the history, e.g. with tags saved by a previous run."""
        with self._lock:
            self._tags = []
        self.record(tags)

    def clear(self) -> None:
        with self._lock:
            self._tags = []

    def snapshot(self) -> list[str]:
        """Return a copy of the history, oldest first."""
        with self._lock:
            return list(self._tags)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tags)

    def __contains__(self, tag: object) -> bool:
        with self._lock:
            return tag in self._tags
