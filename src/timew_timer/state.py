"""Timer state published by the reconciler.

TimerSnapshot instances are immutable. The reconciler builds a new one on
every poll and publishes it with a single reference assignment, so readers
never see a half-updated view.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .utils import utcnow


class ReconcilerState(Enum):
    """Whether a tracker poll is in flight."""

    IDLE = "idle"
    POLLING = "polling"


@dataclass(frozen=True)
class TimerSnapshot:
    """View of the tracker's active interval at one point in time.

    Attributes:
        active: Whether an interval is open
        id: Tracker interval id, empty when inactive
        tags: Tags of the open interval, in tracker order
        started_at: UTC start of the open interval, None when inactive
        elapsed_seconds: Seconds between started_at and taken_at
        taken_at: When this snapshot was built
    """

    active: bool = False
    id: str = ""
    tags: tuple[str, ...] = ()
    started_at: datetime | None = None
    elapsed_seconds: int = 0
    taken_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.active:
            if not self.id:
                raise ValueError("An active snapshot needs an interval id")
            if self.started_at is None:
                raise ValueError("An active snapshot needs a start time")
        elif self.id or self.tags or self.started_at is not None:
            raise ValueError("An inactive snapshot cannot carry id, tags or start time")
        if self.elapsed_seconds < 0:
            raise ValueError(f"elapsed_seconds must be >= 0, got {self.elapsed_seconds}")

    @classmethod
    def inactive(cls, now: datetime | None = None) -> "TimerSnapshot":
        return cls(taken_at=now or utcnow())

    @classmethod
    def running(
        cls, interval_id: str, tags: tuple[str, ...] | list[str], started_at: datetime, now: datetime | None = None
    ) -> "TimerSnapshot":
        """Build an active snapshot, deriving the elapsed time from now."""
        now = now or utcnow()
        elapsed = max(0, int((now - started_at).total_seconds()))
        return cls(
            active=True,
            id=interval_id,
            tags=tuple(tags),
            started_at=started_at,
            elapsed_seconds=elapsed,
            taken_at=now,
        )

    def same_interval(self, other: "TimerSnapshot") -> bool:
        """Compare everything except timing of the snapshot itself."""
        return (
            self.active == other.active
            and self.id == other.id
            and self.tags == other.tags
            and self.started_at == other.started_at
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": self.active,
            "id": self.id,
            "tags": list(self.tags),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "elapsed_seconds": self.elapsed_seconds,
            "taken_at": self.taken_at.isoformat(),
        }
