"""
Temporal Debouncer - Sliding-window smoothing and episode timing

Per-frame gaze decisions are noisy. GazeHistory keeps the last few raw
samples and only reports "consistently looking away" once a majority of
the window agrees. Episode tracks how long a debounced condition has
held, and RatePolicy decides when an ongoing condition becomes a
counted violation.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GazeHistory:
    """
    Fixed-capacity ring buffer of raw "looking away" samples.

    The oldest sample is evicted once capacity is reached, so the
    window never holds more than `capacity` samples.
    """

    def __init__(self, capacity: int = 8, majority: float = 0.6):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.majority = majority
        self._samples = deque(maxlen=capacity)

    def push(self, looking_away: bool) -> bool:
        """
        Record one sample.

        Returns:
            Whether the window is now consistently looking away
        """
        self._samples.append(bool(looking_away))
        return self.is_consistently_looking_away

    def clear(self):
        self._samples.clear()

    @property
    def looking_away_count(self) -> int:
        return sum(self._samples)

    @property
    def is_consistently_looking_away(self) -> bool:
        # Strictly more than majority * capacity: 5 of 8 at the defaults
        return self.looking_away_count > self.capacity * self.majority

    def __len__(self) -> int:
        return len(self._samples)


class Episode:
    """Start time of a continuous span during which a condition holds"""

    def __init__(self):
        self.started_at: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.started_at is not None

    def open(self, now: float):
        self.started_at = now

    def restart(self, now: float):
        self.started_at = now

    def close(self) -> Optional[float]:
        """Close the episode and return the start time it had"""
        started, self.started_at = self.started_at, None
        return started

    def elapsed(self, now: float) -> float:
        if self.started_at is None:
            return 0.0
        return now - self.started_at


class RateKind(str, Enum):
    NONE = "none"
    ONCE_ONLY = "once_only"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class RatePolicy:
    """
    How often a violation type may be counted.

    - none: every qualifying occurrence counts
    - once_only: counted at most once per session
    - cooldown: counted each time an open episode outlasts `seconds`
    """

    kind: RateKind = RateKind.NONE
    seconds: float = 0.0

    @classmethod
    def none(cls) -> "RatePolicy":
        return cls(RateKind.NONE)

    @classmethod
    def once_only(cls) -> "RatePolicy":
        return cls(RateKind.ONCE_ONLY)

    @classmethod
    def cooldown(cls, seconds: float) -> "RatePolicy":
        return cls(RateKind.COOLDOWN, seconds)

    def permits(self, fired: int, elapsed: float = 0.0) -> bool:
        """
        Args:
            fired: How many times this violation was already counted
            elapsed: Seconds since the current episode (re)started
        """
        if self.kind is RateKind.ONCE_ONLY:
            return fired == 0
        if self.kind is RateKind.COOLDOWN:
            return elapsed > self.seconds
        return True
