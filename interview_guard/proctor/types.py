"""
Per-frame detection types shared by the trackers
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np


Point = Tuple[float, float]
BBox = Tuple[float, float, float, float]  # x, y, width, height

# Order of landmark groups in the detector's flat output
LANDMARK_ORDER = ("right_eye", "left_eye", "nose")


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class FocusStatus(str, Enum):
    IDLE = "idle"
    FOCUSED = "focused"
    DISTRACTED = "distracted"
    NO_FACE = "no_face"


def _as_points(values: Sequence[Any]) -> List[Point]:
    """Accept [[x, y], ...] or a flat [x0, y0, x1, y1, ...] list."""
    arr = np.asarray(values, dtype=float).reshape(-1, 2)
    return [(float(x), float(y)) for x, y in arr]


@dataclass
class FaceObservation:
    """
    One detected face in one frame.

    Eyes carry three sub-points each; the nose x-coordinate is taken
    from its first point.
    """
    top_left: Point
    bottom_right: Point
    right_eye: List[Point]
    left_eye: List[Point]
    nose: List[Point]

    @property
    def width(self) -> float:
        return abs(self.top_left[0] - self.bottom_right[0])

    @property
    def nose_x(self) -> float:
        return self.nose[0][0]

    @classmethod
    def from_landmarks(
        cls,
        top_left: Sequence[float],
        bottom_right: Sequence[float],
        landmarks: Sequence[Sequence[float]]
    ) -> "FaceObservation":
        """
        Build from the detector's landmark list.

        Args:
            top_left: (x, y) of the bounding box
            bottom_right: (x, y) of the bounding box
            landmarks: groups ordered right eye, left eye, nose; each
                group is a flat coordinate list or a list of points

        Raises:
            ValueError: if a corner or a landmark group is incomplete
        """
        if len(landmarks) < len(LANDMARK_ORDER):
            raise ValueError(
                f"Expected at least {len(LANDMARK_ORDER)} landmark groups, got {len(landmarks)}"
            )
        if len(top_left) < 2 or len(bottom_right) < 2:
            raise ValueError("Bounding box corners need x and y coordinates")

        groups = {name: _as_points(landmarks[i]) for i, name in enumerate(LANDMARK_ORDER)}
        empty = [name for name, points in groups.items() if not points]
        if empty:
            raise ValueError(f"Landmark groups without points: {', '.join(empty)}")

        return cls(
            top_left=(float(top_left[0]), float(top_left[1])),
            bottom_right=(float(bottom_right[0]), float(bottom_right[1])),
            **groups
        )


@dataclass
class ObjectDetection:
    """One classified bounding box from the object detector"""
    label: str
    confidence: float
    bbox: BBox = (0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class EventLogEntry:
    """One line of the interview event log"""
    timestamp: str  # HH:MM:SS wall clock
    message: str
    severity: Severity = Severity.INFO

    def to_dict(self) -> Dict[str, str]:
        # "type" is the key existing report consumers read
        return {
            "timestamp": self.timestamp,
            "message": self.message,
            "type": self.severity.value
        }


@dataclass
class StartResult:
    """Outcome of starting an interview session"""
    ok: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
