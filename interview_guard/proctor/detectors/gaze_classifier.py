"""
Gaze Classifier - Decides per frame whether a face is looking away

Works on the landmark geometry produced by the face model: a centered
gaze keeps both eye-to-nose distances small and roughly equal, turning
the head grows one or both distances and skews their ratio.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..types import FaceObservation, Point

logger = logging.getLogger(__name__)


@dataclass
class GazeMeasurement:
    """Normalized geometry behind a single-frame gaze decision"""
    right_distance: float
    left_distance: float
    eye_distance_ratio: float
    looking_away: bool


class GazeClassifier:
    """
    Classifies a single face observation as "looking away" or "focused".

    Eye centers are the mean of each eye's three landmark points. The
    horizontal distance from each center to the nose is normalized by
    face width. The face is looking away when both normalized distances
    exceed DISTANCE_THRESHOLD, or when the smaller/larger ratio of the
    two drops below RATIO_THRESHOLD.
    """

    DISTANCE_THRESHOLD = 0.12
    RATIO_THRESHOLD = 0.7

    def __init__(
        self,
        distance_threshold: float = DISTANCE_THRESHOLD,
        ratio_threshold: float = RATIO_THRESHOLD
    ):
        """
        Initialize gaze classifier.

        Args:
            distance_threshold: Eye-nose distance as a fraction of face width
            ratio_threshold: Minimum min/max ratio of the two eye distances
        """
        self.distance_threshold = distance_threshold
        self.ratio_threshold = ratio_threshold

    def measure(self, face: FaceObservation) -> GazeMeasurement:
        """
        Compute the normalized eye-nose geometry for one face.

        A zero-width bounding box yields a "not looking away" measurement
        instead of dividing by zero.
        """
        face_width = face.width
        if face_width <= 0:
            logger.debug("Degenerate face box (width=0), treating as focused")
            return GazeMeasurement(0.0, 0.0, 1.0, False)

        right_center = self._eye_center(face.right_eye)
        left_center = self._eye_center(face.left_eye)
        nose_x = face.nose_x

        right_distance = abs(right_center[0] - nose_x) / face_width
        left_distance = abs(left_center[0] - nose_x) / face_width

        larger = max(right_distance, left_distance)
        # Both eyes exactly over the nose is as symmetric as it gets
        ratio = min(right_distance, left_distance) / larger if larger > 0 else 1.0

        looking_away = (
            (right_distance > self.distance_threshold and left_distance > self.distance_threshold)
            or ratio < self.ratio_threshold
        )

        return GazeMeasurement(
            right_distance=right_distance,
            left_distance=left_distance,
            eye_distance_ratio=ratio,
            looking_away=looking_away
        )

    def is_looking_away(self, face: FaceObservation) -> bool:
        """Single-frame decision for one face"""
        return self.measure(face).looking_away

    def _eye_center(self, points: Sequence[Point]) -> Point:
        center = np.asarray(points, dtype=float)[:3].mean(axis=0)
        return float(center[0]), float(center[1])
