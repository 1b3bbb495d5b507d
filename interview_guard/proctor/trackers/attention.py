"""
Attention Tracker - Face presence and gaze state machine

Consumes each frame's face list and maintains three independent
conditions:

- no face: counted once per session after NO_FACE_SECONDS without a face
- multiple faces: counted once per session on the first frame with >1 face
- looking away: debounced over a sliding window and counted again for
  every LOOK_AWAY_SECONDS the candidate keeps looking away
"""

import logging
from typing import Callable, List, Optional

from ..detectors import GazeClassifier
from ..event_log import EventLog
from ..metrics import ViolationCounters
from ..types import FaceObservation, FocusStatus, Severity
from .debouncer import Episode, GazeHistory, RatePolicy

logger = logging.getLogger(__name__)


class AttentionTracker:
    """
    Drives the gaze classifier and debouncer from per-frame face lists
    and converts sustained conditions into counted violations.
    """

    LOOK_AWAY_SECONDS = 2.0
    RETURN_LOG_SECONDS = 1.0
    NO_FACE_SECONDS = 8.0

    def __init__(
        self,
        counters: ViolationCounters,
        events: EventLog,
        classifier: Optional[GazeClassifier] = None,
        history: Optional[GazeHistory] = None,
        look_away_seconds: float = LOOK_AWAY_SECONDS,
        return_log_seconds: float = RETURN_LOG_SECONDS,
        no_face_seconds: float = NO_FACE_SECONDS,
        on_violation: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize attention tracker.

        Args:
            counters: Session counters (look_away, no_face, multiple_faces are written)
            events: Session event log
            classifier: Single-frame gaze classifier
            history: Sliding window of raw gaze samples
            look_away_seconds: Continuous look-away time per counted violation
            return_log_seconds: Minimum episode length worth a "returned" event
            no_face_seconds: Continuous absence before the no-face violation
            on_violation: Called with the counter name after every increment
        """
        self.counters = counters
        self.events = events
        self.classifier = classifier or GazeClassifier()
        self.history = history or GazeHistory()
        self.return_log_seconds = return_log_seconds
        self.no_face_seconds = no_face_seconds
        self._on_violation = on_violation

        self.look_away_policy = RatePolicy.cooldown(look_away_seconds)
        self.no_face_policy = RatePolicy.once_only()
        self.multiple_faces_policy = RatePolicy.once_only()

        self.look_away_episode = Episode()
        self.no_face_episode = Episode()
        self.status = FocusStatus.IDLE

    def reset(self):
        """Clear transient state for a new session"""
        self.history.clear()
        self.look_away_episode.close()
        self.no_face_episode.close()
        self.status = FocusStatus.IDLE

    def process(self, faces: List[FaceObservation], now: float) -> FocusStatus:
        """
        Process one frame's face list.

        Args:
            faces: Faces reported by the landmark model for this frame
            now: Monotonic time in seconds

        Returns:
            Focus status for this frame
        """
        if not faces:
            # A frame without a face is not a gaze sample
            self.history.clear()
            self.status = FocusStatus.NO_FACE
            self._handle_no_face(now)
            return self.status

        if self.no_face_episode.is_open:
            self.no_face_episode.close()
            self.events.append("Face detected again.", Severity.SUCCESS)

        if len(faces) > 1 and self.multiple_faces_policy.permits(self.counters.multiple_faces):
            self._count("multiple_faces")
            self.events.append(
                f"Multiple faces detected ({len(faces)}). Possible cheating attempt!",
                Severity.ERROR
            )

        distracted = False
        for face in faces:
            if self._check_gaze(face, now):
                distracted = True

        self.status = FocusStatus.DISTRACTED if distracted else FocusStatus.FOCUSED
        return self.status

    def _handle_no_face(self, now: float):
        if not self.no_face_episode.is_open:
            self.no_face_episode.open(now)
            return

        elapsed = self.no_face_episode.elapsed(now)
        if elapsed > self.no_face_seconds and self.no_face_policy.permits(self.counters.no_face):
            self._count("no_face")
            self.events.append(
                f"No face detected for more than {self.no_face_seconds:g} seconds!",
                Severity.ERROR
            )
            self.no_face_episode.restart(now)

    def _check_gaze(self, face: FaceObservation, now: float) -> bool:
        """Push one face's sample and advance the look-away episode"""
        consistent = self.history.push(self.classifier.is_looking_away(face))
        episode = self.look_away_episode

        if consistent:
            if not episode.is_open:
                episode.open(now)
                self.events.append("Candidate started looking away from screen.", Severity.WARNING)
                return True

            if self.look_away_policy.permits(self.counters.look_away, episode.elapsed(now)):
                count = self._count("look_away")
                self.events.append(
                    f"Candidate looked away for more than "
                    f"{self.look_away_policy.seconds:g} seconds! ({count} times)",
                    Severity.WARNING
                )
                episode.restart(now)
            return True

        if episode.is_open:
            if episode.elapsed(now) > self.return_log_seconds:
                self.events.append("Candidate returned to looking at screen.", Severity.SUCCESS)
            episode.close()
        return False

    def _count(self, name: str) -> int:
        value = self.counters.increment(name)
        if self._on_violation is not None:
            self._on_violation(name)
        return value
