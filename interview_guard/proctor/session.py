"""
Interview Session - Manages a single proctored interview

Owns the session state and polls the frame source on two independent
schedules: faces (every FACE_POLL_INTERVAL) and objects (every
OBJECT_POLL_INTERVAL). Each channel runs one tick at a time; a tick
that overruns its slot makes the channel skip the missed slots instead
of queueing them.
"""

import asyncio
import inspect
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..config import Settings, settings as default_settings
from .detectors import GazeClassifier
from .event_log import EventListener, EventLog
from .exceptions import CaptureUnavailableError, SessionNotActiveError
from .frame_source import FrameSource
from .metrics import ViolationCounters
from .report import SessionSnapshot, format_duration, iso_utc
from .scoring import IntegrityScorer
from .trackers import AttentionTracker, GazeHistory, ObjectViolationTracker
from .types import FaceObservation, FocusStatus, ObjectDetection, Severity, StartResult
from .utils.logging import log_session_end, log_session_start, log_tick_error, log_violation

logger = logging.getLogger(__name__)

FACES = "faces"
OBJECTS = "objects"

UpdateListener = Callable[[Dict[str, int], int], None]


@dataclass
class SessionState:
    """Everything a session accumulates between start and stop"""
    counters: ViolationCounters = field(default_factory=ViolationCounters)
    events: EventLog = field(default_factory=EventLog)
    started_at: Optional[datetime] = None
    stopped_at: Optional[datetime] = None
    running: bool = False
    frozen: bool = False


class InterviewSession:
    """
    Manages a single proctored interview.

    Wires the frame source into the attention and object trackers,
    keeps the integrity score current, and freezes its state on stop
    for report generation.
    """

    def __init__(
        self,
        frame_source: FrameSource,
        settings: Optional[Settings] = None,
        candidate_name: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
        session_id: Optional[str] = None,
        scorer: Optional[IntegrityScorer] = None
    ):
        """
        Initialize a new interview session.

        Args:
            frame_source: Camera + detection collaborator
            settings: Thresholds and cadences (defaults to the global settings)
            candidate_name: Name used in reports
            clock: Monotonic seconds, drives episode timing
            wall_clock: Local time, stamps event log entries
            session_id: Optional custom session ID (auto-generated if not provided)
            scorer: Integrity scorer
        """
        self.settings = settings or default_settings
        self.id = session_id or f"INT_{uuid.uuid4().hex[:6].upper()}"
        self.frame_source = frame_source
        self.candidate_name = candidate_name or self.settings.DEFAULT_CANDIDATE_NAME
        self._clock = clock
        self._wall_clock = wall_clock
        self.scorer = scorer or IntegrityScorer()

        self.state = SessionState(events=EventLog(wall_clock=wall_clock))

        s = self.settings
        self.attention = AttentionTracker(
            self.state.counters,
            self.state.events,
            classifier=GazeClassifier(s.GAZE_DISTANCE_THRESHOLD, s.GAZE_RATIO_THRESHOLD),
            history=GazeHistory(s.GAZE_HISTORY_LENGTH, s.GAZE_MAJORITY),
            look_away_seconds=s.LOOK_AWAY_SECONDS,
            return_log_seconds=s.RETURN_LOG_SECONDS,
            no_face_seconds=s.NO_FACE_SECONDS,
            on_violation=self._on_violation
        )
        self.objects = ObjectViolationTracker(
            self.state.counters,
            self.state.events,
            confidence=s.OBJECT_CONFIDENCE_THRESHOLD,
            on_violation=self._on_violation
        )

        self._update_listeners: List[UpdateListener] = []
        self._stop_event: Optional[asyncio.Event] = None
        self._tasks: List[asyncio.Task] = []
        self._started_mono: Optional[float] = None
        self._stopped_mono: Optional[float] = None

        self.ticks: Dict[str, int] = {FACES: 0, OBJECTS: 0}
        self.skipped_ticks: Dict[str, int] = {FACES: 0, OBJECTS: 0}

    # ============== State accessors ==============

    @property
    def counters(self) -> ViolationCounters:
        return self.state.counters

    @property
    def events(self) -> EventLog:
        return self.state.events

    @property
    def is_running(self) -> bool:
        return self.state.running

    @property
    def is_frozen(self) -> bool:
        return self.state.frozen

    @property
    def focus_status(self) -> FocusStatus:
        return self.attention.status

    def integrity_score(self) -> int:
        return self.scorer.compute(self.counters)

    def add_update_listener(self, listener: UpdateListener):
        """Called with (counters, score) after every counter change"""
        self._update_listeners.append(listener)

    def add_event_listener(self, listener: EventListener):
        """Called with each new event log entry"""
        self.events.add_listener(listener)

    # ============== Lifecycle ==============

    async def start(self) -> StartResult:
        """
        Start the interview.

        Resets all counters, history and the event log, opens the frame
        source and launches both polling channels.

        Returns:
            StartResult; ok=False with a readable message if capture is unavailable
        """
        if self.state.running:
            return StartResult(False, "Interview is already running")

        self.counters.reset()
        self.events.clear()
        self.attention.reset()
        self.state.frozen = False
        self.state.stopped_at = None
        self.ticks = {FACES: 0, OBJECTS: 0}
        self.skipped_ticks = {FACES: 0, OBJECTS: 0}

        self.events.append("Starting interview process...", Severity.INFO)

        try:
            await self._call(self.frame_source.open)
        except CaptureUnavailableError as e:
            self.events.append(f"Error accessing camera: {e}", Severity.ERROR)
            logger.warning(f"Session {self.id} could not start: {e}")
            return StartResult(False, str(e))

        self.state.started_at = self._wall_clock()
        self._started_mono = self._clock()
        self._stopped_mono = None
        self.state.running = True

        self.events.append("Interview started. Camera access granted.", Severity.SUCCESS)
        log_session_start(self.id, self.candidate_name)

        self._stop_event = asyncio.Event()
        self.events.append("Face detection initialized. Starting monitoring...", Severity.INFO)
        self.events.append(
            "Object detection initialized. Monitoring for prohibited items...", Severity.INFO
        )
        self._tasks = [
            asyncio.create_task(self._poll_loop(FACES, self.settings.FACE_POLL_INTERVAL)),
            asyncio.create_task(self._poll_loop(OBJECTS, self.settings.OBJECT_POLL_INTERVAL)),
        ]

        logger.info(f"Interview session started: {self.id}")
        return StartResult(True, "Interview started. Monitoring active.", {"session_id": self.id})

    async def stop(self) -> SessionSnapshot:
        """
        Stop both channels and freeze the session.

        Once this returns no tick can change counters or the event log.
        Calling stop on a stopped session just returns its snapshot.
        """
        if not self.state.running:
            return self.snapshot()

        if self._stop_event is not None:
            self._stop_event.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        self.state.running = False
        self.state.stopped_at = self._wall_clock()
        self._stopped_mono = self._clock()

        try:
            await self._call(self.frame_source.close)
        except Exception as e:
            logger.warning(f"Error closing frame source for {self.id}: {e}")

        self.events.append("Interview stopped. Ready to generate report.", Severity.INFO)
        self.counters.freeze()
        self.events.freeze()
        self.state.frozen = True

        score = self.integrity_score()
        log_session_end(self.id, score, self.counters.as_dict(), len(self.events))
        logger.info(f"Session {self.id} stopped: score={score}")

        return self.snapshot()

    # ============== Tick processing ==============

    def process_faces(self, faces: List[FaceObservation], now: Optional[float] = None) -> FocusStatus:
        """Apply one face-detection result to the session"""
        self._require_running()
        return self.attention.process(faces, self._clock() if now is None else now)

    def process_objects(self, detections: List[ObjectDetection]) -> List[ObjectDetection]:
        """Apply one object-detection result to the session"""
        self._require_running()
        return self.objects.process(detections)

    def _require_running(self):
        if not self.state.running:
            raise SessionNotActiveError(f"Session {self.id} is not running")

    async def _poll_loop(self, channel: str, interval: float):
        loop = asyncio.get_running_loop()
        next_due = loop.time()

        while not self._stop_event.is_set():
            await self._tick(channel)

            next_due += interval
            now = loop.time()
            if now >= next_due:
                # Slow tick: drop the slots it overran
                missed = int((now - next_due) // interval) + 1
                self.skipped_ticks[channel] += missed
                next_due += missed * interval
                logger.debug(f"{channel} channel skipped {missed} tick(s)")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=next_due - now)
            except asyncio.TimeoutError:
                pass

    async def _tick(self, channel: str):
        poll = self.frame_source.poll_faces if channel == FACES else self.frame_source.poll_objects

        try:
            result = await self._call(poll)
        except Exception as e:
            self._tick_failed(channel, e)
            return

        if result is None or self._stop_event.is_set() or not self.state.running:
            return

        self.ticks[channel] += 1
        try:
            if channel == FACES:
                self.process_faces(result)
            else:
                self.process_objects(result)
        except Exception as e:
            self._tick_failed(channel, e)

    def _tick_failed(self, channel: str, error: Exception):
        """A failed tick is logged and recorded; the channel keeps polling"""
        if self._stop_event.is_set() or not self.state.running:
            return
        log_tick_error(self.id, channel, error)
        label = "Face" if channel == FACES else "Object"
        self.events.append(f"{label} detection error: {error}", Severity.ERROR)

    async def _call(self, fn: Callable[[], Any]) -> Any:
        if inspect.iscoroutinefunction(fn):
            return await fn()
        return await asyncio.to_thread(fn)

    def _on_violation(self, counter: str):
        score = self.integrity_score()
        counters = self.counters.as_dict()
        log_violation(self.id, counter, counters[counter], score)

        for listener in list(self._update_listeners):
            try:
                listener(counters, score)
            except Exception as e:
                logger.warning(f"Update listener failed: {e}")

    # ============== Read-only views ==============

    def duration_seconds(self) -> float:
        if self._started_mono is None:
            return 0.0
        end = self._stopped_mono if self._stopped_mono is not None else self._clock()
        return max(0.0, end - self._started_mono)

    def snapshot(self) -> SessionSnapshot:
        """Read-only copy of the current session state"""
        started = self.state.started_at or self._wall_clock()
        ended = self.state.stopped_at or self._wall_clock()

        return SessionSnapshot(
            session_id=self.id,
            candidate_name=self.candidate_name,
            duration_text=format_duration(self.duration_seconds()),
            start_time_iso=iso_utc(started),
            end_time_iso=iso_utc(ended),
            counters=self.counters.as_dict(),
            integrity_score=self.integrity_score(),
            events=self.events.entries(),
            running=self.state.running
        )

    def status(self) -> Dict[str, Any]:
        """Current state for the UI"""
        assessment = self.scorer.assess(self.counters)
        return {
            "session_id": self.id,
            "candidate_name": self.candidate_name,
            "is_running": self.state.running,
            "focus_status": self.focus_status.value,
            "counters": self.counters.as_dict(),
            "integrity_score": assessment.score,
            "label": assessment.label,
            "recommendation": assessment.recommendation,
            "event_count": len(self.events),
            "duration": format_duration(self.duration_seconds())
        }
