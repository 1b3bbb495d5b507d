"""
Interview Proctoring API - FastAPI endpoints for the live interview

The browser runs the face and object models and pushes their results
here; the session polls them on its own schedules.

Endpoints:
- POST /api/interview/start - Start the interview session
- POST /api/interview/faces - Push the latest face-landmark result
- POST /api/interview/objects - Push the latest object-detection result
- GET /api/interview/status - Counters, score and focus state
- GET /api/interview/events - Event log (optionally from an offset)
- POST /api/interview/stop - Stop, freeze and save the report
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..api.deps import get_report_store
from .frame_source import PushFrameSource
from .schemas import FaceIn, ObjectIn
from .session import InterviewSession
from .storage import ReportStore, publish_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview", tags=["Interview Proctoring"])

# One interview per process
_session: Optional[InterviewSession] = None
_source: Optional[PushFrameSource] = None


# ============== Request/Response Models ==============

class StartSessionRequest(BaseModel):
    """Request to start the interview"""
    candidate_name: Optional[str] = Field(None, description="Name shown in the report")


class StartSessionResponse(BaseModel):
    """Response after starting a session"""
    session_id: str
    status: str
    message: str


class FacesRequest(BaseModel):
    """Face-detection result for one frame"""
    faces: List[FaceIn] = Field(default_factory=list)


class ObjectsRequest(BaseModel):
    """Object-detection result for one frame"""
    detections: List[ObjectIn] = Field(default_factory=list)


class PushResponse(BaseModel):
    accepted: int


class EventOut(BaseModel):
    timestamp: str
    message: str
    type: str


class StatusResponse(BaseModel):
    """Current session status"""
    session_id: str
    candidate_name: str
    is_running: bool
    focus_status: str
    counters: Dict[str, int]
    integrity_score: int
    label: str
    recommendation: str
    event_count: int
    duration: str


class StopSessionRequest(BaseModel):
    """Request to stop the interview"""
    candidate_name: Optional[str] = None
    save_report: bool = True


class StopSessionResponse(BaseModel):
    """Final proctoring results"""
    session_id: str
    integrity_score: int
    label: str
    recommendation: str
    duration: str
    counters: Dict[str, int]
    saved: bool
    report_id: Optional[str] = None
    report_text: str
    error: Optional[str] = None


# ============== Helpers ==============

def _require_session() -> InterviewSession:
    if _session is None:
        raise HTTPException(status_code=404, detail="No interview session")
    return _session


def _require_running() -> InterviewSession:
    session = _require_session()
    if not session.is_running:
        raise HTTPException(status_code=400, detail="Session is not active")
    return session


# ============== API Endpoints ==============

@router.post("/start", response_model=StartSessionResponse)
async def start_session(request: StartSessionRequest):
    """
    Start the interview.

    Counters, history and the event log start from zero; both detection
    channels begin polling.
    """
    global _session, _source

    if _session is not None and _session.is_running:
        raise HTTPException(status_code=409, detail="An interview is already running")

    source = PushFrameSource()
    session = InterviewSession(source, candidate_name=request.candidate_name)

    result = await session.start()
    if not result.ok:
        raise HTTPException(status_code=503, detail=result.message)

    _session, _source = session, source
    logger.info(f"Started interview session: {session.id}")

    return StartSessionResponse(session_id=session.id, status="active", message=result.message)


@router.post("/faces", response_model=PushResponse)
async def push_faces(request: FacesRequest):
    """Stage the latest face result for the next face tick"""
    _require_running()
    try:
        faces = [face.to_observation() for face in request.faces]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    _source.push_faces(faces)
    return PushResponse(accepted=len(faces))


@router.post("/objects", response_model=PushResponse)
async def push_objects(request: ObjectsRequest):
    """Stage the latest object result for the next object tick"""
    _require_running()
    detections = [d.to_detection() for d in request.detections]
    _source.push_objects(detections)
    return PushResponse(accepted=len(detections))


@router.get("/status", response_model=StatusResponse)
async def get_status():
    """Counters, integrity score and focus state"""
    return StatusResponse(**_require_session().status())


@router.get("/events", response_model=List[EventOut])
async def get_events(since: int = 0):
    """Event log entries, starting at index `since`"""
    entries = _require_session().events.entries()
    return [EventOut(**entry.to_dict()) for entry in entries[max(0, since):]]


@router.post("/stop", response_model=StopSessionResponse)
async def stop_session(
    request: StopSessionRequest,
    store: ReportStore = Depends(get_report_store)
):
    """
    Stop the interview and produce its report.

    The report is saved to storage when possible; the text report is
    returned either way. A session that already stopped is rejected
    with 400 so its report is saved only once.
    """
    session = _require_running()
    snapshot = await session.stop()

    published = publish_report(
        snapshot,
        store if request.save_report else None,
        candidate_name=request.candidate_name,
        scorer=session.scorer
    )
    assessment = session.scorer.assess(session.counters)

    return StopSessionResponse(
        session_id=session.id,
        integrity_score=snapshot.integrity_score,
        label=assessment.label,
        recommendation=assessment.recommendation,
        duration=snapshot.duration_text,
        counters=snapshot.counters,
        saved=published.saved,
        report_id=published.report.id if published.saved else None,
        report_text=published.text,
        error=published.error if request.save_report else None
    )


@router.get("/health")
async def health_check():
    """Health check for the proctoring module"""
    return {
        "status": "healthy",
        "active_session": _session.id if _session is not None and _session.is_running else None,
        "module": "interview-proctoring"
    }


async def shutdown_session():
    """Stop a running interview when the service shuts down"""
    if _session is not None and _session.is_running:
        await _session.stop()
