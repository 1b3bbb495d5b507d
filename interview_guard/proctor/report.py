"""
Proctoring Report - Session snapshot and persisted report schema

The JSON field names of ProctoringReport are the ones existing report
consumers read; do not rename them.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .metrics import ViolationCounters
from .scoring import IntegrityScorer
from .types import EventLogEntry, Severity

logger = logging.getLogger(__name__)


def iso_utc(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix"""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_duration(seconds: float) -> str:
    """HH:MM:SS"""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session handed to report generation"""
    session_id: str
    candidate_name: str
    duration_text: str
    start_time_iso: str
    end_time_iso: str
    counters: Dict[str, int]
    integrity_score: int
    events: List[EventLogEntry] = field(default_factory=list)
    running: bool = False


# ============== Persisted Report Schema ==============

class FocusIssues(BaseModel):
    lookAwayCount: int = 0
    noFaceCount: int = 0
    multipleFacesCount: int = 0


class ProhibitedItems(BaseModel):
    phonesDetected: int = 0
    booksDetected: int = 0
    devicesDetected: int = 0


class ReportEvent(BaseModel):
    timestamp: str
    message: str
    type: str = Severity.INFO.value

    def to_entry(self) -> EventLogEntry:
        return EventLogEntry(self.timestamp, self.message, Severity(self.type))


class ReportPayload(BaseModel):
    """Report body as submitted by a client; missing fields get defaults on save"""
    candidateName: Optional[str] = None
    interviewDuration: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    focusIssues: Optional[FocusIssues] = None
    prohibitedItems: Optional[ProhibitedItems] = None
    integrityScore: Optional[int] = None
    events: Optional[List[ReportEvent]] = None


class ProctoringReport(BaseModel):
    """Stored proctoring report"""
    id: Optional[str] = None
    timestamp: Optional[str] = None
    candidateName: str = "Test Candidate"
    interviewDuration: str = "00:00:00"
    startTime: str
    endTime: str
    focusIssues: FocusIssues = Field(default_factory=FocusIssues)
    prohibitedItems: ProhibitedItems = Field(default_factory=ProhibitedItems)
    integrityScore: int = 100
    events: List[ReportEvent] = Field(default_factory=list)

    def counters(self) -> ViolationCounters:
        """Re-import the six counters"""
        return ViolationCounters(
            look_away=self.focusIssues.lookAwayCount,
            no_face=self.focusIssues.noFaceCount,
            multiple_faces=self.focusIssues.multipleFacesCount,
            phone=self.prohibitedItems.phonesDetected,
            book=self.prohibitedItems.booksDetected,
            device=self.prohibitedItems.devicesDetected
        )

    def event_entries(self) -> List[EventLogEntry]:
        return [event.to_entry() for event in self.events]


def build_report(snapshot: SessionSnapshot, candidate_name: Optional[str] = None) -> ProctoringReport:
    """
    Convert a session snapshot into the persisted report schema.

    id and timestamp stay empty; the storage layer assigns them.
    """
    counters = snapshot.counters
    return ProctoringReport(
        candidateName=candidate_name or snapshot.candidate_name,
        interviewDuration=snapshot.duration_text,
        startTime=snapshot.start_time_iso,
        endTime=snapshot.end_time_iso,
        focusIssues=FocusIssues(
            lookAwayCount=counters["look_away"],
            noFaceCount=counters["no_face"],
            multipleFacesCount=counters["multiple_faces"]
        ),
        prohibitedItems=ProhibitedItems(
            phonesDetected=counters["phone"],
            booksDetected=counters["book"],
            devicesDetected=counters["device"]
        ),
        integrityScore=snapshot.integrity_score,
        events=[ReportEvent(**entry.to_dict()) for entry in snapshot.events]
    )


def _local(iso_value: str) -> str:
    try:
        moment = datetime.fromisoformat(iso_value.replace("Z", "+00:00"))
    except ValueError:
        return iso_value
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def render_text_report(
    report: ProctoringReport,
    scorer: Optional[IntegrityScorer] = None,
    generated_at: Optional[datetime] = None
) -> str:
    """
    Plain-text proctoring report.

    Needs nothing but the report itself, so it is always available as a
    fallback when storage is unreachable.
    """
    scorer = scorer or IntegrityScorer()
    generated_at = generated_at or datetime.now()
    score = report.integrityScore
    focus = report.focusIssues
    items = report.prohibitedItems

    lines = [
        "=== INTERVIEWGUARD PRO - PROCTORING REPORT ===",
        f"Report ID: {report.id or 'local'}",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "--- CANDIDATE INFORMATION ---",
        f"Name: {report.candidateName}",
        f"Interview Duration: {report.interviewDuration}",
        f"Start Time: {_local(report.startTime)}",
        f"End Time: {_local(report.endTime)}",
        "",
        "--- FOCUS ANALYSIS ---",
        f"Times looked away: {focus.lookAwayCount}",
        f"Times no face detected: {focus.noFaceCount}",
        f"Multiple faces detected: {focus.multipleFacesCount}",
        "",
        "--- PROHIBITED ITEMS DETECTED ---",
        f"Mobile phones: {items.phonesDetected}",
        f"Books/notes: {items.booksDetected}",
        f"Other devices: {items.devicesDetected}",
        "",
        "--- FINAL ASSESSMENT ---",
        f"Integrity Score: {score}/100",
        scorer.describe(score),
        "",
        f"Recommendation: {scorer.explain_recommendation(score)}",
        "",
        "=== DETAILED EVENT LOG ===",
    ]
    lines.extend(f"[{event.timestamp}] {event.message}" for event in report.events)
    lines.extend([
        "",
        "=============================================",
        "InterviewGuard Pro - AI-Powered Proctoring System",
    ])
    return "\n".join(lines) + "\n"
