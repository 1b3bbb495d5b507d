"""
Report Storage - JSON file store for proctoring reports

One file per report (report-<id>.json). Existing files are loaded on
start-up; unreadable files are logged and skipped.
"""

import json
import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .exceptions import ReportStorageError
from .report import (
    FocusIssues,
    ProctoringReport,
    ProhibitedItems,
    ReportPayload,
    SessionSnapshot,
    build_report,
    iso_utc,
    render_text_report,
)
from .scoring import IntegrityScorer

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    digits = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
        if value == 0:
            return "".join(reversed(digits))


def generate_report_id() -> str:
    """Millisecond timestamp in base 36 followed by random hex"""
    return _base36(int(time.time() * 1000)) + uuid.uuid4().hex[:11]


class ReportStore:
    """
    Stores proctoring reports as pretty-printed JSON files.

    Reports are also kept in memory for listing; the directory is the
    source of truth on restart.
    """

    DEFAULT_CANDIDATE = "Test Candidate"

    def __init__(self, directory: str):
        self.directory = directory
        self._reports: Dict[str, ProctoringReport] = {}
        self._lock = threading.Lock()

        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise ReportStorageError(f"Cannot create report directory {directory}: {e}") from e

        self._load_existing()

    def _load_existing(self):
        for filename in sorted(os.listdir(self.directory)):
            if not filename.endswith(".json"):
                continue
            path = os.path.join(self.directory, filename)
            try:
                with open(path, "r", encoding="utf-8") as handle:
                    report = ProctoringReport.model_validate(json.load(handle))
            except (OSError, ValueError, ValidationError) as e:
                logger.warning(f"Skipping unreadable report {filename}: {e}")
                continue
            if report.id:
                self._reports[report.id] = report

        logger.info(f"Loaded {len(self._reports)} existing reports from {self.directory}")

    def _path(self, report_id: str) -> str:
        return os.path.join(self.directory, f"report-{report_id}.json")

    def create(self, payload: Union[ReportPayload, ProctoringReport, Dict[str, Any]]) -> ProctoringReport:
        """
        Store a new report, filling in any missing fields.

        Args:
            payload: Client payload; id and timestamp are always assigned here

        Returns:
            The stored report
        """
        if isinstance(payload, dict):
            payload = ReportPayload.model_validate(payload)
        data = payload.model_dump(exclude={"id", "timestamp"}) if isinstance(payload, ProctoringReport) \
            else payload.model_dump()

        now_iso = iso_utc(datetime.now(timezone.utc))
        report = ProctoringReport(
            id=generate_report_id(),
            timestamp=now_iso,
            candidateName=data.get("candidateName") or self.DEFAULT_CANDIDATE,
            interviewDuration=data.get("interviewDuration") or "00:00:00",
            startTime=data.get("startTime") or now_iso,
            endTime=data.get("endTime") or now_iso,
            focusIssues=data.get("focusIssues") or FocusIssues(),
            prohibitedItems=data.get("prohibitedItems") or ProhibitedItems(),
            integrityScore=100 if data.get("integrityScore") is None else data["integrityScore"],
            events=data.get("events") or []
        )

        try:
            with open(self._path(report.id), "w", encoding="utf-8") as handle:
                json.dump(report.model_dump(), handle, indent=2)
        except OSError as e:
            logger.error(f"Error saving report to file: {e}")
            raise ReportStorageError(f"Failed to save report: {e}") from e

        with self._lock:
            self._reports[report.id] = report

        logger.info(f"Saved report {report.id} for {report.candidateName}")
        return report

    def list(self) -> List[ProctoringReport]:
        """All reports, newest first"""
        with self._lock:
            reports = list(self._reports.values())
        return sorted(reports, key=lambda r: r.timestamp or "", reverse=True)

    def get(self, report_id: str) -> Optional[ProctoringReport]:
        with self._lock:
            return self._reports.get(report_id)

    def delete(self, report_id: str) -> bool:
        """
        Remove a report from memory and disk.

        Returns:
            False if the report does not exist
        """
        with self._lock:
            if self._reports.pop(report_id, None) is None:
                return False

        path = self._path(report_id)
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            raise ReportStorageError(f"Failed to delete report file: {e}") from e
        return True

    def __len__(self) -> int:
        return len(self._reports)


@dataclass
class PublishResult:
    """Outcome of submitting a finished session's report"""
    saved: bool
    report: ProctoringReport
    text: str
    error: Optional[str] = None


def publish_report(
    snapshot: SessionSnapshot,
    store: Optional[ReportStore],
    candidate_name: Optional[str] = None,
    scorer: Optional[IntegrityScorer] = None
) -> PublishResult:
    """
    Save a session report, falling back to the local text report.

    Never raises: a storage failure is logged and reported in the result.
    """
    report = build_report(snapshot, candidate_name)

    if store is None:
        return PublishResult(False, report, render_text_report(report, scorer), "No report store configured")

    try:
        stored = store.create(report)
    except ReportStorageError as e:
        logger.error(f"Error saving report, generating local report instead: {e}")
        return PublishResult(False, report, render_text_report(report, scorer), str(e))

    return PublishResult(True, stored, render_text_report(stored, scorer))
