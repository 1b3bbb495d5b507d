"""
Tests for report building, the text report and report storage
"""
import json
import os
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest


REPORT_KEYS = {
    "id",
    "timestamp",
    "candidateName",
    "interviewDuration",
    "startTime",
    "endTime",
    "focusIssues",
    "prohibitedItems",
    "integrityScore",
    "events",
}


@pytest.fixture
def snapshot():
    from interview_guard.proctor.report import SessionSnapshot
    from interview_guard.proctor.types import EventLogEntry, Severity

    return SessionSnapshot(
        session_id="INT_ABC123",
        candidate_name="Ada Lovelace",
        duration_text="00:12:34",
        start_time_iso="2024-05-06T08:00:00.000Z",
        end_time_iso="2024-05-06T08:12:34.000Z",
        counters={
            "look_away": 3,
            "no_face": 1,
            "multiple_faces": 0,
            "phone": 1,
            "book": 0,
            "device": 2,
        },
        integrity_score=65,
        events=[
            EventLogEntry("10:00:00", "Starting interview process...", Severity.INFO),
            EventLogEntry("10:03:10", "Mobile phone detected! (91% confidence)", Severity.ERROR),
            EventLogEntry("10:05:00", "Face detected again.", Severity.SUCCESS),
        ]
    )


class TestBuildReport:
    """Test snapshot to report conversion"""

    def test_json_round_trip(self, snapshot):
        from interview_guard.proctor.report import ProctoringReport, build_report

        report = build_report(snapshot)
        restored = ProctoringReport.model_validate(json.loads(report.model_dump_json()))

        assert restored.counters().as_dict() == snapshot.counters
        assert restored.event_entries() == snapshot.events
        assert restored.integrityScore == 65

    def test_field_names(self, snapshot):
        from interview_guard.proctor.report import build_report

        data = build_report(snapshot).model_dump()

        assert set(data) == REPORT_KEYS
        assert data["focusIssues"] == {"lookAwayCount": 3, "noFaceCount": 1, "multipleFacesCount": 0}
        assert data["prohibitedItems"] == {"phonesDetected": 1, "booksDetected": 0, "devicesDetected": 2}
        assert data["events"][1] == {
            "timestamp": "10:03:10",
            "message": "Mobile phone detected! (91% confidence)",
            "type": "error",
        }

    def test_candidate_name_override(self, snapshot):
        from interview_guard.proctor.report import build_report

        assert build_report(snapshot, "Grace Hopper").candidateName == "Grace Hopper"
        assert build_report(snapshot).candidateName == "Ada Lovelace"


class TestTextReport:
    """Test the plain-text report"""

    def test_sections(self, snapshot):
        from interview_guard.proctor.report import build_report, render_text_report

        text = render_text_report(build_report(snapshot), generated_at=datetime(2024, 5, 6, 10, 15, 0))
        lines = text.splitlines()

        assert lines[0] == "=== INTERVIEWGUARD PRO - PROCTORING REPORT ==="
        assert "Generated: 2024-05-06 10:15:00" in lines
        assert "Name: Ada Lovelace" in lines
        assert "Interview Duration: 00:12:34" in lines
        assert "Times looked away: 3" in lines
        assert "Other devices: 2" in lines
        assert "Integrity Score: 65/100" in lines
        assert "FAIR - Several focus and integrity concerns" in lines
        assert any(line.startswith("Recommendation: CONDITIONALLY RECOMMENDED") for line in lines)
        assert "[10:03:10] Mobile phone detected! (91% confidence)" in lines
        assert lines[-1] == "InterviewGuard Pro - AI-Powered Proctoring System"

    def test_events_in_order(self, snapshot):
        from interview_guard.proctor.report import build_report, render_text_report

        text = render_text_report(build_report(snapshot))
        log = text.split("=== DETAILED EVENT LOG ===")[1]

        assert log.index("Starting interview") < log.index("Mobile phone") < log.index("Face detected")


class TestFormatting:

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00:00"),
        (59.9, "00:00:59"),
        (754, "00:12:34"),
        (3600 * 26 + 61, "26:01:01"),
        (-5, "00:00:00"),
    ])
    def test_format_duration(self, seconds, expected):
        from interview_guard.proctor.report import format_duration
        assert format_duration(seconds) == expected

    def test_iso_utc(self):
        from interview_guard.proctor.report import iso_utc

        moment = datetime(2024, 5, 6, 8, 0, 0, 123456, tzinfo=timezone.utc)
        assert iso_utc(moment) == "2024-05-06T08:00:00.123Z"


class TestReportStore:
    """Test the JSON file store"""

    def test_create_assigns_id_and_writes_file(self, report_store, snapshot):
        from interview_guard.proctor.report import build_report

        stored = report_store.create(build_report(snapshot))

        assert stored.id
        assert stored.timestamp.endswith("Z")
        path = os.path.join(report_store.directory, f"report-{stored.id}.json")
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
        assert set(data) == REPORT_KEYS
        assert data["integrityScore"] == 65

    def test_create_fills_defaults(self, report_store):
        stored = report_store.create({})

        assert stored.candidateName == "Test Candidate"
        assert stored.interviewDuration == "00:00:00"
        assert stored.integrityScore == 100
        assert stored.focusIssues.lookAwayCount == 0
        assert stored.events == []

    def test_zero_score_is_kept(self, report_store):
        assert report_store.create({"integrityScore": 0}).integrityScore == 0

    def test_get_list_delete(self, report_store):
        first = report_store.create({"candidateName": "A"})
        second = report_store.create({"candidateName": "B"})

        assert report_store.get(first.id).candidateName == "A"
        assert {r.id for r in report_store.list()} == {first.id, second.id}
        assert len(report_store) == 2

        assert report_store.delete(first.id) is True
        assert report_store.delete(first.id) is False
        assert report_store.get(first.id) is None
        assert not os.path.exists(os.path.join(report_store.directory, f"report-{first.id}.json"))

    def test_reload_from_directory(self, report_store):
        from interview_guard.proctor.storage import ReportStore

        stored = report_store.create({"candidateName": "Persisted"})
        reloaded = ReportStore(report_store.directory)

        assert reloaded.get(stored.id).candidateName == "Persisted"

    def test_unreadable_file_is_skipped(self, report_store):
        from interview_guard.proctor.storage import ReportStore

        report_store.create({"candidateName": "Good"})
        with open(os.path.join(report_store.directory, "report-broken.json"), "w") as handle:
            handle.write("{not json")

        assert len(ReportStore(report_store.directory)) == 1

    def test_report_ids_are_unique(self):
        from interview_guard.proctor.storage import generate_report_id

        ids = {generate_report_id() for _ in range(100)}
        assert len(ids) == 100


class TestPublishReport:
    """Test save-or-fallback publishing"""

    def test_saved(self, report_store, snapshot):
        from interview_guard.proctor.storage import publish_report

        result = publish_report(snapshot, report_store)

        assert result.saved is True
        assert report_store.get(result.report.id) is not None
        assert f"Report ID: {result.report.id}" in result.text

    def test_storage_failure_falls_back_to_text(self, snapshot):
        from interview_guard.proctor.exceptions import ReportStorageError
        from interview_guard.proctor.storage import publish_report

        store = MagicMock()
        store.create.side_effect = ReportStorageError("disk full")

        result = publish_report(snapshot, store)

        assert result.saved is False
        assert result.error == "disk full"
        assert "Report ID: local" in result.text
        assert "Integrity Score: 65/100" in result.text

    def test_no_store(self, snapshot):
        from interview_guard.proctor.storage import publish_report

        result = publish_report(snapshot, None)

        assert result.saved is False
        assert result.text.startswith("=== INTERVIEWGUARD PRO")
