"""
Pytest Configuration for InterviewGuard Tests
"""
from datetime import datetime, timedelta

import pytest


class FakeClock:
    """Monotonic clock the test moves by hand"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def build_face(right_x=180.0, left_x=220.0, nose_x=200.0, left=100.0, right=300.0):
    """
    Face whose eye centers sit at right_x / left_x.

    With the defaults the face is 200px wide and both eyes are 20px
    (0.1 of the width) from the nose: a focused face.
    """
    from interview_guard.proctor.types import FaceObservation

    def eye(cx):
        return [(cx - 6.0, 150.0), (cx, 146.0), (cx + 6.0, 151.0)]

    return FaceObservation(
        top_left=(left, 100.0),
        bottom_right=(right, 320.0),
        right_eye=eye(right_x),
        left_eye=eye(left_x),
        nose=[(nose_x, 200.0)]
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock(clock):
    """Wall clock that follows the fake monotonic clock"""
    base = datetime(2024, 5, 6, 10, 0, 0)
    return lambda: base + timedelta(seconds=clock.now)


@pytest.fixture
def make_face():
    return build_face


@pytest.fixture
def focused_face():
    return build_face()


@pytest.fixture
def away_face():
    """Head turned: right eye far from the nose, left eye close"""
    return build_face(right_x=150.0, left_x=190.0)


@pytest.fixture
def counters():
    from interview_guard.proctor.metrics import ViolationCounters
    return ViolationCounters()


@pytest.fixture
def events(wall_clock):
    from interview_guard.proctor.event_log import EventLog
    return EventLog(wall_clock=wall_clock)


@pytest.fixture
def fast_settings():
    """Settings with short poll intervals for loop tests"""
    from interview_guard.config import Settings
    return Settings(FACE_POLL_INTERVAL=0.01, OBJECT_POLL_INTERVAL=0.01)


@pytest.fixture
def report_store(tmp_path):
    from interview_guard.proctor.storage import ReportStore
    return ReportStore(str(tmp_path / "reports"))


@pytest.fixture
def app(report_store):
    """FastAPI app with an isolated report store"""
    from interview_guard.main import app
    from interview_guard.api.deps import get_report_store

    app.dependency_overrides[get_report_store] = lambda: report_store
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """FastAPI test client; one event loop for the whole test"""
    from fastapi.testclient import TestClient
    import interview_guard.proctor.api as interview_api

    with TestClient(app) as test_client:
        yield test_client

    interview_api._session = None
    interview_api._source = None
