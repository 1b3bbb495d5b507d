"""
Tests for the HTTP API
"""
import time


FACE = {
    "topLeft": [100, 100],
    "bottomRight": [300, 320],
    "landmarks": [
        [174, 150, 180, 146, 186, 151],
        [214, 150, 220, 146, 226, 151],
        [200, 200],
    ],
}


def wait_for(client, predicate, timeout=3.0):
    """Poll /status until predicate(status) holds"""
    deadline = time.time() + timeout
    status = client.get("/api/interview/status").json()
    while not predicate(status) and time.time() < deadline:
        time.sleep(0.05)
        status = client.get("/api/interview/status").json()
    return status


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_health_counts_reports(self, client, report_store):
        report_store.create({"candidateName": "A"})

        response = client.get("/api/health")

        assert response.json() == {"status": "OK", "message": "Server is running", "reportsCount": 1}


class TestReportsApi:
    """Test stored report endpoints"""

    def test_create_and_get(self, client):
        response = client.post("/api/reports", json={"candidateName": "Ada", "integrityScore": 72})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Report saved successfully"

        report = client.get(f"/api/reports/{body['id']}").json()
        assert report["candidateName"] == "Ada"
        assert report["integrityScore"] == 72
        assert report["focusIssues"] == {"lookAwayCount": 0, "noFaceCount": 0, "multipleFacesCount": 0}

    def test_list(self, client):
        client.post("/api/reports", json={"candidateName": "A"})
        client.post("/api/reports", json={"candidateName": "B"})

        reports = client.get("/api/reports").json()

        assert {r["candidateName"] for r in reports} == {"A", "B"}

    def test_missing_report(self, client):
        response = client.get("/api/reports/nope")

        assert response.status_code == 404
        assert response.json()["detail"] == "Report not found"

    def test_delete(self, client):
        report_id = client.post("/api/reports", json={}).json()["id"]

        assert client.delete(f"/api/reports/{report_id}").status_code == 200
        assert client.delete(f"/api/reports/{report_id}").status_code == 404

    def test_download_text_report(self, client):
        report_id = client.post("/api/reports", json={"candidateName": "Ada"}).json()["id"]

        response = client.get(f"/api/reports/{report_id}/download")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert f'filename="proctoring-report-{report_id}.txt"' in response.headers["content-disposition"]
        assert "Name: Ada" in response.text


class TestInterviewApi:
    """Test the live interview endpoints"""

    def test_status_without_session(self, client):
        assert client.get("/api/interview/status").status_code == 404

    def test_push_requires_running_session(self, client):
        assert client.post("/api/interview/faces", json={"faces": []}).status_code == 404

    def test_start_and_double_start(self, client):
        response = client.post("/api/interview/start", json={"candidate_name": "Ada"})

        assert response.status_code == 200
        assert response.json()["status"] == "active"
        assert response.json()["session_id"].startswith("INT_")

        assert client.post("/api/interview/start", json={}).status_code == 409

    def test_pushed_faces_are_processed(self, client):
        client.post("/api/interview/start", json={})

        response = client.post("/api/interview/faces", json={"faces": [FACE, FACE]})
        assert response.json() == {"accepted": 2}

        status = wait_for(client, lambda s: s["counters"]["multiple_faces"] == 1)

        assert status["counters"]["multiple_faces"] == 1
        assert status["integrity_score"] == 90

    def test_pushed_objects_are_processed(self, client):
        client.post("/api/interview/start", json={})
        client.post(
            "/api/interview/objects",
            json={"detections": [{"class": "book", "score": 0.9, "bbox": [1, 2, 3, 4]}]}
        )

        status = wait_for(client, lambda s: s["counters"]["book"] == 1)

        assert status["integrity_score"] == 92

    def test_bad_landmarks_rejected(self, client):
        client.post("/api/interview/start", json={})
        face = dict(FACE, landmarks=[[1, 2]])

        assert client.post("/api/interview/faces", json={"faces": [face]}).status_code == 422

    def test_events(self, client):
        client.post("/api/interview/start", json={})

        events = client.get("/api/interview/events").json()
        assert events[0] == {
            "timestamp": events[0]["timestamp"],
            "message": "Starting interview process...",
            "type": "info",
        }

        tail = client.get("/api/interview/events", params={"since": 2}).json()
        assert tail == events[2:]

    def test_stop_saves_report(self, client, report_store):
        client.post("/api/interview/start", json={"candidate_name": "Ada"})

        response = client.post("/api/interview/stop", json={})

        assert response.status_code == 200
        body = response.json()
        assert body["saved"] is True
        assert body["integrity_score"] == 100
        assert body["label"] == "Excellent"
        assert body["report_text"].startswith("=== INTERVIEWGUARD PRO")

        stored = report_store.get(body["report_id"])
        assert stored.candidateName == "Ada"
        assert stored.events[-1].message == "Interview stopped. Ready to generate report."

        # The frozen session stays readable
        status = client.get("/api/interview/status").json()
        assert status["is_running"] is False
        assert client.post("/api/interview/faces", json={"faces": []}).status_code == 400

    def test_stop_without_saving(self, client, report_store):
        client.post("/api/interview/start", json={})

        body = client.post("/api/interview/stop", json={"save_report": False}).json()

        assert body["saved"] is False
        assert body["report_id"] is None
        assert body["error"] is None
        assert len(report_store) == 0

    def test_second_stop_does_not_save_again(self, client, report_store):
        client.post("/api/interview/start", json={})

        first = client.post("/api/interview/stop", json={})
        second = client.post("/api/interview/stop", json={})

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["detail"] == "Session is not active"
        assert len(report_store) == 1
