"""
Tests for replaying recorded detector output
"""
import asyncio
import json

import pytest


AWAY_FACE = {
    "topLeft": [100, 100],
    "bottomRight": [300, 320],
    "landmarks": [
        [144, 150, 150, 146, 156, 151],
        [184, 150, 190, 146, 196, 151],
        [200, 200],
    ],
}


@pytest.fixture
def recording(tmp_path):
    """Candidate looks away for 6 s, then a phone shows up"""
    lines = [json.dumps({"t": round(i * 0.25, 2), "faces": [AWAY_FACE]}) for i in range(24)]
    lines.append("this is not json")
    lines.append(json.dumps({"t": 6.0, "objects": [{"class": "cell phone", "score": 0.82}]}))
    path = tmp_path / "session.jsonl"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


class TestReplay:

    def test_load_skips_bad_lines(self, recording):
        from interview_guard.replay import load_recording

        records = load_recording(recording)

        assert len(records) == 25
        assert records[0].faces is not None and records[0].objects is None
        assert records[-1].objects[0].label == "cell phone"

    def test_load_skips_malformed_payloads(self, tmp_path):
        from interview_guard.replay import load_recording

        bad_face = dict(AWAY_FACE, landmarks=AWAY_FACE["landmarks"][:2] + [[]])
        path = tmp_path / "bad.jsonl"
        path.write_text("\n".join([
            json.dumps({"t": 0.0, "faces": 5}),
            json.dumps([1, 2, 3]),
            json.dumps({"t": 0.2, "faces": [bad_face]}),
            json.dumps({"t": 0.4, "objects": [{"class": "book", "score": 0.9}]}),
        ]) + "\n", encoding="utf-8")

        records = load_recording(str(path))

        assert len(records) == 1
        assert records[0].objects[0].label == "book"

    def test_main_survives_malformed_payloads(self, tmp_path, capsys):
        from interview_guard.replay import main

        path = tmp_path / "bad.jsonl"
        path.write_text(
            json.dumps({"t": 0.0, "faces": 5}) + "\n"
            + json.dumps({"t": 0.5, "faces": [AWAY_FACE]}) + "\n",
            encoding="utf-8"
        )

        assert main([str(path)]) == 0
        assert "=== INTERVIEWGUARD PRO" in capsys.readouterr().out

    def test_run_replay(self, recording):
        from interview_guard.replay import load_recording, run_replay

        snapshot = asyncio.run(run_replay(load_recording(recording), candidate_name="Ada"))

        assert snapshot.candidate_name == "Ada"
        assert snapshot.counters["look_away"] == 2
        assert snapshot.counters["phone"] == 1
        assert snapshot.integrity_score == 86
        assert snapshot.duration_text == "00:00:06"

    def test_empty_recording(self, tmp_path):
        from interview_guard.proctor.exceptions import CaptureUnavailableError
        from interview_guard.replay import run_replay

        with pytest.raises(CaptureUnavailableError):
            asyncio.run(run_replay([]))

    def test_main_prints_text_report(self, recording, capsys):
        from interview_guard.replay import main

        assert main([recording, "--candidate", "Ada"]) == 0

        out = capsys.readouterr().out
        assert "Name: Ada" in out
        assert "Times looked away: 2" in out

    def test_main_json(self, recording, capsys):
        from interview_guard.replay import main

        assert main([recording, "--json"]) == 0

        report = json.loads(capsys.readouterr().out)
        assert report["prohibitedItems"]["phonesDetected"] == 1

    def test_main_missing_file(self, tmp_path):
        from interview_guard.replay import main

        assert main([str(tmp_path / "missing.jsonl")]) == 1
