"""
Replay - Run a recorded stream of detector output through a session

A recording is a JSON-lines file; each line is one detection result:

    {"t": 0.2, "faces": [{"topLeft": [..], "bottomRight": [..], "landmarks": [..]}]}
    {"t": 0.5, "objects": [{"class": "cell phone", "score": 0.82, "bbox": [..]}]}

`t` is seconds since the interview started. Records are applied in file
order with the session clock set to `t`, so the result is the same as
the live run that produced the recording.

Usage:
    python -m interview_guard.replay recording.jsonl [--candidate NAME] [--json]
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import ValidationError

from .config import Settings
from .proctor.exceptions import CaptureUnavailableError
from .proctor.frame_source import PushFrameSource
from .proctor.report import SessionSnapshot, build_report, render_text_report
from .proctor.schemas import FaceIn, ObjectIn
from .proctor.session import InterviewSession
from .proctor.types import FaceObservation, ObjectDetection
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class ReplayRecord:
    t: float
    faces: Optional[List[FaceObservation]] = None
    objects: Optional[List[ObjectDetection]] = None


class ReplayClock:
    """Session clock that only moves when the replay says so"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def parse_record(line: str) -> ReplayRecord:
    data = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError("record is not a JSON object")
    record = ReplayRecord(t=float(data.get("t", 0.0)))
    if "faces" in data:
        record.faces = [FaceIn.model_validate(f).to_observation() for f in data["faces"]]
    if "objects" in data:
        record.objects = [ObjectIn.model_validate(o).to_detection() for o in data["objects"]]
    return record


def load_recording(path: str) -> List[ReplayRecord]:
    """
    Read a JSON-lines recording.

    Malformed lines are logged and skipped.
    """
    records = []
    with open(path, "r", encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(parse_record(line))
            except (TypeError, ValueError, ValidationError) as e:
                logger.warning(f"{path}:{line_no}: skipping bad record ({e})")
    return records


async def run_replay(
    records: List[ReplayRecord],
    candidate_name: Optional[str] = None,
    settings: Optional[Settings] = None,
    started_at: Optional[datetime] = None
) -> SessionSnapshot:
    """
    Feed recorded detector output through a fresh session.

    Returns:
        Snapshot of the stopped session
    """
    if not records:
        raise CaptureUnavailableError("Recording contains no detection results")

    clock = ReplayClock(records[0].t)
    base = started_at or datetime.now()
    origin = records[0].t

    session = InterviewSession(
        PushFrameSource(),
        settings=settings,
        candidate_name=candidate_name,
        clock=clock,
        wall_clock=lambda: base + timedelta(seconds=clock.now - origin)
    )

    result = await session.start()
    if not result.ok:
        raise CaptureUnavailableError(result.message)

    for record in records:
        clock.now = record.t
        if record.faces is not None:
            session.process_faces(record.faces)
        if record.objects is not None:
            session.process_objects(record.objects)

    return await session.stop()


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description='Replay recorded detector output and print the proctoring report')
    parser.add_argument('recording', type=str, help='Path to JSON-lines recording')
    parser.add_argument('--candidate', type=str, default=None, help='Candidate name for the report')
    parser.add_argument('--json', action='store_true', help='Print the report as JSON instead of text')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_arguments(argv)
    setup_logging(
        service_name="interview-guard-replay",
        level="DEBUG" if args.debug else "WARNING",
        stream=sys.stderr
    )

    try:
        records = load_recording(args.recording)
        snapshot = asyncio.run(run_replay(records, candidate_name=args.candidate))
    except (OSError, CaptureUnavailableError) as e:
        logger.error(f"Replay failed: {e}")
        return 1

    report = build_report(snapshot)
    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(render_text_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
