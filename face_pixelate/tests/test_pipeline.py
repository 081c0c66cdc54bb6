from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Optional, Sequence

import numpy as np
import pytest

from face_pixelate.app.models import FaceDetection, Rect
from face_pixelate.app.pipeline import (
    FramePipeline,
    SessionEnd,
    StabilizerState,
    run_session,
)
from face_pixelate.app.utils.display import NullDisplay

GREEN = (0, 255, 0)


class ScriptedDetector:
    """Returns a pre-recorded list of detections per call."""

    def __init__(self, script: Sequence[List[FaceDetection]]) -> None:
        self._script = list(script)
        self.calls = 0

    def predict(self, frame: np.ndarray) -> List[FaceDetection]:
        self.calls += 1
        if self._script:
            return self._script.pop(0)
        return []


class RecordingDisplay:
    def __init__(self, keys: Optional[Sequence[Optional[int]]] = None) -> None:
        self.shown: List[np.ndarray] = []
        self._keys = list(keys or [])

    def show(self, frame: np.ndarray) -> None:
        self.shown.append(frame.copy())

    def poll_key(self) -> Optional[int]:
        if self._keys:
            return self._keys.pop(0)
        return None

    def close(self) -> None:
        return None


def _face(x: int, y: int, w: int, h: int, score: float = 0.9) -> FaceDetection:
    return FaceDetection(rect=Rect(x, y, w, h), score=score)


@pytest.fixture()
def frame() -> np.ndarray:
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, size=(480, 640, 3), dtype=np.uint8)


def test_process_masks_padded_face_region(frame: np.ndarray) -> None:
    original = frame.copy()
    pipeline = FramePipeline(ScriptedDetector([[_face(100, 100, 50, 50)]]), pixel_block=28, face_padding=0.5)

    boxes = pipeline.process(frame)

    assert boxes == [Rect(75, 75, 100, 100)]
    assert tuple(frame[75, 120]) == GREEN
    assert tuple(frame[174, 120]) == GREEN
    assert tuple(frame[120, 75]) == GREEN
    assert tuple(frame[120, 174]) == GREEN

    interior = frame[78:172, 78:172]
    assert not np.array_equal(interior, original[78:172, 78:172])
    # 100 // 28 = 3 blocks per axis
    assert len(np.unique(interior.reshape(-1, 3), axis=0)) <= 9

    assert np.array_equal(frame[:72], original[:72])
    assert np.array_equal(frame[178:], original[178:])
    assert np.array_equal(frame[:, :72], original[:, :72])
    assert np.array_equal(frame[:, 178:], original[:, 178:])


def test_process_holds_boxes_through_dropout(frame: np.ndarray) -> None:
    detector = ScriptedDetector([[_face(100, 100, 50, 50)], [], []])
    pipeline = FramePipeline(detector, hold_frames=1)

    assert pipeline.process(frame.copy()) == [Rect(75, 75, 100, 100)]
    assert pipeline.process(frame.copy()) == [Rect(75, 75, 100, 100)]
    assert pipeline.state.missed_frames == 1
    assert pipeline.process(frame.copy()) == []
    assert pipeline.state == StabilizerState()


def test_process_without_faces_leaves_frame_untouched(frame: np.ndarray) -> None:
    original = frame.copy()
    pipeline = FramePipeline(ScriptedDetector([]))
    assert pipeline.process(frame) == []
    assert np.array_equal(frame, original)


def test_reset_clears_held_boxes(frame: np.ndarray) -> None:
    pipeline = FramePipeline(ScriptedDetector([[_face(10, 10, 20, 20)]]))
    pipeline.process(frame)
    assert pipeline.state.last_boxes
    pipeline.reset()
    assert pipeline.state == StabilizerState()


def test_run_session_ends_at_end_of_stream(frame: np.ndarray) -> None:
    frames = [frame.copy() for _ in range(3)]
    detector = ScriptedDetector([[_face(100, 100, 50, 50)], [], []])
    display = RecordingDisplay()

    summary = run_session(iter(frames), FramePipeline(detector, hold_frames=0), display)

    assert summary.end_reason is SessionEnd.END_OF_STREAM
    assert summary.frames_processed == 3
    assert summary.frames_masked == 1
    assert summary.boxes_masked_total == 1
    assert len(display.shown) == 3
    assert not np.array_equal(display.shown[0], frame)


@pytest.mark.parametrize("key", [ord("q"), 27])
def test_run_session_stops_on_quit_key(frame: np.ndarray, key: int) -> None:
    frames = [frame.copy() for _ in range(5)]
    detector = ScriptedDetector([])
    display = RecordingDisplay(keys=[None, key])

    summary = run_session(iter(frames), FramePipeline(detector), display)

    assert summary.end_reason is SessionEnd.QUIT
    assert summary.frames_processed == 2
    assert detector.calls == 2


def test_run_session_ignores_other_keys(frame: np.ndarray) -> None:
    display = RecordingDisplay(keys=[ord("a"), ord("p")])
    summary = run_session(iter([frame.copy(), frame.copy()]), FramePipeline(ScriptedDetector([])), display)
    assert summary.end_reason is SessionEnd.END_OF_STREAM
    assert summary.frames_processed == 2


def test_long_session_summary_holds_only_counters() -> None:
    frame_count = 20000
    frames = (np.zeros((4, 4, 3), dtype=np.uint8) for _ in range(frame_count))
    detector = ScriptedDetector([[_face(0, 0, 2, 2)], [_face(1, 1, 2, 2), _face(0, 0, 1, 1)]])

    summary = run_session(frames, FramePipeline(detector, face_padding=0.0, hold_frames=0), NullDisplay())

    assert summary.end_reason is SessionEnd.END_OF_STREAM
    assert summary.frames_processed == frame_count
    assert summary.frames_masked == 2
    assert summary.boxes_masked_total == 3
    assert all(not isinstance(value, (list, tuple, dict)) for value in asdict(summary).values())


def test_process_logs_box_counts_every_frame(frame: np.ndarray, caplog) -> None:
    detector = ScriptedDetector([[_face(100, 100, 50, 50)], [], []])
    pipeline = FramePipeline(detector, hold_frames=1)

    with caplog.at_level(logging.DEBUG, logger="face_pixelate.app.pipeline"):
        for _ in range(3):
            pipeline.process(frame.copy())

    messages = [record.getMessage() for record in caplog.records if record.name == "face_pixelate.app.pipeline"]
    assert messages == [
        "Frame boxes: fresh=1 masked=1 missed=0",
        "Frame boxes: fresh=0 masked=1 missed=1",
        "Frame boxes: fresh=0 masked=0 missed=0",
    ]
