"""Per-frame face stabilization and masking pipeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .models import FaceDetection, Rect
from .utils.display import is_quit_key
from .utils.geometry import clamp, expand
from .utils.pixelation import draw_outline, mask_region

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StabilizerState:
    """Boxes remembered across frames and how many frames they have gone unconfirmed."""

    last_boxes: Tuple[Rect, ...] = ()
    missed_frames: int = 0


def stabilize(
    state: StabilizerState,
    fresh_boxes: Sequence[Rect],
    hold_frames: int,
) -> Tuple[StabilizerState, Tuple[Rect, ...]]:
    """Advance the stabilizer by one frame.

    Returns the next state and the boxes to mask this frame. Fresh boxes
    always win. Without them, held boxes are reused until ``hold_frames``
    consecutive misses, after which the state is cleared and nothing is
    masked.
    """

    if fresh_boxes:
        boxes = tuple(fresh_boxes)
        return StabilizerState(last_boxes=boxes, missed_frames=0), boxes
    if state.last_boxes and state.missed_frames < hold_frames:
        held = StabilizerState(last_boxes=state.last_boxes, missed_frames=state.missed_frames + 1)
        return held, state.last_boxes
    return StabilizerState(), ()


def candidate_boxes(
    detections: Iterable[FaceDetection],
    pad_ratio: float,
    width: int,
    height: int,
) -> List[Rect]:
    """Pad and clamp raw detections, dropping any box left without area."""

    boxes: List[Rect] = []
    for detection in detections:
        box = clamp(expand(detection.rect, pad_ratio, width, height), width, height)
        if box.is_empty():
            continue
        boxes.append(box)
    return boxes


class FramePipeline:
    """Detect, stabilize and mask faces one frame at a time."""

    def __init__(
        self,
        detector: object,
        *,
        pixel_block: int = 28,
        face_padding: float = 0.5,
        hold_frames: int = 20,
        box_color: Sequence[int] = (0, 255, 0),
        box_thickness: int = 2,
    ) -> None:
        self._detector = detector
        self.pixel_block = pixel_block
        self.face_padding = face_padding
        self.hold_frames = hold_frames
        self.box_color = tuple(box_color)
        self.box_thickness = box_thickness
        self._state = StabilizerState()

    @property
    def state(self) -> StabilizerState:
        return self._state

    def reset(self) -> None:
        self._state = StabilizerState()

    def process(self, frame: np.ndarray) -> List[Rect]:
        """Mask faces in ``frame`` in place and return the boxes that were masked."""

        height, width = frame.shape[:2]
        detections = self._detector.predict(frame)
        fresh = candidate_boxes(detections, self.face_padding, width, height)
        self._state, boxes = stabilize(self._state, fresh, self.hold_frames)
        LOGGER.debug(
            "Frame boxes: fresh=%d masked=%d missed=%d",
            len(fresh),
            len(boxes),
            self._state.missed_frames,
        )

        for box in boxes:
            mask_region(frame, box, self.pixel_block)
            draw_outline(frame, box, self.box_color, self.box_thickness)
        return list(boxes)


class SessionEnd(str, Enum):
    END_OF_STREAM = "end_of_stream"
    QUIT = "quit"


@dataclass
class SessionSummary:
    frames_processed: int = 0
    frames_masked: int = 0
    end_reason: Optional[SessionEnd] = None
    boxes_masked_total: int = 0


def run_session(frames: Iterable[np.ndarray], pipeline: FramePipeline, display: object) -> SessionSummary:
    """Drive ``pipeline`` over ``frames`` until the stream ends or a quit key arrives."""

    summary = SessionSummary()
    for frame in frames:
        boxes = pipeline.process(frame)
        summary.frames_processed += 1
        summary.boxes_masked_total += len(boxes)
        if boxes:
            summary.frames_masked += 1

        display.show(frame)
        if is_quit_key(display.poll_key()):
            LOGGER.info("Quit signal received from keyboard")
            summary.end_reason = SessionEnd.QUIT
            return summary

    summary.end_reason = SessionEnd.END_OF_STREAM
    return summary
