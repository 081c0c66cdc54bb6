"""Video capture utilities for the pixelation pipeline."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Iterable, Union

import cv2

from ..errors import ErrorKind, StartupError

LOGGER = logging.getLogger(__name__)

VideoSource = Union[int, str]


@dataclass
class Frame:
    index: int
    data: "np.ndarray"
    timestamp_ms: float


try:  # pragma: no cover - only imported when numpy available
    import numpy as np
except ImportError:  # pragma: no cover
    raise ImportError("numpy is required for the video utilities. Install via `pip install -e .`")


def parse_source(value: VideoSource) -> VideoSource:
    """Interpret a numeric string as a camera index and anything else as a path or URL."""

    if isinstance(value, int):
        return value
    try:
        return int(value)
    except ValueError:
        return value


def open_video_source(source: VideoSource) -> cv2.VideoCapture:
    """Open a video capture object from an integer index or file path."""

    capture = cv2.VideoCapture(source)
    if not capture.isOpened():
        capture.release()
        raise StartupError(ErrorKind.CAMERA_OPEN, f"Unable to open video source: {source}")
    LOGGER.info("Video source %s opened successfully", source)
    return capture


@contextmanager
def managed_capture(source: VideoSource) -> Generator[cv2.VideoCapture, None, None]:
    """Context manager ensuring capture release."""

    capture = open_video_source(source)
    try:
        yield capture
    finally:
        LOGGER.info("Releasing video source")
        capture.release()


def read_initial_frame(capture: cv2.VideoCapture) -> Frame:
    """Read the first frame, which fixes the frame size for the session."""

    success, data = capture.read()
    if not success or data is None or data.size == 0:
        raise StartupError(ErrorKind.INITIAL_FRAME, "Failed to read initial frame from video source")
    height, width = data.shape[:2]
    LOGGER.info("Initial frame size %dx%d", width, height)
    return Frame(index=1, data=data, timestamp_ms=0.0)


def iter_frames(capture: cv2.VideoCapture, start_index: int = 0) -> Iterable[Frame]:
    """Yield frames from capture until the stream ends."""

    frame_idx = start_index
    fps = capture.get(cv2.CAP_PROP_FPS) or 0
    while True:
        success, data = capture.read()
        if not success or data is None or data.size == 0:
            LOGGER.info("End of stream reached after %d frames", frame_idx)
            break
        frame_idx += 1
        timestamp_ms = (frame_idx / fps * 1000) if fps else 0.0
        yield Frame(index=frame_idx, data=data, timestamp_ms=timestamp_ms)
