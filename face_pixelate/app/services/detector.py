"""YuNet face detection service wrapper."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

import cv2
import numpy as np

from ..errors import ErrorKind, StartupError
from ..models import FaceDetection, Rect

LOGGER = logging.getLogger(__name__)

# YuNet rows: x, y, w, h, five (x, y) landmarks, score.
_LANDMARK_SLICE = slice(4, 14)
_SCORE_INDEX = 14


class YuNetFaceDetector:
    """Encapsulates OpenCV's YuNet neural face detector.

    Score threshold, NMS threshold and top-k are owned by the detector; the
    detections it returns are already filtered and ranked by score.
    """

    def __init__(
        self,
        model_path: Path,
        input_size: Tuple[int, int],
        score_threshold: float,
        nms_threshold: float,
        top_k: int,
    ) -> None:
        self.model_path = Path(model_path)
        self.score_threshold = score_threshold
        self.nms_threshold = nms_threshold
        self.top_k = top_k
        if not self.model_path.is_file():
            raise StartupError(
                ErrorKind.DETECTOR_CREATE,
                f"Failed to create YuNet detector. Check model path: {self.model_path}",
            )
        LOGGER.info("Loading YuNet model from %s", self.model_path)
        try:
            self._model = cv2.FaceDetectorYN.create(
                str(self.model_path),
                "",
                tuple(input_size),
                score_threshold,
                nms_threshold,
                top_k,
            )
        except cv2.error as exc:
            raise StartupError(
                ErrorKind.DETECTOR_CREATE,
                f"Failed to create YuNet detector from {self.model_path}: {exc}",
            ) from exc
        if self._model is None:
            raise StartupError(
                ErrorKind.DETECTOR_CREATE,
                f"Failed to create YuNet detector. Check model path: {self.model_path}",
            )

    def predict(self, frame: np.ndarray) -> List[FaceDetection]:
        """Run inference on a frame and return score-ranked detections."""

        height, width = frame.shape[:2]
        self._model.setInputSize((width, height))
        _, faces = self._model.detect(frame)
        if faces is None:
            return []
        detections = [self._to_detection(row) for row in faces]
        LOGGER.debug("Detected %d faces", len(detections))
        return detections

    @staticmethod
    def _to_detection(row: np.ndarray) -> FaceDetection:
        points = row[_LANDMARK_SLICE].reshape(-1, 2)
        landmarks = [(float(px), float(py)) for px, py in points]
        return FaceDetection(rect=Rect.from_xywh(row), score=float(row[_SCORE_INDEX]), landmarks=landmarks)
