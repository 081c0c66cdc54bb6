"""Shared data models for face pixelation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class Rect:
    """Integer rectangle in frame pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @classmethod
    def from_xywh(cls, values: Sequence[float]) -> "Rect":
        """Build a rectangle from the first four values of a detector row, truncating toward zero."""

        x, y, width, height = values[:4]
        return cls(int(x), int(y), int(width), int(height))


@dataclass
class FaceDetection:
    """Represents a single detected face."""

    rect: Rect
    score: float
    landmarks: Optional[Sequence[Point]] = None
