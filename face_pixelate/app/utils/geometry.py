"""Geometry helper utilities for face rectangles."""
from __future__ import annotations

import math

from ..models import Rect


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(rect: Rect, width: int, height: int) -> Rect:
    """Intersect ``rect`` with the frame bounds ``[0, width) x [0, height)``."""

    x1 = min(max(0, rect.x), width)
    y1 = min(max(0, rect.y), height)
    x2 = min(width, rect.right)
    y2 = min(height, rect.bottom)
    return Rect(x1, y1, max(0, x2 - x1), max(0, y2 - y1))


def expand(rect: Rect, pad_ratio: float, width: int, height: int) -> Rect:
    """Grow ``rect`` on every side by ``pad_ratio`` of its size, then clamp to the frame.

    Detector boxes hug the facial landmarks; padding pulls hairline, jaw and
    ears into the masked area.
    """

    pad_ratio = max(0.0, pad_ratio)
    pad_w = _round_half_up(rect.width * pad_ratio)
    pad_h = _round_half_up(rect.height * pad_ratio)
    grown = Rect(
        rect.x - pad_w,
        rect.y - pad_h,
        rect.width + 2 * pad_w,
        rect.height + 2 * pad_h,
    )
    return clamp(grown, width, height)
