"""Mosaic masking applied to face regions."""
from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from ..models import Rect

MIN_BLOCK_SIZE = 2


def pixelate(region: np.ndarray, block_size: int) -> np.ndarray:
    """Return a blocky copy of ``region``.

    The region is shrunk with area interpolation, which averages away
    identifying detail, then blown back up with nearest-neighbour so each
    block is flat-coloured. Block sizes below 2 are raised to 2.
    """

    if region.size == 0:
        return region
    block_size = max(MIN_BLOCK_SIZE, int(block_size))
    height, width = region.shape[:2]
    small_w = max(1, width // block_size)
    small_h = max(1, height // block_size)

    small = cv2.resize(region, (small_w, small_h), interpolation=cv2.INTER_AREA)
    return cv2.resize(small, (width, height), interpolation=cv2.INTER_NEAREST)


def mask_region(frame: np.ndarray, rect: Rect, block_size: int) -> None:
    """Replace ``rect`` inside ``frame`` with its pixelated version, in place."""

    if rect.is_empty():
        return
    roi = frame[rect.y : rect.bottom, rect.x : rect.right]
    frame[rect.y : rect.bottom, rect.x : rect.right] = pixelate(roi, block_size)


def draw_outline(
    frame: np.ndarray,
    rect: Rect,
    color: Sequence[int] = (0, 255, 0),
    thickness: int = 2,
) -> None:
    if rect.is_empty():
        return
    cv2.rectangle(
        frame,
        (rect.x, rect.y),
        (rect.right - 1, rect.bottom - 1),
        tuple(int(channel) for channel in color),
        thickness,
    )
