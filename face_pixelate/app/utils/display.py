"""Display sinks for the masked frames."""
from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

LOGGER = logging.getLogger(__name__)

ESCAPE_KEY = 27
QUIT_KEYS = {ord("q"), ord("Q"), ESCAPE_KEY}


def is_quit_key(key: Optional[int]) -> bool:
    return key is not None and key in QUIT_KEYS


class OpenCVDisplay:
    """Render frames in a HighGUI window and poll the keyboard."""

    def __init__(self, window_name: str, wait_ms: int = 1) -> None:
        self.window_name = window_name
        self.wait_ms = wait_ms

    def show(self, frame: np.ndarray) -> None:
        cv2.imshow(self.window_name, frame)

    def poll_key(self) -> Optional[int]:
        key = cv2.waitKey(self.wait_ms)
        if key < 0:
            return None
        return key & 0xFF

    def close(self) -> None:
        LOGGER.debug("Closing display window %s", self.window_name)
        cv2.destroyAllWindows()


class NullDisplay:
    """Headless sink: frames are dropped and no key is ever pressed."""

    def show(self, frame: np.ndarray) -> None:
        return None

    def poll_key(self) -> Optional[int]:
        return None

    def close(self) -> None:
        return None
