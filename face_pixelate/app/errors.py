"""Startup failures reported to the entry point."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CAMERA_OPEN = "camera_open"
    INITIAL_FRAME = "initial_frame"
    DETECTOR_CREATE = "detector_create"
    INVALID_CONFIG = "invalid_config"


class StartupError(RuntimeError):
    """Unrecoverable failure detected before the frame loop starts."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.args[0]}"
