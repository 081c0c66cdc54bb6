"""Configuration utilities for face pixelation."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ErrorKind, StartupError
from ..utils.video import parse_source


class AppSettings(BaseSettings):
    """Application configuration sourced from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FACE_PIXELATE_",
        case_sensitive=False,
        protected_namespaces=(),
    )

    model_path: Path = Field(
        default=Path("face_detection_yunet_2023mar.onnx"),
        description="YuNet ONNX model path",
    )
    camera: Union[int, str] = Field(default=0, description="Camera index, video file or stream URL")
    score_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    nms_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    top_k: int = Field(default=5000, ge=1, description="Candidate boxes kept before NMS")
    pixel_block: int = Field(default=28, description="Mosaic block size; larger hides more")
    face_padding: float = Field(default=0.5, description="Extra mask padding ratio per side")
    hold_frames: int = Field(default=20, description="Frames to keep last boxes after a dropout")
    display: bool = Field(default=True, description="Render OpenCV window when true.")
    window_name: str = Field(default="YuNet Face Pixelate")
    box_color_bgr: List[int] = Field(default_factory=lambda: [0, 255, 0])
    box_thickness: int = Field(default=2, ge=1)
    log_format: Literal["text", "json"] = Field(default="text")
    log_level: str = Field(default="INFO")

    @field_validator("model_path", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser()

    @field_validator("camera")
    @classmethod
    def _parse_camera(cls, value: Union[int, str]) -> Union[int, str]:
        return parse_source(value)

    @field_validator("pixel_block")
    @classmethod
    def _floor_pixel_block(cls, value: int) -> int:
        return max(2, value)

    @field_validator("hold_frames")
    @classmethod
    def _floor_hold_frames(cls, value: int) -> int:
        return max(0, value)

    @field_validator("face_padding")
    @classmethod
    def _floor_face_padding(cls, value: float) -> float:
        return max(0.0, value)

    @field_validator("box_color_bgr")
    @classmethod
    def _check_color(cls, value: List[int]) -> List[int]:
        if len(value) != 3 or any(channel < 0 or channel > 255 for channel in value):
            raise ValueError("box_color_bgr must hold three channel values in 0..255")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.upper()


def read_config_file(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping of setting names to values."""

    try:
        with Path(path).expanduser().open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        raise StartupError(ErrorKind.INVALID_CONFIG, f"Unable to read config file {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise StartupError(ErrorKind.INVALID_CONFIG, f"Config file {path} must contain a mapping")
    return {str(key).replace("-", "_"): value for key, value in payload.items()}


def load_settings(config_path: Optional[Path] = None, **overrides: object) -> AppSettings:
    """Return application settings.

    Precedence, highest first: ``overrides``, the YAML file, environment
    variables, field defaults.
    """

    values: Dict[str, Any] = read_config_file(config_path) if config_path else {}
    values.update(overrides)
    return AppSettings(**values)
