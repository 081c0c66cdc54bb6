"""Entry point for real-time face pixelation."""
from __future__ import annotations

import argparse
import itertools
import logging
import signal
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

from pydantic import ValidationError

from .config.settings import AppSettings, load_settings
from .errors import StartupError
from .pipeline import FramePipeline, run_session
from .services.detector import YuNetFaceDetector
from .utils.display import NullDisplay, OpenCVDisplay
from .utils.video import iter_frames, managed_capture, read_initial_frame

LOGGER = logging.getLogger(__name__)


class CliArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports misuse with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = CliArgumentParser(
        prog="face-pixelate",
        description="Pixelate faces in a live camera feed using the YuNet detector",
    )
    parser.add_argument("--model", type=str, default=None, help="YuNet model path")
    parser.add_argument("--camera", type=str, default=None, help="Camera index (default 0), video file or stream URL")
    parser.add_argument("--score-threshold", type=float, default=None, help="Detector score threshold")
    parser.add_argument("--nms-threshold", type=float, default=None, help="NMS threshold")
    parser.add_argument("--top-k", type=int, default=None, help="Top-K before NMS")
    parser.add_argument("--pixel-block", type=int, default=None, help="Pixelation strength")
    parser.add_argument("--face-padding", type=float, default=None, help="Extra mask padding ratio")
    parser.add_argument("--hold-frames", type=int, default=None, help="Frames to keep last boxes")
    parser.add_argument("--config", type=str, default=None, help="YAML settings file")
    parser.add_argument("--no-display", action="store_true", help="Disable OpenCV window display")
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Logging format")
    return parser


def setup_logging(settings: AppSettings) -> None:
    log_level = getattr(logging, settings.log_level, logging.INFO)
    if settings.log_format == "json":
        formatter = logging.Formatter('{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}')
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logging.basicConfig(level=log_level, handlers=[handler])


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    overrides = {}
    if args.model:
        overrides["model_path"] = Path(args.model)
    if args.camera is not None:
        overrides["camera"] = args.camera
    if args.score_threshold is not None:
        overrides["score_threshold"] = args.score_threshold
    if args.nms_threshold is not None:
        overrides["nms_threshold"] = args.nms_threshold
    if args.top_k is not None:
        overrides["top_k"] = args.top_k
    if args.pixel_block is not None:
        overrides["pixel_block"] = args.pixel_block
    if args.face_padding is not None:
        overrides["face_padding"] = args.face_padding
    if args.hold_frames is not None:
        overrides["hold_frames"] = args.hold_frames
    if args.no_display:
        overrides["display"] = False
    if args.log_format:
        overrides["log_format"] = args.log_format

    config_path = Path(args.config) if args.config else None
    return load_settings(config_path, **overrides)


def build_display(settings: AppSettings):
    if settings.display:
        return OpenCVDisplay(settings.window_name)
    return NullDisplay()


def run_anonymizer(args: argparse.Namespace) -> int:
    try:
        settings = resolve_settings(args)
    except (StartupError, ValidationError) as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    setup_logging(settings)

    LOGGER.info("Starting face pixelation on source %s", settings.camera)
    display = build_display(settings)
    try:
        with managed_capture(settings.camera) as capture:
            first = read_initial_frame(capture)
            height, width = first.data.shape[:2]
            detector = YuNetFaceDetector(
                settings.model_path,
                (width, height),
                settings.score_threshold,
                settings.nms_threshold,
                settings.top_k,
            )
            pipeline = FramePipeline(
                detector,
                pixel_block=settings.pixel_block,
                face_padding=settings.face_padding,
                hold_frames=settings.hold_frames,
                box_color=settings.box_color_bgr,
                box_thickness=settings.box_thickness,
            )
            if settings.display:
                LOGGER.info("Press q or ESC to quit.")
            frames = itertools.chain([first], iter_frames(capture, start_index=first.index))
            summary = run_session((frame.data for frame in frames), pipeline, display)
    except StartupError as exc:
        LOGGER.error("%s", exc)
        return 1
    finally:
        display.close()

    LOGGER.info(
        "Session ended (%s) | frames=%d | masked=%d",
        summary.end_reason.value,
        summary.frames_processed,
        summary.frames_masked,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    def handle_interrupt(signum: int, frame: Optional[object]) -> None:  # pragma: no cover - signal handling
        LOGGER.warning("Received interrupt signal (%d), shutting down", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_interrupt)
    sys.exit(run_anonymizer(args))


if __name__ == "__main__":  # pragma: no cover
    main()
