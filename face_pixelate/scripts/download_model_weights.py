#!/usr/bin/env python3
"""Download YuNet face detection weights."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

import requests

_ZOO = "https://github.com/opencv/opencv_zoo/raw/main/models/face_detection_yunet"

MODEL_URLS = {
    "2023mar": f"{_ZOO}/face_detection_yunet_2023mar.onnx",
    "2023mar_int8": f"{_ZOO}/face_detection_yunet_2023mar_int8.onnx",
    "2023mar_int8bq": f"{_ZOO}/face_detection_yunet_2023mar_int8bq.onnx",
}


def download_weights(url: str, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    response = requests.get(url, timeout=60)
    response.raise_for_status()
    target.write_bytes(response.content)
    print(f"Model weights downloaded to {target}")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download YuNet face detector weights")
    parser.add_argument("--variant", choices=MODEL_URLS.keys(), default="2023mar", help="YuNet variant to download")
    parser.add_argument("--url", type=str, default=None, help="Model weights URL override")
    parser.add_argument("--output", type=Path, default=None, help="Destination path")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    url = args.url or MODEL_URLS[args.variant]
    target = args.output or Path(Path(url).name)
    download_weights(url, target)


if __name__ == "__main__":
    main()
