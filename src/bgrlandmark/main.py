"""
Command line entry point for bgrlandmark.

Usage:
    bgrlandmark detect photo.png                     # Print detected landmarks as JSON lines
    bgrlandmark detect photo.png --annotate out.png  # Also save an annotated copy
    bgrlandmark landmark target.png --pattern A      # Render a printable landmark
    bgrlandmark checkerboard sheet.png --pattern 0   # Render a calibration sheet
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import cv2
import numpy as np

from .marker_detect import LandmarkDetector
from .overlay import draw_landmarks
from .patterns import get_pattern
from .recorder import CompositeRecorder, DetectionRecorder, ImageDumpRecorder, SampleCollector
from .synthesis import render_checkerboard, render_landmark
from .utils import get_config, setup_logging, validate_config

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="bgrlandmark",
        description="Detect and render 2x2 BGR color-grid landmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Patterns:
  0, 1     - black/white templates (checkerboards)
  A .. F   - color-coded landmarks (black plus two of yellow/magenta/cyan)
        """,
    )
    parser.add_argument("--config", "-c", help="JSON configuration file")
    parser.add_argument(
        "--verbose", "-V",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser("detect", help="Detect landmarks in an image")
    detect.add_argument("image", help="Input image (BGR or grayscale)")
    detect.add_argument("--annotate", help="Write an annotated copy of the image here")
    detect.add_argument("--corr-map", help="Write the correlation difference map here")
    detect.add_argument("--no-color-id", action="store_true", help="Skip corner color identification")
    detect.add_argument("--debug-dir", help="Dump templates and correlation maps into this directory")
    detect.add_argument("--samples", help="Save a collage of candidate windows here")

    landmark = sub.add_parser("landmark", help="Render a printable landmark")
    landmark.add_argument("output", help="Output image file")
    landmark.add_argument("--pattern", "-p", default="A", help="Pattern preset (default: A)")
    landmark.add_argument("--grid-inches", type=float, help="Side of the 2x2 grid in inches")
    landmark.add_argument("--border-inches", type=float, help="Border width in inches")
    landmark.add_argument("--dpi", type=int, help="Output resolution")

    checker = sub.add_parser("checkerboard", help="Render a tiled calibration sheet")
    checker.add_argument("output", help="Output image file")
    checker.add_argument("--pattern", "-p", default="0", help="Pattern preset (default: 0)")
    checker.add_argument("--x-repeat", type=int, help="Horizontal tile count")
    checker.add_argument("--y-repeat", type=int, help="Vertical tile count")
    checker.add_argument("--grid-inches", type=float, help="Side of one tile in inches")
    checker.add_argument("--border-inches", type=float, help="Border width in inches")
    checker.add_argument("--dpi", type=int, help="Output resolution")

    return parser.parse_args(argv)


def _pick(value, default):
    return default if value is None else value


def _write_image(path: str, image: np.ndarray):
    if not cv2.imwrite(path, image):
        raise OSError(f"Failed to write image: {path}")
    LOGGER.info("Wrote %s", path)


def run_detect(args: argparse.Namespace, config: dict) -> int:
    frame = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if frame is None:
        LOGGER.error("Failed to read image: %s", args.image)
        return 1

    detector_cfg = dict(config["detector"])
    if args.no_color_id:
        detector_cfg["color_id_enabled"] = False

    recorders: List[DetectionRecorder] = []
    if args.debug_dir:
        recorders.append(ImageDumpRecorder(args.debug_dir))
    collector = None
    if args.samples:
        collector = SampleCollector()
        recorders.append(collector)

    detector = LandmarkDetector(detector_cfg, recorder=CompositeRecorder(recorders))
    corr_map, landmarks = detector.detect_frame(frame)

    for info in landmarks:
        print(json.dumps(info.to_dict()))
    LOGGER.info("Found %d landmark(s) in %s", len(landmarks), args.image)

    if args.annotate:
        _write_image(args.annotate, draw_landmarks(frame, landmarks, detector.kdim))
    if args.corr_map:
        _write_image(args.corr_map, np.clip(corr_map * 127.5, 0, 255).astype(np.uint8))
    if collector is not None:
        collector.save(args.samples)
    return 0


def run_landmark(args: argparse.Namespace, config: dict) -> int:
    synth = config["synthesis"]
    img = render_landmark(
        get_pattern(args.pattern),
        grid_inches=_pick(args.grid_inches, synth["grid_inches"]),
        border_inches=_pick(args.border_inches, synth["border_inches"]),
        dpi=_pick(args.dpi, synth["dpi"]),
    )
    _write_image(args.output, img)
    return 0


def run_checkerboard(args: argparse.Namespace, config: dict) -> int:
    synth = config["synthesis"]
    img = render_checkerboard(
        get_pattern(args.pattern),
        _pick(args.x_repeat, synth["x_repeat"]),
        _pick(args.y_repeat, synth["y_repeat"]),
        grid_inches=_pick(args.grid_inches, synth["checker_grid_inches"]),
        border_inches=_pick(args.border_inches, synth["border_inches"]),
        dpi=_pick(args.dpi, synth["dpi"]),
    )
    _write_image(args.output, img)
    return 0


COMMANDS = {
    "detect": run_detect,
    "landmark": run_landmark,
    "checkerboard": run_checkerboard,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=log_level)

    config = get_config(args.config)
    if not validate_config(config):
        return 1

    try:
        return COMMANDS[args.command](args, config)
    except (ValueError, OSError) as e:
        LOGGER.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
