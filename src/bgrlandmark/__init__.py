"""
bgrlandmark - BGR color-grid landmark detection.

This package provides functionality for:
- Landmark detection by dual-template correlation matching
- Corner color identification (yellow / magenta / cyan)
- Rendering printable landmarks and checkerboard calibration sheets
- Optional debug instrumentation and result overlays
"""

from .color_id import ColorClassifier
from .marker_detect import DetectorConfig, InvalidImageError, LandmarkDetector, LandmarkInfo
from .overlay import LandmarkOverlay, OverlayConfiguration, draw_landmarks
from .patterns import (
    BGR_BORDER,
    BGR_COLORS,
    PRESETS,
    Color,
    GridPattern,
    Hue,
    Orientation,
    get_pattern,
    match_preset,
)
from .recorder import CompositeRecorder, DetectionRecorder, ImageDumpRecorder, SampleCollector
from .synthesis import render_checkerboard, render_landmark, render_swatch
from .templates import TemplatePair, build_template_pair, fix_kernel_size, render_template

__version__ = "0.1.0"

__all__ = [
    # Detection
    "LandmarkDetector",
    "DetectorConfig",
    "LandmarkInfo",
    "InvalidImageError",
    "ColorClassifier",
    # Catalog
    "Color",
    "Hue",
    "Orientation",
    "GridPattern",
    "BGR_COLORS",
    "BGR_BORDER",
    "PRESETS",
    "get_pattern",
    "match_preset",
    # Templates & synthesis
    "TemplatePair",
    "build_template_pair",
    "fix_kernel_size",
    "render_template",
    "render_swatch",
    "render_landmark",
    "render_checkerboard",
    # Instrumentation & display
    "DetectionRecorder",
    "CompositeRecorder",
    "ImageDumpRecorder",
    "SampleCollector",
    "LandmarkOverlay",
    "OverlayConfiguration",
    "draw_landmarks",
]
