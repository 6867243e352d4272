"""
Detection overlay rendering module.

Draws detected landmarks onto a copy of the source frame: the matched
window, a cross at the landmark center and a short label with the
classified corner hues.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import cv2
import numpy as np

from .patterns import BGR_COLORS, Color, Hue, Orientation

LOGGER = logging.getLogger(__name__)

HUE_LABELS = {
    Hue.UNKNOWN: "?",
    Hue.YELLOW: "Y",
    Hue.MAGENTA: "M",
    Hue.CYAN: "C",
}


@dataclass
class OverlayConfiguration:
    """Configuration for the landmark overlay renderer."""

    positive_color: Tuple[int, int, int] = (0, 255, 0)
    negative_color: Tuple[int, int, int] = (0, 128, 255)
    text_color: Tuple[int, int, int] = BGR_COLORS[Color.WHITE]
    thickness: int = 1
    font_scale: float = 0.4
    show_labels: bool = True
    antialiasing: bool = True


class LandmarkOverlay:
    """Renders landmark detections on camera frames."""

    def __init__(self, config: Optional[Dict] = None):
        cfg = dict(config or {})
        self.config = OverlayConfiguration(**{
            k: v for k, v in cfg.items()
            if k in OverlayConfiguration.__dataclass_fields__
        })

    def render(self, frame: np.ndarray, landmarks: Iterable, kdim: int) -> np.ndarray:
        """Return a BGR copy of frame with the landmarks drawn on it.

        Args:
            frame: Grayscale or BGR source image
            landmarks: LandmarkInfo records from the detector
            kdim: Template side used for detection
        """
        if frame.ndim == 2:
            canvas = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        else:
            canvas = frame.copy()

        line_type = cv2.LINE_AA if self.config.antialiasing else cv2.LINE_8
        half = kdim // 2

        for info in landmarks:
            x, y = (int(v) for v in info.position)
            color = (
                self.config.positive_color
                if info.orientation is Orientation.POSITIVE
                else self.config.negative_color
            )

            cv2.rectangle(
                canvas, (x - half, y - half), (x + half, y + half),
                color, self.config.thickness, line_type,
            )
            cv2.drawMarker(
                canvas, (x, y), color, cv2.MARKER_CROSS, half, self.config.thickness, line_type,
            )

            if self.config.show_labels:
                label = HUE_LABELS.get(Hue(info.color0), "?") + HUE_LABELS.get(Hue(info.color1), "?")
                cv2.putText(
                    canvas,
                    label,
                    (x + half + 2, y - half),
                    cv2.FONT_HERSHEY_SIMPLEX,
                    self.config.font_scale,
                    self.config.text_color,
                    self.config.thickness,
                    line_type,
                )

        return canvas


def draw_landmarks(frame: np.ndarray, landmarks: Iterable, kdim: int) -> np.ndarray:
    """Draw landmarks with the default overlay settings."""
    return LandmarkOverlay().render(frame, landmarks, kdim)
