"""
Matching templates for landmark detection.

A template is a grayscale swatch of a grid pattern. Its partner is the same
image turned exactly 90 degrees clockwise, so the pair responds with
opposite sign to the two landmark orientations.
"""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np

from .patterns import GridPattern
from .synthesis import render_swatch
from .utils import rail

KDIM_MIN = 9
KDIM_MAX = 15


@dataclass(frozen=True)
class TemplatePair:
    """Positive template and its 90-degree clockwise rotation."""

    positive: np.ndarray
    negative: np.ndarray

    @property
    def kdim(self) -> int:
        return int(self.positive.shape[0])

    @property
    def offset(self) -> int:
        """Distance from a window's anchor to its center pixel."""
        return self.kdim // 2


def fix_kernel_size(k: int) -> int:
    """Force k odd, then clamp it to [9, 15]."""
    k = int(k)
    fixk = (int(k / 2) * 2) + 1  # truncates toward zero
    return rail(fixk, KDIM_MIN, KDIM_MAX)


def render_template(pattern: GridPattern, k: int) -> np.ndarray:
    """Render a k x k single-channel template of a pattern."""
    return cv2.cvtColor(render_swatch(pattern, k), cv2.COLOR_BGR2GRAY)


def build_template_pair(pattern: GridPattern, k: int) -> TemplatePair:
    positive = render_template(pattern, k)
    negative = cv2.rotate(positive, cv2.ROTATE_90_CLOCKWISE)
    return TemplatePair(positive=positive, negative=negative)
