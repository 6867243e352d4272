"""
Corner color identification for detected landmarks.

The two chromatic quadrants of a landmark sit on the diagonal opposite the
dark squares. One pixel is sampled from each of those corners of the
candidate window. It is normalized so its brightest channel becomes 1 and
its darkest 0, which removes most of the dependence on lighting, and is
then matched to the nearest of yellow, magenta and cyan.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from .patterns import REFERENCE_HUES, Hue, Orientation

LOGGER = logging.getLogger(__name__)


def normalize_minmax(pixel: np.ndarray) -> np.ndarray:
    """Rescale channels to [0, 1]; a flat pixel maps to all zeros."""
    p = np.asarray(pixel, dtype=np.float32)
    pmin = float(p.min())
    prng = float(p.max()) - pmin
    if prng <= np.finfo(np.float64).eps:
        return np.zeros_like(p)
    return (p - pmin) / prng


def nearest_hue(normalized: np.ndarray) -> Hue:
    """
    Closest reference hue by Euclidean distance.

    Ties go to the first reference in yellow, magenta, cyan order
    (np.argmin returns the first minimum).
    """
    dists = np.linalg.norm(REFERENCE_HUES - normalized, axis=1)
    return Hue(int(np.argmin(dists)))


class ColorClassifier:
    """Classifies the two chromatic corners of a landmark window."""

    def __init__(self, norm_threshold: float = 1.2, range_threshold: float = 20):
        # sum of normalized channels runs from 1 (one channel lit) to 2 (two lit)
        self.norm_threshold = norm_threshold
        self.range_threshold = range_threshold

    @staticmethod
    def corner_pixels(roi_color: np.ndarray, orientation: Orientation) -> Tuple[np.ndarray, np.ndarray]:
        """Return the two corner pixels that carry color for this orientation."""
        bottom = roi_color.shape[0] - 1
        right = roi_color.shape[1] - 1
        if orientation is Orientation.POSITIVE:
            return roi_color[0, right], roi_color[bottom, 0]
        return roi_color[0, 0], roi_color[bottom, right]

    def _passes_gate(self, pixel: np.ndarray, normalized: np.ndarray) -> bool:
        pixel_range = float(np.max(pixel)) - float(np.min(pixel))
        return (
            float(normalized.sum()) > self.norm_threshold
            and pixel_range > self.range_threshold
        )

    def classify(self, roi_color: np.ndarray, orientation: Orientation) -> Tuple[int, int]:
        """
        Classify the chromatic corners of a BGR landmark window.

        Args:
            roi_color: k x k x 3 BGR window, anchored like the match window
            orientation: Orientation of the match

        Returns:
            (color0, color1) as Hue values; both are Hue.UNKNOWN unless both
            corners are bright and saturated enough to classify
        """
        p0, p1 = self.corner_pixels(roi_color, orientation)
        n0 = normalize_minmax(p0)
        n1 = normalize_minmax(p1)

        if not (self._passes_gate(p0, n0) and self._passes_gate(p1, n1)):
            LOGGER.debug("Corner colors rejected: p0=%s p1=%s", p0.tolist(), p1.tolist())
            return Hue.UNKNOWN, Hue.UNKNOWN

        return nearest_hue(n0), nearest_hue(n1)
