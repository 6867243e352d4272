"""
Optional instrumentation for the landmark detector.

A recorder receives the intermediate images of a detection pass: the
templates once per configuration, the correlation map per call, and every
candidate window that survives the intensity test. The detector calls the
hooks unconditionally; the base class does nothing.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

import cv2
import numpy as np

from .utils import create_directory

LOGGER = logging.getLogger(__name__)


class DetectionRecorder:
    """No-op recorder. Subclass and override the hooks of interest."""

    def on_templates(self, positive: np.ndarray, negative: np.ndarray):
        pass

    def on_match(self, corr_map: np.ndarray):
        pass

    def on_candidate(self, roi_color: np.ndarray, info):
        pass


class CompositeRecorder(DetectionRecorder):
    """Forwards every hook to a list of recorders."""

    def __init__(self, recorders: Iterable[DetectionRecorder]):
        self.recorders: List[DetectionRecorder] = list(recorders)

    def on_templates(self, positive, negative):
        for recorder in self.recorders:
            recorder.on_templates(positive, negative)

    def on_match(self, corr_map):
        for recorder in self.recorders:
            recorder.on_match(corr_map)

    def on_candidate(self, roi_color, info):
        for recorder in self.recorders:
            recorder.on_candidate(roi_color, info)


class ImageDumpRecorder(DetectionRecorder):
    """Writes templates and correlation maps as PNG files."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir
        self.match_count = 0
        create_directory(output_dir)

    def _write(self, name: str, image: np.ndarray):
        path = os.path.join(self.output_dir, name)
        if not cv2.imwrite(path, image):
            LOGGER.warning("Failed to write debug image %s", path)
        else:
            LOGGER.debug("Wrote debug image %s", path)

    def on_templates(self, positive, negative):
        self._write("dbg_tmpl_gray_p.png", positive)
        self._write("dbg_tmpl_gray_n.png", negative)

    def on_match(self, corr_map):
        # scale the [0, 2] difference map to 8 bits
        scaled = np.clip(corr_map * 127.5, 0, 255).astype(np.uint8)
        self._write(f"dbg_corr_{self.match_count:04d}.png", scaled)
        self.match_count += 1


class SampleCollector(DetectionRecorder):
    """
    Collects candidate windows into a collage for offline labeling.

    Each sample occupies a (k+4) x (k+4) cell: a one pixel white frame that
    can be re-colored by hand, then the k x k BGR window inside it.
    """

    def __init__(self, max_samples: int = 1000, columns: int = 40):
        self.max_samples = max_samples
        self.columns = columns
        self.count = 0
        self.collage: Optional[np.ndarray] = None
        self._cell = 0

    def on_templates(self, positive, negative):
        self._cell = positive.shape[0] + 4
        rows = -(-self.max_samples // self.columns)
        self.collage = np.zeros((self._cell * rows, self._cell * self.columns, 3), dtype=np.uint8)
        self.count = 0

    def on_candidate(self, roi_color, info):
        if self.collage is None or self.count >= self.max_samples:
            return
        k = self._cell
        x = (self.count % self.columns) * k
        y = (self.count // self.columns) * k
        cv2.rectangle(self.collage, (x + 1, y + 1), (x + k - 2, y + k - 2), (255, 255, 255), 1)
        h, w = roi_color.shape[:2]
        self.collage[y + 2:y + 2 + h, x + 2:x + 2 + w] = roi_color
        self.count += 1

    def save(self, filepath: str) -> bool:
        """Write the collage; returns False if nothing was collected."""
        if self.collage is None:
            LOGGER.warning("No samples collected, nothing to save")
            return False
        ok = bool(cv2.imwrite(filepath, self.collage))
        if ok:
            LOGGER.info("Saved %d samples to %s", self.count, filepath)
        else:
            LOGGER.error("Failed to write samples to %s", filepath)
        return ok
