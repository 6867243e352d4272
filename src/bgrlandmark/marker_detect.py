"""
Landmark detection module.

Finds 2x2 color-grid landmarks in an image and identifies their colors.

A landmark has two dark squares on one diagonal and two colored squares on
the other. The detector correlates the grayscale image with a checkerboard
corner template and with the same template turned 90 degrees. Flat or
generically textured regions score about the same against both, while a
landmark center scores strongly against exactly one, so the absolute
difference of the two correlation maps isolates landmark centers. Local
maxima of that difference are then screened by intensity range and
darkness, and optionally by the colors of the two chromatic corners.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Dict, List, Optional, Tuple, Union

import cv2
import numpy as np

from .color_id import ColorClassifier
from .patterns import PATTERN_0, Hue, Orientation, match_preset
from .recorder import DetectionRecorder
from .templates import TemplatePair, build_template_pair, fix_kernel_size

LOGGER = logging.getLogger(__name__)

MATCH_METHOD = cv2.TM_CCOEFF_NORMED

# bilateral filter applied to candidate windows before color sampling
BILATERAL_DIAMETER = 3
BILATERAL_SIGMA_COLOR = 200
BILATERAL_SIGMA_SPACE = 200


class InvalidImageError(ValueError):
    """Raised when a source image is empty, mis-shaped or not 8-bit."""


@dataclass
class DetectorConfig:
    """Configuration for the landmark detector."""

    kdim: int = 11  # template side, forced odd and clamped to [9, 15]
    thr_corr: float = 0.5  # minimum correlation difference at a maximum
    thr_pix_rng: float = 45  # minimum intensity range inside a window
    thr_pix_min: float = 80  # window minimum must be darker than this
    color_id_enabled: bool = True

    def __post_init__(self):
        self.kdim = fix_kernel_size(self.kdim)

    @classmethod
    def from_dict(cls, cfg: Optional[Dict]) -> "DetectorConfig":
        """Build a config from a dict; "k" is accepted as an alias for kdim."""
        cfg_dict = dict(cfg or {})
        if "k" in cfg_dict and "kdim" not in cfg_dict:
            cfg_dict["kdim"] = cfg_dict.pop("k")
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in cfg_dict.items() if k in names})


@dataclass
class LandmarkInfo:
    """One detected landmark."""

    position: Tuple[int, int]  # (x, y) of the landmark center
    diff: float  # signed correlation difference; sign gives orientation
    pixel_range: float
    pixel_min: float
    color0: int = Hue.UNKNOWN
    color1: int = Hue.UNKNOWN
    orientation: Orientation = Orientation.POSITIVE

    @property
    def pattern_name(self) -> Optional[str]:
        """Color preset matching the classified corners, if any."""
        return match_preset(self.color0, self.color1)

    def to_dict(self) -> Dict:
        return {
            "x": int(self.position[0]),
            "y": int(self.position[1]),
            "diff": float(self.diff),
            "pixel_range": float(self.pixel_range),
            "pixel_min": float(self.pixel_min),
            "color0": int(self.color0),
            "color1": int(self.color1),
            "orientation": self.orientation.name.lower(),
            "pattern": self.pattern_name,
        }


class LandmarkDetector:
    """
    Detects BGR landmarks with a pair of orientation-sensitive templates.

    The configuration and templates are fixed by ``initialize`` and are only
    read by ``detect``, so one detector may serve concurrent ``detect``
    calls as long as nobody re-initializes it at the same time.
    """

    def __init__(
        self,
        config: Optional[Union[Dict, DetectorConfig]] = None,
        recorder: Optional[DetectionRecorder] = None,
    ):
        if isinstance(config, DetectorConfig):
            cfg = config
        else:
            cfg = DetectorConfig.from_dict(config)

        self.recorder = recorder or DetectionRecorder()
        self.classifier = ColorClassifier()
        self.config: DetectorConfig = cfg
        self.templates: TemplatePair
        self.initialize(
            k=cfg.kdim,
            thr_corr=cfg.thr_corr,
            thr_pix_rng=cfg.thr_pix_rng,
            thr_pix_min=cfg.thr_pix_min,
            color_id_enabled=cfg.color_id_enabled,
        )

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #
    def initialize(
        self,
        k: int = 11,
        thr_corr: float = 0.5,
        thr_pix_rng: float = 45,
        thr_pix_min: float = 80,
        color_id_enabled: bool = True,
    ):
        """(Re)configure thresholds and rebuild the matching templates."""
        self.config = DetectorConfig(
            kdim=k,
            thr_corr=thr_corr,
            thr_pix_rng=thr_pix_rng,
            thr_pix_min=thr_pix_min,
            color_id_enabled=color_id_enabled,
        )
        self.templates = build_template_pair(PATTERN_0, self.config.kdim)
        self.recorder.on_templates(self.templates.positive, self.templates.negative)

        LOGGER.info(
            "LandmarkDetector initialized: kdim=%d, thr_corr=%.3f, thr_pix_rng=%s, "
            "thr_pix_min=%s, color_id=%s",
            self.config.kdim,
            self.config.thr_corr,
            self.config.thr_pix_rng,
            self.config.thr_pix_min,
            self.config.color_id_enabled,
        )

    @property
    def kdim(self) -> int:
        return self.config.kdim

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def detect(
        self,
        source_gray: np.ndarray,
        source_color: np.ndarray,
    ) -> Tuple[np.ndarray, List[LandmarkInfo]]:
        """
        Find landmarks in a registered grayscale/BGR image pair.

        Args:
            source_gray: H x W uint8 intensity image
            source_color: H x W x 3 uint8 BGR image, pixel-registered with
                source_gray

        Returns:
            (corr_map, landmarks): the float32 absolute correlation
            difference of shape (H-k+1, W-k+1), and the accepted landmarks
            in row-major order of their maxima
        """
        self._validate_inputs(source_gray, source_color)
        source_gray = np.ascontiguousarray(source_gray)

        k = self.config.kdim
        offset = self.templates.offset

        corr_p = cv2.matchTemplate(source_gray, self.templates.positive, MATCH_METHOD)
        corr_n = cv2.matchTemplate(source_gray, self.templates.negative, MATCH_METHOD)
        corr_map = cv2.absdiff(corr_p, corr_n)
        self.recorder.on_match(corr_map)

        maxima = self._find_maxima(corr_map)

        landmarks: List[LandmarkInfo] = []
        for y, x in maxima:
            diff = float(corr_p[y, x] - corr_n[y, x])

            roi_gray = source_gray[y:y + k, x:x + k]
            pix_min = float(roi_gray.min())
            pix_rng = float(roi_gray.max()) - pix_min

            # two dark squares and two light squares: large range, dark minimum
            if not (pix_rng > self.config.thr_pix_rng and pix_min < self.config.thr_pix_min):
                continue

            info = LandmarkInfo(
                position=(int(x) + offset, int(y) + offset),
                diff=diff,
                pixel_range=pix_rng,
                pixel_min=pix_min,
                orientation=Orientation.from_diff(diff),
            )

            roi_color = source_color[y:y + k, x:x + k]
            self.recorder.on_candidate(roi_color, info)

            if self.config.color_id_enabled:
                if not self._identify_colors(roi_color, info):
                    continue

            landmarks.append(info)

        LOGGER.debug(
            "Detection: %d maxima above %.3f, %d landmarks accepted",
            len(maxima),
            self.config.thr_corr,
            len(landmarks),
        )
        return corr_map, landmarks

    def detect_frame(self, frame: np.ndarray) -> Tuple[np.ndarray, List[LandmarkInfo]]:
        """Convenience wrapper: detect in a BGR frame, deriving the gray image."""
        if frame is None or frame.size == 0:
            raise InvalidImageError("Frame cannot be empty.")
        if frame.ndim != 3 or frame.shape[2] != 3:
            raise InvalidImageError(f"Expected a 3-channel BGR frame, got shape {frame.shape}.")
        if frame.dtype != np.uint8:
            raise InvalidImageError(f"Expected an 8-bit frame, got dtype {frame.dtype}.")
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        return self.detect(gray, frame)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _validate_inputs(self, source_gray: np.ndarray, source_color: np.ndarray):
        for name, img in (("source_gray", source_gray), ("source_color", source_color)):
            if img is None or not isinstance(img, np.ndarray) or img.size == 0:
                raise InvalidImageError(f"{name} cannot be empty.")
            if img.dtype != np.uint8:
                raise InvalidImageError(f"{name} must be 8-bit, got dtype {img.dtype}.")

        if source_gray.ndim != 2:
            raise InvalidImageError(
                f"source_gray must be single-channel, got shape {source_gray.shape}."
            )
        if source_color.ndim != 3 or source_color.shape[2] != 3:
            raise InvalidImageError(
                f"source_color must have 3 channels, got shape {source_color.shape}."
            )
        if source_gray.shape != source_color.shape[:2]:
            raise InvalidImageError(
                f"Image sizes differ: gray {source_gray.shape} vs color {source_color.shape[:2]}."
            )

        k = self.config.kdim
        if source_gray.shape[0] < k or source_gray.shape[1] < k:
            raise InvalidImageError(
                f"Image {source_gray.shape[1]}x{source_gray.shape[0]} is smaller than the "
                f"{k}x{k} template."
            )

    def _find_maxima(self, corr_map: np.ndarray) -> np.ndarray:
        """
        Pixels not exceeded anywhere in their 3x3 neighbourhood and above thr_corr.

        Equal neighbours both qualify, so a flat-topped peak yields several
        maxima. Returns (row, col) pairs in row-major order.
        """
        dilated = cv2.dilate(corr_map, None)  # default 3x3 rectangle
        mask = (corr_map >= dilated) & (corr_map > self.config.thr_corr)
        return np.argwhere(mask)

    def _identify_colors(self, roi_color: np.ndarray, info: LandmarkInfo) -> bool:
        """Classify corner colors in place; True if they are valid and distinct."""
        roi_smooth = cv2.bilateralFilter(
            np.ascontiguousarray(roi_color),
            BILATERAL_DIAMETER,
            BILATERAL_SIGMA_COLOR,
            BILATERAL_SIGMA_SPACE,
        )
        info.color0, info.color1 = self.classifier.classify(roi_smooth, info.orientation)
        return (
            info.color0 != Hue.UNKNOWN
            and info.color1 != Hue.UNKNOWN
            and info.color0 != info.color1
        )
