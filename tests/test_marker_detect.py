"""
Tests for landmark detection functionality.
"""

import os
import sys
import unittest

import cv2
import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from bgrlandmark.marker_detect import (  # type: ignore
    DetectorConfig,
    InvalidImageError,
    LandmarkDetector,
)
from bgrlandmark.patterns import (  # type: ignore
    PATTERN_0,
    PATTERN_A,
    Color,
    GridPattern,
    Hue,
    Orientation,
)
from bgrlandmark.recorder import DetectionRecorder  # type: ignore
from bgrlandmark.synthesis import render_landmark  # type: ignore


def make_scene(pattern, offset=(40, 60), size=(200, 200), grid_inches=0.8,
               border_inches=0.1, dpi=100):
    """Place one landmark on a white canvas.

    Returns the BGR scene, its grayscale version and the (x, y) of the
    landmark center, which falls between pixels.
    """
    landmark = render_landmark(pattern, grid_inches, border_inches, Color.WHITE, dpi)
    scene = np.full((size[1], size[0], 3), 255, dtype=np.uint8)
    x0, y0 = offset
    h, w = landmark.shape[:2]
    scene[y0:y0 + h, x0:x0 + w] = landmark

    kgrid = int(grid_inches * dpi)
    kborder = int(border_inches * dpi)
    center = x0 + kborder + kgrid // 2 - 0.5, y0 + kborder + kgrid // 2 - 0.5
    return scene, cv2.cvtColor(scene, cv2.COLOR_BGR2GRAY), center


class CountingRecorder(DetectionRecorder):
    def __init__(self):
        self.templates = 0
        self.matches = 0
        self.candidates = 0

    def on_templates(self, positive, negative):
        self.templates += 1

    def on_match(self, corr_map):
        self.matches += 1

    def on_candidate(self, roi_color, info):
        self.candidates += 1


class TestDetectorConfiguration(unittest.TestCase):
    """Configuration clamping and template ownership."""

    def test_default_configuration(self):
        detector = LandmarkDetector()
        self.assertEqual(detector.kdim, 11)
        self.assertAlmostEqual(detector.config.thr_corr, 0.5)
        self.assertEqual(detector.config.thr_pix_rng, 45)
        self.assertEqual(detector.config.thr_pix_min, 80)
        self.assertTrue(detector.config.color_id_enabled)
        self.assertEqual(detector.templates.positive.shape, (11, 11))

    def test_kernel_size_clamping(self):
        """k is forced odd, then clamped to [9, 15]."""
        for k, expected in ((8, 9), (16, 15), (9, 9), (-3, 9), (12, 13), (15, 15)):
            with self.subTest(k=k):
                self.assertEqual(LandmarkDetector({"k": k}).kdim, expected)
                self.assertEqual(DetectorConfig(kdim=k).kdim, expected)

    def test_reinitialize_rebuilds_templates(self):
        recorder = CountingRecorder()
        detector = LandmarkDetector(recorder=recorder)
        detector.initialize(k=13, thr_corr=0.7)

        self.assertEqual(recorder.templates, 2)
        self.assertEqual(detector.kdim, 13)
        self.assertEqual(detector.templates.positive.shape, (13, 13))
        self.assertAlmostEqual(detector.config.thr_corr, 0.7)

    def test_unknown_config_keys_ignored(self):
        detector = LandmarkDetector({"k": 9, "camera_id": 3})
        self.assertEqual(detector.kdim, 9)

    def test_accepts_config_object(self):
        detector = LandmarkDetector(DetectorConfig(kdim=15, color_id_enabled=False))
        self.assertEqual(detector.kdim, 15)
        self.assertFalse(detector.config.color_id_enabled)


class TestLandmarkDetection(unittest.TestCase):
    """Detection on synthetic scenes."""

    def setUp(self):
        self.detector = LandmarkDetector()

    def test_clean_signal_round_trip(self):
        """A single rendered landmark yields one landmark at its center."""
        scene, gray, (cx, cy) = make_scene(PATTERN_A)
        corr_map, landmarks = self.detector.detect(gray, scene)

        self.assertEqual(corr_map.shape, (190, 190))
        self.assertEqual(corr_map.dtype, np.float32)
        self.assertGreaterEqual(float(corr_map.min()), 0.0)

        self.assertEqual(len(landmarks), 1)
        info = landmarks[0]
        self.assertLessEqual(abs(info.position[0] - cx), 1.0)
        self.assertLessEqual(abs(info.position[1] - cy), 1.0)
        self.assertGreater(info.diff, 0)
        self.assertIs(info.orientation, Orientation.POSITIVE)
        self.assertEqual((info.color0, info.color1), (Hue.YELLOW, Hue.MAGENTA))
        self.assertEqual(info.pattern_name, "A")
        self.assertLess(info.pixel_min, 80)
        self.assertGreater(info.pixel_range, 45)

    def test_rotated_landmark_has_negative_orientation(self):
        """Turning the landmark 90 degrees flips the sign and the sampled corners."""
        scene, _, (cx, cy) = make_scene(PATTERN_A)
        rotated = cv2.rotate(scene, cv2.ROTATE_90_CLOCKWISE)
        _, landmarks = self.detector.detect_frame(rotated)

        self.assertEqual(len(landmarks), 1)
        info = landmarks[0]
        # (x, y) -> (H - 1 - y, x) under a clockwise turn
        expected = (scene.shape[0] - 1 - cy, cx)
        self.assertLessEqual(abs(info.position[0] - expected[0]), 1.0)
        self.assertLessEqual(abs(info.position[1] - expected[1]), 1.0)
        self.assertLess(info.diff, 0)
        self.assertIs(info.orientation, Orientation.NEGATIVE)
        self.assertEqual((info.color0, info.color1), (Hue.MAGENTA, Hue.YELLOW))

    def test_idempotent(self):
        scene, gray, _ = make_scene(PATTERN_A)
        corr1, first = self.detector.detect(gray, scene)
        corr2, second = self.detector.detect(gray, scene)

        np.testing.assert_array_equal(corr1, corr2)
        self.assertEqual([i.to_dict() for i in first], [i.to_dict() for i in second])

    def test_uniform_field_rejected(self):
        """A flat image never passes the intensity range test."""
        gray = np.full((64, 64), 128, dtype=np.uint8)
        color = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
        for thr in (-0.5, 0.0, 0.5, 0.9):
            with self.subTest(thr_corr=thr):
                detector = LandmarkDetector({"thr_corr": thr, "color_id_enabled": False})
                _, landmarks = detector.detect(gray, color)
                self.assertEqual(landmarks, [])

    def test_threshold_monotonicity(self):
        """Raising thr_corr never adds landmarks."""
        rng = np.random.default_rng(11)
        scene = rng.integers(0, 256, (120, 160, 3), dtype=np.uint8)
        scene = cv2.GaussianBlur(scene, (5, 5), 0)
        gray = cv2.cvtColor(scene, cv2.COLOR_BGR2GRAY)

        previous = None
        for thr in (0.1, 0.3, 0.5, 0.7, 0.9):
            detector = LandmarkDetector({"thr_corr": thr, "color_id_enabled": False})
            _, landmarks = detector.detect(gray, scene)
            positions = {lm.position for lm in landmarks}
            if previous is not None:
                self.assertTrue(positions <= previous, f"thr_corr={thr} added landmarks")
            previous = positions

    def test_color_gate_rejects_gray_landmark(self):
        """A black/white landmark has no chromatic corners."""
        scene, gray, (cx, cy) = make_scene(PATTERN_0)

        _, with_color = self.detector.detect(gray, scene)
        self.assertEqual(with_color, [])

        detector = LandmarkDetector({"color_id_enabled": False})
        _, without_color = detector.detect(gray, scene)
        near = [
            lm for lm in without_color
            if abs(lm.position[0] - cx) <= 1.0 and abs(lm.position[1] - cy) <= 1.0
        ]
        self.assertGreater(len(near), 0)
        for lm in without_color:
            self.assertEqual((lm.color0, lm.color1), (Hue.UNKNOWN, Hue.UNKNOWN))

    def test_color_gate_rejects_identical_corners(self):
        """Both corners classified the same means the candidate is ambiguous."""
        same = GridPattern(Color.BLACK, Color.YELLOW, Color.BLACK, Color.YELLOW)
        scene, gray, _ = make_scene(same)

        _, landmarks = self.detector.detect(gray, scene)
        self.assertEqual(landmarks, [])

    def test_accepted_landmarks_are_fully_classified(self):
        scene, gray, _ = make_scene(PATTERN_A)
        rng = np.random.default_rng(3)
        noise = rng.normal(0, 4, scene.shape)
        noisy = np.clip(scene.astype(np.float64) + noise, 0, 255).astype(np.uint8)

        _, landmarks = self.detector.detect(cv2.cvtColor(noisy, cv2.COLOR_BGR2GRAY), noisy)
        for lm in landmarks:
            self.assertIn(lm.color0, (Hue.YELLOW, Hue.MAGENTA, Hue.CYAN))
            self.assertIn(lm.color1, (Hue.YELLOW, Hue.MAGENTA, Hue.CYAN))
            self.assertNotEqual(lm.color0, lm.color1)

    def test_output_in_scan_order(self):
        scene, gray, _ = make_scene(PATTERN_0)
        detector = LandmarkDetector({"color_id_enabled": False})
        _, landmarks = detector.detect(gray, scene)

        keys = [(lm.position[1], lm.position[0]) for lm in landmarks]
        self.assertEqual(keys, sorted(keys))

    def test_recorder_hooks(self):
        recorder = CountingRecorder()
        detector = LandmarkDetector(recorder=recorder)
        scene, gray, _ = make_scene(PATTERN_A)
        _, landmarks = detector.detect(gray, scene)

        self.assertEqual(recorder.templates, 1)
        self.assertEqual(recorder.matches, 1)
        self.assertGreaterEqual(recorder.candidates, len(landmarks))


class TestInvalidInputs(unittest.TestCase):
    """Images the detector must refuse."""

    def setUp(self):
        self.detector = LandmarkDetector()
        self.color = np.zeros((40, 40, 3), dtype=np.uint8)
        self.gray = np.zeros((40, 40), dtype=np.uint8)

    def test_gray_with_three_channels(self):
        with self.assertRaises(InvalidImageError):
            self.detector.detect(self.color, self.color)

    def test_color_with_one_channel(self):
        with self.assertRaises(InvalidImageError):
            self.detector.detect(self.gray, self.gray)

    def test_wrong_bit_depth(self):
        with self.assertRaises(InvalidImageError):
            self.detector.detect(self.gray.astype(np.float32), self.color)
        with self.assertRaises(InvalidImageError):
            self.detector.detect(self.gray, self.color.astype(np.uint16))

    def test_mismatched_sizes(self):
        with self.assertRaises(InvalidImageError):
            self.detector.detect(self.gray, np.zeros((40, 41, 3), dtype=np.uint8))

    def test_smaller_than_template(self):
        with self.assertRaises(InvalidImageError):
            self.detector.detect(np.zeros((8, 40), dtype=np.uint8), np.zeros((8, 40, 3), dtype=np.uint8))

    def test_empty_frame(self):
        with self.assertRaises(InvalidImageError):
            self.detector.detect_frame(None)
        with self.assertRaises(InvalidImageError):
            self.detector.detect_frame(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_detect_frame_requires_bgr(self):
        with self.assertRaises(InvalidImageError):
            self.detector.detect_frame(self.gray)

    def test_invalid_image_is_value_error(self):
        self.assertTrue(issubclass(InvalidImageError, ValueError))


if __name__ == "__main__":
    unittest.main()
