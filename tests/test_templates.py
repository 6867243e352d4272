"""
Tests for matching template construction.
"""

import os
import sys
import unittest

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from bgrlandmark.patterns import PATTERN_0, PATTERN_1  # type: ignore
from bgrlandmark.templates import (  # type: ignore
    KDIM_MAX,
    KDIM_MIN,
    build_template_pair,
    fix_kernel_size,
    render_template,
)


class TestFixKernelSize(unittest.TestCase):

    def test_even_sizes_round_up(self):
        self.assertEqual(fix_kernel_size(10), 11)
        self.assertEqual(fix_kernel_size(12), 13)

    def test_clamped(self):
        self.assertEqual(fix_kernel_size(8), 9)
        self.assertEqual(fix_kernel_size(16), 15)
        self.assertEqual(fix_kernel_size(100), KDIM_MAX)
        self.assertEqual(fix_kernel_size(-3), KDIM_MIN)
        self.assertEqual(fix_kernel_size(0), KDIM_MIN)

    def test_odd_sizes_in_range_unchanged(self):
        for k in (9, 11, 13, 15):
            self.assertEqual(fix_kernel_size(k), k)


class TestTemplates(unittest.TestCase):

    def test_template_layout(self):
        t = render_template(PATTERN_0, 11)
        self.assertEqual(t.shape, (11, 11))
        self.assertEqual(t.dtype, np.uint8)

        # dark squares upper-left and lower-right
        self.assertEqual(t[0, 0], 0)
        self.assertEqual(t[10, 10], 0)
        self.assertEqual(t[0, 10], 255)
        self.assertEqual(t[10, 0], 255)

        # the dividing cross is mid-gray
        self.assertEqual(t[5, 5], 128)
        self.assertEqual(t[0, 5], 128)
        self.assertEqual(t[5, 0], 128)

    def test_negative_is_clockwise_rotation(self):
        for k in (9, 11, 13, 15):
            with self.subTest(k=k):
                pair = build_template_pair(PATTERN_0, k)
                np.testing.assert_array_equal(pair.negative, np.rot90(pair.positive, -1))
                self.assertEqual(pair.kdim, k)
                self.assertEqual(pair.offset, k // 2)

    def test_rotation_swaps_diagonals(self):
        pair = build_template_pair(PATTERN_0, 11)
        self.assertEqual(pair.negative[0, 0], 255)
        self.assertEqual(pair.negative[0, 10], 0)

    def test_deterministic(self):
        a = build_template_pair(PATTERN_0, 13)
        b = build_template_pair(PATTERN_0, 13)
        np.testing.assert_array_equal(a.positive, b.positive)
        np.testing.assert_array_equal(a.negative, b.negative)

    def test_inverted_pattern_matches_rotation(self):
        # inverting a black/white corner is the same as turning it 90 degrees
        pair = build_template_pair(PATTERN_0, 11)
        inverted = render_template(PATTERN_1, 11)
        self.assertEqual(inverted[0, 0], pair.negative[0, 0])
        self.assertEqual(inverted[10, 0], pair.negative[10, 0])


if __name__ == "__main__":
    unittest.main()
