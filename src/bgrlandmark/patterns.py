"""
Landmark color catalog.

Base BGR colors, the named 2x2 grid presets and the reference hues used for
corner classification. Everything here is built once at import time and
exposed through read-only mappings.

Grid quadrants are listed clockwise from the upper left:

    c00 | c01
    ----+----
    c10 | c11
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import numpy as np

BGRColor = Tuple[int, int, int]


class Color(IntEnum):
    """Base colors, in BGR bit order (B=4, G=2, R=1)."""
    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7


class Hue(IntEnum):
    """Corner classification result."""
    UNKNOWN = -1
    YELLOW = 0
    MAGENTA = 1
    CYAN = 2


class Orientation(Enum):
    """Which diagonal of a detected landmark holds the dark squares."""
    POSITIVE = 1  # upper-left / lower-right
    NEGATIVE = -1  # lower-left / upper-right

    @classmethod
    def from_diff(cls, diff: float) -> "Orientation":
        """Orientation from the signed positive-minus-negative correlation."""
        return cls.POSITIVE if diff > 0 else cls.NEGATIVE


BGR_COLORS: Mapping[Color, BGRColor] = MappingProxyType({
    Color.BLACK: (0, 0, 0),
    Color.RED: (0, 0, 255),
    Color.GREEN: (0, 255, 0),
    Color.YELLOW: (0, 255, 255),
    Color.BLUE: (255, 0, 0),
    Color.MAGENTA: (255, 0, 255),
    Color.CYAN: (255, 255, 0),
    Color.WHITE: (255, 255, 255),
})

BGR_BORDER: BGRColor = (128, 128, 128)


@dataclass(frozen=True)
class GridPattern:
    """Colors of a 2x2 landmark grid, clockwise from the upper left."""

    c00: Color
    c01: Color
    c11: Color
    c10: Color

    @property
    def colors(self) -> Tuple[Color, Color, Color, Color]:
        return (self.c00, self.c01, self.c11, self.c10)

    def bgr(self) -> Tuple[BGRColor, BGRColor, BGRColor, BGRColor]:
        """BGR triples for the four quadrants, clockwise from the upper left."""
        return tuple(BGR_COLORS[c] for c in self.colors)  # type: ignore[return-value]


# Grayscale patterns, only used for matching templates
PATTERN_0 = GridPattern(Color.BLACK, Color.WHITE, Color.BLACK, Color.WHITE)
PATTERN_1 = GridPattern(Color.WHITE, Color.BLACK, Color.WHITE, Color.BLACK)

# Color-coded landmark identities
PATTERN_A = GridPattern(Color.BLACK, Color.YELLOW, Color.BLACK, Color.MAGENTA)
PATTERN_B = GridPattern(Color.BLACK, Color.YELLOW, Color.BLACK, Color.CYAN)
PATTERN_C = GridPattern(Color.BLACK, Color.MAGENTA, Color.BLACK, Color.YELLOW)
PATTERN_D = GridPattern(Color.BLACK, Color.MAGENTA, Color.BLACK, Color.CYAN)
PATTERN_E = GridPattern(Color.BLACK, Color.CYAN, Color.BLACK, Color.YELLOW)
PATTERN_F = GridPattern(Color.BLACK, Color.CYAN, Color.BLACK, Color.MAGENTA)

PRESETS: Mapping[str, GridPattern] = MappingProxyType({
    "0": PATTERN_0,
    "1": PATTERN_1,
    "A": PATTERN_A,
    "B": PATTERN_B,
    "C": PATTERN_C,
    "D": PATTERN_D,
    "E": PATTERN_E,
    "F": PATTERN_F,
})

COLOR_PRESETS: Tuple[str, ...] = ("A", "B", "C", "D", "E", "F")

# Unit BGR vectors, ordered by Hue value
REFERENCE_HUES = np.array(
    [
        [0.0, 1.0, 1.0],  # 0GR yellow
        [1.0, 0.0, 1.0],  # B0R magenta
        [1.0, 1.0, 0.0],  # BG0 cyan
    ],
    dtype=np.float32,
)
REFERENCE_HUES.setflags(write=False)

_COLOR_TO_HUE: Mapping[Color, Hue] = MappingProxyType({
    Color.YELLOW: Hue.YELLOW,
    Color.MAGENTA: Hue.MAGENTA,
    Color.CYAN: Hue.CYAN,
})


def get_pattern(name: str) -> GridPattern:
    """Look up a preset by name ("0", "1" or "A".."F", case-insensitive)."""
    key = str(name).strip().upper()
    if key not in PRESETS:
        raise ValueError(
            f"Unknown pattern '{name}'. Available options are: {', '.join(PRESETS)}"
        )
    return PRESETS[key]


def chromatic_corners(pattern: GridPattern) -> Tuple[Hue, Hue]:
    """Hues of the upper-right and lower-left quadrants of a color preset.

    This is what the classifier reads from the marker in its rendered
    orientation (dark squares upper-left/lower-right).
    """
    return (
        _COLOR_TO_HUE.get(pattern.c01, Hue.UNKNOWN),
        _COLOR_TO_HUE.get(pattern.c10, Hue.UNKNOWN),
    )


_CANONICAL_READINGS: Mapping[Tuple[Hue, Hue], str] = MappingProxyType({
    chromatic_corners(PRESETS[name]): name for name in COLOR_PRESETS
})


def match_preset(color0: int, color1: int) -> Optional[str]:
    """Name of the color preset whose corner reading is (color0, color1).

    A, C (and B, E; D, F) are the same printed marker turned by 180 degrees,
    so the answer is only unique up to that rotation.
    """
    try:
        key = (Hue(color0), Hue(color1))
    except ValueError:
        return None
    return _CANONICAL_READINGS.get(key)
