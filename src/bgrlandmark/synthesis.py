"""
Landmark image synthesis.

Renders flat-color swatches (the precursor of the matching templates),
printable single landmarks and tiled checkerboard calibration sheets.
No detection logic lives here.
"""

from __future__ import annotations

import logging
from typing import Tuple, Union

import cv2
import numpy as np

from .patterns import BGR_BORDER, BGR_COLORS, BGRColor, Color, GridPattern
from .utils import rail

LOGGER = logging.getLogger(__name__)

DEFAULT_DPI = 72

GRID_INCHES_RANGE = (0.5, 6.0)
CHECKER_GRID_INCHES_RANGE = (0.5, 2.0)
BORDER_INCHES_RANGE = (0.0, 1.0)
REPEAT_RANGE = (2, 8)

ColorSpec = Union[Color, BGRColor]


def _as_bgr(color: ColorSpec) -> Tuple[int, int, int]:
    if isinstance(color, Color):
        return BGR_COLORS[color]
    b, g, r = color
    return (int(b), int(g), int(r))


def _mean_bgr(*colors: BGRColor) -> np.ndarray:
    # rint rounds halves to even, like OpenCV's saturate_cast
    avg = np.mean(np.array(colors, dtype=np.float64), axis=0)
    return np.rint(avg).astype(np.uint8)


def render_swatch(pattern: GridPattern, k: int) -> np.ndarray:
    """
    Render a k x k BGR swatch of a grid pattern.

    The four quadrants are k//2 wide. The row and column through the middle
    carry the average of the two quadrants they separate, and the center
    pixel carries the average of all four.
    """
    kh = k // 2
    c0, c1, c2, c3 = pattern.bgr()

    img = np.zeros((k, k, 3), dtype=np.uint8)

    # fill in 2x2 squares (clockwise from upper left)
    img[0:kh, 0:kh] = c0
    img[0:kh, kh + 1:k] = c1
    img[kh:k, kh:k] = c2
    img[kh + 1:k, 0:kh] = c3

    # borders between squares
    img[0:kh + 1, kh] = _mean_bgr(c0, c1)
    img[kh, kh:k] = _mean_bgr(c1, c2)
    img[kh:k, kh] = _mean_bgr(c2, c3)
    img[kh, 0:kh + 1] = _mean_bgr(c3, c0)

    img[kh, kh] = _mean_bgr(c0, c1, c2, c3)
    return img


def render_landmark(
    pattern: GridPattern,
    grid_inches: float = 3.0,
    border_inches: float = 0.25,
    border_color: ColorSpec = Color.WHITE,
    dpi: int = DEFAULT_DPI,
) -> np.ndarray:
    """
    Render a printable landmark: the 2x2 grid surrounded by a border.

    Args:
        pattern: Quadrant colors
        grid_inches: Side of the 2x2 grid, clamped to [0.5, 6.0]
        border_inches: Width of the border, clamped to [0.0, 1.0]
        border_color: Color enum value or BGR triple
        dpi: Output resolution

    Returns:
        BGR image of side grid + 2 * border pixels
    """
    grid_fix = rail(float(grid_inches), *GRID_INCHES_RANGE)
    border_fix = rail(float(border_inches), *BORDER_INCHES_RANGE)

    kgrid = int(grid_fix * dpi)
    kborder = int(border_fix * dpi)
    kgridh = kgrid // 2
    kfull = kgrid + (kborder * 2)

    c0, c1, c2, c3 = pattern.bgr()

    img_grid = np.zeros((kgrid, kgrid, 3), dtype=np.uint8)
    cv2.rectangle(img_grid, (0, 0), (kgridh - 1, kgridh - 1), c0, -1)
    cv2.rectangle(img_grid, (kgridh, 0), (kgrid - 1, kgridh - 1), c1, -1)
    cv2.rectangle(img_grid, (kgridh, kgridh), (kgrid - 1, kgrid - 1), c2, -1)
    cv2.rectangle(img_grid, (0, kgridh), (kgridh - 1, kgrid - 1), c3, -1)

    img = np.full((kfull, kfull, 3), _as_bgr(border_color), dtype=np.uint8)
    img[kborder:kborder + kgrid, kborder:kborder + kgrid] = img_grid

    LOGGER.debug("Rendered landmark: grid=%dpx border=%dpx", kgrid, kborder)
    return img


def render_checkerboard(
    pattern: GridPattern,
    x_repeat: int,
    y_repeat: int,
    grid_inches: float = 0.5,
    border_inches: float = 0.25,
    border_color: ColorSpec = BGR_BORDER,
    dpi: int = DEFAULT_DPI,
) -> np.ndarray:
    """
    Render a calibration sheet by tiling an unbordered landmark.

    Args:
        pattern: Quadrant colors of one tile
        x_repeat: Horizontal tile count, clamped to [2, 8]
        y_repeat: Vertical tile count, clamped to [2, 8]
        grid_inches: Side of one tile, clamped to [0.5, 2.0]
        border_inches: Width of the outer border, clamped to [0.0, 1.0]
        border_color: Color enum value or BGR triple
        dpi: Output resolution
    """
    grid_fix = rail(float(grid_inches), *CHECKER_GRID_INCHES_RANGE)
    border_fix = rail(float(border_inches), *BORDER_INCHES_RANGE)
    xr = rail(int(x_repeat), *REPEAT_RANGE)
    yr = rail(int(y_repeat), *REPEAT_RANGE)

    kborder = int(border_fix * dpi)

    block = render_landmark(pattern, grid_fix, 0.0, dpi=dpi)
    tiles = np.tile(block, (yr, xr, 1))

    th, tw = tiles.shape[:2]
    img = np.full(
        (th + kborder * 2, tw + kborder * 2, 3), _as_bgr(border_color), dtype=np.uint8
    )
    img[kborder:kborder + th, kborder:kborder + tw] = tiles

    LOGGER.debug("Rendered %dx%d checkerboard (%dx%d px)", xr, yr, img.shape[1], img.shape[0])
    return img
