"""
Shade glyphs as ordered-dither coverage masks.

The three shade characters cover roughly 25, 50 and 75 percent of their box.
Masks are anchored to canvas coordinates, so overlapping glyphs of the same
level paint the same pixels and a lower level is always a subset of a higher
one.
"""

from __future__ import annotations

import math

import numpy as np

from paperfold.core.color.hsl import hex_to_rgb
from paperfold.core.constants import SHADE_CHARS

BAYER_4 = np.array(
    [
        [0, 8, 2, 10],
        [12, 4, 14, 6],
        [3, 11, 1, 9],
        [15, 7, 13, 5],
    ],
    dtype=np.uint8,
)


def shade_char(level: int) -> str:
    return SHADE_CHARS[max(0, min(level, len(SHADE_CHARS) - 1))]


def coverage_mask(level: int, x0: int, y0: int, width: int, height: int) -> np.ndarray:
    """Boolean mask of the pixels a glyph of the given level covers."""
    if level <= 0 or width <= 0 or height <= 0:
        return np.zeros((max(height, 0), max(width, 0)), dtype=bool)
    ys = (np.arange(y0, y0 + height) % 4)[:, None]
    xs = (np.arange(x0, x0 + width) % 4)[None, :]
    return BAYER_4[ys, xs] < 4 * min(level, 3)


def stamp(buffer: np.ndarray, level: int, x: float, y: float, width: float, height: float, color: str) -> int:
    """
    Paint one glyph into an H x W x 3 buffer, clipped to the canvas.

    Returns the number of pixels written.
    """
    h, w = buffer.shape[:2]
    x0 = max(0, math.floor(x))
    y0 = max(0, math.floor(y))
    x1 = min(w, math.floor(x + width))
    y1 = min(h, math.floor(y + height))
    if level <= 0 or x1 <= x0 or y1 <= y0:
        return 0
    mask = coverage_mask(level, x0, y0, x1 - x0, y1 - y0)
    region = buffer[y0:y1, x0:x1]
    region[mask] = hex_to_rgb(color)
    return int(mask.sum())
