from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from paperfold.core.constants import (
    CELL_ASPECT_MAX,
    CELL_MAX,
    CELL_MIN,
    CH_ANALYTICS,
    CH_CELL_SIZE,
    CH_CREASE_LINE_COLOR,
    CH_CREASE_LINES,
    CH_DEFAULT_FOLDS,
    CH_DRAW_DIRECTION,
    CH_HIT_COUNTS,
    CH_MULTI_COLOR,
    CH_RANDOM_MID_ROW,
    CH_RENDER_MODE,
    FALLBACK_CELL,
    RARE_TRAIT_PROBABILITY,
    REFERENCE_HEIGHT,
    REFERENCE_WIDTH,
)
from paperfold.core.seed.sequence import channel

RENDER_MODES = ("normal", "binary", "inverted", "sparse", "dense")
DRAW_DIRECTIONS = ("ltr", "rtl", "center", "alternate", "diagonal", "randomMid", "checkerboard")


@dataclass(frozen=True)
class CellSize:
    width: int
    height: int

    def label(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class DrawDirection:
    mode: str
    alternate_starts_rtl: bool = False
    diagonal_start_col: int = 0
    diagonal_shift_right: bool = False


# -------------------------
# Cell size
# -------------------------


def divisors(n: int, low: int, high: int) -> List[int]:
    return [i for i in range(low, high + 1) if n % i == 0]


def cell_size_candidates(width: int = REFERENCE_WIDTH, height: int = REFERENCE_HEIGHT) -> List[Tuple[int, int]]:
    """(w, h) pairs that tile the reference canvas, smallest area first."""
    widths = divisors(width, CELL_MIN, CELL_MAX) or [FALLBACK_CELL[0]]
    heights = divisors(height, CELL_MIN, CELL_MAX) or [FALLBACK_CELL[1]]
    pairs = [(w, h) for w in widths for h in heights if max(w / h, h / w) <= CELL_ASPECT_MAX]
    return sorted(pairs, key=lambda p: p[0] * p[1])


def generate_cell_size(seed: int, width: int = REFERENCE_WIDTH, height: int = REFERENCE_HEIGHT) -> CellSize:
    pairs = cell_size_candidates(width, height)
    if not pairs:
        return CellSize(*FALLBACK_CELL)
    seq = channel(seed, CH_CELL_SIZE)
    bias = seq()
    n = len(pairs)
    if bias < 0.25:
        idx = math.floor(seq() * math.ceil(n * 0.25))
    elif bias > 0.75:
        start = math.floor(n * 0.75)
        idx = start + math.floor(seq() * (n - start))
    else:
        idx = math.floor(seq() * n)
    return CellSize(*pairs[idx])


# -------------------------
# Modes and flags
# -------------------------


def generate_render_mode(seed: int) -> str:
    roll = channel(seed, CH_RENDER_MODE)()
    if roll < 0.4:
        return "normal"
    if roll < 0.7:
        return "inverted"
    if roll < 0.8:
        return "binary"
    if roll < 0.9:
        return "sparse"
    return "dense"


def generate_draw_direction(seed: int, cols: int = 1) -> DrawDirection:
    seq = channel(seed, CH_DRAW_DIRECTION)
    roll = seq()
    if roll < 0.22:
        mode = "ltr"
    elif roll < 0.44:
        mode = "rtl"
    elif roll < 0.65:
        mode = "center"
    elif roll < 0.8:
        mode = "alternate"
    elif roll < 0.9:
        mode = "diagonal"
    elif roll < 0.96:
        mode = "randomMid"
    else:
        mode = "checkerboard"
    starts_rtl = seq() < 0.5
    start_col = math.floor(seq() * cols)
    return DrawDirection(mode, starts_rtl, start_col, seq() < 0.5)


def cell_direction(direction: DrawDirection, col: int, row: int, cols: int, seed: int) -> str:
    """Direction ("ltr", "rtl" or "center") glyphs are laid down in one cell."""
    mode = direction.mode
    if mode in ("ltr", "rtl", "center"):
        return mode
    if mode == "alternate":
        return "rtl" if (row % 2 == 1) != direction.alternate_starts_rtl else "ltr"
    if mode == "diagonal":
        shift = row if direction.diagonal_shift_right else -row
        seam = (direction.diagonal_start_col + shift + cols * 100) % cols
        return "ltr" if col < seam else "rtl"
    if mode == "randomMid":
        switch = math.floor(channel(seed, CH_RANDOM_MID_ROW + row)() * cols)
        return "ltr" if col < switch else "rtl"
    if mode == "checkerboard":
        return "ltr" if (row + col) % 2 == 0 else "rtl"
    return "ltr"


def generate_multi_color(seed: int) -> bool:
    return channel(seed, CH_MULTI_COLOR)() < 0.25


def _rare(seed: int, offset: int) -> bool:
    return channel(seed, offset)() < RARE_TRAIT_PROBABILITY


def has_crease_lines(seed: int) -> bool:
    return _rare(seed, CH_CREASE_LINES)


def has_hit_counts(seed: int) -> bool:
    return _rare(seed, CH_HIT_COUNTS)


def has_analytics_mode(seed: int) -> bool:
    return _rare(seed, CH_ANALYTICS)


def default_fold_count(seed: int) -> int:
    return math.floor(1 + channel(seed, CH_DEFAULT_FOLDS)() * 500)


def crease_line_color(seed: int, text: str, accent: str) -> str:
    return accent if channel(seed, CH_CREASE_LINE_COLOR)() < 0.6 else text
