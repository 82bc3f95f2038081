from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from paperfold.core.color.hsl import hex_to_rgb, shift_extreme
from paperfold.core.constants import (
    CHAR_WIDTH_RATIO,
    DRAWING_MARGIN,
    EXTREME_WEIGHT,
    GLYPH_OVERLAP,
    REFERENCE_HEIGHT,
    REFERENCE_WIDTH,
)
from paperfold.core.density.analyzer import Cell, DensityGrid, Thresholds, level_of
from paperfold.core.fold.simulator import Crease
from paperfold.core.geometry.vector import Point
from paperfold.core.numeric import js_round
from paperfold.core.render.glyphs import stamp
from paperfold.core.render.params import DrawDirection, cell_direction
from paperfold.utils.logging import get_logger

logger = get_logger(__name__)

CREASE_DEBUG_COLOR = "#ff00ff"
PAPER_DEBUG_COLOR = "#00ffff"


@dataclass(frozen=True)
class GridLayout:
    """Reference grid scaled onto an output canvas."""

    cols: int
    rows: int
    scale_x: float
    scale_y: float

    @classmethod
    def for_cell(cls, cell_width: int, cell_height: int, width: int, height: int) -> "GridLayout":
        draw_w, draw_h = cls.reference_draw_size()
        return cls(
            cols=max(1, math.floor(draw_w / cell_width)),
            rows=max(1, math.floor(draw_h / cell_height)),
            scale_x=width / REFERENCE_WIDTH,
            scale_y=height / REFERENCE_HEIGHT,
        )

    @staticmethod
    def reference_draw_size() -> Tuple[int, int]:
        return REFERENCE_WIDTH - DRAWING_MARGIN * 2, REFERENCE_HEIGHT - DRAWING_MARGIN * 2

    @property
    def offset_x(self) -> float:
        return DRAWING_MARGIN * self.scale_x

    @property
    def offset_y(self) -> float:
        return DRAWING_MARGIN * self.scale_y

    @property
    def cell_width(self) -> float:
        return self.reference_draw_size()[0] / self.cols * self.scale_x

    @property
    def cell_height(self) -> float:
        return self.reference_draw_size()[1] / self.rows * self.scale_y

    @property
    def font_size(self) -> float:
        return self.cell_height - 2 * self.scale_y

    @property
    def glyph_width(self) -> float:
        return self.font_size * CHAR_WIDTH_RATIO

    def cell_of(self, point: Point) -> Optional[Cell]:
        col = math.floor(point.x / self.cell_width)
        row = math.floor(point.y / self.cell_height)
        if 0 <= col < self.cols and 0 <= row < self.rows:
            return col, row
        return None

    def cell_span(self, col: int, row: int) -> Tuple[int, int, int]:
        """(x, x_end, y) in output pixels for one cell."""
        x = js_round(self.offset_x + col * self.cell_width)
        x_end = js_round(self.offset_x + (col + 1) * self.cell_width)
        y = js_round(self.offset_y + row * self.cell_height)
        return x, x_end, y

    def scale_point(self, point: Point) -> Point:
        return Point(point.x * self.scale_x, point.y * self.scale_y)

    def to_canvas(self, point: Point) -> Tuple[float, float]:
        return self.offset_x + point.x, self.offset_y + point.y


@dataclass(frozen=True)
class CellPaint:
    col: int
    row: int
    level: int
    color: str


@dataclass(frozen=True)
class ColorScheme:
    background: str
    text: str
    accent: str
    level_colors: Optional[Sequence[str]] = None

    def for_level(self, level: int) -> str:
        if self.level_colors:
            return self.level_colors[min(level, 3)]
        return self.text


def _mode_level(mode: str, weight: float, thresholds: Thresholds) -> Optional[int]:
    level = level_of(weight, thresholds)
    if mode == "normal":
        return level
    if mode == "binary":
        return 0 if weight == 0 else 3
    if mode == "inverted":
        return 3 - level
    if mode == "sparse":
        return 1 if level == 1 else None
    if mode == "dense":
        if level >= 2:
            return level
        return 0 if weight == 0 else None
    raise ValueError(f"Unknown render mode '{mode}'")


def accent_cells(grid: DensityGrid) -> List[Cell]:
    """Cells holding the largest depth gap."""
    if not grid.max_gap:
        return []
    top = max(grid.max_gap.values())
    return [key for key, gap in grid.max_gap.items() if gap == top]


def plan_cells(
    grid: DensityGrid,
    thresholds: Thresholds,
    mode: str,
    colors: ColorScheme,
    target_cell: Optional[Cell] = None,
) -> List[CellPaint]:
    """
    Decide level and color for every cell, row by row.

    The last fold target wins, then max-gap cells, then extreme weights; all
    other cells follow the render mode. Cells a mode leaves empty are omitted.
    """
    highlighted = set(accent_cells(grid))
    plan: List[CellPaint] = []
    for row in range(grid.rows):
        for col in range(grid.cols):
            key = (col, row)
            weight = grid.weights.get(key, 0)
            if key == target_cell:
                plan.append(CellPaint(col, row, 3, colors.accent or colors.text))
            elif key in highlighted and weight > 0:
                plan.append(CellPaint(col, row, 2, colors.accent))
            elif weight >= EXTREME_WEIGHT:
                plan.append(CellPaint(col, row, 3, shift_extreme(colors.text, weight, EXTREME_WEIGHT)))
            else:
                level = _mode_level(mode, weight, thresholds)
                if level is not None:
                    plan.append(CellPaint(col, row, level, colors.for_level(level)))
    return plan


def glyph_run(x: int, x_end: int, level: int, glyph_width: float) -> List[Tuple[float, int]]:
    """
    Glyph positions and levels filling one cell from the left.

    Glyphs overlap slightly; every second repeat of a dense glyph drops one
    level, and the last glyph sits flush with the cell end.
    """
    run: List[Tuple[float, int]] = []
    if glyph_width <= 0:
        return run
    current = float(x)
    index = 0
    while current < x_end:
        glyph_level = level
        if level >= 2 and index > 0 and index % 2 == 0:
            glyph_level = max(0, level - 1)
        remaining = x_end - current
        if remaining <= 0:
            break
        if remaining < glyph_width * 1.1:
            run.append((x_end - glyph_width, glyph_level))
            break
        run.append((current, glyph_level))
        current += glyph_width * GLYPH_OVERLAP
        index += 1
    return run


def _ordered(run: List[Tuple[float, int]], direction: str, center: float, glyph_width: float) -> List[Tuple[float, int]]:
    if direction == "rtl":
        return run[::-1]
    if direction == "center":
        return sorted(run, key=lambda g: abs(g[0] + glyph_width / 2 - center))
    return run


def paint_cells(
    buffer: np.ndarray,
    plan: Sequence[CellPaint],
    layout: GridLayout,
    direction: Optional[DrawDirection] = None,
    seed: int = 0,
) -> int:
    """
    Stamp the planned glyphs into an RGB buffer.

    The draw direction only changes the order glyphs are laid down in; masks
    of one cell never overlap a neighbour, so the pixels are the same.
    """
    written = 0
    glyph_w = layout.glyph_width
    glyph_h = layout.font_size
    for cell in plan:
        if cell.level <= 0:
            continue
        x, x_end, y = layout.cell_span(cell.col, cell.row)
        run = glyph_run(x, x_end, cell.level, glyph_w)
        if direction is not None:
            how = cell_direction(direction, cell.col, cell.row, layout.cols, seed)
            run = _ordered(run, how, (x + x_end) / 2, glyph_w)
        for gx, level in run:
            written += stamp(buffer, level, gx, y, glyph_w, glyph_h, cell.color)
    return written


def new_canvas(width: int, height: int, background: str) -> np.ndarray:
    buffer = np.empty((height, width, 3), dtype=np.uint8)
    buffer[:, :] = hex_to_rgb(background)
    return buffer


# -------------------------
# Overlays
# -------------------------


@dataclass(frozen=True)
class OverlayOptions:
    show_creases: bool = False
    show_paper: bool = False
    crease_line_color: Optional[str] = None
    hit_counts: bool = False
    analytics: bool = False


def _rgba(hex_color: str, alpha: float) -> Tuple[int, int, int, int]:
    r, g, b = hex_to_rgb(hex_color)
    return r, g, b, js_round(alpha * 255)


def _font(size: int) -> ImageFont.ImageFont:
    return ImageFont.load_default(size=max(1, size))


def _draw_counts(draw: ImageDraw.ImageDraw, grid: DensityGrid, layout: GridLayout, color: str) -> None:
    size = math.floor(min(layout.cell_width * 0.45, layout.cell_height * 0.7))
    font = _font(size)
    fill = _rgba(color, 1.0)
    for (col, row), weight in grid.weights.items():
        if weight <= 0:
            continue
        cx = js_round(layout.offset_x + col * layout.cell_width + layout.cell_width / 2)
        cy = js_round(layout.offset_y + row * layout.cell_height + layout.cell_height / 2)
        draw.text((cx, cy), str(js_round(weight)), fill=fill, font=font, anchor="mm")


def _draw_creases(draw: ImageDraw.ImageDraw, creases: Sequence[Crease], layout: GridLayout, fill, width: float) -> None:
    for crease in creases:
        draw.line(
            [layout.to_canvas(crease.p1), layout.to_canvas(crease.p2)],
            fill=fill,
            width=max(1, js_round(width)),
        )


def draw_overlays(
    image: Image.Image,
    options: OverlayOptions,
    layout: GridLayout,
    creases: Sequence[Crease],
    grid: DensityGrid,
    paper_shape: Sequence[Point],
    colors: ColorScheme,
) -> Image.Image:
    """
    Composite line and label overlays on top of the glyph layer.

    creases and paper_shape are in output pixels relative to the draw area.
    """
    if not (options.show_creases or options.show_paper or options.crease_line_color or options.hit_counts or options.analytics):
        return image

    layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    if options.analytics:
        grid_fill = _rgba(colors.accent, 0.4)
        x0, y0 = layout.offset_x, layout.offset_y
        x1 = x0 + layout.cols * layout.cell_width
        y1 = y0 + layout.rows * layout.cell_height
        for col in range(layout.cols + 1):
            x = x0 + col * layout.cell_width
            draw.line([(x, y0), (x, y1)], fill=grid_fill, width=1)
        for row in range(layout.rows + 1):
            y = y0 + row * layout.cell_height
            draw.line([(x0, y), (x1, y)], fill=grid_fill, width=1)
        stroke = 2 * layout.scale_x
        _draw_creases(draw, creases, layout, _rgba(colors.accent, 1.0), stroke)
        radius = 4 * layout.scale_x
        for hit in grid.intersections:
            cx, cy = layout.to_canvas(Point(hit.x, hit.y))
            draw.ellipse(
                [cx - radius, cy - radius, cx + radius, cy + radius],
                outline=_rgba(colors.accent, 1.0),
                width=max(1, js_round(stroke)),
            )
        _draw_counts(draw, grid, layout, colors.accent)
    elif options.hit_counts:
        _draw_counts(draw, grid, layout, colors.text)

    if options.crease_line_color:
        _draw_creases(draw, creases, layout, _rgba(options.crease_line_color, 0.85), 1.5 * layout.scale_x)

    if options.show_creases:
        _draw_creases(draw, creases, layout, _rgba(CREASE_DEBUG_COLOR, 0.7), 1)

    if options.show_paper and len(paper_shape) >= 3:
        outline = [layout.to_canvas(p) for p in paper_shape]
        fill_layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
        ImageDraw.Draw(fill_layer).polygon(outline, fill=_rgba(PAPER_DEBUG_COLOR, 0.15))
        layer = Image.alpha_composite(fill_layer, layer)
        draw = ImageDraw.Draw(layer)
        draw.line(outline + [outline[0]], fill=_rgba(PAPER_DEBUG_COLOR, 0.9), width=2)

    base = image.convert("RGBA")
    return Image.alpha_composite(base, layer).convert("RGB")


def count_levels(plan: Sequence[CellPaint]) -> Dict[int, int]:
    counts: Dict[int, int] = {0: 0, 1: 0, 2: 0, 3: 0}
    for cell in plan:
        counts[cell.level] = counts.get(cell.level, 0) + 1
    return counts
