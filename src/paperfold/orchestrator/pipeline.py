from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image

from paperfold.core.color.palette import Palette, generate_level_colors, generate_palette
from paperfold.core.constants import DEFAULT_OUTPUT_HEIGHT, DEFAULT_OUTPUT_WIDTH
from paperfold.core.density.analyzer import DensityGrid, Thresholds, adaptive_thresholds, analyze_creases
from paperfold.core.fold.params import (
    FoldStrategy,
    PaperProperties,
    WeightRange,
    generate_fold_strategy,
    generate_max_folds,
    generate_paper_properties,
    generate_weight_range,
)
from paperfold.core.fold.simulator import Crease, FoldResult, simulate_folds
from paperfold.core.render import params as render_params
from paperfold.core.render.grid import (
    CellPaint,
    ColorScheme,
    GridLayout,
    OverlayOptions,
    draw_overlays,
    new_canvas,
    paint_cells,
    plan_cells,
)
from paperfold.core.render.params import CellSize, DrawDirection
from paperfold.core.seed.sequence import SeedLike, reduce_seed
from paperfold.utils.logging import get_logger

logger = get_logger(__name__)

METADATA_DESCRIPTION = "On-chain generative paper folding art"


@dataclass(frozen=True)
class RenderParams:
    """Everything a render needs that is derived from the seed alone."""

    seed_num: int
    palette: Palette
    cell_size: CellSize
    render_mode: str
    weight_range: WeightRange
    fold_strategy: FoldStrategy
    multi_color: bool
    level_colors: Optional[List[str]]
    max_folds: int
    paper: PaperProperties
    draw_direction: DrawDirection
    crease_lines: bool
    hit_counts: bool
    analytics: bool
    fold_count: int

    def colors(self) -> ColorScheme:
        return ColorScheme(
            background=self.palette.background,
            text=self.palette.text,
            accent=self.palette.accent,
            level_colors=self.level_colors if self.multi_color else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seedNum": self.seed_num,
            "palette": self.palette.to_dict(),
            "cells": {"cellW": self.cell_size.width, "cellH": self.cell_size.height},
            "renderMode": self.render_mode,
            "weightRange": {"min": self.weight_range.min, "max": self.weight_range.max},
            "foldStrategy": self.fold_strategy.to_dict(),
            "multiColor": self.multi_color,
            "levelColors": self.level_colors,
            "maxFolds": self.max_folds,
            "paperProperties": {
                "absorbency": self.paper.absorbency,
                "angleAffinity": self.paper.angle_affinity,
                "affinityStrength": self.paper.affinity_strength,
                "ceilingMultiplier": self.paper.ceiling_multiplier,
            },
            "drawDirection": self.draw_direction.mode,
            "showCreaseLines": self.crease_lines,
            "showHitCounts": self.hit_counts,
            "analyticsMode": self.analytics,
            "folds": self.fold_count,
        }


@dataclass(frozen=True)
class Composition:
    """Intermediate products of one render, in output pixel space."""

    params: RenderParams
    layout: GridLayout
    folds: FoldResult
    creases: List[Crease]
    grid: DensityGrid
    thresholds: Thresholds
    plan: List[CellPaint]


def generate_all_params(seed: SeedLike, fold_count: Optional[int] = None) -> RenderParams:
    n = reduce_seed(seed)
    palette = generate_palette(n)
    cell_size = render_params.generate_cell_size(n)
    multi_color = render_params.generate_multi_color(n)
    level_colors = generate_level_colors(n, palette.background, palette.text) if multi_color else None
    cols = GridLayout.for_cell(cell_size.width, cell_size.height, DEFAULT_OUTPUT_WIDTH, DEFAULT_OUTPUT_HEIGHT).cols
    if fold_count is None:
        fold_count = render_params.default_fold_count(n)
    return RenderParams(
        seed_num=n,
        palette=palette,
        cell_size=cell_size,
        render_mode=render_params.generate_render_mode(n),
        weight_range=generate_weight_range(n),
        fold_strategy=generate_fold_strategy(n),
        multi_color=multi_color,
        level_colors=level_colors,
        max_folds=generate_max_folds(n),
        paper=generate_paper_properties(n),
        draw_direction=render_params.generate_draw_direction(n, cols),
        crease_lines=render_params.has_crease_lines(n),
        hit_counts=render_params.has_hit_counts(n),
        analytics=render_params.has_analytics_mode(n),
        fold_count=fold_count,
    )


def _validate(fold_count: Optional[int], width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"width and height must be positive, got {width}x{height}")
    if fold_count is not None and fold_count < 0:
        raise ValueError(f"fold count must not be negative, got {fold_count}")


def compose(
    seed: SeedLike,
    fold_count: Optional[int] = None,
    width: int = DEFAULT_OUTPUT_WIDTH,
    height: int = DEFAULT_OUTPUT_HEIGHT,
    use_paper: bool = False,
) -> Composition:
    """
    Fold, analyze and plan a render without drawing it.

    With use_paper the seed's paper properties gate which creases register
    and cap the total weight the grid can hold.
    """
    _validate(fold_count, width, height)
    params = generate_all_params(seed, fold_count)
    layout = GridLayout.for_cell(params.cell_size.width, params.cell_size.height, width, height)
    draw_w, draw_h = GridLayout.reference_draw_size()
    logger.debug(
        "compose seed=%s folds=%s grid=%dx%d cell=%s mode=%s",
        params.seed_num,
        params.fold_count,
        layout.cols,
        layout.rows,
        params.cell_size.label(),
        params.render_mode,
    )

    paper = params.paper if use_paper else None
    folds = simulate_folds(
        draw_w,
        draw_h,
        params.fold_count,
        params.seed_num,
        params.weight_range,
        params.fold_strategy,
        paper=paper,
    )
    creases = [
        replace(c, p1=layout.scale_point(c.p1), p2=layout.scale_point(c.p2)) for c in folds.creases
    ]
    grid = analyze_creases(
        creases,
        layout.cols,
        layout.rows,
        layout.cell_width,
        layout.cell_height,
        ceiling_multiplier=paper.ceiling_multiplier if paper else None,
    )
    thresholds = adaptive_thresholds(grid.weights.values())
    target_cell = layout.cell_of(layout.scale_point(folds.last_fold_target)) if folds.last_fold_target else None
    plan = plan_cells(grid, thresholds, params.render_mode, params.colors(), target_cell)
    return Composition(params, layout, folds, creases, grid, thresholds, plan)


def render_image(
    seed: SeedLike,
    fold_count: Optional[int] = None,
    width: int = DEFAULT_OUTPUT_WIDTH,
    height: int = DEFAULT_OUTPUT_HEIGHT,
    show_creases: bool = False,
    show_paper: bool = False,
    use_paper: bool = False,
) -> Image.Image:
    comp = compose(seed, fold_count, width, height, use_paper=use_paper)
    params = comp.params
    colors = params.colors()

    buffer = new_canvas(width, height, colors.background)
    if not (params.hit_counts or params.analytics):
        # numeric modes replace the glyph layer
        paint_cells(buffer, comp.plan, comp.layout, params.draw_direction, params.seed_num)
    image = Image.fromarray(buffer)

    options = OverlayOptions(
        show_creases=show_creases,
        show_paper=show_paper,
        crease_line_color=(
            render_params.crease_line_color(params.seed_num, colors.text, colors.accent) if params.crease_lines else None
        ),
        hit_counts=params.hit_counts,
        analytics=params.analytics,
    )
    shape = [comp.layout.scale_point(p) for p in comp.folds.final_shape]
    return draw_overlays(image, options, comp.layout, comp.creases, comp.grid, shape, colors)


def render(
    seed: SeedLike,
    fold_count: Optional[int] = None,
    width: int = DEFAULT_OUTPUT_WIDTH,
    height: int = DEFAULT_OUTPUT_HEIGHT,
    **options: bool,
) -> np.ndarray:
    """Rendered artwork as an H x W x 3 uint8 array."""
    image = render_image(seed, fold_count, width, height, **options)
    return np.asarray(image, dtype=np.uint8)


def generate_metadata(token_id: int, seed: SeedLike, fold_count: int, image_base_url: str = "") -> Dict[str, Any]:
    params = generate_all_params(seed, fold_count)
    draw_w, draw_h = GridLayout.reference_draw_size()
    folds = simulate_folds(draw_w, draw_h, fold_count, params.seed_num, params.weight_range, params.fold_strategy)

    attributes: List[Dict[str, Any]] = [
        {"trait_type": "Fold Strategy", "value": params.fold_strategy.type},
        {"trait_type": "Render Mode", "value": params.render_mode},
        {"trait_type": "Multi-Color", "value": "Yes" if params.multi_color else "No"},
        {"trait_type": "Cell Size", "value": params.cell_size.label()},
        {"trait_type": "Fold Count", "value": fold_count},
        {"trait_type": "Max Folds", "value": params.max_folds},
        {"trait_type": "Crease Count", "value": len(folds.creases)},
        {"trait_type": "Palette Strategy", "value": params.palette.strategy},
        {"trait_type": "Paper Type", "value": params.paper.paper_type},
        {"trait_type": "Paper Grain", "value": "Grain" if params.paper.has_grain else "Uniform"},
    ]
    if params.crease_lines:
        attributes.append({"trait_type": "Crease Lines", "value": "Visible"})

    return {
        "name": f"Fold #{token_id}",
        "description": METADATA_DESCRIPTION,
        "image": f"{image_base_url}/{token_id}" if image_base_url else "",
        "attributes": attributes,
    }
