import numpy as np
import pytest

from paperfold.core.color.hsl import hex_to_rgb
from paperfold.core.density.analyzer import DensityGrid, Thresholds
from paperfold.core.geometry.vector import Point
from paperfold.core.render.glyphs import coverage_mask, shade_char, stamp
from paperfold.core.render.grid import (
    CellPaint,
    ColorScheme,
    GridLayout,
    count_levels,
    glyph_run,
    new_canvas,
    paint_cells,
    plan_cells,
)
from paperfold.core.render.params import (
    DRAW_DIRECTIONS,
    RENDER_MODES,
    DrawDirection,
    cell_direction,
    cell_size_candidates,
    default_fold_count,
    generate_cell_size,
    generate_draw_direction,
    generate_render_mode,
)
from paperfold.orchestrator.pipeline import compose, generate_all_params, render

COLORS = ColorScheme(background="#000000", text="#FFFFFF", accent="#FF0000")
THRESHOLDS = Thresholds(1, 2, 3, 4)


def _seed(seed_num):
    # upper 64 bits carry the seed number
    return f"0x{seed_num:016x}" + "0" * 48


@pytest.mark.parametrize(
    "seed,cell",
    [
        (1, "75x25"),
        (2, "5x4"),
        (3, "48x60"),
        (12345, "240x300"),
        (140130465, "5x12"),
        (658561652, "150x300"),
        (890534624, "16x10"),
        (1894838514, "25x10"),
    ],
)
def test_cell_size_golden(seed, cell):
    assert generate_cell_size(seed).label() == cell


def test_cell_size_candidates_tile_reference_canvas():
    pairs = cell_size_candidates()
    assert pairs
    areas = [w * h for w, h in pairs]
    assert areas == sorted(areas)
    for w, h in pairs:
        assert 1200 % w == 0 and 1500 % h == 0
        assert max(w / h, h / w) <= 3


def test_all_params_golden():
    params = generate_all_params(_seed(1), 12)
    assert params.multi_color
    assert len(params.level_colors) == 4
    assert params.max_folds == 25
    assert params.to_dict()["cells"] == {"cellW": 75, "cellH": 25}
    assert params.colors().for_level(0) == params.level_colors[0]


def test_grid_layout():
    layout = GridLayout.for_cell(75, 25, 1200, 1500)
    assert (layout.cols, layout.rows) == (14, 56)
    assert layout.font_size == pytest.approx(23)
    assert layout.glyph_width == pytest.approx(13.8)
    assert layout.cell_span(0, 0) == (50, 129, 50)
    assert layout.cell_of(Point(0, 0)) == (0, 0)
    assert layout.cell_of(Point(100, 30)) == (1, 1)
    assert layout.cell_of(Point(1200, 0)) is None
    half = GridLayout.for_cell(75, 25, 600, 750)
    assert (half.cols, half.rows) == (14, 56)
    assert half.offset_x == pytest.approx(25)


def test_glyph_run_fills_cell():
    run = glyph_run(0, 20, 1, 5)
    assert [x for x, _ in run] == pytest.approx([0, 4.75, 9.5, 14.25, 15])
    assert {level for _, level in run} == {1}
    # dense glyphs drop a level on every second repeat
    assert [level for _, level in glyph_run(0, 20, 3, 5)] == [3, 3, 2, 3, 2]
    assert glyph_run(0, 20, 1, 0) == []
    assert glyph_run(10, 10, 1, 5) == []


def test_plan_cells_priority():
    grid = DensityGrid(
        cols=3,
        rows=1,
        weights={(0, 0): 0.5, (1, 0): 2.0, (2, 0): 0.8},
        max_gap={(0, 0): 1, (1, 0): 0, (2, 0): 4},
    )
    plan = plan_cells(grid, THRESHOLDS, "normal", COLORS, target_cell=(0, 0))
    by_cell = {(c.col, c.row): c for c in plan}
    assert by_cell[(0, 0)] == CellPaint(0, 0, 3, "#FF0000")
    assert by_cell[(1, 0)].level == 3
    assert by_cell[(1, 0)].color != COLORS.text
    assert by_cell[(2, 0)] == CellPaint(2, 0, 2, "#FF0000")


@pytest.mark.parametrize(
    "mode,expected",
    [
        ("normal", [(0, 0), (1, 1)]),
        ("binary", [(0, 0), (1, 3)]),
        ("inverted", [(0, 3), (1, 2)]),
        ("sparse", [(1, 1)]),
        ("dense", [(0, 0)]),
    ],
)
def test_render_mode_levels(mode, expected):
    grid = DensityGrid(cols=2, rows=1, weights={(1, 0): 0.5})
    plan = plan_cells(grid, THRESHOLDS, mode, COLORS)
    assert [(c.col, c.level) for c in plan] == expected


def test_unknown_render_mode():
    grid = DensityGrid(cols=1, rows=1)
    with pytest.raises(ValueError, match="Unknown render mode"):
        plan_cells(grid, THRESHOLDS, "sketchy", COLORS)


def test_count_levels():
    plan = [CellPaint(0, 0, 1, "#000000"), CellPaint(1, 0, 3, "#000000"), CellPaint(2, 0, 3, "#000000")]
    assert count_levels(plan) == {0: 0, 1: 1, 2: 0, 3: 2}


def test_coverage_masks_nest():
    masks = [coverage_mask(level, 3, 1, 8, 8) for level in range(4)]
    assert [int(m.sum()) for m in masks] == [0, 16, 32, 48]
    for lower, higher in zip(masks, masks[1:]):
        assert not (lower & ~higher).any()
    assert shade_char(2) == "▒"
    assert shade_char(9) == "▓"


def test_stamp_is_clipped_to_canvas():
    buffer = np.zeros((10, 10, 3), dtype=np.uint8)
    assert stamp(buffer, 3, -2, -2, 6, 6, "#FFFFFF") == 12
    assert buffer[4:, :].sum() == 0 and buffer[:, 4:].sum() == 0
    assert stamp(buffer, 3, 20, 20, 6, 6, "#FFFFFF") == 0
    assert stamp(buffer, 0, 0, 0, 6, 6, "#FFFFFF") == 0


def test_cell_direction_modes():
    assert cell_direction(DrawDirection("rtl"), 3, 2, 10, 1) == "rtl"
    alternate = DrawDirection("alternate", alternate_starts_rtl=False)
    assert [cell_direction(alternate, 0, row, 10, 1) for row in range(3)] == ["ltr", "rtl", "ltr"]
    board = DrawDirection("checkerboard")
    assert cell_direction(board, 1, 0, 10, 1) == "rtl"
    assert cell_direction(board, 1, 1, 10, 1) == "ltr"


def test_draw_direction_only_changes_order():
    layout = GridLayout.for_cell(100, 100, 240, 300)
    plan = [
        CellPaint(0, 0, 3, "#FF0000"),
        CellPaint(1, 0, 2, "#00FF00"),
        CellPaint(2, 1, 1, "#0000FF"),
        CellPaint(3, 3, 3, "#FFFFFF"),
    ]
    reference = new_canvas(240, 300, "#000000")
    written = paint_cells(reference, plan, layout)
    assert written > 0
    for mode in ("ltr", "rtl", "center", "checkerboard", "alternate"):
        buffer = new_canvas(240, 300, "#000000")
        assert paint_cells(buffer, plan, layout, DrawDirection(mode), seed=7) == written
        assert np.array_equal(buffer, reference), mode


def test_small_render_is_deterministic():
    seed = _seed(890534624)
    first = render(seed, fold_count=6, width=120, height=150)
    second = render(seed, fold_count=6, width=120, height=150)
    assert first.shape == (150, 120, 3)
    assert first.dtype == np.uint8
    assert np.array_equal(first, second)
    background = generate_all_params(seed).palette.background
    assert tuple(first[0, 0]) == hex_to_rgb(background)


def test_compose_rejects_bad_input():
    with pytest.raises(ValueError):
        compose(_seed(1), 5, width=0)
    with pytest.raises(ValueError):
        compose(_seed(1), -1)


def test_compose_scales_creases_to_output():
    comp = compose(_seed(1), 12, width=600, height=750)
    assert len(comp.creases) == len(comp.folds.creases) == 9
    for scaled, raw in zip(comp.creases, comp.folds.creases):
        assert scaled.p1.x == pytest.approx(raw.p1.x * 0.5)
        assert scaled.p1.y == pytest.approx(raw.p1.y * 0.5)
    assert (comp.grid.cols, comp.grid.rows) == (14, 56)
    assert comp.thresholds.t1 < comp.thresholds.t2


def test_seed_choices_stay_in_vocabulary():
    for seed in range(300):
        assert generate_render_mode(seed) in RENDER_MODES
        direction = generate_draw_direction(seed, 14)
        assert direction.mode in DRAW_DIRECTIONS
        assert 0 <= direction.diagonal_start_col < 14
        assert 1 <= default_fold_count(seed) <= 500
