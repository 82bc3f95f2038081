from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from paperfold.core.constants import CH_ABSORBENCY, CH_CREASE_WEIGHT, CH_FREQUENCY, CH_REDUCTION
from paperfold.core.fold.params import (
    FoldStrategy,
    PaperProperties,
    WeightRange,
    generate_fold_strategy,
    generate_max_folds,
    grain_modifier,
)
from paperfold.core.geometry import polygon as poly
from paperfold.core.geometry.lines import clip_to_rect
from paperfold.core.geometry.vector import Point, dist, lerp, mid, norm, perp, sub
from paperfold.core.numeric import clamp
from paperfold.core.seed.sequence import SeededSequence, channel, hash_seed
from paperfold.utils.logging import get_logger

logger = get_logger(__name__)

MIN_CREASE_WEIGHT = 0.01


@dataclass
class Crease:
    p1: Point
    p2: Point
    depth: int
    weight: float
    cycle_position: int
    reduction_multiplier: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "p1": {"x": self.p1.x, "y": self.p1.y},
            "p2": {"x": self.p2.x, "y": self.p2.y},
            "depth": self.depth,
            "weight": self.weight,
            "cyclePosition": self.cycle_position,
            "reductionMultiplier": self.reduction_multiplier,
        }


@dataclass
class FoldState:
    """Mutable state carried from one fold step to the next."""

    shape: poly.Polygon
    step_seed: int
    creases: List[Crease] = field(default_factory=list)
    last_target: Optional[Point] = None


@dataclass(frozen=True)
class FoldResult:
    creases: List[Crease]
    final_shape: poly.Polygon
    max_folds: int
    last_fold_target: Optional[Point]
    strategy: Optional[FoldStrategy] = None


@dataclass(frozen=True)
class _Oscillation:
    freq_x: float
    freq_y: float
    phase_x: float
    phase_y: float

    @classmethod
    def from_seed(cls, seed: int) -> "_Oscillation":
        seq = channel(seed, CH_FREQUENCY)
        freq_x = 0.05 + seq() * 0.15
        freq_y = 0.05 + seq() * 0.15
        phase_x = seq() * math.pi * 2
        return cls(freq_x, freq_y, phase_x, seq() * math.pi * 2)

    def offset(self, step: int, width: float, height: float) -> Point:
        amplitude = 0.3 + min(step * 0.002, 0.2)
        return Point(
            math.sin(step * self.freq_x + self.phase_x) * width * amplitude,
            math.sin(step * self.freq_y + self.phase_y) * height * amplitude,
        )


def _decay(creases: List[Crease]) -> None:
    for crease in creases:
        crease.weight = max(MIN_CREASE_WEIGHT, crease.weight * crease.reduction_multiplier)


def _fold_target(seq: SeededSequence, shape: poly.Polygon, source_idx: int) -> Point:
    options = [p for i, p in enumerate(shape) if i != source_idx]
    n = len(shape)
    for i in range(n):
        a = shape[i]
        b = shape[(i + 1) % n]
        t = 0.2 + seq() * 0.6
        options.append(lerp(a, b, t))
    return options[math.floor(seq() * len(options))]


def simulate_folds(
    width: float,
    height: float,
    fold_count: int,
    seed: int,
    weight_range: Optional[WeightRange] = None,
    strategy: Optional[FoldStrategy] = None,
    paper: Optional[PaperProperties] = None,
) -> FoldResult:
    """
    Fold a width x height sheet fold_count times and collect the creases.

    Each step reflects part of the current paper outline over the
    perpendicular bisector between a vertex and a target point. The crease
    recorded for the step is that bisector shifted by a slow oscillation and
    clipped to the canvas. Degenerate steps are skipped and mutate the step
    seed so the next attempt differs.
    """
    weight_range = weight_range or WeightRange()
    strategy = strategy or generate_fold_strategy(seed)
    if width <= 0 or height <= 0:
        return FoldResult([], [], 0, None, strategy)

    max_folds = generate_max_folds(seed)
    state = FoldState(shape=poly.ensure_ccw(poly.rect(width, height)), step_seed=seed)
    if fold_count <= 0:
        return FoldResult([], state.shape, max_folds, None, strategy)

    weights = channel(seed, CH_CREASE_WEIGHT)
    absorbency_rolls = channel(seed, CH_ABSORBENCY) if paper is not None else None
    wave = _Oscillation.from_seed(seed)
    reductions = channel(seed, CH_REDUCTION)
    multipliers = [0.001 + reductions() * 0.25 for _ in range(max_folds)]

    for f in range(fold_count):
        cycle_position = f % max_folds
        if cycle_position == 0 and f > 0:
            _decay(state.creases)
        if len(state.shape) < 3:
            break
        _fold_step(state, f, cycle_position, width, height, weight_range, weights, wave, multipliers, paper, absorbency_rolls)

    shape = poly.ensure_ccw(poly.normalize(state.shape, width, height))
    logger.debug("folded seed=%s folds=%s creases=%s", seed, fold_count, len(state.creases))
    return FoldResult(state.creases, shape, max_folds, state.last_target, strategy)


def _fold_step(
    state: FoldState,
    f: int,
    cycle_position: int,
    width: float,
    height: float,
    weight_range: WeightRange,
    weights: SeededSequence,
    wave: _Oscillation,
    multipliers: List[float],
    paper: Optional[PaperProperties],
    absorbency_rolls: Optional[SeededSequence],
) -> None:
    seq = SeededSequence(state.step_seed)
    if f > 0 and f % 5 == 0:
        state.shape = poly.ensure_ccw(poly.normalize(state.shape, width, height))
    shape = state.shape

    min_x, min_y, max_x, max_y = poly.bounds(shape)
    cur_w = max_x - min_x
    cur_h = max_y - min_y

    source_idx = math.floor(seq() * len(shape))
    source = shape[source_idx]
    target = _fold_target(seq, shape, source_idx)
    if f == 0:
        target = Point(clamp(target.x, 0, width * 0.95), clamp(target.y, 0, height * 0.95))

    if dist(source, target) < min(cur_w, cur_h) * 0.05:
        logger.debug("fold %s skipped: target too close", f)
        state.step_seed = hash_seed(state.step_seed, f"skip{f}")
        return

    center = mid(source, target)
    direction = perp(norm(sub(target, source)))
    extent = max(cur_w, cur_h) * 3
    line_p1 = Point(center.x - direction.x * extent, center.y - direction.y * extent)
    line_p2 = Point(center.x + direction.x * extent, center.y + direction.y * extent)

    left, right = poly.split(shape, line_p1, line_p2)
    if len(left) < 3 or len(right) < 3:
        logger.debug("fold %s skipped: degenerate split", f)
        state.step_seed = hash_seed(state.step_seed, f"badsplit{f}")
        return

    if any(dist(p, source) < 1 for p in left):
        folding, staying = left, right
    else:
        folding, staying = right, left
    reflected = poly.reflect(folding, line_p1, line_p2)
    merged = poly.union_along_crease(poly.ensure_ccw(staying), poly.ensure_ccw(reflected), line_p1, line_p2)
    if len(merged) < 3:
        logger.debug("fold %s skipped: degenerate union", f)
        state.step_seed = hash_seed(state.step_seed, f"badunion{f}")
        return

    shift = wave.offset(f, width, height)
    visible = clip_to_rect(Point(center.x + shift.x, center.y + shift.y), direction, width, height)
    if visible is not None:
        weight = weight_range.at(weights())
        registers = True
        if paper is not None:
            registers = absorbency_rolls() < paper.absorbency
            weight *= grain_modifier(paper, visible.p1, visible.p2)
            registers = registers and weight > MIN_CREASE_WEIGHT
        if registers:
            state.creases.append(
                Crease(
                    p1=visible.p1,
                    p2=visible.p2,
                    depth=len(state.creases),
                    weight=weight,
                    cycle_position=cycle_position,
                    reduction_multiplier=multipliers[cycle_position],
                )
            )
            state.last_target = Point(clamp(target.x, 0, width - 1), clamp(target.y, 0, height - 1))

    state.shape = poly.ensure_ccw(merged)
    state.step_seed = hash_seed(state.step_seed, f"fold{f}")
