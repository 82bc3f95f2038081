from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from paperfold.core.fold.simulator import Crease
from paperfold.core.geometry.lines import segment_intersect

Cell = Tuple[int, int]  # (col, row)


@dataclass(frozen=True)
class Intersection:
    x: float
    y: float
    depth1: int
    depth2: int
    gap: int
    weight: float


@dataclass
class DensityGrid:
    """Per-cell accumulation of crease intersections, keyed by (col, row)."""

    cols: int
    rows: int
    intersections: List[Intersection] = field(default_factory=list)
    weights: Dict[Cell, float] = field(default_factory=dict)
    max_gap: Dict[Cell, int] = field(default_factory=dict)
    counts: Dict[Cell, int] = field(default_factory=dict)

    @property
    def total_weight(self) -> float:
        return sum(self.weights.values())


@dataclass(frozen=True)
class Thresholds:
    t1: float
    t2: float
    t3: float
    t_extreme: float

    def to_dict(self) -> Dict[str, float]:
        return {"t1": self.t1, "t2": self.t2, "t3": self.t3, "tExtreme": self.t_extreme}


DEFAULT_THRESHOLDS = Thresholds(1, 2, 3, 999)


def find_intersections(creases: List[Crease]) -> List[Intersection]:
    found: List[Intersection] = []
    for i, a in enumerate(creases):
        for b in creases[i + 1 :]:
            hit = segment_intersect(a.p1, a.p2, b.p1, b.p2)
            if hit is None:
                continue
            found.append(
                Intersection(
                    x=hit.point.x,
                    y=hit.point.y,
                    depth1=a.depth,
                    depth2=b.depth,
                    gap=abs(b.depth - a.depth),
                    weight=(a.weight or 1) + (b.weight or 1),
                )
            )
    return found


def analyze_creases(
    creases: List[Crease],
    cols: int,
    rows: int,
    cell_width: float,
    cell_height: float,
    ceiling_multiplier: Optional[float] = None,
) -> DensityGrid:
    """
    Bin crease intersections into grid cells.

    With a ceiling multiplier the grid saturates: once the total weight
    exceeds cols * rows * 0.5 * multiplier every cell is scaled down softly.
    """
    grid = DensityGrid(cols=cols, rows=rows, intersections=find_intersections(creases))
    for hit in grid.intersections:
        col = math.floor(hit.x / cell_width)
        row = math.floor(hit.y / cell_height)
        if not (0 <= col < cols and 0 <= row < rows):
            continue
        key = (col, row)
        grid.weights[key] = grid.weights.get(key, 0) + hit.weight
        grid.max_gap[key] = max(grid.max_gap.get(key, 0), hit.gap)
        grid.counts[key] = grid.counts.get(key, 0) + 1

    if ceiling_multiplier is not None:
        ceiling = cols * rows * 0.5 * ceiling_multiplier
        total = grid.total_weight
        if total > ceiling and total > 0:
            ratio = ceiling / total
            soft = ratio + (1 - ratio) * 0.3
            for key in grid.weights:
                grid.weights[key] *= soft
    return grid


def adaptive_thresholds(weights: Iterable[float]) -> Thresholds:
    """Level boundaries from the distribution of non-zero cell weights."""
    ordered = sorted(w for w in weights if w > 0)
    if not ordered:
        return DEFAULT_THRESHOLDS

    def percentile(q: float) -> float:
        return ordered[min(math.floor(len(ordered) * q), len(ordered) - 1)]

    t1 = percentile(0.7)
    t2 = percentile(0.94)
    t3 = t2 + 1
    t_extreme = percentile(0.985)
    # each bound is lifted from the raw value below it, not the lifted one
    return Thresholds(
        t1=max(0.01, t1),
        t2=max(t1 + 0.01, t2),
        t3=max(t2 + 0.01, t3),
        t_extreme=max(t3 + 0.01, t_extreme),
    )


def level_of(weight: float, thresholds: Thresholds) -> int:
    if weight == 0:
        return 0
    if weight <= thresholds.t1:
        return 1
    if weight <= thresholds.t2:
        return 2
    return 3
