from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from paperfold.core.constants import CH_FOLD_STRATEGY, CH_MAX_FOLDS, CH_PAPER, CH_WEIGHT_RANGE
from paperfold.core.geometry.vector import Point
from paperfold.core.seed.sequence import channel

FOLD_STRATEGIES = ("horizontal", "vertical", "diagonal", "radial", "grid", "clustered", "random")


@dataclass(frozen=True)
class WeightRange:
    """Bounds for the weight a freshly registered crease receives."""

    min: float = 0.0
    max: float = 1.0

    def at(self, r: float) -> float:
        return self.min + r * (self.max - self.min)


@dataclass(frozen=True)
class FoldStrategy:
    type: str
    params: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.type, **self.params}


@dataclass(frozen=True)
class PaperProperties:
    """
    How readily the paper keeps a crease.

    absorbency is the probability a crease registers at all; a grain
    (angle_affinity in degrees) favours creases aligned with it; the ceiling
    multiplier scales the total weight the canvas can hold before it
    compresses.
    """

    absorbency: float = 1.0
    angle_affinity: Optional[float] = None
    affinity_strength: float = 0.0
    ceiling_multiplier: float = 1.0

    @property
    def has_grain(self) -> bool:
        return self.angle_affinity is not None

    @property
    def paper_type(self) -> str:
        if self.absorbency < 0.35:
            return "Resistant"
        if self.absorbency < 0.65:
            return "Standard"
        return "Absorbent"


def generate_weight_range(seed: int) -> WeightRange:
    seq = channel(seed, CH_WEIGHT_RANGE)
    style = seq()
    if style < 0.25:
        base = 0.2 + seq() * 0.2
        return WeightRange(base, base + 0.1 + seq() * 0.2)
    if style < 0.5:
        base = 0.6 + seq() * 0.2
        return WeightRange(base, base + 0.1 + seq() * 0.1)
    if style < 0.75:
        low = 0.1 + seq() * 0.2
        return WeightRange(low, 0.7 + seq() * 0.3)
    low = 0.3 + seq() * 0.2
    return WeightRange(low, 0.5 + seq() * 0.5)


def generate_max_folds(seed: int) -> int:
    return math.floor(4 + channel(seed, CH_MAX_FOLDS)() * 66)


def generate_fold_strategy(seed: int) -> FoldStrategy:
    seq = channel(seed, CH_FOLD_STRATEGY)
    roll = seq()
    if roll < 0.16:
        return FoldStrategy("horizontal", {"jitter": 3 + seq() * 12})
    if roll < 0.32:
        return FoldStrategy("vertical", {"jitter": 3 + seq() * 12})
    if roll < 0.44:
        angle = 45 if seq() < 0.5 else 135
        return FoldStrategy("diagonal", {"angle": angle, "jitter": 5 + seq() * 15})
    if roll < 0.56:
        focal_x = 0.2 + seq() * 0.6
        return FoldStrategy("radial", {"focalX": focal_x, "focalY": 0.2 + seq() * 0.6})
    if roll < 0.68:
        return FoldStrategy("grid", {"jitter": 3 + seq() * 10})
    if roll < 0.8:
        cluster_x = 0.15 + seq() * 0.7
        cluster_y = 0.15 + seq() * 0.7
        return FoldStrategy("clustered", {"clusterX": cluster_x, "clusterY": cluster_y, "spread": 0.2 + seq() * 0.4})
    return FoldStrategy("random")


def generate_paper_properties(seed: int) -> PaperProperties:
    seq = channel(seed, CH_PAPER)
    absorbency = 0.1 + seq() * 0.8
    angle = None
    strength = 0.0
    if seq() < 0.4:
        angle = seq() * 180
        strength = 0.2 + seq() * 0.6
    return PaperProperties(
        absorbency=absorbency,
        angle_affinity=angle,
        affinity_strength=strength,
        ceiling_multiplier=0.3 + seq() * 1.4,
    )


def crease_angle(p1: Point, p2: Point) -> float:
    """Undirected crease angle in degrees, in [0, 180)."""
    angle = math.atan2(p2.y - p1.y, p2.x - p1.x) * 180 / math.pi
    if angle < 0:
        angle += 180
    if angle >= 180:
        angle -= 180
    return angle


def grain_modifier(paper: PaperProperties, p1: Point, p2: Point) -> float:
    if paper.angle_affinity is None or paper.affinity_strength <= 0:
        return 1.0
    diff = abs(crease_angle(p1, p2) - paper.angle_affinity)
    if diff > 90:
        diff = 180 - diff
    return 1.0 - (diff / 90) * paper.affinity_strength
