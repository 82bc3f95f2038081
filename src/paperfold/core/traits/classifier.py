from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from paperfold.core.color.cga import generate_trait_palette
from paperfold.core.fold.params import generate_fold_strategy, generate_paper_properties
from paperfold.core.render import params as render_params
from paperfold.core.seed.sequence import SeedLike, reduce_seed

FOLD_STRATEGY_LABELS = {
    "horizontal": "Horizontal",
    "vertical": "Vertical",
    "diagonal": "Diagonal",
    "radial": "Radial",
    "grid": "Grid",
    "clustered": "Clustered",
    "random": "Random",
}

RENDER_MODE_LABELS = {
    "normal": "Normal",
    "binary": "Binary",
    "inverted": "Inverted",
    "sparse": "Sparse",
    "dense": "Dense",
}

DRAW_DIRECTION_LABELS = {
    "ltr": "Left to Right",
    "rtl": "Right to Left",
    "center": "Center",
    "alternate": "Alternate",
    "diagonal": "Diagonal",
    "randomMid": "Random Mid",
    "checkerboard": "Checkerboard",
}

PALETTE_LABELS = {
    "value": "Value",
    "temperature": "Temperature",
    "complement": "Complement",
    "clash": "Clash",
}


@dataclass(frozen=True)
class Traits:
    fold_strategy: str
    render_mode: str
    draw_direction: str
    palette_strategy: str
    color_count: int
    is_monochrome: bool
    paper_type: str
    has_paper_grain: bool
    has_crease_lines: bool
    has_hit_counts: bool
    has_analytics_mode: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "foldStrategy": self.fold_strategy,
            "renderMode": self.render_mode,
            "drawDirection": self.draw_direction,
            "paletteStrategy": self.palette_strategy,
            "colorCount": self.color_count,
            "isMonochrome": self.is_monochrome,
            "paperType": self.paper_type,
            "hasPaperGrain": self.has_paper_grain,
            "hasCreaseLines": self.has_crease_lines,
            "hasHitCounts": self.has_hit_counts,
            "hasAnalyticsMode": self.has_analytics_mode,
        }


def fold_strategy_trait(seed_num: int) -> str:
    return FOLD_STRATEGY_LABELS[generate_fold_strategy(seed_num).type]


def render_mode_trait(seed_num: int) -> str:
    return RENDER_MODE_LABELS[render_params.generate_render_mode(seed_num)]


def draw_direction_trait(seed_num: int) -> str:
    return DRAW_DIRECTION_LABELS[render_params.generate_draw_direction(seed_num).mode]


def palette_trait(seed_num: int) -> Tuple[str, int, bool]:
    """(label, color count, monochrome)"""
    palette = generate_trait_palette(seed_num)
    if palette.is_monochrome:
        return "Monochrome", palette.color_count, True
    return PALETTE_LABELS[palette.strategy], palette.color_count, False


def paper_type_trait(seed_num: int) -> str:
    return generate_paper_properties(seed_num).paper_type


def has_paper_grain(seed_num: int) -> bool:
    return generate_paper_properties(seed_num).has_grain


def has_crease_lines(seed_num: int) -> bool:
    return render_params.has_crease_lines(seed_num)


def has_hit_counts(seed_num: int) -> bool:
    return render_params.has_hit_counts(seed_num)


def has_analytics_mode(seed_num: int) -> bool:
    return render_params.has_analytics_mode(seed_num)


def classify(seed: SeedLike) -> Traits:
    """All trait labels for a seed; nothing but the seed is consulted."""
    n = reduce_seed(seed)
    label, count, mono = palette_trait(n)
    return Traits(
        fold_strategy=fold_strategy_trait(n),
        render_mode=render_mode_trait(n),
        draw_direction=draw_direction_trait(n),
        palette_strategy=label,
        color_count=count,
        is_monochrome=mono,
        paper_type=paper_type_trait(n),
        has_paper_grain=has_paper_grain(n),
        has_crease_lines=has_crease_lines(n),
        has_hit_counts=has_hit_counts(n),
        has_analytics_mode=has_analytics_mode(n),
    )
