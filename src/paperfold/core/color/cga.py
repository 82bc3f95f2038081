"""
Thirteen-color trait palette.

Trait labels are derived from this small preset palette rather than the full
render catalog: a ground is chosen first, then a contrast relationship, and
the mark (and optional accent) are derived from the two.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from paperfold.core.seed.combinators import pick_uniform, pick_weighted
from paperfold.core.seed.sequence import SeededSequence


@dataclass(frozen=True)
class TraitColor:
    name: str
    hex: str
    luminance: float
    temperature: str


TRAIT_COLORS: Tuple[TraitColor, ...] = (
    TraitColor("black", "#000000", 0, "neutral"),
    TraitColor("blue", "#0000AA", 10, "cool"),
    TraitColor("red", "#AA0000", 20, "warm"),
    TraitColor("magenta", "#AA00AA", 25, "warm"),
    TraitColor("white", "#FFFFFF", 100, "neutral"),
    TraitColor("yellow", "#FFFF55", 93, "warm"),
    TraitColor("lightCyan", "#55FFFF", 85, "cool"),
    TraitColor("lightGreen", "#55FF55", 77, "cool"),
    TraitColor("green", "#00AA00", 30, "cool"),
    TraitColor("cyan", "#00AAAA", 40, "cool"),
    TraitColor("lightBlue", "#5555FF", 45, "cool"),
    TraitColor("lightRed", "#FF5555", 45, "warm"),
    TraitColor("lightMagenta", "#FF55FF", 60, "warm"),
)

_BY_NAME: Dict[str, TraitColor] = {c.name: c for c in TRAIT_COLORS}

# Grounds are committed to dark or light, never mid
GROUND_POOL = tuple(c for c in TRAIT_COLORS if c.luminance < 30 or c.luminance > 70)
GROUND_WEIGHTS = {
    "black": 0.2,
    "white": 0.15,
    "blue": 0.15,
    "red": 0.15,
    "magenta": 0.1,
    "yellow": 0.1,
    "lightCyan": 0.08,
    "lightGreen": 0.07,
}
CHROMATIC_POOL = tuple(c for c in TRAIT_COLORS if c.temperature != "neutral")
HOT_ACCENTS = ("yellow", "lightCyan", "lightMagenta", "lightGreen")

COMPLEMENT_PAIRS: Dict[str, Tuple[str, ...]] = {
    "red": ("cyan", "lightCyan"),
    "magenta": ("green", "lightGreen"),
    "blue": ("yellow",),
    "lightRed": ("cyan", "lightCyan"),
    "lightMagenta": ("green", "lightGreen"),
    "lightBlue": ("yellow",),
    "cyan": ("red", "lightRed"),
    "lightCyan": ("red", "lightRed"),
    "green": ("magenta", "lightMagenta"),
    "lightGreen": ("magenta", "lightMagenta"),
    "yellow": ("blue", "lightBlue"),
    "black": ("white", "yellow", "lightCyan"),
    "white": ("black", "blue", "magenta"),
}

CONTRAST_TYPES = ("value", "temperature", "complement", "clash")
MONOCHROME_PROBABILITY = 0.12
MIN_MARK_CONTRAST = 25


@dataclass(frozen=True)
class TraitPalette:
    background: str
    text: str
    accent: str
    strategy: str  # contrast type, or monochrome/<key>
    color_count: int

    @property
    def is_monochrome(self) -> bool:
        return self.strategy.startswith("monochrome")


def trait_color(name: str) -> TraitColor:
    if name not in _BY_NAME:
        raise ValueError(f"Unknown trait color '{name}'. Available: {sorted(_BY_NAME)}")
    return _BY_NAME[name]


def _value_marks(ground: TraitColor) -> List[TraitColor]:
    if ground.luminance < 50:
        return [c for c in TRAIT_COLORS if c.luminance > 60]
    return [c for c in TRAIT_COLORS if c.luminance < 40]


def derive_mark(ground: TraitColor, contrast: str, seq: SeededSequence) -> TraitColor:
    if contrast == "value":
        found = _value_marks(ground)
    elif contrast == "temperature":
        if ground.temperature == "neutral":
            wanted = ("warm", "cool")
        else:
            wanted = ("cool",) if ground.temperature == "warm" else ("warm",)
        found = [
            c
            for c in TRAIT_COLORS
            if c.temperature in wanted and abs(c.luminance - ground.luminance) > MIN_MARK_CONTRAST
        ]
    elif contrast == "complement":
        pairs = COMPLEMENT_PAIRS.get(ground.name, ())
        found = [c for c in TRAIT_COLORS if c.name in pairs] or _value_marks(ground)
    elif contrast == "clash":
        found = [
            c for c in TRAIT_COLORS if c.name != ground.name and 20 < abs(c.luminance - ground.luminance) < 50
        ]
    else:
        raise ValueError(f"Unknown contrast type '{contrast}'. Available: {list(CONTRAST_TYPES)}")

    found.sort(key=lambda c: -abs(c.luminance - ground.luminance))
    if found:
        return pick_uniform(seq, found)
    return _BY_NAME["white"] if ground.luminance < 50 else _BY_NAME["black"]


def derive_accent(ground: TraitColor, mark: TraitColor, seq: SeededSequence) -> TraitColor:
    if seq() < 0.4:
        return mark
    found = [
        c
        for c in CHROMATIC_POOL
        if c.name not in (ground.name, mark.name) and abs(c.luminance - ground.luminance) > 20
    ]
    if not found:
        return mark
    hot = [c for c in found if c.name in HOT_ACCENTS]
    if hot and seq() < 0.6:
        return pick_uniform(seq, hot)
    return pick_uniform(seq, found)


def _monochrome(seq: SeededSequence) -> TraitPalette:
    key = pick_uniform(seq, CHROMATIC_POOL)
    if key.luminance > 50:
        ground = _BY_NAME["black"]
    elif key.luminance < 30:
        ground = _BY_NAME["black"] if seq() < 0.75 else _BY_NAME["white"]
    else:
        ground = _BY_NAME["black"] if seq() < 0.6 else _BY_NAME["white"]
    return TraitPalette(ground.hex, key.hex, key.hex, f"monochrome/{key.name}", 2)


def generate_trait_palette(seed: int) -> TraitPalette:
    seq = SeededSequence(seed)
    if seq() < MONOCHROME_PROBABILITY:
        return _monochrome(seq)

    ground = pick_weighted(seq, GROUND_POOL, GROUND_WEIGHTS, key=lambda c: c.name)
    roll = seq()
    if roll < 0.4:
        contrast = "value"
    elif roll < 0.68:
        contrast = "temperature"
    elif roll < 0.9:
        contrast = "complement"
    else:
        contrast = "clash"

    mark = derive_mark(ground, contrast, seq)
    accent = derive_accent(ground, mark, seq)
    count = 2 if accent.hex == mark.hex else 3

    if abs(ground.luminance - mark.luminance) < MIN_MARK_CONTRAST:
        # keep the drawn contrast type and count, force a readable pair
        dark = ground.luminance < 50
        return TraitPalette(
            "#000000" if dark else "#FFFFFF",
            "#FFFFFF" if dark else "#000000",
            "#FFFF55",
            contrast,
            count,
        )
    return TraitPalette(ground.hex, mark.hex, accent.hex, contrast, count)
