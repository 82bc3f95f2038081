from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

from paperfold.core.color.catalog import (
    SATURATION_ORDER,
    ColorEntry,
    color_distance,
    complementary_region,
    confusable_colors,
    cube_diagonal_path,
    cube_neighbors,
    get_catalog,
    has_good_contrast,
    interpolate_by_luminance,
    opposite_temperature,
    visual_midpoint,
)
from paperfold.core.constants import CH_LEVEL_COLORS
from paperfold.core.seed.combinators import Draw, pick_uniform
from paperfold.core.seed.sequence import SeededSequence
from paperfold.utils.logging import get_logger

logger = get_logger(__name__)

GLITCH_KINDS = ("washed", "acid", "void", "bleach", "corrupt")
GLITCH_PROBABILITY = 0.03
TEXT_CONTRAST = 4.5


# -------------------------
# Transformations
# -------------------------


class Transform:
    """Callable mother-color transformation wrapper."""

    def __init__(self, name: str, func: Callable[[ColorEntry, Draw], List[ColorEntry]]):
        self.name = name
        self.func = func

    def candidates(self, mother: ColorEntry, draw: Draw) -> List[ColorEntry]:
        return self.func(mother, draw)


TRANSFORM_REGISTRY: Dict[str, Transform] = {}


def register_transform(name: str, func: Callable[[ColorEntry, Draw], List[ColorEntry]]):
    TRANSFORM_REGISTRY[name] = Transform(name=name, func=func)


def get_transform(name: str) -> Transform:
    if name not in TRANSFORM_REGISTRY:
        raise ValueError(f"Unknown transform '{name}'. Available: {list_transforms()}")
    return TRANSFORM_REGISTRY[name]


def list_transforms() -> List[str]:
    return sorted(TRANSFORM_REGISTRY.keys())


def value_shift(mother: ColorEntry, draw: Draw) -> List[ColorEntry]:
    shift = -40 if mother.luminance > 50 else 40
    target = max(5, min(95, mother.luminance + shift))
    found = get_catalog().filter(
        lambda c: c.hex != mother.hex
        and abs(c.luminance - target) < 20
        and (c.temperature == mother.temperature or c.temperature == "neutral" or mother.temperature == "neutral")
    )
    return sorted(found, key=lambda c: (c.temperature != mother.temperature, abs(c.luminance - target)))


def temperature_flip(mother: ColorEntry, draw: Draw) -> List[ColorEntry]:
    if mother.temperature == "neutral":
        target = "warm" if draw() < 0.5 else "cool"
    else:
        target = opposite_temperature(mother.temperature)
    found = get_catalog().filter(
        lambda c: c.hex != mother.hex and c.temperature == target and abs(c.luminance - mother.luminance) < 25
    )
    return sorted(found, key=lambda c: abs(c.luminance - mother.luminance))


def saturation_shift(mother: ColorEntry, draw: Draw) -> List[ColorEntry]:
    mother_idx = SATURATION_ORDER.index(mother.saturation)
    targets = ("chromatic", "vivid") if mother_idx <= 1 else ("muted", "gray")
    found = get_catalog().filter(
        lambda c: c.hex != mother.hex
        and c.saturation in targets
        and abs(c.luminance - mother.luminance) < 30
        and (c.temperature == mother.temperature or c.temperature == "neutral")
    )
    return sorted(found, key=lambda c: -abs(SATURATION_ORDER.index(c.saturation) - mother_idx))


def complement(mother: ColorEntry, draw: Draw) -> List[ColorEntry]:
    return sorted(complementary_region(mother), key=lambda c: -abs(c.luminance - mother.luminance))


def neighbor(mother: ColorEntry, draw: Draw) -> List[ColorEntry]:
    if mother.cube:
        found = cube_neighbors(mother, 1)
        if len(found) < 3:
            found = cube_neighbors(mother, 2)
    else:
        found = get_catalog().filter(
            lambda c: c.hex != mother.hex and 20 < color_distance(mother, c) < 60
        )
    return sorted(found, key=lambda c: color_distance(mother, c))


register_transform("value", value_shift)
register_transform("temperature", temperature_flip)
register_transform("saturation", saturation_shift)
register_transform("complement", complement)
register_transform("neighbor", neighbor)


# -------------------------
# Palette
# -------------------------


@dataclass(frozen=True)
class GlitchVariant:
    kind: str


@dataclass(frozen=True)
class OrdinaryVariant:
    ground: str
    transform: str
    accent: bool


PaletteVariant = Union[GlitchVariant, OrdinaryVariant]


@dataclass(frozen=True)
class Palette:
    background: str
    text: str
    accent: str
    variant: PaletteVariant

    @property
    def strategy(self) -> str:
        if isinstance(self.variant, GlitchVariant):
            return f"glitch/{self.variant.kind}"
        suffix = "+accent" if self.variant.accent else ""
        return f"{self.variant.ground}/{self.variant.transform}{suffix}"

    def to_dict(self) -> Dict[str, str]:
        return {"bg": self.background, "text": self.text, "accent": self.accent, "strategy": self.strategy}


def _glitch_palette(seq: SeededSequence) -> Palette:
    catalog = get_catalog()
    kind = GLITCH_KINDS[math.floor(seq() * len(GLITCH_KINDS))]
    if kind == "washed":
        band = catalog.by_luminance["midLight"] if seq() < 0.5 else catalog.by_luminance["midDark"]
        bg, text, accent = (pick_uniform(seq, band) for _ in range(3))
    elif kind == "acid":
        vivid = catalog.by_saturation["vivid"]
        warm = [c for c in vivid if c.temperature == "warm"]
        cool = [c for c in vivid if c.temperature == "cool"]
        bg = pick_uniform(seq, warm)
        text = pick_uniform(seq, cool)
        accent = pick_uniform(seq, warm if seq() < 0.5 else cool)
    elif kind == "void":
        darks = catalog.filter(lambda c: c.luminance < 15)
        dims = catalog.filter(lambda c: 10 <= c.luminance < 25)
        bg = pick_uniform(seq, darks)
        text = pick_uniform(seq, dims)
        accent = pick_uniform(seq, dims)
    elif kind == "bleach":
        lights = catalog.filter(lambda c: c.luminance > 85)
        pales = catalog.filter(lambda c: 70 <= c.luminance < 90)
        bg = pick_uniform(seq, lights)
        text = pick_uniform(seq, pales)
        accent = pick_uniform(seq, pales)
    else:
        presets = catalog.filter(lambda c: c.family == "preset")
        bg, text, accent = (pick_uniform(seq, presets) for _ in range(3))
    return Palette(bg.hex, text.hex, accent.hex, GlitchVariant(kind))


def _background_pool(ground: str, mother: ColorEntry) -> List[ColorEntry]:
    catalog = get_catalog()
    if ground in ("light", "dark"):
        pool = [
            c
            for c in catalog.by_luminance[ground]
            if c.temperature in (mother.temperature, "neutral") or c.saturation == "gray"
        ]
    else:
        pool = catalog.filter(
            lambda c: 35 <= c.luminance <= 65
            and c.saturation in ("muted", "gray")
            and c.temperature in (mother.temperature, "neutral")
        )
    if not pool:
        logger.debug("empty %s background pool for %s", ground, mother.hex)
        pool = list(catalog.by_luminance["light" if ground == "light" else "dark"])
    return pool


def _text_color(seq: SeededSequence, mother: ColorEntry, transform: str, bg: ColorEntry) -> ColorEntry:
    found = [c for c in get_transform(transform).candidates(mother, seq) if has_good_contrast(bg, c, TEXT_CONTRAST)]
    if not found:
        found = [c for c in get_transform("value").candidates(mother, seq) if has_good_contrast(bg, c, TEXT_CONTRAST)]
    if not found:
        logger.debug("no transform candidate for %s on %s, using full catalog", mother.hex, bg.hex)
        found = get_catalog().filter(lambda c: has_good_contrast(bg, c, TEXT_CONTRAST))
    if len(found) > 3:
        return found[math.floor(seq() * min(3, len(found)))]
    return found[0] if found else mother


def _accent_color(seq: SeededSequence, bg: ColorEntry, text: ColorEntry) -> ColorEntry:
    seen = set()
    found: List[ColorEntry] = []
    for c in confusable_colors(bg, 15) + confusable_colors(text, 15):
        if not has_good_contrast(bg, c, 3.0) or c.hex == text.hex or c.saturation == "gray":
            continue
        if c.hex in seen:
            continue
        seen.add(c.hex)
        found.append(c)
    if found:
        vivid = [c for c in found if c.saturation in ("vivid", "chromatic")]
        return pick_uniform(seq, vivid or found)
    midpoint = visual_midpoint(bg, text)
    return midpoint if has_good_contrast(bg, midpoint, 2.5) else text


def generate_palette(seed: int) -> Palette:
    """
    Background, text and accent colors for one seed.

    About 3% of seeds take a glitch branch with no contrast guarantee. All
    others derive the text color from a mother color through one of the
    registered transformations and keep a contrast ratio of at least 4.5
    against the background.
    """
    seq = SeededSequence(seed)
    if seq() < GLITCH_PROBABILITY:
        return _glitch_palette(seq)

    catalog = get_catalog()
    mother = pick_uniform(seq, catalog.filter(lambda c: c.saturation != "gray" and c.family == "cube"))

    roll = seq()
    ground = "light" if roll < 0.4 else "dark" if roll < 0.8 else "mid"

    roll = seq()
    if roll < 0.3:
        transform = "value"
    elif roll < 0.5:
        transform = "temperature"
    elif roll < 0.65:
        transform = "saturation"
    elif roll < 0.8:
        transform = "complement"
    else:
        transform = "neighbor"

    bg = pick_uniform(seq, _background_pool(ground, mother))
    text = _text_color(seq, mother, transform, bg)
    use_accent = seq() < 0.2
    accent = _accent_color(seq, bg, text) if use_accent else text
    return Palette(bg.hex, text.hex, accent.hex, OrdinaryVariant(ground, transform, use_accent))


# -------------------------
# Level-color ramp
# -------------------------


def _quartiles(path: List[ColorEntry]) -> List[str]:
    n = len(path)
    return [path[0].hex, path[math.floor(n * 0.33)].hex, path[math.floor(n * 0.66)].hex, path[-1].hex]


def generate_level_colors(seed: int, background: str, text: str) -> List[str]:
    """Four colors for density levels 0-3, used when multi-color is on."""
    seq = SeededSequence(seed + CH_LEVEL_COLORS)
    catalog = get_catalog()
    bg = catalog.find(background)
    fg = catalog.find(text)
    light_bg = bg.luminance > 50

    def by_lum(c: ColorEntry) -> float:
        return -c.luminance if light_bg else c.luminance

    strategy = seq()
    if strategy < 0.45:
        if bg.cube and fg.cube:
            path = cube_diagonal_path(bg, fg, 6)
            if len(path) >= 4:
                return _quartiles(path)
        return _quartiles(interpolate_by_luminance(bg, fg, 6))

    if strategy < 0.75:
        ladder = [
            sorted((c for c in cube_neighbors(fg, steps) if has_good_contrast(bg, c, ratio)), key=by_lum)
            for steps, ratio in ((1, 2.0), (2, 3.0), (3, 4.0))
        ]
        colors = [fg.hex]
        colors.append(pick_uniform(seq, ladder[0]).hex if ladder[0] else fg.hex)
        for rung, fallback in ((ladder[1], colors[1]), (ladder[2], fg.hex)):
            if not rung:
                colors.append(fallback)
                continue
            unused = [c for c in rung if c.hex not in colors]
            colors.append(pick_uniform(seq, unused).hex if unused else rung[0].hex)
        return [c.hex for c in sorted((catalog.find(h) for h in colors), key=by_lum)]

    other = "warm" if fg.temperature == "neutral" else opposite_temperature(fg.temperature)
    same = sorted((c for c in catalog.by_temperature[fg.temperature] if has_good_contrast(bg, c, 2.5)), key=by_lum)
    opp = sorted((c for c in catalog.by_temperature[other] if has_good_contrast(bg, c, 2.5)), key=by_lum)

    colors = [same[0].hex if same else fg.hex]
    mid1 = [c for c in same if c.hex not in colors]
    colors.append(mid1[math.floor(len(mid1) * 0.3)].hex if mid1 else fg.hex)
    mid2 = [c for c in opp if c.hex not in colors]
    colors.append(mid2[math.floor(len(mid2) * 0.5)].hex if mid2 else fg.hex)
    rest = sorted((c for c in same + opp if c.hex not in colors), key=by_lum)
    colors.append(rest[-1].hex if rest else fg.hex)
    return colors
