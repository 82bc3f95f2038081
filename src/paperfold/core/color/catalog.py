from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from paperfold.core.color.hsl import hex_to_rgb, rgb_to_hex
from paperfold.core.numeric import js_round

CUBE_LEVELS = (0x00, 0x33, 0x66, 0x99, 0xCC, 0xFF)

PRESET_COLORS = (
    ("#000000", "black"),
    ("#0000AA", "blue"),
    ("#00AA00", "green"),
    ("#00AAAA", "cyan"),
    ("#AA0000", "red"),
    ("#AA00AA", "magenta"),
    ("#AA5500", "brown"),
    ("#AAAAAA", "lightGray"),
    ("#555555", "darkGray"),
    ("#5555FF", "lightBlue"),
    ("#55FF55", "lightGreen"),
    ("#55FFFF", "lightCyan"),
    ("#FF5555", "lightRed"),
    ("#FF55FF", "lightMagenta"),
    ("#FFFF55", "yellow"),
    ("#FFFFFF", "white"),
)

GRAY_STEPS = 24

SATURATION_ORDER = ("gray", "muted", "chromatic", "vivid")

# Luminance tiers overlap on purpose; bounds are [low, high)
LUMINANCE_TIERS: Dict[str, Tuple[float, float]] = {
    "dark": (-math.inf, 30),
    "midDark": (20, 50),
    "mid": (40, 70),
    "midLight": (55, 85),
    "light": (70, math.inf),
}


def luminance(r: int, g: int, b: int) -> float:
    """Relative luminance in percent (0-100)."""
    return (0.2126 * (r / 255) + 0.7152 * (g / 255) + 0.0722 * (b / 255)) * 100


def temperature(r: int, g: int, b: int) -> str:
    warmth = r - b
    if abs(warmth) < 30 and abs(r - g) < 30 and abs(g - b) < 30:
        return "neutral"
    return "warm" if warmth > 0 else "cool"


def saturation_tier(r: int, g: int, b: int) -> str:
    delta = max(r, g, b) - min(r, g, b)
    if delta < 20:
        return "gray"
    if delta < 80:
        return "muted"
    if delta < 160:
        return "chromatic"
    return "vivid"


@dataclass(frozen=True)
class ColorEntry:
    r: int
    g: int
    b: int
    hex: str
    cube: Optional[Tuple[int, int, int]]
    luminance: float
    temperature: str
    saturation: str
    family: str  # cube | preset | grayscale
    name: Optional[str] = None

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.r, self.g, self.b


def _entry(r: int, g: int, b: int, family: str, cube=None, name=None, temp=None, sat=None) -> ColorEntry:
    return ColorEntry(
        r=r,
        g=g,
        b=b,
        hex=rgb_to_hex(r, g, b),
        cube=cube,
        luminance=luminance(r, g, b),
        temperature=temp or temperature(r, g, b),
        saturation=sat or saturation_tier(r, g, b),
        family=family,
        name=name,
    )


class ColorCatalog:
    """
    Read-only table of the 256 renderable colors plus lookup pools.

    Order matters: the cube comes first (r-major), then the 16 presets, then
    the 24 gray steps. Every pool preserves that order.
    """

    def __init__(self, entries: Sequence[ColorEntry]):
        self.entries: Tuple[ColorEntry, ...] = tuple(entries)
        self.by_luminance: Dict[str, Tuple[ColorEntry, ...]] = {
            tier: tuple(c for c in self.entries if low <= c.luminance < high)
            for tier, (low, high) in LUMINANCE_TIERS.items()
        }
        self.by_temperature: Dict[str, Tuple[ColorEntry, ...]] = {
            temp: tuple(c for c in self.entries if c.temperature == temp) for temp in ("warm", "cool", "neutral")
        }
        self.by_saturation: Dict[str, Tuple[ColorEntry, ...]] = {
            sat: tuple(c for c in self.entries if c.saturation == sat) for sat in SATURATION_ORDER
        }
        self.accent_pool: Tuple[ColorEntry, ...] = tuple(
            c for c in self.entries if c.saturation == "vivid" or (c.family == "preset" and c.saturation != "gray")
        )
        self._by_hex: Dict[str, ColorEntry] = {}
        for c in self.entries:
            self._by_hex.setdefault(c.hex, c)
        self._by_cube: Dict[Tuple[int, int, int], ColorEntry] = {c.cube: c for c in self.entries if c.cube}

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def find(self, hex_color: str) -> ColorEntry:
        """Entry for a hex color; unknown colors fall back to the first entry."""
        return self._by_hex.get(hex_color.upper(), self.entries[0])

    def at_cube(self, ri: int, gi: int, bi: int) -> Optional[ColorEntry]:
        return self._by_cube.get((ri, gi, bi))

    def filter(self, predicate) -> List[ColorEntry]:
        return [c for c in self.entries if predicate(c)]


def _build_entries() -> List[ColorEntry]:
    entries: List[ColorEntry] = []
    for ri, r in enumerate(CUBE_LEVELS):
        for gi, g in enumerate(CUBE_LEVELS):
            for bi, b in enumerate(CUBE_LEVELS):
                entries.append(_entry(r, g, b, "cube", cube=(ri, gi, bi)))
    for hex_color, name in PRESET_COLORS:
        r, g, b = hex_to_rgb(hex_color)
        entries.append(_entry(r, g, b, "preset", name=name))
    for i in range(GRAY_STEPS):
        v = js_round(i / (GRAY_STEPS - 1) * 255)
        entries.append(_entry(v, v, v, "grayscale", temp="neutral", sat="gray"))
    return entries


@lru_cache(maxsize=1)
def get_catalog() -> ColorCatalog:
    return ColorCatalog(_build_entries())


# -------------------------
# Color relations
# -------------------------


def color_distance(c1: ColorEntry, c2: ColorEntry) -> float:
    dr = c1.r - c2.r
    dg = c1.g - c2.g
    db = c1.b - c2.b
    return math.sqrt(dr * dr * 0.3 + dg * dg * 0.59 + db * db * 0.11)


def contrast_ratio(c1: ColorEntry, c2: ColorEntry) -> float:
    l1 = c1.luminance / 100
    l2 = c2.luminance / 100
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def has_good_contrast(c1: ColorEntry, c2: ColorEntry, min_ratio: float = 4.5) -> bool:
    return contrast_ratio(c1, c2) >= min_ratio


def cube_neighbors(color: ColorEntry, max_steps: int) -> List[ColorEntry]:
    """Cube entries within a Manhattan distance of (0, max_steps]."""
    if not color.cube:
        return []
    ri, gi, bi = color.cube
    out = []
    for c in get_catalog():
        if not c.cube:
            continue
        dist = abs(c.cube[0] - ri) + abs(c.cube[1] - gi) + abs(c.cube[2] - bi)
        if 0 < dist <= max_steps:
            out.append(c)
    return out


def opposite_temperature(temp: str) -> str:
    if temp == "warm":
        return "cool"
    if temp == "cool":
        return "warm"
    return "neutral"


def complementary_region(color: ColorEntry) -> List[ColorEntry]:
    """Entries around the opposite octant of the cube (or the opposite temperature)."""
    catalog = get_catalog()
    if not color.cube:
        return list(catalog.by_temperature[opposite_temperature(color.temperature)])
    target = tuple(4 if axis < 3 else 1 for axis in color.cube)
    return [
        c
        for c in catalog
        if c.cube and all(abs(c.cube[i] - target[i]) <= 1 for i in range(3))
    ]


def interpolate_by_luminance(start: ColorEntry, end: ColorEntry, steps: int) -> List[ColorEntry]:
    candidates = get_catalog().filter(lambda c: c.temperature in (start.temperature, "neutral"))
    path = []
    for i in range(steps):
        t = i / (steps - 1)
        target = start.luminance + (end.luminance - start.luminance) * t
        closest = candidates[0]
        closest_dist = abs(closest.luminance - target)
        for c in candidates:
            dist = abs(c.luminance - target)
            if dist < closest_dist:
                closest, closest_dist = c, dist
        path.append(closest)
    return path


def cube_diagonal_path(start: ColorEntry, end: ColorEntry, steps: int) -> List[ColorEntry]:
    if not start.cube or not end.cube:
        return interpolate_by_luminance(start, end, steps)
    catalog = get_catalog()
    path = []
    for i in range(steps):
        t = i / (steps - 1)
        target = tuple(js_round(start.cube[k] + (end.cube[k] - start.cube[k]) * t) for k in range(3))
        found = catalog.at_cube(*target)
        if found:
            path.append(found)
    return path


def confusable_colors(color: ColorEntry, tolerance: float = 10) -> List[ColorEntry]:
    """Colors of similar luminance that differ in temperature or saturation."""
    return get_catalog().filter(
        lambda c: c.hex != color.hex
        and abs(c.luminance - color.luminance) < tolerance
        and (c.temperature != color.temperature or c.saturation != color.saturation)
    )


def visual_midpoint(c1: ColorEntry, c2: ColorEntry) -> ColorEntry:
    tr = js_round((c1.r + c2.r) / 2)
    tg = js_round((c1.g + c2.g) / 2)
    tb = js_round((c1.b + c2.b) / 2)
    target_lum = (c1.luminance + c2.luminance) / 2
    entries = get_catalog().entries
    closest = entries[0]
    closest_dist = math.inf
    for c in entries:
        rgb_dist = math.sqrt((c.r - tr) ** 2 + (c.g - tg) ** 2 + (c.b - tb) ** 2)
        total = rgb_dist + abs(c.luminance - target_lum) * 2
        if total < closest_dist:
            closest, closest_dist = c, total
    return closest
