from __future__ import annotations

from typing import Tuple

from paperfold.core.numeric import js_round


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    value = hex_color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid hex color '{hex_color}'")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_hsl(hex_color: str) -> Tuple[float, float, float]:
    """Hue in degrees, saturation and lightness in percent."""
    r, g, b = (c / 255 for c in hex_to_rgb(hex_color))
    hi = max(r, g, b)
    lo = min(r, g, b)
    light = (hi + lo) / 2
    if hi == lo:
        return 0.0, 0.0, light * 100
    d = hi - lo
    sat = d / (2 - hi - lo) if light > 0.5 else d / (hi + lo)
    if hi == r:
        hue = ((g - b) / d + (6 if g < b else 0)) / 6
    elif hi == g:
        hue = ((b - r) / d + 2) / 6
    else:
        hue = ((r - g) / d + 4) / 6
    return hue * 360, sat * 100, light * 100


def hsl_to_hex(h: float, s: float, l: float) -> str:
    s /= 100
    l /= 100
    a = s * min(l, 1 - l)

    def channel(n: int) -> str:
        k = (n + h / 30) % 12
        value = l - a * max(min(k - 3, 9 - k, 1), -1)
        return f"{js_round(255 * value):02x}"

    return f"#{channel(0)}{channel(8)}{channel(4)}"


def shift_extreme(hex_color: str, weight: float, threshold: float = 1.5) -> str:
    """
    Hue-shifted highlight for cells whose weight passed the extreme threshold.

    The further past the threshold, the larger the rotation (30 to 180
    degrees); saturation and lightness are lifted and capped.
    """
    h, s, l = hex_to_hsl(hex_color)
    shift = 30 + min((weight - threshold) * 300, 150)
    return hsl_to_hex((h + shift + 360) % 360, min(100.0, s + 20), min(85.0, l + 10))
