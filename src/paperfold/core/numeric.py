from __future__ import annotations

import math


def js_round(value: float) -> int:
    """Round half up (towards +inf), the way the browser engine rounds."""
    return math.floor(value + 0.5)


def to_int32(value: int) -> int:
    """Wrap an arbitrary int to a signed 32-bit value."""
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return value


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
