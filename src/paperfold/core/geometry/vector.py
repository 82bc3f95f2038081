from __future__ import annotations

import math
from typing import NamedTuple


class Point(NamedTuple):
    x: float
    y: float


def add(a: Point, b: Point) -> Point:
    return Point(a.x + b.x, a.y + b.y)


def sub(a: Point, b: Point) -> Point:
    return Point(a.x - b.x, a.y - b.y)


def scale(v: Point, s: float) -> Point:
    return Point(v.x * s, v.y * s)


def dot(a: Point, b: Point) -> float:
    return a.x * b.x + a.y * b.y


def length(v: Point) -> float:
    return math.sqrt(v.x * v.x + v.y * v.y)


def dist(a: Point, b: Point) -> float:
    return length(sub(a, b))


def norm(v: Point) -> Point:
    n = length(v)
    return scale(v, 1 / n) if n > 0.0001 else Point(0.0, 0.0)


def perp(v: Point) -> Point:
    return Point(-v.y, v.x)


def mid(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def near(a: Point, b: Point) -> bool:
    """Points closer than half a pixel are the same point."""
    return dist(a, b) < 0.5
