from __future__ import annotations

import math
from functools import cmp_to_key
from typing import List, Sequence, Tuple

from paperfold.core.geometry.vector import Point

Polygon = List[Point]


def rect(width: float, height: float) -> Polygon:
    return [Point(0, 0), Point(width, 0), Point(width, height), Point(0, height)]


def signed_area(polygon: Sequence[Point]) -> float:
    """Shoelace area; positive for counter-clockwise order in y-up terms."""
    n = len(polygon)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i].x * polygon[j].y
        area -= polygon[j].x * polygon[i].y
    return area / 2


def area(polygon: Sequence[Point]) -> float:
    return abs(signed_area(polygon))


def ensure_ccw(polygon: Polygon) -> Polygon:
    if len(polygon) >= 3 and signed_area(polygon) < 0:
        return polygon[::-1]
    return polygon


def bounds(polygon: Sequence[Point]) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y); an empty polygon has unit bounds."""
    if not polygon:
        return 0.0, 0.0, 1.0, 1.0
    xs = [p.x for p in polygon]
    ys = [p.y for p in polygon]
    return min(xs), min(ys), max(xs), max(ys)


def normalize(polygon: Polygon, width: float, height: float, padding: float = 0) -> Polygon:
    """Scale uniformly and recentre so the polygon fills width x height."""
    if len(polygon) < 3:
        return polygon
    min_x, min_y, max_x, max_y = bounds(polygon)
    w = max_x - min_x
    h = max_y - min_y
    if w < 0.001 or h < 0.001:
        return polygon
    factor = min((width - padding * 2) / w, (height - padding * 2) / h)
    cx = (min_x + max_x) / 2
    cy = (min_y + max_y) / 2
    return [Point((p.x - cx) * factor + width / 2, (p.y - cy) * factor + height / 2) for p in polygon]


def split(polygon: Sequence[Point], p1: Point, p2: Point) -> Tuple[Polygon, Polygon]:
    """
    Split a polygon by the infinite line through p1 and p2.

    Vertices on the line go to both sides; each strict sign change adds the
    crossing point to both sides.
    """
    if len(polygon) < 3:
        return [], []
    a = -(p2.y - p1.y)
    b = p2.x - p1.x
    c = -(a * p1.x + b * p1.y)

    left: Polygon = []
    right: Polygon = []
    n = len(polygon)
    for i in range(n):
        curr = polygon[i]
        nxt = polygon[(i + 1) % n]
        s_curr = a * curr.x + b * curr.y + c
        s_next = a * nxt.x + b * nxt.y + c
        if s_curr <= 0:
            left.append(curr)
        if s_curr >= 0:
            right.append(curr)
        if (s_curr < 0 < s_next) or (s_curr > 0 > s_next):
            t = s_curr / (s_curr - s_next)
            crossing = Point(curr.x + t * (nxt.x - curr.x), curr.y + t * (nxt.y - curr.y))
            left.append(crossing)
            right.append(crossing)
    return left, right


def reflect_point(point: Point, p1: Point, p2: Point) -> Point:
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    len2 = dx * dx + dy * dy
    if len2 < 0.0001:
        return point
    t = ((point.x - p1.x) * dx + (point.y - p1.y) * dy) / len2
    return Point(2 * (p1.x + t * dx) - point.x, 2 * (p1.y + t * dy) - point.y)


def reflect(polygon: Sequence[Point], p1: Point, p2: Point) -> Polygon:
    return [reflect_point(p, p1, p2) for p in polygon]


def _cross(o: Point, a: Point, b: Point) -> float:
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def convex_hull(points: Sequence[Point]) -> Polygon:
    """Graham scan from the lowest-y (then lowest-x) point."""
    if len(points) < 3:
        return list(points)
    start = points[0]
    for p in points[1:]:
        if p.y < start.y or (p.y == start.y and p.x < start.x):
            start = p

    def by_angle(a: Point, b: Point) -> float:
        angle_a = math.atan2(a.y - start.y, a.x - start.x)
        angle_b = math.atan2(b.y - start.y, b.x - start.x)
        if abs(angle_a - angle_b) < 0.0001:
            dist_a = (a.x - start.x) ** 2 + (a.y - start.y) ** 2
            dist_b = (b.x - start.x) ** 2 + (b.y - start.y) ** 2
            return dist_a - dist_b
        return angle_a - angle_b

    ordered = sorted(points, key=cmp_to_key(by_angle))
    unique = [ordered[0]]
    for p in ordered[1:]:
        prev = unique[-1]
        if abs(p.x - prev.x) > 0.5 or abs(p.y - prev.y) > 0.5:
            unique.append(p)
    if len(unique) < 3:
        return unique

    hull = [unique[0], unique[1]]
    for p in unique[2:]:
        while len(hull) > 1 and _cross(hull[-2], hull[-1], p) <= 0:
            hull.pop()
        hull.append(p)
    return hull


def union_along_crease(poly1: Polygon, poly2: Polygon, p1: Point, p2: Point) -> Polygon:
    """
    Merge the two halves of a fold.

    When either half lies entirely on the crease the other is returned as is;
    otherwise the result is the convex hull of both.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    len2 = dx * dx + dy * dy

    def on_crease(p: Point) -> bool:
        if len2 < 0.0001:
            return False
        return abs((p.x - p1.x) * dy - (p.y - p1.y) * dx) / math.sqrt(len2) < 1

    if all(on_crease(p) for p in poly1):
        return list(poly2)
    if all(on_crease(p) for p in poly2):
        return list(poly1)
    return convex_hull(list(poly1) + list(poly2))
