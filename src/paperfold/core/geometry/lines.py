from __future__ import annotations

from typing import List, NamedTuple, Optional

from paperfold.core.geometry.vector import Point, add, dot, near, scale, sub

PARALLEL_EPS = 0.0001
SEGMENT_T_MIN = 0.001
SEGMENT_T_MAX = 0.999


class SegmentHit(NamedTuple):
    point: Point
    t: float
    u: float


class Segment(NamedTuple):
    p1: Point
    p2: Point


def segment_intersect(a1: Point, a2: Point, b1: Point, b2: Point) -> Optional[SegmentHit]:
    """
    Interior intersection of two segments.

    Both parameters must fall strictly inside the segments (endpoint touches
    do not count); near-parallel pairs return None.
    """
    d1 = sub(a2, a1)
    d2 = sub(b2, b1)
    cross = d1.x * d2.y - d1.y * d2.x
    if abs(cross) < PARALLEL_EPS:
        return None
    dp = sub(b1, a1)
    t = (dp.x * d2.y - dp.y * d2.x) / cross
    u = (dp.x * d1.y - dp.y * d1.x) / cross
    if SEGMENT_T_MIN <= t <= SEGMENT_T_MAX and SEGMENT_T_MIN <= u <= SEGMENT_T_MAX:
        return SegmentHit(add(a1, scale(d1, t)), t, u)
    return None


def clip_to_rect(point: Point, direction: Point, width: float, height: float) -> Optional[Segment]:
    """Clip the infinite line through point along direction to [0, w] x [0, h]."""
    edges = (
        (Point(0, 0), Point(1, 0), width),
        (Point(width, 0), Point(0, 1), height),
        (Point(0, height), Point(1, 0), width),
        (Point(0, 0), Point(0, 1), height),
    )
    hits: List[Point] = []
    for origin, edge_dir, edge_len in edges:
        cross = direction.x * edge_dir.y - direction.y * edge_dir.x
        if abs(cross) < PARALLEL_EPS:
            continue
        dp = sub(origin, point)
        t = (dp.x * edge_dir.y - dp.y * edge_dir.x) / cross
        hit = add(point, scale(direction, t))
        edge_t = dot(sub(hit, origin), edge_dir)
        if -0.001 <= edge_t <= edge_len + 0.001:
            hit = Point(max(0, min(width, hit.x)), max(0, min(height, hit.y)))
            if not any(near(h, hit) for h in hits):
                hits.append(hit)

    if len(hits) < 2:
        return None
    hits.sort(key=lambda h: dot(sub(h, point), direction))
    return Segment(hits[0], hits[-1])
