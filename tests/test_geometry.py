import pytest

from paperfold.core.geometry import polygon as poly
from paperfold.core.geometry.lines import Segment, clip_to_rect, segment_intersect
from paperfold.core.geometry.vector import Point, dist, lerp, mid, norm, perp


def test_vector_helpers():
    assert dist(Point(0, 0), Point(3, 4)) == 5
    assert mid(Point(0, 0), Point(2, 4)) == Point(1, 2)
    assert perp(Point(1, 0)) == Point(0, 1)
    assert norm(Point(0, 0)) == Point(0.0, 0.0)
    assert norm(Point(0, 5)) == Point(0, 1)
    assert lerp(Point(0, 0), Point(10, 20), 0.25) == Point(2.5, 5)


def test_area_and_orientation():
    square = poly.rect(2, 3)
    assert poly.signed_area(square) == 6
    reversed_square = square[::-1]
    assert poly.signed_area(reversed_square) == -6
    assert poly.ensure_ccw(reversed_square) == square
    assert poly.area(reversed_square) == 6
    assert poly.bounds([]) == (0.0, 0.0, 1.0, 1.0)


def test_normalize_fills_canvas():
    out = poly.normalize(poly.rect(10, 20), 100, 100)
    assert poly.bounds(out) == (25.0, 0.0, 75.0, 100.0)


def test_split_square_in_half():
    square = poly.rect(100, 100)
    left, right = poly.split(square, Point(50, 0), Point(50, 100))
    assert len(left) == 4 and len(right) == 4
    assert poly.area(left) == pytest.approx(5000)
    assert poly.area(right) == pytest.approx(5000)
    assert Point(50, 0) in left and Point(50, 0) in right


def test_split_degenerate_polygon():
    assert poly.split([Point(0, 0), Point(1, 1)], Point(0, 0), Point(1, 0)) == ([], [])


def test_reflect():
    assert poly.reflect_point(Point(0, 0), Point(1, 0), Point(1, 1)) == Point(2, 0)
    # a zero-length mirror leaves points alone
    assert poly.reflect_point(Point(3, 4), Point(1, 1), Point(1, 1)) == Point(3, 4)
    assert poly.reflect(poly.rect(1, 1), Point(0, 0), Point(1, 0))[2] == Point(1, -1)


def test_convex_hull_drops_interior_points():
    points = poly.rect(10, 10) + [Point(5, 5), Point(2, 3)]
    hull = poly.convex_hull(points)
    assert sorted(hull) == sorted(poly.rect(10, 10))
    assert poly.signed_area(hull) > 0


def test_union_along_crease():
    a = poly.rect(10, 10)
    on_line = [Point(0, 0), Point(5, 0), Point(10, 0)]
    assert poly.union_along_crease(on_line, a, Point(0, 0), Point(10, 0)) == a
    b = [Point(0, 0), Point(10, 0), Point(5, -10)]
    merged = poly.union_along_crease(a, b, Point(0, 0), Point(10, 0))
    assert poly.area(merged) == pytest.approx(150)


def test_segment_intersect():
    hit = segment_intersect(Point(0, 0), Point(2, 2), Point(0, 2), Point(2, 0))
    assert hit is not None
    assert hit.point == Point(1, 1)
    assert hit.t == pytest.approx(0.5)
    # endpoint touches and parallel lines do not count
    assert segment_intersect(Point(0, 0), Point(1, 1), Point(1, 1), Point(2, 0)) is None
    assert segment_intersect(Point(0, 0), Point(1, 0), Point(0, 1), Point(1, 1)) is None


def test_clip_to_rect():
    assert clip_to_rect(Point(50, 50), Point(1, 0), 100, 100) == Segment(Point(0, 50), Point(100, 50))
    seg = clip_to_rect(Point(0, 0), Point(1, 1), 100, 100)
    assert seg == Segment(Point(0, 0), Point(100, 100))
    assert clip_to_rect(Point(500, 500), Point(1, 0), 100, 100) is None
