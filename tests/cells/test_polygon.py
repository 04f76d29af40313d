"""Tests for polygon containment and parsing."""

import numpy as np
import pytest

from cellsift.cells import Polygon, parse_polygons

pytestmark = pytest.mark.unit

UNIT_SQUARE = [(0, 0), (1, 0), (1, 1), (0, 1)]


class TestUnitSquareContainment:
    """Half-open rule: left/bottom edges inside, right/top edges outside."""

    @pytest.fixture
    def square(self):
        return Polygon(UNIT_SQUARE)

    def test_interior_and_exterior(self, square):
        assert square.contains(0.5, 0.5)
        assert not square.contains(1.5, 0.5)
        assert not square.contains(-0.5, 0.5)
        assert not square.contains(0.5, 2.0)

    @pytest.mark.parametrize("x,y,inside", [
        (0.0, 0.5, True),    # left edge
        (0.5, 0.0, True),    # bottom edge
        (1.0, 0.5, False),   # right edge
        (0.5, 1.0, False),   # top edge
    ])
    def test_edges(self, square, x, y, inside):
        assert square.contains(x, y) is inside

    @pytest.mark.parametrize("x,y,inside", [
        (0.0, 0.0, True),
        (1.0, 0.0, False),
        (1.0, 1.0, False),
        (0.0, 1.0, False),
    ])
    def test_vertices(self, square, x, y, inside):
        assert square.contains(x, y) is inside

    def test_vertex_order_does_not_matter(self):
        clockwise = Polygon(list(reversed(UNIT_SQUARE)))
        assert clockwise.contains(0.0, 0.5)
        assert not clockwise.contains(1.0, 0.5)

    def test_vectorized_matches_scalar(self, square):
        grid = np.linspace(-0.5, 1.5, 9)
        xs, ys = np.meshgrid(grid, grid)
        xs, ys = xs.ravel(), ys.ravel()
        expected = [square.contains(x, y) for x, y in zip(xs, ys)]
        assert square.contains_points(xs, ys).tolist() == expected


class TestTiling:

    def test_shared_edge_belongs_to_one_tile(self):
        left = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
        right = Polygon([(1, 0), (2, 0), (2, 1), (1, 1)])
        for y in (0.0, 0.25, 0.5, 0.75):
            assert left.contains(1.0, y) + right.contains(1.0, y) == 1


class TestPolygonValidation:

    def test_needs_three_vertices(self):
        with pytest.raises(ValueError, match="at least 3"):
            Polygon([(0, 0), (1, 1)])

    def test_triangle(self):
        tri = Polygon([(0, 0), (4, 0), (0, 4)])
        assert tri.contains(1, 1)
        assert not tri.contains(3, 3)
        assert tri.bbox == (0, 0, 4, 4)


class TestParsePolygons:

    def test_named_and_unnamed(self):
        polys = parse_polygons(["tumor: 0,0 4,0 4,4", "0,0;1,0;0,1"])
        assert [p.name for p in polys] == ["tumor", ""]
        assert [len(p) for p in polys] == [3, 3]

    def test_comments_and_blanks_skipped(self):
        polys = parse_polygons(["# regions", "", "0,0 1,0 1,1 0,1"])
        assert len(polys) == 1
        assert polys[0].contains(0.5, 0.5)

    def test_malformed_vertex_reports_line(self):
        with pytest.raises(ValueError, match="line 2"):
            parse_polygons(["0,0 1,0 1,1", "0,0 1"])

    def test_too_few_vertices(self):
        with pytest.raises(ValueError, match="at least 3"):
            parse_polygons(["0,0 1,1"])
