"""Tests for Bowyer-Watson triangulation."""

import numpy as np
import pytest

from py_polymap.core.alea_prng import AleaPRNG
from py_polymap.core.delaunay import Triangulation, is_delaunay, triangulate
from py_polymap.core.geometry import orientation
from py_polymap.errors import InsufficientPoints


def random_points(n, seed="delaunay", size=100.0):
    prng = AleaPRNG(seed)
    return np.array([[prng.random() * size, prng.random() * size] for _ in range(n)])


class TestInsufficientPoints:
    """Test the minimum point requirement."""

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_too_few_points(self, count):
        """Test that fewer than three points raise and produce no triangles."""
        points = [[0, 0], [1, 0]][:count]
        with pytest.raises(InsufficientPoints) as exc_info:
            triangulate(points)
        assert exc_info.value.count == count


class TestTriangulate:
    """Test triangulation output."""

    def test_single_triangle(self):
        result = triangulate([[0, 0], [1, 0], [0, 1]])
        assert len(result) == 1
        assert sorted(result.triangles[0].tolist()) == [0, 1, 2]

    def test_square(self):
        result = triangulate([[0, 0], [1, 0], [1, 1.1], [0, 1]])
        assert len(result) == 2

    def test_collinear_points(self):
        """Collinear input yields no triangles rather than degenerate ones."""
        result = triangulate([[0, 0], [1, 0], [2, 0], [3, 0]])
        assert len(result) == 0
        assert result.triangles.shape == (0, 3)

    def test_counter_clockwise(self):
        points = random_points(40)
        result = triangulate(points)
        for a, b, c in result.triangles:
            assert orientation(points[a], points[b], points[c]) > 0

    def test_every_point_used(self):
        points = random_points(40)
        result = triangulate(points)
        assert set(result.triangles.ravel().tolist()) == set(range(40))

    def test_triangle_count_bound(self):
        """A planar triangulation of n points has at most 2n - 5 triangles."""
        points = random_points(50)
        result = triangulate(points)
        assert 0 < len(result) <= 2 * 50 - 5

    def test_deterministic(self):
        points = random_points(30)
        a = triangulate(points)
        b = triangulate(points)
        np.testing.assert_array_equal(a.triangles, b.triangles)


class TestDelaunayProperty:
    """Brute-force empty-circumcircle checks on small point sets."""

    @pytest.mark.parametrize("seed", ["a", "b", "c", "d"])
    def test_random_points(self, seed):
        result = triangulate(random_points(50, seed))
        assert is_delaunay(result)

    def test_grid_points(self):
        """Cocircular grid points still give a valid triangulation."""
        points = [[x, y] for x in range(6) for y in range(6)]
        result = triangulate(points)
        assert is_delaunay(result)
        assert 40 <= len(result) <= 2 * 5 * 5

    def test_detects_violation(self):
        """Splitting a kite along its long diagonal is not Delaunay."""
        points = np.array([[0, 0], [2, -0.5], [4, 0], [2, 0.5]], dtype=float)
        bad = Triangulation(points=points, triangles=np.array([[0, 1, 2], [0, 2, 3]]))
        good = triangulate(points)

        assert not is_delaunay(bad)
        assert is_delaunay(good)
        assert len(good) == 2
        assert all(1 in tri and 3 in tri for tri in good.triangles.tolist())
