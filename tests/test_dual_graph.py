"""Tests for dual graph construction and tile classification."""

import numpy as np
import pytest

from py_polymap.core.alea_prng import AleaPRNG
from py_polymap.core.delaunay import triangulate
from py_polymap.core.dual_graph import DualGraph, build_dual_graph, build_triangle_adjacency
from py_polymap.core.geometry import Bounds, polygon_area
from py_polymap.core.point_sampler import hex_grid_sampling, poisson_disc_sampling


@pytest.fixture(scope="module")
def lattice_graph():
    """Dual graph of a regular triangular lattice."""
    points = hex_grid_sampling(200, Bounds(0, 0, 600, 600), AleaPRNG("lattice"), irregularity=0)
    triangulation = triangulate(points)
    return build_dual_graph(triangulation.points, triangulation.triangles)


@pytest.fixture(scope="module")
def poisson_graph():
    points = poisson_disc_sampling(200, Bounds(0, 0, 600, 600), AleaPRNG("organic"))
    triangulation = triangulate(points)
    return build_dual_graph(triangulation.points, triangulation.triangles)


class TestTriangleAdjacency:
    """Test shared-edge detection."""

    def test_two_triangles(self):
        triangles = np.array([[0, 1, 2], [1, 3, 2]])
        neighbors, edges = build_triangle_adjacency(triangles)

        assert neighbors == [[1], [0]]
        assert edges[(1, 2)] == [0, 1]
        assert edges[(0, 1)] == [0]

    def test_fan(self):
        triangles = np.array([[0, 1, 2], [0, 2, 3], [0, 3, 4]])
        neighbors, _ = build_triangle_adjacency(triangles)
        assert neighbors == [[1], [0, 2], [1]]


class TestLatticeGraph:
    """Test the dual of a regular lattice, where tiles away from the boundary are hexagons."""

    def test_centroids(self, lattice_graph):
        assert lattice_graph.centroids.shape == (len(lattice_graph.triangles), 2)

    def test_interior_tiles_are_hexagons(self, lattice_graph):
        eligible = [i for i in range(lattice_graph.n_points) if lattice_graph.is_land_eligible(i)]

        assert eligible
        for i in eligible:
            assert len(lattice_graph.tile_neighbors[i]) == 6
            assert len(lattice_graph.tiles[i]) == 6

    def test_no_four_sided_tiles(self, lattice_graph):
        assert lattice_graph.four_sided_tiles() == []

    def test_interior_areas_equal(self, lattice_graph):
        areas = [lattice_graph.tile_area(i) for i in range(lattice_graph.n_points)
                 if lattice_graph.is_land_eligible(i)]
        assert max(areas) == pytest.approx(min(areas))

    def test_tile_polygon(self, lattice_graph):
        i = next(i for i in range(lattice_graph.n_points) if lattice_graph.is_land_eligible(i))
        polygon = lattice_graph.tile_polygon(i)

        assert polygon.shape == (6, 2)
        assert polygon_area(polygon) == pytest.approx(lattice_graph.tile_area(i))
        np.testing.assert_allclose(polygon.mean(axis=0), lattice_graph.points[i], atol=1e-6)


class TestClassification:
    """Test tile classification invariants."""

    @pytest.fixture(params=["lattice_graph", "poisson_graph"])
    def graph(self, request):
        return request.getfixturevalue(request.param)

    def test_voronoi_subset_of_delaunay(self, graph):
        for i in range(graph.n_points):
            assert set(graph.tile_neighbors[i]) <= set(graph.delaunay_neighbors[i])

    def test_valid_tiles_have_three_triangles(self, graph):
        for i in range(graph.n_points):
            assert (i in graph.valid_tiles) == (len(graph.tiles[i]) >= 3)

    def test_edge_tiles(self, graph):
        for i in graph.valid_tiles:
            deficient = len(graph.delaunay_neighbors[i]) > len(graph.tile_neighbors[i])
            assert (i in graph.edge_tiles) == deficient

    def test_water_buffer(self, graph):
        """Ineligible tiles and two rings around them are water-only."""
        assert graph.ineligible_tiles <= graph.water_only_tiles
        for tile in graph.ineligible_tiles:
            for neighbor in graph.tile_neighbors[tile]:
                if neighbor in graph.valid_tiles:
                    assert neighbor in graph.water_only_tiles
                    for second in graph.tile_neighbors[neighbor]:
                        if second in graph.valid_tiles:
                            assert second in graph.water_only_tiles

    def test_dual_edges_join_valid_triangles(self, graph):
        for t1, t2 in graph.dual_edges:
            assert t1 < t2
            assert t1 in graph.valid_triangles and t2 in graph.valid_triangles
            assert t2 in graph.triangle_neighbors[t1]

    def test_neighbors_sorted_by_angle(self, graph):
        for i in graph.valid_tiles:
            neighbors = graph.tile_neighbors[i]
            angles = [np.arctan2(*(graph.points[n] - graph.points[i])[::-1]) for n in neighbors]
            assert angles == sorted(angles)

    def test_outer_ring(self, graph):
        ring = graph.outer_ring()
        assert ring <= graph.valid_tiles
        assert all(i in graph.edge_tiles or i in graph.ineligible_tiles for i in ring)


class TestBufferParameters:
    """Test the tunable classification parameters."""

    def test_no_buffer(self):
        points = hex_grid_sampling(120, Bounds(0, 0, 400, 400), AleaPRNG("b"), irregularity=0)
        triangulation = triangulate(points)
        graph = build_dual_graph(triangulation.points, triangulation.triangles,
                                 water_buffer_rings=0)
        assert graph.water_only_tiles == graph.ineligible_tiles

    def test_strict_min_angle(self):
        """Raising the minimum angle above 60 degrees invalidates every triangle."""
        points = poisson_disc_sampling(60, Bounds(0, 0, 300, 300), AleaPRNG("a"))
        triangulation = triangulate(points)
        graph = build_dual_graph(triangulation.points, triangulation.triangles, min_angle_deg=61)
        assert graph.valid_triangles == set()
        assert graph.valid_tiles == set()


class TestWithinDistance:
    """Test graph-distance neighbourhoods."""

    def test_chain(self):
        graph = DualGraph(points=np.zeros((5, 2)),
                          tile_neighbors=[[1], [0, 2], [1, 3], [2, 4], [3]])
        assert graph.within_distance([0], 2) == {0, 1, 2}
        assert graph.within_distance([0], 0) == {0}
        assert graph.within_distance([2], 1) == {1, 2, 3}
