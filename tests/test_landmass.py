"""Tests for land placement."""

from collections import deque

import numpy as np

from py_polymap.core.alea_prng import AleaPRNG
from py_polymap.core.context import GenerationContext
from py_polymap.core.dual_graph import DualGraph
from py_polymap.core.geometry import Bounds, distance
from py_polymap.core.landmass import LandmassShaper
from py_polymap.core.point_sampler import hex_grid_sampling


def lattice_context(seed="landmass"):
    ctx = GenerationContext.create(seed, bounds=Bounds(0, 0, 600, 600))
    ctx.points = hex_grid_sampling(200, ctx.bounds, ctx.prng, irregularity=0)
    ctx.rebuild("initial")
    return ctx


def synthetic_context(tile_neighbors, valid_tiles=None):
    n = len(tile_neighbors)
    graph = DualGraph(
        points=np.zeros((n, 2)),
        tile_neighbors=tile_neighbors,
        valid_tiles=set(range(n)) if valid_tiles is None else valid_tiles,
    )
    return GenerationContext(bounds=Bounds(0, 0, 10, 10), prng=AleaPRNG("synthetic"), graph=graph)


def star_neighbors():
    """Tile 9 surrounded by tiles 1-4 in angular order."""
    neighbors = [[] for _ in range(10)]
    neighbors[9] = [1, 2, 3, 4]
    for tile in (1, 2, 3, 4):
        neighbors[tile] = [9]
    return neighbors


def is_connected(tiles, graph):
    tiles = set(tiles)
    start = next(iter(tiles))
    seen = {start}
    queue = deque([start])
    while queue:
        for neighbor in graph.tile_neighbors[queue.popleft()]:
            if neighbor in tiles and neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)
    return seen == tiles


class TestCenterTile:
    """Test seed selection."""

    def test_nearest_to_center(self):
        ctx = lattice_context()
        shaper = LandmassShaper(ctx)
        seed = shaper.find_center_tile()

        candidates = [i for i in range(ctx.graph.n_points) if ctx.graph.is_land_eligible(i)]
        expected = min(candidates, key=lambda i: distance(ctx.graph.points[i], ctx.bounds.center))
        assert seed == expected

    def test_no_candidates(self):
        ctx = synthetic_context([[1], [0]], valid_tiles=set())
        assert LandmassShaper(ctx).find_center_tile() is None


class TestGrowth:
    """Test landmass growth strategies."""

    def test_ring_growth_on_lattice(self):
        """Two rings around a hexagonal seed give the 19-tile board."""
        ctx = lattice_context()
        shaper = LandmassShaper(ctx)
        land = shaper.grow_rings(shaper.find_center_tile())

        assert len(land) == 19
        assert all(ctx.graph.is_land_eligible(t) for t in land)
        assert is_connected(land, ctx.graph)

    def test_frontier_growth(self):
        ctx = lattice_context()
        shaper = LandmassShaper(ctx)
        seed = shaper.find_center_tile()
        land = shaper.grow_frontier(seed, 25)

        assert len(land) == 25
        assert seed in land
        assert is_connected(land, ctx.graph)
        assert all(ctx.graph.is_land_eligible(t) for t in land)

    def test_frontier_growth_deterministic(self):
        lands = []
        for _ in range(2):
            ctx = lattice_context("frontier")
            shaper = LandmassShaper(ctx)
            lands.append(shaper.grow_frontier(shaper.find_center_tile(), 20))
        assert lands[0] == lands[1]

    def test_frontier_exhausted(self):
        """Growth stops at the land-eligible component when the target is too large."""
        ctx = synthetic_context([[1], [0, 2], [1]])
        land = LandmassShaper(ctx).grow_frontier(0, 10)
        assert land == {0, 1, 2}


class TestErosion:
    """Test coastline carving."""

    def test_erosion_keeps_size(self):
        ctx = lattice_context()
        shaper = LandmassShaper(ctx)
        seed = shaper.find_center_tile()
        shaper.grow_frontier(seed, 25)

        shaper.erode(seed, 5)

        assert len(shaper.land) == 25
        assert all(ctx.graph.is_land_eligible(t) for t in shaper.land)

    def test_shore_tiles(self):
        ctx = synthetic_context([[1], [0, 2], [1]])
        shaper = LandmassShaper(ctx)
        shaper.land = {0, 1}
        assert shaper.shore_tiles() == [1]


class TestWaterAndRepair:
    """Test water derivation and isolated tile repair."""

    def test_derive_water(self):
        ctx = lattice_context()
        shaper = LandmassShaper(ctx)
        shaper.grow_rings(shaper.find_center_tile())
        water = shaper.derive_water()

        assert water
        assert not water & shaper.land
        for tile in water:
            assert tile in ctx.graph.valid_tiles
            assert any(n in shaper.land for n in ctx.graph.tile_neighbors[tile])

    def test_surrounded_tile_becomes_water(self):
        ctx = synthetic_context([[1, 2, 3, 4], [0], [0], [0], [0]])
        shaper = LandmassShaper(ctx)
        shaper.land = {0}
        shaper.water = {1, 2, 3, 4}

        assert shaper.repair_isolated_tiles() == 1
        assert shaper.land == set()
        assert shaper.water == {0, 1, 2, 3, 4}

    def test_split_water_runs_keep_land(self):
        """A land tile with water on two separate sides stays land."""
        ctx = synthetic_context(star_neighbors())
        shaper = LandmassShaper(ctx)
        shaper.land = {2, 4, 9}
        shaper.water = {1, 3}

        assert shaper._water_runs(9) == 2
        assert shaper.repair_isolated_tiles() == 0
        assert shaper.land == {2, 4, 9}
        assert shaper.water == {1, 3}

    def test_water_never_becomes_land(self):
        ctx = synthetic_context(star_neighbors())
        shaper = LandmassShaper(ctx)
        shaper.land = {2, 4}
        shaper.water = {1, 3, 9}

        assert shaper.repair_isolated_tiles() == 0
        assert shaper.land == {2, 4}
        assert shaper.water == {1, 3, 9}

    def test_single_water_run_unchanged(self):
        ctx = synthetic_context(star_neighbors())
        shaper = LandmassShaper(ctx)
        shaper.land = {3, 4, 9}
        shaper.water = {1, 2}

        assert shaper._water_runs(9) == 1
        assert shaper.repair_isolated_tiles() == 0
        assert shaper.land == {3, 4, 9}

    def test_ring_layout_size_preserved(self):
        """Repair never grows the two-ring landmass."""
        ctx = lattice_context()
        shaper = LandmassShaper(ctx)
        shaper.grow_rings(shaper.find_center_tile())
        shaper.derive_water()

        assert shaper.repair_isolated_tiles() == 0
        assert len(shaper.land) == 19


class TestShape:
    """Test the full shaping sequence."""

    def test_standard_layout(self):
        ctx = lattice_context()
        land = LandmassShaper(ctx).shape("standard", 19, erosion_rounds=0)

        assert len(land) == 19
        assert ctx.land == land
        assert ctx.center_tile in land
        assert not ctx.water & ctx.land
        assert ctx.stats["land_tiles"] == 19
        assert ctx.stats["erosion_rounds_applied"] == 0

    def test_frontier_layout(self):
        ctx = lattice_context()
        land = LandmassShaper(ctx).shape("delaunay", 25, erosion_rounds=2)

        assert 20 <= len(land) <= 35
        assert ctx.land == land
        assert not ctx.water & ctx.land
        assert ctx.stats["land_tiles"] == len(land)
        assert ctx.stats["water_tiles"] == len(ctx.water)

    def test_no_eligible_tiles(self):
        ctx = synthetic_context([[1], [0]], valid_tiles=set())
        assert LandmassShaper(ctx).shape("standard", 19, 0) == set()
        assert ctx.center_tile is None
