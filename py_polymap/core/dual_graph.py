"""
Dual (Delaunay-centroid) graph construction.

Every valid Delaunay triangle contributes one dual vertex at its centroid. The
dual vertices of the triangles around a seed point, ordered by angle, form that
point's tile polygon. Two seed points are tile neighbours when they share two
valid triangles, i.e. when their polygons share a dual edge.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

import numpy as np
import structlog

from .geometry import (
    is_triangle_valid,
    polar_angle,
    polygon_area,
    sort_by_angle,
    triangle_centroid,
)

logger = structlog.get_logger()

MIN_ANGLE_DEG = 20.0


@dataclass
class DualGraph:
    """Dual graph of one triangulation.

    Rebuilt from scratch whenever the points move; nothing here is patched
    incrementally.
    """
    points: np.ndarray
    triangles: np.ndarray = field(default_factory=lambda: np.empty((0, 3), dtype=np.int64))

    # Triangle data
    centroids: np.ndarray = field(default_factory=lambda: np.empty((0, 2)))
    valid_triangles: Set[int] = field(default_factory=set)
    triangle_neighbors: List[List[int]] = field(default_factory=list)
    dual_edges: List[Tuple[int, int]] = field(default_factory=list)

    # Per-point data
    tiles: List[List[int]] = field(default_factory=list)           # valid triangles around each point
    delaunay_neighbors: List[List[int]] = field(default_factory=list)
    tile_neighbors: List[List[int]] = field(default_factory=list)  # Voronoi neighbours, angle-sorted

    # Classification
    valid_tiles: Set[int] = field(default_factory=set)
    edge_tiles: Set[int] = field(default_factory=set)
    ineligible_tiles: Set[int] = field(default_factory=set)
    water_only_tiles: Set[int] = field(default_factory=set)

    @property
    def n_points(self) -> int:
        return len(self.points)

    def is_eligible(self, i: int) -> bool:
        """Valid tile away from the generation boundary."""
        return i in self.valid_tiles and i not in self.ineligible_tiles

    def is_land_eligible(self, i: int) -> bool:
        return i in self.valid_tiles and i not in self.water_only_tiles

    def outer_ring(self) -> Set[int]:
        """Valid tiles on the boundary; these stay fixed during relaxation."""
        return {i for i in self.valid_tiles
                if i in self.edge_tiles or i in self.ineligible_tiles}

    def tile_polygon(self, i: int) -> np.ndarray:
        """Dual-vertex positions of tile ``i`` sorted by angle about its point."""
        vertices = [self.centroids[t] for t in self.tiles[i]]
        if not vertices:
            return np.empty((0, 2))
        return np.array(sort_by_angle(vertices, self.points[i]))

    def tile_area(self, i: int) -> float:
        return polygon_area(self.tile_polygon(i))

    def four_sided_tiles(self) -> List[int]:
        return [i for i in range(self.n_points)
                if self.is_eligible(i) and len(self.tile_neighbors[i]) == 4]

    def within_distance(self, targets: Iterable[int], depth: int) -> Set[int]:
        """All points reachable from ``targets`` in at most ``depth`` neighbour hops."""
        result = set(targets)
        frontier = set(result)
        for _ in range(depth):
            next_frontier = set()
            for idx in frontier:
                if not 0 <= idx < len(self.tile_neighbors):
                    continue
                for neighbor in self.tile_neighbors[idx]:
                    if neighbor not in result:
                        result.add(neighbor)
                        next_frontier.add(neighbor)
            frontier = next_frontier
            if not frontier:
                break
        return result


def build_triangle_adjacency(triangles: np.ndarray) -> Tuple[List[List[int]], Dict[Tuple[int, int], List[int]]]:
    """
    Find triangles sharing an edge.

    Returns:
        Tuple of (per-triangle neighbour lists, edge -> triangle list map)
    """
    edge_triangles: Dict[Tuple[int, int], List[int]] = defaultdict(list)
    for t, (a, b, c) in enumerate(triangles):
        for u, v in ((a, b), (b, c), (c, a)):
            edge_triangles[(min(u, v), max(u, v))].append(t)

    neighbors = [[] for _ in range(len(triangles))]
    for tris in edge_triangles.values():
        for i in range(len(tris)):
            for j in range(i + 1, len(tris)):
                neighbors[tris[i]].append(tris[j])
                neighbors[tris[j]].append(tris[i])

    for t in range(len(neighbors)):
        neighbors[t] = sorted(neighbors[t])
    return neighbors, edge_triangles


def _expand_rings(seeds: Set[int], tile_neighbors: List[List[int]],
                  valid_tiles: Set[int], rings: int) -> Set[int]:
    result = set(seeds)
    frontier = set(seeds)
    for _ in range(rings):
        next_frontier = set()
        for tile in frontier:
            for neighbor in tile_neighbors[tile]:
                if neighbor in valid_tiles and neighbor not in result:
                    result.add(neighbor)
                    next_frontier.add(neighbor)
        frontier = next_frontier
    return result


def build_dual_graph(points: np.ndarray, triangles: np.ndarray,
                     min_angle_deg: float = MIN_ANGLE_DEG,
                     ineligible_deficiency: int = 1,
                     water_buffer_rings: int = 2) -> DualGraph:
    """
    Build the dual graph and tile classification for a triangulation.

    Args:
        points: Seed point coordinates
        triangles: Counter-clockwise index triples into ``points``
        min_angle_deg: Triangles with a smaller interior angle are slivers
        ineligible_deficiency: Missing Voronoi neighbours that make a tile ineligible
        water_buffer_rings: Rings around ineligible tiles reserved for water

    Returns:
        Populated DualGraph
    """
    points = np.asarray(points, dtype=float)
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    n_points = len(points)
    n_triangles = len(triangles)

    centroids = np.zeros((n_triangles, 2))
    valid_triangles = set()
    for t, (a, b, c) in enumerate(triangles):
        centroids[t] = triangle_centroid(points[a], points[b], points[c])
        if is_triangle_valid(points[a], points[b], points[c], min_angle_deg):
            valid_triangles.add(t)

    triangle_neighbors, _ = build_triangle_adjacency(triangles)

    dual_edges = []
    for i in sorted(valid_triangles):
        for j in triangle_neighbors[i]:
            if j > i and j in valid_triangles:
                dual_edges.append((i, j))

    # Tile candidates and shared-triangle counts per point pair
    tiles = [[] for _ in range(n_points)]
    shared = defaultdict(int)
    for t in sorted(valid_triangles):
        a, b, c = (int(v) for v in triangles[t])
        for v in (a, b, c):
            tiles[v].append(t)
        for u, v in ((a, b), (b, c), (c, a)):
            shared[(min(u, v), max(u, v))] += 1

    delaunay_sets = [set() for _ in range(n_points)]
    voronoi_sets = [set() for _ in range(n_points)]
    for (u, v), count in shared.items():
        delaunay_sets[u].add(v)
        delaunay_sets[v].add(u)
        if count >= 2:
            voronoi_sets[u].add(v)
            voronoi_sets[v].add(u)

    def by_angle(i, neighbors):
        return sorted(neighbors, key=lambda n: (polar_angle(points[i], points[n]), n))

    delaunay_neighbors = [by_angle(i, delaunay_sets[i]) for i in range(n_points)]
    tile_neighbors = [by_angle(i, voronoi_sets[i]) for i in range(n_points)]

    valid_tiles = set()
    edge_tiles = set()
    ineligible_tiles = set()
    for i in range(n_points):
        if len(tiles[i]) < 3:
            continue
        valid_tiles.add(i)
        deficiency = len(delaunay_neighbors[i]) - len(tile_neighbors[i])
        if deficiency > 0:
            edge_tiles.add(i)
        if deficiency >= ineligible_deficiency:
            ineligible_tiles.add(i)

    water_only_tiles = _expand_rings(ineligible_tiles, tile_neighbors,
                                     valid_tiles, water_buffer_rings)

    logger.debug("Dual graph built",
                 points=n_points, triangles=n_triangles,
                 valid_triangles=len(valid_triangles), dual_edges=len(dual_edges),
                 valid_tiles=len(valid_tiles), edge_tiles=len(edge_tiles),
                 ineligible=len(ineligible_tiles), water_only=len(water_only_tiles))

    return DualGraph(
        points=points,
        triangles=triangles,
        centroids=centroids,
        valid_triangles=valid_triangles,
        triangle_neighbors=triangle_neighbors,
        dual_edges=dual_edges,
        tiles=tiles,
        delaunay_neighbors=delaunay_neighbors,
        tile_neighbors=tile_neighbors,
        valid_tiles=valid_tiles,
        edge_tiles=edge_tiles,
        ineligible_tiles=ineligible_tiles,
        water_only_tiles=water_only_tiles,
    )
