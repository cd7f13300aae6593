"""
Tiling regularization.

Bounds the irregularity of the tiling before land is placed:

1. Optional global Lloyd smoothing of every interior tile
2. Merging of 4-sided tiles with their nearest neighbour
3. Lloyd relaxation around merge locations
4. Lloyd relaxation of tiles whose area strays too far from the median

Each step rebuilds the triangulation and dual graph from scratch. The loop is
capped and stops as soon as no 4-sided tile remains. A rebuild that fails
aborts the round and leaves the last good graph on the context.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

import numpy as np
import structlog

from ..errors import InsufficientPoints, TriangulationCollapsed
from .context import GenerationContext
from .dual_graph import DualGraph
from .geometry import Bounds, compute_polygon_centroid, distance

logger = structlog.get_logger()


@dataclass
class MergeResult:
    """Outcome of one 4-sided tile merge pass."""
    merged: bool
    points: np.ndarray
    merge_locations: List[int] = field(default_factory=list)
    pairs: List[Tuple[int, int]] = field(default_factory=list)


@dataclass
class RegularizationReport:
    iterations: int = 0
    merges: int = 0
    relaxed: int = 0
    smoothing_rounds: int = 0
    remaining_four_sided: int = 0
    aborted: bool = False


def merge_four_sided_tiles(points: np.ndarray, graph: DualGraph) -> MergeResult:
    """
    Replace each 4-sided tile and its nearest neighbour with their midpoint.

    Pairs are taken greedily by increasing distance so that every point takes
    part in at most one merge per pass. The merged point takes the slot of the
    lower index of the pair; the higher index is removed.

    Args:
        points: Current seed points
        graph: Dual graph built from ``points``

    Returns:
        MergeResult with the new point array and the indices (in the new array)
        of the merged points
    """
    points = np.asarray(points, dtype=float)
    candidates = {}
    for tile in graph.four_sided_tiles():
        neighbors = graph.tile_neighbors[tile]
        if not neighbors:
            continue
        nearest = min(neighbors, key=lambda n: (distance(points[tile], points[n]), n))
        pair = (min(tile, nearest), max(tile, nearest))
        dist = distance(points[tile], points[nearest])
        if pair not in candidates or candidates[pair] > dist:
            candidates[pair] = dist

    if not candidates:
        return MergeResult(merged=False, points=points.copy())

    used = set()
    pairs = []
    for pair, _ in sorted(candidates.items(), key=lambda item: (item[1], item[0])):
        a, b = pair
        if a in used or b in used:
            continue
        used.update(pair)
        pairs.append(pair)

    partner = {a: b for a, b in pairs}
    removed = {b for _, b in pairs}

    new_points = []
    merge_locations = []
    for i in range(len(points)):
        if i in removed:
            continue
        if i in partner:
            merge_locations.append(len(new_points))
            new_points.append((points[i] + points[partner[i]]) / 2)
        else:
            new_points.append(points[i].copy())

    return MergeResult(
        merged=True,
        points=np.array(new_points, dtype=float).reshape(-1, 2),
        merge_locations=merge_locations,
        pairs=pairs,
    )


def find_area_outliers(graph: DualGraph, max_area_percent: float = 125.0,
                       min_area_percent: float = 75.0) -> List[int]:
    """Eligible tiles whose polygon area is outside the band around the median."""
    tile_areas = {}
    for i in range(graph.n_points):
        if not graph.is_eligible(i) or len(graph.tiles[i]) < 3:
            continue
        area = graph.tile_area(i)
        if area > 0:
            tile_areas[i] = area

    if not tile_areas:
        return []

    areas = np.sort(np.fromiter(tile_areas.values(), dtype=float))
    median = areas[len(areas) // 2]
    upper = median * max_area_percent / 100
    lower = median * min_area_percent / 100

    return [i for i, area in tile_areas.items() if area > upper or area < lower]


def relax_points(points: np.ndarray, graph: DualGraph, targets: Iterable[int],
                 bounds: Bounds) -> np.ndarray:
    """
    Lloyd step: move each target point to its tile polygon's centroid.

    Outer-ring tiles and tiles with fewer than 3 dual vertices stay put.
    """
    new_points = np.array(points, dtype=float, copy=True)
    outer_ring = graph.outer_ring()

    for i in sorted(set(targets)):
        if i in outer_ring or i not in graph.valid_tiles:
            continue
        polygon = graph.tile_polygon(i)
        if len(polygon) < 3:
            continue
        centroid = compute_polygon_centroid(polygon)
        new_points[i] = bounds.clamp(centroid[0], centroid[1])

    return new_points


class Regularizer:
    """Runs the merge/relax loop on a GenerationContext."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.config = context.config

    def smooth(self, rounds: int, report: RegularizationReport) -> None:
        """Global Lloyd relaxation of every eligible, non-boundary tile."""
        ctx = self.context
        for _ in range(rounds):
            targets = [i for i in range(ctx.graph.n_points) if ctx.graph.is_eligible(i)]
            relaxed = relax_points(ctx.points, ctx.graph, targets, ctx.bounds)
            ctx.rebuild("smoothing", relaxed)
            report.smoothing_rounds += 1
            report.relaxed += len(targets)

    def run_round(self, report: RegularizationReport) -> None:
        ctx = self.context

        merge = merge_four_sided_tiles(ctx.points, ctx.graph)
        if merge.merged:
            ctx.rebuild("merge", merge.points)
            report.merges += len(merge.pairs)

            targets = ctx.graph.within_distance(merge.merge_locations, self.config.relax_radius)
            ctx.rebuild("merge relaxation",
                        relax_points(ctx.points, ctx.graph, targets, ctx.bounds))
            report.relaxed += len(targets)

        outliers = find_area_outliers(ctx.graph, self.config.max_area_percent,
                                      self.config.min_area_percent)
        if outliers:
            targets = set(outliers)
            for outlier in outliers:
                targets.update(ctx.graph.tile_neighbors[outlier])
            ctx.rebuild("area relaxation",
                        relax_points(ctx.points, ctx.graph, targets, ctx.bounds))
            report.relaxed += len(targets)

    def run(self, smoothing_iters: int = 0) -> RegularizationReport:
        """
        Regularize the context's tiling in place.

        Args:
            smoothing_iters: Global Lloyd rounds applied before the merge loop

        Returns:
            RegularizationReport describing the work done
        """
        ctx = self.context
        report = RegularizationReport()
        max_iterations = self.config.max_regularization_iterations

        try:
            self.smooth(smoothing_iters, report)
        except (InsufficientPoints, TriangulationCollapsed) as e:
            logger.warning("Smoothing aborted, keeping last good graph", error=str(e))
            report.aborted = True

        four_sided = ctx.graph.four_sided_tiles()
        logger.info("Regularization started",
                    points=len(ctx.points), four_sided=len(four_sided),
                    smoothing_rounds=report.smoothing_rounds)

        while four_sided and report.iterations < max_iterations and not report.aborted:
            report.iterations += 1
            try:
                self.run_round(report)
            except (InsufficientPoints, TriangulationCollapsed) as e:
                logger.warning("Regularization round aborted, keeping last good graph",
                               iteration=report.iterations, error=str(e))
                report.aborted = True
            four_sided = ctx.graph.four_sided_tiles()

        report.remaining_four_sided = len(four_sided)
        logger.info("Regularization complete",
                    iterations=report.iterations, merges=report.merges,
                    remaining_four_sided=report.remaining_four_sided,
                    points=len(ctx.points), aborted=report.aborted)
        return report
