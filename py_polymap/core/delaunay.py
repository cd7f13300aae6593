"""
Delaunay triangulation (Bowyer-Watson).

Points are inserted one at a time into a super-triangle that strictly contains
them. Each insertion removes every triangle whose circumcircle contains the new
point and re-fans the resulting cavity to it. Triangles are kept in
counter-clockwise order throughout, so the sign convention of
``in_circumcircle`` holds for every triangle.
"""

from collections import Counter
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import structlog

from ..errors import InsufficientPoints
from .geometry import in_circumcircle, orientation

logger = structlog.get_logger()

SUPER_TRIANGLE_SCALE = 20.0


@dataclass
class Triangulation:
    """Point set plus counter-clockwise index triples into it."""

    points: np.ndarray
    triangles: np.ndarray

    def __len__(self) -> int:
        return len(self.triangles)


def _super_triangle(points: np.ndarray) -> List[Tuple[float, float]]:
    min_x, min_y = points.min(axis=0)
    max_x, max_y = points.max(axis=0)
    delta = max(max_x - min_x, max_y - min_y, 1.0)
    mid_x = (min_x + max_x) / 2
    mid_y = (min_y + max_y) / 2
    scale = SUPER_TRIANGLE_SCALE * delta

    # Counter-clockwise
    return [
        (mid_x - scale, mid_y - delta),
        (mid_x + scale, mid_y - delta),
        (mid_x, mid_y + scale),
    ]


def triangulate(points) -> Triangulation:
    """
    Compute the Delaunay triangulation of a point set.

    Args:
        points: Sequence or array of [x, y] coordinates

    Returns:
        Triangulation whose triangles index into ``points``

    Raises:
        InsufficientPoints: fewer than 3 points were supplied
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    n = len(points)
    if n < 3:
        raise InsufficientPoints(n)

    vertices = _super_triangle(points) + [tuple(p) for p in points]
    triangles = [(0, 1, 2)]

    for point_idx in range(3, len(vertices)):
        p = vertices[point_idx]

        bad = []
        good = []
        for tri in triangles:
            if in_circumcircle(p, vertices[tri[0]], vertices[tri[1]], vertices[tri[2]]):
                bad.append(tri)
            else:
                good.append(tri)

        # Cavity boundary: edges used by exactly one bad triangle
        edge_count = Counter()
        for a, b, c in bad:
            for u, v in ((a, b), (b, c), (c, a)):
                edge_count[frozenset((u, v))] += 1

        for a, b, c in bad:
            for u, v in ((a, b), (b, c), (c, a)):
                if edge_count[frozenset((u, v))] == 1:
                    good.append((u, v, point_idx))

        triangles = good

    result = []
    for a, b, c in triangles:
        if a < 3 or b < 3 or c < 3:
            continue
        tri = (a - 3, b - 3, c - 3)
        if orientation(points[tri[0]], points[tri[1]], points[tri[2]]) <= 0:
            # Collinear or inverted remnants of the super-triangle fan
            continue
        result.append(tri)

    logger.debug("Triangulation complete", points=n, triangles=len(result))
    return Triangulation(
        points=points,
        triangles=np.array(result, dtype=np.int64).reshape(-1, 3),
    )


def is_delaunay(triangulation: Triangulation, tolerance: float = 1e-9) -> bool:
    """
    Brute-force check that no point lies strictly inside any circumcircle.

    Intended for small point sets; the cost is O(T * N).
    """
    pts = triangulation.points
    scale = float(np.abs(pts).max()) if len(pts) else 1.0
    eps = tolerance * max(scale, 1.0) ** 4

    for a, b, c in triangulation.triangles:
        for idx in range(len(pts)):
            if idx in (a, b, c):
                continue
            p = pts[idx]
            ax, ay = pts[a] - p
            bx, by = pts[b] - p
            cx, cy = pts[c] - p
            det = (
                (ax * ax + ay * ay) * (bx * cy - cx * by)
                - (bx * bx + by * by) * (ax * cy - cx * ay)
                + (cx * cx + cy * cy) * (ax * by - bx * ay)
            )
            if det > eps:
                return False
    return True
