"""Planar geometry helpers shared by the generation stages."""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

PointLike = Sequence[float]


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle points are sampled and clamped into."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_canvas(cls, width: float, height: float, margin: float) -> "Bounds":
        return cls(margin, margin, width - 2 * margin, height - 2 * margin)

    @classmethod
    def from_radius(cls, radius: float, margin: float) -> "Bounds":
        """Square of side ``2 * radius`` inside a margin."""
        return cls(margin, margin, 2 * radius, 2 * radius)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return (self.x <= x < self.x + self.width
                and self.y <= y < self.y + self.height)

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        return (
            float(np.clip(x, self.x, self.x + self.width)),
            float(np.clip(y, self.y, self.y + self.height)),
        )


def distance(p1: PointLike, p2: PointLike) -> float:
    dx = p1[0] - p2[0]
    dy = p1[1] - p2[1]
    return math.sqrt(dx * dx + dy * dy)


def triangle_centroid(p1: PointLike, p2: PointLike, p3: PointLike) -> Tuple[float, float]:
    return (
        (p1[0] + p2[0] + p3[0]) / 3,
        (p1[1] + p2[1] + p3[1]) / 3,
    )


def vertex_angle(a: PointLike, b: PointLike, c: PointLike) -> float:
    """Interior angle in degrees at vertex ``b`` of triangle abc."""
    bax, bay = a[0] - b[0], a[1] - b[1]
    bcx, bcy = c[0] - b[0], c[1] - b[1]
    mag = math.hypot(bax, bay) * math.hypot(bcx, bcy)
    if mag == 0:
        return 0.0
    cos_angle = (bax * bcx + bay * bcy) / mag
    return math.degrees(math.acos(max(-1.0, min(1.0, cos_angle))))


def is_triangle_valid(p1: PointLike, p2: PointLike, p3: PointLike,
                      min_angle_deg: float) -> bool:
    """True when all three interior angles reach ``min_angle_deg``."""
    return (vertex_angle(p2, p1, p3) >= min_angle_deg
            and vertex_angle(p1, p2, p3) >= min_angle_deg
            and vertex_angle(p1, p3, p2) >= min_angle_deg)


def orientation(a: PointLike, b: PointLike, c: PointLike) -> float:
    """Twice the signed area of abc; positive for counter-clockwise."""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def in_circumcircle(p: PointLike, a: PointLike, b: PointLike, c: PointLike) -> bool:
    """
    Test whether ``p`` lies strictly inside the circumcircle of abc.

    Coordinates are taken relative to ``p`` before the 3x3 determinant is
    evaluated, which keeps the magnitudes small. A positive determinant means
    inside for a counter-clockwise triangle.
    """
    ax, ay = a[0] - p[0], a[1] - p[1]
    bx, by = b[0] - p[0], b[1] - p[1]
    cx, cy = c[0] - p[0], c[1] - p[1]

    det = (
        (ax * ax + ay * ay) * (bx * cy - cx * by)
        - (bx * bx + by * by) * (ax * cy - cx * ay)
        + (cx * cx + cy * cy) * (ax * by - bx * ay)
    )
    return det > 0


def polygon_area(vertices: np.ndarray) -> float:
    """Absolute polygon area via the shoelace formula."""
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        return 0.0
    x = vertices[:, 0]
    y = vertices[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)) / 2)


def compute_polygon_centroid(vertices: np.ndarray) -> np.ndarray:
    """Compute the centroid of a polygon.

    Args:
        vertices: Array of [x, y] vertex coordinates in cyclic order

    Returns:
        [x, y] centroid coordinates (vertex mean for degenerate polygons)
    """
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    n = len(vertices)
    area = 0.0
    cx = 0.0
    cy = 0.0

    for i in range(n):
        j = (i + 1) % n
        a = vertices[i][0] * vertices[j][1] - vertices[j][0] * vertices[i][1]
        area += a
        cx += (vertices[i][0] + vertices[j][0]) * a
        cy += (vertices[i][1] + vertices[j][1]) * a

    if abs(area) < 1e-10:
        return np.mean(vertices, axis=0)

    area *= 0.5
    cx /= (6.0 * area)
    cy /= (6.0 * area)

    return np.array([cx, cy])


def polar_angle(center: PointLike, point: PointLike) -> float:
    return math.atan2(point[1] - center[1], point[0] - center[0])


def sort_by_angle(points: Sequence[PointLike], center: PointLike,
                  keys: Optional[Sequence] = None) -> list:
    """
    Order ``points`` (or their parallel ``keys``) by polar angle about ``center``.

    When ``keys`` is given the keys are returned in the sorted order instead of
    the points themselves.
    """
    items = list(keys) if keys is not None else list(points)
    order = sorted(range(len(points)), key=lambda k: polar_angle(center, points[k]))
    return [items[k] for k in order]


def ensure_counter_clockwise(vertices: Sequence[PointLike]) -> list:
    vertices = list(vertices)
    signed = 0.0
    for i in range(len(vertices)):
        j = (i + 1) % len(vertices)
        signed += vertices[i][0] * vertices[j][1] - vertices[j][0] * vertices[i][1]
    return vertices[::-1] if signed < 0 else vertices
