"""
Seed point sampling.

Two strategies place the seed points the tiling is built around:

- Poisson-disc sampling (Bridson) for organic, irregular maps
- an offset-row hex lattice, optionally jittered, for hex-like boards

Both draw every random number from the AleaPRNG they are handed.
"""

import math

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .geometry import Bounds

logger = structlog.get_logger()

POISSON_ATTEMPTS = 30


def poisson_disc_sampling(n: int, bounds: Bounds, prng: AleaPRNG,
                          attempts: int = POISSON_ATTEMPTS,
                          spacing_factor: float = 0.8) -> np.ndarray:
    """
    Generate up to ``n`` points with a minimum pairwise separation.

    Args:
        n: Target number of points
        bounds: Rectangle the points must fall into
        prng: Random source
        attempts: Placement attempts around an active point before it retires
        spacing_factor: Minimum separation as a fraction of sqrt(area / n)

    Returns:
        Array of [x, y] coordinates; shorter than ``n`` when sampling saturates
    """
    if n <= 0:
        return np.empty((0, 2))

    min_distance = math.sqrt(bounds.area / n) * spacing_factor
    cell_size = min_distance / math.sqrt(2)
    grid_width = int(math.ceil(bounds.width / cell_size))
    grid_height = int(math.ceil(bounds.height / cell_size))
    grid = {}
    active = []
    points = []

    def grid_cell(x, y):
        return (int((x - bounds.x) // cell_size), int((y - bounds.y) // cell_size))

    def is_valid(x, y):
        if not bounds.contains(x, y):
            return False
        col, row = grid_cell(x, y)
        for r in range(max(0, row - 2), min(grid_height - 1, row + 2) + 1):
            for c in range(max(0, col - 2), min(grid_width - 1, col + 2) + 1):
                other = grid.get((c, r))
                if other is not None and math.hypot(x - other[0], y - other[1]) < min_distance:
                    return False
        return True

    def place(x, y):
        point = (x, y)
        points.append(point)
        active.append(point)
        grid[grid_cell(x, y)] = point

    place(bounds.x + prng.random() * bounds.width,
          bounds.y + prng.random() * bounds.height)

    while active and len(points) < n:
        idx = int(prng.random() * len(active))
        px, py = active[idx]
        found = False

        for _ in range(attempts):
            angle = prng.random() * 2 * math.pi
            radius = min_distance + prng.random() * min_distance
            x = px + radius * math.cos(angle)
            y = py + radius * math.sin(angle)
            if is_valid(x, y):
                place(x, y)
                found = True
                break

        if not found:
            active.pop(idx)

    logger.info("Poisson-disc sampling complete",
                requested=n, placed=len(points), min_distance=round(min_distance, 2))
    return np.array(points, dtype=float)


def hex_grid_sampling(n: int, bounds: Bounds, prng: AleaPRNG,
                      irregularity: float = 0.0,
                      spacing_factor: float = 1.1) -> np.ndarray:
    """
    Generate up to ``n`` points on an offset-row triangular lattice.

    Each point is displaced by up to ``irregularity * spacing / 2`` on both axes
    so that ``irregularity=0`` yields a perfectly regular lattice.

    Args:
        n: Maximum number of points
        bounds: Rectangle to fill, row by row from the top-left corner
        prng: Random source for the jitter
        irregularity: Displacement magnitude in [0, 1] relative to the spacing
        spacing_factor: Lattice spacing as a fraction of sqrt(area / n)

    Returns:
        Array of [x, y] coordinates
    """
    if n <= 0:
        return np.empty((0, 2))

    spacing = math.sqrt(bounds.area / n) * spacing_factor
    row_height = spacing * math.sqrt(3) / 2
    jittering = irregularity * spacing / 2

    def jitter():
        return prng.random() * 2 * jittering - jittering if jittering > 0 else 0.0

    points = []
    row = 0
    y = bounds.y
    while y < bounds.y + bounds.height and len(points) < n:
        x = bounds.x + (row % 2) * spacing / 2
        while x < bounds.x + bounds.width and len(points) < n:
            points.append(bounds.clamp(x + jitter(), y + jitter()))
            x += spacing
        y += row_height
        row += 1

    logger.info("Hex lattice sampling complete",
                requested=n, placed=len(points), spacing=round(spacing, 2),
                irregularity=irregularity)
    return np.array(points, dtype=float)


def sample_points(strategy: str, n: int, bounds: Bounds, prng: AleaPRNG,
                  irregularity: float = 0.0, attempts: int = POISSON_ATTEMPTS,
                  poisson_spacing_factor: float = 0.8,
                  hex_spacing_factor: float = 1.1) -> np.ndarray:
    """Dispatch to the ``"poisson"`` or ``"hex"`` sampler."""
    if strategy == "poisson":
        return poisson_disc_sampling(n, bounds, prng, attempts=attempts,
                                     spacing_factor=poisson_spacing_factor)
    if strategy == "hex":
        return hex_grid_sampling(n, bounds, prng, irregularity=irregularity,
                                 spacing_factor=hex_spacing_factor)
    raise ValueError(f"Unknown sampling strategy: {strategy}")
