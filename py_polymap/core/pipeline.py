"""
Irregular polygon map pipeline.

Runs every stage on one GenerationContext:

1. Point sampling (hex lattice or Poisson disc)
2. Delaunay triangulation and dual graph construction
3. Regularization (delaunay layout only)
4. Landmass shaping
5. Graph assembly
6. Resource assignment
"""

from typing import Optional, Union

import structlog

from ..config import Settings
from ..models import MapData
from .assembler import GraphAssembler
from .context import GenerationContext, PipelineConfig
from .geometry import Bounds
from .landmass import LandmassShaper
from .point_sampler import sample_points
from .regularizer import Regularizer
from .resources import assign_random_resources

logger = structlog.get_logger()

# Layout -> sampling strategy
LAYOUTS = {
    "standard": "hex",
    "expanded-hex": "hex",
    "delaunay": "poisson",
}
REGULARIZED_LAYOUTS = ("delaunay",)


def default_erosion_rounds(target: int) -> int:
    return max(1, round(target * 0.04))


def point_budget(target: int, config: PipelineConfig) -> int:
    """Seed points to sample for ``target`` land tiles."""
    return max(config.min_points, target * config.points_per_tile)


def generate_polygon_map(layout: str = "delaunay",
                         target: int = 30,
                         seed: Union[str, int] = "default",
                         irregularity: float = 0.3,
                         smoothing_iters: int = 2,
                         erosion_rounds: Optional[int] = None,
                         bounding_radius: Optional[float] = None,
                         bounds: Optional[Bounds] = None,
                         config: Optional[PipelineConfig] = None,
                         source: Optional[Settings] = None) -> MapData:
    """
    Generate an irregular polygon map.

    Args:
        layout: "standard", "expanded-hex" or "delaunay"
        target: Land tile target
        seed: PRNG seed; identical arguments give identical maps
        irregularity: Lattice jitter for the hex-sampled layouts; the
            Poisson-sampled delaunay layout does not use it
        smoothing_iters: Global Lloyd rounds before 4-sided tile merging
        erosion_rounds: Coastline carving rounds (default scales with target)
        bounding_radius: Generate inside a square of this half-size
        bounds: Explicit sampling rectangle, overrides ``bounding_radius``
        config: Pipeline constants (default: from settings)
        source: Settings object to read defaults from

    Returns:
        Unvalidated MapData

    Raises:
        ValueError: unknown layout or non-positive target
        InsufficientPoints: sampling produced fewer than 3 points
        TriangulationCollapsed: the initial triangulation is empty
    """
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown layout: {layout}")
    if target < 1:
        raise ValueError(f"Target tile count must be positive, got {target}")

    if bounds is None and bounding_radius is not None:
        margin = source.margin if source is not None else 0.0
        bounds = Bounds.from_radius(bounding_radius, margin)

    ctx = GenerationContext.create(seed, bounds=bounds, config=config, source=source)
    if erosion_rounds is None:
        erosion_rounds = default_erosion_rounds(target)

    n_points = point_budget(target, ctx.config)
    logger.info("Polygon map generation started",
                layout=layout, target=target, seed=seed, points=n_points)

    ctx.points = sample_points(
        LAYOUTS[layout], n_points, ctx.bounds, ctx.prng,
        irregularity=irregularity,
        attempts=ctx.config.poisson_attempts,
        poisson_spacing_factor=ctx.config.poisson_spacing_factor,
        hex_spacing_factor=ctx.config.hex_spacing_factor,
    )
    ctx.rebuild("initial")

    iterations = 0
    if layout in REGULARIZED_LAYOUTS:
        report = Regularizer(ctx).run(smoothing_iters)
        iterations = report.iterations
        ctx.stats.update(regularization_iterations=report.iterations,
                         merges=report.merges,
                         remaining_four_sided=report.remaining_four_sided)

    LandmassShaper(ctx).shape(layout, target, erosion_rounds)

    map_data = GraphAssembler(ctx).assemble()
    assign_random_resources(map_data.tiles, ctx.prng)

    map_data.metadata.update(
        generator="polygon",
        layout=layout,
        seed=seed,
        target_tile_count=target,
        points=len(ctx.points),
        land_tiles=len(ctx.land),
        water_tiles=len(ctx.water),
        regularization_iterations=iterations,
    )
    logger.info("Polygon map generated",
                layout=layout, seed=seed, tiles=len(map_data.tiles),
                nodes=len(map_data.nodes), edges=len(map_data.edges))
    return map_data
