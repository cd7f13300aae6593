"""
Per-call generation state.

All working collections of one generation (points, triangulation, dual graph,
land/water partitions, PRNG) live on a GenerationContext owned by the caller's
stack. Nothing is stored at module level, so independent maps can be generated
concurrently.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Set, Union

import numpy as np
import structlog

from ..config import Settings, settings as default_settings
from ..errors import TriangulationCollapsed
from .alea_prng import AleaPRNG
from .delaunay import Triangulation, triangulate
from .dual_graph import DualGraph, build_dual_graph
from .geometry import Bounds

logger = structlog.get_logger()


@dataclass(frozen=True)
class PipelineConfig:
    """Tunable constants for one generation call."""

    min_angle_deg: float = 20.0
    ineligible_deficiency: int = 1
    water_buffer_rings: int = 2
    max_regularization_iterations: int = 20
    max_area_percent: float = 125.0
    min_area_percent: float = 75.0
    relax_radius: int = 2
    poisson_attempts: int = 30
    poisson_spacing_factor: float = 0.8
    hex_spacing_factor: float = 1.1
    points_per_tile: int = 8
    min_points: int = 150
    node_precision: int = 3
    min_tile_ratio: float = 0.85

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None, **overrides) -> "PipelineConfig":
        source = source or default_settings
        config = cls(
            min_angle_deg=source.min_angle_deg,
            ineligible_deficiency=source.ineligible_deficiency,
            water_buffer_rings=source.water_buffer_rings,
            max_regularization_iterations=source.max_regularization_iterations,
            max_area_percent=source.max_area_percent,
            min_area_percent=source.min_area_percent,
            relax_radius=source.relax_radius,
            poisson_attempts=source.poisson_attempts,
            poisson_spacing_factor=source.poisson_spacing_factor,
            hex_spacing_factor=source.hex_spacing_factor,
            points_per_tile=source.points_per_tile,
            min_points=source.min_points,
            node_precision=source.node_precision,
            min_tile_ratio=source.min_tile_ratio,
        )
        return replace(config, **overrides) if overrides else config


@dataclass
class GenerationContext:
    """Arena for a single map generation."""

    bounds: Bounds
    prng: AleaPRNG
    config: PipelineConfig = field(default_factory=PipelineConfig)
    seed: Union[str, int] = "default"

    points: np.ndarray = field(default_factory=lambda: np.empty((0, 2)))
    triangulation: Optional[Triangulation] = None
    graph: Optional[DualGraph] = None

    land: Set[int] = field(default_factory=set)
    water: Set[int] = field(default_factory=set)
    center_tile: Optional[int] = None

    stats: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, seed: Union[str, int] = "default",
               bounds: Optional[Bounds] = None,
               config: Optional[PipelineConfig] = None,
               source: Optional[Settings] = None) -> "GenerationContext":
        source = source or default_settings
        if bounds is None:
            bounds = Bounds.from_canvas(source.width, source.height, source.margin)
        return cls(
            bounds=bounds,
            prng=AleaPRNG(seed),
            config=config or PipelineConfig.from_settings(source),
            seed=seed,
        )

    def rebuild(self, stage: str, points: Optional[np.ndarray] = None) -> DualGraph:
        """
        Triangulate ``points`` (default: current points) and rebuild the dual graph.

        The context is only updated once both steps succeed, so a failure leaves
        the last good graph in place.

        Raises:
            InsufficientPoints: fewer than 3 points
            TriangulationCollapsed: triangulation produced no triangles
        """
        candidate = self.points if points is None else np.asarray(points, dtype=float)
        triangulation = triangulate(candidate)
        if len(triangulation) == 0:
            raise TriangulationCollapsed(stage, len(candidate))

        graph = build_dual_graph(
            triangulation.points,
            triangulation.triangles,
            min_angle_deg=self.config.min_angle_deg,
            ineligible_deficiency=self.config.ineligible_deficiency,
            water_buffer_rings=self.config.water_buffer_rings,
        )

        self.points = triangulation.points
        self.triangulation = triangulation
        self.graph = graph
        return graph
