"""
Map generation entry point.

Dispatches on the requested map type, validates the result and, for irregular
maps, falls back once to a hex board built from the same seed and target.
"""

import math
from typing import Literal, Optional, Union

import structlog
from pydantic import BaseModel, Field

from .config import Settings, settings as default_settings
from .core.hex_generator import (
    generate_expanded_hex_map,
    generate_regular_hex_map,
    generate_standard_map,
    radius_for_tile_count,
    tiles_for_radius,
)
from .core.pipeline import default_erosion_rounds, generate_polygon_map
from .core.result import MapResult
from .core.validator import validate_map_or_raise
from .errors import GenerationExhausted, MapGenerationError
from .models import MapData

logger = structlog.get_logger()

MapType = Literal["standard", "expanded-hex", "expanded-delaunay"]


class MapOptions(BaseModel):
    """Options for one map generation."""

    map_type: MapType = Field("standard", description="Board type to generate")
    seed: Union[int, str] = Field("default", description="Random seed for reproducible generation")
    target_tile_count: int = Field(30, ge=1, le=500, description="Land tiles for irregular maps")
    expanded_map_size: int = Field(30, ge=1, le=331, description="Tile target for expanded hex maps")
    # Poisson sampling is irregular already; only the hex-sampled layouts jitter
    irregularity: float = Field(0.3, ge=0, le=1,
                                description="Lattice jitter relative to tile spacing (hex layouts only)")
    bounding_radius: Optional[float] = Field(None, gt=0, description="Half-size of a square generation area")
    smoothing_iters: int = Field(2, ge=0, le=20, description="Global Lloyd rounds before regularization")
    erosion_rounds: Optional[int] = Field(None, ge=0, description="Coastline carving rounds")

    def resolved_erosion_rounds(self) -> int:
        if self.erosion_rounds is not None:
            return self.erosion_rounds
        return default_erosion_rounds(self.target_tile_count)


def _validated(map_data: MapData, min_tiles: Optional[int] = None,
               max_tiles: Optional[int] = None) -> MapData:
    validate_map_or_raise(map_data, min_tiles=min_tiles, max_tiles=max_tiles)
    return map_data


def _hex_fallback(options: MapOptions, first_error: MapGenerationError) -> MapResult:
    logger.warning("Irregular map rejected, falling back to hex board",
                   seed=options.seed, target=options.target_tile_count,
                   error=str(first_error).splitlines()[0])

    result = MapResult.capture(
        "hex-fallback",
        lambda: _validated(generate_regular_hex_map(options.target_tile_count, options.seed)),
    )
    if result.ok:
        result.map_data.metadata["fallback_reason"] = str(first_error).splitlines()[0]
        return result

    errors = MapResult(error=first_error).errors() + result.errors()
    exhausted = GenerationExhausted(errors)
    exhausted.__cause__ = result.error
    logger.error("Map generation exhausted", seed=options.seed, errors=len(errors))
    return MapResult.failure(exhausted, result.generator)


def try_generate(options: Optional[MapOptions] = None,
                 source: Optional[Settings] = None, **kwargs) -> MapResult:
    """
    Generate and validate a map without raising engine errors.

    Args:
        options: Generation options (or pass them as keyword arguments)
        source: Settings to read engine defaults from

    Returns:
        MapResult holding either a validated map or the final error
    """
    options = options or MapOptions(**kwargs)
    source = source or default_settings
    logger.info("Map generation requested", **options.model_dump())

    if options.map_type == "standard":
        result = MapResult.capture("hex", lambda: _validated(generate_standard_map(options.seed)))
    elif options.map_type == "expanded-hex":
        result = MapResult.capture(
            "hex",
            lambda: _validated(generate_expanded_hex_map(options.expanded_map_size, options.seed)),
        )
    else:
        min_tiles = math.ceil(options.target_tile_count * source.min_tile_ratio)
        max_tiles = tiles_for_radius(radius_for_tile_count(options.target_tile_count))
        result = MapResult.capture(
            "polygon",
            lambda: _validated(
                generate_polygon_map(
                    layout="delaunay",
                    target=options.target_tile_count,
                    seed=options.seed,
                    irregularity=options.irregularity,
                    smoothing_iters=options.smoothing_iters,
                    erosion_rounds=options.resolved_erosion_rounds(),
                    bounding_radius=options.bounding_radius,
                    source=source,
                ),
                min_tiles=min_tiles,
                max_tiles=max_tiles,
            ),
        ).or_else(lambda error: _hex_fallback(options, error))

    if result.ok:
        result.map_data.metadata.update(
            map_type=options.map_type,
            generator=result.generator,
            fallback=len(result.attempts) > 1,
            attempts=list(result.attempts),
        )
        logger.info("Map generation completed",
                    map_type=options.map_type, generator=result.generator,
                    tiles=len(result.map_data.tiles))
    return result


def generate_map(options: Optional[MapOptions] = None,
                 source: Optional[Settings] = None, **kwargs) -> MapData:
    """
    Generate a validated map.

    Raises:
        ValidationFailed: a hex board failed validation
        GenerationExhausted: an irregular map and its hex fallback both failed
    """
    return try_generate(options, source=source, **kwargs).unwrap()
