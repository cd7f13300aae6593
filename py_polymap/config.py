"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine defaults, overridable through ``POLYMAP_*`` environment variables."""

    # Canvas
    width: float = Field(default=1200.0, gt=0, description="Canvas width")
    height: float = Field(default=800.0, gt=0, description="Canvas height")
    margin: float = Field(default=20.0, ge=0, description="Margin inside the canvas")

    # Sampling
    poisson_attempts: int = Field(
        default=30, ge=1, description="Placement attempts per active Poisson-disc point"
    )
    poisson_spacing_factor: float = Field(
        default=0.8, gt=0, description="Poisson min distance as a fraction of sqrt(area/n)"
    )
    hex_spacing_factor: float = Field(
        default=1.1, gt=0, description="Hex lattice spacing as a fraction of sqrt(area/n)"
    )
    points_per_tile: int = Field(
        default=8, ge=1, description="Seed points sampled per requested land tile"
    )
    min_points: int = Field(default=150, ge=3, description="Lower bound on sampled points")

    # Dual graph
    min_angle_deg: float = Field(
        default=20.0, ge=0, lt=60, description="Minimum interior angle of a valid triangle"
    )
    ineligible_deficiency: int = Field(
        default=1, ge=1, description="Missing Voronoi neighbours that make a tile ineligible"
    )
    water_buffer_rings: int = Field(
        default=2, ge=0, description="Rings of water-only tiles around ineligible tiles"
    )

    # Regularization
    max_regularization_iterations: int = Field(
        default=20, ge=0, description="Cap on merge/relax rounds"
    )
    max_area_percent: float = Field(
        default=125.0, gt=100, description="Area outlier threshold above the median"
    )
    min_area_percent: float = Field(
        default=75.0, gt=0, lt=100, description="Area outlier threshold below the median"
    )
    relax_radius: int = Field(
        default=2, ge=0, description="Graph distance relaxed around merge locations"
    )

    # Assembly and acceptance
    node_precision: int = Field(
        default=3, ge=0, description="Decimal places used to deduplicate node positions"
    )
    min_tile_ratio: float = Field(
        default=0.85, gt=0, le=1, description="Irregular maps must reach this share of the target"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    class Config:
        env_prefix = "POLYMAP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
