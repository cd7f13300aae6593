"""
Polygon map generation for Catan-like boards.
"""

from .errors import (
    GenerationExhausted,
    InsufficientPoints,
    MapGenerationError,
    TriangulationCollapsed,
    ValidationFailed,
)
from .generator import MapOptions, generate_map, try_generate
from .models import Edge, MapData, Node, Resource, Tile, TileShape, ValidationResult

__version__ = "0.1.0"

__all__ = ['MapOptions', 'generate_map', 'try_generate',
           'MapData', 'Tile', 'Node', 'Edge', 'Resource', 'TileShape', 'ValidationResult',
           'MapGenerationError', 'InsufficientPoints', 'TriangulationCollapsed',
           'ValidationFailed', 'GenerationExhausted']
