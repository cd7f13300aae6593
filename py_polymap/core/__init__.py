"""
Core map generation functionality.
"""

from .alea_prng import AleaPRNG
from .context import GenerationContext, PipelineConfig
from .delaunay import Triangulation, triangulate
from .dual_graph import DualGraph, build_dual_graph
from .hex_generator import generate_expanded_hex_map, generate_regular_hex_map, generate_standard_map
from .pipeline import generate_polygon_map
from .result import MapResult
from .validator import validate_map, validate_map_or_raise

__all__ = ['AleaPRNG', 'GenerationContext', 'PipelineConfig', 'Triangulation', 'triangulate',
           'DualGraph', 'build_dual_graph', 'generate_expanded_hex_map', 'generate_regular_hex_map',
           'generate_standard_map', 'generate_polygon_map', 'MapResult',
           'validate_map', 'validate_map_or_raise']
