"""Output graph types handed to the game-state initializer."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple


class Resource(str, Enum):
    ORE = "ore"
    SHEEP = "sheep"
    WOOD = "wood"
    BRICK = "brick"
    WHEAT = "wheat"
    DESERT = "desert"


class TileShape(IntEnum):
    PENTAGON = 5
    HEXAGON = 6
    HEPTAGON = 7


@dataclass
class Tile:
    """A land tile. ``nodes`` are listed in cyclic (counter-clockwise) order."""

    id: str
    shape: int
    resource: Resource = Resource.WOOD
    dice_number: Optional[int] = None
    nodes: List[str] = field(default_factory=list)
    edges: List[str] = field(default_factory=list)
    is_boundary: bool = False
    robber_present: bool = False
    polygon_points: List[Tuple[float, float]] = field(default_factory=list)


@dataclass
class Node:
    """A polygon vertex shared by one to three tiles."""

    id: str
    location: Tuple[float, float]
    tiles: List[str] = field(default_factory=list)
    is_boundary: bool = False


@dataclass
class Edge:
    """A tile border between two nodes."""

    id: str
    node_a: str
    node_b: str
    tile_left: Optional[str] = None
    tile_right: Optional[str] = None
    is_boundary: bool = False


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class MapData:
    """Complete tile/node/edge graph produced by one generation call."""

    tiles: List[Tile]
    nodes: List[Node]
    edges: List[Edge]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def tile_by_id(self) -> Dict[str, Tile]:
        return {tile.id: tile for tile in self.tiles}

    def node_by_id(self) -> Dict[str, Node]:
        return {node.id: node for node in self.nodes}

    def edge_by_id(self) -> Dict[str, Edge]:
        return {edge.id: edge for edge in self.edges}

    def statistics(self) -> Dict[str, Any]:
        """Summarise counts and tile distributions."""
        shapes = Counter(int(tile.shape) for tile in self.tiles)
        resources = Counter(Resource(tile.resource).value for tile in self.tiles)
        return {
            "tiles": len(self.tiles),
            "nodes": len(self.nodes),
            "edges": len(self.edges),
            "interior_nodes": sum(1 for node in self.nodes if len(node.tiles) == 3),
            "boundary_tiles": sum(1 for tile in self.tiles if tile.is_boundary),
            "shapes": dict(sorted(shapes.items())),
            "resources": dict(sorted(resources.items())),
        }
