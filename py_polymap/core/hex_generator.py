"""
Regular hexagonal boards in axial coordinates.

Used for the standard 19-tile board, the expanded hex board and as the
deterministic fallback when an irregular map fails validation. Tiles are laid
out as a spiral of rings around the origin; corners shared by adjacent hexes
are deduplicated into nodes by rounded position.
"""

import math
from typing import Dict, List, Optional, Tuple, Union

import structlog

from ..models import Edge, MapData, Node, Tile, TileShape
from .alea_prng import AleaPRNG
from .resources import assign_standard_resources

logger = structlog.get_logger()

HexCoord = Tuple[int, int]

HEX_SIZE = 50.0  # Centre-to-corner distance in layout units
MAX_RADIUS = 10
STANDARD_TILE_COUNT = 19

# Axial direction vectors, walked in this order around a ring
HEX_DIRECTIONS: List[HexCoord] = [
    (-1, 1), (-1, 0), (0, -1),
    (1, -1), (1, 0), (0, 1),
]


def hex_neighbors(hex_coord: HexCoord) -> List[HexCoord]:
    q, r = hex_coord
    return [(q + dq, r + dr) for dq, dr in HEX_DIRECTIONS]


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    dq = a[0] - b[0]
    dr = a[1] - b[1]
    return (abs(dq) + abs(dr) + abs(dq + dr)) // 2


def hex_ring(center: HexCoord, radius: int) -> List[HexCoord]:
    """All hexes at exactly ``radius`` steps from ``center``."""
    if radius == 0:
        return [center]

    # Start 120 degrees behind the first walking direction
    start_dq, start_dr = HEX_DIRECTIONS[4]
    q, r = center[0] + start_dq * radius, center[1] + start_dr * radius
    results = []
    for dq, dr in HEX_DIRECTIONS:
        for _ in range(radius):
            results.append((q, r))
            q, r = q + dq, r + dr
    return results


def hex_spiral(center: HexCoord, radius: int) -> List[HexCoord]:
    """``center`` followed by each ring out to ``radius``."""
    results = [center]
    for ring in range(1, radius + 1):
        results.extend(hex_ring(center, ring))
    return results


def hex_to_pixel(hex_coord: HexCoord, size: float = HEX_SIZE) -> Tuple[float, float]:
    """Centre of a pointy-top hex."""
    q, r = hex_coord
    x = size * (math.sqrt(3) * q + math.sqrt(3) / 2 * r)
    y = size * (3 / 2 * r)
    return (x, y)


def hex_corners(center: Tuple[float, float], size: float = HEX_SIZE) -> List[Tuple[float, float]]:
    """Six corners of a pointy-top hex, counter-clockwise from -30 degrees."""
    corners = []
    for i in range(6):
        angle = math.pi / 3 * i - math.pi / 6
        corners.append((center[0] + size * math.cos(angle),
                        center[1] + size * math.sin(angle)))
    return corners


def tiles_for_radius(radius: int) -> int:
    return 1 + 3 * radius * (radius + 1)


def radius_for_tile_count(target: int, max_radius: int = MAX_RADIUS) -> int:
    """
    Ring count whose board size is nearest ``target``.

    Ties go to the larger board, so a target of 30 yields radius 3 (37 tiles).
    """
    best = 0
    for radius in range(max_radius + 1):
        diff = abs(tiles_for_radius(radius) - target)
        if diff <= abs(tiles_for_radius(best) - target):
            best = radius
        if tiles_for_radius(radius) >= target:
            break
    return best


def build_hex_graph(coords: List[HexCoord], size: float = HEX_SIZE,
                    precision: int = 3) -> MapData:
    """
    Tile/node/edge graph for a set of hexes.

    Resources are left at their defaults; callers assign them afterwards.
    """
    node_keys: Dict[Tuple[float, float], str] = {}
    node_locations: Dict[str, Tuple[float, float]] = {}
    node_tiles: Dict[str, List[str]] = {}

    def get_or_create_node(corner: Tuple[float, float]) -> str:
        key = (round(corner[0], precision), round(corner[1], precision))
        node_id = node_keys.get(key)
        if node_id is None:
            node_id = f"node-{len(node_keys)}"
            node_keys[key] = node_id
            node_locations[node_id] = corner
            node_tiles[node_id] = []
        return node_id

    tiles = []
    for idx, coord in enumerate(coords):
        corners = hex_corners(hex_to_pixel(coord, size), size)
        tile = Tile(
            id=f"tile-{idx}",
            shape=TileShape.HEXAGON,
            nodes=[get_or_create_node(corner) for corner in corners],
            polygon_points=corners,
        )
        for node_id in tile.nodes:
            node_tiles[node_id].append(tile.id)
        tiles.append(tile)

    edges: List[Edge] = []
    edge_index: Dict[frozenset, Edge] = {}
    for tile in tiles:
        for i, node_a in enumerate(tile.nodes):
            node_b = tile.nodes[(i + 1) % len(tile.nodes)]
            pair = frozenset((node_a, node_b))
            edge = edge_index.get(pair)
            if edge is None:
                edge = Edge(id=f"edge-{len(edges)}", node_a=node_a, node_b=node_b,
                            tile_left=tile.id)
                edge_index[pair] = edge
                edges.append(edge)
            else:
                edge.tile_right = tile.id
            tile.edges.append(edge.id)

    nodes = [
        Node(id=node_id, location=node_locations[node_id],
             tiles=node_tiles[node_id], is_boundary=len(node_tiles[node_id]) < 3)
        for node_id in node_keys.values()
    ]
    boundary_nodes = {node.id for node in nodes if node.is_boundary}
    for tile in tiles:
        tile.is_boundary = any(node_id in boundary_nodes for node_id in tile.nodes)
    for edge in edges:
        edge.is_boundary = edge.tile_right is None

    return MapData(tiles=tiles, nodes=nodes, edges=edges)


def generate_regular_hex_map(target: Optional[int] = None,
                             seed: Union[str, int] = "default",
                             prng: Optional[AleaPRNG] = None) -> MapData:
    """
    Generate a hex board with the ring count nearest ``target``.

    Args:
        target: Desired tile count (default: the standard 19-tile board)
        seed: PRNG seed, ignored when ``prng`` is given
        prng: Generator to draw resources from

    Returns:
        Hex MapData with resources and dice assigned
    """
    radius = radius_for_tile_count(target if target is not None else STANDARD_TILE_COUNT)
    prng = prng or AleaPRNG(seed)

    map_data = build_hex_graph(hex_spiral((0, 0), radius))
    assign_standard_resources(map_data.tiles, prng)

    map_data.metadata.update(
        generator="hex",
        radius=radius,
        target_tile_count=target,
        seed=seed,
    )
    logger.info("Hex map generated",
                radius=radius, target=target, tiles=len(map_data.tiles),
                nodes=len(map_data.nodes), edges=len(map_data.edges))
    return map_data


def generate_standard_map(seed: Union[str, int] = "default") -> MapData:
    """The standard 19-tile board."""
    return generate_regular_hex_map(STANDARD_TILE_COUNT, seed)


def generate_expanded_hex_map(size: int = 30, seed: Union[str, int] = "default") -> MapData:
    return generate_regular_hex_map(size, seed)
