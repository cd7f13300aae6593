"""
Structural validation of generated maps.

Checks run in a fixed order and every violation is collected, so a failed
result carries the complete error list rather than the first problem found.
"""

from collections import deque
from typing import List, Optional

import structlog

from ..errors import ValidationFailed
from ..models import Edge, MapData, TileShape, ValidationResult

logger = structlog.get_logger()

MIN_NODE_TILES = 1
MAX_NODE_TILES = 3
INTERIOR_SHAPES = {int(shape) for shape in TileShape}


def _check_unique_ids(map_data: MapData, errors: List[str]) -> None:
    for label, items in (("tile", map_data.tiles), ("node", map_data.nodes),
                         ("edge", map_data.edges)):
        ids = [item.id for item in items]
        if len(set(ids)) != len(ids):
            errors.append(f"Duplicate {label} IDs found")


def _check_nodes(map_data: MapData, errors: List[str]) -> None:
    tiles = map_data.tile_by_id()

    for node in map_data.nodes:
        if not MIN_NODE_TILES <= len(node.tiles) <= MAX_NODE_TILES:
            errors.append(
                f"Node {node.id} has invalid tile count: {len(node.tiles)} (must be 1-3)"
            )
        for tile_id in node.tiles:
            tile = tiles.get(tile_id)
            if tile is None:
                errors.append(f"Node {node.id} references non-existent tile {tile_id}")
            elif node.id not in tile.nodes:
                errors.append(
                    f"Node {node.id} references tile {tile_id}, "
                    f"but tile doesn't reference node back"
                )


def _check_tiles(map_data: MapData, errors: List[str]) -> None:
    nodes = map_data.node_by_id()
    edge_ids = {edge.id for edge in map_data.edges}

    for tile in map_data.tiles:
        for node_id in tile.nodes:
            node = nodes.get(node_id)
            if node is None:
                errors.append(f"Tile {tile.id} references non-existent node {node_id}")
            elif tile.id not in node.tiles:
                errors.append(
                    f"Tile {tile.id} references node {node_id}, "
                    f"but node doesn't reference tile back"
                )

        for edge_id in tile.edges:
            if edge_id not in edge_ids:
                errors.append(f"Tile {tile.id} references non-existent edge {edge_id}")

        if not tile.is_boundary:
            if len(tile.nodes) != tile.shape:
                errors.append(f"Tile {tile.id} has shape {tile.shape} but {len(tile.nodes)} nodes")
            if len(tile.edges) != tile.shape:
                errors.append(f"Tile {tile.id} has shape {tile.shape} but {len(tile.edges)} edges")
            if tile.shape not in INTERIOR_SHAPES:
                errors.append(f"Interior tile {tile.id} has unsupported shape {tile.shape}")
        else:
            if len(tile.nodes) < 3:
                errors.append(f"Boundary tile {tile.id} has {len(tile.nodes)} nodes (must be >= 3)")
            if len(tile.edges) < 3:
                errors.append(f"Boundary tile {tile.id} has {len(tile.edges)} edges (must be >= 3)")

        if tile.shape < 3:
            errors.append(f"Tile {tile.id} has invalid shape {tile.shape} (must be >= 3)")


def _check_edges(map_data: MapData, tile_ids: set, errors: List[str]) -> None:
    node_ids = {node.id for node in map_data.nodes}

    for edge in map_data.edges:
        for node_id in (edge.node_a, edge.node_b):
            if node_id not in node_ids:
                errors.append(f"Edge {edge.id} references non-existent node {node_id}")
        for tile_id in (edge.tile_left, edge.tile_right):
            if tile_id is not None and tile_id not in tile_ids:
                errors.append(f"Edge {edge.id} references non-existent tile {tile_id}")
        if edge.node_a == edge.node_b:
            errors.append(f"Edge {edge.id} has same node for both endpoints")


def _check_connectivity(map_data: MapData, errors: List[str]) -> None:
    """Breadth-first search over tiles sharing a node."""
    if not map_data.tiles:
        return

    tiles = map_data.tile_by_id()
    nodes = map_data.node_by_id()
    start = map_data.tiles[0].id
    visited = {start}
    queue = deque([start])

    while queue:
        current = tiles[queue.popleft()]
        for node_id in current.nodes:
            node = nodes.get(node_id)
            if node is None:
                continue
            for tile_id in node.tiles:
                if tile_id not in visited and tile_id in tiles:
                    visited.add(tile_id)
                    queue.append(tile_id)

    if len(visited) != len(map_data.tiles):
        errors.append(
            f"Map is not fully connected: {len(visited)}/{len(map_data.tiles)} tiles reachable"
        )


def _check_duplicate_edges(map_data: MapData, errors: List[str]) -> None:
    seen = set()
    for edge in map_data.edges:
        pair = frozenset((edge.node_a, edge.node_b))
        if pair in seen:
            errors.append(f"Duplicate edge found between nodes {edge.node_a} and {edge.node_b}")
        seen.add(pair)


def validate_map(map_data: MapData, min_tiles: Optional[int] = None,
                 max_tiles: Optional[int] = None) -> ValidationResult:
    """
    Check the structural invariants of a generated map.

    Args:
        map_data: Map to check
        min_tiles: Optional lower bound on the tile count
        max_tiles: Optional upper bound on the tile count

    Returns:
        ValidationResult listing every violation found
    """
    errors: List[str] = []

    if not map_data.tiles:
        errors.append("Map has no tiles")
    elif min_tiles is not None and len(map_data.tiles) < min_tiles:
        errors.append(f"Map has {len(map_data.tiles)} tiles (must be >= {min_tiles})")
    elif max_tiles is not None and len(map_data.tiles) > max_tiles:
        errors.append(f"Map has {len(map_data.tiles)} tiles (must be <= {max_tiles})")

    tile_ids = {tile.id for tile in map_data.tiles}

    _check_unique_ids(map_data, errors)
    _check_nodes(map_data, errors)
    _check_tiles(map_data, errors)
    _check_edges(map_data, tile_ids, errors)
    _check_connectivity(map_data, errors)
    _check_duplicate_edges(map_data, errors)

    return ValidationResult(valid=not errors, errors=errors)


def validate_map_or_raise(map_data: MapData, min_tiles: Optional[int] = None,
                          max_tiles: Optional[int] = None) -> None:
    """Raise ValidationFailed carrying every error when the map is invalid."""
    result = validate_map(map_data, min_tiles=min_tiles, max_tiles=max_tiles)
    if not result.valid:
        logger.warning("Map validation failed",
                       error_count=len(result.errors), first_error=result.errors[0])
        raise ValidationFailed(result.errors)


def are_nodes_adjacent(node_a: str, node_b: str, edges: List[Edge]) -> bool:
    return find_edge(node_a, node_b, edges) is not None


def get_adjacent_nodes(node_id: str, edges: List[Edge]) -> List[str]:
    adjacent = []
    for edge in edges:
        if edge.node_a == node_id:
            adjacent.append(edge.node_b)
        elif edge.node_b == node_id:
            adjacent.append(edge.node_a)
    return adjacent


def get_node_edges(node_id: str, edges: List[Edge]) -> List[Edge]:
    return [edge for edge in edges if node_id in (edge.node_a, edge.node_b)]


def find_edge(node_a: str, node_b: str, edges: List[Edge]) -> Optional[Edge]:
    """Edge joining two nodes in either direction, if any."""
    for edge in edges:
        if {edge.node_a, edge.node_b} == {node_a, node_b}:
            return edge
    return None
