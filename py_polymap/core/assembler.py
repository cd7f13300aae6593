"""
Conversion of the internal dual graph into Tile/Node/Edge records.

Land tiles become Tiles. Their dual vertices become Nodes, deduplicated by
rounded position, and the dual edges along their perimeters become Edges
annotated with the (at most two) tiles they separate.
"""

from collections import defaultdict
from typing import Dict, List, Set, Tuple

import structlog

from ..models import Edge, MapData, Node, Tile, TileShape
from .context import GenerationContext
from .geometry import polar_angle

logger = structlog.get_logger()

NodeKey = Tuple[float, float]
MAX_NODE_TILES = 3


def _clamp_shape(sides: int) -> int:
    return max(TileShape.PENTAGON, min(TileShape.HEPTAGON, sides))


class GraphAssembler:
    """Builds MapData from a shaped GenerationContext."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.graph = context.graph
        self.precision = context.config.node_precision

        self.locations: Dict[NodeKey, Tuple[float, float]] = {}
        self.adjacency: Dict[NodeKey, Set[NodeKey]] = defaultdict(set)

    def _key(self, triangle: int) -> NodeKey:
        x, y = self.graph.centroids[triangle]
        return (round(float(x), self.precision), round(float(y), self.precision))

    def _collect_nodes(self, tiles: Set[int]) -> Dict[int, NodeKey]:
        """Deduplicate the dual vertices around ``tiles`` by rounded position."""
        triangle_keys = {}
        for tile in sorted(tiles):
            for triangle in self.graph.tiles[tile]:
                if triangle in triangle_keys:
                    continue
                key = self._key(triangle)
                triangle_keys[triangle] = key
                if key not in self.locations:
                    x, y = self.graph.centroids[triangle]
                    self.locations[key] = (float(x), float(y))

        for t1, t2 in self.graph.dual_edges:
            if t1 in triangle_keys and t2 in triangle_keys:
                k1, k2 = triangle_keys[t1], triangle_keys[t2]
                if k1 != k2:
                    self.adjacency[k1].add(k2)
                    self.adjacency[k2].add(k1)
        return triangle_keys

    def _sorted_tile_nodes(self, tile: int, triangle_keys: Dict[int, NodeKey]) -> List[NodeKey]:
        center = self.graph.points[tile]
        keys = []
        for triangle in self.graph.tiles[tile]:
            key = triangle_keys[triangle]
            if key not in keys:
                keys.append(key)
        return sorted(keys, key=lambda k: (polar_angle(center, self.locations[k]), k))

    def walk_perimeter(self, nodes: List[NodeKey]) -> List[NodeKey]:
        """
        Re-walk a tile perimeter edge by edge.

        Starts at the first node and repeatedly follows an edge to an unvisited
        node of the same tile, preferring the next node counter-clockwise. Falls
        back to the angular order when the walk cannot visit every node.
        """
        if len(nodes) < 3:
            return list(nodes)

        position = {key: idx for idx, key in enumerate(nodes)}
        members = set(nodes)
        order = [nodes[0]]
        visited = {nodes[0]}

        while len(order) < len(nodes):
            current = order[-1]
            options = [n for n in self.adjacency[current] if n in members and n not in visited]
            if not options:
                break
            step = min(options, key=lambda n: (position[n] - position[current]) % len(nodes))
            order.append(step)
            visited.add(step)

        if len(order) != len(nodes):
            return list(nodes)
        return order

    def assemble(self) -> MapData:
        """
        Build the output graph for the context's land tiles.

        Returns:
            MapData with deterministic sequential IDs
        """
        ctx = self.context
        land = sorted(ctx.land)
        triangle_keys = self._collect_nodes(set(ctx.land) | set(ctx.water))

        tile_ids = {tile: f"tile-{k}" for k, tile in enumerate(land)}
        tile_nodes: Dict[int, List[NodeKey]] = {
            tile: self._sorted_tile_nodes(tile, triangle_keys) for tile in land
        }

        node_tiles: Dict[NodeKey, List[str]] = defaultdict(list)
        for tile in land:
            for key in tile_nodes[tile]:
                node_tiles[key].append(tile_ids[tile])

        overfull = {key for key, tiles in node_tiles.items() if len(tiles) > MAX_NODE_TILES}
        if overfull:
            logger.warning("Dropping nodes touching more than three tiles", count=len(overfull))
            for tile in land:
                tile_nodes[tile] = [k for k in tile_nodes[tile] if k not in overfull]

        kept_keys = [key for key in self.locations
                     if key in node_tiles and key not in overfull]
        node_ids = {key: f"node-{k}" for k, key in enumerate(kept_keys)}

        nodes = [
            Node(
                id=node_ids[key],
                location=self.locations[key],
                tiles=list(node_tiles[key]),
                is_boundary=len(node_tiles[key]) < MAX_NODE_TILES,
            )
            for key in kept_keys
        ]

        edges: List[Edge] = []
        edge_index: Dict[frozenset, Edge] = {}
        tiles: List[Tile] = []

        for tile in land:
            order = self.walk_perimeter(tile_nodes[tile])
            tile_edges = []
            for i, a in enumerate(order):
                b = order[(i + 1) % len(order)]
                if a == b or b not in self.adjacency[a]:
                    continue
                pair = frozenset((a, b))
                edge = edge_index.get(pair)
                if edge is None:
                    edge = Edge(id=f"edge-{len(edges)}", node_a=node_ids[a], node_b=node_ids[b],
                                tile_left=tile_ids[tile])
                    edge_index[pair] = edge
                    edges.append(edge)
                elif edge.tile_right is None and edge.tile_left != tile_ids[tile]:
                    edge.tile_right = tile_ids[tile]
                if edge.id not in tile_edges:
                    tile_edges.append(edge.id)

            boundary = (len(tile_edges) < len(order)
                        or any(len(node_tiles[key]) < MAX_NODE_TILES for key in order))
            sides = len(order)
            tiles.append(Tile(
                id=tile_ids[tile],
                shape=_clamp_shape(sides) if boundary else sides,
                nodes=[node_ids[key] for key in order],
                edges=tile_edges,
                is_boundary=boundary,
                polygon_points=[self.locations[key] for key in order],
            ))

        for edge in edges:
            edge.is_boundary = edge.tile_right is None

        stats = {
            "tiles": len(tiles),
            "nodes": len(nodes),
            "edges": len(edges),
            "boundary_tiles": sum(1 for t in tiles if t.is_boundary),
            "dropped_nodes": len(overfull),
        }
        logger.info("Graph assembled", **stats)

        return MapData(tiles=tiles, nodes=nodes, edges=edges,
                       metadata={"assembly": stats})
