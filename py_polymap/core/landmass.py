"""
Land placement on the regularized tiling.

Picks the eligible tile nearest the map centre as the seed, grows a connected
landmass from it, carves the coastline with erosion/accretion rounds, derives
the surrounding water and drops land tiles cut off by water on every side.
"""

from typing import List, Optional, Set

import numpy as np
import structlog
from scipy.spatial import cKDTree

from .context import GenerationContext
from .geometry import distance

logger = structlog.get_logger()

RING_LAYOUTS = ("standard",)


class LandmassShaper:
    """Selects and reshapes the land tiles of a GenerationContext."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.graph = context.graph
        self.prng = context.prng
        self.land: Set[int] = set()
        self.water: Set[int] = set()

    def _land_eligible(self, tile: int) -> bool:
        return self.graph.is_land_eligible(tile)

    def find_center_tile(self) -> Optional[int]:
        """Land-eligible tile whose point is nearest the bounds centre."""
        candidates = [i for i in range(self.graph.n_points) if self._land_eligible(i)]
        if not candidates:
            return None
        tree = cKDTree(self.graph.points[candidates])
        _, idx = tree.query(np.array(self.context.bounds.center))
        return candidates[int(idx)]

    def grow_rings(self, seed: int) -> Set[int]:
        """Seed plus its first and second neighbour rings."""
        land = {seed}
        ring1 = [n for n in self.graph.tile_neighbors[seed] if self._land_eligible(n)]
        land.update(ring1)
        ring2 = set()
        for tile in ring1:
            for neighbor in self.graph.tile_neighbors[tile]:
                if neighbor not in land and self._land_eligible(neighbor):
                    ring2.add(neighbor)
        land.update(ring2)
        self.land = land
        return land

    def grow_frontier(self, seed: int, target: int) -> Set[int]:
        """Random frontier expansion until ``target`` tiles or the frontier runs dry."""
        land = {seed}
        frontier = [seed]

        while len(land) < target and frontier:
            current = frontier.pop(int(self.prng.random() * len(frontier)))
            neighbors = [n for n in self.graph.tile_neighbors[current] if self._land_eligible(n)]
            for neighbor in self.prng.shuffle(neighbors):
                if neighbor not in land and len(land) < target:
                    land.add(neighbor)
                    frontier.append(neighbor)

        if len(land) < target:
            logger.warning("Frontier exhausted before reaching target",
                           target=target, land=len(land))
        self.land = land
        return land

    def shore_tiles(self) -> List[int]:
        return [t for t in sorted(self.land)
                if any(n not in self.land for n in self.graph.tile_neighbors[t])]

    def erode(self, seed: int, rounds: int) -> int:
        """
        Run erosion/accretion rounds around ``seed``.

        Each round removes the shore tile nearest the seed and adds a random
        eligible non-land neighbour of the shore tile farthest from it. When
        nothing can be added the removed tile is put back.

        Returns:
            Number of rounds that changed the coastline
        """
        points = self.graph.points
        origin = points[seed]
        changed = 0

        for _ in range(rounds):
            shore = self.shore_tiles()
            if not shore:
                break

            closest = min(shore, key=lambda t: (distance(origin, points[t]), t))
            self.land.discard(closest)

            new_shore = self.shore_tiles()
            if not new_shore:
                self.land.add(closest)
                break

            farthest = max(new_shore, key=lambda t: (distance(origin, points[t]), -t))
            additions = [n for n in self.graph.tile_neighbors[farthest]
                         if n not in self.land and self._land_eligible(n)]
            if not additions:
                self.land.add(closest)
                continue

            self.land.add(self.prng.choice(additions))
            changed += 1

        return changed

    def derive_water(self) -> Set[int]:
        """Valid tiles bordering land that are not land themselves."""
        water = set()
        for tile in self.land:
            for neighbor in self.graph.tile_neighbors[tile]:
                if neighbor not in self.land and neighbor in self.graph.valid_tiles:
                    water.add(neighbor)
        self.water = water
        return water

    def _water_runs(self, tile: int) -> int:
        """Contiguous angular runs of water among the (angle-sorted) neighbours."""
        flags = [n in self.water for n in self.graph.tile_neighbors[tile]]
        if all(flags):
            return 1
        return sum(1 for k in range(len(flags)) if flags[k] and not flags[k - 1])

    def repair_isolated_tiles(self) -> int:
        """
        Reclassify land tiles whose water neighbours are not one contiguous run.

        Only land tiles are inspected. A flagged tile surrounded entirely by
        water becomes water and stays in the water set; any other flagged tile
        keeps its land status. Water tiles are never promoted to land.

        Returns:
            Number of tiles moved from land to water
        """
        to_water = []
        split = 0
        for tile in sorted(self.land):
            neighbors = self.graph.tile_neighbors[tile]
            if len(neighbors) < 2:
                continue
            if all(n in self.water for n in neighbors):
                to_water.append(tile)
            elif self._water_runs(tile) >= 2:
                split += 1

        for tile in to_water:
            self.land.discard(tile)
            self.water.add(tile)

        if to_water or split:
            logger.info("Isolated tiles checked", to_water=len(to_water), split_kept=split)
        return len(to_water)

    def shape(self, layout: str, target: int, erosion_rounds: int) -> Set[int]:
        """
        Run seed selection, growth, erosion, water derivation and repair.

        Args:
            layout: "standard" grows exactly two rings; other layouts grow a
                random frontier and erode it
            target: Land tile target for frontier growth
            erosion_rounds: Coastline carving rounds

        Returns:
            The land tile set (also stored on the context)
        """
        ctx = self.context
        seed = self.find_center_tile()
        if seed is None:
            logger.warning("No land-eligible tiles", points=self.graph.n_points)
            ctx.land, ctx.water, ctx.center_tile = set(), set(), None
            return set()

        if layout in RING_LAYOUTS:
            self.grow_rings(seed)
            eroded = 0
        else:
            self.grow_frontier(seed, target)
            eroded = self.erode(seed, erosion_rounds)

        self.derive_water()
        repaired = self.repair_isolated_tiles()

        ctx.land = set(self.land)
        ctx.water = set(self.water)
        ctx.center_tile = seed
        ctx.stats.update(land_tiles=len(self.land), water_tiles=len(self.water),
                         erosion_rounds_applied=eroded, repaired_tiles=repaired)

        logger.info("Landmass shaped",
                    layout=layout, seed_tile=seed, land=len(self.land),
                    water=len(self.water), eroded=eroded, repaired=repaired)
        return ctx.land
