"""
Resource and dice number assignment.

Hex boards draw from the standard 19-tile distribution; irregular boards place
exactly one desert and draw the rest at random. The desert never carries a
dice number and starts with the robber.
"""

from typing import List

import structlog

from ..models import Resource, Tile
from .alea_prng import AleaPRNG

logger = structlog.get_logger()

# Standard distribution for a 19-tile board
STANDARD_RESOURCES = (
    [Resource.WOOD] * 4
    + [Resource.BRICK] * 3
    + [Resource.SHEEP] * 4
    + [Resource.WHEAT] * 4
    + [Resource.ORE] * 3
    + [Resource.DESERT]
)

# Dice numbers excluding 7
STANDARD_DICE = [2, 3, 3, 4, 4, 5, 5, 6, 6, 8, 8, 9, 9, 10, 10, 11, 11, 12]

PRODUCING_RESOURCES = [
    Resource.WOOD,
    Resource.BRICK,
    Resource.SHEEP,
    Resource.WHEAT,
    Resource.ORE,
]


def _make_desert(tile: Tile) -> None:
    tile.resource = Resource.DESERT
    tile.dice_number = None
    tile.robber_present = True


def assign_standard_resources(tiles: List[Tile], prng: AleaPRNG) -> None:
    """
    Assign the standard shuffled distribution in tile order.

    Tiles beyond the first 19 get a random producing resource and a random
    dice number from the standard list.
    """
    resources = prng.shuffle(STANDARD_RESOURCES)
    dice = prng.shuffle(STANDARD_DICE)

    dice_idx = 0
    for tile, resource in zip(tiles, resources):
        if resource == Resource.DESERT:
            _make_desert(tile)
        else:
            tile.resource = resource
            tile.dice_number = dice[dice_idx]
            tile.robber_present = False
            dice_idx += 1

    for tile in tiles[len(resources):]:
        tile.resource = prng.choice(PRODUCING_RESOURCES)
        tile.dice_number = prng.choice(STANDARD_DICE)
        tile.robber_present = False

    logger.debug("Standard resources assigned", tiles=len(tiles))


def assign_random_resources(tiles: List[Tile], prng: AleaPRNG) -> None:
    """One desert at a random tile; every other tile draws resource and dice."""
    if not tiles:
        return

    desert_idx = prng.randint(0, len(tiles) - 1)
    for idx, tile in enumerate(tiles):
        if idx == desert_idx:
            _make_desert(tile)
            continue
        tile.resource = prng.choice(PRODUCING_RESOURCES)
        tile.dice_number = prng.choice(STANDARD_DICE)
        tile.robber_present = False

    logger.debug("Random resources assigned", tiles=len(tiles), desert=tiles[desert_idx].id)
