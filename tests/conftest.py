"""Shared fixtures for world generation tests."""

import numpy as np
import pytest

from py_tileworld.core.biomes import TileType
from py_tileworld.core.world_field import WorldField


def build_world(tile_types, seed=None):
    """World field with the given tiers and flat noise channels."""
    tiles = np.asarray(tile_types, dtype=np.uint8)
    zeros = np.zeros(tiles.shape, dtype=np.float64)
    return WorldField(
        heights=zeros,
        object_density=zeros,
        wealth=zeros,
        magic=zeros,
        hostility=zeros,
        tile_types=tiles,
        seed=seed,
    )


@pytest.fixture
def make_world():
    """Factory fixture building a WorldField from a tier grid."""
    return build_world


@pytest.fixture
def grass_island():
    """10x10 deep water with a 4x4 grass block at x, y in [3, 7)."""
    tiles = np.full((10, 10), TileType.DEEP_WATER, dtype=np.uint8)
    tiles[3:7, 3:7] = TileType.GRASS
    return build_world(tiles)


@pytest.fixture
def grass_field():
    """20x20 world made only of grass."""
    return build_world(np.full((20, 20), TileType.GRASS, dtype=np.uint8))
