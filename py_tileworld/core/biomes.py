"""
Primary biome tiers, sub-biome tags and the height classifier.

This module implements:
- Threshold-band classification of shaped height into five tiers
- The ordered paint-layer contract handed to tile renderers
- The closed set of sub-biome tags and their default filler mapping
"""

import numpy as np
from enum import Enum, IntEnum
from typing import Dict, Tuple, Union


class TileType(IntEnum):
    """Primary biome tiers, ordered from lowest to highest ground."""

    UNKNOWN = 0  # only used as "no proximity constraint"
    DEEP_WATER = 1
    WATER = 2
    SAND = 3
    GRASS = 4
    DIRT = 5


class SubBiomeType(IntEnum):
    """Sub-biome tags layered onto classified cells."""

    NONE = 0
    SEA_SHELL_CLUSTER = 1
    OAK_FOREST = 2
    ROCKY_LANDS = 3
    MUSHROOM_GROVE = 4
    FLOWER_FIELD = 5
    CRYSTAL_COVE = 6
    PALM_CLUSTER = 7
    COCONUT_PALM_CLUSTER = 8
    SUNFLOWER_FIELD = 9
    PEONY_FIELD = 10
    ROCKY_OUTCROP = 11
    CRYSTAL_OUTCROP = 12


class TileLayer(str, Enum):
    """Paint layers a tile renderer must provide."""

    DEEP_WATER = "deep_water"
    WATER = "water"
    SAND = "sand"
    GRASS = "grass"
    DIRT = "dirt"


TILE_TYPE_NAMES = {
    TileType.UNKNOWN: "Unknown",
    TileType.DEEP_WATER: "Deep Water",
    TileType.WATER: "Water",
    TileType.SAND: "Sand",
    TileType.GRASS: "Grass",
    TileType.DIRT: "Dirt",
}

SUB_BIOME_NAMES = {
    SubBiomeType.NONE: "None",
    SubBiomeType.SEA_SHELL_CLUSTER: "Sea Shell Cluster",
    SubBiomeType.OAK_FOREST: "Oak Forest",
    SubBiomeType.ROCKY_LANDS: "Rocky Lands",
    SubBiomeType.MUSHROOM_GROVE: "Mushroom Grove",
    SubBiomeType.FLOWER_FIELD: "Flower Field",
    SubBiomeType.CRYSTAL_COVE: "Crystal Cove",
    SubBiomeType.PALM_CLUSTER: "Palm Cluster",
    SubBiomeType.COCONUT_PALM_CLUSTER: "Coconut Palm Cluster",
    SubBiomeType.SUNFLOWER_FIELD: "Sunflower Field",
    SubBiomeType.PEONY_FIELD: "Peony Field",
    SubBiomeType.ROCKY_OUTCROP: "Rocky Outcrop",
    SubBiomeType.CRYSTAL_OUTCROP: "Crystal Outcrop",
}

# Lower bounds of WATER, SAND, GRASS and DIRT; each band is [low, high)
HEIGHT_THRESHOLDS = (0.1, 0.2, 0.4, 0.6)
_TIERS_BY_BAND = (
    TileType.DEEP_WATER,
    TileType.WATER,
    TileType.SAND,
    TileType.GRASS,
    TileType.DIRT,
)
_TIER_LOOKUP = np.array([int(t) for t in _TIERS_BY_BAND], dtype=np.uint8)

# Bottom to top: a cell also paints the layer beneath its own
PAINT_LAYERS: Dict[TileType, Tuple[TileLayer, ...]] = {
    TileType.DEEP_WATER: (TileLayer.DEEP_WATER,),
    TileType.WATER: (TileLayer.DEEP_WATER, TileLayer.WATER),
    TileType.SAND: (TileLayer.WATER, TileLayer.SAND),
    TileType.GRASS: (TileLayer.SAND, TileLayer.GRASS),
    TileType.DIRT: (TileLayer.GRASS, TileLayer.DIRT),
}

DEFAULT_SUB_BIOMES: Dict[TileType, SubBiomeType] = {
    TileType.DEEP_WATER: SubBiomeType.NONE,
    TileType.WATER: SubBiomeType.NONE,
    TileType.SAND: SubBiomeType.SEA_SHELL_CLUSTER,
    TileType.GRASS: SubBiomeType.OAK_FOREST,
    TileType.DIRT: SubBiomeType.ROCKY_LANDS,
}

LAND_TILE_TYPES = frozenset({TileType.SAND, TileType.GRASS, TileType.DIRT})
WATER_TILE_TYPES = frozenset({TileType.DEEP_WATER, TileType.WATER})


def classify_height(height: float) -> TileType:
    """
    Classify a shaped height value into its primary biome tier.

    Args:
        height: Shaped (post-falloff) height, nominally in [0, 1]

    Returns:
        TileType for the band the height falls into
    """
    for tier, threshold in zip(_TIERS_BY_BAND, HEIGHT_THRESHOLDS):
        if height < threshold:
            return tier
    return TileType.DIRT


def classify_heights(heights: np.ndarray) -> np.ndarray:
    """Vectorised ``classify_height``; returns a uint8 array of tier values."""
    bands = np.digitize(np.asarray(heights, dtype=np.float64), HEIGHT_THRESHOLDS)
    return _TIER_LOOKUP[bands]


def paint_layers_for(tile_type: Union[TileType, int]) -> Tuple[TileLayer, ...]:
    """Ordered layers a renderer paints for a cell of ``tile_type``."""
    return PAINT_LAYERS.get(TileType(tile_type), ())


def default_sub_biome(tile_type: Union[TileType, int]) -> SubBiomeType:
    """Filler sub-biome for cells no region claimed."""
    return DEFAULT_SUB_BIOMES.get(TileType(tile_type), SubBiomeType.NONE)
