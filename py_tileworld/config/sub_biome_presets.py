"""
Named sub-biome presets.

Each preset is an ordered list of region specifications; the generator
shuffles them per run, so the order here carries no meaning.
"""

from typing import Dict, List

from ..core.errors import ConfigurationError
from ..core.sub_biomes import SubBiomeConfig

PRESETS: Dict[str, List[dict]] = {
    "none": [],
    "temperate_isle": [
        {
            "sub_biome": "flower_field",
            "allowed_tile_types": ["grass"],
            "min_clusters": 2,
            "max_clusters": 4,
            "min_size": 6,
            "max_size": 14,
        },
        {
            "sub_biome": "mushroom_grove",
            "allowed_tile_types": ["grass", "dirt"],
            "min_clusters": 1,
            "max_clusters": 2,
            "min_size": 4,
            "max_size": 10,
            "near_tile_type": "dirt",
            "near_radius": 2,
        },
        {
            "sub_biome": "sunflower_field",
            "allowed_tile_types": ["grass"],
            "min_clusters": 1,
            "max_clusters": 2,
            "min_size": 5,
            "max_size": 12,
        },
        {
            "sub_biome": "peony_field",
            "allowed_tile_types": ["grass"],
            "min_clusters": 0,
            "max_clusters": 2,
            "min_size": 4,
            "max_size": 8,
        },
        {
            "sub_biome": "rocky_outcrop",
            "allowed_tile_types": ["dirt"],
            "min_clusters": 1,
            "max_clusters": 3,
            "min_size": 3,
            "max_size": 9,
        },
    ],
    "tropical_isle": [
        {
            "sub_biome": "palm_cluster",
            "allowed_tile_types": ["sand"],
            "min_clusters": 2,
            "max_clusters": 5,
            "min_size": 4,
            "max_size": 10,
            "near_tile_type": "water",
            "near_radius": 2,
        },
        {
            "sub_biome": "coconut_palm_cluster",
            "allowed_tile_types": ["sand", "grass"],
            "min_clusters": 1,
            "max_clusters": 3,
            "min_size": 4,
            "max_size": 8,
        },
        {
            "sub_biome": "flower_field",
            "allowed_tile_types": ["grass"],
            "min_clusters": 1,
            "max_clusters": 3,
            "min_size": 6,
            "max_size": 12,
        },
    ],
    "crystal_isle": [
        {
            "sub_biome": "crystal_cove",
            "allowed_tile_types": ["sand"],
            "min_clusters": 1,
            "max_clusters": 3,
            "min_size": 3,
            "max_size": 8,
            "near_tile_type": "water",
            "near_radius": 1,
        },
        {
            "sub_biome": "crystal_outcrop",
            "allowed_tile_types": ["dirt"],
            "min_clusters": 1,
            "max_clusters": 3,
            "min_size": 3,
            "max_size": 7,
        },
        {
            "sub_biome": "mushroom_grove",
            "allowed_tile_types": ["grass"],
            "min_clusters": 1,
            "max_clusters": 2,
            "min_size": 5,
            "max_size": 10,
        },
    ],
}


def list_presets() -> List[str]:
    return sorted(PRESETS)


def get_preset(name: str) -> List[SubBiomeConfig]:
    """
    Region specifications of a named preset.

    Raises:
        ConfigurationError: if no preset has that name
    """
    if name not in PRESETS:
        raise ConfigurationError(
            f"Unknown sub-biome preset {name!r}; available: {', '.join(list_presets())}"
        )
    return [SubBiomeConfig.model_validate(entry) for entry in PRESETS[name]]
