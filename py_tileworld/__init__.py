"""
Seeded tile-world synthesis: island height field, biome tiers and
sub-biome region allocation.
"""

from .config import WorldSettings, get_preset, list_presets
from .core import (
    CellRecord,
    GenerationResult,
    SubBiomeConfig,
    SubBiomeType,
    TileType,
    WorldField,
    WorldGenerator,
)

__version__ = "0.1.0"

__all__ = ['WorldSettings', 'get_preset', 'list_presets', 'CellRecord',
           'GenerationResult', 'SubBiomeConfig', 'SubBiomeType', 'TileType',
           'WorldField', 'WorldGenerator']
