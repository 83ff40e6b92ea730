"""
Core world generation functionality.
"""

from .alea_prng import AleaPRNG
from .biomes import SubBiomeType, TileLayer, TileType, classify_height, classify_heights
from .errors import ConfigurationError, MissingResourceError, WorldDataError, WorldGenerationError
from .falloff import falloff_grid, island_falloff
from .noise_field import NoiseField, NoiseOptions
from .sub_biomes import AllocationReport, SubBiomeAllocator, SubBiomeConfig, SubBiomeRegion
from .world_field import CellRecord, WorldField
from .world_generator import GenerationResult, WorldGenerator

__all__ = ['AleaPRNG', 'SubBiomeType', 'TileLayer', 'TileType', 'classify_height',
           'classify_heights', 'ConfigurationError', 'MissingResourceError',
           'WorldDataError', 'WorldGenerationError', 'falloff_grid', 'island_falloff',
           'NoiseField', 'NoiseOptions', 'AllocationReport', 'SubBiomeAllocator',
           'SubBiomeConfig', 'SubBiomeRegion', 'CellRecord', 'WorldField',
           'GenerationResult', 'WorldGenerator']
