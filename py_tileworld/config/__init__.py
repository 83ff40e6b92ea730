"""
Configuration modules for world generation.
"""

from .config import Settings, settings
from .sub_biome_presets import PRESETS, get_preset, list_presets
from .world_settings import NoiseSettings, WorldSettings, load_world_settings

__all__ = [
    'Settings', 'settings', 'PRESETS', 'get_preset', 'list_presets',
    'NoiseSettings', 'WorldSettings', 'load_world_settings',
]
