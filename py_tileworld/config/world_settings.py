"""
Per-world generation settings.

These models are the configuration provider of the world generator:
dimensions, seed policy, island shape, noise parameters and the ordered
list of sub-biome region specifications.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from typing import Any, Dict, List

from ..core.errors import ConfigurationError
from ..core.noise_field import NoiseOptions
from ..core.sub_biomes import SubBiomeConfig


class NoiseSettings(BaseModel):
    """Fractal noise parameters."""

    height_scale: float = Field(default=0.08, gt=0, description="Base frequency of the height channel")
    attribute_scale: float = Field(default=0.12, gt=0, description="Base frequency of attribute channels")
    octaves: int = Field(default=4, ge=1, le=12, description="Number of noise layers")
    persistence: float = Field(default=0.5, gt=0, description="Amplitude multiplier per octave")
    lacunarity: float = Field(default=2.0, gt=0, description="Frequency multiplier per octave")

    def to_options(self) -> NoiseOptions:
        return NoiseOptions(
            height_scale=self.height_scale,
            attribute_scale=self.attribute_scale,
            octaves=self.octaves,
            persistence=self.persistence,
            lacunarity=self.lacunarity,
        )


class WorldSettings(BaseModel):
    """Everything one generation run is configured by."""

    model_config = ConfigDict(validate_assignment=True)

    world_width: int = Field(default=64, gt=0, description="World width in cells")
    world_height: int = Field(default=64, gt=0, description="World height in cells")
    seed: int = Field(default=0, ge=0, description="Generation seed")
    randomize_seed_on_start: bool = Field(
        default=False, description="Draw a fresh seed on every regenerate"
    )
    island_falloff_power: float = Field(default=2.0, gt=0, description="Coastline sharpness exponent")
    island_land_radius_percent: float = Field(
        default=0.9, gt=0, description="Fraction of the half-extent that can hold land"
    )
    noise: NoiseSettings = Field(default_factory=NoiseSettings)
    sub_biome_configs: List[SubBiomeConfig] = Field(
        default_factory=list, description="Region specifications, shuffled per run"
    )
    rollback_discarded_regions: bool = Field(
        default=False, description="Return cells of discarded regions to the eligible pool"
    )


def load_world_settings(data: Dict[str, Any]) -> WorldSettings:
    """
    Build WorldSettings from plain data.

    Raises:
        ConfigurationError: if the data does not describe a valid world
    """
    try:
        return WorldSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid world settings: {e}") from e
