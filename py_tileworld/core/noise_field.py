"""
Seeded coherent-noise channels for world synthesis.

Every channel is layered OpenSimplex noise mapped to [0, 1]. Channels use
their own derived sub-seed, so height, object density, wealth, magic and
hostility are independent fields that a seed reproduces exactly.
"""

import numpy as np
import structlog
from dataclasses import dataclass
from typing import Dict
from opensimplex import OpenSimplex

from .errors import ConfigurationError

logger = structlog.get_logger()

HEIGHT = "height"
OBJECT_DENSITY = "object_density"
WEALTH = "wealth"
MAGIC = "magic"
HOSTILITY = "hostility"

# Sub-seed offsets per channel
CHANNEL_OFFSETS: Dict[str, int] = {
    HEIGHT: 0,
    OBJECT_DENSITY: 1013,
    WEALTH: 2027,
    MAGIC: 3041,
    HOSTILITY: 4057,
}


@dataclass
class NoiseOptions:
    """Fractal noise parameters shared by all channels."""

    height_scale: float = 0.08  # Base frequency of the height channel
    attribute_scale: float = 0.12  # Base frequency of the attribute channels
    octaves: int = 4
    persistence: float = 0.5  # Amplitude multiplier per octave
    lacunarity: float = 2.0  # Frequency multiplier per octave

    def __post_init__(self):
        if self.height_scale <= 0 or self.attribute_scale <= 0:
            raise ConfigurationError("Noise scales must be positive")
        if self.octaves < 1:
            raise ConfigurationError("Noise needs at least one octave")
        if self.persistence <= 0 or self.lacunarity <= 0:
            raise ConfigurationError("Persistence and lacunarity must be positive")


class NoiseField:
    """
    Pure evaluation of the five noise channels for one seed.

    Scalar accessors and ``sample_grid`` return the same values; the grid
    variant is what world generation uses.
    """

    def __init__(self, seed: int, options: NoiseOptions = None):
        self.seed = int(seed)
        self.options = options or NoiseOptions()
        self._generators = {
            channel: OpenSimplex(seed=self.seed + offset)
            for channel, offset in CHANNEL_OFFSETS.items()
        }

    def _scale(self, channel: str) -> float:
        if channel == HEIGHT:
            return self.options.height_scale
        return self.options.attribute_scale

    def _octaves(self, channel: str):
        """(frequency, amplitude) per octave, plus the amplitude total."""
        opts = self.options
        frequency = self._scale(channel)
        amplitude = 1.0
        layers = []
        for _ in range(opts.octaves):
            layers.append((frequency, amplitude))
            frequency *= opts.lacunarity
            amplitude *= opts.persistence
        return layers, sum(a for _, a in layers)

    def sample(self, channel: str, x: float, y: float) -> float:
        """Evaluate one channel at a single coordinate."""
        generator = self._generators[channel]
        layers, total_amplitude = self._octaves(channel)

        value = 0.0
        for frequency, amplitude in layers:
            value += generator.noise2(x * frequency, y * frequency) * amplitude

        return float(np.clip((value / total_amplitude + 1.0) * 0.5, 0.0, 1.0))

    def sample_grid(self, channel: str, width: int, height: int) -> np.ndarray:
        """
        Evaluate one channel for the whole grid.

        Returns:
            float64 array of shape (width, height) indexed ``[x, y]``
        """
        generator = self._generators[channel]
        layers, total_amplitude = self._octaves(channel)

        xs = np.arange(width, dtype=np.float64)
        ys = np.arange(height, dtype=np.float64)
        value = np.zeros((width, height), dtype=np.float64)
        for frequency, amplitude in layers:
            # noise2array returns rows indexed by y
            value += generator.noise2array(xs * frequency, ys * frequency).T * amplitude

        return np.clip((value / total_amplitude + 1.0) * 0.5, 0.0, 1.0)

    def height(self, x: float, y: float) -> float:
        return self.sample(HEIGHT, x, y)

    def object_density(self, x: float, y: float) -> float:
        return self.sample(OBJECT_DENSITY, x, y)

    def wealth(self, x: float, y: float) -> float:
        return self.sample(WEALTH, x, y)

    def magic(self, x: float, y: float) -> float:
        return self.sample(MAGIC, x, y)

    def hostility(self, x: float, y: float) -> float:
        return self.sample(HOSTILITY, x, y)

    def sample_all(self, width: int, height: int) -> Dict[str, np.ndarray]:
        """Every channel as a full grid, keyed by channel name."""
        logger.debug("Sampling noise channels", seed=self.seed, width=width, height=height)
        return {channel: self.sample_grid(channel, width, height) for channel in CHANNEL_OFFSETS}
