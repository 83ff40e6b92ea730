"""
Radial island falloff.

Shaped height is ``raw * falloff``: one at the world center, dropping to
zero at ``max_radius`` so the map edges always sink to deep water.
"""

import math
import numpy as np


def max_land_radius(width: int, height: int, land_radius_percent: float) -> float:
    """Radius beyond which falloff is zero."""
    return min(width, height) * 0.5 * land_radius_percent


def _clamp01(value):
    return min(max(value, 0.0), 1.0)


def island_falloff(
    x: float,
    y: float,
    width: int,
    height: int,
    power: float,
    land_radius_percent: float,
) -> float:
    """
    Falloff factor for a single cell.

    Args:
        x, y: Cell coordinate
        width, height: World dimensions
        power: Coastline exponent (> 1 sharpens, < 1 softens)
        land_radius_percent: Fraction of the half-extent that holds land

    Returns:
        Attenuation factor in [0, 1]
    """
    max_radius = max_land_radius(width, height, land_radius_percent)
    if max_radius <= 0:
        return 0.0

    distance = math.hypot(x - width / 2.0, y - height / 2.0)
    normalized = _clamp01(distance / max_radius)
    return _clamp01(1.0 - normalized**power)


def falloff_grid(
    width: int, height: int, power: float, land_radius_percent: float
) -> np.ndarray:
    """Falloff for every cell, as a float64 array indexed ``[x, y]``."""
    max_radius = max_land_radius(width, height, land_radius_percent)
    if max_radius <= 0:
        return np.zeros((width, height), dtype=np.float64)

    xs = np.arange(width, dtype=np.float64)[:, np.newaxis]
    ys = np.arange(height, dtype=np.float64)[np.newaxis, :]
    distance = np.hypot(xs - width / 2.0, ys - height / 2.0)
    normalized = np.clip(distance / max_radius, 0.0, 1.0)
    return np.clip(1.0 - normalized**power, 0.0, 1.0)
