"""Tests for the island falloff shaper."""

import numpy as np
import pytest
from py_tileworld.core.falloff import falloff_grid, island_falloff, max_land_radius


class TestIslandFalloff:
    """Test radial attenuation."""

    def test_center_is_unattenuated(self):
        assert island_falloff(5, 5, 10, 10, power=2.0, land_radius_percent=0.9) == 1.0
        assert island_falloff(5, 5, 10, 10, power=0.5, land_radius_percent=0.3) == 1.0

    def test_beyond_max_radius_is_zero(self):
        # max radius = 10 * 0.5 * 0.8 = 4
        assert max_land_radius(10, 10, 0.8) == pytest.approx(4.0)
        assert island_falloff(9, 5, 10, 10, power=2.0, land_radius_percent=0.8) == 0.0
        assert island_falloff(0, 0, 10, 10, power=2.0, land_radius_percent=0.8) == 0.0

    def test_exactly_at_max_radius_is_zero(self):
        assert island_falloff(1, 5, 10, 10, power=3.0, land_radius_percent=0.8) == 0.0

    def test_power_shapes_coastline(self):
        """Higher power keeps more land at the same distance."""
        soft = island_falloff(7, 5, 10, 10, power=0.5, land_radius_percent=1.0)
        sharp = island_falloff(7, 5, 10, 10, power=3.0, land_radius_percent=1.0)
        # normalized distance 0.4
        assert soft == pytest.approx(1 - 0.4**0.5)
        assert sharp == pytest.approx(1 - 0.4**3)
        assert sharp > soft

    def test_values_in_unit_interval(self):
        grid = falloff_grid(31, 17, power=1.5, land_radius_percent=0.7)
        assert np.all(grid >= 0.0)
        assert np.all(grid <= 1.0)

    def test_grid_matches_scalar(self):
        width, height = 12, 9
        grid = falloff_grid(width, height, power=2.0, land_radius_percent=0.9)
        assert grid.shape == (width, height)
        for x in range(width):
            for y in range(height):
                expected = island_falloff(x, y, width, height, 2.0, 0.9)
                assert grid[x, y] == pytest.approx(expected, abs=1e-12)

    def test_monotonic_from_center(self):
        grid = falloff_grid(21, 21, power=2.0, land_radius_percent=1.0)
        row = grid[10:, 10]
        assert np.all(np.diff(row) <= 0)

    def test_zero_radius_gives_zero(self):
        assert island_falloff(0, 0, 10, 10, 2.0, 0.0) == 0.0
        assert not np.any(falloff_grid(4, 4, 2.0, 0.0))
