"""Tests for settings models and sub-biome presets."""

import pytest
from py_tileworld.config import PRESETS, NoiseSettings, get_preset, list_presets, load_world_settings
from py_tileworld.config.config import Settings
from py_tileworld.core.biomes import LAND_TILE_TYPES
from py_tileworld.core.errors import ConfigurationError
from py_tileworld.core.noise_field import NoiseOptions


class TestPresets:
    """Test the named region specification presets."""

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_every_preset_validates(self, name):
        configs = get_preset(name)
        assert len(configs) == len(PRESETS[name])
        for config in configs:
            assert config.allowed_tile_types <= LAND_TILE_TYPES

    def test_list_presets(self):
        assert "none" in list_presets()
        assert list_presets() == sorted(list_presets())

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            get_preset("volcanic_isle")


class TestWorldSettings:
    """Test per-world settings loading."""

    def test_load_from_plain_data(self):
        settings = load_world_settings(
            {
                "world_width": 32,
                "world_height": 16,
                "seed": 11,
                "sub_biome_configs": PRESETS["crystal_isle"],
            }
        )
        assert (settings.world_width, settings.world_height) == (32, 16)
        assert len(settings.sub_biome_configs) == 3

    def test_bad_region_spec_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            load_world_settings(
                {
                    "sub_biome_configs": [
                        {"sub_biome": "oak_forest", "allowed_tile_types": ["grass"], "min_size": 5, "max_size": 2}
                    ]
                }
            )

    def test_negative_seed_rejected(self):
        with pytest.raises(ConfigurationError):
            load_world_settings({"seed": -1})

    def test_noise_settings_to_options(self):
        options = NoiseSettings(octaves=3, lacunarity=2.5).to_options()
        assert isinstance(options, NoiseOptions)
        assert options.octaves == 3
        assert options.lacunarity == 2.5


class TestAppSettings:
    """Test environment driven application settings."""

    def test_cors_origins_split(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.test, http://b.test")
        assert Settings().cors_origins == ["http://a.test", "http://b.test"]

    def test_world_size_limits_from_env(self, monkeypatch):
        monkeypatch.setenv("MAX_WORLD_WIDTH", "128")
        assert Settings().max_world_width == 128
