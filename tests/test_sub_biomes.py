"""Tests for the sub-biome region allocator."""

import numpy as np
import pytest
from pydantic import ValidationError
from py_tileworld.core.alea_prng import AleaPRNG
from py_tileworld.core.biomes import SubBiomeType, TileType
from py_tileworld.core.errors import ConfigurationError
from py_tileworld.core.sub_biomes import (
    SubBiomeAllocator,
    SubBiomeConfig,
    allocate_sub_biomes,
    validate_sub_biome_configs,
)


def _config(sub_biome=SubBiomeType.FLOWER_FIELD, allowed=(TileType.GRASS,), **kwargs):
    return SubBiomeConfig(sub_biome=sub_biome, allowed_tile_types=set(allowed), **kwargs)


def _is_connected(cells):
    """Orthogonal connectivity of a set of coordinates."""
    cells = set(cells)
    start = next(iter(cells))
    seen = {start}
    stack = [start]
    while stack:
        x, y = stack.pop()
        for n in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if n in cells and n not in seen:
                seen.add(n)
                stack.append(n)
    return seen == cells


class TestSubBiomeConfig:
    """Test region specification validation."""

    def test_min_greater_than_max_clusters(self):
        with pytest.raises(ValidationError):
            _config(min_clusters=3, max_clusters=1)

    def test_min_greater_than_max_size(self):
        with pytest.raises(ValueError):
            _config(min_size=9, max_size=4)

    def test_names_are_accepted(self):
        config = SubBiomeConfig(
            sub_biome="Flower Field",
            allowed_tile_types="grass",
            near_tile_type="water",
            near_radius=2,
        )
        assert config.sub_biome == SubBiomeType.FLOWER_FIELD
        assert config.allowed_tile_types == frozenset({TileType.GRASS})
        assert config.has_proximity_constraint

    def test_unknown_name_rejected(self):
        with pytest.raises(ValidationError):
            SubBiomeConfig(sub_biome="lava_lake", allowed_tile_types=["grass"])

    def test_no_proximity_by_default(self):
        assert not _config().has_proximity_constraint

    def test_unvalidated_config_caught(self):
        bad = SubBiomeConfig.model_construct(
            sub_biome=SubBiomeType.FLOWER_FIELD,
            allowed_tile_types=frozenset({TileType.GRASS}),
            min_clusters=2,
            max_clusters=1,
            min_size=1,
            max_size=1,
            near_tile_type=TileType.UNKNOWN,
            near_radius=0,
        )
        with pytest.raises(ConfigurationError):
            validate_sub_biome_configs([_config(), bad])


class TestAllocation:
    """Test region placement and growth."""

    def test_single_grass_cluster(self, grass_island):
        """One 5-cell region of connected grass, everything else filler."""
        config = _config(min_clusters=1, max_clusters=1, min_size=5, max_size=5)
        report = allocate_sub_biomes(grass_island, [config], AleaPRNG(42))

        assert len(report.regions) == 1
        region = report.regions[0]
        assert region.size == 5
        assert all(grass_island.tile_type_at(x, y) == TileType.GRASS for x, y in region.cells)
        assert _is_connected(region.cells)

        counts = grass_island.count_sub_biomes()
        assert counts[SubBiomeType.FLOWER_FIELD] == 5
        assert counts[SubBiomeType.OAK_FOREST] == 11
        assert counts[SubBiomeType.NONE] == 84

    def test_no_eligible_cells(self, make_world):
        world = make_world(np.full((8, 8), TileType.DEEP_WATER, dtype=np.uint8))
        report = allocate_sub_biomes(world, [_config(min_size=5, max_size=5)], AleaPRNG(1))

        assert report.regions == []
        assert report.stats[0].eligible == 0
        assert report.stats[0].attempts == 0
        assert world.count_sub_biomes() == {SubBiomeType.NONE: 64}

    def test_regions_never_exceed_target(self, grass_field):
        config = _config(min_clusters=4, max_clusters=4, min_size=3, max_size=3)
        report = allocate_sub_biomes(grass_field, [config], AleaPRNG(3))

        assert report.regions
        for region in report.regions:
            assert 1 <= region.size <= 3
            assert _is_connected(region.cells)

    def test_regions_disjoint_across_configs(self, grass_field):
        configs = [
            _config(SubBiomeType.FLOWER_FIELD, min_clusters=3, max_clusters=5, min_size=5, max_size=15),
            _config(SubBiomeType.PEONY_FIELD, min_clusters=3, max_clusters=5, min_size=5, max_size=15),
            _config(SubBiomeType.SUNFLOWER_FIELD, min_clusters=3, max_clusters=5, min_size=5, max_size=15),
        ]
        report = allocate_sub_biomes(grass_field, configs, AleaPRNG(99))

        seen = set()
        for region in report.regions:
            cells = set(region.cells)
            assert len(cells) == region.size
            assert not (cells & seen)
            seen |= cells

        counts = grass_field.count_sub_biomes()
        for sub_biome in (SubBiomeType.FLOWER_FIELD, SubBiomeType.PEONY_FIELD, SubBiomeType.SUNFLOWER_FIELD):
            expected = sum(r.size for r in report.regions_for(sub_biome))
            assert counts.get(sub_biome, 0) == expected

    def test_tiers_unchanged(self, grass_island):
        before = grass_island.tile_types.copy()
        allocate_sub_biomes(grass_island, [_config(min_size=2, max_size=6)], AleaPRNG(5))
        np.testing.assert_array_equal(grass_island.tile_types, before)

    def test_deterministic(self, make_world):
        tiles = np.full((20, 20), TileType.GRASS, dtype=np.uint8)
        tiles[:, :5] = TileType.SAND
        configs = [
            _config(SubBiomeType.FLOWER_FIELD, min_clusters=2, max_clusters=4, min_size=3, max_size=9),
            _config(SubBiomeType.PALM_CLUSTER, allowed=(TileType.SAND,), min_clusters=1, max_clusters=3, min_size=2, max_size=6),
        ]
        first = make_world(tiles)
        second = make_world(tiles)
        report_a = allocate_sub_biomes(first, configs, AleaPRNG(42))
        report_b = allocate_sub_biomes(second, configs, AleaPRNG(42))

        assert [(r.sub_biome, r.cells) for r in report_a.regions] == [
            (r.sub_biome, r.cells) for r in report_b.regions
        ]
        np.testing.assert_array_equal(first.sub_biomes, second.sub_biomes)

    def test_specs_processed_once_each(self, grass_field):
        configs = [
            _config(SubBiomeType.FLOWER_FIELD),
            _config(SubBiomeType.PEONY_FIELD),
            _config(SubBiomeType.MUSHROOM_GROVE),
        ]
        report = allocate_sub_biomes(grass_field, configs, AleaPRNG(8))
        assert sorted(s.config_index for s in report.stats) == [0, 1, 2]

    def test_stale_tags_cleared(self, grass_island):
        grass_island.assign_sub_biome([(0, 0)], SubBiomeType.CRYSTAL_COVE)
        allocate_sub_biomes(grass_island, [], AleaPRNG(1))
        assert grass_island.sub_biome_at(0, 0) == SubBiomeType.NONE


class TestDiscardAndShortfall:
    """Test the commit policy."""

    @pytest.fixture
    def speckled_world(self, make_world):
        """Isolated grass cells at even x and even y, water elsewhere."""
        tiles = np.full((9, 9), TileType.WATER, dtype=np.uint8)
        tiles[::2, ::2] = TileType.GRASS
        return make_world(tiles)

    def test_small_regions_discarded(self, speckled_world):
        """Regions below min_size // 2 never get committed."""
        config = _config(min_clusters=2, max_clusters=2, min_size=6, max_size=6)
        allocator = SubBiomeAllocator(speckled_world, AleaPRNG(4))
        report = allocator.allocate([config])

        stats = report.stats[0]
        assert report.regions == []
        assert stats.attempts == 6
        assert stats.discarded == 6
        assert stats.shortfall == 2
        assert SubBiomeType.FLOWER_FIELD not in speckled_world.count_sub_biomes()

    def test_discarded_cells_stay_reserved(self, speckled_world):
        config = _config(min_clusters=2, max_clusters=2, min_size=6, max_size=6)
        allocator = SubBiomeAllocator(speckled_world, AleaPRNG(4))
        allocator.allocate([config])
        assert int(allocator.reserved.sum()) == 6

    def test_rollback_releases_cells(self, speckled_world):
        config = _config(min_clusters=2, max_clusters=2, min_size=6, max_size=6)
        allocator = SubBiomeAllocator(speckled_world, AleaPRNG(4), rollback_discarded_regions=True)
        report = allocator.allocate([config])
        assert report.stats[0].discarded == 6
        assert int(allocator.reserved.sum()) == 0

    def test_forfeited_cells_get_filler(self, speckled_world):
        config = _config(min_clusters=2, max_clusters=2, min_size=6, max_size=6)
        allocate_sub_biomes(speckled_world, [config], AleaPRNG(4))
        counts = speckled_world.count_sub_biomes()
        assert counts[SubBiomeType.OAK_FOREST] == 25
        assert counts[SubBiomeType.NONE] == 81 - 25

    def test_shortfall_is_not_an_error(self, make_world):
        world = make_world(np.full((3, 3), TileType.GRASS, dtype=np.uint8))
        config = _config(min_clusters=5, max_clusters=5, min_size=50, max_size=60)
        report = allocate_sub_biomes(world, [config], AleaPRNG(2))

        assert report.regions == []
        assert report.stats[0].requested == 5
        assert report.stats[0].shortfall == 5
        assert world.count_sub_biomes() == {SubBiomeType.OAK_FOREST: 9}

    def test_zero_clusters_requested(self, grass_field):
        config = _config(min_clusters=0, max_clusters=0)
        report = allocate_sub_biomes(grass_field, [config], AleaPRNG(2))
        assert report.regions == []
        assert report.stats[0].attempts == 0


class TestProximity:
    """Test the square-window proximity constraint."""

    @pytest.fixture
    def dirt_dot(self, make_world):
        """11x11 grass with a single dirt cell at the center."""
        tiles = np.full((11, 11), TileType.GRASS, dtype=np.uint8)
        tiles[5, 5] = TileType.DIRT
        return make_world(tiles)

    def test_window_is_square(self, dirt_dot):
        config = _config(near_tile_type=TileType.DIRT, near_radius=1)
        mask = SubBiomeAllocator(dirt_dot, AleaPRNG(1)).eligible_mask(config)

        assert int(mask.sum()) == 8
        assert mask[4, 4] and mask[6, 6] and mask[4, 6]  # diagonals count
        assert not mask[5, 5]  # dirt itself is not an allowed tier
        assert not mask[3, 5]

    def test_radius_two(self, dirt_dot):
        config = _config(near_tile_type=TileType.DIRT, near_radius=2)
        mask = SubBiomeAllocator(dirt_dot, AleaPRNG(1)).eligible_mask(config)
        assert int(mask.sum()) == 24

    def test_region_confined_to_window(self, dirt_dot):
        config = _config(
            min_clusters=1, max_clusters=1, min_size=8, max_size=8,
            near_tile_type=TileType.DIRT, near_radius=1,
        )
        report = allocate_sub_biomes(dirt_dot, [config], AleaPRNG(6))

        assert len(report.regions) == 1
        cells = report.regions[0].cells
        assert len(cells) == 8
        assert all(abs(x - 5) <= 1 and abs(y - 5) <= 1 for x, y in cells)

    def test_missing_target_tier(self, grass_field):
        config = _config(near_tile_type=TileType.WATER, near_radius=3)
        report = allocate_sub_biomes(grass_field, [config], AleaPRNG(1))
        assert report.regions == []
        assert report.stats[0].eligible == 0
