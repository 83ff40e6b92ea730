"""
World generation pipeline.

Runs the two passes of a world build and publishes the result:
1. Noise channels, island falloff and tier classification for every cell
2. Sub-biome allocation over the completed field

A new World Field replaces the published one only after both passes and
object placement succeed; any failure leaves the previous world in place.
"""

import secrets
import structlog
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..config.world_settings import WorldSettings
from ..storage.snapshot import (
    load_snapshot,
    save_snapshot,
    snapshot_from_world,
    world_from_snapshot,
)
from .alea_prng import AleaPRNG
from .biomes import TILE_TYPE_NAMES, TileLayer, classify_heights
from .collaborators import ObjectPlacer, TileRenderer
from .errors import ConfigurationError, MissingResourceError, WorldGenerationError
from .falloff import falloff_grid
from .noise_field import HEIGHT, HOSTILITY, MAGIC, OBJECT_DENSITY, WEALTH, NoiseField
from .sub_biomes import AllocationReport, SubBiomeAllocator, validate_sub_biome_configs
from .world_field import CellRecord, WorldField

logger = structlog.get_logger()

# Seeds drawn when randomize_seed_on_start is set fall in [0, MAX_RANDOM_SEED)
MAX_RANDOM_SEED = 100_000


@dataclass
class GenerationResult:
    """A published world and how it came to be."""

    world: WorldField
    seed: Optional[int]
    report: Optional[AllocationReport] = None  # None for rebuilt worlds
    rebuilt: bool = False


GenerationObserver = Callable[[GenerationResult], None]


class WorldGenerator:
    """
    Builds, publishes and rebuilds tile worlds.

    Collaborators are optional: without a renderer nothing is painted and
    without an object placer that stage is skipped.
    """

    def __init__(
        self,
        settings: Optional[WorldSettings] = None,
        renderer: Optional[TileRenderer] = None,
        object_placer: Optional[ObjectPlacer] = None,
    ):
        self.settings = settings or WorldSettings()
        self.renderer = renderer
        self.object_placer = object_placer

        self.world: Optional[WorldField] = None
        self.last_result: Optional[GenerationResult] = None
        self._observers: List[GenerationObserver] = []

    # Observers

    def add_observer(self, observer: GenerationObserver):
        """Register a callback fired after every published world."""
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: GenerationObserver):
        if observer in self._observers:
            self._observers.remove(observer)

    # Generation

    def resolve_seed(self) -> int:
        """Seed for the next run; draws a fresh one if randomizing."""
        if self.settings.randomize_seed_on_start:
            return secrets.randbelow(MAX_RANDOM_SEED)
        return self.settings.seed

    def _validate_prerequisites(self):
        """Reject invalid configuration and missing collaborators up front."""
        settings = self.settings
        if settings.world_width <= 0 or settings.world_height <= 0:
            raise ConfigurationError(
                f"World size must be positive, got {settings.world_width}x{settings.world_height}"
            )
        if settings.island_falloff_power <= 0 or settings.island_land_radius_percent <= 0:
            raise ConfigurationError("Island falloff power and land radius must be positive")
        validate_sub_biome_configs(settings.sub_biome_configs)
        self._check_renderer()

    def _check_renderer(self):
        if self.renderer is None:
            return
        missing = set(TileLayer) - set(self.renderer.available_layers())
        if missing:
            raise MissingResourceError(
                "Renderer is missing paint layers: "
                + ", ".join(sorted(layer.value for layer in missing))
            )

    def build_field(self, seed: int) -> WorldField:
        """First pass: noise, falloff and classification for every cell."""
        settings = self.settings
        width, height = settings.world_width, settings.world_height

        noise = NoiseField(seed, settings.noise.to_options())
        channels = noise.sample_all(width, height)
        falloff = falloff_grid(
            width,
            height,
            settings.island_falloff_power,
            settings.island_land_radius_percent,
        )
        shaped = channels[HEIGHT] * falloff

        world = WorldField(
            heights=shaped,
            object_density=channels[OBJECT_DENSITY],
            wealth=channels[WEALTH],
            magic=channels[MAGIC],
            hostility=channels[HOSTILITY],
            tile_types=classify_heights(shaped),
            seed=seed,
        )
        logger.info(
            "World field classified",
            tiles={TILE_TYPE_NAMES[t]: c for t, c in world.count_tile_types().items()},
        )
        return world

    def regenerate(self) -> GenerationResult:
        """
        Discard the current world and generate a new one.

        Raises:
            ConfigurationError: settings are invalid
            MissingResourceError: a supplied renderer lacks a paint layer
        """
        seed = self.resolve_seed()
        logger.info(
            "Generating world",
            seed=seed,
            width=self.settings.world_width,
            height=self.settings.world_height,
        )
        self._validate_prerequisites()
        self.settings.seed = seed

        world = self.build_field(seed)

        prng = AleaPRNG(seed)
        allocator = SubBiomeAllocator(
            world, prng, rollback_discarded_regions=self.settings.rollback_discarded_regions
        )
        report = allocator.allocate(self.settings.sub_biome_configs)

        if self.object_placer is not None:
            self.object_placer.place_objects(world, self.settings.sub_biome_configs)
        else:
            logger.info("No object placer configured, skipping object placement")

        result = GenerationResult(world=world, seed=seed, report=report)
        self._publish(result)
        logger.info(
            "World generated", seed=seed, tiles=len(world), regions=len(report.regions)
        )
        return result

    def rebuild(self, records: Iterable[CellRecord], seed: Optional[int] = None) -> GenerationResult:
        """Publish a world rebuilt from serialized records, without reseeding."""
        self._check_renderer()
        world = WorldField.from_records(records, seed=seed)
        result = GenerationResult(world=world, seed=seed, rebuilt=True)
        self._publish(result)
        return result

    def _paint(self, world: WorldField):
        self.renderer.clear_all_tiles()
        for layer in TileLayer:
            self.renderer.paint(layer, world.layer_cells(layer))

    def _publish(self, result: GenerationResult):
        """Repaint, then swap in the new world; a paint failure restores the old one."""
        if self.renderer is not None:
            try:
                self._paint(result.world)
            except Exception:
                logger.error("Repaint failed, keeping previous world", seed=result.seed)
                if self.world is not None:
                    self._paint(self.world)
                raise

        self.world = result.world
        self.last_result = result

        for observer in list(self._observers):
            observer(result)

    # Snapshot access

    def _require_world(self) -> WorldField:
        if self.world is None:
            raise WorldGenerationError("No world has been generated yet")
        return self.world

    def serialize(self) -> List[CellRecord]:
        """Cell records of the published world."""
        return self._require_world().cell_records()

    def save(self, path: Union[str, Path]) -> Path:
        return save_snapshot(path, snapshot_from_world(self._require_world()))

    def load(self, path: Union[str, Path]) -> GenerationResult:
        """Rebuild the world stored at ``path``."""
        snapshot = load_snapshot(path)
        self._check_renderer()
        world = world_from_snapshot(snapshot)
        result = GenerationResult(world=world, seed=snapshot.seed, rebuilt=True)
        self._publish(result)
        return result
