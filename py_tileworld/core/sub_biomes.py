"""
Sub-biome allocation by constrained breadth-first region growth.

This module implements:
- Region specifications (SubBiomeConfig) with range validation
- Eligibility masks with square-window proximity constraints
- Seeded cluster placement and BFS growth of disjoint regions
- Default filler sub-biomes for every cell no region claimed
"""

import numpy as np
import structlog
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from scipy import ndimage

from .alea_prng import AleaPRNG
from .biomes import SUB_BIOME_NAMES, SubBiomeType, TileType
from .errors import ConfigurationError
from .world_field import Coordinate, WorldField

logger = structlog.get_logger()

# Orthogonal neighbours: right, left, up, down
NEIGHBOR_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))


def _coerce_enum(enum_cls, value):
    """Accept enum members, their values, or case-insensitive names."""
    if isinstance(value, str) and not value.isdigit():
        try:
            return enum_cls[value.strip().upper().replace(" ", "_").replace("-", "_")]
        except KeyError:
            raise ValueError(f"Unknown {enum_cls.__name__}: {value!r}")
    return value


class SubBiomeConfig(BaseModel):
    """How one sub-biome is clustered into the world."""

    model_config = ConfigDict(frozen=True)

    sub_biome: SubBiomeType = Field(..., description="Tag given to committed regions")
    allowed_tile_types: FrozenSet[TileType] = Field(
        ..., description="Primary tiers the regions may occupy"
    )
    min_clusters: int = Field(default=1, ge=0, description="Minimum cluster count")
    max_clusters: int = Field(default=1, ge=0, description="Maximum cluster count")
    min_size: int = Field(default=1, ge=1, description="Minimum cluster size in cells")
    max_size: int = Field(default=1, ge=1, description="Maximum cluster size in cells")
    near_tile_type: TileType = Field(
        default=TileType.UNKNOWN, description="Tier required nearby (UNKNOWN = none)"
    )
    near_radius: int = Field(default=0, ge=0, description="Square-window radius of the proximity check")

    @field_validator("sub_biome", "near_tile_type", mode="before")
    @classmethod
    def _parse_enum_names(cls, value, info):
        enum_cls = SubBiomeType if info.field_name == "sub_biome" else TileType
        return _coerce_enum(enum_cls, value)

    @field_validator("allowed_tile_types", mode="before")
    @classmethod
    def _parse_tile_type_names(cls, value):
        if isinstance(value, (str, int)):
            value = [value]
        return [_coerce_enum(TileType, v) for v in value]

    @model_validator(mode="after")
    def _check_ranges(self):
        problems = range_problems(self)
        if problems:
            raise ValueError("; ".join(problems))
        return self

    @property
    def has_proximity_constraint(self) -> bool:
        return self.near_tile_type != TileType.UNKNOWN


def range_problems(config: SubBiomeConfig) -> List[str]:
    """Human-readable list of malformed ranges in ``config``."""
    problems = []
    if config.min_clusters > config.max_clusters:
        problems.append(
            f"min_clusters ({config.min_clusters}) > max_clusters ({config.max_clusters})"
        )
    if config.min_size > config.max_size:
        problems.append(f"min_size ({config.min_size}) > max_size ({config.max_size})")
    if config.min_clusters < 0 or config.min_size < 1 or config.near_radius < 0:
        problems.append("cluster counts, sizes and radius must be non-negative")
    return problems


def validate_sub_biome_configs(configs: Iterable[SubBiomeConfig]):
    """Raise ConfigurationError if any specification has a malformed range."""
    for index, config in enumerate(configs):
        problems = range_problems(config)
        if problems:
            raise ConfigurationError(
                f"Sub-biome config #{index} ({config.sub_biome.name}): " + "; ".join(problems)
            )


@dataclass
class SubBiomeRegion:
    """A committed cluster of cells sharing one sub-biome tag."""

    sub_biome: SubBiomeType
    cells: List[Coordinate]
    seed_cell: Coordinate
    config_index: int

    @property
    def size(self) -> int:
        return len(self.cells)


@dataclass
class SpecAllocationStats:
    """Outcome of processing one specification."""

    config_index: int
    sub_biome: SubBiomeType
    requested: int = 0  # Cluster count drawn for this run
    created: int = 0
    attempts: int = 0
    discarded: int = 0  # Regions grown below min_size // 2
    eligible: int = 0  # Eligible cells before seeding started

    @property
    def shortfall(self) -> int:
        return max(self.requested - self.created, 0)


@dataclass
class AllocationReport:
    """Committed regions and per-specification statistics of one run."""

    regions: List[SubBiomeRegion] = field(default_factory=list)
    stats: List[SpecAllocationStats] = field(default_factory=list)
    filled_cells: int = 0

    def regions_for(self, sub_biome: SubBiomeType) -> List[SubBiomeRegion]:
        return [r for r in self.regions if r.sub_biome == sub_biome]


class _EligiblePool:
    """Cells a specification may still seed or grow into, with O(1) removal."""

    def __init__(self, cells: Iterable[Coordinate]):
        self._cells: List[Coordinate] = []
        self._index: Dict[Coordinate, int] = {}
        for cell in cells:
            self.add(cell)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell: Coordinate) -> bool:
        return cell in self._index

    def add(self, cell: Coordinate):
        if cell not in self._index:
            self._index[cell] = len(self._cells)
            self._cells.append(cell)

    def remove(self, cell: Coordinate):
        position = self._index.pop(cell, None)
        if position is None:
            return
        last = self._cells.pop()
        if position < len(self._cells):
            self._cells[position] = last
            self._index[last] = position

    def pick(self, prng: AleaPRNG) -> Coordinate:
        return self._cells[prng.index(len(self._cells))]


class SubBiomeAllocator:
    """Carves disjoint sub-biome regions into a classified world field."""

    def __init__(
        self,
        world: WorldField,
        prng: AleaPRNG,
        rollback_discarded_regions: bool = False,
    ):
        """
        Initialize the allocator.

        Args:
            world: Classified world field; its sub-biome layer is rewritten
            prng: The run's seeded generator, shared with every other draw
            rollback_discarded_regions: Return the cells of a discarded
                region to the pool instead of forfeiting them
        """
        self.world = world
        self.prng = prng
        self.rollback_discarded_regions = rollback_discarded_regions
        self.reserved = np.zeros(world.shape, dtype=bool)

    def allocate(self, configs: Sequence[SubBiomeConfig]) -> AllocationReport:
        """
        Run every specification in seeded shuffled order, then fill defaults.

        Never raises for allocation outcomes; a specification that cannot
        place clusters just reports a shortfall.
        """
        validate_sub_biome_configs(configs)

        self.world.clear_sub_biomes()
        self.reserved[:] = False
        report = AllocationReport()

        order = self.prng.shuffle(list(enumerate(configs)))
        for index, config in order:
            stats = self._allocate_config(index, config, report)
            report.stats.append(stats)

        report.filled_cells = self.world.fill_unassigned()

        counts = self.world.count_sub_biomes()
        logger.info(
            "Sub-biome allocation completed",
            regions=len(report.regions),
            filled=report.filled_cells,
            assigned=sum(c for t, c in counts.items() if t != SubBiomeType.NONE),
        )
        return report

    def eligible_mask(self, config: SubBiomeConfig) -> np.ndarray:
        """Unreserved cells of an allowed tier meeting the proximity rule."""
        allowed = np.isin(self.world.tile_types, [int(t) for t in config.allowed_tile_types])
        mask = allowed & ~self.reserved
        if config.has_proximity_constraint:
            mask &= self._near_mask(config.near_tile_type, config.near_radius)
        return mask

    def _near_mask(self, tile_type: TileType, radius: int) -> np.ndarray:
        """Cells with ``tile_type`` anywhere in the (2r+1)^2 window around them."""
        target = (self.world.tile_types == int(tile_type)).astype(np.uint8)
        window = ndimage.maximum_filter(target, size=2 * radius + 1, mode="constant", cval=0)
        return window > 0

    def _allocate_config(
        self, index: int, config: SubBiomeConfig, report: AllocationReport
    ) -> SpecAllocationStats:
        stats = SpecAllocationStats(config_index=index, sub_biome=config.sub_biome)
        cluster_count = self.prng.rand_int(config.min_clusters, config.max_clusters)
        stats.requested = cluster_count

        xs, ys = np.nonzero(self.eligible_mask(config))
        eligible = _EligiblePool(zip(xs.tolist(), ys.tolist()))
        stats.eligible = len(eligible)

        while (
            stats.created < cluster_count
            and len(eligible) > 0
            and stats.attempts < cluster_count * 3
        ):
            stats.attempts += 1
            seed_cell = eligible.pick(self.prng)
            eligible.remove(seed_cell)
            if self.reserved[seed_cell]:
                continue

            target_size = self.prng.rand_int(config.min_size, config.max_size)
            cells = self._grow_region(seed_cell, target_size, config, eligible)

            if len(cells) < config.min_size // 2:
                stats.discarded += 1
                if self.rollback_discarded_regions:
                    for cell in cells:
                        self.reserved[cell] = False
                        eligible.add(cell)
                logger.debug(
                    "Sub-biome region discarded",
                    sub_biome=config.sub_biome.name,
                    size=len(cells),
                    min_size=config.min_size,
                )
                continue

            self.world.assign_sub_biome(cells, config.sub_biome)
            report.regions.append(
                SubBiomeRegion(
                    sub_biome=config.sub_biome,
                    cells=cells,
                    seed_cell=seed_cell,
                    config_index=index,
                )
            )
            stats.created += 1
            logger.debug(
                "Sub-biome region placed",
                sub_biome=SUB_BIOME_NAMES[config.sub_biome],
                size=len(cells),
            )

        if stats.shortfall:
            logger.info(
                "Sub-biome allocation shortfall",
                sub_biome=config.sub_biome.name,
                requested=stats.requested,
                created=stats.created,
                attempts=stats.attempts,
                eligible=stats.eligible,
            )
        return stats

    def _grow_region(
        self,
        seed_cell: Coordinate,
        target_size: int,
        config: SubBiomeConfig,
        eligible: _EligiblePool,
    ) -> List[Coordinate]:
        """
        Breadth-first growth from ``seed_cell`` up to ``target_size`` cells.

        Cells are reserved (and leave the eligible pool) as soon as they join.
        """
        tile_types = self.world.tile_types
        allowed = config.allowed_tile_types

        cells = [seed_cell]
        self.reserved[seed_cell] = True
        queue = deque([seed_cell])

        while len(cells) < target_size and queue:
            x, y = queue.popleft()
            for dx, dy in NEIGHBOR_OFFSETS:
                if len(cells) >= target_size:
                    break
                neighbor = (x + dx, y + dy)
                if neighbor not in eligible or self.reserved[neighbor]:
                    continue
                # Pool membership already implies an allowed tier when unreserved
                if TileType(int(tile_types[neighbor])) not in allowed:
                    continue

                cells.append(neighbor)
                queue.append(neighbor)
                self.reserved[neighbor] = True
                eligible.remove(neighbor)

        return cells


def allocate_sub_biomes(
    world: WorldField,
    configs: Sequence[SubBiomeConfig],
    prng: AleaPRNG,
    rollback_discarded_regions: bool = False,
) -> AllocationReport:
    """Convenience wrapper around SubBiomeAllocator.allocate."""
    allocator = SubBiomeAllocator(world, prng, rollback_discarded_regions)
    return allocator.allocate(configs)
