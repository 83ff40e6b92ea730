"""
World Field: the finished per-cell data product of a generation run.

The field owns dense arrays indexed ``[x, y]``. Collaborators read it
through snapshot accessors; only the sub-biome layer is mutable, and only
through the field's own methods.
"""

import numpy as np
import structlog
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .biomes import (
    DEFAULT_SUB_BIOMES,
    PAINT_LAYERS,
    SubBiomeType,
    TileLayer,
    TileType,
)
from .errors import WorldDataError

logger = structlog.get_logger()

Coordinate = Tuple[int, int]


@dataclass(frozen=True)
class CellRecord:
    """Complete generated record of one grid cell."""

    x: int
    y: int
    height: float
    object_density: float
    wealth: float
    magic: float
    hostility: float
    tile_type: TileType
    sub_biome: SubBiomeType = SubBiomeType.NONE

    @property
    def pos(self) -> Coordinate:
        return (self.x, self.y)


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class WorldField:
    """Dense, exclusively owned storage of every cell of one world."""

    def __init__(
        self,
        heights: np.ndarray,
        object_density: np.ndarray,
        wealth: np.ndarray,
        magic: np.ndarray,
        hostility: np.ndarray,
        tile_types: np.ndarray,
        sub_biomes: Optional[np.ndarray] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize from full-grid arrays.

        Args:
            heights: Shaped height per cell, shape (width, height)
            object_density, wealth, magic, hostility: Noise channels
            tile_types: Primary tier per cell (TileType values)
            sub_biomes: Sub-biome tag per cell; defaults to all NONE
            seed: Seed the field was generated from, if known
        """
        shape = np.shape(heights)
        if len(shape) != 2 or shape[0] <= 0 or shape[1] <= 0:
            raise WorldDataError(f"World arrays must be non-empty 2D grids, got {shape}")

        channels = (object_density, wealth, magic, hostility, tile_types)
        if sub_biomes is not None:
            channels += (sub_biomes,)
        for channel in channels:
            if np.shape(channel) != shape:
                raise WorldDataError(
                    f"Channel shape {np.shape(channel)} does not match {shape}"
                )

        self.seed = seed
        self.width, self.height = int(shape[0]), int(shape[1])

        self._heights = np.array(heights, dtype=np.float64)
        self._object_density = np.array(object_density, dtype=np.float64)
        self._wealth = np.array(wealth, dtype=np.float64)
        self._magic = np.array(magic, dtype=np.float64)
        self._hostility = np.array(hostility, dtype=np.float64)
        self._tile_types = np.array(tile_types, dtype=np.uint8)
        if sub_biomes is None:
            self._sub_biomes = np.full(shape, SubBiomeType.NONE, dtype=np.uint8)
        else:
            self._sub_biomes = np.array(sub_biomes, dtype=np.uint8)

        self._layer_masks = self._derive_layer_masks()

    def _derive_layer_masks(self) -> Dict[TileLayer, np.ndarray]:
        """Per-layer paint masks from the tier of every cell."""
        masks = {layer: np.zeros(self._tile_types.shape, dtype=bool) for layer in TileLayer}
        for tile_type, layers in PAINT_LAYERS.items():
            cells = self._tile_types == tile_type
            for layer in layers:
                masks[layer] |= cells
        return masks

    # Read interface

    def __len__(self) -> int:
        return self.width * self.height

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def heights(self) -> np.ndarray:
        return _read_only(self._heights)

    @property
    def tile_types(self) -> np.ndarray:
        return _read_only(self._tile_types)

    @property
    def sub_biomes(self) -> np.ndarray:
        return _read_only(self._sub_biomes)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int):
        if not self.contains(x, y):
            raise KeyError((x, y))

    def tile_type_at(self, x: int, y: int) -> TileType:
        self._check(x, y)
        return TileType(int(self._tile_types[x, y]))

    def sub_biome_at(self, x: int, y: int) -> SubBiomeType:
        self._check(x, y)
        return SubBiomeType(int(self._sub_biomes[x, y]))

    def cell(self, x: int, y: int) -> CellRecord:
        """Record of a single cell; raises KeyError outside the grid."""
        self._check(x, y)
        return CellRecord(
            x=x,
            y=y,
            height=float(self._heights[x, y]),
            object_density=float(self._object_density[x, y]),
            wealth=float(self._wealth[x, y]),
            magic=float(self._magic[x, y]),
            hostility=float(self._hostility[x, y]),
            tile_type=TileType(int(self._tile_types[x, y])),
            sub_biome=SubBiomeType(int(self._sub_biomes[x, y])),
        )

    def coordinates(self) -> List[Coordinate]:
        """All coordinates, ordered by x then y."""
        return [(x, y) for x in range(self.width) for y in range(self.height)]

    def cell_records(self) -> List[CellRecord]:
        """Full snapshot of every cell, ordered by x then y."""
        return [self.cell(x, y) for x, y in self.coordinates()]

    def _channel_map(self, channel: np.ndarray) -> Dict[Coordinate, float]:
        return {(x, y): float(channel[x, y]) for x, y in self.coordinates()}

    def height_map(self) -> Dict[Coordinate, float]:
        return self._channel_map(self._heights)

    def object_density_map(self) -> Dict[Coordinate, float]:
        return self._channel_map(self._object_density)

    def wealth_map(self) -> Dict[Coordinate, float]:
        return self._channel_map(self._wealth)

    def magic_map(self) -> Dict[Coordinate, float]:
        return self._channel_map(self._magic)

    def hostility_map(self) -> Dict[Coordinate, float]:
        return self._channel_map(self._hostility)

    def layer_cells(self, layer: TileLayer) -> List[Coordinate]:
        """Coordinates a renderer paints on ``layer``."""
        xs, ys = np.nonzero(self._layer_masks[TileLayer(layer)])
        return list(zip(xs.tolist(), ys.tolist()))

    def count_tile_types(self) -> Dict[TileType, int]:
        values, counts = np.unique(self._tile_types, return_counts=True)
        return {TileType(int(v)): int(c) for v, c in zip(values, counts)}

    def count_sub_biomes(self) -> Dict[SubBiomeType, int]:
        values, counts = np.unique(self._sub_biomes, return_counts=True)
        return {SubBiomeType(int(v)): int(c) for v, c in zip(values, counts)}

    # Mutation (sub-biome layer only)

    def assign_sub_biome(self, cells: Iterable[Coordinate], sub_biome: SubBiomeType):
        """Tag ``cells`` with ``sub_biome``. Tiers are never touched."""
        tag = int(SubBiomeType(sub_biome))
        for x, y in cells:
            self._check(x, y)
            self._sub_biomes[x, y] = tag

    def clear_sub_biomes(self):
        self._sub_biomes.fill(SubBiomeType.NONE)

    def fill_unassigned(self, defaults: Dict[TileType, SubBiomeType] = None) -> int:
        """
        Give every untagged cell the filler sub-biome of its tier.

        Returns:
            Number of cells that received a non-NONE filler
        """
        defaults = DEFAULT_SUB_BIOMES if defaults is None else defaults
        lookup = np.zeros(max(int(t) for t in TileType) + 1, dtype=np.uint8)
        for tile_type, sub_biome in defaults.items():
            lookup[int(tile_type)] = int(sub_biome)

        unassigned = self._sub_biomes == SubBiomeType.NONE
        filler = lookup[self._tile_types]
        self._sub_biomes[unassigned] = filler[unassigned]
        return int(np.count_nonzero(filler[unassigned]))

    # Snapshot rebuild

    @classmethod
    def from_records(cls, records: Iterable[CellRecord], seed: Optional[int] = None) -> "WorldField":
        """
        Rebuild a field from serialized records, without noise or allocation.

        Raises:
            WorldDataError: records are empty, out of range, duplicated or
                do not cover a full rectangle
        """
        records = list(records)
        if not records:
            raise WorldDataError("Cannot rebuild a world from zero cell records")

        xs = [r.x for r in records]
        ys = [r.y for r in records]
        if min(xs) < 0 or min(ys) < 0:
            raise WorldDataError("Cell records contain negative coordinates")

        width, height = max(xs) + 1, max(ys) + 1
        if len(records) != width * height:
            raise WorldDataError(
                f"Expected {width * height} cell records for a {width}x{height} world, "
                f"got {len(records)}"
            )

        seen = np.zeros((width, height), dtype=bool)
        arrays = {
            name: np.zeros((width, height), dtype=np.float64)
            for name in ("height", "object_density", "wealth", "magic", "hostility")
        }
        tile_types = np.zeros((width, height), dtype=np.uint8)
        sub_biomes = np.zeros((width, height), dtype=np.uint8)

        for record in records:
            if seen[record.x, record.y]:
                raise WorldDataError(f"Duplicate cell record at {(record.x, record.y)}")
            seen[record.x, record.y] = True
            for name, array in arrays.items():
                array[record.x, record.y] = getattr(record, name)
            try:
                tile_type = TileType(record.tile_type)
                sub_biome = SubBiomeType(record.sub_biome)
            except ValueError as e:
                raise WorldDataError(f"Invalid tag in cell record {record.pos}: {e}") from e
            if tile_type == TileType.UNKNOWN:
                raise WorldDataError(f"Cell record {record.pos} has no tile tier")
            tile_types[record.x, record.y] = int(tile_type)
            sub_biomes[record.x, record.y] = int(sub_biome)

        logger.info("World field rebuilt from records", width=width, height=height)
        return cls(
            heights=arrays["height"],
            object_density=arrays["object_density"],
            wealth=arrays["wealth"],
            magic=arrays["magic"],
            hostility=arrays["hostility"],
            tile_types=tile_types,
            sub_biomes=sub_biomes,
            seed=seed,
        )
