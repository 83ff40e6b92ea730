"""
Interfaces of the external collaborators that consume a generated world.

Rendering and object placement live outside this package; the generator
only talks to them through these protocols.
"""

from typing import Iterable, Protocol, Sequence, Set, runtime_checkable

from .biomes import TileLayer
from .world_field import Coordinate, WorldField


@runtime_checkable
class TileRenderer(Protocol):
    """Paints classified cells onto per-layer tilemaps."""

    def available_layers(self) -> Set[TileLayer]:
        """Layers this renderer can paint to."""
        ...

    def clear_all_tiles(self) -> None:
        """Remove every painted tile from every layer."""
        ...

    def paint(self, layer: TileLayer, cells: Iterable[Coordinate]) -> None:
        """Paint ``cells`` on ``layer``."""
        ...


@runtime_checkable
class ObjectPlacer(Protocol):
    """Places scene objects once the world field is complete."""

    def place_objects(self, world: WorldField, sub_biome_configs: Sequence) -> None:
        ...
