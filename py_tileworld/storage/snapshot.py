"""
JSON world snapshots.

A snapshot holds the cell records of one world and nothing else, so tile
data can be saved and reloaded independently of any placed-object data.
"""

import structlog
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError, model_validator
from typing import List, Optional, Union

from ..core.errors import WorldDataError
from ..core.world_field import CellRecord, WorldField

logger = structlog.get_logger()

SNAPSHOT_VERSION = 1


class WorldSnapshot(BaseModel):
    """Serialized cell records of one world."""

    version: int = Field(default=SNAPSHOT_VERSION, description="Snapshot format version")
    seed: Optional[int] = Field(default=None, description="Seed the world was generated from")
    width: int = Field(..., gt=0, description="World width in cells")
    height: int = Field(..., gt=0, description="World height in cells")
    tiles: List[CellRecord] = Field(default_factory=list, description="One record per cell")

    @model_validator(mode="after")
    def _check_tile_count(self):
        if len(self.tiles) != self.width * self.height:
            raise ValueError(
                f"Snapshot of {self.width}x{self.height} needs {self.width * self.height} "
                f"tiles, found {len(self.tiles)}"
            )
        return self


def snapshot_from_world(world: WorldField) -> WorldSnapshot:
    return WorldSnapshot(
        seed=world.seed,
        width=world.width,
        height=world.height,
        tiles=world.cell_records(),
    )


def world_from_snapshot(snapshot: WorldSnapshot) -> WorldField:
    """Rebuild the world field a snapshot describes."""
    world = WorldField.from_records(snapshot.tiles, seed=snapshot.seed)
    if world.shape != (snapshot.width, snapshot.height):
        raise WorldDataError(
            f"Snapshot declares {snapshot.width}x{snapshot.height} "
            f"but its tiles span {world.width}x{world.height}"
        )
    return world


def save_snapshot(path: Union[str, Path], snapshot: WorldSnapshot) -> Path:
    """Write ``snapshot`` as JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snapshot.model_dump_json(), encoding="utf-8")
    logger.info("World snapshot saved", path=str(path), tiles=len(snapshot.tiles))
    return path


def load_snapshot(path: Union[str, Path]) -> WorldSnapshot:
    """
    Read a snapshot written by ``save_snapshot``.

    Raises:
        WorldDataError: the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        snapshot = WorldSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise WorldDataError(f"Cannot read world snapshot {path}: {e}") from e
    except ValidationError as e:
        raise WorldDataError(f"Malformed world snapshot {path}: {e}") from e

    logger.info("World snapshot loaded", path=str(path), tiles=len(snapshot.tiles))
    return snapshot
