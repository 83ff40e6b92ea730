"""FastAPI main application."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
import structlog
import uuid
from datetime import datetime, timezone
from pathlib import Path

from ..config import settings, get_preset, list_presets
from ..config.world_settings import NoiseSettings, WorldSettings
from ..core.biomes import SUB_BIOME_NAMES, TILE_TYPE_NAMES
from ..core.errors import ConfigurationError, WorldDataError
from ..core.sub_biomes import SubBiomeConfig
from ..core.world_field import CellRecord
from ..core.world_generator import GenerationResult, WorldGenerator
from ..log_config import configure_logging
from ..storage.snapshot import (
    WorldSnapshot,
    load_snapshot,
    save_snapshot,
    snapshot_from_world,
    world_from_snapshot,
)

# Configure logging
configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Tile World Generator API",
    description="Seeded island worlds with biome tiers and sub-biome regions",
    version="0.1.0",
    debug=settings.debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class StoredWorld:
    """A generated or loaded world kept by this process."""

    def __init__(self, world_id: str, result: GenerationResult):
        self.id = world_id
        self.result = result
        self.created_at = datetime.now(timezone.utc)


# In-process world registry
worlds: Dict[str, StoredWorld] = {}


# Request/Response models
class WorldGenerationRequest(BaseModel):
    """Request to generate a new world."""

    width: Optional[int] = Field(None, gt=0, description="World width in cells")
    height: Optional[int] = Field(None, gt=0, description="World height in cells")
    seed: Optional[int] = Field(None, ge=0, description="Seed for reproducible generation")
    randomize_seed: bool = Field(False, description="Ignore seed and draw a fresh one")
    island_falloff_power: float = Field(2.0, gt=0, description="Coastline sharpness exponent")
    island_land_radius_percent: float = Field(0.9, gt=0, description="Land radius fraction")
    noise: Optional[NoiseSettings] = Field(None, description="Noise parameters")
    preset: Optional[str] = Field(None, description="Sub-biome preset name")
    sub_biome_configs: Optional[List[SubBiomeConfig]] = Field(
        None, description="Explicit region specifications (override the preset)"
    )
    rollback_discarded_regions: bool = Field(False, description="Return discarded region cells to the pool")


class WorldSummary(BaseModel):
    """Summary information about a stored world."""

    id: str
    seed: Optional[int]
    width: int
    height: int
    rebuilt: bool
    regions: int
    tile_counts: Dict[str, int]
    sub_biome_counts: Dict[str, int]
    created_at: datetime


def _summarize(stored: StoredWorld) -> WorldSummary:
    result = stored.result
    world = result.world
    return WorldSummary(
        id=stored.id,
        seed=result.seed,
        width=world.width,
        height=world.height,
        rebuilt=result.rebuilt,
        regions=len(result.report.regions) if result.report else 0,
        tile_counts={TILE_TYPE_NAMES[t]: c for t, c in world.count_tile_types().items()},
        sub_biome_counts={SUB_BIOME_NAMES[t]: c for t, c in world.count_sub_biomes().items()},
        created_at=stored.created_at,
    )


def _store(result: GenerationResult) -> StoredWorld:
    stored = StoredWorld(str(uuid.uuid4()), result)
    worlds[stored.id] = stored
    return stored


def _get_stored(world_id: str) -> StoredWorld:
    stored = worlds.get(world_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="World not found")
    return stored


def _build_settings(request: WorldGenerationRequest) -> WorldSettings:
    width = request.width or settings.default_world_width
    height = request.height or settings.default_world_height
    if width > settings.max_world_width or height > settings.max_world_height:
        raise ConfigurationError(
            f"World size {width}x{height} exceeds the maximum "
            f"{settings.max_world_width}x{settings.max_world_height}"
        )

    if request.sub_biome_configs is not None:
        configs = request.sub_biome_configs
    else:
        configs = get_preset(request.preset or settings.default_sub_biome_preset)

    return WorldSettings(
        world_width=width,
        world_height=height,
        seed=request.seed or 0,
        randomize_seed_on_start=request.randomize_seed or request.seed is None,
        island_falloff_power=request.island_falloff_power,
        island_land_radius_percent=request.island_land_radius_percent,
        noise=request.noise or NoiseSettings(),
        sub_biome_configs=configs,
        rollback_discarded_regions=request.rollback_discarded_regions,
    )


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Tile World Generator API",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "worlds": len(worlds)}


@app.get("/presets", response_model=List[str])
async def get_presets():
    """Names of the available sub-biome presets."""
    return list_presets()


@app.post("/worlds/generate", response_model=WorldSummary)
def generate_world(request: WorldGenerationRequest):
    """Generate a world synchronously and keep it in the registry."""
    logger.info("World generation requested", request=request.model_dump(exclude={"sub_biome_configs"}))

    try:
        generator = WorldGenerator(_build_settings(request))
        result = generator.regenerate()
    except ConfigurationError as e:
        logger.warning("World generation rejected", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))

    stored = _store(result)
    logger.info("World stored", world_id=stored.id, seed=result.seed)
    return _summarize(stored)


@app.post("/worlds/load", response_model=WorldSummary)
def load_world(snapshot: WorldSnapshot):
    """Rebuild a world from a snapshot without reseeding."""
    try:
        world = world_from_snapshot(snapshot)
    except WorldDataError as e:
        logger.warning("World snapshot rejected", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))

    stored = _store(GenerationResult(world=world, seed=snapshot.seed, rebuilt=True))
    return _summarize(stored)


@app.get("/worlds", response_model=List[WorldSummary])
async def list_worlds():
    """List stored worlds, newest first."""
    stored = sorted(worlds.values(), key=lambda s: s.created_at, reverse=True)
    return [_summarize(s) for s in stored]


@app.get("/worlds/{world_id}", response_model=WorldSummary)
async def get_world(world_id: str):
    return _summarize(_get_stored(world_id))


@app.get("/worlds/{world_id}/cells", response_model=List[CellRecord])
def get_world_cells(world_id: str):
    """Every cell record of a world, ordered by x then y."""
    return _get_stored(world_id).result.world.cell_records()


@app.get("/worlds/{world_id}/cells/{x}/{y}", response_model=CellRecord)
async def get_world_cell(world_id: str, x: int, y: int):
    world = _get_stored(world_id).result.world
    if not world.contains(x, y):
        raise HTTPException(status_code=404, detail=f"Cell ({x}, {y}) is outside the world")
    return world.cell(x, y)


@app.get("/worlds/{world_id}/snapshot", response_model=WorldSnapshot)
def get_world_snapshot(world_id: str):
    """The world as a snapshot that /worlds/load accepts."""
    return snapshot_from_world(_get_stored(world_id).result.world)


def _save_path(name: str) -> Path:
    """Snapshot file for `name` inside the configured saves directory."""
    if not name or Path(name).name != name or name.startswith("."):
        raise HTTPException(status_code=422, detail=f"Invalid save name {name!r}")
    return Path(settings.saves_dir) / f"{name}.json"


@app.post("/worlds/{world_id}/save")
def save_world(world_id: str):
    """Write the world to the saves directory, named by its id."""
    stored = _get_stored(world_id)
    path = save_snapshot(_save_path(world_id), snapshot_from_world(stored.result.world))
    return {"saved": world_id, "path": str(path)}


@app.post("/saves/{name}/load", response_model=WorldSummary)
def load_saved_world(name: str):
    """Rebuild a world previously written by the save endpoint."""
    path = _save_path(name)
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"No saved world named {name!r}")
    try:
        world = world_from_snapshot(load_snapshot(path))
    except WorldDataError as e:
        logger.warning("Saved world rejected", name=name, error=str(e))
        raise HTTPException(status_code=422, detail=str(e))

    stored = _store(GenerationResult(world=world, seed=world.seed, rebuilt=True))
    return _summarize(stored)


@app.delete("/worlds/{world_id}")
async def delete_world(world_id: str):
    _get_stored(world_id)
    del worlds[world_id]
    return {"deleted": world_id}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
