from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")
    allowed_origins: str = Field(default="*", description="CORS allowed origins, comma separated")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # World Generation Configuration
    default_world_width: int = Field(default=64, description="Default world width in cells")
    default_world_height: int = Field(default=64, description="Default world height in cells")
    max_world_width: int = Field(default=512, description="Max allowed world width")
    max_world_height: int = Field(default=512, description="Max allowed world height")
    default_sub_biome_preset: str = Field(default="temperate_isle", description="Preset used when a request names none")

    # Persistence Configuration
    saves_dir: str = Field(default="./saves", description="Directory for world snapshots")

    @property
    def cors_origins(self) -> list:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


# Instantiate singleton settings object
settings = Settings()
